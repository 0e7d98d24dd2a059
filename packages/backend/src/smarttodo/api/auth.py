"""Auth API — registration, login, current account.

Learn: Routes for account authentication:
- POST /auth/register → create an account, return a credential
- POST /auth/login → email/password → credential
- GET /auth/me → the account bound by the authentication gate

Register and login are open; /me runs behind get_current_user.
"""

from fastapi import APIRouter, Depends

from smarttodo.auth.dependencies import (
    AuthenticatedContext,
    get_account_service,
    get_current_user,
    get_settings,
    get_token_issuer,
)
from smarttodo.auth.jwt import TokenIssuer
from smarttodo.auth.password import dummy_hash, hash_password, verify_password
from smarttodo.config import Settings
from smarttodo.errors import InvalidLogin
from smarttodo.schemas.account import (
    AccountEnvelope,
    AccountRead,
    AuthResponse,
    LoginRequest,
    RegisterRequest,
)
from smarttodo.services.account_service import AccountService
from smarttodo.services.results import Found, unwrap

router = APIRouter(prefix="/auth")


def _auth_response(issuer: TokenIssuer, account: AccountRead) -> AuthResponse:
    credential = issuer.issue(account.id)
    return AuthResponse(
        token=credential.token,
        expires_at=credential.claims.expires_at,
        user=account,
    )


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    body: RegisterRequest,
    accounts: AccountService = Depends(get_account_service),
    issuer: TokenIssuer = Depends(get_token_issuer),
    settings: Settings = Depends(get_settings),
):
    """Create a new account and log it in."""
    account = unwrap(
        await accounts.create_account(
            name=body.name,
            email=body.email,
            password_hash=hash_password(body.password, rounds=settings.bcrypt_rounds),
        )
    )
    return _auth_response(issuer, account)


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    accounts: AccountService = Depends(get_account_service),
    issuer: TokenIssuer = Depends(get_token_issuer),
    settings: Settings = Depends(get_settings),
):
    """Login with email and password → credential."""
    result = await accounts.find_credentials_by_email(body.email)
    if not isinstance(result, Found):
        # Unknown emails cost one bcrypt check too.
        verify_password(body.password, dummy_hash(settings.bcrypt_rounds))
        raise InvalidLogin("unknown email")

    user = result.value
    if not verify_password(body.password, user.password_hash):
        raise InvalidLogin("password mismatch")

    return _auth_response(issuer, AccountRead.model_validate(user))


# ─── Current account ────────────────────────────────────


@router.get("/me", response_model=AccountEnvelope)
async def get_me(identity: AuthenticatedContext = Depends(get_current_user)):
    """The authenticated account (no second lookup — the gate already loaded it)."""
    return AccountEnvelope(data=identity.account)
