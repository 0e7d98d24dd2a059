"""FastAPI auth dependencies — the authentication and ownership gates.

Learn: These are used as Depends() in route handlers.

get_current_user (authentication gate), once per protected request:
1. pull the Bearer token from the Authorization header (else MissingCredential)
2. verify it (InvalidCredential / ExpiredCredential)
3. resolve the subject to a live account (UnknownSubject)
4. bind the AuthenticatedContext to request.state and return it

get_owned_task (ownership gate), for task-scoped routes:
1. load the task from the path id (ResourceNotFound if absent or malformed)
2. compare its owner with the authenticated account (Forbidden on mismatch)
3. bind the loaded task to request.state and return it

Both only raise; the error handlers decide status and message.
"""

from typing import Optional

import structlog
from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from smarttodo.auth.jwt import Claims, TokenIssuer, TokenVerifier
from smarttodo.auth.resolver import IdentityResolver
from smarttodo.config import Settings
from smarttodo.db.engine import get_db
from smarttodo.db.models import Task
from smarttodo.errors import AuthError, Forbidden, MissingCredential
from smarttodo.schemas.account import AccountRead
from smarttodo.services.account_service import AccountService
from smarttodo.services.results import unwrap
from smarttodo.services.task_service import TaskService

logger = structlog.get_logger()

BEARER_SCHEME = "bearer"


class AuthenticatedContext:
    """The account bound to the in-flight request.

    Lives on request.state for the request's lifetime only; never cached
    or shared between requests.
    """

    def __init__(self, account: AccountRead, claims: Claims):
        self.account = account
        self.claims = claims

    @property
    def account_id(self):
        return self.account.id


# ─── Process-wide collaborators (built once in create_app) ───


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer


def get_token_verifier(request: Request) -> TokenVerifier:
    return request.app.state.token_verifier


# ─── Request-scoped store access ─────────────────────────


def get_account_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AccountService:
    return AccountService(db, timeout=settings.store_timeout_seconds)


def get_task_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> TaskService:
    return TaskService(db, timeout=settings.store_timeout_seconds)


def get_identity_resolver(
    accounts: AccountService = Depends(get_account_service),
) -> IdentityResolver:
    return IdentityResolver(accounts)


# ─── Gates ───────────────────────────────────────────────


def extract_bearer(authorization: Optional[str]) -> Optional[str]:
    """Return the token from "Bearer <token>", or None for anything else."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != BEARER_SCHEME or not token or " " in token:
        return None
    return token


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
    verifier: TokenVerifier = Depends(get_token_verifier),
    resolver: IdentityResolver = Depends(get_identity_resolver),
) -> AuthenticatedContext:
    """Authentication gate (required — 401 on any failure)."""
    try:
        token = extract_bearer(authorization)
        if token is None:
            raise MissingCredential("no bearer token presented")
        claims = verifier.verify(token)
        account = await resolver.resolve(claims.subject)
    except AuthError as exc:
        logger.info("auth.denied", kind=exc.kind, reason=str(exc), path=request.url.path)
        raise

    identity = AuthenticatedContext(account=account, claims=claims)
    request.state.identity = identity
    structlog.contextvars.bind_contextvars(account_id=str(account.id))
    return identity


async def get_owned_task(
    request: Request,
    task_id: str,
    identity: AuthenticatedContext = Depends(get_current_user),
    tasks: TaskService = Depends(get_task_service),
) -> Task:
    """Ownership gate — the caller must own the task named in the path."""
    task = unwrap(await tasks.find_task_by_id(task_id))
    if task.owner_id != identity.account_id:
        logger.info(
            "auth.forbidden",
            task_id=str(task.id),
            account_id=str(identity.account_id),
        )
        raise Forbidden("task belongs to another account")

    request.state.task = task
    return task
