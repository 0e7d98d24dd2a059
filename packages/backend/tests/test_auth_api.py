"""Auth API + authentication gate tests.

Learn: Tests cover:
1. Registration (token returned, duplicate email, field validation)
2. Login (success, wrong password, unknown email)
3. The gate on /auth/me: missing, malformed, forged, expired and
   orphaned credentials each produce their own 401 message
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import ProgrammingError

from smarttodo.api import auth as auth_routes
from smarttodo.auth.dependencies import get_account_service
from smarttodo.auth.jwt import TokenIssuer
from smarttodo.auth.password import dummy_hash, verify_password
from smarttodo.services.account_service import AccountService

from conftest import bearer

MISSING = "Not authorized to access this route. Please provide a valid token."
INVALID = "Invalid token. Please login again."
EXPIRED = "Token expired. Please login again."
UNKNOWN = "User not found. Token may be invalid."


# ═══════════════════════════════════════════════════════════
# Registration
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_register_returns_token_and_user(client):
    r = await client.post(
        "/api/v1/auth/register",
        json={"name": "Ada", "email": "Ada@Example.com", "password": "password_123"},
    )
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["token"]
    assert body["token_type"] == "bearer"
    assert body["user"]["email"] == "ada@example.com"
    assert body["user"]["name"] == "Ada"
    assert "password" not in body["user"]
    assert "password_hash" not in body["user"]


@pytest.mark.asyncio
async def test_register_duplicate_email(client, register_user):
    await register_user(email="dup@example.com")
    r = await client.post(
        "/api/v1/auth/register",
        json={"name": "Again", "email": "DUP@example.com", "password": "password_123"},
    )
    assert r.status_code == 400
    assert r.json() == {"success": False, "message": "Email already exists"}


@pytest.mark.asyncio
async def test_register_invalid_fields_are_joined(client):
    r = await client.post(
        "/api/v1/auth/register",
        json={"name": "  ", "email": "not-an-email", "password": "password_123"},
    )
    assert r.status_code == 400
    assert r.json()["message"] == "Please provide a name, Please provide a valid email"


@pytest.mark.asyncio
async def test_register_short_password(client):
    r = await client.post(
        "/api/v1/auth/register",
        json={"name": "Short", "email": "short@example.com", "password": "abc"},
    )
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["message"].startswith("password:")


# ═══════════════════════════════════════════════════════════
# Login
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_login_success(client, register_user):
    _, user = await register_user(email="login@example.com", password="my_password_123")
    r = await client.post(
        "/api/v1/auth/login",
        json={"email": "LOGIN@example.com", "password": "my_password_123"},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["token"]
    assert body["user"]["id"] == user["id"]


@pytest.mark.asyncio
async def test_login_wrong_password(client, register_user):
    await register_user(email="wrong@example.com", password="correct_password")
    r = await client.post(
        "/api/v1/auth/login",
        json={"email": "wrong@example.com", "password": "wrong_password"},
    )
    assert r.status_code == 401
    assert r.json() == {"success": False, "message": "Invalid email or password"}


@pytest.mark.asyncio
async def test_login_unknown_email_looks_the_same(client):
    r = await client.post(
        "/api/v1/auth/login",
        json={"email": "nobody@example.com", "password": "whatever"},
    )
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid email or password"


@pytest.mark.asyncio
async def test_login_unknown_email_still_checks_a_hash(client, monkeypatch):
    checked = []

    def recording_verify(password, password_hash):
        checked.append(password_hash)
        return verify_password(password, password_hash)

    monkeypatch.setattr(auth_routes, "verify_password", recording_verify)

    r = await client.post(
        "/api/v1/auth/login",
        json={"email": "ghost@example.com", "password": "whatever"},
    )
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid email or password"
    assert checked == [dummy_hash(4)]
    assert checked[0].startswith("$2b$04$")


# ═══════════════════════════════════════════════════════════
# Authentication gate (/me)
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_me_with_token(client, register_user):
    token, user = await register_user(email="me@example.com")
    r = await client.get("/api/v1/auth/me", headers=bearer(token))
    assert r.status_code == 200
    assert r.json()["data"]["id"] == user["id"]
    assert r.json()["data"]["email"] == "me@example.com"


@pytest.mark.asyncio
async def test_login_token_works_on_protected_route(client, register_user):
    await register_user(email="flow@example.com", password="password_123")
    r = await client.post(
        "/api/v1/auth/login",
        json={"email": "flow@example.com", "password": "password_123"},
    )
    r = await client.get("/api/v1/auth/me", headers=bearer(r.json()["token"]))
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_me_without_token(client):
    r = await client.get("/api/v1/auth/me")
    assert r.status_code == 401
    assert r.json() == {"success": False, "message": MISSING}
    assert r.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_wrong_scheme_counts_as_missing(client, register_user):
    token, _ = await register_user()
    r = await client.get("/api/v1/auth/me", headers={"Authorization": f"Token {token}"})
    assert r.status_code == 401
    assert r.json()["message"] == MISSING


@pytest.mark.asyncio
async def test_no_store_access_without_credential(app, client):
    """A request with no Authorization header never reaches the account store."""
    calls = []

    class SpyAccounts:
        async def find_account_by_id(self, account_id):
            calls.append(account_id)
            raise AssertionError("store must not be queried")

    app.dependency_overrides[get_account_service] = lambda: SpyAccounts()

    r = await client.post("/api/v1/tasks", json={"title": "Sneaky"})
    assert r.status_code == 401
    assert "not authorized" in r.json()["message"].lower()
    assert calls == []


@pytest.mark.asyncio
async def test_me_with_invalid_token(client):
    r = await client.get("/api/v1/auth/me", headers=bearer("invalid_token_here"))
    assert r.status_code == 401
    assert r.json()["message"] == INVALID


@pytest.mark.asyncio
async def test_me_with_expired_token(client, register_user, credential_key):
    _, user = await register_user()
    two_hours_ago = datetime.now(timezone.utc) - timedelta(hours=2)
    token = TokenIssuer(credential_key, clock=lambda: two_hours_ago).issue(user["id"]).token

    r = await client.get("/api/v1/auth/me", headers=bearer(token))
    assert r.status_code == 401
    assert r.json()["message"] == EXPIRED
    assert r.json()["message"] != INVALID


@pytest.mark.asyncio
async def test_token_for_deleted_account_is_rejected(client, register_user, session_factory):
    token, user = await register_user()
    async with session_factory() as session:
        await AccountService(session).delete_account(user["id"])

    r = await client.get("/api/v1/auth/me", headers=bearer(token))
    assert r.status_code == 401
    assert r.json()["message"] == UNKNOWN


@pytest.mark.asyncio
async def test_token_for_never_existing_account_is_rejected(client, credential_key):
    token = TokenIssuer(credential_key).issue(uuid.uuid4()).token
    r = await client.get("/api/v1/auth/me", headers=bearer(token))
    assert r.status_code == 401
    assert r.json()["message"] == UNKNOWN


@pytest.mark.asyncio
async def test_account_query_error_is_unknown_subject(app, client, credential_key):
    class BrokenSchemaSession:
        async def execute(self, *args, **kwargs):
            raise ProgrammingError("SELECT users.id FROM users", {}, Exception("no such table: users"))

    app.dependency_overrides[get_account_service] = lambda: AccountService(BrokenSchemaSession())
    token = TokenIssuer(credential_key).issue(uuid.uuid4()).token

    r = await client.get("/api/v1/auth/me", headers=bearer(token))
    assert r.status_code == 401
    assert r.json() == {"success": False, "message": UNKNOWN}
