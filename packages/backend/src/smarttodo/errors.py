"""Failure taxonomy shared by the auth gateway and the store.

Every component raises one of these typed failures and leaves the
client-facing status and message to the error normalizer
(smarttodo.api.errors). Nothing here knows about HTTP.

Auth failures are kept distinct (expired vs. invalid vs. unknown subject)
so they can be told apart in logs, even though all of them end up as 401.
"""

from typing import Optional


class AppError(Exception):
    """Base class for every failure the normalizer knows how to map."""


# ─── Authentication ──────────────────────────────────────


class AuthError(AppError):
    """Request could not be tied to a live account."""

    kind = "auth_error"


class MissingCredential(AuthError):
    """No Authorization header, or one without the Bearer scheme."""

    kind = "missing_credential"


class InvalidCredential(AuthError):
    """Token is malformed, forged, or signed with a different key."""

    kind = "invalid_credential"


class ExpiredCredential(AuthError):
    """Token signature is fine but its expiry has passed."""

    kind = "expired_credential"


class UnknownSubject(AuthError):
    """Token verified, but its subject no longer maps to an account."""

    kind = "unknown_subject"


class InvalidLogin(AuthError):
    """Email/password pair did not match an account."""

    kind = "invalid_login"


# ─── Authorization ───────────────────────────────────────


class Forbidden(AppError):
    """Authenticated caller does not own the target resource."""


class ResourceNotFound(AppError):
    """Target resource is absent (or its identifier is malformed)."""

    def __init__(self, malformed: bool = False):
        super().__init__("malformed identifier" if malformed else "not found")
        self.malformed = malformed


# ─── Store ───────────────────────────────────────────────


class ValidationFailure(AppError):
    """One or more fields were rejected."""

    def __init__(self, messages: list[str]):
        super().__init__(", ".join(messages))
        self.messages = list(messages)


class DuplicateKey(AppError):
    """A unique field collided with an existing record."""

    def __init__(self, field: str):
        super().__init__(f"duplicate value for {field}")
        self.field = field


class StoreUnavailable(AppError):
    """Store could not be reached or did not answer in time."""

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or "store unavailable")
        self.detail = detail
