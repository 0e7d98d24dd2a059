"""JWT credential issuance and verification.

Learn: A credential is a signed JWT carrying three claims:
- sub: the account id
- iat: issued-at
- exp: expiry (iat + configured lifetime)

Nothing about a credential is persisted. It is valid iff the signature
matches the key and now < exp, recomputed on every request. The key is a
CredentialKey built once by create_app() and passed to both the issuer
and the verifier — neither reads configuration on its own.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable

import jwt

from smarttodo.errors import ExpiredCredential, InvalidCredential

REQUIRED_CLAIMS = ["sub", "iat", "exp"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CredentialKey:
    """Signing secret, algorithm and lifetime. Immutable for the process."""

    secret: str = field(repr=False)
    algorithm: str = "HS256"
    lifetime: timedelta = timedelta(hours=24)

    def __post_init__(self):
        if not self.secret:
            raise ValueError("Signing secret is not configured")
        if self.lifetime <= timedelta(0):
            raise ValueError("Credential lifetime must be positive")


@dataclass(frozen=True)
class Claims:
    subject: str
    issued_at: datetime
    expires_at: datetime

    @classmethod
    def from_payload(cls, payload: dict) -> "Claims":
        return cls(
            subject=payload["sub"],
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )


@dataclass(frozen=True)
class Credential:
    """A freshly minted token plus the claims it encodes."""

    token: str
    claims: Claims

    def __str__(self) -> str:
        return self.token


class TokenIssuer:
    """Mints credentials for accounts the caller has already authenticated."""

    def __init__(self, key: CredentialKey, clock: Callable[[], datetime] = _utcnow):
        self.key = key
        self.clock = clock

    def issue(self, account_id) -> Credential:
        # JWT timestamps are whole seconds; truncate so claims match the token.
        now = self.clock().replace(microsecond=0)
        expires = now + self.key.lifetime
        payload = {"sub": str(account_id), "iat": now, "exp": expires}
        token = jwt.encode(payload, self.key.secret, algorithm=self.key.algorithm)
        return Credential(
            token=token,
            claims=Claims(subject=str(account_id), issued_at=now, expires_at=expires),
        )


class TokenVerifier:
    """Checks signature and expiry of a presented token."""

    def __init__(self, key: CredentialKey):
        self.key = key

    def verify(self, token: str) -> Claims:
        """Decode a bare token (scheme already stripped).

        Raises ExpiredCredential when only the expiry check fails, and
        InvalidCredential for anything structural or cryptographic.
        """
        try:
            payload = jwt.decode(
                token,
                self.key.secret,
                algorithms=[self.key.algorithm],
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as exc:
            raise ExpiredCredential("Token has expired") from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidCredential(f"Invalid token: {exc}") from exc

        if not isinstance(payload.get("sub"), str) or not payload["sub"]:
            raise InvalidCredential("Invalid token: empty subject")
        return Claims.from_payload(payload)
