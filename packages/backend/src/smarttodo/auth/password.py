"""Password hashing utilities.

Learn: bcrypt salts automatically and produces hashes starting with
"$2b$". Passwords are truncated to 72 bytes (bcrypt's limit) on both
hash and check so long passwords behave consistently.
"""

from functools import lru_cache

import bcrypt

BCRYPT_ROUNDS = 12


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    pw_bytes = password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password; malformed hashes simply fail."""
    try:
        return bcrypt.checkpw(
            password.encode("utf-8")[:72], password_hash.encode("utf-8")
        )
    except (ValueError, TypeError):
        return False


@lru_cache(maxsize=None)
def dummy_hash(rounds: int = BCRYPT_ROUNDS) -> str:
    """A fixed hash to check against when no account matched at login."""
    return hash_password("smarttodo-no-such-account", rounds=rounds)
