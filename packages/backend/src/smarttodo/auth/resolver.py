"""Identity resolution — verified subject → live account.

Learn: A token can outlive its account. Every request therefore looks the
subject up again. Absent and malformed subjects, timeouts and any
SQLAlchemyError all fail closed as UnknownSubject, with no retry.
"""

import structlog
from sqlalchemy.exc import SQLAlchemyError

from smarttodo.errors import StoreUnavailable, UnknownSubject
from smarttodo.schemas.account import AccountRead
from smarttodo.services.account_service import AccountService
from smarttodo.services.results import Found

logger = structlog.get_logger()


class IdentityResolver:
    def __init__(self, accounts: AccountService):
        self.accounts = accounts

    async def resolve(self, subject: str) -> AccountRead:
        try:
            result = await self.accounts.find_account_by_id(subject)
        except (StoreUnavailable, SQLAlchemyError) as exc:
            logger.warning("auth.resolve_failed", subject=subject, error=str(exc))
            raise UnknownSubject("account lookup failed") from exc

        if not isinstance(result, Found):
            raise UnknownSubject(f"no account for subject {subject}")
        return result.value
