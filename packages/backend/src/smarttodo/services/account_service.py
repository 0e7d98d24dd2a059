"""Account service — typed lookups and registration writes for users.

Learn: find_account_by_id is what the identity resolver calls on every
authenticated request. It selects an explicit column list so the password
hash is never loaded into the returned projection. Only login goes
through find_credentials_by_email, which returns the full row.
"""

import re
import uuid
from typing import Union

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from smarttodo.db.models import Task, User
from smarttodo.schemas.account import AccountRead
from smarttodo.services.results import (
    Absent,
    Duplicate,
    Found,
    Invalid,
    StoreResult,
    parse_id,
    store_call,
)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
NAME_MAX_LENGTH = 50


def validate_account_fields(name: str, email: str) -> list[str]:
    messages = []
    if not name or not name.strip():
        messages.append("Please provide a name")
    elif len(name.strip()) > NAME_MAX_LENGTH:
        messages.append(f"Name cannot be more than {NAME_MAX_LENGTH} characters")
    if not email or not EMAIL_RE.match(email.strip()):
        messages.append("Please provide a valid email")
    return messages


class AccountService:
    """Store operations on the users table."""

    def __init__(self, db: AsyncSession, timeout: float = 5.0):
        self.db = db
        self.timeout = timeout

    async def find_account_by_id(
        self, account_id: Union[str, uuid.UUID]
    ) -> Union[Found[AccountRead], Absent]:
        parsed = parse_id(account_id)
        if parsed is None:
            return Absent(malformed=True)

        q = select(
            User.id, User.name, User.email, User.created_at, User.updated_at
        ).where(User.id == parsed)
        async with store_call(self.timeout):
            row = (await self.db.execute(q)).first()
        if row is None:
            return Absent()
        return Found(AccountRead.model_validate(row))

    async def find_credentials_by_email(self, email: str) -> Union[Found[User], Absent]:
        """Full user row (including the hash) for password checks at login."""
        q = select(User).where(User.email == email.strip().lower())
        async with store_call(self.timeout):
            user = (await self.db.execute(q)).scalars().first()
        return Found(user) if user else Absent()

    async def create_account(
        self, name: str, email: str, password_hash: str
    ) -> StoreResult[AccountRead]:
        messages = validate_account_fields(name, email)
        if messages:
            return Invalid(messages)

        email = email.strip().lower()
        async with store_call(self.timeout):
            existing = await self.db.execute(select(User.id).where(User.email == email))
            if existing.first():
                return Duplicate("email")

            user = User(name=name.strip(), email=email, password_hash=password_hash)
            self.db.add(user)
            try:
                await self.db.commit()
            except IntegrityError:
                # Lost a race with a concurrent registration.
                await self.db.rollback()
                return Duplicate("email")

        return Found(AccountRead.model_validate(user))

    async def delete_account(self, account_id: Union[str, uuid.UUID]) -> Union[Found[uuid.UUID], Absent]:
        """Remove a user and every task they own."""
        parsed = parse_id(account_id)
        if parsed is None:
            return Absent(malformed=True)

        async with store_call(self.timeout):
            await self.db.execute(delete(Task).where(Task.owner_id == parsed))
            result = await self.db.execute(delete(User).where(User.id == parsed))
            await self.db.commit()
        if not result.rowcount:
            return Absent()
        return Found(parsed)
