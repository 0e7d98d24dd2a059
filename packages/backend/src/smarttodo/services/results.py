"""Explicit result variants returned by the store.

Learn: Lookups and writes answer with one of four variants instead of
raising for expected outcomes:

    Found(value)       — the record (or the written record)
    Absent(malformed)  — no such record; malformed=True when the id could
                         not even be parsed
    Duplicate(field)   — a unique field collided
    Invalid(messages)  — field validation rejected the write

unwrap() converts anything but Found into the matching AppError, so the
error normalizer only ever switches on a closed set of failure types.
Connectivity problems are not a variant: they raise StoreUnavailable.
"""

import asyncio
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar, Union

from sqlalchemy.exc import InterfaceError, OperationalError

from smarttodo.errors import (
    DuplicateKey,
    ResourceNotFound,
    StoreUnavailable,
    ValidationFailure,
)

T = TypeVar("T")


@dataclass(frozen=True)
class Found(Generic[T]):
    value: T


@dataclass(frozen=True)
class Absent:
    malformed: bool = False


@dataclass(frozen=True)
class Duplicate:
    field: str


@dataclass(frozen=True)
class Invalid:
    messages: list[str] = field(default_factory=list)


StoreResult = Union[Found[T], Absent, Duplicate, Invalid]


def unwrap(result: StoreResult) -> T:
    """Return the found value or raise the failure the variant stands for."""
    if isinstance(result, Found):
        return result.value
    if isinstance(result, Absent):
        raise ResourceNotFound(malformed=result.malformed)
    if isinstance(result, Duplicate):
        raise DuplicateKey(result.field)
    if isinstance(result, Invalid):
        raise ValidationFailure(result.messages)
    raise TypeError(f"Not a store result: {result!r}")


def parse_id(value: Union[str, uuid.UUID]) -> Optional[uuid.UUID]:
    """Parse a record id; None means the id is malformed."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (ValueError, AttributeError):
        return None


@asynccontextmanager
async def store_call(timeout: float):
    """Bound a store round-trip and map connectivity errors.

    Cancellation of the enclosing request is not intercepted: it unwinds
    through here like any other await.
    """
    try:
        async with asyncio.timeout(timeout):
            yield
    except TimeoutError as exc:
        raise StoreUnavailable(f"store call exceeded {timeout}s") from exc
    except (OperationalError, InterfaceError) as exc:
        raise StoreUnavailable(str(exc.orig or exc)) from exc
