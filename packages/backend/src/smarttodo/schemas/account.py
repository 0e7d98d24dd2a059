"""Pydantic schemas for accounts and credentials.

Learn: AccountRead is the only account shape that leaves the service
layer — it has no password field at all, so nothing downstream can leak it.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str = Field(min_length=6)


class LoginRequest(BaseModel):
    email: str
    password: str = Field(min_length=1)


class AccountRead(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    """Returned by register and login."""
    success: bool = True
    token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: AccountRead


class AccountEnvelope(BaseModel):
    success: bool = True
    data: AccountRead
