"""Pydantic schemas for accounts and login."""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=1, max_length=128)

    @field_validator("username", mode="before")
    @classmethod
    def _strip_username(cls, v):
        return v.strip() if isinstance(v, str) else v


class LoginRequest(BaseModel):
    username: str
    password: str


class UserRead(BaseModel):
    """Outward view of a user. Never carries the password hash."""
    id: uuid.UUID
    username: str
    created_at: datetime

    model_config = {"from_attributes": True}


class UserData(BaseModel):
    user: UserRead


class LoginData(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserRead
