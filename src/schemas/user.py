"""User schema definitions.

This module defines the User domain model and the request/response models of
the authentication and administration routes.
"""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

import pytz
from pydantic import BaseModel, Field


class AccessLevel(str, Enum):
    """Authorization level of an account."""

    USER = "USER"
    TEACHER = "TEACHER"
    ADMIN = "ADMIN"


class User(BaseModel):
    username: str = Field(
        description="The unique username of the account.",
        frozen=True,
    )
    password_hash: str = Field(description="Bcrypt hash of the account password.")
    date_of_birth: date = Field(description="Date of birth, informational only.")
    access_level: AccessLevel = Field(
        description="Authorization level of the account.",
        default=AccessLevel.USER,
    )
    strikes: int = Field(
        description="Consecutive failed login attempts.",
        default=0,
        ge=0,
    )
    create_at: str = Field(
        description="The time when the account was created.",
        default_factory=lambda: datetime.now(pytz.utc).isoformat(),
    )

    def to_public(self) -> "PublicUser":
        """Return the user without its password hash."""
        return PublicUser(**self.model_dump(exclude={"password_hash"}))


class PublicUser(BaseModel):
    """A user as returned to clients."""
    username: str
    date_of_birth: date
    access_level: AccessLevel
    strikes: int
    create_at: str


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    user: PublicUser
    token: str


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=20)
    password: str = Field(min_length=1)
    date_of_birth: date
    access_level: AccessLevel = AccessLevel.USER
    admin_token: Optional[str] = Field(
        default=None,
        description="Required when registering a TEACHER or ADMIN account.",
    )


class AddUserRequest(BaseModel):
    username: str = Field(min_length=3, max_length=20)
    password: str = Field(min_length=1)
    date_of_birth: date
    access_level: AccessLevel = AccessLevel.USER


class CurrentUserResponse(BaseModel):
    user: PublicUser


class UserListResponse(BaseModel):
    users: List[PublicUser]
