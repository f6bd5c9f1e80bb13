"""
sheshape_api.services.dto

External representations of users. The password hash never appears here.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from sheshape_api.db.models import Role

# Usernames never contain "@", so a login identifier cannot match both a username and an email.
USERNAME_PATTERN = r"^[^@]+$"


class UserDto(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: Role
    is_active: bool
    created_at: datetime
    updated_at: datetime


class UserUpdate(BaseModel):
    # None means "leave unchanged".
    username: str | None = Field(
        default=None, min_length=3, max_length=64, pattern=USERNAME_PATTERN
    )
    email: EmailStr | None = None
    is_active: bool | None = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserDto
