"""
sheshape_api.api.routers.auth

Public account endpoints.

Responsibilities:
- Register a new account (`POST /api/auth/register`).
- Exchange credentials for a bearer token (`POST /api/auth/login`).
"""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from sheshape_api.api.deps import db_session, settings_dep
from sheshape_api.api.errors import to_http_exception
from sheshape_api.auth.passwords import MAX_PASSWORD_BYTES, password_too_long
from sheshape_api.db.models import Role
from sheshape_api.services.auth_service import AuthService
from sheshape_api.services.dto import USERNAME_PATTERN, TokenResponse, UserDto
from sheshape_api.services.errors import ServiceError
from sheshape_api.settings import Settings

router = APIRouter(prefix="/api/auth", tags=["auth"])


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=64, pattern=USERNAME_PATTERN)
    email: EmailStr
    password: str = Field(min_length=8, max_length=MAX_PASSWORD_BYTES)
    role: Literal["USER", "TRAINER", "NUTRITIONIST"] = "USER"

    @field_validator("password")
    @classmethod
    def _password_fits_bcrypt(cls, value: str) -> str:
        # Multi-byte characters can push a short password past the byte limit.
        if password_too_long(value):
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class LoginRequest(BaseModel):
    # Either the username or the email address.
    username: str = Field(min_length=1, max_length=256)
    password: str = Field(min_length=1, max_length=128)


@router.post("/register", response_model=UserDto, status_code=HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> UserDto:
    svc = AuthService(session=session, settings=settings)
    try:
        return await svc.register(
            username=body.username,
            email=str(body.email),
            password=body.password,
            role=Role(body.role),
        )
    except ServiceError as e:
        raise to_http_exception(e) from e


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> TokenResponse:
    svc = AuthService(session=session, settings=settings)
    try:
        return await svc.login(identifier=body.username, password=body.password)
    except ServiceError as e:
        raise to_http_exception(e) from e
