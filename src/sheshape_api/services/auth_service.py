"""
sheshape_api.services.auth_service

Registration and login.

Responsibilities:
- Create accounts with bcrypt-hashed passwords (no self-service admin accounts).
- Authenticate by username or email and issue a bearer token.
"""

from __future__ import annotations

from datetime import timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sheshape_api.auth.jwt import JwtConfig, issue_token
from sheshape_api.auth.passwords import (
    MAX_PASSWORD_BYTES,
    hash_password,
    password_too_long,
    verify_password,
)
from sheshape_api.db.models import Role
from sheshape_api.db.repositories.users import UserRepo
from sheshape_api.observability.logging import get_logger
from sheshape_api.services.dto import TokenResponse, UserDto
from sheshape_api.services.errors import (
    AccountDisabledError,
    DuplicateUserError,
    InvalidAccountDataError,
    InvalidCredentialsError,
    RegistrationRoleError,
)
from sheshape_api.settings import Settings

log = get_logger(__name__)


class AuthService:
    def __init__(self, *, session: AsyncSession, settings: Settings) -> None:
        self._session = session
        self._settings = settings
        self._users = UserRepo(session)

    async def register(
        self,
        *,
        username: str,
        email: str,
        password: str,
        role: Role = Role.USER,
    ) -> UserDto:
        if role == Role.ADMIN:
            raise RegistrationRoleError("Admin accounts cannot be self-registered")
        if "@" in username:
            raise InvalidAccountDataError("Username must not contain '@'")
        if password_too_long(password):
            raise InvalidAccountDataError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

        # Login matches either column, so a value may not appear in the other column either.
        if await self._users.get_by_username_or_email(username, username) is not None:
            raise DuplicateUserError(f"Username is already taken: {username}")
        if await self._users.get_by_username_or_email(email, email) is not None:
            raise DuplicateUserError(f"Email is already registered: {email}")

        try:
            user = await self._users.add(
                username=username,
                email=email,
                password_hash=hash_password(password, rounds=self._settings.bcrypt_rounds),
                role=role,
            )
            await self._session.commit()
        except IntegrityError as e:
            # Lost a race against a concurrent registration.
            await self._session.rollback()
            raise DuplicateUserError("Username or email is already in use") from e

        log.info("user_registered", user_id=user.id, role=role.value)
        return UserDto.model_validate(user)

    async def login(self, *, identifier: str, password: str) -> TokenResponse:
        user = await self._users.get_by_username_or_email(identifier, identifier)
        if user is None or not verify_password(password, user.password_hash):
            log.info("login_failed", reason="bad_credentials")
            raise InvalidCredentialsError("Invalid username or password")
        if not user.is_active:
            log.info("login_failed", reason="disabled", user_id=user.id)
            raise AccountDisabledError("User account is disabled")

        ttl = timedelta(minutes=self._settings.access_token_ttl_minutes)
        token = issue_token(
            cfg=JwtConfig.from_settings(self._settings),
            subject=user.email,
            roles=[user.role.value],
            ttl=ttl,
        )
        log.info("login_succeeded", user_id=user.id)
        return TokenResponse(
            access_token=token,
            expires_in=int(ttl.total_seconds()),
            user=UserDto.model_validate(user),
        )
