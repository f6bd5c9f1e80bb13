"""
sheshape_api.services.user_service

CRUD service over the user entity.

Responsibilities:
- Resolve the current caller into a user record.
- List/lookup users (all, by role, public trainers and nutritionists).
- Update and delete users inside a transaction.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sheshape_api.auth.models import Principal
from sheshape_api.db.models import Role, User
from sheshape_api.db.repositories.users import UserRepo
from sheshape_api.observability.logging import get_logger
from sheshape_api.services.dto import UserDto, UserUpdate
from sheshape_api.services.errors import (
    DuplicateUserError,
    InvalidAccountDataError,
    NotAuthenticatedError,
    ResourceNotFoundError,
    UserNotFoundError,
)

log = get_logger(__name__)


class UserService:
    def __init__(self, *, session: AsyncSession) -> None:
        self._session = session
        self._users = UserRepo(session)

    async def get_current_user(self, principal: Principal | None) -> UserDto:
        if principal is None:
            raise NotAuthenticatedError("User not authenticated")

        user = await self._users.get_by_email(principal.subject)
        if user is None:
            raise UserNotFoundError(f"User not found with email: {principal.subject}")
        return UserDto.model_validate(user)

    async def get_user_id_by_username(self, username: str) -> int | None:
        user = await self._users.get_by_username(username)
        return user.id if user is not None else None

    async def get_user_id_by_username_or_email(self, username: str) -> int | None:
        # The same value is matched against both columns (login accepts either).
        user = await self._users.get_by_username_or_email(username, username)
        return user.id if user is not None else None

    async def get_all_users(self) -> list[UserDto]:
        return [UserDto.model_validate(u) for u in await self._users.list_all()]

    async def get_all_users_by_role(self, role: Role) -> list[UserDto]:
        return [UserDto.model_validate(u) for u in await self._users.list_by_role(role)]

    async def get_user_by_id(self, user_id: int) -> UserDto:
        return UserDto.model_validate(await self._require(user_id))

    async def update_user(self, user_id: int, patch: UserUpdate) -> UserDto:
        user = await self._require(user_id)
        await self._check_identity_free(user, patch)

        changed: list[str] = []
        if patch.username is not None:
            user.username = patch.username
            changed.append("username")
        if patch.email is not None:
            user.email = str(patch.email)
            changed.append("email")
        if patch.is_active is not None:
            user.is_active = patch.is_active
            changed.append("is_active")
        if changed:
            user.updated_at = datetime.utcnow()

        try:
            await self._users.flush()
            await self._session.commit()
        except IntegrityError as e:
            await self._session.rollback()
            raise DuplicateUserError("Username or email is already in use") from e

        log.info("user_updated", user_id=user_id, fields=changed)
        return UserDto.model_validate(user)

    async def delete_user(self, user_id: int) -> None:
        user = await self._require(user_id)
        try:
            await self._users.delete(user)
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise
        log.info("user_deleted", user_id=user_id)

    async def get_public_trainers(self) -> list[UserDto]:
        return await self._active_by_role(Role.TRAINER)

    async def get_public_nutritionists(self) -> list[UserDto]:
        return await self._active_by_role(Role.NUTRITIONIST)

    async def _active_by_role(self, role: Role) -> list[UserDto]:
        users = await self._users.list_by_role(role)
        return [UserDto.model_validate(u) for u in users if u.is_active]

    async def _check_identity_free(self, user: User, patch: UserUpdate) -> None:
        # Usernames and emails share one lookup namespace at login.
        if patch.username is not None:
            if "@" in patch.username:
                raise InvalidAccountDataError("Username must not contain '@'")
            other = await self._users.get_by_username_or_email(patch.username, patch.username)
            if other is not None and other.id != user.id:
                raise DuplicateUserError(f"Username is already taken: {patch.username}")
        if patch.email is not None:
            email = str(patch.email)
            other = await self._users.get_by_username_or_email(email, email)
            if other is not None and other.id != user.id:
                raise DuplicateUserError(f"Email is already registered: {email}")

    async def _require(self, user_id: int) -> User:
        user = await self._users.get(user_id)
        if user is None:
            raise ResourceNotFoundError(f"User not found with id: {user_id}")
        return user


# --- Module Notes -----------------------------------------------------------
# Read operations never commit; the request-scoped session is closed by `api.deps.db_session`.
