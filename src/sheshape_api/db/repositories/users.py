"""
sheshape_api.db.repositories.users

Repository for `User` entities.

Responsibilities:
- Fetch users by id, email, username or either of the two.
- List users (optionally by role) in stable id order.
- Add and delete rows; flushing surfaces uniqueness violations early.
"""

from __future__ import annotations

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from sheshape_api.db.models import Role, User


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(
        self,
        *,
        username: str,
        email: str,
        password_hash: str,
        role: Role = Role.USER,
        is_active: bool = True,
    ) -> User:
        user = User(
            username=username,
            email=email,
            password_hash=password_hash,
            role=role,
            is_active=is_active,
        )
        self._session.add(user)
        await self._session.flush()
        return user

    async def get(self, user_id: int) -> User | None:
        return await self._session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def get_by_username(self, username: str) -> User | None:
        stmt = select(User).where(User.username == username)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def get_by_username_or_email(self, username: str, email: str) -> User | None:
        # A username may collide with another user's email; take the lowest id deterministically.
        stmt = (
            select(User)
            .where(or_(User.username == username, User.email == email))
            .order_by(User.id)
            .limit(1)
        )
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_all(self) -> list[User]:
        stmt = select(User).order_by(User.id)
        return list((await self._session.execute(stmt)).scalars().all())

    async def list_by_role(self, role: Role) -> list[User]:
        stmt = select(User).where(User.role == role).order_by(User.id)
        return list((await self._session.execute(stmt)).scalars().all())

    async def delete(self, user: User) -> None:
        await self._session.delete(user)
        await self._session.flush()

    async def flush(self) -> None:
        await self._session.flush()
