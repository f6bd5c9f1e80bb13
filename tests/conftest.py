"""
tests.conftest

Shared fixtures: an app bound to a throwaway SQLite file, an in-process HTTP
client, a DB session and helpers to mint tokens / seed users.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession

from sheshape_api.api.app import create_app
from sheshape_api.auth.jwt import JwtConfig, issue_token
from sheshape_api.auth.passwords import hash_password
from sheshape_api.db.models import Role, User
from sheshape_api.db.repositories.users import UserRepo
from sheshape_api.settings import Settings


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        env="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncIterator[FastAPI]:
    app = create_app(settings=settings)
    # httpx ASGITransport does not manage lifespan; run it explicitly.
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def session(app: FastAPI) -> AsyncIterator[AsyncSession]:
    async with app.state.sessionmaker() as session:
        yield session


@pytest.fixture
def make_token(settings: Settings) -> Callable[..., str]:
    def _make(subject: str, *roles: str) -> str:
        return issue_token(cfg=JwtConfig.from_settings(settings), subject=subject, roles=list(roles))

    return _make


@pytest.fixture
def auth_header(make_token: Callable[..., str]) -> Callable[..., dict[str, str]]:
    def _header(subject: str, *roles: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(subject, *roles)}"}

    return _header


@pytest.fixture
def seed_user(session: AsyncSession) -> Callable[..., Awaitable[User]]:
    async def _seed(
        username: str,
        *,
        email: str | None = None,
        password: str = "password123",
        role: Role = Role.USER,
        is_active: bool = True,
    ) -> User:
        user = await UserRepo(session).add(
            username=username,
            email=email or f"{username}@example.com",
            password_hash=hash_password(password, rounds=4),
            role=role,
            is_active=is_active,
        )
        await session.commit()
        return user

    return _seed
