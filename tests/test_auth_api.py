"""
tests.test_auth_api

Registration and login over HTTP.
"""

from __future__ import annotations

import httpx
import pytest


async def _register(client: httpx.AsyncClient, **overrides) -> httpx.Response:
    body = {"username": "cleo", "email": "cleo@example.com", "password": "password123"}
    body.update(overrides)
    return await client.post("/api/auth/register", json=body)


@pytest.mark.asyncio
async def test_register_then_login_then_me(client: httpx.AsyncClient) -> None:
    r = await _register(client, role="TRAINER")
    assert r.status_code == 201
    created = r.json()
    assert created["role"] == "TRAINER"
    assert created["is_active"] is True
    assert "password" not in created and "password_hash" not in created

    r = await client.post("/api/auth/login", json={"username": "cleo@example.com", "password": "password123"})
    assert r.status_code == 200
    token = r.json()
    assert token["token_type"] == "bearer"
    assert token["user"]["id"] == created["id"]

    r = await client.get("/api/users/me", headers={"Authorization": f"Bearer {token['access_token']}"})
    assert r.status_code == 200
    assert r.json()["username"] == "cleo"


@pytest.mark.asyncio
async def test_register_validation_and_conflicts(client: httpx.AsyncClient) -> None:
    assert (await _register(client)).status_code == 201

    r = await _register(client, email="another@example.com")
    assert r.status_code == 409

    r = await _register(client, username="another")
    assert r.status_code == 409

    # Admin accounts cannot be self-registered.
    assert (await _register(client, username="boss", email="boss@example.com", role="ADMIN")).status_code == 422
    assert (await _register(client, username="x1", email="not-an-email")).status_code == 422
    assert (await _register(client, username="x2", email="x2@example.com", password="short")).status_code == 422


@pytest.mark.asyncio
async def test_login_failures(client: httpx.AsyncClient, seed_user) -> None:
    await seed_user("ana", password="password123")
    await seed_user("off", password="password123", is_active=False)

    r = await client.post("/api/auth/login", json={"username": "ana", "password": "nope-nope"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid username or password"

    r = await client.post("/api/auth/login", json={"username": "ghost", "password": "password123"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid username or password"

    r = await client.post("/api/auth/login", json={"username": "off", "password": "password123"})
    assert r.status_code == 401
    assert r.json()["detail"] == "User account is disabled"


@pytest.mark.asyncio
async def test_public_endpoint_ignores_stale_token(client: httpx.AsyncClient, seed_user) -> None:
    await seed_user("ana", password="password123")
    r = await client.post(
        "/api/auth/login",
        json={"username": "ana", "password": "password123"},
        headers={"Authorization": "Bearer not.a.jwt"},
    )
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_username_cannot_look_like_an_email(client: httpx.AsyncClient) -> None:
    r = await _register(client, username="victim@example.com", email="mallory@example.com")
    assert r.status_code == 422

    assert (await _register(client, username="victim", email="victim@example.com")).status_code == 201
    r = await client.post(
        "/api/auth/login", json={"username": "victim@example.com", "password": "password123"}
    )
    assert r.status_code == 200
    assert r.json()["user"]["username"] == "victim"


@pytest.mark.asyncio
async def test_overlong_password_is_rejected(client: httpx.AsyncClient) -> None:
    r = await _register(client, password="a" * 73)
    assert r.status_code == 422

    # 40 characters, 80 bytes.
    r = await _register(client, password="é" * 40)
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_login_with_trailing_slash_is_redirected(client: httpx.AsyncClient) -> None:
    r = await client.post("/api/auth/login/", json={"username": "x", "password": "y"})
    assert r.status_code == 307
    assert r.headers["location"].endswith("/api/auth/login")
