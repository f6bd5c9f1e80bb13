"""
tests.test_user_service

Service-layer behaviour against a real SQLite session.
"""

from __future__ import annotations

import pytest

from sheshape_api.auth.models import Principal
from sheshape_api.db.models import Role
from sheshape_api.services.auth_service import AuthService
from sheshape_api.services.dto import UserUpdate
from sheshape_api.services.errors import (
    AccountDisabledError,
    DuplicateUserError,
    InvalidAccountDataError,
    InvalidCredentialsError,
    NotAuthenticatedError,
    RegistrationRoleError,
    ResourceNotFoundError,
    UserNotFoundError,
)
from sheshape_api.services.user_service import UserService


@pytest.mark.asyncio
async def test_current_user_requires_principal(session) -> None:
    with pytest.raises(NotAuthenticatedError):
        await UserService(session=session).get_current_user(None)


@pytest.mark.asyncio
async def test_current_user_is_resolved_by_email(session, seed_user) -> None:
    await seed_user("ana", email="ana@example.com")
    svc = UserService(session=session)

    me = await svc.get_current_user(Principal(subject="ana@example.com", roles=frozenset({"USER"})))
    assert me.username == "ana"

    with pytest.raises(UserNotFoundError, match="ghost@example.com"):
        await svc.get_current_user(Principal(subject="ghost@example.com", roles=frozenset()))


@pytest.mark.asyncio
async def test_id_lookups(session, seed_user) -> None:
    ana = await seed_user("ana", email="ana@example.com")
    svc = UserService(session=session)

    assert await svc.get_user_id_by_username("ana") == ana.id
    assert await svc.get_user_id_by_username("ana@example.com") is None
    assert await svc.get_user_id_by_username("nobody") is None
    assert await svc.get_user_id_by_username_or_email("ana") == ana.id
    assert await svc.get_user_id_by_username_or_email("ana@example.com") == ana.id
    assert await svc.get_user_id_by_username_or_email("nobody") is None


@pytest.mark.asyncio
async def test_listing_and_role_filters(session, seed_user) -> None:
    await seed_user("u1")
    t1 = await seed_user("t1", role=Role.TRAINER)
    await seed_user("t2", role=Role.TRAINER, is_active=False)
    n1 = await seed_user("n1", role=Role.NUTRITIONIST)
    svc = UserService(session=session)

    assert [u.username for u in await svc.get_all_users()] == ["u1", "t1", "t2", "n1"]
    assert [u.username for u in await svc.get_all_users_by_role(Role.TRAINER)] == ["t1", "t2"]
    assert [u.id for u in await svc.get_public_trainers()] == [t1.id]
    assert [u.id for u in await svc.get_public_nutritionists()] == [n1.id]


@pytest.mark.asyncio
async def test_get_user_by_id_not_found(session) -> None:
    with pytest.raises(ResourceNotFoundError, match="User not found with id: 404"):
        await UserService(session=session).get_user_by_id(404)


@pytest.mark.asyncio
async def test_update_applies_only_provided_fields(session, seed_user) -> None:
    ana = await seed_user("ana", email="ana@example.com")
    svc = UserService(session=session)

    updated = await svc.update_user(ana.id, UserUpdate(is_active=False))
    assert updated.is_active is False
    assert updated.username == "ana"
    assert updated.email == "ana@example.com"

    updated = await svc.update_user(ana.id, UserUpdate(username="ana2", email="ana2@example.com"))
    assert (updated.username, updated.email, updated.is_active) == ("ana2", "ana2@example.com", False)


@pytest.mark.asyncio
async def test_update_conflict_and_missing(session, seed_user) -> None:
    await seed_user("ana")
    bob_id = (await seed_user("bob")).id
    svc = UserService(session=session)

    with pytest.raises(DuplicateUserError):
        await svc.update_user(bob_id, UserUpdate(username="ana"))
    with pytest.raises(ResourceNotFoundError):
        await svc.update_user(999, UserUpdate(is_active=True))

    assert (await svc.get_user_by_id(bob_id)).username == "bob"


@pytest.mark.asyncio
async def test_delete_user(session, seed_user) -> None:
    ana = await seed_user("ana")
    svc = UserService(session=session)

    await svc.delete_user(ana.id)
    with pytest.raises(ResourceNotFoundError):
        await svc.get_user_by_id(ana.id)
    with pytest.raises(ResourceNotFoundError):
        await svc.delete_user(ana.id)


@pytest.mark.asyncio
async def test_register_and_login(session, settings) -> None:
    svc = AuthService(session=session, settings=settings)
    user = await svc.register(username="cleo", email="cleo@example.com", password="password123")
    assert user.role is Role.USER
    assert user.is_active

    token = await svc.login(identifier="cleo", password="password123")
    assert token.token_type == "bearer"
    assert token.user.id == user.id
    assert token.expires_in == settings.access_token_ttl_minutes * 60

    by_email = await svc.login(identifier="cleo@example.com", password="password123")
    assert by_email.user.id == user.id


@pytest.mark.asyncio
async def test_register_rejections(session, settings, seed_user) -> None:
    await seed_user("ana", email="ana@example.com")
    svc = AuthService(session=session, settings=settings)

    with pytest.raises(DuplicateUserError):
        await svc.register(username="ana", email="other@example.com", password="password123")
    with pytest.raises(DuplicateUserError):
        await svc.register(username="other", email="ana@example.com", password="password123")
    with pytest.raises(RegistrationRoleError):
        await svc.register(
            username="boss", email="boss@example.com", password="password123", role=Role.ADMIN
        )


@pytest.mark.asyncio
async def test_login_failures(session, settings, seed_user) -> None:
    await seed_user("ana", password="password123")
    await seed_user("off", password="password123", is_active=False)
    svc = AuthService(session=session, settings=settings)

    with pytest.raises(InvalidCredentialsError):
        await svc.login(identifier="ana", password="wrong-password")
    with pytest.raises(InvalidCredentialsError):
        await svc.login(identifier="nobody", password="password123")
    with pytest.raises(AccountDisabledError):
        await svc.login(identifier="off", password="password123")


@pytest.mark.asyncio
async def test_register_keeps_usernames_and_emails_apart(session, settings, seed_user) -> None:
    # A row left over from before usernames were restricted.
    await seed_user("legacy@example.com", email="legacy-owner@example.com")
    await seed_user("dora", email="dora@example.com")
    svc = AuthService(session=session, settings=settings)

    with pytest.raises(InvalidAccountDataError):
        await svc.register(username="eve@example.com", email="eve@example.com", password="password123")
    with pytest.raises(DuplicateUserError):
        await svc.register(username="fresh", email="legacy@example.com", password="password123")
    with pytest.raises(InvalidAccountDataError):
        await svc.register(username="long", email="long@example.com", password="a" * 73)


@pytest.mark.asyncio
async def test_update_keeps_usernames_and_emails_apart(session, seed_user) -> None:
    await seed_user("legacy@example.com", email="legacy-owner@example.com")
    await seed_user("victim", email="victim@example.com")
    mallory_id = (await seed_user("mallory")).id
    svc = UserService(session=session)

    # Bypasses request validation, as an internal caller could.
    with pytest.raises(InvalidAccountDataError):
        await svc.update_user(mallory_id, UserUpdate.model_construct(username="victim@example.com"))
    with pytest.raises(DuplicateUserError):
        await svc.update_user(mallory_id, UserUpdate(email="legacy@example.com"))

    unchanged = await svc.get_user_by_id(mallory_id)
    assert unchanged.username == "mallory"
    assert unchanged.email == "mallory@example.com"


@pytest.mark.asyncio
async def test_empty_update_keeps_timestamp(session, seed_user) -> None:
    ana_id = (await seed_user("ana")).id
    svc = UserService(session=session)
    before = await svc.get_user_by_id(ana_id)

    after = await svc.update_user(ana_id, UserUpdate())
    assert after.updated_at == before.updated_at

    touched = await svc.update_user(ana_id, UserUpdate(is_active=False))
    assert touched.updated_at >= before.updated_at
