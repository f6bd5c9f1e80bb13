"""
sheshape_api.api.routers.admin_users

Administrative user management.

Responsibilities:
- List users (optionally filtered by role).
- Read, update and delete a single user.

Access is gated twice: the `/api/admin/**` route rule and a role dependency.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_204_NO_CONTENT

from sheshape_api.api.deps import db_session
from sheshape_api.api.errors import to_http_exception
from sheshape_api.auth.deps import require_roles
from sheshape_api.db.models import Role
from sheshape_api.services.dto import UserDto, UserUpdate
from sheshape_api.services.errors import ServiceError
from sheshape_api.services.user_service import UserService

router = APIRouter(
    prefix="/api/admin/users",
    tags=["admin"],
    dependencies=[Depends(require_roles(Role.ADMIN.value))],
)


@router.get("", response_model=list[UserDto])
async def list_users(
    role: Role | None = None,
    session: AsyncSession = Depends(db_session),
) -> list[UserDto]:
    svc = UserService(session=session)
    if role is None:
        return await svc.get_all_users()
    return await svc.get_all_users_by_role(role)


@router.get("/{user_id}", response_model=UserDto)
async def get_user(user_id: int, session: AsyncSession = Depends(db_session)) -> UserDto:
    try:
        return await UserService(session=session).get_user_by_id(user_id)
    except ServiceError as e:
        raise to_http_exception(e) from e


@router.put("/{user_id}", response_model=UserDto)
async def update_user(
    user_id: int,
    body: UserUpdate,
    session: AsyncSession = Depends(db_session),
) -> UserDto:
    try:
        return await UserService(session=session).update_user(user_id, body)
    except ServiceError as e:
        raise to_http_exception(e) from e


@router.delete("/{user_id}", status_code=HTTP_204_NO_CONTENT)
async def delete_user(user_id: int, session: AsyncSession = Depends(db_session)) -> Response:
    try:
        await UserService(session=session).delete_user(user_id)
    except ServiceError as e:
        raise to_http_exception(e) from e
    return Response(status_code=HTTP_204_NO_CONTENT)
