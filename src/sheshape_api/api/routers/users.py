"""
sheshape_api.api.routers.users

Endpoints for any authenticated caller.

Responsibilities:
- Return the caller's own profile.
- List active trainers and nutritionists.
- Resolve a username (or email) to a user id.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_400_BAD_REQUEST

from sheshape_api.api.deps import db_session
from sheshape_api.api.errors import to_http_exception
from sheshape_api.auth.deps import get_optional_principal
from sheshape_api.auth.models import Principal
from sheshape_api.services.dto import UserDto
from sheshape_api.services.errors import ServiceError
from sheshape_api.services.user_service import UserService

router = APIRouter(prefix="/api/users", tags=["users"])


class UserIdResponse(BaseModel):
    user_id: int | None


@router.get("/me", response_model=UserDto)
async def get_me(
    principal: Principal | None = Depends(get_optional_principal),
    session: AsyncSession = Depends(db_session),
) -> UserDto:
    try:
        return await UserService(session=session).get_current_user(principal)
    except ServiceError as e:
        raise to_http_exception(e) from e


@router.get("/trainers", response_model=list[UserDto])
async def list_trainers(session: AsyncSession = Depends(db_session)) -> list[UserDto]:
    return await UserService(session=session).get_public_trainers()


@router.get("/nutritionists", response_model=list[UserDto])
async def list_nutritionists(session: AsyncSession = Depends(db_session)) -> list[UserDto]:
    return await UserService(session=session).get_public_nutritionists()


@router.get("/lookup", response_model=UserIdResponse)
async def lookup_user_id(
    username: str | None = Query(default=None, max_length=64),
    login: str | None = Query(default=None, max_length=256),
    session: AsyncSession = Depends(db_session),
) -> UserIdResponse:
    # `username` matches usernames only; `login` matches a username or an email.
    if (username is None) == (login is None):
        raise HTTPException(
            status_code=HTTP_400_BAD_REQUEST,
            detail="Provide exactly one of 'username' or 'login'",
        )
    svc = UserService(session=session)
    if username is not None:
        return UserIdResponse(user_id=await svc.get_user_id_by_username(username))
    return UserIdResponse(user_id=await svc.get_user_id_by_username_or_email(login))
