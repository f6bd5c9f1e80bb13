"""
sheshape_api.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Convert a bearer token into a typed `Principal`.
- Enforce RBAC via reusable dependency factories.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_403_FORBIDDEN

from sheshape_api.api.deps import settings_dep
from sheshape_api.auth.jwt import JwtConfig, JwtValidationError, principal_from_token
from sheshape_api.auth.models import Principal
from sheshape_api.settings import Settings

_bearer = HTTPBearer(auto_error=False)


def get_optional_principal(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(settings_dep),
) -> Principal | None:
    # The security filter has usually validated the token already.
    principal = getattr(request.state, "principal", None)
    if principal is not None:
        return principal
    if creds is None or not creds.credentials:
        return None
    try:
        return principal_from_token(cfg=JwtConfig.from_settings(settings), token=creds.credentials)
    except JwtValidationError as e:
        raise HTTPException(
            status_code=HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {e}",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


def get_principal(principal: Principal | None = Depends(get_optional_principal)) -> Principal:
    if principal is None:
        raise HTTPException(
            status_code=HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal


def require_roles(*required: str):
    required_set = frozenset(required)

    def _dep(principal: Principal = Depends(get_principal)) -> Principal:
        # Method-level checks let admins through; route rules in `security.rules` do not.
        if principal.is_admin:
            return principal
        if not required_set.issubset(principal.roles):
            raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Insufficient role")
        return principal

    return _dep
