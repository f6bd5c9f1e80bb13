"""
sheshape_api.security.middleware

Stateless security filter.

Responsibilities:
- Parse an optional bearer token into a `Principal` (request.state.principal).
- Apply the route-to-role policy and short-circuit with 401/403 JSON responses.
"""

from __future__ import annotations

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_403_FORBIDDEN
from starlette.types import ASGIApp

from sheshape_api.auth.jwt import JwtConfig, JwtValidationError, principal_from_token
from sheshape_api.auth.models import Principal
from sheshape_api.observability.logging import get_logger
from sheshape_api.security.rules import Decision, SecurityPolicy

log = get_logger(__name__)


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("authorization")
    if not header:
        return None
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() != "bearer" or not credentials.strip():
        return None
    return credentials.strip()


class SecurityFilterMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, *, policy: SecurityPolicy, jwt_cfg: JwtConfig) -> None:
        super().__init__(app)
        self._policy = policy
        self._jwt_cfg = jwt_cfg

    async def dispatch(self, request: Request, call_next) -> Response:
        principal = self._authenticate(request)
        request.state.principal = principal
        if principal is not None:
            structlog.contextvars.bind_contextvars(subject=principal.subject)

        decision = self._policy.decide(request.method, request.url.path, principal)
        if decision is Decision.unauthenticated:
            return JSONResponse(
                {"detail": "Not authenticated"},
                status_code=HTTP_401_UNAUTHORIZED,
                headers={"WWW-Authenticate": "Bearer"},
            )
        if decision is Decision.forbidden:
            log.info("access_denied", roles=sorted(principal.roles) if principal else [])
            return JSONResponse({"detail": "Access denied"}, status_code=HTTP_403_FORBIDDEN)

        return await call_next(request)

    def _authenticate(self, request: Request) -> Principal | None:
        token = _bearer_token(request)
        if token is None:
            return None
        try:
            return principal_from_token(cfg=self._jwt_cfg, token=token)
        except JwtValidationError as e:
            # Treated as anonymous; public routes still work with a stale token.
            log.info("token_rejected", reason=str(e))
            return None


# --- Module Notes -----------------------------------------------------------
# Registered inside the CORS middleware so preflight requests never reach this filter
# and 401/403 responses still carry CORS headers.
