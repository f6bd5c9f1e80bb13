"""
sheshape_api.api.errors

Mapping from service-layer exceptions to HTTP errors.
"""

from __future__ import annotations

from fastapi import HTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from sheshape_api.services.errors import (
    AccountDisabledError,
    DuplicateUserError,
    InvalidAccountDataError,
    InvalidCredentialsError,
    NotAuthenticatedError,
    RegistrationRoleError,
    ResourceNotFoundError,
    ServiceError,
)

_STATUS: tuple[tuple[type[ServiceError], int], ...] = (
    (NotAuthenticatedError, HTTP_401_UNAUTHORIZED),
    (InvalidCredentialsError, HTTP_401_UNAUTHORIZED),
    (AccountDisabledError, HTTP_401_UNAUTHORIZED),
    (ResourceNotFoundError, HTTP_404_NOT_FOUND),
    (DuplicateUserError, HTTP_409_CONFLICT),
    (RegistrationRoleError, HTTP_400_BAD_REQUEST),
    (InvalidAccountDataError, HTTP_400_BAD_REQUEST),
)


def to_http_exception(exc: ServiceError) -> HTTPException:
    for exc_type, status_code in _STATUS:
        if isinstance(exc, exc_type):
            headers = {"WWW-Authenticate": "Bearer"} if status_code == HTTP_401_UNAUTHORIZED else None
            return HTTPException(status_code=status_code, detail=str(exc), headers=headers)
    return HTTPException(status_code=HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal error")
