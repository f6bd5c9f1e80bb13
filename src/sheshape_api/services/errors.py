"""
sheshape_api.services.errors

Service-layer exceptions. Routers map these onto HTTP status codes.
"""

from __future__ import annotations


class ServiceError(Exception):
    pass


class NotAuthenticatedError(ServiceError):
    pass


class InvalidCredentialsError(ServiceError):
    pass


class AccountDisabledError(ServiceError):
    pass


class ResourceNotFoundError(ServiceError):
    pass


class UserNotFoundError(ResourceNotFoundError):
    pass


class DuplicateUserError(ServiceError):
    pass


class RegistrationRoleError(ServiceError):
    pass


class InvalidAccountDataError(ServiceError):
    pass
