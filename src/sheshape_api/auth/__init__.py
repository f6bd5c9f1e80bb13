"""
sheshape_api.auth

Authentication/authorization package.

Responsibilities:
- JWT helpers and validation.
- Password hashing.
- FastAPI auth dependencies (Principal + RBAC).
"""

# Package marker.
