"""
sheshape_api.services

Service layer (transaction owners).

Responsibilities:
- Own commit/rollback boundaries for request handlers.
- Translate ORM rows into external DTOs.
"""

# Package marker.
