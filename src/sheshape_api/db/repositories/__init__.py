"""
sheshape_api.db.repositories

Repository package.
"""

# Package marker; repositories are imported directly from submodules.


# --- Module Notes -----------------------------------------------------------
# Repositories are intentionally thin; transaction boundaries belong in services.
