"""
sheshape_api.security

HTTP security configuration.

Responsibilities:
- Declarative route-to-role rules (`rules`).
- The request filter that enforces them (`middleware`).
- CORS policy for the web front-end (`cors`).
"""

# Package marker.
