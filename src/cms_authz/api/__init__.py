"""
cms_authz.api

API package for the CMS authorization service.

Responsibilities:
- FastAPI app factory and router modules.
- API-layer dependency wiring and request/response models.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Routers stay thin: request validation, one gate dependency, then repository calls.
