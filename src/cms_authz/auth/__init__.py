"""
cms_authz.auth

Authentication/authorization seam for the HTTP layer.

Responsibilities:
- Session JWT helpers and validation.
- Server-side authorization gate, its audit observer and error envelope.
- FastAPI dependencies (`get_current_user`, `require_access`, `require_route_access`).
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# `auth.models` is framework-free and shared with `permissions` and `render`.
