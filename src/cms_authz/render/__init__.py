"""
cms_authz.render

Conditional-render decisions for admin UI elements.

Responsibilities:
- Turn an identity state and an access policy into show / fallback / loading.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Presentation only. The server gate in `auth.gate` is the security boundary.
