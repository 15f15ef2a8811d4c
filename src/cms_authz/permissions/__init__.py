"""
cms_authz.permissions

Pure authorization core.

Responsibilities:
- Role hierarchy, permission resolver and ownership rules.
- Composable conditions and their factories.
- Access policies and their evaluation.
- Route → permission table and account-management guards.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Nothing here performs I/O; every function is safe to call concurrently.
