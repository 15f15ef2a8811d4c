"""
cms_authz.db.repositories

Repository package.

Responsibilities:
- Group data-access repositories for users, owned content and the audit trail.
"""

# Package marker; repositories are imported directly from submodules.


# --- Module Notes -----------------------------------------------------------
# Repositories stay thin; authorization decisions never happen here.
