"""
cms_authz.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide ORM models, engine/session setup, and repositories for the
  collaborators of the authorization core (accounts, owned content, audit trail).
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The authorization core never imports this package; only the API layer and the
# audit observer do.
