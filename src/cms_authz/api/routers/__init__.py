"""
cms_authz.api.routers

HTTP routers.

Responsibilities:
- Group the thin HTTP surface over the authorization core and its collaborators.
"""

# Package marker; routers are imported directly from submodules.
