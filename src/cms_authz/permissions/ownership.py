"""
cms_authz.permissions.ownership

Ownership-based access.

Responsibilities:
- Decide owner / owner-or-admin relations between a user and a resource owner id.
- Combine ownership with the permission resolver as a logical OR (ownership only widens).
"""

from __future__ import annotations

from cms_authz.auth.models import Permission, Role, User, is_authenticated
from cms_authz.permissions.resolver import PermissionResolver
from cms_authz.permissions.roles import has_role


def is_owner(user: User | None, resource_owner_id: str | None) -> bool:
    if not is_authenticated(user) or not resource_owner_id:
        return False
    return user.id == resource_owner_id


def is_owner_or_admin(user: User | None, resource_owner_id: str | None) -> bool:
    return is_owner(user, resource_owner_id) or has_role(user, Role.ADMIN)


def is_owner_or_editor(user: User | None, resource_owner_id: str | None) -> bool:
    return is_owner(user, resource_owner_id) or has_role(user, Role.EDITOR)


class OwnershipEvaluator:
    def __init__(self, resolver: PermissionResolver) -> None:
        self._resolver = resolver

    def can_access(
        self,
        user: User | None,
        permission: Permission,
        *,
        resource_owner_id: str | None = None,
        allow_owner_access: bool = False,
    ) -> bool:
        if self._resolver.has_permission(user, permission):
            return True
        return allow_owner_access and is_owner_or_admin(user, resource_owner_id)


# --- Module Notes -----------------------------------------------------------
# Owner ids are opaque strings (usually a `created_by` column). A missing owner id
# never matches, so unowned resources fall back to the role grants alone.
