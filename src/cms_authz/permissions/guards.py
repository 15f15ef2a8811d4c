"""
cms_authz.permissions.guards

Business rules layered on top of coarse permissions.

Responsibilities:
- Reject self-deletion and admin self-deactivation.
- Reject role changes by non-admins and changes to one's own role.
- Compare users for management rights (strictly higher role) and enforce them on mutations.

These are checked next to the mutating operation, in addition to the generic
`users:update` / `users:delete` grant; they are never derived from it.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from cms_authz.auth.errors import Forbidden
from cms_authz.auth.models import Role, User, is_authenticated
from cms_authz.permissions.roles import has_role, role_level


def ensure_not_self_delete(actor: User, target_id: str) -> None:
    if actor.id == target_id:
        raise Forbidden("Cannot delete your own account")


def ensure_not_self_deactivate(actor: User, target_id: str) -> None:
    if actor.id == target_id and has_role(actor, Role.ADMIN):
        raise Forbidden("Admin users cannot deactivate their own account")


def ensure_role_change_allowed(actor: User, target_id: str, new_role: Role) -> None:
    if actor.id == target_id:
        raise Forbidden("Cannot change your own role")
    if not has_role(actor, Role.ADMIN):
        raise Forbidden(f"Only ADMIN can assign roles (requested: {new_role})")


def strip_self_elevation(actor: User, target_id: str, changes: Mapping[str, Any]) -> dict[str, Any]:
    """
    Drop a `role` change a non-admin attempts on their own account.
    Profile updates ignore the field rather than failing the whole request.
    """
    cleaned = dict(changes)
    if actor.id == target_id and not has_role(actor, Role.ADMIN):
        cleaned.pop("role", None)
    return cleaned


def can_manage_user(manager: User | None, target: User | None) -> bool:
    if not is_authenticated(manager) or target is None:
        return False
    return role_level(manager.role) > role_level(target.role)


def ensure_can_manage(actor: User, target: User) -> None:
    """
    Non-admins may only manage accounts ranked strictly below their own role, even
    when an override grants them `users:update`. Own-account updates are handled by
    `strip_self_elevation` and the self-service guards.
    """
    if actor.id == target.id or has_role(actor, Role.ADMIN):
        return
    if not can_manage_user(actor, target):
        raise Forbidden("Cannot manage a user with an equal or higher role")
