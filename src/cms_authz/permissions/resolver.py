"""
cms_authz.permissions.resolver

Default permission resolver.

Responsibilities:
- Hold the per-role default grants over `resource:action` pairs.
- Answer `can_access(user, resource, action, scope)` (the single entry point).
- Provide resource-specific convenience wrappers with resource/action fixed.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import TypeVar

from cms_authz.auth.models import Action, Permission, Role, User, is_authenticated

T = TypeVar("T")

WILDCARD = "*"

PRODUCTS = "products"
CATEGORIES = "categories"
PAGES = "pages"
MEDIA = "media"
ORDERS = "orders"
USERS = "users"
ANALYTICS = "analytics"
SECURITY = "security"
SETTINGS = "settings"

CONTENT_RESOURCES = (PRODUCTS, CATEGORIES, PAGES, MEDIA, ORDERS)
KNOWN_RESOURCES = (*CONTENT_RESOURCES, USERS, ANALYTICS, SECURITY, SETTINGS)

DEFAULT_ROLE_GRANTS: Mapping[Role, frozenset[str]] = MappingProxyType(
    {
        Role.ADMIN: frozenset({WILDCARD}),
        Role.EDITOR: frozenset(f"{r}:{WILDCARD}" for r in CONTENT_RESOURCES),
        Role.VIEWER: frozenset(f"{r}:{Action.READ.value}" for r in CONTENT_RESOURCES),
    }
)


def grants_match(grants: frozenset[str], resource: str, action: Action) -> bool:
    """
    Match a requested pair against grant keys (`*`, `resource:*`, `resource:manage`,
    `resource:action`). Resources compare literally and case-sensitively.
    """
    if WILDCARD in grants:
        return True
    return (
        f"{resource}:{WILDCARD}" in grants
        or f"{resource}:{Action.MANAGE.value}" in grants
        or f"{resource}:{action.value}" in grants
    )


def _coerce_action(action: Action | str) -> Action | None:
    try:
        return Action(action)
    except ValueError:
        return None


class PermissionResolver:
    """
    Pure `(user, permission) -> bool` evaluation. Holds no per-request state, so one
    instance is shared by every concurrent request.

    `overrides` maps a user id to explicit grant keys that replace that user's role
    defaults. ADMIN stays a universal allow regardless of overrides.
    """

    def __init__(
        self,
        grants: Mapping[Role, Iterable[str]] = DEFAULT_ROLE_GRANTS,
        overrides: Mapping[str, Iterable[str]] | None = None,
    ) -> None:
        self._grants = {role: frozenset(keys) for role, keys in grants.items()}
        self._overrides = {uid: frozenset(keys) for uid, keys in (overrides or {}).items()}

    def grants_for(self, user: User) -> frozenset[str]:
        if user.id in self._overrides:
            return self._overrides[user.id]
        return self._grants.get(user.role, frozenset())

    def can_access(
        self,
        user: User | None,
        resource: str,
        action: Action | str,
        scope: str | None = None,
    ) -> bool:
        # Scope is accepted for symmetry with the request shape; role grants are scope-independent.
        if not is_authenticated(user):
            return False
        if user.role == Role.ADMIN:
            return True
        resolved = _coerce_action(action)
        if resolved is None:
            return False
        return grants_match(self.grants_for(user), resource, resolved)

    def has_permission(self, user: User | None, permission: Permission) -> bool:
        return self.can_access(user, permission.resource, permission.action, permission.scope)

    def has_all_permissions(self, user: User | None, permissions: Iterable[Permission]) -> bool:
        return all(self.has_permission(user, p) for p in permissions)

    def has_any_permission(self, user: User | None, permissions: Iterable[Permission]) -> bool:
        return any(self.has_permission(user, p) for p in permissions)

    def accessible_resources(self, user: User | None) -> list[str]:
        """Known resources the user may at least read, in declaration order."""
        return [r for r in KNOWN_RESOURCES if self.can_access(user, r, Action.READ)]

    def filter_by_permission(
        self,
        user: User | None,
        items: Iterable[T],
        resource_of: Callable[[T], str],
        action: Action | str,
    ) -> list[T]:
        return [item for item in items if self.can_access(user, resource_of(item), action)]

    # Generic action wrappers.

    def can_create(self, user: User | None, resource: str) -> bool:
        return self.can_access(user, resource, Action.CREATE)

    def can_read(self, user: User | None, resource: str, scope: str | None = None) -> bool:
        return self.can_access(user, resource, Action.READ, scope)

    def can_update(self, user: User | None, resource: str, scope: str | None = None) -> bool:
        return self.can_access(user, resource, Action.UPDATE, scope)

    def can_delete(self, user: User | None, resource: str, scope: str | None = None) -> bool:
        return self.can_access(user, resource, Action.DELETE, scope)

    def can_manage(self, user: User | None, resource: str) -> bool:
        return self.can_access(user, resource, Action.MANAGE)

    # Resource-specific wrappers.

    def can_create_product(self, user: User | None) -> bool:
        return self.can_create(user, PRODUCTS)

    def can_read_product(self, user: User | None) -> bool:
        return self.can_read(user, PRODUCTS)

    def can_update_product(self, user: User | None) -> bool:
        return self.can_update(user, PRODUCTS)

    def can_delete_product(self, user: User | None) -> bool:
        return self.can_delete(user, PRODUCTS)

    def can_create_category(self, user: User | None) -> bool:
        return self.can_create(user, CATEGORIES)

    def can_read_category(self, user: User | None) -> bool:
        return self.can_read(user, CATEGORIES)

    def can_update_category(self, user: User | None) -> bool:
        return self.can_update(user, CATEGORIES)

    def can_delete_category(self, user: User | None) -> bool:
        return self.can_delete(user, CATEGORIES)

    def can_create_page(self, user: User | None) -> bool:
        return self.can_create(user, PAGES)

    def can_read_page(self, user: User | None) -> bool:
        return self.can_read(user, PAGES)

    def can_update_page(self, user: User | None) -> bool:
        return self.can_update(user, PAGES)

    def can_delete_page(self, user: User | None) -> bool:
        return self.can_delete(user, PAGES)

    def can_create_media(self, user: User | None) -> bool:
        return self.can_create(user, MEDIA)

    def can_read_media(self, user: User | None) -> bool:
        return self.can_read(user, MEDIA)

    def can_update_media(self, user: User | None) -> bool:
        return self.can_update(user, MEDIA)

    def can_delete_media(self, user: User | None) -> bool:
        return self.can_delete(user, MEDIA)

    def can_read_order(self, user: User | None) -> bool:
        return self.can_read(user, ORDERS)

    def can_create_user(self, user: User | None) -> bool:
        return self.can_create(user, USERS)

    def can_read_user(self, user: User | None) -> bool:
        return self.can_read(user, USERS)

    def can_update_user(self, user: User | None) -> bool:
        return self.can_update(user, USERS)

    def can_delete_user(self, user: User | None) -> bool:
        # Does not check identity equality; callers must apply `guards.ensure_not_self_delete`.
        return self.can_delete(user, USERS)

    def can_read_analytics(self, user: User | None) -> bool:
        return self.can_read(user, ANALYTICS)

    def can_read_security(self, user: User | None) -> bool:
        return self.can_read(user, SECURITY)

    def can_manage_security(self, user: User | None) -> bool:
        return self.can_manage(user, SECURITY)

    def can_read_settings(self, user: User | None) -> bool:
        return self.can_read(user, SETTINGS)

    def can_update_settings(self, user: User | None) -> bool:
        return self.can_update(user, SETTINGS)

    def can_manage_settings(self, user: User | None) -> bool:
        return self.can_manage(user, SETTINGS)


# --- Module Notes -----------------------------------------------------------
# The resolver is constructed once in the app factory and injected into the gate;
# tests construct their own instances (optionally with overrides).
