"""
cms_authz.permissions.factories

Pre-built conditions for common checks.

Responsibilities:
- Build role, permission, resource, ownership, auth, time and feature-flag conditions.
- Map named business rules onto conditions.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from datetime import datetime

from cms_authz.auth.models import Action, Permission, Role
from cms_authz.permissions.conditions import (
    AuthCondition,
    AuthorizationContext,
    Condition,
    CustomCondition,
    FeatureFlagCondition,
    OwnershipCondition,
    OwnershipMode,
    PermissionCondition,
    RoleCondition,
    RoleMode,
    TimeCondition,
    TimeWindow,
)
from cms_authz.permissions.resolver import CATEGORIES, MEDIA, PAGES, PRODUCTS, USERS

# Role conditions


def has_role(role: Role) -> RoleCondition:
    return RoleCondition(RoleMode.EXACT, (role,))


def has_minimum_role(role: Role) -> RoleCondition:
    return RoleCondition(RoleMode.MINIMUM, (role,))


def has_any_role(roles: Iterable[Role]) -> RoleCondition:
    return RoleCondition(RoleMode.ANY, tuple(roles))


def is_admin() -> RoleCondition:
    return has_role(Role.ADMIN)


def is_editor() -> RoleCondition:
    return has_role(Role.EDITOR)


def is_viewer() -> RoleCondition:
    return has_role(Role.VIEWER)


# Permission conditions


def can_access(resource: str, action: Action | str, scope: str | None = None) -> PermissionCondition:
    return PermissionCondition((Permission(resource, Action(action), scope),))


def can_create(resource: str) -> PermissionCondition:
    return can_access(resource, Action.CREATE)


def can_read(resource: str, scope: str | None = None) -> PermissionCondition:
    return can_access(resource, Action.READ, scope)


def can_update(resource: str, scope: str | None = None) -> PermissionCondition:
    return can_access(resource, Action.UPDATE, scope)


def can_delete(resource: str, scope: str | None = None) -> PermissionCondition:
    return can_access(resource, Action.DELETE, scope)


def can_manage(resource: str) -> PermissionCondition:
    return can_access(resource, Action.MANAGE)


def has_all_permissions(permissions: Iterable[Permission]) -> PermissionCondition:
    return PermissionCondition(tuple(permissions), require_all=True)


def has_any_permission(permissions: Iterable[Permission]) -> PermissionCondition:
    return PermissionCondition(tuple(permissions), require_all=False)


# Resource shorthands. With an owner id, the owner also passes (permission OR ownership).


def _owned(resource: str, action: Action, owner_id: str | None) -> PermissionCondition:
    return PermissionCondition((Permission(resource, action),), resource_owner_id=owner_id)


def can_create_product() -> Condition:
    return can_create(PRODUCTS)


def can_read_product(owner_id: str | None = None) -> Condition:
    return _owned(PRODUCTS, Action.READ, owner_id)


def can_update_product(owner_id: str | None = None) -> Condition:
    return _owned(PRODUCTS, Action.UPDATE, owner_id)


def can_delete_product(owner_id: str | None = None) -> Condition:
    return _owned(PRODUCTS, Action.DELETE, owner_id)


def can_create_category() -> Condition:
    return can_create(CATEGORIES)


def can_update_category() -> Condition:
    return can_update(CATEGORIES)


def can_delete_category() -> Condition:
    return can_delete(CATEGORIES)


def can_create_page() -> Condition:
    return can_create(PAGES)


def can_read_page(owner_id: str | None = None) -> Condition:
    return _owned(PAGES, Action.READ, owner_id)


def can_update_page(owner_id: str | None = None) -> Condition:
    return _owned(PAGES, Action.UPDATE, owner_id)


def can_delete_page(owner_id: str | None = None) -> Condition:
    return _owned(PAGES, Action.DELETE, owner_id)


def can_create_media() -> Condition:
    return can_create(MEDIA)


def can_update_media(owner_id: str | None = None) -> Condition:
    return _owned(MEDIA, Action.UPDATE, owner_id)


def can_delete_media(owner_id: str | None = None) -> Condition:
    return _owned(MEDIA, Action.DELETE, owner_id)


def can_create_user() -> Condition:
    return can_create(USERS)


def can_read_user(target_user_id: str | None = None) -> Condition:
    # Reading one's own account is always allowed.
    return _owned(USERS, Action.READ, target_user_id)


def can_update_user(target_user_id: str | None = None) -> Condition:
    return _owned(USERS, Action.UPDATE, target_user_id)


def can_delete_user() -> Condition:
    # No owner shortcut: self-deletion is rejected by `guards.ensure_not_self_delete`.
    return can_delete(USERS)


# Ownership conditions


def is_owner_of(resource_owner_id: str | None) -> OwnershipCondition:
    return OwnershipCondition(resource_owner_id, OwnershipMode.OWNER)


def is_owner_or_admin(resource_owner_id: str | None) -> OwnershipCondition:
    return OwnershipCondition(resource_owner_id, OwnershipMode.OWNER_OR_ADMIN)


def is_owner_or_editor(resource_owner_id: str | None) -> OwnershipCondition:
    return OwnershipCondition(resource_owner_id, OwnershipMode.OWNER_OR_EDITOR)


# Auth conditions


def is_authenticated() -> AuthCondition:
    return AuthCondition(authenticated=True)


def is_not_authenticated() -> AuthCondition:
    return AuthCondition(authenticated=False)


# Time conditions


def is_business_hours() -> TimeCondition:
    return TimeCondition(TimeWindow.BUSINESS_HOURS)


def is_weekday() -> TimeCondition:
    return TimeCondition(TimeWindow.WEEKDAY)


def is_after_date(moment: datetime) -> TimeCondition:
    return TimeCondition(TimeWindow.AFTER, moment)


def is_before_date(moment: datetime) -> TimeCondition:
    return TimeCondition(TimeWindow.BEFORE, moment)


# Feature flags


def feature_enabled(feature: str) -> FeatureFlagCondition:
    return FeatureFlagCondition(feature)


def _never(_context: AuthorizationContext) -> bool:
    return False


class BusinessRule(enum.StrEnum):
    BUSINESS_HOURS = "business_hours"
    WEEKDAYS_ONLY = "weekdays_only"
    ADMIN_OR_OWNER = "admin_or_owner"
    EDITOR_OR_HIGHER = "editor_or_higher"


def business_rule(rule: BusinessRule | str, resource_owner_id: str | None = None) -> Condition:
    rule = BusinessRule(rule)
    if rule is BusinessRule.BUSINESS_HOURS:
        return is_business_hours()
    if rule is BusinessRule.WEEKDAYS_ONLY:
        return is_weekday()
    if rule is BusinessRule.ADMIN_OR_OWNER:
        # Without an owner id this rule never passes, even for admins.
        if resource_owner_id is None:
            return CustomCondition(_never, name="admin_or_owner")
        return is_owner_or_admin(resource_owner_id)
    return has_minimum_role(Role.EDITOR)
