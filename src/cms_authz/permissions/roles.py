"""
cms_authz.permissions.roles

Role hierarchy checks.

Responsibilities:
- Define the static role ordering (VIEWER < EDITOR < ADMIN).
- Provide exact, minimum and any-of role checks for a user.
"""

from __future__ import annotations

from collections.abc import Iterable
from types import MappingProxyType

from cms_authz.auth.models import Role, User, is_authenticated

ROLE_HIERARCHY = MappingProxyType(
    {
        Role.VIEWER: 1,
        Role.EDITOR: 2,
        Role.ADMIN: 3,
    }
)


def role_level(role: Role | None) -> int:
    if role is None:
        return 0
    return ROLE_HIERARCHY.get(role, 0)


def has_role(user: User | None, role: Role) -> bool:
    return is_authenticated(user) and user.role == role


def has_minimum_role(user: User | None, role: Role) -> bool:
    return is_authenticated(user) and role_level(user.role) >= role_level(role)


def has_any_role(user: User | None, roles: Iterable[Role]) -> bool:
    return is_authenticated(user) and user.role in frozenset(roles)


def is_higher_role(role: Role, other: Role) -> bool:
    return role_level(role) > role_level(other)


def is_equal_or_higher_role(role: Role, other: Role) -> bool:
    return role_level(role) >= role_level(other)


# --- Module Notes -----------------------------------------------------------
# The ordering is only used for minimum-role checks. Default permission grants are
# enumerated per role in `permissions.resolver` and never derived from these levels.
