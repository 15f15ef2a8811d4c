"""
cms_authz.permissions.routes

Route → permission mapping.

Responsibilities:
- Declare the permissions each admin route requires, per HTTP method.
- Match concrete paths against `[param]` / `[...slug]` patterns.
- Identify public routes that need no identity at all.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from functools import cached_property

from cms_authz.auth.models import Action, Permission


@dataclass(frozen=True)
class RouteRule:
    pattern: str
    permissions: tuple[Permission, ...]
    description: str
    is_public: bool = False
    # None matches every method.
    methods: frozenset[str] | None = field(default=None)

    @cached_property
    def regex(self) -> re.Pattern[str]:
        parts = []
        for segment in self.pattern.strip("/").split("/"):
            if segment.startswith("[...") and segment.endswith("]"):
                parts.append(f"(?P<{segment[4:-1]}>.+)")
            elif segment.startswith("[") and segment.endswith("]"):
                parts.append(f"(?P<{segment[1:-1]}>[^/]+)")
            else:
                parts.append(re.escape(segment))
        return re.compile("^/" + "/".join(p for p in parts if p) + "$")

    def matches_method(self, method: str | None) -> bool:
        return method is None or self.methods is None or method.upper() in self.methods


def _normalize(path: str) -> str:
    if path != "/" and path.endswith("/"):
        return path.rstrip("/") or "/"
    return path


def _rule(
    pattern: str,
    description: str,
    *keys: str,
    methods: Iterable[str] | None = None,
    is_public: bool = False,
) -> RouteRule:
    return RouteRule(
        pattern=pattern,
        permissions=tuple(Permission.parse(k) for k in keys),
        description=description,
        is_public=is_public,
        methods=frozenset(m.upper() for m in methods) if methods is not None else None,
    )


def _crud(base: str, resource: str, label: str) -> list[RouteRule]:
    item = f"{base}/[id]"
    return [
        _rule(base, f"List {label}", f"{resource}:{Action.READ}", methods=["GET"]),
        _rule(base, f"Create {label}", f"{resource}:{Action.CREATE}", methods=["POST"]),
        _rule(item, f"Read {label}", f"{resource}:{Action.READ}", methods=["GET"]),
        _rule(item, f"Update {label}", f"{resource}:{Action.UPDATE}", methods=["PUT", "PATCH"]),
        _rule(item, f"Delete {label}", f"{resource}:{Action.DELETE}", methods=["DELETE"]),
    ]


DEFAULT_ROUTE_RULES: tuple[RouteRule, ...] = (
    _rule("/", "Home page", is_public=True),
    _rule("/auth/login", "Login page", is_public=True),
    _rule("/api/health", "Health check", is_public=True),
    *_crud("/api/products", "products", "products"),
    *_crud("/api/categories", "categories", "categories"),
    *_crud("/api/pages", "pages", "pages"),
    *_crud("/api/media", "media", "media"),
    _rule("/api/orders", "List orders", "orders:read", methods=["GET"]),
    _rule("/api/orders/[id]", "Read order", "orders:read", methods=["GET"]),
    _rule("/api/orders/[id]", "Update order", "orders:update", methods=["PUT", "PATCH"]),
    *_crud("/api/users", "users", "users"),
    _rule("/api/users/[id]/deactivate", "Deactivate user", "users:update:own"),
    _rule("/api/analytics", "Analytics dashboard", "analytics:read"),
    _rule("/api/analytics/[...slug]", "Analytics reports", "analytics:read"),
    _rule("/api/security", "Security dashboard", "security:read", methods=["GET"]),
    _rule("/api/security", "Security settings", "security:manage", methods=["PUT", "PATCH"]),
    _rule("/api/security/audit", "Audit trail", "security:read", methods=["GET"]),
    _rule("/api/settings", "System settings", "settings:read", methods=["GET"]),
    _rule("/api/settings", "Update system settings", "settings:update", methods=["PUT", "PATCH"]),
)


class RoutePermissionResolver:
    def __init__(self, rules: Sequence[RouteRule] = DEFAULT_ROUTE_RULES) -> None:
        self._rules = list(rules)

    @property
    def rules(self) -> list[RouteRule]:
        return list(self._rules)

    def find_rule(self, path: str, method: str | None = None) -> RouteRule | None:
        path = _normalize(path)
        # Literal patterns win over dynamic ones regardless of declaration order.
        for rule in self._rules:
            if rule.pattern == path and rule.matches_method(method):
                return rule
        for rule in self._rules:
            if rule.matches_method(method) and rule.regex.match(path):
                return rule
        return None

    def permissions_for(self, path: str, method: str | None = None) -> tuple[Permission, ...]:
        rule = self.find_rule(path, method)
        return rule.permissions if rule else ()

    def is_public(self, path: str) -> bool:
        rule = self.find_rule(path)
        return rule is not None and rule.is_public

    def params_for(self, path: str, method: str | None = None) -> dict[str, str]:
        rule = self.find_rule(path, method)
        if rule is None:
            return {}
        match = rule.regex.match(_normalize(path))
        return match.groupdict() if match else {}

    def rules_for_resource(self, resource: str) -> list[RouteRule]:
        return [r for r in self._rules if any(p.resource == resource for p in r.permissions)]


# --- Module Notes -----------------------------------------------------------
# Unknown paths resolve to no permissions; `auth.deps.require_route_access` then only
# requires authentication. Register a rule for every route that needs more.
