"""
cms_authz.auth.models

Auth domain models.

Responsibilities:
- Define the authorization subject (`User`) injected into endpoints.
- Define the permission request (`Permission`) and its vocabulary (`Role`, `Action`).
- Define the decision type returned by every evaluation (`AuthorizationDecision`).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Role(enum.StrEnum):
    # Exactly one role per user; ordering lives in `permissions.roles`.
    VIEWER = "VIEWER"
    EDITOR = "EDITOR"
    ADMIN = "ADMIN"


class Action(enum.StrEnum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    # Implies every other action on the same resource.
    MANAGE = "manage"


@dataclass(frozen=True, slots=True)
class User:
    """
    Identity subject to authorization, built per request from the session and the users table.
    """

    id: str
    role: Role
    is_active: bool = True


@dataclass(frozen=True, slots=True)
class Permission:
    """
    A single authorization request. Carries no subject; it is evaluated against a `User`.
    """

    resource: str
    action: Action
    scope: str | None = None

    @classmethod
    def parse(cls, key: str) -> Permission:
        """
        Parse `resource:action[:scope]`, e.g. `products:update:own`.
        """
        parts = key.split(":")
        if len(parts) not in (2, 3) or not parts[0]:
            raise ValueError(f"Invalid permission key: {key!r}")
        scope = parts[2] if len(parts) == 3 and parts[2] else None
        return cls(resource=parts[0], action=Action(parts[1]), scope=scope)

    @property
    def key(self) -> str:
        return f"{self.resource}:{self.action.value}"

    def __str__(self) -> str:
        if self.scope:
            return f"{self.key}:{self.scope}"
        return self.key


@dataclass(frozen=True, slots=True)
class AuthorizationDecision:
    """
    Outcome of an authorization check. A reason is attached only on denial.

    `unauthenticated` distinguishes "no usable identity" (401) from "identity lacks access" (403).
    """

    allowed: bool
    reason: str | None = None
    unauthenticated: bool = False

    @classmethod
    def allow(cls) -> AuthorizationDecision:
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str, *, unauthenticated: bool = False) -> AuthorizationDecision:
        return cls(allowed=False, reason=reason, unauthenticated=unauthenticated)

    def __bool__(self) -> bool:
        return self.allowed


def is_authenticated(user: User | None) -> bool:
    # Inactive accounts are treated exactly like missing identities.
    return user is not None and user.is_active


# --- Module Notes -----------------------------------------------------------
# Keep these models free of framework imports; they are shared by the server gate,
# the render gate and the persistence mappers.
