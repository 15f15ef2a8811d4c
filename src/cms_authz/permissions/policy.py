"""
cms_authz.permissions.policy

Access requirements and their evaluation.

Responsibilities:
- Describe what a route or UI element requires (`AccessPolicy`).
- Evaluate a policy into an `AuthorizationDecision` with a stable reason string.
- Shared by the server gate (`auth.gate`) and the render gate (`render.gate`).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from cms_authz.auth.models import AuthorizationDecision, Permission, Role, is_authenticated
from cms_authz.observability.logging import get_logger
from cms_authz.permissions.conditions import (
    AuthorizationContext,
    Condition,
    ConditionComposer,
    Operator,
)
from cms_authz.permissions.ownership import OwnershipEvaluator
from cms_authz.permissions.resolver import PermissionResolver
from cms_authz.permissions.roles import has_minimum_role

log = get_logger(__name__)

NOT_AUTHENTICATED = "Not authenticated"
CONDITION_NOT_MET = "Condition not met"
CUSTOM_VALIDATION_FAILED = "Custom validation failed"
CUSTOM_VALIDATION_ERROR = "Custom validation error"


@dataclass(frozen=True, slots=True)
class AccessPolicy:
    """
    Requirements checked in declaration order; the first failing one decides the reason.
    Empty fields are skipped, so `AccessPolicy()` only requires an authenticated user.
    """

    permissions: tuple[Permission, ...] = ()
    require_all: bool = True
    required_role: Role | None = None
    minimum_role: Role | None = None
    allowed_roles: tuple[Role, ...] = ()
    allow_owner_access: bool = False
    condition: Condition | None = None
    conditions: tuple[Condition, ...] = ()
    operator: Operator = Operator.AND
    custom_validator: Callable[[AuthorizationContext], bool] | None = None

    def describe(self) -> dict[str, object]:
        # Log-friendly summary; callables are not rendered.
        return {
            "permissions": [str(p) for p in self.permissions],
            "require_all": self.require_all,
            "required_role": self.required_role,
            "minimum_role": self.minimum_role,
            "allowed_roles": list(self.allowed_roles),
            "allow_owner_access": self.allow_owner_access,
        }


class PolicyEvaluator:
    def __init__(self, resolver: PermissionResolver, composer: ConditionComposer) -> None:
        self.resolver = resolver
        self.composer = composer
        self._ownership = OwnershipEvaluator(resolver)

    def evaluate(
        self,
        context: AuthorizationContext,
        policy: AccessPolicy,
        *,
        resource_owner_id: str | None = None,
    ) -> AuthorizationDecision:
        user = context.user
        if not is_authenticated(user):
            return AuthorizationDecision.deny(NOT_AUTHENTICATED, unauthenticated=True)

        if policy.required_role is not None and user.role != policy.required_role:
            return AuthorizationDecision.deny(
                f"Required role: {policy.required_role}, current role: {user.role}"
            )

        if policy.minimum_role is not None and not has_minimum_role(user, policy.minimum_role):
            return AuthorizationDecision.deny(
                f"Minimum role required: {policy.minimum_role}, current role: {user.role}"
            )

        if policy.allowed_roles and user.role not in policy.allowed_roles:
            allowed = ", ".join(policy.allowed_roles)
            return AuthorizationDecision.deny(
                f"Allowed roles: {allowed}, current role: {user.role}"
            )

        if policy.permissions:
            denial = self._check_permissions(context, policy, resource_owner_id)
            if denial is not None:
                return denial

        if policy.condition is not None:
            met = self.composer.evaluate(
                context, policy.condition, policy.conditions, policy.operator
            )
            if not met:
                return AuthorizationDecision.deny(CONDITION_NOT_MET)

        if policy.custom_validator is not None:
            return self._run_custom_validator(context, policy.custom_validator)

        return AuthorizationDecision.allow()

    def _granted(
        self,
        context: AuthorizationContext,
        permission: Permission,
        policy: AccessPolicy,
        resource_owner_id: str | None,
    ) -> bool:
        return self._ownership.can_access(
            context.user,
            permission,
            resource_owner_id=resource_owner_id,
            allow_owner_access=policy.allow_owner_access,
        )

    def _check_permissions(
        self,
        context: AuthorizationContext,
        policy: AccessPolicy,
        resource_owner_id: str | None,
    ) -> AuthorizationDecision | None:
        if policy.require_all:
            for permission in policy.permissions:
                if not self._granted(context, permission, policy, resource_owner_id):
                    return AuthorizationDecision.deny(
                        f"Missing required permission: {permission}"
                    )
            return None

        if any(self._granted(context, p, policy, resource_owner_id) for p in policy.permissions):
            return None
        wanted = ", ".join(str(p) for p in policy.permissions)
        return AuthorizationDecision.deny(f"Missing any of required permissions: {wanted}")

    def _run_custom_validator(
        self,
        context: AuthorizationContext,
        validator: Callable[[AuthorizationContext], bool],
    ) -> AuthorizationDecision:
        # Distinguish "returned False" from "raised" for the reason string; both deny.
        try:
            valid = bool(validator(context))
        except Exception as e:
            if self.composer.debug:
                log.warning("custom_validator_error", error=str(e), error_type=type(e).__name__)
            return AuthorizationDecision.deny(CUSTOM_VALIDATION_ERROR)
        if not valid:
            return AuthorizationDecision.deny(CUSTOM_VALIDATION_FAILED)
        return AuthorizationDecision.allow()


# --- Module Notes -----------------------------------------------------------
# Check order follows the admin UI guards: authentication, exact role, minimum role,
# allowed roles, permissions (with owner widening), composed condition, custom validator.
