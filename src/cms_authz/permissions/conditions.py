"""
cms_authz.permissions.conditions

Composable authorization conditions.

Responsibilities:
- Define the `Condition` interface (`evaluate(context) -> bool`) and its concrete variants.
- Evaluate a primary condition plus optional extra conditions under AND / OR / NOT.
- Contain every exception raised by a condition and downgrade it to `False`.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol, runtime_checkable

from cms_authz.auth.models import Permission, Role, User, is_authenticated
from cms_authz.observability.logging import get_logger
from cms_authz.permissions.ownership import is_owner, is_owner_or_admin, is_owner_or_editor
from cms_authz.permissions.resolver import PermissionResolver
from cms_authz.permissions.roles import has_any_role, has_minimum_role, has_role

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class AuthorizationContext:
    """
    Everything a condition may look at. Built once per evaluation; never mutated.
    """

    user: User | None
    resolver: PermissionResolver
    now: datetime
    enabled_features: frozenset[str] = frozenset()
    business_hours: tuple[int, int] = (9, 17)

    @property
    def is_authenticated(self) -> bool:
        return is_authenticated(self.user)


@runtime_checkable
class Condition(Protocol):
    def evaluate(self, context: AuthorizationContext) -> bool: ...


class Operator(enum.StrEnum):
    AND = "AND"
    OR = "OR"
    NOT = "NOT"


class RoleMode(enum.StrEnum):
    EXACT = "exact"
    MINIMUM = "minimum"
    ANY = "any"


@dataclass(frozen=True, slots=True)
class RoleCondition:
    mode: RoleMode
    roles: tuple[Role, ...]

    def evaluate(self, context: AuthorizationContext) -> bool:
        if self.mode is RoleMode.ANY:
            return has_any_role(context.user, self.roles)
        (role,) = self.roles
        if self.mode is RoleMode.MINIMUM:
            return has_minimum_role(context.user, role)
        return has_role(context.user, role)


@dataclass(frozen=True, slots=True)
class PermissionCondition:
    permissions: tuple[Permission, ...]
    require_all: bool = True
    # When set, the owner passes even without the permission.
    resource_owner_id: str | None = None

    def evaluate(self, context: AuthorizationContext) -> bool:
        if is_owner(context.user, self.resource_owner_id):
            return True
        if self.require_all:
            return context.resolver.has_all_permissions(context.user, self.permissions)
        return context.resolver.has_any_permission(context.user, self.permissions)


class OwnershipMode(enum.StrEnum):
    OWNER = "owner"
    OWNER_OR_ADMIN = "owner_or_admin"
    OWNER_OR_EDITOR = "owner_or_editor"


@dataclass(frozen=True, slots=True)
class OwnershipCondition:
    resource_owner_id: str | None
    mode: OwnershipMode = OwnershipMode.OWNER

    def evaluate(self, context: AuthorizationContext) -> bool:
        if self.mode is OwnershipMode.OWNER_OR_ADMIN:
            return is_owner_or_admin(context.user, self.resource_owner_id)
        if self.mode is OwnershipMode.OWNER_OR_EDITOR:
            return is_owner_or_editor(context.user, self.resource_owner_id)
        return is_owner(context.user, self.resource_owner_id)


@dataclass(frozen=True, slots=True)
class AuthCondition:
    authenticated: bool = True

    def evaluate(self, context: AuthorizationContext) -> bool:
        return context.is_authenticated == self.authenticated


@dataclass(frozen=True, slots=True)
class CustomCondition:
    """
    Wraps an arbitrary predicate of the context. May raise; the composer contains it.
    """

    predicate: Callable[[AuthorizationContext], bool]
    name: str = field(default="custom", compare=False)

    def evaluate(self, context: AuthorizationContext) -> bool:
        return bool(self.predicate(context))


class TimeWindow(enum.StrEnum):
    BUSINESS_HOURS = "business_hours"
    WEEKDAY = "weekday"
    AFTER = "after"
    BEFORE = "before"


def _align(moment: datetime, now: datetime) -> datetime:
    # Naive boundaries are read in the clock's timezone.
    if moment.tzinfo is None and now.tzinfo is not None:
        return moment.replace(tzinfo=now.tzinfo)
    return moment


@dataclass(frozen=True, slots=True)
class TimeCondition:
    """
    Clock-only predicate; ignores the user entirely.
    """

    window: TimeWindow
    moment: datetime | None = None

    def evaluate(self, context: AuthorizationContext) -> bool:
        now = context.now
        if self.window is TimeWindow.BUSINESS_HOURS:
            start, end = context.business_hours
            return start <= now.hour < end
        if self.window is TimeWindow.WEEKDAY:
            return now.weekday() < 5
        if self.moment is None:
            raise ValueError(f"{self.window} condition requires a moment")
        moment = _align(self.moment, now)
        if self.window is TimeWindow.AFTER:
            return now > moment
        return now < moment


@dataclass(frozen=True, slots=True)
class FeatureFlagCondition:
    feature: str

    def evaluate(self, context: AuthorizationContext) -> bool:
        return self.feature in context.enabled_features


class ConditionComposer:
    """
    Evaluates a primary condition plus optional extras under a logical operator.

    Any exception raised by a condition is caught where the condition is invoked and
    counts as `False`; it is logged only when `debug` is enabled. Under `NOT` that means
    a raising condition yields `True` (see `evaluate_not_strict` for deny-on-error).
    """

    def __init__(self, *, debug: bool = False) -> None:
        self.debug = debug

    def safe_evaluate(self, condition: Condition, context: AuthorizationContext) -> bool:
        try:
            return bool(condition.evaluate(context))
        except Exception as e:
            if self.debug:
                log.warning(
                    "condition_evaluation_error",
                    condition=type(condition).__name__,
                    error=str(e),
                    error_type=type(e).__name__,
                )
            return False

    def evaluate(
        self,
        context: AuthorizationContext,
        condition: Condition,
        conditions: tuple[Condition, ...] | list[Condition] = (),
        operator: Operator | str | None = Operator.AND,
    ) -> bool:
        try:
            op = Operator.AND if operator is None else Operator(operator)
        except ValueError:
            # Unknown operators evaluate the primary condition alone.
            return self.safe_evaluate(condition, context)
        if self.debug:
            log.debug("conditions_evaluating", count=1 + len(conditions), operator=op.value)

        if op is Operator.NOT:
            result = not self.safe_evaluate(condition, context)
        elif op is Operator.OR:
            result = any(self.safe_evaluate(c, context) for c in (condition, *conditions))
        else:
            result = all(self.safe_evaluate(c, context) for c in (condition, *conditions))

        if self.debug:
            log.debug("conditions_evaluated", operator=op.value, result=result)
        return result

    def evaluate_not_strict(self, context: AuthorizationContext, condition: Condition) -> bool:
        """
        Negation that denies when the condition raises instead of allowing.
        """
        try:
            return not bool(condition.evaluate(context))
        except Exception as e:
            if self.debug:
                log.warning("condition_evaluation_error", condition=type(condition).__name__, error=str(e))
            return False


# --- Module Notes -----------------------------------------------------------
# Conditions are frozen dataclasses so render-gate inputs can be compared for equality
# when deciding whether to re-evaluate. Factories live in `permissions.factories`.
