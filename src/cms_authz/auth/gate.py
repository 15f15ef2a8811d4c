"""
cms_authz.auth.gate

Server-side authorization gate.

Responsibilities:
- Build the `AuthorizationContext` for a user (clock, feature flags, business hours).
- Evaluate an `AccessPolicy` into a decision and log it.
- Enforce a decision by raising `Unauthenticated` / `Forbidden`.
- Notify observers of outcomes without letting them influence the outcome.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from datetime import datetime
from typing import Protocol

from cms_authz.auth.errors import Forbidden, Unauthenticated
from cms_authz.auth.models import AuthorizationDecision, User
from cms_authz.observability.logging import get_logger
from cms_authz.permissions.conditions import AuthorizationContext
from cms_authz.permissions.policy import AccessPolicy, PolicyEvaluator
from cms_authz.permissions.resolver import PermissionResolver

log = get_logger(__name__)


class AuthorizationObserver(Protocol):
    async def on_authorized(self, user: User, policy: AccessPolicy) -> None: ...

    async def on_unauthorized(self, user: User | None, reason: str) -> None: ...


def _local_now() -> datetime:
    return datetime.now().astimezone()


class AuthorizationGate:
    """
    One instance per app (see `api.app.create_app`); holds no per-request state.
    """

    def __init__(
        self,
        evaluator: PolicyEvaluator,
        *,
        observers: Sequence[AuthorizationObserver] = (),
        enabled_features: Iterable[str] = (),
        business_hours: tuple[int, int] = (9, 17),
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        self.evaluator = evaluator
        self._observers = list(observers)
        self._features = frozenset(enabled_features)
        self._business_hours = business_hours
        self._clock = clock

    @property
    def resolver(self) -> PermissionResolver:
        return self.evaluator.resolver

    def add_observer(self, observer: AuthorizationObserver) -> None:
        self._observers.append(observer)

    def context_for(self, user: User | None) -> AuthorizationContext:
        return AuthorizationContext(
            user=user,
            resolver=self.evaluator.resolver,
            now=self._clock(),
            enabled_features=self._features,
            business_hours=self._business_hours,
        )

    def decide(
        self,
        user: User | None,
        policy: AccessPolicy,
        *,
        resource_owner_id: str | None = None,
    ) -> AuthorizationDecision:
        decision = self.evaluator.evaluate(
            self.context_for(user), policy, resource_owner_id=resource_owner_id
        )
        if decision.allowed:
            log.info("authz_allowed", **policy.describe())
        else:
            log.info(
                "authz_denied",
                reason=decision.reason,
                unauthenticated=decision.unauthenticated,
                **policy.describe(),
            )
        return decision

    async def enforce(
        self,
        user: User | None,
        policy: AccessPolicy,
        *,
        resource_owner_id: str | None = None,
    ) -> User:
        decision = self.decide(user, policy, resource_owner_id=resource_owner_id)
        if not decision.allowed:
            reason = decision.reason or "Access denied"
            await self._notify_unauthorized(user, reason)
            if decision.unauthenticated:
                raise Unauthenticated()
            raise Forbidden(reason)
        if user is None:
            raise Unauthenticated()
        await self._notify_authorized(user, policy)
        return user

    async def _notify_authorized(self, user: User, policy: AccessPolicy) -> None:
        for observer in self._observers:
            try:
                await observer.on_authorized(user, policy)
            except Exception as e:
                log.warning("authz_observer_error", observer=type(observer).__name__, error=str(e))

    async def _notify_unauthorized(self, user: User | None, reason: str) -> None:
        for observer in self._observers:
            try:
                await observer.on_unauthorized(user, reason)
            except Exception as e:
                log.warning("authz_observer_error", observer=type(observer).__name__, error=str(e))


# --- Module Notes -----------------------------------------------------------
# The gate never catches evaluator exceptions: the evaluator and composer already
# contain condition/validator failures and return a denial instead.
