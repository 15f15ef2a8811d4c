"""
cms_authz.render.gate

Conditional render gate (UI-side mirror of the server gate).

Responsibilities:
- Model identity resolution as pending / resolved (`IdentityState`).
- Decide loading / allowed / denied for a UI element (`decide_render`, pure).
- Memoize decisions across re-renders and fire callbacks on state transitions only (`RenderGate`).
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from cms_authz.auth.models import User
from cms_authz.observability.logging import get_logger
from cms_authz.permissions.conditions import AuthorizationContext
from cms_authz.permissions.policy import AccessPolicy, PolicyEvaluator

log = get_logger(__name__)

DEFAULT_DENIED_MESSAGE = "Access condition not met"


@dataclass(frozen=True, slots=True)
class IdentityState:
    """
    `settled=False` means the session lookup has not settled yet; `user` is then ignored.
    A resolved state with `user=None` is a definitive "not signed in".
    """

    settled: bool
    user: User | None = None

    @classmethod
    def pending(cls) -> IdentityState:
        return cls(settled=False)

    @classmethod
    def resolved(cls, user: User | None) -> IdentityState:
        return cls(settled=True, user=user)


@dataclass(frozen=True, slots=True)
class RenderRequest:
    policy: AccessPolicy
    resource_owner_id: str | None = None
    show_error: bool = False
    error_message: str | None = None
    has_fallback: bool = False


class RenderState(enum.StrEnum):
    LOADING = "loading"
    ALLOWED = "allowed"
    DENIED = "denied"


@dataclass(frozen=True, slots=True)
class RenderDecision:
    state: RenderState
    reason: str | None = None
    error_message: str | None = None
    render_fallback: bool = False

    @property
    def render_children(self) -> bool:
        return self.state is RenderState.ALLOWED

    @property
    def loading(self) -> bool:
        return self.state is RenderState.LOADING

    def to_payload(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "render_children": self.render_children,
            "render_fallback": self.render_fallback,
            "error_message": self.error_message,
            "reason": self.reason,
        }


LOADING = RenderDecision(state=RenderState.LOADING)


def decide_render(
    identity: IdentityState,
    request: RenderRequest,
    *,
    evaluator: PolicyEvaluator,
    context_factory: Callable[[User | None], AuthorizationContext],
) -> RenderDecision:
    """
    Pure mapping of (identity, request) to a render decision.

    While identity is pending nothing is evaluated: no condition, validator or resolver
    call happens against a partial identity.
    """
    if not identity.settled:
        return LOADING

    decision = evaluator.evaluate(
        context_factory(identity.user),
        request.policy,
        resource_owner_id=request.resource_owner_id,
    )
    if decision.allowed:
        return RenderDecision(state=RenderState.ALLOWED)

    # An explicit error display takes precedence over the fallback.
    if request.show_error:
        return RenderDecision(
            state=RenderState.DENIED,
            reason=decision.reason,
            error_message=request.error_message or DEFAULT_DENIED_MESSAGE,
        )
    return RenderDecision(
        state=RenderState.DENIED,
        reason=decision.reason,
        render_fallback=request.has_fallback,
    )


class RenderGate:
    """
    Stateful adapter for a single UI element.

    `render()` may be called on every re-render; evaluation only reruns when the
    identity or the request differ (by value) from the previous call. Callbacks fire
    once per transition into ALLOWED / DENIED and never while loading.
    """

    def __init__(
        self,
        evaluator: PolicyEvaluator,
        context_factory: Callable[[User | None], AuthorizationContext],
        *,
        on_authorized: Callable[[], None] | None = None,
        on_unauthorized: Callable[[str], None] | None = None,
    ) -> None:
        self._evaluator = evaluator
        self._context_factory = context_factory
        self._on_authorized = on_authorized
        self._on_unauthorized = on_unauthorized
        self._inputs: tuple[IdentityState, RenderRequest] | None = None
        self._decision: RenderDecision = LOADING
        self.evaluations = 0

    @property
    def decision(self) -> RenderDecision:
        return self._decision

    def render(self, identity: IdentityState, request: RenderRequest) -> RenderDecision:
        inputs = (identity, request)
        if inputs == self._inputs:
            return self._decision
        self._inputs = inputs

        previous = self._decision
        decision = decide_render(
            identity,
            request,
            evaluator=self._evaluator,
            context_factory=self._context_factory,
        )
        if identity.settled:
            self.evaluations += 1
        self._decision = decision

        if decision.state is not previous.state:
            self._fire(decision)
        return decision

    def _fire(self, decision: RenderDecision) -> None:
        # Callbacks are notifications; their failures never change the decision.
        try:
            if decision.state is RenderState.ALLOWED and self._on_authorized is not None:
                self._on_authorized()
            elif decision.state is RenderState.DENIED and self._on_unauthorized is not None:
                self._on_unauthorized(decision.reason or DEFAULT_DENIED_MESSAGE)
        except Exception as e:
            log.warning("authz_observer_error", state=decision.state.value, error=str(e))


# --- Module Notes -----------------------------------------------------------
# Equality-based memoization relies on conditions being value objects (frozen
# dataclasses from `permissions.factories`). A lambda-backed `CustomCondition` built
# anew on each render compares unequal and forces re-evaluation.
