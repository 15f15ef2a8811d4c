from __future__ import annotations

from cms_authz.auth.models import Permission, Role, User
from cms_authz.permissions import factories as f
from cms_authz.permissions.conditions import CustomCondition
from cms_authz.permissions.policy import AccessPolicy, PolicyEvaluator
from cms_authz.render.gate import (
    DEFAULT_DENIED_MESSAGE,
    IdentityState,
    RenderGate,
    RenderRequest,
    RenderState,
    decide_render,
)

UPDATE_PRODUCTS = AccessPolicy(permissions=(Permission.parse("products:update"),))


class CallCounter:
    def __init__(self) -> None:
        self.calls = 0

    def __call__(self, _ctx) -> bool:
        self.calls += 1
        return True


def test_loading_evaluates_nothing(evaluator: PolicyEvaluator, make_context) -> None:
    counter = CallCounter()
    policy = AccessPolicy(condition=CustomCondition(counter), custom_validator=counter)
    decision = decide_render(
        IdentityState.pending(),
        RenderRequest(policy),
        evaluator=evaluator,
        context_factory=make_context,
    )
    assert decision.state is RenderState.LOADING
    assert not decision.render_children
    assert counter.calls == 0


def test_allowed_and_denied(evaluator: PolicyEvaluator, make_context, editor: User, viewer: User) -> None:
    allowed = decide_render(
        IdentityState.resolved(editor),
        RenderRequest(UPDATE_PRODUCTS),
        evaluator=evaluator,
        context_factory=make_context,
    )
    assert allowed.render_children

    denied = decide_render(
        IdentityState.resolved(viewer),
        RenderRequest(UPDATE_PRODUCTS, has_fallback=True),
        evaluator=evaluator,
        context_factory=make_context,
    )
    assert denied.state is RenderState.DENIED
    assert denied.render_fallback
    assert denied.error_message is None
    assert denied.reason == "Missing required permission: products:update"


def test_show_error_takes_precedence(evaluator: PolicyEvaluator, make_context, viewer: User) -> None:
    decision = decide_render(
        IdentityState.resolved(viewer),
        RenderRequest(UPDATE_PRODUCTS, show_error=True, has_fallback=True),
        evaluator=evaluator,
        context_factory=make_context,
    )
    assert decision.error_message == DEFAULT_DENIED_MESSAGE
    assert not decision.render_fallback
    custom = decide_render(
        IdentityState.resolved(viewer),
        RenderRequest(UPDATE_PRODUCTS, show_error=True, error_message="Editors only"),
        evaluator=evaluator,
        context_factory=make_context,
    )
    assert custom.to_payload()["error_message"] == "Editors only"


def test_signed_out_is_denied_not_loading(evaluator: PolicyEvaluator, make_context) -> None:
    decision = decide_render(
        IdentityState.resolved(None),
        RenderRequest(AccessPolicy()),
        evaluator=evaluator,
        context_factory=make_context,
    )
    assert decision.state is RenderState.DENIED
    assert decision.reason == "Not authenticated"


def test_owner_rendering(evaluator: PolicyEvaluator, make_context, viewer: User) -> None:
    policy = AccessPolicy(condition=f.can_update_product("u1"))
    decision = decide_render(
        IdentityState.resolved(viewer),
        RenderRequest(policy),
        evaluator=evaluator,
        context_factory=make_context,
    )
    assert decision.render_children


def test_gate_memoizes_and_fires_on_transitions(evaluator: PolicyEvaluator, make_context, editor: User) -> None:
    events: list[str] = []
    gate = RenderGate(
        evaluator,
        make_context,
        on_authorized=lambda: events.append("authorized"),
        on_unauthorized=lambda reason: events.append(f"unauthorized:{reason}"),
    )
    request = RenderRequest(UPDATE_PRODUCTS)

    assert gate.render(IdentityState.pending(), request).loading
    assert gate.evaluations == 0
    assert events == []

    assert gate.render(IdentityState.resolved(editor), request).render_children
    # Re-render with equal inputs: no re-evaluation, no callback.
    gate.render(IdentityState.resolved(editor), RenderRequest(UPDATE_PRODUCTS))
    gate.render(IdentityState.resolved(editor), request)
    assert gate.evaluations == 1
    assert events == ["authorized"]

    demoted = User(id=editor.id, role=Role.VIEWER)
    assert gate.render(IdentityState.resolved(demoted), request).state is RenderState.DENIED
    assert events == ["authorized", "unauthorized:Missing required permission: products:update"]
    assert gate.decision.state is RenderState.DENIED


def test_gate_does_not_refire_for_same_state(evaluator: PolicyEvaluator, make_context, editor: User, admin: User) -> None:
    fired: list[str] = []
    gate = RenderGate(evaluator, make_context, on_authorized=lambda: fired.append("ok"))
    request = RenderRequest(UPDATE_PRODUCTS)
    gate.render(IdentityState.resolved(editor), request)
    gate.render(IdentityState.resolved(admin), request)
    assert gate.evaluations == 2
    assert fired == ["ok"]


def test_failing_callback_does_not_break_render(evaluator: PolicyEvaluator, make_context, viewer: User, editor: User) -> None:
    def boom(*_args) -> None:
        raise RuntimeError("metrics down")

    gate = RenderGate(evaluator, make_context, on_authorized=boom, on_unauthorized=boom)
    request = RenderRequest(AccessPolicy(permissions=(Permission.parse("users:delete"),)))

    decision = gate.render(IdentityState.resolved(viewer), request)
    assert decision.state is RenderState.DENIED
    assert decision.reason == "Missing required permission: users:delete"

    decision = gate.render(IdentityState.resolved(editor), RenderRequest(UPDATE_PRODUCTS))
    assert decision.render_children
    assert gate.decision is decision
