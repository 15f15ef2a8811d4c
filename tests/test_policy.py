from __future__ import annotations

import pytest

from cms_authz.auth.models import Permission, Role, User
from cms_authz.permissions import factories as f
from cms_authz.permissions.conditions import Operator
from cms_authz.permissions.policy import (
    CONDITION_NOT_MET,
    CUSTOM_VALIDATION_ERROR,
    CUSTOM_VALIDATION_FAILED,
    NOT_AUTHENTICATED,
    AccessPolicy,
    PolicyEvaluator,
)


def perms(*keys: str) -> tuple[Permission, ...]:
    return tuple(Permission.parse(k) for k in keys)


def test_empty_policy_requires_authentication_only(evaluator: PolicyEvaluator, make_context, viewer: User) -> None:
    assert evaluator.evaluate(make_context(viewer), AccessPolicy()).allowed
    denied = evaluator.evaluate(make_context(None), AccessPolicy())
    assert not denied
    assert denied.reason == NOT_AUTHENTICATED
    assert denied.unauthenticated


def test_inactive_user_is_unauthenticated(evaluator: PolicyEvaluator, make_context) -> None:
    inactive = User(id="x", role=Role.ADMIN, is_active=False)
    decision = evaluator.evaluate(make_context(inactive), AccessPolicy(permissions=perms("products:read")))
    assert decision.unauthenticated
    assert decision.reason == NOT_AUTHENTICATED


def test_editor_scenario(evaluator: PolicyEvaluator, make_context, editor: User) -> None:
    ctx = make_context(editor)
    assert evaluator.evaluate(ctx, AccessPolicy(permissions=perms("products:create"))).allowed
    denied = evaluator.evaluate(ctx, AccessPolicy(permissions=perms("users:delete")))
    assert not denied.allowed
    assert not denied.unauthenticated
    assert denied.reason == "Missing required permission: users:delete"


def test_require_any_reason(evaluator: PolicyEvaluator, make_context, viewer: User) -> None:
    policy = AccessPolicy(permissions=perms("users:read", "security:read"), require_all=False)
    decision = evaluator.evaluate(make_context(viewer), policy)
    assert decision.reason == "Missing any of required permissions: users:read, security:read"
    policy = AccessPolicy(permissions=perms("users:read", "products:read"), require_all=False)
    assert evaluator.evaluate(make_context(viewer), policy).allowed


def test_role_requirements_and_reasons(evaluator: PolicyEvaluator, make_context, editor: User) -> None:
    ctx = make_context(editor)
    assert (
        evaluator.evaluate(ctx, AccessPolicy(required_role=Role.ADMIN)).reason
        == "Required role: ADMIN, current role: EDITOR"
    )
    assert (
        evaluator.evaluate(ctx, AccessPolicy(minimum_role=Role.ADMIN)).reason
        == "Minimum role required: ADMIN, current role: EDITOR"
    )
    assert (
        evaluator.evaluate(ctx, AccessPolicy(allowed_roles=(Role.VIEWER, Role.ADMIN))).reason
        == "Allowed roles: VIEWER, ADMIN, current role: EDITOR"
    )
    assert evaluator.evaluate(ctx, AccessPolicy(minimum_role=Role.VIEWER)).allowed


def test_checks_run_in_order(evaluator: PolicyEvaluator, make_context, viewer: User) -> None:
    calls: list[str] = []

    def validator(_ctx) -> bool:
        calls.append("validator")
        return True

    policy = AccessPolicy(
        required_role=Role.ADMIN,
        permissions=perms("users:delete"),
        condition=f.is_admin(),
        custom_validator=validator,
    )
    decision = evaluator.evaluate(make_context(viewer), policy)
    assert decision.reason.startswith("Required role")
    assert calls == []


def test_owner_access(evaluator: PolicyEvaluator, make_context, viewer: User) -> None:
    policy = AccessPolicy(permissions=perms("products:update"), allow_owner_access=True)
    ctx = make_context(viewer)
    assert evaluator.evaluate(ctx, policy, resource_owner_id="u1").allowed
    denied = evaluator.evaluate(ctx, policy, resource_owner_id="u2")
    assert denied.reason == "Missing required permission: products:update"
    closed = AccessPolicy(permissions=perms("products:update"))
    assert not evaluator.evaluate(ctx, closed, resource_owner_id="u1").allowed


def test_condition_not_met(evaluator: PolicyEvaluator, make_context, viewer: User) -> None:
    policy = AccessPolicy(condition=f.is_admin(), conditions=(f.is_viewer(),), operator=Operator.OR)
    assert evaluator.evaluate(make_context(viewer), policy).allowed
    policy = AccessPolicy(condition=f.feature_enabled("beta"))
    assert evaluator.evaluate(make_context(viewer), policy).reason == CONDITION_NOT_MET


@pytest.mark.parametrize(
    ("validator", "reason"),
    [
        (lambda _ctx: False, CUSTOM_VALIDATION_FAILED),
        (lambda _ctx: 1 / 0, CUSTOM_VALIDATION_ERROR),
    ],
)
def test_custom_validator_failures_deny(evaluator: PolicyEvaluator, make_context, viewer: User, validator, reason) -> None:
    decision = evaluator.evaluate(make_context(viewer), AccessPolicy(custom_validator=validator))
    assert not decision.allowed
    assert decision.reason == reason
    assert not decision.unauthenticated


def test_custom_validator_sees_context(evaluator: PolicyEvaluator, make_context, viewer: User) -> None:
    policy = AccessPolicy(custom_validator=lambda ctx: ctx.user.id == "u1")
    assert evaluator.evaluate(make_context(viewer), policy).allowed


def test_describe_is_log_friendly() -> None:
    policy = AccessPolicy(permissions=perms("pages:update:own"), minimum_role=Role.EDITOR)
    described = policy.describe()
    assert described["permissions"] == ["pages:update:own"]
    assert described["minimum_role"] == Role.EDITOR
