"""
cms_authz.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Convert a bearer token into a `User` loaded from the users table.
- Enforce access policies via reusable dependency factories (`require_access`).
- Enforce the route → permission table (`require_route_access`).
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from cms_authz.api.deps import db_session, settings_dep
from cms_authz.auth.errors import Unauthenticated
from cms_authz.auth.gate import AuthorizationGate
from cms_authz.auth.jwt import JwtConfig, JwtValidationError, session_claims
from cms_authz.auth.models import Permission, Role, User, is_authenticated
from cms_authz.db.repositories.users import UserRepo
from cms_authz.observability.logging import get_logger
from cms_authz.permissions.conditions import AuthorizationContext, Condition, Operator
from cms_authz.permissions.policy import AccessPolicy
from cms_authz.permissions.routes import RoutePermissionResolver
from cms_authz.settings import Settings

log = get_logger(__name__)

_bearer = HTTPBearer(auto_error=False)


def jwt_config(settings: Settings) -> JwtConfig:
    return JwtConfig(
        alg=settings.jwt_alg,
        issuer=settings.jwt_issuer,
        audience=settings.jwt_audience,
        secret=settings.jwt_secret,
    )


def gate_dep(request: Request) -> AuthorizationGate:
    return request.app.state.gate  # type: ignore[attr-defined]


def route_table_dep(request: Request) -> RoutePermissionResolver:
    return request.app.state.route_permissions  # type: ignore[attr-defined]


async def get_optional_user(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(settings_dep),
    session: AsyncSession = Depends(db_session),
) -> User | None:
    """
    Resolve the session identity, or None when there is no usable one.

    Inactive accounts are returned as-is; the policy evaluator treats them as
    unauthenticated before any other check runs.
    """
    if creds is None or not creds.credentials:
        return None

    try:
        claims = session_claims(cfg=jwt_config(settings), token=creds.credentials)
    except JwtValidationError as e:
        log.info("authn_failed", error=str(e))
        return None

    # The users table is authoritative for role and active flag.
    account = await UserRepo(session).get(claims.subject)
    if account is None:
        log.info("authn_failed", error="unknown subject", subject=claims.subject)
        return None

    user = account.to_user()
    structlog.contextvars.bind_contextvars(user_id=user.id, role=user.role.value)
    return user


async def get_current_user(user: User | None = Depends(get_optional_user)) -> User:
    if user is None or not is_authenticated(user):
        raise Unauthenticated()
    return user


def _no_owner() -> None:
    return None


def _as_permissions(permissions: Iterable[Permission | str]) -> tuple[Permission, ...]:
    return tuple(p if isinstance(p, Permission) else Permission.parse(p) for p in permissions)


def require_access(
    *permissions: Permission | str,
    require_all: bool = True,
    required_role: Role | None = None,
    minimum_role: Role | None = None,
    allowed_roles: Iterable[Role] = (),
    allow_owner_access: bool = False,
    owner_id: Callable[..., Any] | None = None,
    condition: Condition | None = None,
    conditions: Iterable[Condition] = (),
    operator: Operator = Operator.AND,
    custom_validator: Callable[[AuthorizationContext], bool] | None = None,
):
    """
    Dependency factory returning the authorized `User`.

    `owner_id` is itself a FastAPI dependency (it may read path params or the DB) that
    yields the owner id of the target resource, used for owner access and ownership
    conditions.
    """
    policy = AccessPolicy(
        permissions=_as_permissions(permissions),
        require_all=require_all,
        required_role=required_role,
        minimum_role=minimum_role,
        allowed_roles=tuple(allowed_roles),
        allow_owner_access=allow_owner_access,
        condition=condition,
        conditions=tuple(conditions),
        operator=operator,
        custom_validator=custom_validator,
    )

    async def _dep(
        user: User | None = Depends(get_optional_user),
        owner: str | None = Depends(owner_id or _no_owner),
        gate: AuthorizationGate = Depends(gate_dep),
    ) -> User:
        return await gate.enforce(user, policy, resource_owner_id=owner)

    return _dep


def require_route_access(
    *,
    allow_owner_access: bool = False,
    owner_id: Callable[..., Any] | None = None,
):
    """
    Like `require_access`, with permissions looked up from the route table by the
    request path and method. Public routes return the (possibly absent) user unchecked.
    """

    async def _dep(
        request: Request,
        user: User | None = Depends(get_optional_user),
        owner: str | None = Depends(owner_id or _no_owner),
        gate: AuthorizationGate = Depends(gate_dep),
        routes: RoutePermissionResolver = Depends(route_table_dep),
    ) -> User | None:
        rule = routes.find_rule(request.url.path, request.method)
        if rule is not None and rule.is_public:
            return user
        policy = AccessPolicy(
            permissions=rule.permissions if rule is not None else (),
            allow_owner_access=allow_owner_access,
        )
        return await gate.enforce(user, policy, resource_owner_id=owner)

    return _dep


# --- Module Notes -----------------------------------------------------------
# Every denial goes through `AuthorizationGate.enforce`, so 401/403 responses, the
# `authz_denied` log event and the audit row are produced in one place.
