"""
cms_authz.api.routers.me

Current-user endpoints.

Responsibilities:
- Return the authenticated identity (`/api/me`).
- Return the capability feed the admin UI uses to hide/disable elements (`/api/me/capabilities`).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from cms_authz.auth.deps import gate_dep, get_current_user
from cms_authz.auth.gate import AuthorizationGate
from cms_authz.auth.models import Action, Role, User
from cms_authz.permissions.resolver import KNOWN_RESOURCES
from cms_authz.permissions.roles import has_minimum_role, has_role

router = APIRouter(prefix="/api/me", tags=["me"])


class MeResponse(BaseModel):
    id: str
    role: Role
    is_active: bool


class CapabilitiesResponse(BaseModel):
    user_id: str
    role: Role
    is_admin: bool
    is_editor_or_higher: bool
    accessible_resources: list[str]
    # resource -> action -> allowed
    permissions: dict[str, dict[str, bool]]


@router.get("", response_model=MeResponse)
async def get_me(user: User = Depends(get_current_user)) -> MeResponse:
    return MeResponse(id=user.id, role=user.role, is_active=user.is_active)


@router.get("/capabilities", response_model=CapabilitiesResponse)
async def get_capabilities(
    user: User = Depends(get_current_user),
    gate: AuthorizationGate = Depends(gate_dep),
) -> CapabilitiesResponse:
    resolver = gate.resolver
    return CapabilitiesResponse(
        user_id=user.id,
        role=user.role,
        is_admin=has_role(user, Role.ADMIN),
        is_editor_or_higher=has_minimum_role(user, Role.EDITOR),
        accessible_resources=resolver.accessible_resources(user),
        permissions={
            resource: {a.value: resolver.can_access(user, resource, a) for a in Action}
            for resource in KNOWN_RESOURCES
        },
    )


# --- Module Notes -----------------------------------------------------------
# The feed is advisory: every route still runs through the server gate.
