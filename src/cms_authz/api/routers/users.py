"""
cms_authz.api.routers.users

Admin user management.

Responsibilities:
- List/read/create/update/delete user accounts behind the route table.
- Apply account-management guards next to each mutation (self-delete, role changes,
  self-deactivation), in addition to the coarse `users:*` permission.
"""

from __future__ import annotations

from collections.abc import Awaitable
from typing import TypeVar

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED, HTTP_204_NO_CONTENT

from cms_authz.api.deps import db_session
from cms_authz.auth.deps import require_route_access
from cms_authz.auth.errors import Conflict, NotFound
from cms_authz.auth.models import Role, User
from cms_authz.db.models import UserAccount
from cms_authz.db.repositories.audit import AuditRepo
from cms_authz.db.repositories.users import UserRepo
from cms_authz.observability.logging import get_logger
from cms_authz.permissions.guards import (
    ensure_can_manage,
    ensure_not_self_deactivate,
    ensure_not_self_delete,
    ensure_role_change_allowed,
    strip_self_elevation,
)

log = get_logger(__name__)

T = TypeVar("T")

router = APIRouter(prefix="/api/users", tags=["users"])


class UserResponse(BaseModel):
    id: str
    email: str
    name: str
    role: Role
    is_active: bool

    @classmethod
    def of(cls, account: UserAccount) -> UserResponse:
        return cls(
            id=account.id,
            email=account.email,
            name=account.name,
            role=account.role,
            is_active=account.is_active,
        )


class UserCreateRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    name: str = Field(default="", max_length=256)
    role: Role = Role.VIEWER


class UserUpdateRequest(BaseModel):
    email: str | None = Field(default=None, min_length=3, max_length=320)
    name: str | None = Field(default=None, max_length=256)
    role: Role | None = None


def target_user_id(user_id: str) -> str:
    # The target account is "owned" by itself for self-service access.
    return user_id


async def _write(session: AsyncSession, op: Awaitable[T]) -> T:
    try:
        return await op
    except IntegrityError as e:
        await session.rollback()
        log.info("user_write_conflict", error=str(e.orig))
        raise Conflict("Email already in use") from e


async def _load(session: AsyncSession, user_id: str) -> UserAccount:
    account = await UserRepo(session).get(user_id)
    if account is None:
        raise NotFound("User")
    return account


@router.get("", response_model=list[UserResponse])
async def list_users(
    _: User = Depends(require_route_access()),
    session: AsyncSession = Depends(db_session),
) -> list[UserResponse]:
    return [UserResponse.of(a) for a in await UserRepo(session).list()]


@router.post("", response_model=UserResponse, status_code=HTTP_201_CREATED)
async def create_user(
    body: UserCreateRequest,
    actor: User = Depends(require_route_access()),
    session: AsyncSession = Depends(db_session),
) -> UserResponse:
    account = await _write(
        session, UserRepo(session).create(email=body.email, name=body.name, role=body.role)
    )
    await AuditRepo(session).add(
        actor=actor.id,
        event_type="user.created",
        details={"target": account.id, "role": account.role.value},
    )
    await session.commit()
    return UserResponse.of(account)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    _: User = Depends(require_route_access(allow_owner_access=True, owner_id=target_user_id)),
    session: AsyncSession = Depends(db_session),
) -> UserResponse:
    return UserResponse.of(await _load(session, user_id))


@router.patch("/{user_id}", response_model=UserResponse)
@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    body: UserUpdateRequest,
    actor: User = Depends(require_route_access(allow_owner_access=True, owner_id=target_user_id)),
    session: AsyncSession = Depends(db_session),
) -> UserResponse:
    account = await _load(session, user_id)
    ensure_can_manage(actor, account.to_user())

    requested = body.model_dump(exclude_unset=True, exclude_none=True)
    changes = strip_self_elevation(actor, user_id, requested)
    if "role" in requested and "role" not in changes:
        log.info("role_change_ignored", target=user_id, requested_role=str(requested["role"]))

    new_role = changes.get("role")
    if new_role is not None and new_role != account.role:
        ensure_role_change_allowed(actor, user_id, new_role)
    else:
        changes.pop("role", None)

    previous_role = account.role
    await _write(session, UserRepo(session).update(account, changes))
    if "role" in changes:
        await AuditRepo(session).add(
            actor=actor.id,
            event_type="user.role_changed",
            details={"target": user_id, "from": previous_role.value, "to": account.role.value},
        )
    await session.commit()
    return UserResponse.of(account)


@router.post("/{user_id}/deactivate", response_model=UserResponse)
async def deactivate_user(
    user_id: str,
    actor: User = Depends(require_route_access(allow_owner_access=True, owner_id=target_user_id)),
    session: AsyncSession = Depends(db_session),
) -> UserResponse:
    ensure_not_self_deactivate(actor, user_id)
    account = await _load(session, user_id)
    ensure_can_manage(actor, account.to_user())
    await UserRepo(session).set_active(account, False)
    await AuditRepo(session).add(
        actor=actor.id, event_type="user.deactivated", details={"target": user_id}
    )
    await session.commit()
    return UserResponse.of(account)


@router.delete("/{user_id}", status_code=HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    actor: User = Depends(require_route_access()),
    session: AsyncSession = Depends(db_session),
) -> None:
    ensure_not_self_delete(actor, user_id)
    account = await _load(session, user_id)
    await UserRepo(session).delete(account)
    await AuditRepo(session).add(
        actor=actor.id, event_type="user.deleted", details={"target": user_id}
    )
    await session.commit()


# --- Module Notes -----------------------------------------------------------
# Self-service (read/update/deactivate own account) is granted by owner access on
# the target id; role changes and deletion never are.
