"""
cms_authz.db.repositories.users

Repository for `UserAccount` entities.

Responsibilities:
- Load the identity (role + active flag) behind a session subject.
- Create, update, deactivate and delete admin user accounts.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cms_authz.auth.models import Role
from cms_authz.db.models import UserAccount

_UPDATABLE = frozenset({"email", "name", "role", "is_active"})


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: str) -> UserAccount | None:
        return await self._session.get(UserAccount, user_id)

    async def list(self, *, limit: int = 200) -> list[UserAccount]:
        stmt = select(UserAccount).order_by(UserAccount.created_at).limit(limit)
        return list((await self._session.execute(stmt)).scalars().all())

    async def create(
        self,
        *,
        email: str,
        name: str = "",
        role: Role = Role.VIEWER,
        user_id: str | None = None,
        is_active: bool = True,
    ) -> UserAccount:
        account = UserAccount(email=email, name=name, role=role, is_active=is_active)
        if user_id is not None:
            account.id = user_id
        self._session.add(account)
        await self._session.flush()
        return account

    async def update(self, account: UserAccount, changes: dict[str, Any]) -> UserAccount:
        for key, value in changes.items():
            if key not in _UPDATABLE:
                continue
            setattr(account, key, Role(value) if key == "role" else value)
        await self._session.flush()
        return account

    async def set_active(self, account: UserAccount, active: bool) -> UserAccount:
        account.is_active = active
        await self._session.flush()
        return account

    async def delete(self, account: UserAccount) -> None:
        await self._session.delete(account)
        await self._session.flush()


# --- Module Notes -----------------------------------------------------------
# Field-level rules (self role change, self delete) live in `permissions.guards`;
# callers apply them before handing `changes` to `update`.
