"""
cms_authz.auth.audit

Audit observer for the authorization gate.

Responsibilities:
- Persist allowed and denied decisions to `audit_events`.
- Attach the request id and path bound by the request middleware.
"""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cms_authz.auth.models import User
from cms_authz.db.repositories.audit import AuditRepo
from cms_authz.permissions.policy import AccessPolicy

ANONYMOUS = "anonymous"


def _request_details() -> dict[str, Any]:
    ctx = structlog.contextvars.get_contextvars()
    return {k: ctx[k] for k in ("request_id", "path", "method") if k in ctx}


class AuditObserver:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def on_authorized(self, user: User, policy: AccessPolicy) -> None:
        await self._write(
            actor=user.id,
            event_type="authz.allowed",
            details={**_request_details(), "role": user.role.value, "policy": policy.describe()},
        )

    async def on_unauthorized(self, user: User | None, reason: str) -> None:
        details: dict[str, Any] = {**_request_details(), "reason": reason}
        if user is not None:
            details["role"] = user.role.value
        await self._write(
            actor=user.id if user is not None else ANONYMOUS,
            event_type="authz.denied",
            details=details,
        )

    async def _write(self, *, actor: str, event_type: str, details: dict[str, Any]) -> None:
        # Separate session: the audit row must survive a rollback of the request's work.
        async with self._session_factory() as session:
            await AuditRepo(session).add(actor=actor, event_type=event_type, details=details)
            await session.commit()


# --- Module Notes -----------------------------------------------------------
# Registered by `api.app.create_app` when `audit_enabled` is set. Failures here are
# logged by the gate and never change the authorization outcome.
