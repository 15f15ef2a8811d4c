"""
cms_authz.db.repositories.audit

Repository for `AuditEvent` entities.

Responsibilities:
- Append audit events (authorization decisions, account changes).
- Query the recent trail, optionally filtered by actor or event type.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from cms_authz.db.models import AuditEvent


class AuditRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, *, actor: str, event_type: str, details: dict[str, Any]) -> AuditEvent:
        # Append-only in normal operation.
        ev = AuditEvent(actor=actor, event_type=event_type, details=details)
        self._session.add(ev)
        await self._session.flush()
        return ev

    async def list_recent(
        self,
        *,
        actor: str | None = None,
        event_type: str | None = None,
        limit: int = 200,
    ) -> list[AuditEvent]:
        stmt = select(AuditEvent).order_by(desc(AuditEvent.created_at)).limit(limit)
        if actor is not None:
            stmt = stmt.where(AuditEvent.actor == actor)
        if event_type is not None:
            stmt = stmt.where(AuditEvent.event_type == event_type)
        return list((await self._session.execute(stmt)).scalars().all())


# --- Module Notes -----------------------------------------------------------
# Written by `auth.audit.AuditObserver` on every gate decision when auditing is enabled.
