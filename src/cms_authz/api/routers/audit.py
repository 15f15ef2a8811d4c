"""
cms_authz.api.routers.audit

Audit trail read API.

Responsibilities:
- List recent audit events (authorization decisions, account changes) for security reviewers.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from cms_authz.api.deps import db_session
from cms_authz.auth.deps import require_route_access
from cms_authz.auth.models import User
from cms_authz.db.repositories.audit import AuditRepo

router = APIRouter(prefix="/api/security/audit", tags=["audit"])


class AuditEventResponse(BaseModel):
    id: uuid.UUID
    actor: str
    event_type: str
    details: dict[str, Any]
    created_at: datetime


@router.get("", response_model=list[AuditEventResponse])
async def list_audit_events(
    actor: str | None = Query(default=None, max_length=64),
    event_type: str | None = Query(default=None, max_length=128),
    limit: int = Query(default=100, ge=1, le=500),
    _: User = Depends(require_route_access()),
    session: AsyncSession = Depends(db_session),
) -> list[AuditEventResponse]:
    events = await AuditRepo(session).list_recent(actor=actor, event_type=event_type, limit=limit)
    return [
        AuditEventResponse(
            id=e.id,
            actor=e.actor,
            event_type=e.event_type,
            details=e.details,
            created_at=e.created_at,
        )
        for e in events
    ]
