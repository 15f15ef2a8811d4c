"""
cms_authz.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probes (`/healthz`, public `/api/health`).
- Provide readiness probe (`/readyz`) with DB connectivity validation.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from cms_authz.api.deps import db_session

router = APIRouter()


@router.get("/healthz")
@router.get("/api/health")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(session: AsyncSession = Depends(db_session)) -> dict[str, str]:
    await session.execute(text("SELECT 1"))
    return {"status": "ready"}
