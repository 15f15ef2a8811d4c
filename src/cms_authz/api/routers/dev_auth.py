"""
cms_authz.api.routers.dev_auth

Session token minting for local development and tests.

Responsibilities:
- Issue a session JWT for an existing user id (never in prod).
"""

from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from cms_authz.api.deps import db_session, settings_dep
from cms_authz.auth.deps import jwt_config
from cms_authz.auth.errors import NotFound
from cms_authz.auth.jwt import issue_token
from cms_authz.db.repositories.users import UserRepo
from cms_authz.settings import Settings

router = APIRouter(prefix="/api/dev", tags=["dev"])


class DevTokenRequest(BaseModel):
    subject: str = Field(min_length=1, max_length=64)
    ttl_minutes: int = Field(default=60, ge=1, le=24 * 60)


class DevTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


@router.post("/token", response_model=DevTokenResponse)
async def mint_dev_token(
    body: DevTokenRequest,
    settings: Settings = Depends(settings_dep),
    session: AsyncSession = Depends(db_session),
) -> DevTokenResponse:
    if settings.env == "prod":
        raise NotFound("Route")

    account = await UserRepo(session).get(body.subject)
    if account is None:
        raise NotFound("User")

    # The role claim is informational; the users table stays authoritative.
    token = issue_token(
        cfg=jwt_config(settings),
        subject=account.id,
        role=account.role.value,
        ttl=timedelta(minutes=body.ttl_minutes),
    )
    return DevTokenResponse(access_token=token)
