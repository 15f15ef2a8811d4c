"""
cms_authz.api.routers.content

Owned admin content (products, categories, pages, media).

Responsibilities:
- CRUD endpoints per content resource under `/api/<resource>`.
- Permissions come from the route table; item routes widen access to the item's creator.
"""

from __future__ import annotations

from collections.abc import Callable, Coroutine
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED, HTTP_204_NO_CONTENT

from cms_authz.api.deps import db_session
from cms_authz.auth.deps import require_route_access
from cms_authz.auth.errors import NotFound
from cms_authz.auth.models import User
from cms_authz.db.models import ContentItem
from cms_authz.db.repositories.content import ContentRepo
from cms_authz.permissions.resolver import CATEGORIES, MEDIA, PAGES, PRODUCTS

CONTENT_ROUTES = (PRODUCTS, CATEGORIES, PAGES, MEDIA)


class ContentResponse(BaseModel):
    id: str
    resource: str
    title: str
    body: str
    created_by: str
    created_at: datetime

    @classmethod
    def of(cls, item: ContentItem) -> ContentResponse:
        return cls(
            id=item.id,
            resource=item.resource,
            title=item.title,
            body=item.body,
            created_by=item.created_by,
            created_at=item.created_at,
        )


class ContentCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=512)
    body: str = ""


class ContentUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=512)
    body: str | None = None


def _owner_loader(resource: str) -> Callable[..., Coroutine[Any, Any, str | None]]:
    async def item_owner(
        item_id: str, session: AsyncSession = Depends(db_session)
    ) -> str | None:
        item = await ContentRepo(session).get(resource, item_id)
        return item.created_by if item is not None else None

    return item_owner


def build_content_router(resource: str) -> APIRouter:
    router = APIRouter(prefix=f"/api/{resource}", tags=[resource])
    item_access = require_route_access(allow_owner_access=True, owner_id=_owner_loader(resource))

    async def _load(session: AsyncSession, item_id: str) -> ContentItem:
        item = await ContentRepo(session).get(resource, item_id)
        if item is None:
            raise NotFound("Item")
        return item

    @router.get("", response_model=list[ContentResponse])
    async def list_items(
        _: User = Depends(require_route_access()),
        session: AsyncSession = Depends(db_session),
    ) -> list[ContentResponse]:
        return [ContentResponse.of(i) for i in await ContentRepo(session).list_by_resource(resource)]

    @router.post("", response_model=ContentResponse, status_code=HTTP_201_CREATED)
    async def create_item(
        body: ContentCreateRequest,
        user: User = Depends(require_route_access()),
        session: AsyncSession = Depends(db_session),
    ) -> ContentResponse:
        item = await ContentRepo(session).create(
            resource=resource, title=body.title, body=body.body, created_by=user.id
        )
        await session.commit()
        return ContentResponse.of(item)

    @router.get("/{item_id}", response_model=ContentResponse)
    async def get_item(
        item_id: str,
        _: User = Depends(item_access),
        session: AsyncSession = Depends(db_session),
    ) -> ContentResponse:
        return ContentResponse.of(await _load(session, item_id))

    @router.patch("/{item_id}", response_model=ContentResponse)
    @router.put("/{item_id}", response_model=ContentResponse)
    async def update_item(
        item_id: str,
        body: ContentUpdateRequest,
        _: User = Depends(item_access),
        session: AsyncSession = Depends(db_session),
    ) -> ContentResponse:
        item = await _load(session, item_id)
        await ContentRepo(session).update(item, title=body.title, body=body.body)
        await session.commit()
        return ContentResponse.of(item)

    @router.delete("/{item_id}", status_code=HTTP_204_NO_CONTENT)
    async def delete_item(
        item_id: str,
        _: User = Depends(item_access),
        session: AsyncSession = Depends(db_session),
    ) -> None:
        await ContentRepo(session).delete(await _load(session, item_id))
        await session.commit()

    return router


def content_routers() -> list[APIRouter]:
    return [build_content_router(r) for r in CONTENT_ROUTES]


# --- Module Notes -----------------------------------------------------------
# A missing item has no owner, so the gate decides on role grants alone; the 404
# is only reachable for callers the gate let through.
