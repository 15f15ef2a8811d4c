"""
cms_authz.db.repositories.content

Repository for `ContentItem` entities.

Responsibilities:
- CRUD for owned admin content, scoped by resource name.
"""

from __future__ import annotations

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from cms_authz.db.models import ContentItem


class ContentRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, resource: str, item_id: str) -> ContentItem | None:
        item = await self._session.get(ContentItem, item_id)
        # An id from another resource is treated as missing.
        if item is None or item.resource != resource:
            return None
        return item

    async def list_by_resource(self, resource: str, *, limit: int = 200) -> list[ContentItem]:
        stmt = (
            select(ContentItem)
            .where(ContentItem.resource == resource)
            .order_by(desc(ContentItem.created_at))
            .limit(limit)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def create(self, *, resource: str, title: str, body: str, created_by: str) -> ContentItem:
        item = ContentItem(resource=resource, title=title, body=body, created_by=created_by)
        self._session.add(item)
        await self._session.flush()
        return item

    async def update(
        self, item: ContentItem, *, title: str | None = None, body: str | None = None
    ) -> ContentItem:
        if title is not None:
            item.title = title
        if body is not None:
            item.body = body
        await self._session.flush()
        return item

    async def delete(self, item: ContentItem) -> None:
        await self._session.delete(item)
        await self._session.flush()
