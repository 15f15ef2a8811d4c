"""
cms_authz.db.models

Persistence schema for the authorization collaborators.

Responsibilities:
- UserAccount: identity source (role + active flag) loaded per request by the gate.
- ContentItem: owned admin content (products, pages, media, ...) with a `created_by` owner.
- AuditEvent: append-only trail of authorization decisions and account changes.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Enum, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cms_authz.auth.models import Role, User
from cms_authz.db.base import Base


def _utcnow() -> datetime:
    # Naive UTC timestamps keep SQLite and Postgres behavior identical.
    return datetime.utcnow()


def _new_id() -> str:
    return str(uuid.uuid4())


class UserAccount(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False, default="")

    role: Mapped[Role] = mapped_column(Enum(Role), nullable=False, default=Role.VIEWER)
    is_active: Mapped[bool] = mapped_column(nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    def to_user(self) -> User:
        return User(id=self.id, role=self.role, is_active=self.is_active)


class ContentItem(Base):
    __tablename__ = "content_items"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    # Resource name as used in permissions (`products`, `pages`, `media`, ...).
    resource: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")

    created_by: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (Index("ix_content_resource_created", "resource", "created_at"),)


class AuditEvent(Base):
    __tablename__ = "audit_events"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)

    actor: Mapped[str] = mapped_column(String(64), nullable=False)  # user id or "anonymous"
    event_type: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    details: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, index=True)

    __table_args__ = (Index("ix_audit_actor_created", "actor", "created_at"),)


# --- Module Notes -----------------------------------------------------------
# Only `UserAccount.to_user()` crosses into the authorization core; everything else
# stays behind the repositories.
