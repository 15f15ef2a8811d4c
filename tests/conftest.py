"""
tests.conftest

Shared fixtures for the unit and API test suites.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Iterable
from datetime import UTC, datetime

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from cms_authz.api.app import create_app
from cms_authz.auth.deps import jwt_config
from cms_authz.auth.jwt import issue_token
from cms_authz.auth.models import Role, User
from cms_authz.db.repositories.content import ContentRepo
from cms_authz.db.repositories.users import UserRepo
from cms_authz.permissions.conditions import AuthorizationContext, ConditionComposer
from cms_authz.permissions.policy import PolicyEvaluator
from cms_authz.permissions.resolver import PermissionResolver
from cms_authz.settings import Settings

# Monday, 10:00 UTC.
MONDAY_MORNING = datetime(2026, 10, 19, 10, 0, tzinfo=UTC)


@pytest.fixture
def admin() -> User:
    return User(id="admin-1", role=Role.ADMIN)


@pytest.fixture
def editor() -> User:
    return User(id="editor-1", role=Role.EDITOR)


@pytest.fixture
def viewer() -> User:
    return User(id="u1", role=Role.VIEWER)


@pytest.fixture
def resolver() -> PermissionResolver:
    return PermissionResolver()


@pytest.fixture
def composer() -> ConditionComposer:
    return ConditionComposer(debug=True)


@pytest.fixture
def evaluator(resolver: PermissionResolver, composer: ConditionComposer) -> PolicyEvaluator:
    return PolicyEvaluator(resolver, composer)


@pytest.fixture
def make_context(
    resolver: PermissionResolver,
) -> Callable[..., AuthorizationContext]:
    def _make(
        user: User | None,
        *,
        now: datetime = MONDAY_MORNING,
        features: Iterable[str] = (),
    ) -> AuthorizationContext:
        return AuthorizationContext(
            user=user,
            resolver=resolver,
            now=now,
            enabled_features=frozenset(features),
        )

    return _make


# --- API fixtures ------------------------------------------------------------


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        env="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'cms_authz.db'}",
        jwt_secret="test-secret",
    )


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncIterator[FastAPI]:
    app = create_app(settings=settings)
    # httpx ASGITransport does not run the lifespan; enter it explicitly.
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def seed_user(app: FastAPI, user_id: str, role: Role, *, is_active: bool = True) -> None:
    async with app.state.sessionmaker() as session:
        await UserRepo(session).create(
            user_id=user_id,
            email=f"{user_id}@example.com",
            name=user_id,
            role=role,
            is_active=is_active,
        )
        await session.commit()


async def seed_content(app: FastAPI, resource: str, *, owner: str, title: str = "Item") -> str:
    async with app.state.sessionmaker() as session:
        item = await ContentRepo(session).create(
            resource=resource, title=title, body="", created_by=owner
        )
        await session.commit()
        return item.id


def bearer(app: FastAPI, user_id: str) -> dict[str, str]:
    token = issue_token(cfg=jwt_config(app.state.settings), subject=user_id)
    return {"Authorization": f"Bearer {token}"}
