"""
cms_authz.api.app

FastAPI app factory for the CMS authorization service.

Responsibilities:
- Build the FastAPI application and register routers/middleware/error handlers.
- Construct the shared authorization objects (resolver, composer, gate, route table).
- Initialize and dispose shared infrastructure (DB engine/session factory).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cms_authz import __version__
from cms_authz.api.routers.audit import router as audit_router
from cms_authz.api.routers.content import content_routers
from cms_authz.api.routers.dev_auth import router as dev_auth_router
from cms_authz.api.routers.health import router as health_router
from cms_authz.api.routers.me import router as me_router
from cms_authz.api.routers.users import router as users_router
from cms_authz.auth.audit import AuditObserver
from cms_authz.auth.errors import register_error_handlers
from cms_authz.auth.gate import AuthorizationGate
from cms_authz.db.init_db import init_db
from cms_authz.db.session import create_engine, create_sessionmaker
from cms_authz.observability.logging import configure_logging, get_logger
from cms_authz.observability.middleware import RequestContextMiddleware
from cms_authz.permissions.conditions import ConditionComposer
from cms_authz.permissions.policy import PolicyEvaluator
from cms_authz.permissions.resolver import PermissionResolver
from cms_authz.permissions.routes import RoutePermissionResolver
from cms_authz.settings import Settings

log = get_logger(__name__)


def build_gate(
    settings: Settings,
    *,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> AuthorizationGate:
    resolver = PermissionResolver(overrides=settings.permission_overrides)
    composer = ConditionComposer(debug=settings.authz_debug)
    gate = AuthorizationGate(
        PolicyEvaluator(resolver, composer),
        enabled_features=settings.enabled_features,
        business_hours=(settings.business_hours_start, settings.business_hours_end),
    )
    if settings.audit_enabled and session_factory is not None:
        gate.add_observer(AuditObserver(session_factory))
    return gate


def create_app(*, settings: Settings) -> FastAPI:
    # Configure structured logging once at process startup (before app serves requests).
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        app.state.gate = build_gate(settings, session_factory=app.state.sessionmaker)
        if settings.env in ("dev", "test"):
            # Dev/test convenience: create tables automatically. Prod uses Alembic migrations.
            await init_db(engine)
        try:
            yield
        finally:
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="CMS Authorization Service",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    # Available before startup so dependencies never see a missing attribute.
    app.state.settings = settings
    app.state.route_permissions = RoutePermissionResolver()

    app.add_middleware(RequestContextMiddleware)
    register_error_handlers(app)

    app.include_router(health_router, tags=["health"])
    app.include_router(dev_auth_router)
    app.include_router(me_router)
    app.include_router(users_router)
    app.include_router(audit_router)
    for router in content_routers():
        app.include_router(router)

    return app


# --- Module Notes -----------------------------------------------------------
# One resolver/composer/gate per app instance; tests build isolated apps with their
# own settings and database.
