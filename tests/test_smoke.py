"""
tests.test_smoke

Minimal smoke tests to validate the service can boot and serve core endpoints.

Responsibilities:
- Ensure the FastAPI app starts and the DB readiness check works in test mode.
"""

from __future__ import annotations

import httpx
import pytest
from fastapi import FastAPI

from cms_authz.observability.middleware import REQUEST_ID_HEADER


@pytest.mark.asyncio
async def test_health_endpoints(client: httpx.AsyncClient) -> None:
    r = await client.get("/healthz")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"

    r = await client.get("/api/health")
    assert r.status_code == 200

    r = await client.get("/readyz")
    assert r.status_code == 200
    assert r.json()["status"] == "ready"


@pytest.mark.asyncio
async def test_request_id_is_propagated(client: httpx.AsyncClient) -> None:
    r = await client.get("/healthz", headers={REQUEST_ID_HEADER: "req-123"})
    assert r.headers[REQUEST_ID_HEADER] == "req-123"
    r = await client.get("/healthz")
    assert r.headers[REQUEST_ID_HEADER]


@pytest.mark.asyncio
async def test_shared_authorization_objects_are_built(app: FastAPI) -> None:
    assert app.state.gate.resolver is app.state.gate.evaluator.resolver
    assert app.state.route_permissions.is_public("/api/health")
