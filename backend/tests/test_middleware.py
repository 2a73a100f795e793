"""
HR Desk Backend - Middleware Tests
===================================

Exercises the middleware chain on a minimal FastAPI app so the limits can be
set small without touching the global settings.
"""

import logging

import pytest
import pytest_asyncio
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient

from hrdesk.middleware.logging import RequestLoggingMiddleware, level_for_status
from hrdesk.middleware.rate_limit import RateLimitMiddleware
from hrdesk.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware


def build_app() -> FastAPI:
    app = FastAPI()

    @app.get("/api/items")
    async def items(request: Request):
        return {"request_id": request.state.request_id}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RateLimitMiddleware, max_requests=2, window_seconds=60)
    app.add_middleware(RequestIDMiddleware)
    return app


@pytest_asyncio.fixture
async def client():
    transport = ASGITransport(app=build_app())
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class TestRateLimit:

    @pytest.mark.asyncio
    async def test_third_request_is_limited(self, client):
        assert (await client.get("/api/items")).status_code == 200
        assert (await client.get("/api/items")).status_code == 200

        response = await client.get("/api/items")

        assert response.status_code == 429
        assert response.json()["error"] == "rate_limit_exceeded"
        assert 0 < int(response.headers["Retry-After"]) <= 61

    @pytest.mark.asyncio
    async def test_limited_response_carries_request_id(self, client):
        for _ in range(2):
            await client.get("/api/items")

        response = await client.get("/api/items", headers={REQUEST_ID_HEADER: "burst-1"})

        assert response.status_code == 429
        assert response.json()["request_id"] == "burst-1"
        assert response.headers[REQUEST_ID_HEADER] == "burst-1"

    @pytest.mark.asyncio
    async def test_health_is_never_limited(self, client):
        for _ in range(5):
            assert (await client.get("/health")).status_code == 200


class TestRequestId:

    @pytest.mark.asyncio
    async def test_client_id_is_kept(self, client):
        response = await client.get("/api/items", headers={REQUEST_ID_HEADER: "trace-42"})

        assert response.headers[REQUEST_ID_HEADER] == "trace-42"
        assert response.json()["request_id"] == "trace-42"

    @pytest.mark.asyncio
    async def test_generated_id(self, client):
        response = await client.get("/api/items")

        rid = response.headers[REQUEST_ID_HEADER]
        assert len(rid) == 8
        assert response.json()["request_id"] == rid


@pytest.mark.parametrize(
    "status_code,level",
    [(200, logging.INFO), (302, logging.INFO), (404, logging.WARNING), (503, logging.ERROR)],
)
def test_access_log_level(status_code, level):
    assert level_for_status(status_code) == level
