"""요청 수 제한 테스트"""
import asyncio

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from app.core.rate_limit import build_limiter, limiter, setup_rate_limit


def create_limited_app(max_requests: int, window_seconds: int, enabled: bool = True) -> FastAPI:
    app = FastAPI()
    app_limiter = build_limiter(max_requests=max_requests, window_seconds=window_seconds, enabled=enabled)
    setup_rate_limit(app, app_limiter)

    @app.get("/items")
    async def items():
        return {"ok": True}

    @app.get("/other")
    async def other():
        return {"ok": True}

    @app.get("/health")
    @app_limiter.exempt
    async def health():
        return {"status": "healthy"}

    return app


@pytest_asyncio.fixture
async def limited_client():
    """요청 3회/60초 제한 앱"""
    app = create_limited_app(max_requests=3, window_seconds=60)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.mark.asyncio
async def test_middleware_sets_headers(limited_client):
    response = await limited_client.get("/items")

    assert response.status_code == 200
    assert response.headers["X-RateLimit-Limit"] == "3"
    assert response.headers["X-RateLimit-Remaining"] == "2"
    assert "X-RateLimit-Reset" in response.headers


@pytest.mark.asyncio
async def test_middleware_rejects_over_limit(limited_client):
    for _ in range(3):
        assert (await limited_client.get("/items")).status_code == 200

    response = await limited_client.get("/items")

    assert response.status_code == 429
    body = response.json()
    assert body["detail"] == "Too many requests, please try again later."
    assert 59 <= body["retry_after"] <= 61
    assert response.headers["X-RateLimit-Remaining"] == "0"
    assert "Retry-After" in response.headers


@pytest.mark.asyncio
async def test_limit_is_shared_across_routes(limited_client):
    """한도는 라우트별이 아니라 클라이언트 IP 단위"""
    assert (await limited_client.get("/items")).status_code == 200
    assert (await limited_client.get("/other")).status_code == 200
    assert (await limited_client.get("/items")).status_code == 200

    assert (await limited_client.get("/other")).status_code == 429


@pytest.mark.asyncio
async def test_window_expiry_allows_requests_again():
    app = create_limited_app(max_requests=1, window_seconds=1)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        assert (await ac.get("/items")).status_code == 200
        assert (await ac.get("/items")).status_code == 429

        await asyncio.sleep(1.2)
        assert (await ac.get("/items")).status_code == 200


@pytest.mark.asyncio
async def test_limiter_reset_clears_counters():
    app = create_limited_app(max_requests=1, window_seconds=60)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        assert (await ac.get("/items")).status_code == 200
        assert (await ac.get("/items")).status_code == 429

        app.state.limiter.reset()
        assert (await ac.get("/items")).status_code == 200


@pytest.mark.asyncio
async def test_disabled_limiter_passes_everything():
    app = create_limited_app(max_requests=1, window_seconds=60, enabled=False)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        for _ in range(3):
            response = await ac.get("/items")
            assert response.status_code == 200
            assert "X-RateLimit-Limit" not in response.headers


@pytest.mark.asyncio
async def test_health_is_exempt(limited_client):
    for _ in range(5):
        response = await limited_client.get("/health")
        assert response.status_code == 200
        assert "X-RateLimit-Limit" not in response.headers


@pytest.mark.asyncio
async def test_app_health_endpoints_are_exempt(client):
    assert "app.main.health_check" in limiter._exempt_routes
    assert "app.main.root" in limiter._exempt_routes
    assert (await client.get("/health")).status_code == 200
