"""Tests for middleware components."""
import pytest
from fastapi import APIRouter
from fastapi.testclient import TestClient
from httpx import AsyncClient, ASGITransport
from perftracker.config import Settings
from perftracker.main import create_app

URL = "/api/track/revenue"


@pytest.mark.asyncio
async def test_correlation_id_injection(app):
    """Test that correlation ID is auto-generated if not provided."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post(URL, json={"channel": "email", "amount": 1, "timestamp": 1})
        assert response.status_code == 201
        assert response.headers["X-Correlation-ID"]


@pytest.mark.asyncio
async def test_correlation_id_preserved(app):
    """Test that provided correlation ID is preserved."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        correlation_id = "test-correlation-123"
        response = await client.get(URL, headers={"X-Correlation-ID": correlation_id})
        assert response.status_code == 200
        assert response.headers["X-Correlation-ID"] == correlation_id


@pytest.mark.asyncio
async def test_error_body_carries_correlation_id(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post(URL, json=[1], headers={"X-Correlation-ID": "corr-400"})
        assert response.status_code == 400
        assert response.json()["correlation_id"] == "corr-400"


@pytest.mark.asyncio
async def test_payload_too_large_rejection(app, service):
    """Test that oversized payloads are rejected."""
    max_size = app.state.settings.MAX_EVENT_SIZE
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post(
            URL,
            json={"channel": "x" * (max_size + 1000), "amount": 1, "timestamp": 1},
        )
        assert response.status_code == 413
        data = response.json()
        assert data["error"] == "PayloadTooLarge"
        assert data["max_size"] == max_size
        assert service.event_count() == 0


def test_custom_max_event_size(service):
    app = create_app(settings=Settings(MAX_EVENT_SIZE=64), service=service)
    with TestClient(app) as client:
        r = client.post(URL, json={"channel": "email", "page": "/" + "a" * 100, "timestamp": 1})
        assert r.status_code == 413

        r = client.post(URL, json={"channel": "email", "timestamp": 1})
        assert r.status_code == 201


def test_unhandled_exception_returns_500(service):
    app = create_app(service=service)
    boom = APIRouter()

    @boom.get("/boom")
    def explode():
        raise RuntimeError("kaboom")

    app.include_router(boom)

    with TestClient(app) as client:
        r = client.get("/boom", headers={"x-correlation-id": "corr-500"})

    assert r.status_code == 500
    data = r.json()
    assert data["error"] == "InternalServerError"
    assert data["correlation_id"] == "corr-500"
    assert "kaboom" not in data["message"]


def test_failed_request_leaves_store_intact(service):
    app = create_app(service=service)

    with TestClient(app) as client:
        client.post(URL, json={"channel": "email", "amount": 4, "timestamp": 1})
        client.post(URL, content=b"{broken", headers={"Content-Type": "application/json"})
        data = client.get(URL).json()

    assert data["total"] == 1
    assert data["totals"] == {"email": 4}
