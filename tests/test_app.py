"""
Tests for the application shell: health, metrics and request correlation.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["environment"] == "test"
    assert data["cache"] == {"status": "disabled"}


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient):
    response = await client.get("/health", headers={"X-Request-ID": "gate-42"})
    assert response.headers["X-Request-ID"] == "gate-42"
    assert "X-Response-Time" in response.headers


@pytest.mark.asyncio
async def test_request_id_is_generated(client: AsyncClient):
    response = await client.get("/health")
    assert response.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_metrics_count_verifications(client: AsyncClient):
    await client.get("/api/v1/bookings/verify/000001")

    response = await client.get("/metrics")
    assert response.status_code == 200
    assert "ticket_verifications_total" in response.text
    assert "booking_creations_total" in response.text
