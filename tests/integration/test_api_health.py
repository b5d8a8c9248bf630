"""Integration tests for health API endpoint."""

from __future__ import annotations

import pytest
from fastapi import status
from httpx import AsyncClient

from sponsor_api.api.schemas import HealthResponse


@pytest.mark.asyncio
async def test_health(async_http_client: AsyncClient) -> None:
    """Test that the health endpoint returns ok status."""
    # Act
    response = await async_http_client.get("/api/health")

    # Assert
    assert response.status_code == status.HTTP_200_OK
    parsed = HealthResponse.model_validate(response.json())
    assert parsed.status == "ok"


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(async_http_client: AsyncClient) -> None:
    """Test that framework 404s share the standard error payload."""
    response = await async_http_client.get("/api/nope")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"error": "not_found", "message": "Not Found"}
