"""
ANGAGU Backend — Health Check Tests
====================================
"""

from unittest.mock import MagicMock

import pytest

from angagu import __version__
from angagu.config import settings


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, test_client, db_engine, monkeypatch):
        """Database up and SMS configured reports healthy."""
        monkeypatch.setattr("angagu.routes.health.engine", db_engine)

        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["sms_gateway"] == "configured"
        assert body["version"] == __version__
        assert body["uptime_seconds"] >= 0

    @pytest.mark.asyncio
    async def test_degraded_without_sms_credentials(self, test_client, db_engine, monkeypatch):
        """Missing SMS credentials report degraded."""
        monkeypatch.setattr("angagu.routes.health.engine", db_engine)
        monkeypatch.setattr(settings, "sms_access_key", "")

        body = (await test_client.get("/health")).json()

        assert body["status"] == "degraded"
        assert body["sms_gateway"] == "unconfigured"

    @pytest.mark.asyncio
    async def test_unhealthy_when_database_unreachable(self, test_client, monkeypatch):
        """A failing database ping reports unhealthy."""
        broken = MagicMock()
        broken.connect.side_effect = OSError("connection refused")
        monkeypatch.setattr("angagu.routes.health.engine", broken)

        response = await test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "unhealthy"
        assert response.json()["database"] == "disconnected"
