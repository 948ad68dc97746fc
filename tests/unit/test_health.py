"""
Tests for the health endpoints.

- /health: 200 while healthy or degraded, 503 when unhealthy
- /health/live: always 200
- /health/seo: full component report with the error-rate window
"""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.deps import get_resolution_service
from src.core.errors import ErrorKind, NetworkError
from src.services.resolution import ResolutionService
from src.shell.http.health import StartupTracker, create_health_router
from tests.fakes import SITE, FlakyStore


@pytest.fixture
def client(service: ResolutionService) -> TestClient:
    app = FastAPI()
    app.state.resolution = service
    app.include_router(create_health_router(get_resolution_service, version="1.2.3"))
    return TestClient(app)


class TestStartupTracker:
    def test_uptime_after_start(self) -> None:
        StartupTracker.mark_started()
        assert StartupTracker.is_started() is True
        assert StartupTracker.get_uptime_seconds() >= 0.0


class TestHealthEndpoint:
    def test_healthy(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "1.2.3"
        assert {c["name"] for c in data["checks"]} == {
            "store",
            "circuit_breaker",
            "error_rate",
            "fallback",
        }

    @pytest.mark.asyncio
    async def test_degraded_still_200(
        self, client: TestClient, service: ResolutionService, store: FlakyStore
    ) -> None:
        store.fail_with = NetworkError("down")
        for _ in range(5):
            with pytest.raises(NetworkError):
                await service.guarded_store.find_redirect(SITE, "/x")

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"

    def test_store_down_503(self, client: TestClient, store: FlakyStore) -> None:
        store.ping_error = ConnectionRefusedError("refused")

        response = client.get("/health")

        assert response.status_code == 503
        store_check = next(c for c in response.json()["checks"] if c["name"] == "store")
        assert store_check["status"] == "unhealthy"
        assert store_check["message"] == "refused"


class TestLiveness:
    def test_alive(self, client: TestClient) -> None:
        response = client.get("/health/live")
        assert response.status_code == 200
        assert response.json()["alive"] is True


class TestSeoHealth:
    def test_report(self, client: TestClient, service: ResolutionService) -> None:
        service.health.record_failure("find_metadata", "/about", ErrorKind.TIMEOUT)
        service.health.record_success("find_metadata", "/about")

        response = client.get("/health/seo")

        assert response.status_code == 200
        data = response.json()
        assert data["overall"] == "degraded"
        assert data["components"]["circuit_breaker"]["state"] == "closed"
        assert data["error_rate"]["error_rate"] == 0.5
        assert data["error_rate"]["top_failing"][0]["path"] == "/about"
        assert data["recommendations"]

    def test_missing_service_503(self) -> None:
        app = FastAPI()
        app.include_router(create_health_router(get_resolution_service))

        response = TestClient(app).get("/health/seo")

        assert response.status_code == 503
