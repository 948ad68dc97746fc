"""
Health endpoints.

Key behaviors:
- /health: overall resolution-layer status (503 only when unhealthy;
  degraded still serves pages from fallbacks)
- /health/live: liveness probe (process alive)
- /health/seo: full component report plus the error-rate window
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from src.components.health import ComponentStatus
from src.services.resolution import ResolutionService

# --- Startup Tracker ---


class StartupTracker:
    """Tracks application startup time for uptime calculation."""

    _start_time: float | None = None

    @classmethod
    def mark_started(cls) -> None:
        """Mark the application as started."""
        cls._start_time = time.time()

    @classmethod
    def get_uptime_seconds(cls) -> float:
        """Get uptime in seconds since start."""
        if cls._start_time is None:
            return 0.0
        return time.time() - cls._start_time

    @classmethod
    def is_started(cls) -> bool:
        """Check if application has been marked as started."""
        return cls._start_time is not None


# --- FastAPI Router ---


def create_health_router(
    get_service: Callable[..., ResolutionService],
    version: str = "0.0.0",
) -> APIRouter:
    """
    Create FastAPI router for health endpoints.

    Args:
        get_service: Dependency returning the application's ResolutionService
        version: Application version string

    Returns:
        FastAPI router with health endpoints
    """
    router = APIRouter(tags=["health"])

    @router.get(
        "/health",
        response_model=None,
        responses={
            200: {"description": "Service is healthy or degraded"},
            503: {"description": "Service is unhealthy"},
        },
    )
    async def health_check(service: ResolutionService = Depends(get_service)) -> JSONResponse:
        """
        Basic health check endpoint.

        Returns the overall status and one entry per component.
        """
        report = await service.get_system_health()

        response: dict[str, Any] = {
            "status": report.overall.value,
            "version": version,
            "uptime_seconds": StartupTracker.get_uptime_seconds(),
            "checks": [
                {
                    "name": name,
                    "status": component.status.value,
                    "message": component.error or "",
                }
                for name, component in report.components.items()
            ],
        }

        status_code = (
            status.HTTP_503_SERVICE_UNAVAILABLE
            if report.overall == ComponentStatus.UNHEALTHY
            else status.HTTP_200_OK
        )

        return JSONResponse(content=response, status_code=status_code)

    @router.get(
        "/health/live",
        response_model=None,
        responses={
            200: {"description": "Service process is alive"},
        },
    )
    def liveness_check() -> JSONResponse:
        """
        Kubernetes-style liveness probe.

        Always 200 while the process can answer.
        """
        return JSONResponse(
            content={"alive": True, "uptime_seconds": StartupTracker.get_uptime_seconds()},
            status_code=status.HTTP_200_OK,
        )

    @router.get("/health/seo", response_model=None)
    async def seo_health(service: ResolutionService = Depends(get_service)) -> JSONResponse:
        """Detailed report: components, recommendations and the error-rate window."""
        report = await service.get_system_health()
        content = report.to_dict()
        content["error_rate"] = service.get_error_rate().to_dict()
        return JSONResponse(content=content, status_code=status.HTTP_200_OK)

    return router
