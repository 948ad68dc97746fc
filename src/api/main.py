import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response

from src.api.deps import get_resolution_service, get_settings
from src.api.routes import public_meta, public_redirects, redirects
from src.app_shell.config import (
    configure_logging,
    create_store_from_url,
    resolve_store_url,
    validate_ops_rules,
)
from src.rules.loader import load_rules
from src.services.resolution import ResolutionService, create_resolution_service
from src.shell.http.health import StartupTracker, create_health_router

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def build_service_from_settings() -> ResolutionService:
    """Load rules, validate the environment and wire the resolution layer."""
    settings = get_settings()
    rules = load_rules(settings.rules_path)
    configure_logging(rules.observability)
    validate_ops_rules(rules)
    store = create_store_from_url(resolve_store_url(rules), rules.store.timeout_seconds)
    logger.info("Rules loaded from %s", settings.rules_path)
    return create_resolution_service(rules, store)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    # Load rules and validate on startup (fail-fast)
    if getattr(app.state, "resolution", None) is None:
        try:
            app.state.resolution = build_service_from_settings()
        except Exception:
            logger.critical("Startup aborted: configuration invalid", exc_info=True)
            raise

    StartupTracker.mark_started()
    yield


def create_app(service: ResolutionService | None = None) -> FastAPI:
    """
    Build the API.

    Pass `service` to skip configuration loading (tests, embedding).
    """
    app = FastAPI(
        title="Page Resolution API",
        version=VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url=None,
    )
    app.state.resolution = service

    app.include_router(public_meta.router, prefix="/api/public", tags=["Public"])
    app.include_router(public_redirects.router, prefix="/api/public", tags=["Public"])
    app.include_router(redirects.router, prefix="/api/redirects", tags=["Redirects"])
    app.include_router(create_health_router(get_resolution_service, version=VERSION))

    @app.middleware("http")
    async def apply_redirects(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        resolution: ResolutionService | None = getattr(request.app.state, "resolution", None)
        if resolution is not None:
            redirect = await public_redirects.redirect_middleware_check(request, resolution)
            if redirect is not None:
                return redirect
        return await call_next(request)

    return app


app = create_app()
