"""FastAPI application factory and the ``tasktracker`` console entry point."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routers import api_router, health_router
from .core.config import Settings, get_settings
from .core.logging import configure_logging
from .core.middleware import CorrelationIdMiddleware
from .db.session import dispose_engine
from .errors import register_exception_handlers
from .schemas.system import RootResponse


def normalise_prefix(raw_prefix: str) -> str:
    """Turn ``"api/"``, ``"/api"`` or ``" /api/ "`` into ``"/api"``; blank or ``"/"`` into ``""``."""
    stripped = raw_prefix.strip().strip("/")
    return f"/{stripped}" if stripped else ""


@asynccontextmanager
async def _lifespan(_: FastAPI) -> AsyncIterator[None]:
    yield
    await dispose_engine()


def _install_middleware(application: FastAPI, settings: Settings) -> None:
    # CORS is outermost; preflight requests never reach the correlation middleware.
    application.add_middleware(CorrelationIdMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )


def _install_routes(application: FastAPI, settings: Settings, prefix: str) -> None:
    application.include_router(api_router, prefix=prefix)
    application.include_router(health_router)

    metadata = RootResponse(
        name=settings.project_name,
        environment=settings.environment,
        version=settings.version,
        api_prefix=prefix,
    )

    @application.get("/", response_model=RootResponse, summary="Service metadata")
    async def read_root() -> RootResponse:
        return metadata


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build a configured application; ``settings`` defaults to the cached environment settings."""
    settings = settings or get_settings()
    configure_logging(settings)
    prefix = normalise_prefix(settings.api_prefix)

    application = FastAPI(
        title=settings.project_name,
        version=settings.version,
        summary="Multi-user task tracking API with bearer-token authentication.",
        openapi_url=f"{prefix}/openapi.json",
        lifespan=_lifespan,
    )
    application.state.settings = settings

    _install_middleware(application, settings)
    _install_routes(application, settings, prefix)
    register_exception_handlers(application)
    return application


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "tasktracker.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.reload,
        log_config=None,
    )
