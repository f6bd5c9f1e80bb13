"""
sheshape_api.api.app

FastAPI app factory for the SheShape backend.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Initialize and dispose shared infrastructure (DB engine/session factory).
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from sheshape_api import __version__
from sheshape_api.api.routers.admin_users import router as admin_users_router
from sheshape_api.api.routers.auth import router as auth_router
from sheshape_api.api.routers.health import router as health_router
from sheshape_api.api.routers.users import router as users_router
from sheshape_api.auth.jwt import JwtConfig
from sheshape_api.db.init_db import init_db
from sheshape_api.db.session import create_engine, create_sessionmaker
from sheshape_api.observability.logging import configure_logging, get_logger
from sheshape_api.observability.middleware import RequestContextMiddleware
from sheshape_api.security.cors import add_cors
from sheshape_api.security.middleware import SecurityFilterMiddleware
from sheshape_api.security.rules import SecurityPolicy, default_policy
from sheshape_api.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings, policy: SecurityPolicy | None = None) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        # Routers obtain sessions via dependencies (see `sheshape_api.api.deps`).
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            # Dev/test convenience: create tables automatically. Prod uses Alembic migrations.
            await init_db(engine)
        try:
            yield
        finally:
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="SheShape API",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Starlette wraps in reverse order: the last middleware added runs first.
    app.add_middleware(
        SecurityFilterMiddleware,
        policy=policy or default_policy(),
        jwt_cfg=JwtConfig.from_settings(settings),
    )
    add_cors(app, settings)
    app.add_middleware(RequestContextMiddleware)

    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(admin_users_router)

    return app


# --- Module Notes -----------------------------------------------------------
# App composition stays here; business logic stays in routers/services.
