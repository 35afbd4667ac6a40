"""
club_access.api.app

FastAPI app factory for the club access service.

Responsibilities:
- Build the FastAPI application and register routers/middleware/error handlers.
- Initialize and dispose shared infrastructure (DB engine, auth container,
  revocation sweep).
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from club_access.api.route_roles import ROUTE_ROLES
from club_access.api.routers.assignments import router as assignments_router
from club_access.api.routers.auth import router as auth_router
from club_access.api.routers.health import router as health_router
from club_access.auth.guards import RouteRoleTable
from club_access.auth.revocation import RevocationRegistry, run_cleanup_loop
from club_access.container import build_container
from club_access.db.session import create_engine, create_schema, create_sessionmaker
from club_access.errors import AccessError, Unauthorized
from club_access.observability.logging import configure_logging, get_logger
from club_access.observability.middleware import RequestContextMiddleware
from club_access.settings import Settings

log = get_logger(__name__)


async def _access_error_handler(_: Request, exc: AccessError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
    return JSONResponse(
        status_code=exc.status_code, content={"detail": exc.detail}, headers=headers
    )


def create_app(
    *,
    settings: Settings,
    route_roles: RouteRoleTable = ROUTE_ROLES,
    revocations: RevocationRegistry | None = None,
) -> FastAPI:
    # Configure structured logging once at process startup (before app serves requests).
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        # Engine, session factory and auth container are built once and stashed on
        # app.state; routers reach them via `club_access.api.deps`.
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        app.state.container = build_container(
            settings=settings,
            session_factory=app.state.sessionmaker,
            route_roles=route_roles,
            revocations=revocations,
        )
        if settings.env in ("dev", "test"):
            # Dev/test convenience: create tables automatically. Prod should use Alembic migrations.
            await create_schema(engine)

        sweeper: asyncio.Task[None] | None = None
        if settings.revocation_cleanup_interval_seconds > 0:
            sweeper = asyncio.create_task(
                run_cleanup_loop(
                    app.state.container.revocations,
                    interval_seconds=settings.revocation_cleanup_interval_seconds,
                )
            )
        try:
            yield
        finally:
            if sweeper is not None:
                sweeper.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await sweeper
            # Dispose the engine to close pools/FDs gracefully.
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Club Access API",
        version="0.1.0",
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(RequestContextMiddleware)
    app.add_exception_handler(AccessError, _access_error_handler)  # type: ignore[arg-type]
    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    app.include_router(assignments_router)

    return app


# --- Module Notes -----------------------------------------------------------
# This file is intentionally small: app composition stays here; business logic stays
# in routers/services/guards.
