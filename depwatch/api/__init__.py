"""depwatch REST API — FastAPI application factory."""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from depwatch.api.deps import (
    close_resolver,
    dispose_engine,
    get_engine,
    get_subscription_service,
    init_resolver,
    init_session_factory,
)
from depwatch.api.errors import register_error_handlers
from depwatch.api.middleware.request_id import RequestIDMiddleware
from depwatch.api.routers import subscriptions
from depwatch.core.database import create_tables
from depwatch.core.logging import setup_logging
from depwatch.engines.notification.mailer import Mailer
from depwatch.engines.notification.runner import NotificationRunner
from depwatch.scheduler import Scheduler, create_scheduler

log = structlog.get_logger("depwatch.api")


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: DB, HTTP clients, scheduler. Shutdown: the reverse."""
    factory = init_session_factory()
    if os.environ.get("DEPWATCH_CREATE_TABLES", "1") == "1":
        await create_tables(get_engine())

    resolver = init_resolver()

    scheduler: Scheduler | None = None
    if os.environ.get("DEPWATCH_NOTIFY_ENABLED", "0") == "1":
        runner = NotificationRunner(get_subscription_service(), resolver, Mailer())
        scheduler = create_scheduler(factory, notification_runner=runner)
        await scheduler.start()

    log.info("app.started", notifications=scheduler is not None)
    yield

    if scheduler is not None:
        await scheduler.stop()
    await close_resolver()
    await dispose_engine()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    setup_logging()

    app = FastAPI(
        title="depwatch",
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=_lifespan,
    )

    register_error_handlers(app)

    cors_origins = os.environ.get("DEPWATCH_CORS_ORIGINS", "http://localhost:3000")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in cors_origins.split(",")],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health", tags=["ops"])
    async def health() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    app.include_router(subscriptions.router, prefix="/subscriptions", tags=["subscriptions"])

    return app
