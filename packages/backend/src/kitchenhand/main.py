"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Everything configurable is built here exactly once from
Settings and parked on app.state:

    app.state.settings         → Settings
    app.state.tokens           → TokenCodec (JWT secret + TTL)
    app.state.storage          → UploadStorage (local dir or S3)
    app.state.engine           → AsyncEngine
    app.state.session_factory  → async_sessionmaker

Dependencies read from app.state, so tests build an app from their own
Settings instead of patching environment variables.

There is no module-level app: uvicorn runs with `--factory`
(kitchenhand.main:create_app), so importing this module never requires
JWT_SECRET to be set.
"""

import os
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from kitchenhand import __version__
from kitchenhand.api import web_router
from kitchenhand.api.errors import register_exception_handlers
from kitchenhand.auth.jwt import TokenCodec
from kitchenhand.config import Settings, configure_logging, load_settings
from kitchenhand.db.engine import build_engine, build_session_factory, check_connection
from kitchenhand.storage import build_upload_storage

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs at
    shutdown. An unreachable database is logged, not fatal: pages fail
    with a 500 until it comes back.
    """
    settings: Settings = app.state.settings
    logger.info(
        "kitchenhand.starting",
        version=__version__,
        environment=settings.environment,
        storage=type(app.state.storage).__name__,
        port=settings.port,
    )

    try:
        await check_connection(app.state.engine)
        logger.info("kitchenhand.database_connected")
    except Exception as e:
        logger.warning("kitchenhand.database_unavailable", error=str(e))

    yield

    logger.info("kitchenhand.shutdown")
    await app.state.engine.dispose()


def create_app(settings: Optional[Settings] = None, *, s3_client=None) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or load_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Kitchen Hand Guide",
        description="Product and preparation catalog for kitchen staff",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
    )

    app.state.settings = settings
    app.state.tokens = TokenCodec(
        settings.jwt_secret,
        ttl_hours=settings.jwt_expiration_hours,
        algorithm=settings.jwt_algorithm,
    )
    app.state.storage = build_upload_storage(settings, s3_client=s3_client)
    app.state.engine = build_engine(settings)
    app.state.session_factory = build_session_factory(app.state.engine)

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → Security → handler

    from kitchenhand.middleware.request_id import RequestIdMiddleware
    from kitchenhand.middleware.security import SecurityHeadersMiddleware

    storage_origin = app.state.storage.origin
    app.add_middleware(
        SecurityHeadersMiddleware,
        image_origins=[storage_origin] if storage_origin else [],
        hsts=settings.secure_cookies,
    )
    app.add_middleware(RequestIdMiddleware)

    register_exception_handlers(app)
    app.include_router(web_router)

    # Local uploads are served from <static_dir>/uploads
    os.makedirs(settings.static_dir, exist_ok=True)
    app.mount("/static", StaticFiles(directory=settings.static_dir), name="static")

    return app
