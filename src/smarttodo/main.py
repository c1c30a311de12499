"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (schema creation, engine
disposal). Middleware, error handlers and routers all registered here.

The token codec is built once here from the settings and parked on
app.state; it is read-only for the life of the process.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from smarttodo import __version__
from smarttodo.api import api_router
from smarttodo.api.health import router as health_router
from smarttodo.auth.jwt import TokenCodec
from smarttodo.config import Settings, settings
from smarttodo.errors import install_error_handlers

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs at
    shutdown. Tables are created if missing; there are only two of them.
    """
    from smarttodo.db.engine import engine
    from smarttodo.db.models import Base

    config: Settings = app.state.settings
    logger.info(
        "smarttodo.starting",
        version=__version__,
        environment=config.environment,
        port=config.port,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("smarttodo.schema_ready")

    yield

    logger.info("smarttodo.shutdown")
    await engine.dispose()


def create_app(config: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    config = config or settings
    app = FastAPI(
        title="SmartTodo API",
        description="Multi-user task tracking with stateless JWT auth",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.token_codec = TokenCodec.from_settings(config)

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → Security → RequestId → handler

    from smarttodo.middleware.request_id import RequestIdMiddleware
    from smarttodo.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    install_error_handlers(app)

    app.include_router(health_router, tags=["health"])
    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: smarttodo.main:app)
app = create_app()
