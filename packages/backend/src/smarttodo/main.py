"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. The credential key is derived from settings exactly once here
and handed to the issuer and verifier via app.state; nothing in the auth
gateway reads configuration globally. Lifespan creates missing tables on
startup and disposes the engine on shutdown.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from smarttodo import __version__
from smarttodo.api import api_router
from smarttodo.api.errors import register_error_handlers
from smarttodo.auth.jwt import CredentialKey, TokenIssuer, TokenVerifier
from smarttodo.config import Settings, settings as default_settings

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    settings: Settings = app.state.settings
    logger.info(
        "smarttodo.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    from smarttodo.db.engine import engine, init_models

    await init_models(engine)
    logger.info("smarttodo.tables_ready")

    yield

    logger.info("smarttodo.shutdown")
    await engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or default_settings

    app = FastAPI(
        title="Smart ToDo API",
        description="Multi-user task tracking with bearer-token auth",
        version=__version__,
        lifespan=lifespan,
    )

    # Init-once, immutable for the app's lifetime.
    key = CredentialKey(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        lifetime=settings.token_lifetime,
    )
    app.state.settings = settings
    app.state.token_issuer = TokenIssuer(key)
    app.state.token_verifier = TokenVerifier(key)

    # ── Middleware stack ──────────────────────────────────────
    # Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → Security → RequestId → handler

    from smarttodo.middleware.request_id import RequestIdMiddleware
    from smarttodo.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    register_error_handlers(app, production=settings.is_production)

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: smarttodo.main:app)
app = create_app()
