"""
DevLink API — entry point.

Startup sequence:
  1. Configure logging
  2. Build the DB engine + session factory from Settings
  3. Configure OTel tracing (→ Jaeger via OTLP), when enabled
  4. Create tables if not present
  5. Start the GitHub HTTP client
  6. Expose Prometheus /metrics endpoint

Run with:
  uvicorn devlink.main:app --reload
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from devlink.clients.github_client import GithubClient
from devlink.config import Settings
from devlink.database import Database
from devlink.errors import DevlinkError, ValidationFailed
from devlink.routers import posts, profile, users
from devlink.telemetry import instrument_app, setup_tracing

logger = logging.getLogger(__name__)


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
    )


async def devlink_error_handler(request: Request, exc: DevlinkError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"msg": "Server Error"})
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"msg": err.get("msg", "Invalid value"), "param": ".".join(loc)})
    failure = ValidationFailed(errors)
    return JSONResponse(status_code=failure.status_code, content=failure.to_body())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"msg": "Server Error"})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    setup_logging(settings.log_level)

    database = Database(settings)
    github_client = GithubClient(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage startup and shutdown of all external connections."""
        logger.info("Starting DevLink API (env=%s)", settings.environment)

        await database.init_db()
        await github_client.start()

        logger.info("All services connected. API ready.")
        yield

        logger.info("Shutting down...")
        await github_client.stop()
        await database.dispose()

    app = FastAPI(
        title="DevLink API",
        description="Developer social network: profiles, posts, comments and likes.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.github_client = github_client

    app.add_exception_handler(DevlinkError, devlink_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # ── Routers ────────────────────────────────────────────────────────────
    app.include_router(users.users_router, prefix="/api/users", tags=["Users"])
    app.include_router(users.auth_router, prefix="/api/auth", tags=["Auth"])
    app.include_router(posts.router, prefix="/api/posts", tags=["Posts"])
    app.include_router(profile.router, prefix="/api/profile", tags=["Profile"])

    # ── Prometheus metrics endpoint ────────────────────────────────────────
    app.mount("/metrics", make_asgi_app())

    # ── OTel tracing + FastAPI instrumentation ─────────────────────────────
    if settings.otel_enabled:
        setup_tracing(settings, engine=database.engine)
        instrument_app(app)

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok", "service": settings.service_name}

    return app


app = create_app()
