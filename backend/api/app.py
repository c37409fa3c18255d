"""FastAPI application."""

import logging
import secrets
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.middleware.sessions import SessionMiddleware

from backend.api.limiter import limiter
from backend.api.routes import events, message, session
from backend.config import Settings, settings
from backend.crm import close_http_client
from backend.errors import RelayError

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Close the shared Salesforce HTTP client on shutdown."""
    yield
    await close_http_client()


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Return 429 with a clear message when rate limit is exceeded."""
    return JSONResponse(
        status_code=429,
        content={"status": "error", "error": "rate_limited", "message": f"Rate limit exceeded: {exc.detail}"},
    )


async def relay_error_handler(request: Request, exc: RelayError):
    """Render relay failures as structured JSON."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def _session_secret(config: Settings) -> str:
    if config.session_secret_key:
        return config.session_secret_key
    logger.warning("SESSION_SECRET_KEY not set, using a random key; sessions will not survive a restart")
    return secrets.token_urlsafe(32)


def _allowed_origins(config: Settings) -> list[str]:
    return [o.strip() for o in config.cors_origins.split(",") if o.strip()]


def create_app(config: Settings = settings) -> FastAPI:
    """Build the API with cookie and CORS policy taken from ``config``."""
    app = FastAPI(
        title="Job Board Agent API",
        description="Einstein agent sessions for job applicants",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(RelayError, relay_error_handler)

    app.add_middleware(
        SessionMiddleware,
        secret_key=_session_secret(config),
        session_cookie=config.session_cookie_name,
        path="/",
        same_site="lax",
        https_only=config.is_production,
        max_age=None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_allowed_origins(config),
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.include_router(session.router, prefix="/session", tags=["Session"])
    app.include_router(message.router, prefix="/message", tags=["Message"])
    app.include_router(events.router, prefix="/events", tags=["Events"])

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
