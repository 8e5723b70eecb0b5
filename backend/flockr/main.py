"""
Flockr Backend
FastAPI application entry point

- Explicit lifecycle: database engine, email provider and media store are
  created at startup and released at shutdown
- Rate limiting with SlowAPI on auth endpoints
- Error sanitization middleware and {"message"} error bodies
- Request size limit sized for video uploads
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from flockr import __version__
from flockr.api.routes import auth, health, products
from flockr.core.config import Settings, settings as default_settings
from flockr.core.database import Database
from flockr.core.error_handler import ErrorSanitizationMiddleware, register_exception_handlers
from flockr.core.rate_limit import limiter, rate_limit_exceeded_handler
from flockr.services.email_provider import EmailProvider, build_email_provider
from flockr.services.storage import MediaStore, S3MediaStore

logger = logging.getLogger(__name__)

# Multipart overhead allowance on top of the video size limit
REQUEST_SIZE_SLACK = 1024 * 1024


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests that exceed the size limit."""

    def __init__(self, app, max_bytes: int):
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_bytes:
            logger.warning(
                f"Request size limit exceeded: {content_length} bytes from "
                f"{request.client.host if request.client else 'unknown'}"
            )
            return JSONResponse(
                status_code=413,
                content={
                    "message": f"Request body exceeds maximum size of {self.max_bytes // (1024 * 1024)}MB",
                },
            )
        return await call_next(request)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    email_provider: Optional[EmailProvider] = None,
    media_store: Optional[MediaStore] = None,
) -> FastAPI:
    """
    Build the application.

    Components passed in are used as-is; missing ones are created from
    settings during startup.
    """
    settings = settings or default_settings
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.database is None:
            app.state.database = Database.from_settings(settings)
        if app.state.email_provider is None:
            app.state.email_provider = build_email_provider(settings)
        if app.state.media_store is None:
            app.state.media_store = S3MediaStore.from_settings(settings)

        if settings.DB_AUTO_CREATE:
            await app.state.database.create_all()
        logger.info(f"{settings.APP_NAME} started (environment={settings.ENVIRONMENT})")

        yield

        await app.state.email_provider.close()
        await app.state.database.dispose()
        logger.info(f"{settings.APP_NAME} stopped")

    app = FastAPI(
        lifespan=lifespan,
        title=f"{settings.APP_NAME} API",
        description="Marketplace API: accounts with email verification, seller video listings, discovery.",
        version=__version__,
        openapi_tags=[
            {"name": "Health", "description": "Health check endpoints"},
            {"name": "Authentication", "description": "Registration, email verification and login"},
            {"name": "Products", "description": "Listings, discovery and seller management"},
        ],
    )

    app.state.settings = settings
    app.state.database = database
    app.state.email_provider = email_provider
    app.state.media_store = media_store

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    register_exception_handlers(app)

    app.add_middleware(
        RequestSizeLimitMiddleware,
        max_bytes=settings.max_video_size_bytes + REQUEST_SIZE_SLACK,
    )
    app.add_middleware(ErrorSanitizationMiddleware, debug=settings.DEBUG)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
    app.include_router(products.router, prefix="/products", tags=["Products"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("flockr.main:app", host="0.0.0.0", port=8000)
