"""FastAPI application entry point."""
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from api.routers import bookmarks, health, process_url
from core.config import get_settings
from db.session import engine
from services.exceptions import StoreUnavailableError


logger = logging.getLogger(__name__)

# The process-url endpoint is public: any origin may call it. Access control
# happens at persistence time through owner scoping.
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "GET, POST, DELETE, OPTIONS",
}


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan - startup and shutdown."""
    app_settings = get_settings()
    logging.basicConfig(
        level=app_settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not app_settings.jina_api_key:
        logger.warning("JINA_API_KEY is not set; /process-url will return 500")

    yield

    await engine.dispose()


class PublicCORSMiddleware(BaseHTTPMiddleware):
    """Answer preflight requests and add permissive CORS headers to every response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        """Short-circuit OPTIONS with an empty 200; otherwise decorate the response."""
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process request and add security headers to response."""
        response = await call_next(request)
        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"
        # API responses are never meant to be framed
        response.headers["X-Frame-Options"] = "DENY"
        return response


app = FastAPI(
    title="Linkshelf API",
    description="Personal bookmark manager with AI-generated page summaries and tags.",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(StoreUnavailableError)
async def store_unavailable_exception_handler(
    _request: Request, exc: StoreUnavailableError,
) -> JSONResponse:
    """Report persistence failures as a retryable 503."""
    return JSONResponse(status_code=503, content={"detail": str(exc)})


app.add_middleware(SecurityHeadersMiddleware)

# Added last so it is outermost and also decorates preflight responses
app.add_middleware(PublicCORSMiddleware)

app.include_router(health.router)
app.include_router(process_url.router)
app.include_router(bookmarks.router)
