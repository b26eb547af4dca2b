"""
Content-summarization proxy endpoint.

Forwards a URL to the Jina AI reader using the server-held API key and returns
the derived title, summary, and favicon URL. Every failure is returned as a
structured `{"error": ...}` response; nothing propagates past this endpoint.
"""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.dependencies import get_settings
from core.config import Settings
from schemas.process_url import ErrorResponse, ProcessUrlResponse
from services import url_processor
from services.exceptions import (
    MisconfigurationError,
    MissingInputError,
    UpstreamFailureError,
)


logger = logging.getLogger(__name__)

router = APIRouter(tags=["process-url"])


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


async def _read_url(request: Request) -> object:
    """Return the `url` field of a JSON object body, or None if absent or unreadable."""
    try:
        payload = await request.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    return payload.get("url")


@router.post(
    "/process-url",
    response_model=ProcessUrlResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def process_url(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> ProcessUrlResponse | JSONResponse:
    """
    Derive title, summary, and favicon for a URL.

    - **400**: `url` missing, blank, or not an absolute http(s) URL
    - **500**: API key not configured, upstream failure, or unexpected error
    """
    url = await _read_url(request)

    try:
        result = await url_processor.process_url(url, settings)
    except MissingInputError as e:
        return _error_response(400, str(e))
    except MisconfigurationError as e:
        logger.error("process-url misconfigured: %s", e)
        return _error_response(500, str(e))
    except UpstreamFailureError as e:
        logger.error(
            "Upstream failure processing %s (status=%s, reason=%s)",
            url,
            e.status_code,
            e.reason,
        )
        return _error_response(500, str(e))
    except Exception:
        logger.exception("Error processing URL %s", url)
        return _error_response(500, "Internal server error")

    return ProcessUrlResponse(
        title=result.title,
        summary=result.summary,
        favicon_url=result.favicon_url,
        processed_url=result.processed_url,
    )
