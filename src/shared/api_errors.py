"""
Shared API error parsing for clients of the Linkshelf API.

Extracts a semantic category and a user-facing message from an httpx
HTTPStatusError. The client layer maps categories onto its domain exceptions.
"""

from dataclasses import dataclass
from typing import Literal

import httpx

ErrorCategory = Literal[
    "auth",         # 401 - Invalid or expired token
    "not_found",    # 404 - Resource missing or owned by another user
    "validation",   # 400/422 - Validation error
    "unavailable",  # 503 - Bookmark store unavailable
    "internal",     # other 5xx or unexpected errors
]


@dataclass
class ParsedApiError:
    """Parsed API error with semantic category and message."""

    category: ErrorCategory
    message: str


def parse_http_error(  # noqa: PLR0911
    e: httpx.HTTPStatusError,
    entity_type: str = "",
) -> ParsedApiError:
    """
    Parse HTTP error into semantic categories.

    Args:
        e: The HTTP status error from httpx
        entity_type: Type of entity (e.g., "bookmark") for error messages

    Returns:
        ParsedApiError with category and message
    """
    status = e.response.status_code

    if status == 401:
        return ParsedApiError("auth", "Invalid or expired token")

    if status == 404:
        msg = f"{entity_type.title()} not found" if entity_type else "Not found"
        return ParsedApiError("not_found", msg)

    if status in (400, 422):
        return ParsedApiError("validation", _extract_message(e, "Validation error"))

    if status == 503:
        return ParsedApiError("unavailable", _extract_message(e, "Service unavailable"))

    return ParsedApiError("internal", _extract_message(e, f"API error {status}"))


def _extract_message(e: httpx.HTTPStatusError, default: str) -> str:
    """
    Extract a message from an error body.

    Understands the process-url `{"error": ...}` shape and FastAPI's
    `{"detail": ...}` shape, including validation error lists.
    """
    try:
        body = e.response.json()
    except ValueError:
        return default
    if not isinstance(body, dict):
        return default

    if isinstance(body.get("error"), str):
        return body["error"]

    detail = body.get("detail")
    if isinstance(detail, str) and detail:
        return detail
    if isinstance(detail, list):
        # FastAPI validation errors return a list of error objects
        messages = []
        for err in detail:
            if isinstance(err, dict):
                loc = err.get("loc", ["unknown"])
                field = loc[-1] if loc else "unknown"
                msg = err.get("msg", "invalid")
                messages.append(f"{field}: {msg}")
        return "; ".join(messages) if messages else default
    return default
