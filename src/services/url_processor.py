"""
URL processing service: derives a title, summary, and favicon for a URL.

Page fetching and text extraction are delegated to the Jina AI reader, which is
called with a server-held API key so the key is never exposed to clients. This
module does not persist anything; callers decide what to store.
"""
import logging
from dataclasses import dataclass
from urllib.parse import quote, urlencode, urlparse

import httpx

from core.config import Settings
from services.exceptions import (
    InvalidUrlError,
    MisconfigurationError,
    MissingInputError,
    UpstreamFailureError,
)

logger = logging.getLogger(__name__)

USER_AGENT = 'Mozilla/5.0 (compatible; Linkshelf/1.0)'
UNTITLED = 'Untitled'
FAVICON_SIZE = 64
DEFAULT_FAVICON_SERVICE_URL = 'https://www.google.com/s2/favicons'
DEFAULT_SUMMARY_LENGTH = 1000
# Characters left unescaped by JavaScript's encodeURIComponent
URI_COMPONENT_SAFE = "!*'()"


@dataclass
class ProcessedUrl:
    """Metadata derived for a URL by the content-extraction service."""

    title: str
    summary: str
    favicon_url: str
    processed_url: str


def parse_hostname(url: str) -> str:
    """
    Return the lowercased hostname of an absolute http(s) URL.

    Raises:
        InvalidUrlError: If the URL is not absolute or has no hostname.
    """
    try:
        parsed = urlparse(url.strip())
        hostname = parsed.hostname
    except ValueError as e:
        raise InvalidUrlError() from e

    if parsed.scheme.lower() not in ('http', 'https') or not hostname:
        raise InvalidUrlError()
    return hostname


def favicon_url_for(url: str, service_url: str = DEFAULT_FAVICON_SERVICE_URL) -> str:
    """
    Build the favicon URL for a page URL.

    Deterministic function of the hostname only; the result is never fetched or
    validated here.
    """
    query = urlencode({'domain': parse_hostname(url), 'sz': FAVICON_SIZE})
    return f"{service_url}?{query}"


def derive_title(text: str) -> str:
    """
    Use the first non-blank line of the extracted text as the page title.

    Returns 'Untitled' when the text has no non-blank lines.
    """
    for line in text.split('\n'):
        stripped = line.strip()
        if stripped:
            return stripped
    return UNTITLED


def truncate_summary(text: str, limit: int = DEFAULT_SUMMARY_LENGTH) -> str:
    """Return the first `limit` characters of the extracted text."""
    return text[:limit]


def build_reader_url(url: str, reader_base_url: str) -> str:
    """Build the Jina AI reader request URL for a page URL."""
    return f"{reader_base_url}http://{quote(url, safe=URI_COMPONENT_SAFE)}"


async def fetch_extracted_text(url: str, settings: Settings) -> str:
    """
    Fetch the extracted text for a URL from the Jina AI reader.

    Transport errors (timeouts, connection failures) are retried up to
    `settings.jina_max_retries` times. Non-success HTTP statuses are not retried.

    Raises:
        MisconfigurationError: If no API key is configured.
        UpstreamFailureError: If the reader returns a non-success status or
            cannot be reached after all attempts.
    """
    if not settings.jina_api_key:
        raise MisconfigurationError('Jina AI API key not configured')

    reader_url = build_reader_url(url, settings.jina_reader_url)
    attempts = settings.jina_max_retries + 1

    async with httpx.AsyncClient(
        timeout=settings.jina_timeout,
        headers={
            'Authorization': f'Bearer {settings.jina_api_key}',
            'User-Agent': USER_AGENT,
        },
    ) as client:
        for attempt in range(1, attempts + 1):
            try:
                response = await client.get(reader_url)
                break
            except httpx.TransportError as e:
                logger.warning(
                    "Jina AI request attempt %d/%d for %s failed: %s",
                    attempt,
                    attempts,
                    url,
                    e,
                )
                if attempt == attempts:
                    logger.error("Jina AI request failed: %s", e)
                    raise UpstreamFailureError(reason=str(e)) from e

    if not response.is_success:
        logger.error(
            "Jina AI request failed: %s %s",
            response.status_code,
            response.reason_phrase,
        )
        raise UpstreamFailureError(
            status_code=response.status_code,
            reason=response.reason_phrase,
        )

    return response.text


async def process_url(url: object, settings: Settings) -> ProcessedUrl:
    """
    Derive a title, truncated summary, and favicon URL for a page.

    The title is capped at `settings.max_title_length`, so it can always be
    saved as a bookmark title.

    Validation happens before any network call: a missing or blank URL raises
    MissingInputError, a malformed one raises InvalidUrlError, and a missing
    API key raises MisconfigurationError.

    Args:
        url: The URL as received from the client (echoed back unchanged).
        settings: Application settings (API key, reader URL, limits).

    Returns:
        ProcessedUrl with the derived metadata.
    """
    if not isinstance(url, str) or not url.strip():
        raise MissingInputError()

    favicon_url = favicon_url_for(url, settings.favicon_service_url)

    logger.info("Processing URL: %s", url)
    text = await fetch_extracted_text(url.strip(), settings)
    logger.info("Extracted text length for %s: %d", url, len(text))

    return ProcessedUrl(
        title=derive_title(text)[:settings.max_title_length],
        summary=truncate_summary(text, settings.summary_max_length),
        favicon_url=favicon_url,
        processed_url=url,
    )
