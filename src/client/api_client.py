"""HTTP client for the Linkshelf API: URL processing and bookmark persistence."""
import logging
import os
from dataclasses import dataclass
from datetime import datetime
from types import TracebackType
from typing import Any

import httpx

from services.exceptions import (
    BookmarkNotFoundError,
    InvalidBookmarkError,
    MissingInputError,
    StoreUnavailableError,
    UpstreamFailureError,
)
from services.url_processor import UNTITLED, ProcessedUrl
from shared.api_errors import parse_http_error

logger = logging.getLogger(__name__)


def get_api_base_url() -> str:
    """Get the API base URL from environment."""
    return os.getenv("BOOKMARKS_API_URL", "http://localhost:8000")


def get_default_timeout() -> float:
    """Get the default request timeout."""
    return float(os.getenv("BOOKMARKS_API_TIMEOUT", "30.0"))


@dataclass
class Bookmark:
    """A bookmark as loaded from the API."""

    id: str
    url: str
    title: str | None = None
    summary: str | None = None
    tags: list[str] | None = None
    favicon_url: str | None = None
    created_at: datetime | None = None

    @property
    def display_title(self) -> str:
        """Title to show, falling back to 'Untitled'."""
        return self.title or UNTITLED

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Bookmark":
        """Build a Bookmark from an API response item."""
        created_at = data.get("created_at")
        return cls(
            id=str(data["id"]),
            url=data["url"],
            title=data.get("title"),
            summary=data.get("summary"),
            tags=data.get("tags"),
            favicon_url=data.get("favicon_url"),
            created_at=datetime.fromisoformat(created_at) if created_at else None,
        )


class BookmarksClient:
    """
    Async client for the bookmark API, authenticated as one user.

    Persistence failures surface as StoreUnavailableError (retryable by the
    user) or InvalidBookmarkError (the values must be changed first); URL
    processing failures surface as UpstreamFailureError so callers can fall
    back to manual entry.

    Usage:
        async with BookmarksClient(token) as client:
            bookmarks = await client.list_bookmarks()
    """

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.AsyncClient(
            base_url=base_url or get_api_base_url(),
            timeout=timeout if timeout is not None else get_default_timeout(),
            headers=headers,
            transport=transport,
        )

    async def __aenter__(self) -> "BookmarksClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()

    async def process_url(self, url: str) -> ProcessedUrl:
        """
        Ask the server to derive title, summary, and favicon for a URL.

        Raises:
            MissingInputError: If the server rejected the URL (400).
            UpstreamFailureError: For any other failure, including network errors
                and success responses without the expected fields.
        """
        try:
            response = await self._client.post("/process-url", json={"url": url})
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            parsed = parse_http_error(e)
            if parsed.category == "validation":
                raise MissingInputError(parsed.message) from e
            raise UpstreamFailureError(
                parsed.message, status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise UpstreamFailureError(reason=str(e)) from e

        try:
            data = response.json()
            return ProcessedUrl(
                title=data["title"],
                summary=data["summary"],
                favicon_url=data["faviconUrl"],
                processed_url=data["processedUrl"],
            )
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Malformed /process-url response: %s", e)
            raise UpstreamFailureError(reason=f"Malformed response: {e}") from e

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """
        Send a persistence request, mapping transport and 5xx/4xx failures.

        Rejected values (400/422) raise InvalidBookmarkError, which a retry
        cannot fix; everything else that fails is StoreUnavailableError.
        """
        try:
            response = await self._client.request(method, path, json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            parsed = parse_http_error(e, entity_type="bookmark")
            if parsed.category == "not_found":
                raise BookmarkNotFoundError(path) from e
            if parsed.category == "validation":
                raise InvalidBookmarkError(parsed.message) from e
            logger.warning("%s %s failed: %s", method, path, parsed.message)
            raise StoreUnavailableError(parsed.message) from e
        except httpx.RequestError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise StoreUnavailableError() from e
        return response

    async def list_bookmarks(self) -> list[Bookmark]:
        """Load all bookmarks of the current user, newest first."""
        response = await self._request("GET", "/bookmarks/")
        return [Bookmark.from_api(item) for item in response.json()]

    async def create_bookmark(
        self,
        url: str,
        title: str | None = None,
        summary: str | None = None,
        tags: list[str] | None = None,
        idempotency_key: str | None = None,
    ) -> Bookmark:
        """
        Persist a bookmark and return the stored row.

        Raises:
            InvalidBookmarkError: If the server rejected a value (e.g. title too long).
            StoreUnavailableError: If the store could not be reached.
        """
        response = await self._request(
            "POST",
            "/bookmarks/",
            json={
                "url": url,
                "title": title,
                "summary": summary,
                "tags": tags,
                "idempotency_key": idempotency_key,
            },
        )
        return Bookmark.from_api(response.json())

    async def delete_bookmark(self, bookmark_id: str) -> None:
        """
        Permanently delete a bookmark.

        Raises:
            BookmarkNotFoundError: If it no longer exists (or is not ours).
            StoreUnavailableError: If the store could not be reached.
        """
        try:
            await self._request("DELETE", f"/bookmarks/{bookmark_id}")
        except BookmarkNotFoundError as e:
            raise BookmarkNotFoundError(bookmark_id) from e
