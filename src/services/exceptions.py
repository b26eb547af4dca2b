"""Shared exceptions for service layer operations."""


class MissingInputError(Exception):
    """Raised when a request is missing a required value (maps to HTTP 400)."""

    def __init__(self, message: str = "URL is required") -> None:
        super().__init__(message)


class InvalidUrlError(MissingInputError):
    """Raised when a URL is present but is not an absolute http(s) URL with a hostname."""

    def __init__(self, message: str = "Invalid URL") -> None:
        super().__init__(message)


class MisconfigurationError(Exception):
    """
    Raised when a required server-side secret is not configured.

    The message must never include secret-derived detail.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)


class UpstreamFailureError(Exception):
    """
    Raised when the content-extraction service fails (non-success status or network error).

    Carries the upstream status code and reason for server-side logging; callers
    only ever see the generic message.
    """

    def __init__(
        self,
        message: str = "Failed to process URL with Jina AI",
        status_code: int | None = None,
        reason: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        super().__init__(message)


class StoreUnavailableError(Exception):
    """Raised when the bookmark store is unreachable or rejected the operation."""

    def __init__(self, message: str = "Bookmark store unavailable") -> None:
        super().__init__(message)


class BookmarkNotFoundError(Exception):
    """Raised when a bookmark does not exist or belongs to another owner."""

    def __init__(self, bookmark_id: object) -> None:
        self.bookmark_id = bookmark_id
        super().__init__(f"Bookmark not found: {bookmark_id}")


class InvalidBookmarkError(Exception):
    """Raised when the store rejects bookmark values as invalid (HTTP 400/422); not retryable."""

    def __init__(self, message: str = "Invalid bookmark") -> None:
        super().__init__(message)
