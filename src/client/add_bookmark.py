"""
Two-phase add-bookmark workflow.

Phase 1 (`enrich`) is optional: it asks the server to summarize the URL and
pre-fills blank fields. It may fail or be cancelled without affecting the
draft. Phase 2 (`submit`) persists whatever the user confirmed and never
depends on phase 1 having succeeded.
"""
import logging
from dataclasses import dataclass, field
from uuid import uuid4

from client.api_client import Bookmark, BookmarksClient
from client.dashboard import DashboardController
from services.exceptions import MissingInputError, UpstreamFailureError

logger = logging.getLogger(__name__)

ENRICH_FAILED_NOTICE = "Could not process URL. Please add details manually."


def _new_idempotency_key() -> str:
    return uuid4().hex


@dataclass
class AddBookmarkDraft:
    """
    Form values for a bookmark being added.

    The idempotency key is generated once per draft, so submitting the same
    draft twice (double click, retry after a network error) creates one
    bookmark.
    """

    url: str = ""
    title: str = ""
    summary: str = ""
    tags: list[str] = field(default_factory=list)
    idempotency_key: str = field(default_factory=_new_idempotency_key)
    notice: str | None = None

    def add_tag(self, tag: str) -> bool:
        """
        Add a trimmed tag.

        Returns:
            False if the tag is blank or already present (no-op).
        """
        trimmed = tag.strip()
        if not trimmed or trimmed in self.tags:
            return False
        self.tags.append(trimmed)
        return True

    def remove_tag(self, tag: str) -> None:
        """Remove a tag if present."""
        self.tags = [t for t in self.tags if t != tag]

    async def enrich(self, client: BookmarksClient) -> bool:
        """
        Pre-fill title and summary from the server's URL processing.

        Only blank fields are filled; values the user already typed are kept.
        Failures set a notice and leave the draft unchanged. Cancelling the
        awaiting task also leaves the draft unchanged.

        Returns:
            True if the draft was enriched.
        """
        url = self.url.strip()
        if not url:
            return False

        try:
            processed = await client.process_url(url)
        except (MissingInputError, UpstreamFailureError) as e:
            logger.warning("Error processing URL %s: %s", url, e)
            self.notice = ENRICH_FAILED_NOTICE
            return False

        if not self.title.strip():
            self.title = processed.title
        if not self.summary.strip():
            self.summary = processed.summary
        self.notice = None
        return True

    async def submit(
        self,
        client: BookmarksClient,
        controller: DashboardController,
    ) -> Bookmark:
        """
        Persist the draft and add the stored bookmark to the dashboard.

        Raises:
            MissingInputError: If the URL is blank.
            InvalidBookmarkError: If the server rejected a value; the user has
                to edit the draft before submitting again.
            StoreUnavailableError: If saving failed; the draft is kept so the
                user can retry with the same idempotency key.
        """
        url = self.url.strip()
        if not url:
            raise MissingInputError()

        bookmark = await client.create_bookmark(
            url=url,
            title=self.title.strip() or None,
            summary=self.summary.strip() or None,
            tags=list(self.tags) or None,
            idempotency_key=self.idempotency_key,
        )
        controller.record_created(bookmark)
        return bookmark

    def reset(self) -> None:
        """Clear the form for the next bookmark, with a fresh idempotency key."""
        self.url = ""
        self.title = ""
        self.summary = ""
        self.tags = []
        self.notice = None
        self.idempotency_key = _new_idempotency_key()
