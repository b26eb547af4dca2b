"""
Dashboard state for one signed-in user.

All mutable state (loaded bookmarks, search term, selected tags, the current
notice) lives in a single DashboardState owned by DashboardController. The
visible list and the tag options are computed from that state by the pure
functions in services.bookmark_filter.
"""
import logging
from dataclasses import dataclass, field
from enum import StrEnum

from client.api_client import Bookmark, BookmarksClient
from services import bookmark_filter
from services.exceptions import BookmarkNotFoundError, StoreUnavailableError

logger = logging.getLogger(__name__)

LOAD_FAILED_NOTICE = "Could not load bookmarks. Please try again."
DELETE_FAILED_NOTICE = "Failed to delete bookmark"


class Reconciliation(StrEnum):
    """How a delete request was reconciled with local state."""

    REMOVED = "removed"
    # The server no longer had the row; the local copy was stale and is dropped
    ALREADY_GONE = "already_gone"
    FAILED = "failed"


@dataclass
class DashboardState:
    """Explicit application state for the bookmark dashboard."""

    bookmarks: list[Bookmark] = field(default_factory=list)
    search_term: str = ""
    selected_tags: list[str] = field(default_factory=list)
    notice: str | None = None


class DashboardController:
    """
    Owns DashboardState and applies every change to it.

    Mutations reconcile local state from what the server returned, so a
    refresh that overlaps a create or delete cannot resurrect a deleted row or
    drop a freshly created one.
    """

    def __init__(self, client: BookmarksClient) -> None:
        self._client = client
        self.state = DashboardState()
        self._refreshing = 0
        self._created_during_refresh: dict[str, Bookmark] = {}
        self._removed_during_refresh: set[str] = set()

    @property
    def visible_bookmarks(self) -> list[Bookmark]:
        """Bookmarks passing the current search term and tag selection."""
        return bookmark_filter.filter_bookmarks(
            self.state.bookmarks,
            self.state.search_term,
            self.state.selected_tags,
        )

    @property
    def available_tags(self) -> list[str]:
        """Every tag across the loaded bookmarks, offered as filter options."""
        return bookmark_filter.available_tags(self.state.bookmarks)

    async def refresh(self) -> bool:
        """
        Reload the full list from the server.

        On failure the previously loaded list is kept and a notice is set; a
        later successful refresh clears that notice.

        Returns:
            True if the list was reloaded.
        """
        if self._refreshing == 0:
            self._created_during_refresh.clear()
            self._removed_during_refresh.clear()
        self._refreshing += 1
        try:
            fetched = await self._client.list_bookmarks()
        except StoreUnavailableError as e:
            logger.warning("Error loading bookmarks: %s", e)
            self.state.notice = LOAD_FAILED_NOTICE
            return False
        finally:
            self._refreshing -= 1

        fetched_ids = {b.id for b in fetched}
        created = [
            b for b in self._created_during_refresh.values() if b.id not in fetched_ids
        ]
        self.state.bookmarks = created[::-1] + [
            b for b in fetched if b.id not in self._removed_during_refresh
        ]
        if self.state.notice == LOAD_FAILED_NOTICE:
            self.state.notice = None
        self._prune_selected_tags()
        return True

    def set_search_term(self, term: str) -> None:
        """Set the free-text search term."""
        self.state.search_term = term

    def toggle_tag(self, tag: str) -> None:
        """Select a tag filter, or deselect it if already selected."""
        if tag in self.state.selected_tags:
            self.state.selected_tags.remove(tag)
        else:
            self.state.selected_tags.append(tag)

    def clear_filters(self) -> None:
        """Reset the search term and tag selection."""
        self.state.search_term = ""
        self.state.selected_tags = []

    def dismiss_notice(self) -> None:
        """Clear the current user-visible notice."""
        self.state.notice = None

    def record_created(self, bookmark: Bookmark) -> bool:
        """
        Add a bookmark the server just created to the top of the list.

        Returns:
            False if a bookmark with the same id is already present (for example
            an idempotent replay), in which case nothing changes.
        """
        if self._refreshing:
            self._created_during_refresh[bookmark.id] = bookmark
        if any(b.id == bookmark.id for b in self.state.bookmarks):
            return False
        self.state.bookmarks.insert(0, bookmark)
        return True

    async def remove(self, bookmark_id: str) -> Reconciliation:
        """
        Delete a bookmark on the server and drop it locally.

        A bookmark the server no longer has is dropped as well. If the store is
        unavailable, local state is left unchanged and a notice is set.
        """
        try:
            await self._client.delete_bookmark(bookmark_id)
            outcome = Reconciliation.REMOVED
        except BookmarkNotFoundError:
            logger.info("Bookmark %s was already gone", bookmark_id)
            outcome = Reconciliation.ALREADY_GONE
        except StoreUnavailableError as e:
            logger.warning("Error deleting bookmark %s: %s", bookmark_id, e)
            self.state.notice = DELETE_FAILED_NOTICE
            return Reconciliation.FAILED

        if self._refreshing:
            self._removed_during_refresh.add(bookmark_id)
        self._created_during_refresh.pop(bookmark_id, None)
        self.state.bookmarks = [b for b in self.state.bookmarks if b.id != bookmark_id]
        self._prune_selected_tags()
        return outcome

    def _prune_selected_tags(self) -> None:
        """Drop selected tags that no bookmark carries any more."""
        tags = set(self.available_tags)
        self.state.selected_tags = [t for t in self.state.selected_tags if t in tags]
