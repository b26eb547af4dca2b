"""
In-memory search and tag filtering over a user's loaded bookmarks.

Pure functions with no I/O. They accept any object exposing `title`, `summary`,
`url`, and `tags` attributes (ORM rows, response schemas, client dataclasses),
so the same rules apply wherever a bookmark list is held.
"""
from collections.abc import Collection, Iterable
from typing import Protocol, TypeVar


class Filterable(Protocol):
    """Attributes the filters read from a bookmark."""

    title: str | None
    summary: str | None
    url: str
    tags: list[str] | None


T = TypeVar("T", bound=Filterable)


def passes_text_filter(bookmark: Filterable, term: str) -> bool:
    """
    Case-insensitive substring match against title, summary, url, and each tag.

    A blank term matches every bookmark. Missing fields never match.
    """
    if not term.strip():
        return True

    needle = term.lower()
    fields = [bookmark.title, bookmark.summary, bookmark.url, *(bookmark.tags or [])]
    return any(field is not None and needle in field.lower() for field in fields)


def passes_tag_filter(bookmark: Filterable, selected_tags: Collection[str]) -> bool:
    """
    Tag filter with OR semantics.

    An empty selection matches every bookmark; otherwise the bookmark must carry
    at least one of the selected tags (exact match).
    """
    if not selected_tags:
        return True
    return any(tag in selected_tags for tag in bookmark.tags or [])


def filter_bookmarks(
    bookmarks: Iterable[T],
    term: str = "",
    selected_tags: Collection[str] = (),
) -> list[T]:
    """
    Return the bookmarks passing both the text filter and the tag filter.

    Input order is preserved (the store supplies newest first).
    """
    selected = set(selected_tags)
    return [
        bookmark
        for bookmark in bookmarks
        if passes_text_filter(bookmark, term) and passes_tag_filter(bookmark, selected)
    ]


def available_tags(bookmarks: Iterable[Filterable]) -> list[str]:
    """Union of every tag across the bookmarks, deduplicated in first-seen order."""
    # dict preserves insertion order
    seen: dict[str, None] = {}
    for bookmark in bookmarks:
        for tag in bookmark.tags or []:
            seen.setdefault(tag, None)
    return list(seen)
