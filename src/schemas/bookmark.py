"""Pydantic schemas for bookmark endpoints."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.config import get_settings
from services.exceptions import InvalidUrlError
from services.url_processor import parse_hostname


def normalize_tags(tags: list[str] | None) -> list[str] | None:
    """
    Trim tags, drop blank entries, and remove duplicates (first occurrence wins).

    Tags are case-sensitive labels. Returns None when no tags remain, matching
    how bookmarks without tags are stored.
    """
    if tags is None:
        return None
    normalized: list[str] = []
    for tag in tags:
        trimmed = tag.strip()
        if trimmed and trimmed not in normalized:
            normalized.append(trimmed)
    return normalized or None


def blank_to_none(value: str | None) -> str | None:
    """Trim a text value, mapping empty results to None."""
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None


class BookmarkCreate(BaseModel):
    """
    Schema for creating a new bookmark.

    Only `url` is required. `title` and `summary` are whatever the user
    confirmed, typically pre-filled from POST /process-url.
    """

    url: str
    title: str | None = None
    summary: str | None = None
    tags: list[str] | None = None
    favicon_url: str | None = None
    idempotency_key: str | None = Field(
        default=None,
        max_length=64,
        description="Client-generated token. Resubmitting the same token returns the "
                    "bookmark created by the first submission instead of a duplicate.",
    )

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str) -> str:
        """Require an absolute http(s) URL; the value is stored trimmed but otherwise as given."""
        url = v.strip()
        try:
            parse_hostname(url)
        except InvalidUrlError:
            raise ValueError(f"URL must be an absolute http(s) URL (got '{v}')") from None
        return url

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str | None) -> str | None:
        """Trim title and validate length."""
        title = blank_to_none(v)
        max_length = get_settings().max_title_length
        if title is not None and len(title) > max_length:
            raise ValueError(
                f"Title exceeds maximum length of {max_length:,} characters "
                f"(got {len(title):,} characters).",
            )
        return title

    @field_validator("summary")
    @classmethod
    def check_summary(cls, v: str | None) -> str | None:
        """Trim summary and validate length."""
        summary = blank_to_none(v)
        max_length = get_settings().summary_max_length
        if summary is not None and len(summary) > max_length:
            raise ValueError(
                f"Summary exceeds maximum length of {max_length:,} characters "
                f"(got {len(summary):,} characters).",
            )
        return summary

    @field_validator("tags")
    @classmethod
    def check_tags(cls, v: list[str] | None) -> list[str] | None:
        """Normalize tags."""
        return normalize_tags(v)

    @field_validator("favicon_url")
    @classmethod
    def check_favicon_url(cls, v: str | None) -> str | None:
        """Trim favicon URL."""
        return blank_to_none(v)


class BookmarkResponse(BaseModel):
    """Schema for bookmark responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    url: str
    title: str | None
    summary: str | None
    tags: list[str] | None
    favicon_url: str | None
    created_at: datetime
