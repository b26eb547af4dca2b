"""Bookmark model for storing user bookmarks."""
from uuid import UUID, uuid4

from sqlalchemy import JSON, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, CreatedAtMixin


class Bookmark(Base, CreatedAtMixin):
    """
    Bookmark model - stores URLs with an AI-derived title, summary, and tags.

    Every row belongs to exactly one owner (the identity-provider subject of the
    user who created it). All queries must be scoped by owner.
    """

    __tablename__ = "bookmarks"
    __table_args__ = (
        # Duplicate submissions carrying the same client token map to one row
        Index(
            "uq_bookmark_owner_idempotency_key",
            "owner",
            "idempotency_key",
            unique=True,
        ),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    owner: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    favicon_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    idempotency_key: Mapped[str | None] = mapped_column(String(64), nullable=True)
