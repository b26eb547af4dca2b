"""Service layer for bookmark list/create/delete operations."""
import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings
from models.bookmark import Bookmark
from schemas.bookmark import BookmarkCreate
from services.exceptions import BookmarkNotFoundError, StoreUnavailableError
from services.url_processor import favicon_url_for

logger = logging.getLogger(__name__)


async def list_bookmarks(db: AsyncSession, owner: str) -> list[Bookmark]:
    """
    Get all bookmarks for an owner, newest first.

    Raises:
        StoreUnavailableError: If the database cannot be queried.
    """
    try:
        result = await db.execute(
            select(Bookmark)
            .where(Bookmark.owner == owner)
            .order_by(Bookmark.created_at.desc(), Bookmark.id.desc()),
        )
        return list(result.scalars().all())
    except SQLAlchemyError as e:
        logger.error("Failed to list bookmarks for %s: %s", owner, e)
        raise StoreUnavailableError() from e


async def _get_by_idempotency_key(
    db: AsyncSession,
    owner: str,
    idempotency_key: str,
) -> Bookmark | None:
    result = await db.execute(
        select(Bookmark).where(
            Bookmark.owner == owner,
            Bookmark.idempotency_key == idempotency_key,
        ),
    )
    return result.scalar_one_or_none()


async def create_bookmark(
    db: AsyncSession,
    owner: str,
    data: BookmarkCreate,
    settings: Settings,
) -> tuple[Bookmark, bool]:
    """
    Create a new bookmark for an owner.

    If `data.idempotency_key` matches a bookmark this owner already created, that
    bookmark is returned and nothing is inserted, so a double submission yields
    a single row. The favicon URL is derived from the URL hostname with
    `settings.favicon_service_url` when the client did not supply one.

    Note: Does not commit. Caller (session generator) handles commit at request end.

    Returns:
        Tuple of (bookmark, created) where created is False for a replayed key.

    Raises:
        StoreUnavailableError: If the database rejects the operation.
    """
    try:
        if data.idempotency_key is not None:
            existing = await _get_by_idempotency_key(db, owner, data.idempotency_key)
            if existing is not None:
                logger.info(
                    "Idempotent replay of bookmark %s for %s", existing.id, owner,
                )
                return existing, False

        favicon_url = data.favicon_url or favicon_url_for(
            data.url, settings.favicon_service_url,
        )
        bookmark = Bookmark(
            owner=owner,
            url=data.url,
            title=data.title,
            summary=data.summary,
            tags=data.tags,
            favicon_url=favicon_url,
            idempotency_key=data.idempotency_key,
        )
        db.add(bookmark)
        await db.flush()
        await db.refresh(bookmark)
    except SQLAlchemyError as e:
        logger.error("Failed to create bookmark for %s: %s", owner, e)
        raise StoreUnavailableError() from e

    return bookmark, True


async def get_bookmark(
    db: AsyncSession,
    owner: str,
    bookmark_id: UUID,
) -> Bookmark | None:
    """Get a bookmark by ID, scoped to owner. Returns None if not found or wrong owner."""
    result = await db.execute(
        select(Bookmark).where(
            Bookmark.id == bookmark_id,
            Bookmark.owner == owner,
        ),
    )
    return result.scalar_one_or_none()


async def delete_bookmark(
    db: AsyncSession,
    owner: str,
    bookmark_id: UUID,
) -> None:
    """
    Permanently delete one bookmark belonging to owner.

    A bookmark owned by someone else is reported exactly like a missing one,
    and is never touched.

    Note: Does not commit. Caller (session generator) handles commit at request end.

    Raises:
        BookmarkNotFoundError: If no bookmark with this ID belongs to owner.
        StoreUnavailableError: If the database rejects the operation.
    """
    try:
        bookmark = await get_bookmark(db, owner, bookmark_id)
        if bookmark is None:
            raise BookmarkNotFoundError(bookmark_id)

        await db.delete(bookmark)
        await db.flush()
    except SQLAlchemyError as e:
        logger.error("Failed to delete bookmark %s for %s: %s", bookmark_id, owner, e)
        raise StoreUnavailableError() from e
