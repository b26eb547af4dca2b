"""Bookmark list/create/delete endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_owner, get_settings
from core.config import Settings
from schemas.bookmark import BookmarkCreate, BookmarkResponse
from services import bookmark_service
from services.exceptions import BookmarkNotFoundError

router = APIRouter(prefix="/bookmarks", tags=["bookmarks"])


@router.get("/", response_model=list[BookmarkResponse])
async def list_bookmarks(
    owner: str = Depends(get_current_owner),
    db: AsyncSession = Depends(get_async_session),
) -> list[BookmarkResponse]:
    """
    List every bookmark of the current user, newest first.

    Search and tag filtering are applied client-side over this full list.
    """
    bookmarks = await bookmark_service.list_bookmarks(db, owner)
    return [BookmarkResponse.model_validate(b) for b in bookmarks]


@router.post("/", response_model=BookmarkResponse, status_code=201)
async def create_bookmark(
    data: BookmarkCreate,
    response: Response,
    owner: str = Depends(get_current_owner),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> BookmarkResponse:
    """
    Create a new bookmark and return it.

    Returns 201 for a new bookmark, or 200 with the original bookmark when the
    request repeats an `idempotency_key` already used by this user.
    """
    bookmark, created = await bookmark_service.create_bookmark(db, owner, data, settings)
    if not created:
        response.status_code = 200
    return BookmarkResponse.model_validate(bookmark)


@router.delete("/{bookmark_id}", status_code=204)
async def delete_bookmark(
    bookmark_id: UUID,
    owner: str = Depends(get_current_owner),
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Permanently delete a bookmark. Returns 404 if missing or owned by another user."""
    try:
        await bookmark_service.delete_bookmark(db, owner, bookmark_id)
    except BookmarkNotFoundError:
        raise HTTPException(status_code=404, detail="Bookmark not found")
