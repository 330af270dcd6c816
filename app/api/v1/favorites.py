"""Saved listing endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user_id, get_db
from app.models.favorite import Favorite
from app.schemas.favorite import FavoriteResponse, FavoriteToggleResponse
from app.services import favorite_service

router = APIRouter()


@router.get("/", response_model=list[FavoriteResponse])
async def get_favorites(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[Favorite]:
    """Get the current user's saved listings, newest first."""
    return await favorite_service.list_favorites(db, user_id)


@router.post("/{listing_id}/toggle", response_model=FavoriteToggleResponse)
async def toggle_favorite(
    listing_id: UUID,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Save or unsave a listing."""
    result = await favorite_service.toggle_favorite(db, user_id, listing_id)
    return result.unwrap()
