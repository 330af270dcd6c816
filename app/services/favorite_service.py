"""Saved listings."""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.domain.results import ErrorKind, ServiceResult
from app.models.favorite import Favorite
from app.models.listing import Listing

logger = logging.getLogger(__name__)


async def toggle_favorite(
    db: AsyncSession,
    user_id: str,
    listing_id: UUID,
) -> ServiceResult[dict]:
    """Save the listing if it isn't saved, otherwise remove it."""
    result = await db.execute(
        select(Favorite).where(Favorite.user_id == user_id, Favorite.listing_id == listing_id)
    )
    existing = result.scalar_one_or_none()

    if existing:
        await db.delete(existing)
        await db.flush()
        return ServiceResult.success({"listing_id": listing_id, "is_favorited": False})

    if not await db.get(Listing, listing_id):
        return ServiceResult.failure(ErrorKind.NOT_FOUND, "Listing not found")

    db.add(Favorite(user_id=user_id, listing_id=listing_id))
    await db.flush()
    return ServiceResult.success({"listing_id": listing_id, "is_favorited": True})


async def list_favorites(db: AsyncSession, user_id: str) -> list[Favorite]:
    """The user's saved listings, newest first."""
    result = await db.execute(
        select(Favorite)
        .options(selectinload(Favorite.listing))
        .where(Favorite.user_id == user_id)
        .order_by(Favorite.created_at.desc())
    )
    return list(result.scalars().all())


async def is_favorited(db: AsyncSession, user_id: str, listing_id: UUID) -> bool:
    result = await db.execute(
        select(Favorite.id).where(Favorite.user_id == user_id, Favorite.listing_id == listing_id)
    )
    return result.scalar_one_or_none() is not None
