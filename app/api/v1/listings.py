"""Listing endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import (
    get_current_user_id,
    get_db,
    get_notification_service,
    get_optional_user_id,
)
from app.models.listing import Listing
from app.models.review import Review
from app.schemas.listing import (
    ListingCreate,
    ListingResponse,
    ListingUpdate,
    RatingSummaryResponse,
)
from app.schemas.review import ReviewResponse
from app.services import listing_service, review_service
from app.services.listing_service import ListingFilters
from app.services.notification_service import NotificationService

router = APIRouter()


@router.get("/", response_model=list[ListingResponse])
async def search_listings(
    db: Annotated[AsyncSession, Depends(get_db)],
    city: str | None = Query(None, max_length=100),
    region: str | None = Query(None, min_length=2, max_length=2),
    category: str | None = Query(None),
    guests: int | None = Query(None, ge=1, le=50),
    max_price: int | None = Query(None, ge=0),
) -> list[Listing]:
    """Browse approved listings, newest first."""
    filters = ListingFilters(
        city=city,
        region=region,
        category=category,
        min_guests=guests,
        max_price=max_price,
    )
    return await listing_service.list_public_listings(db, filters)


@router.post("/", response_model=ListingResponse, status_code=status.HTTP_201_CREATED)
async def create_listing(
    listing_data: ListingCreate,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    notifier: Annotated[NotificationService, Depends(get_notification_service)],
) -> Listing:
    """Submit a new listing for review."""
    return await listing_service.create_listing(
        db, user_id, listing_data.model_dump(), notifier=notifier
    )


@router.get("/mine", response_model=list[ListingResponse])
async def get_my_listings(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[Listing]:
    """All of the current user's listings, any status."""
    return await listing_service.list_host_listings(db, user_id)


@router.get("/{listing_id}", response_model=ListingResponse)
async def get_listing(
    listing_id: UUID,
    user_id: Annotated[str | None, Depends(get_optional_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Listing:
    """Get an approved listing (owners can see their own in any status)."""
    result = await listing_service.get_listing(db, listing_id, user_id)
    return result.unwrap()


@router.patch("/{listing_id}", response_model=ListingResponse)
async def update_listing(
    listing_id: UUID,
    listing_data: ListingUpdate,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Listing:
    """Update a listing (owner only)."""
    result = await listing_service.update_listing(
        db, user_id, listing_id, listing_data.model_dump(exclude_unset=True)
    )
    return result.unwrap()


@router.post("/{listing_id}/snooze", response_model=ListingResponse)
async def snooze_listing(
    listing_id: UUID,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Listing:
    """Temporarily hide an approved listing."""
    result = await listing_service.set_snoozed(db, user_id, listing_id, snoozed=True)
    return result.unwrap()


@router.post("/{listing_id}/unsnooze", response_model=ListingResponse)
async def unsnooze_listing(
    listing_id: UUID,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Listing:
    """Make a snoozed listing visible again."""
    result = await listing_service.set_snoozed(db, user_id, listing_id, snoozed=False)
    return result.unwrap()


@router.delete("/{listing_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_listing(
    listing_id: UUID,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Response:
    """Delete a listing (owner only)."""
    result = await listing_service.delete_listing(db, user_id, listing_id)
    result.unwrap()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{listing_id}/reviews", response_model=list[ReviewResponse])
async def get_listing_reviews(
    listing_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[Review]:
    """Reviews of a listing, newest first."""
    return await review_service.list_listing_reviews(db, listing_id)


@router.get("/{listing_id}/rating", response_model=RatingSummaryResponse | None)
async def get_listing_rating(
    listing_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> review_service.RatingSummary | None:
    """Average overall rating, or null when the listing has no reviews."""
    return await review_service.get_average_rating(db, listing_id)
