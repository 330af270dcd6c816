"""Listings: host submission, public browsing, owner controls and moderation."""

import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Any
from uuid import UUID

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.identity import IdentityProvider
from app.core.permissions import require_admin
from app.domain.booking_state import BookingStatus
from app.domain.listing_state import (
    ListingStatus,
    check_moderation_transition,
    check_owner_transition,
)
from app.domain.results import ErrorKind, ServiceResult
from app.models.booking import Booking
from app.models.listing import Listing
from app.services.notification_service import NotificationService, notification_service
from app.services.review_service import RatingSummary, get_host_rating
from app.services.side_effects import run_best_effort

logger = logging.getLogger(__name__)

# Fields an owner may change after submission
EDITABLE_FIELDS = frozenset(
    {
        "title",
        "description",
        "category",
        "address",
        "city",
        "region",
        "latitude",
        "longitude",
        "max_guests",
        "bedrooms",
        "beds",
        "bathrooms",
        "price_per_night",
        "amenities",
        "images",
    }
)


@dataclass
class ListingFilters:
    city: str | None = None
    region: str | None = None
    category: str | None = None
    min_guests: int | None = None
    max_price: int | None = None


@dataclass
class HostProfile:
    id: str
    name: str
    avatar_url: str | None
    joined_at: int | None
    listings: list[Listing] = field(default_factory=list)
    rating: RatingSummary | None = None

    @property
    def total_listings(self) -> int:
        return len(self.listings)

    @property
    def total_reviews(self) -> int:
        return self.rating.count if self.rating else 0

    @property
    def average_rating(self) -> float:
        return float(self.rating.average) if self.rating else 0.0


# ==================== HOST ====================


async def create_listing(
    db: AsyncSession,
    user_id: str,
    data: dict[str, Any],
    notifier: NotificationService = notification_service,
) -> Listing:
    """Submit a listing for moderation."""
    listing = Listing(host_id=user_id, status=ListingStatus.PENDING_REVIEW.value, **data)
    db.add(listing)
    await db.flush()
    await db.refresh(listing)
    logger.info("Listing %s submitted by %s", listing.id, user_id)

    await run_best_effort(
        [("email admin: listing submitted", partial(notifier.notify_admin_listing_submitted, listing))]
    )
    return listing


async def list_host_listings(db: AsyncSession, user_id: str) -> list[Listing]:
    """All of the user's listings, any status, newest first."""
    result = await db.execute(
        select(Listing).where(Listing.host_id == user_id).order_by(Listing.created_at.desc())
    )
    return list(result.scalars().all())


async def _owned_listing(
    db: AsyncSession, user_id: str, listing_id: UUID
) -> ServiceResult[Listing]:
    listing = await db.get(Listing, listing_id)
    if not listing:
        return ServiceResult.failure(ErrorKind.NOT_FOUND, "Listing not found")
    if listing.host_id != user_id:
        return ServiceResult.failure(
            ErrorKind.FORBIDDEN, "Only the listing owner can perform this action"
        )
    return ServiceResult.success(listing)


async def update_listing(
    db: AsyncSession,
    user_id: str,
    listing_id: UUID,
    changes: dict[str, Any],
) -> ServiceResult[Listing]:
    """Owner edits a listing. A rejected listing goes back to review."""
    owned = await _owned_listing(db, user_id, listing_id)
    if not owned.ok:
        return owned
    listing = owned.unwrap()

    for key, value in changes.items():
        if key in EDITABLE_FIELDS:
            setattr(listing, key, value)

    if listing.status == ListingStatus.REJECTED.value:
        listing.status = ListingStatus.PENDING_REVIEW.value
        listing.rejection_reason = None

    await db.flush()
    await db.refresh(listing)
    return ServiceResult.success(listing)


async def set_snoozed(
    db: AsyncSession,
    user_id: str,
    listing_id: UUID,
    snoozed: bool,
) -> ServiceResult[Listing]:
    """Hide an approved listing from search, or bring it back."""
    owned = await _owned_listing(db, user_id, listing_id)
    if not owned.ok:
        return owned
    listing = owned.unwrap()

    target = ListingStatus.SNOOZED if snoozed else ListingStatus.APPROVED
    error = check_owner_transition(listing.status, target)
    if error:
        return ServiceResult(error=error)
    listing.status = target.value
    await db.flush()
    await db.refresh(listing)
    logger.info("Listing %s is now %s", listing.id, target.value)
    return ServiceResult.success(listing)


async def delete_listing(
    db: AsyncSession,
    user_id: str,
    listing_id: UUID,
) -> ServiceResult[None]:
    """Owner deletes a listing that has never held a live booking.

    Listings with pending or confirmed bookings, past or upcoming, can only be
    snoozed; cancelled bookings are removed with the listing.
    """
    owned = await _owned_listing(db, user_id, listing_id)
    if not owned.ok:
        return ServiceResult(error=owned.error)
    listing = owned.unwrap()

    live = await db.execute(
        select(
            exists().where(
                Booking.listing_id == listing.id,
                Booking.status != BookingStatus.CANCELLED.value,
            )
        )
    )
    if live.scalar():
        return ServiceResult.failure(
            ErrorKind.CONFLICT, "This listing has bookings and cannot be deleted; snooze it instead"
        )

    await db.delete(listing)
    await db.flush()
    logger.info("Listing %s deleted by owner %s", listing_id, user_id)
    return ServiceResult.success(None)


# ==================== PUBLIC ====================


async def list_public_listings(
    db: AsyncSession, filters: ListingFilters | None = None
) -> list[Listing]:
    """Approved listings, newest first."""
    filters = filters or ListingFilters()
    query = select(Listing).where(Listing.status == ListingStatus.APPROVED.value)
    if filters.city:
        query = query.where(Listing.city.ilike(filters.city))
    if filters.region:
        query = query.where(Listing.region == filters.region)
    if filters.category:
        query = query.where(Listing.category == filters.category)
    if filters.min_guests:
        query = query.where(Listing.max_guests >= filters.min_guests)
    if filters.max_price:
        query = query.where(Listing.price_per_night <= filters.max_price)

    result = await db.execute(query.order_by(Listing.created_at.desc()))
    return list(result.scalars().all())


async def get_listing(
    db: AsyncSession,
    listing_id: UUID,
    user_id: str | None = None,
) -> ServiceResult[Listing]:
    """An approved listing, or any listing for its owner."""
    listing = await db.get(Listing, listing_id)
    if not listing:
        return ServiceResult.failure(ErrorKind.NOT_FOUND, "Listing not found")
    if listing.status != ListingStatus.APPROVED.value and listing.host_id != user_id:
        return ServiceResult.failure(ErrorKind.NOT_FOUND, "Listing not found")
    return ServiceResult.success(listing)


async def get_host_profile(
    db: AsyncSession,
    identity: IdentityProvider,
    host_id: str,
) -> ServiceResult[HostProfile]:
    """Public host page: name, avatar, approved listings and ratings."""
    user = await identity.get_user(host_id)
    if not user:
        return ServiceResult.failure(ErrorKind.NOT_FOUND, "Host not found")

    result = await db.execute(
        select(Listing)
        .where(Listing.host_id == host_id, Listing.status == ListingStatus.APPROVED.value)
        .order_by(Listing.created_at.desc())
    )
    listings = list(result.scalars().all())
    rating = await get_host_rating(db, [listing.id for listing in listings])

    return ServiceResult.success(
        HostProfile(
            id=host_id,
            name=user.first_name or "Host",
            avatar_url=user.image_url,
            joined_at=user.created_at,
            listings=listings,
            rating=rating,
        )
    )


# ==================== MODERATION ====================


async def list_pending_listings(
    db: AsyncSession, identity: IdentityProvider, admin_id: str
) -> list[Listing]:
    """Moderation queue, oldest first."""
    await require_admin(admin_id, identity)
    result = await db.execute(
        select(Listing)
        .where(Listing.status == ListingStatus.PENDING_REVIEW.value)
        .order_by(Listing.created_at.asc())
    )
    return list(result.scalars().all())


async def list_all_listings(
    db: AsyncSession, identity: IdentityProvider, admin_id: str
) -> list[Listing]:
    await require_admin(admin_id, identity)
    result = await db.execute(select(Listing).order_by(Listing.created_at.desc()))
    return list(result.scalars().all())


async def moderate_listing(
    db: AsyncSession,
    identity: IdentityProvider,
    admin_id: str,
    listing_id: UUID,
    approve: bool,
    reason: str | None = None,
    notifier: NotificationService = notification_service,
) -> ServiceResult[Listing]:
    """Approve or reject a listing, whatever its current status."""
    await require_admin(admin_id, identity)

    listing = await db.get(Listing, listing_id)
    if not listing:
        return ServiceResult.failure(ErrorKind.NOT_FOUND, "Listing not found")

    target = ListingStatus.APPROVED if approve else ListingStatus.REJECTED
    error = check_moderation_transition(listing.status, target)
    if error:
        return ServiceResult(error=error)

    listing.status = target.value
    listing.rejection_reason = None if approve else (reason or None)
    await db.flush()
    await db.refresh(listing)
    logger.info("Listing %s %s by admin %s", listing.id, target.value, admin_id)

    if approve:
        effect = ("email host: listing approved", partial(notifier.notify_listing_approved, db, listing))
    else:
        effect = ("email host: listing rejected", partial(notifier.notify_listing_rejected, db, listing))
    await run_best_effort([effect])

    return ServiceResult.success(listing)
