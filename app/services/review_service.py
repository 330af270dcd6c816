"""Guest reviews of completed stays."""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.booking_state import BookingStatus
from app.domain.results import ErrorKind, ServiceResult
from app.models.booking import Booking
from app.models.review import Review

logger = logging.getLogger(__name__)

RATING_FIELDS = (
    "overall_rating",
    "cleanliness_rating",
    "communication_rating",
    "location_rating",
    "value_rating",
)
MIN_COMMENT_LENGTH = 10
MAX_COMMENT_LENGTH = 2000


@dataclass(frozen=True)
class RatingSummary:
    average: Decimal
    count: int


def review_eligibility(booking: Booking, today: date) -> ServiceResult[Booking]:
    """Whether a booking can be reviewed on ``today`` (existing reviews aside)."""
    if booking.status != BookingStatus.CONFIRMED.value:
        return ServiceResult.failure(ErrorKind.VALIDATION, "Can only review confirmed bookings")
    if not today > booking.check_out:
        return ServiceResult.failure(
            ErrorKind.TOO_EARLY,
            "It is too early to review this stay; come back after check-out",
        )
    return ServiceResult.success(booking)


async def create_review(
    db: AsyncSession,
    user_id: str,
    booking_id: UUID,
    ratings: dict[str, int],
    comment: str | None = None,
    today: date | None = None,
) -> ServiceResult[Review]:
    """Record the guest's review of a finished, confirmed stay."""
    today = today or date.today()

    booking = await db.get(Booking, booking_id)
    if not booking:
        return ServiceResult.failure(ErrorKind.NOT_FOUND, "Booking not found")
    if booking.guest_id != user_id:
        return ServiceResult.failure(ErrorKind.FORBIDDEN, "Only the guest can review this stay")

    eligible = review_eligibility(booking, today)
    if not eligible.ok:
        return ServiceResult(error=eligible.error)

    existing = await db.execute(select(Review.id).where(Review.booking_id == booking_id))
    if existing.scalar_one_or_none():
        return ServiceResult.failure(
            ErrorKind.ALREADY_REVIEWED, "You have already reviewed this booking"
        )

    for field in RATING_FIELDS:
        value = ratings.get(field)
        if not isinstance(value, int) or not 1 <= value <= 5:
            return ServiceResult.failure(
                ErrorKind.VALIDATION, "Ratings must be integers between 1 and 5"
            )

    comment = (comment or "").strip() or None
    if comment is not None and not MIN_COMMENT_LENGTH <= len(comment) <= MAX_COMMENT_LENGTH:
        return ServiceResult.failure(
            ErrorKind.VALIDATION,
            f"Comment must be between {MIN_COMMENT_LENGTH} and {MAX_COMMENT_LENGTH} characters",
        )

    review = Review(
        booking_id=booking.id,
        listing_id=booking.listing_id,
        reviewer_id=user_id,
        comment=comment,
        **{field: ratings[field] for field in RATING_FIELDS},
    )
    db.add(review)
    try:
        await db.flush()
    except IntegrityError:
        # Concurrent submission for the same booking
        await db.rollback()
        return ServiceResult.failure(
            ErrorKind.ALREADY_REVIEWED, "You have already reviewed this booking"
        )

    await db.refresh(review)
    logger.info("Review %s created for booking %s", review.id, booking.id)
    return ServiceResult.success(review)


async def list_listing_reviews(db: AsyncSession, listing_id: UUID) -> list[Review]:
    """Reviews of a listing, newest first."""
    result = await db.execute(
        select(Review).where(Review.listing_id == listing_id).order_by(Review.created_at.desc())
    )
    return list(result.scalars().all())


def _summary(total: int | None, count: int) -> RatingSummary | None:
    if not count:
        return None
    average = (Decimal(total) / Decimal(count)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return RatingSummary(average=average, count=count)


async def get_average_rating(db: AsyncSession, listing_id: UUID) -> RatingSummary | None:
    """Mean overall rating (2 dp) and review count, or None without reviews."""
    result = await db.execute(
        select(func.sum(Review.overall_rating), func.count(Review.id)).where(
            Review.listing_id == listing_id
        )
    )
    total, count = result.one()
    return _summary(total, count)


async def get_host_rating(db: AsyncSession, listing_ids: list[UUID]) -> RatingSummary | None:
    """Mean overall rating across several listings."""
    if not listing_ids:
        return None
    result = await db.execute(
        select(func.sum(Review.overall_rating), func.count(Review.id)).where(
            Review.listing_id.in_(listing_ids)
        )
    )
    total, count = result.one()
    return _summary(total, count)
