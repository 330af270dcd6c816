"""Date-conflict detection for listings."""

from datetime import date
from uuid import UUID

from sqlalchemy import and_, exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.booking_state import BookingStatus
from app.models.booking import Booking

# Statuses that hold a listing's dates
BLOCKING_STATUSES = (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value)


async def has_conflict(
    db: AsyncSession,
    listing_id: UUID,
    check_in: date,
    check_out: date,
) -> bool:
    """Whether any pending or confirmed booking overlaps the requested range.

    Boundaries are inclusive on both sides: a stay checking out on the day
    another checks in counts as a conflict (no same-day turnover).
    """
    query = select(
        exists().where(
            and_(
                Booking.listing_id == listing_id,
                Booking.status.in_(BLOCKING_STATUSES),
                Booking.check_out >= check_in,
                Booking.check_in <= check_out,
            )
        )
    )
    result = await db.execute(query)
    return bool(result.scalar())
