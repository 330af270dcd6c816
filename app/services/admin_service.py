"""Admin analytics, financial reporting and user management.

Every entry point starts with ``require_admin``.
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.identity import IdentityProvider, IdentityUser, Role
from app.core.permissions import require_admin
from app.domain.booking_state import BookingStatus
from app.domain.listing_state import ListingStatus
from app.domain.pricing import compute_host_payout
from app.models.booking import Booking
from app.models.listing import Listing

logger = logging.getLogger(__name__)


@dataclass
class Analytics:
    total_revenue: int
    platform_commission: int
    booking_stats: dict[str, int]
    listing_stats: dict[str, int]
    user_stats: dict[str, int]


@dataclass
class FinancialReport:
    start_date: date | None
    end_date: date | None
    total_revenue: int
    platform_commission: int
    host_payouts: int
    booking_count: int
    bookings: list[Booking] = field(default_factory=list)


async def _count_by_status(db: AsyncSession, column) -> dict[str, int]:
    result = await db.execute(select(column, func.count()).group_by(column))
    return {status: count for status, count in result.all()}


async def get_analytics(
    db: AsyncSession, identity: IdentityProvider, admin_id: str
) -> Analytics:
    """Platform-wide revenue, booking, listing and user counts."""
    await require_admin(admin_id, identity)

    revenue_result = await db.execute(
        select(func.coalesce(func.sum(Booking.total_price), 0)).where(
            Booking.status == BookingStatus.CONFIRMED.value
        )
    )
    total_revenue = int(revenue_result.scalar())
    split = compute_host_payout(total_revenue)

    bookings = await _count_by_status(db, Booking.status)
    booking_stats = {"total": sum(bookings.values())}
    booking_stats.update({s.value: bookings.get(s.value, 0) for s in BookingStatus})

    listings = await _count_by_status(db, Listing.status)
    listing_stats = {"total": sum(listings.values())}
    listing_stats.update({s.value: listings.get(s.value, 0) for s in ListingStatus})

    users = await identity.list_users()
    user_stats = {"total": len(users)}
    user_stats.update({role.value: sum(1 for u in users if u.role == role) for role in Role})

    return Analytics(
        total_revenue=total_revenue,
        platform_commission=split.commission,
        booking_stats=booking_stats,
        listing_stats=listing_stats,
        user_stats=user_stats,
    )


async def get_financial_report(
    db: AsyncSession,
    identity: IdentityProvider,
    admin_id: str,
    start_date: date | None = None,
    end_date: date | None = None,
) -> FinancialReport:
    """Confirmed bookings created in [start_date, end_date], with totals.

    Both bounds are inclusive calendar days in UTC.
    """
    await require_admin(admin_id, identity)

    query = (
        select(Booking)
        .options(selectinload(Booking.listing))
        .where(Booking.status == BookingStatus.CONFIRMED.value)
    )
    if start_date:
        query = query.where(Booking.created_at >= datetime.combine(start_date, time.min, UTC))
    if end_date:
        query = query.where(
            Booking.created_at < datetime.combine(end_date + timedelta(days=1), time.min, UTC)
        )

    result = await db.execute(query.order_by(Booking.created_at.desc()))
    bookings = list(result.scalars().all())

    total_revenue = sum(b.total_price for b in bookings)
    split = compute_host_payout(total_revenue)

    return FinancialReport(
        start_date=start_date,
        end_date=end_date,
        total_revenue=total_revenue,
        platform_commission=split.commission,
        host_payouts=split.payout,
        booking_count=len(bookings),
        bookings=bookings,
    )


async def list_all_bookings(
    db: AsyncSession,
    identity: IdentityProvider,
    admin_id: str,
    status: BookingStatus | None = None,
) -> list[Booking]:
    """Every booking with its listing, newest first."""
    await require_admin(admin_id, identity)

    query = select(Booking).options(selectinload(Booking.listing))
    if status:
        query = query.where(Booking.status == status.value)
    result = await db.execute(query.order_by(Booking.created_at.desc()))
    return list(result.scalars().all())


# ==================== USERS ====================


async def list_users(identity: IdentityProvider, admin_id: str) -> list[IdentityUser]:
    await require_admin(admin_id, identity)
    return await identity.list_users()


async def update_user_role(
    identity: IdentityProvider, admin_id: str, user_id: str, role: Role
) -> None:
    await require_admin(admin_id, identity)
    await identity.set_role(user_id, role)
    logger.info("Admin %s set role of %s to %s", admin_id, user_id, role.value)


async def ban_user(identity: IdentityProvider, admin_id: str, user_id: str) -> None:
    await require_admin(admin_id, identity)
    await identity.ban_user(user_id)
    logger.info("Admin %s banned %s", admin_id, user_id)


async def unban_user(identity: IdentityProvider, admin_id: str, user_id: str) -> None:
    await require_admin(admin_id, identity)
    await identity.unban_user(user_id)
    logger.info("Admin %s unbanned %s", admin_id, user_id)
