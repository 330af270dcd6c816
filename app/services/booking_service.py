"""Booking creation workflow, status changes and booking queries.

CRITICAL BUSINESS LOGIC:
- Only approved listings are bookable; hosts cannot book their own listing
- Availability is checked fresh on every request, never cached
- Status writes are compare-and-set on the status read at the start of the
  request, so a concurrent change is reported instead of overwritten
- Conversation and email side effects never fail a booking
"""

import logging
from dataclasses import dataclass
from datetime import date
from functools import partial
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.identity import IdentityProvider
from app.core.permissions import is_admin, require_admin
from app.domain.booking_state import (
    BookingActor,
    BookingStatus,
    check_transition,
    resolve_actor,
)
from app.domain.listing_state import ListingStatus
from app.domain.pricing import PriceBreakdown, compute_price
from app.domain.results import ErrorKind, ServiceResult
from app.models.booking import Booking
from app.models.listing import Listing
from app.services.availability_service import has_conflict
from app.services.conversation_service import get_or_create_conversation
from app.services.notification_service import NotificationService, notification_service
from app.services.side_effects import run_best_effort

logger = logging.getLogger(__name__)

# Name of the Postgres exclusion constraint on overlapping stays
OVERLAP_CONSTRAINT = "ex_bookings_no_overlap"

DATES_UNAVAILABLE_MESSAGE = "These dates are not available. Please choose different dates."


@dataclass(frozen=True)
class BookingQuote:
    """Price preview for a listing and date range."""

    listing_id: UUID
    check_in: date
    check_out: date
    price: PriceBreakdown
    available: bool


async def _load_booking(db: AsyncSession, booking_id: UUID) -> Booking | None:
    """Fetch a booking with its listing, bypassing stale identity-map state."""
    result = await db.execute(
        select(Booking)
        .options(selectinload(Booking.listing))
        .where(Booking.id == booking_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _compare_and_set(
    db: AsyncSession,
    booking_id: UUID,
    current: str,
    **values,
) -> bool:
    """UPDATE the booking only if its status is still ``current``."""
    result = await db.execute(
        update(Booking)
        .where(Booking.id == booking_id, Booking.status == current)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def _validate_request(
    listing: Listing | None,
    user_id: str,
    check_in: date,
    check_out: date,
    num_guests: int,
) -> ServiceResult[Listing]:
    if not listing or listing.status != ListingStatus.APPROVED.value:
        return ServiceResult.failure(
            ErrorKind.LISTING_UNAVAILABLE, "Listing not found or not available"
        )
    if listing.host_id == user_id:
        return ServiceResult.failure(ErrorKind.FORBIDDEN, "You cannot book your own listing")
    if num_guests < 1:
        return ServiceResult.failure(ErrorKind.VALIDATION, "At least one guest is required")
    if num_guests > listing.max_guests:
        return ServiceResult.failure(
            ErrorKind.VALIDATION,
            f"This listing allows at most {listing.max_guests} guests",
        )
    if check_out <= check_in:
        return ServiceResult.failure(
            ErrorKind.VALIDATION, "Check-out date must be after check-in date"
        )
    return ServiceResult.success(listing)


async def quote(
    db: AsyncSession,
    listing_id: UUID,
    check_in: date,
    check_out: date,
) -> ServiceResult[BookingQuote]:
    """Price a stay without creating anything."""
    listing = await db.get(Listing, listing_id)
    if not listing or listing.status != ListingStatus.APPROVED.value:
        return ServiceResult.failure(
            ErrorKind.LISTING_UNAVAILABLE, "Listing not found or not available"
        )
    if check_out <= check_in:
        return ServiceResult.failure(
            ErrorKind.VALIDATION, "Check-out date must be after check-in date"
        )

    conflict = await has_conflict(db, listing.id, check_in, check_out)
    return ServiceResult.success(
        BookingQuote(
            listing_id=listing.id,
            check_in=check_in,
            check_out=check_out,
            price=compute_price(listing.price_per_night, check_in, check_out),
            available=not conflict,
        )
    )


async def _open_conversation(db: AsyncSession, booking: Booking) -> None:
    # Savepoint: a failed insert must not poison the booking's transaction
    async with db.begin_nested():
        await get_or_create_conversation(db, booking.listing_id, booking.guest_id, booking.host_id)


async def create_booking(
    db: AsyncSession,
    user_id: str,
    listing_id: UUID,
    check_in: date,
    check_out: date,
    num_guests: int,
    notifier: NotificationService = notification_service,
) -> ServiceResult[Booking]:
    """Create a pending booking for ``user_id``.

    Args:
        db: Database session
        user_id: Guest making the request
        listing_id: Listing to book
        check_in: Arrival date
        check_out: Departure date (exclusive)
        num_guests: Party size
        notifier: Email sender for the pending notices

    Returns:
        ServiceResult with the booking (listing loaded) or the reason it was refused
    """
    listing = await db.get(Listing, listing_id)
    validated = _validate_request(listing, user_id, check_in, check_out, num_guests)
    if not validated.ok:
        return ServiceResult(error=validated.error)
    listing = validated.unwrap()

    if await has_conflict(db, listing.id, check_in, check_out):
        return ServiceResult.failure(ErrorKind.DATES_UNAVAILABLE, DATES_UNAVAILABLE_MESSAGE)

    price = compute_price(listing.price_per_night, check_in, check_out)

    booking = Booking(
        listing_id=listing.id,
        guest_id=user_id,
        host_id=listing.host_id,
        check_in=check_in,
        check_out=check_out,
        num_guests=num_guests,
        nights=price.nights,
        nightly_rate=price.nightly_rate,
        subtotal=price.subtotal,
        service_fee=price.service_fee,
        total_price=price.total,
        status=BookingStatus.PENDING.value,
        payment_status="pending",
    )
    db.add(booking)
    try:
        await db.flush()
    except IntegrityError as e:
        # Lost the race against a concurrent booking for the same dates
        if OVERLAP_CONSTRAINT not in str(e.orig):
            raise
        await db.rollback()
        logger.info("Overlapping booking rejected by constraint for listing %s", listing.id)
        return ServiceResult.failure(ErrorKind.DATES_UNAVAILABLE, DATES_UNAVAILABLE_MESSAGE)

    booking_id = booking.id
    logger.info(
        "Booking %s created: listing=%s guest=%s %s..%s total=%s",
        booking_id,
        listing.id,
        user_id,
        check_in,
        check_out,
        price.total,
    )

    await run_best_effort(
        [
            ("open conversation", partial(_open_conversation, db, booking)),
            (
                "email guest: reservation pending",
                partial(notifier.notify_guest_booking_pending, db, booking, listing.title),
            ),
            (
                "email host: reservation pending",
                partial(notifier.notify_host_booking_pending, db, booking, listing.title),
            ),
        ]
    )

    return ServiceResult.success(await _load_booking(db, booking_id))


async def update_status(
    db: AsyncSession,
    booking_id: UUID,
    user_id: str,
    target: BookingStatus,
    notifier: NotificationService = notification_service,
) -> ServiceResult[Booking]:
    """Move a booking to ``target`` on behalf of its guest or host.

    The booking and its listing's owner are re-read on every call; the
    caller's relation to the booking is derived from them, never cached.
    """
    result = await db.execute(
        select(Booking, Listing.host_id)
        .join(Listing, Listing.id == Booking.listing_id)
        .where(Booking.id == booking_id)
        .execution_options(populate_existing=True)
    )
    row = result.first()
    if row is None:
        return ServiceResult.failure(ErrorKind.NOT_FOUND, "Booking not found")
    booking, owner_id = row

    actor = resolve_actor(user_id, booking.guest_id, owner_id)
    error = check_transition(booking.status, target, actor)
    if error:
        return ServiceResult(error=error)

    values: dict = {"status": target.value}
    if target == BookingStatus.CONFIRMED:
        values["confirmed_at"] = func.now()
    else:
        values["cancelled_at"] = func.now()
        values["cancelled_by"] = actor.value

    if not await _compare_and_set(db, booking.id, booking.status, **values):
        return ServiceResult.failure(
            ErrorKind.CONFLICT, "This booking was changed by someone else. Please refresh."
        )

    logger.info(
        "Booking %s: %s -> %s by %s %s",
        booking.id,
        booking.status,
        target.value,
        actor.value,
        user_id,
    )

    updated = await _load_booking(db, booking.id)
    title = updated.listing.title
    if target == BookingStatus.CONFIRMED:
        effects = [
            (
                "email guest: booking confirmed",
                partial(notifier.notify_guest_booking_confirmed, db, updated, title),
            )
        ]
    else:
        counterpart = updated.host_id if actor == BookingActor.GUEST else updated.guest_id
        effects = [
            (
                "email counterpart: booking cancelled",
                partial(notifier.notify_booking_cancelled, db, updated, title, counterpart),
            )
        ]
    await run_best_effort(effects)

    return ServiceResult.success(updated)


async def cancel_booking_admin(
    db: AsyncSession,
    identity: IdentityProvider,
    admin_id: str,
    booking_id: UUID,
    reason: str | None = None,
    notifier: NotificationService = notification_service,
) -> ServiceResult[Booking]:
    """Support path: an admin cancels any booking that is not yet cancelled."""
    await require_admin(admin_id, identity)

    booking = await _load_booking(db, booking_id)
    if not booking:
        return ServiceResult.failure(ErrorKind.NOT_FOUND, "Booking not found")

    error = check_transition(booking.status, BookingStatus.CANCELLED, BookingActor.ADMIN)
    if error:
        return ServiceResult(error=error)

    if not await _compare_and_set(
        db,
        booking.id,
        booking.status,
        status=BookingStatus.CANCELLED.value,
        cancelled_at=func.now(),
        cancelled_by=BookingActor.ADMIN.value,
    ):
        return ServiceResult.failure(
            ErrorKind.CONFLICT, "This booking was changed by someone else. Please refresh."
        )

    logger.info(
        "Booking %s cancelled by admin %s (was %s): %s",
        booking.id,
        admin_id,
        booking.status,
        reason or "no reason given",
    )

    updated = await _load_booking(db, booking.id)
    title = updated.listing.title
    await run_best_effort(
        [
            (
                "email guest: booking cancelled",
                partial(notifier.notify_booking_cancelled, db, updated, title, updated.guest_id),
            ),
            (
                "email host: booking cancelled",
                partial(notifier.notify_booking_cancelled, db, updated, title, updated.host_id),
            ),
        ]
    )
    return ServiceResult.success(updated)


async def get_booking(
    db: AsyncSession,
    identity: IdentityProvider,
    user_id: str,
    booking_id: UUID,
) -> ServiceResult[Booking]:
    """A single booking, visible to its guest, its host or an admin."""
    booking = await _load_booking(db, booking_id)
    if not booking:
        return ServiceResult.failure(ErrorKind.NOT_FOUND, "Booking not found")
    if user_id in (booking.guest_id, booking.host_id, booking.listing.host_id):
        return ServiceResult.success(booking)
    if await is_admin(user_id, identity):
        return ServiceResult.success(booking)
    return ServiceResult.failure(ErrorKind.FORBIDDEN, "You don't have access to this booking")


async def list_guest_bookings(db: AsyncSession, user_id: str) -> list[Booking]:
    """The user's trips, newest first."""
    result = await db.execute(
        select(Booking)
        .options(selectinload(Booking.listing))
        .where(Booking.guest_id == user_id)
        .order_by(Booking.created_at.desc())
    )
    return list(result.scalars().all())


async def list_host_bookings(
    db: AsyncSession,
    user_id: str,
    status: BookingStatus | None = None,
) -> list[Booking]:
    """Bookings on listings the user owns, newest first."""
    query = (
        select(Booking)
        .join(Listing, Listing.id == Booking.listing_id)
        .options(selectinload(Booking.listing))
        .where(Listing.host_id == user_id)
    )
    if status:
        query = query.where(Booking.status == status.value)
    result = await db.execute(query.order_by(Booking.created_at.desc()))
    return list(result.scalars().all())
