"""Checkout session creation and payment webhook reconciliation.

CRITICAL BUSINESS LOGIC:
- Amounts go to the processor as stored (XAF is zero-decimal, no x100)
- A completed payment confirms the booking with a single UPDATE, so a
  redelivered event leaves the same end state
- Payment on a booking that was cancelled meanwhile is recorded but the
  booking stays cancelled; refunds are handled manually
- Confirmation emails are sent on every delivery, including redeliveries
"""

import logging
from functools import partial
from typing import Any
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import settings
from app.core.exceptions import PaymentError, WebhookError
from app.domain.booking_state import BookingActor, BookingStatus, PaymentStatus, check_transition
from app.domain.results import ErrorKind, ServiceResult
from app.gateways.base import CheckoutResult, PaymentGateway
from app.models.booking import Booking
from app.services.notification_service import NotificationService, notification_service
from app.services.side_effects import run_best_effort

logger = logging.getLogger(__name__)


async def create_checkout(
    db: AsyncSession,
    gateway: PaymentGateway,
    user_id: str,
    booking_id: UUID,
    display_name: str,
    total_amount: int,
) -> ServiceResult[CheckoutResult]:
    """Open a hosted payment session for a pending booking."""
    booking = await db.get(Booking, booking_id)
    if not booking:
        return ServiceResult.failure(ErrorKind.NOT_FOUND, "Booking not found")
    if booking.guest_id != user_id:
        return ServiceResult.failure(ErrorKind.FORBIDDEN, "You can only pay for your own bookings")
    if booking.payment_status == PaymentStatus.PAID.value:
        return ServiceResult.failure(ErrorKind.CONFLICT, "Booking is already paid")
    if booking.status != BookingStatus.PENDING.value:
        return ServiceResult.failure(ErrorKind.VALIDATION, "Only pending bookings can be paid")
    if total_amount != booking.total_price:
        return ServiceResult.failure(
            ErrorKind.VALIDATION, "Amount does not match the booking total"
        )

    metadata = {"booking_id": str(booking.id), "user_id": user_id}
    result = await gateway.create_checkout_session(
        amount=booking.total_price,
        currency=settings.stripe_currency,
        description=display_name,
        success_url=f"{settings.app_base_url}/bookings?success=true",
        cancel_url=f"{settings.app_base_url}/bookings?cancelled=true",
        metadata=metadata,
    )
    if not result.success:
        raise PaymentError(result.error_message or "Failed to create checkout session")

    logger.info("Checkout session %s opened for booking %s", result.session_id, booking.id)
    return ServiceResult.success(result)


def _booking_id_from(metadata: dict[str, Any] | None) -> str | None:
    return (metadata or {}).get("booking_id")


async def on_payment_completed(
    db: AsyncSession,
    session: dict[str, Any],
    notifier: NotificationService = notification_service,
) -> Booking:
    """Reconcile a ``checkout.session.completed`` event.

    Raises:
        WebhookError: If the session carries no usable booking id or the
            booking does not exist
    """
    raw_id = _booking_id_from(session.get("metadata"))
    if not raw_id:
        logger.error("Checkout session %s has no booking_id metadata", session.get("id"))
        raise WebhookError("Missing booking_id in session metadata")
    try:
        booking_id = UUID(str(raw_id))
    except ValueError:
        logger.error("Checkout session %s has malformed booking_id %r", session.get("id"), raw_id)
        raise WebhookError("Invalid booking_id in session metadata")

    booking = await db.get(Booking, booking_id)
    if not booking:
        logger.error("Checkout session %s references unknown booking %s", session.get("id"), booking_id)
        raise WebhookError("Booking not found")

    payment_intent_id = session.get("payment_intent")
    payment_fields = {
        "payment_status": PaymentStatus.PAID.value,
        "stripe_payment_intent_id": payment_intent_id,
    }

    confirmable = booking.status == BookingStatus.CONFIRMED.value or (
        check_transition(booking.status, BookingStatus.CONFIRMED, BookingActor.PAYMENT) is None
    )
    confirmed = False
    if confirmable:
        result = await db.execute(
            update(Booking)
            .where(
                Booking.id == booking_id,
                Booking.status.in_(
                    (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value)
                ),
            )
            .values(
                status=BookingStatus.CONFIRMED.value,
                confirmed_at=func.coalesce(Booking.confirmed_at, func.now()),
                **payment_fields,
            )
            .execution_options(synchronize_session=False)
        )
        confirmed = result.rowcount == 1

    if not confirmed:
        # Cancelled before the payment landed
        await db.execute(
            update(Booking)
            .where(Booking.id == booking_id)
            .values(**payment_fields)
            .execution_options(synchronize_session=False)
        )
        logger.error(
            "Payment %s received for cancelled booking %s; manual refund required",
            payment_intent_id,
            booking_id,
        )

    result = await db.execute(
        select(Booking)
        .options(selectinload(Booking.listing))
        .where(Booking.id == booking_id)
        .execution_options(populate_existing=True)
    )
    booking = result.scalar_one()

    if confirmed:
        logger.info("Booking %s confirmed by payment %s", booking_id, payment_intent_id)
        title = booking.listing.title
        await run_best_effort(
            [
                (
                    "email guest: booking confirmed",
                    partial(notifier.notify_guest_booking_confirmed, db, booking, title),
                ),
                (
                    "email host: booking confirmed",
                    partial(notifier.notify_host_booking_confirmed, db, booking, title),
                ),
            ]
        )
    return booking


async def on_payment_failed(db: AsyncSession, intent: dict[str, Any]) -> Booking | None:
    """Reconcile a ``payment_intent.payment_failed`` event.

    Only the payment status changes. Intents without a booking link are
    ignored.
    """
    raw_id = _booking_id_from(intent.get("metadata"))
    if not raw_id:
        logger.warning("Payment intent %s failed without booking_id metadata", intent.get("id"))
        return None
    try:
        booking_id = UUID(str(raw_id))
    except ValueError:
        logger.warning("Payment intent %s has malformed booking_id %r", intent.get("id"), raw_id)
        return None

    result = await db.execute(
        update(Booking)
        .where(
            Booking.id == booking_id,
            Booking.payment_status != PaymentStatus.PAID.value,
        )
        .values(payment_status=PaymentStatus.FAILED.value)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        logger.info("Payment failure for booking %s ignored (missing or already paid)", booking_id)
        return None

    logger.info("Payment failed for booking %s (intent %s)", booking_id, intent.get("id"))
    return await db.get(Booking, booking_id, populate_existing=True)


async def handle_stripe_event(
    db: AsyncSession,
    event: dict[str, Any],
    notifier: NotificationService = notification_service,
) -> None:
    """Dispatch a verified Stripe event; other event types are acknowledged."""
    event_type = event["type"]
    data = event["data"]["object"]

    if event_type == "checkout.session.completed":
        await on_payment_completed(db, data, notifier)
    elif event_type == "payment_intent.payment_failed":
        await on_payment_failed(db, data)
    else:
        logger.debug("Ignoring Stripe event %s", event_type)
