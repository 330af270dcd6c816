"""Celery background tasks.

Review invitations go out the day after check-out for confirmed stays that
have not been reviewed yet.
"""

import asyncio
import logging
from datetime import UTC, date, datetime, timedelta
from functools import partial

from celery import shared_task
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.database import get_db_context
from app.domain.booking_state import BookingStatus
from app.models.booking import Booking
from app.services.notification_service import NotificationService, notification_service
from app.services.review_service import review_eligibility
from app.services.side_effects import run_best_effort

logger = logging.getLogger(__name__)


# The async engine pool and the notifier's HTTP client bind to the loop they
# first run on; every task in a worker process must reuse that loop.
_loop: asyncio.AbstractEventLoop | None = None


def run_async(coro):
    """Run async function in sync context, on the worker's single event loop."""
    global _loop
    if _loop is None or _loop.is_closed():
        _loop = asyncio.new_event_loop()
    return _loop.run_until_complete(coro)


# ==================== REVIEW TASKS ====================


@shared_task(bind=True, max_retries=3)
def send_review_requests(self):
    """Send review requests to guests whose stay ended yesterday."""
    try:
        sent = run_async(_send_review_requests())
        return {"status": "success", "sent": sent}
    except Exception as exc:
        raise self.retry(exc=exc, countdown=300)


async def _send_review_requests() -> int:
    async with get_db_context() as db:
        return await queue_review_requests(db, datetime.now(UTC).date())


async def queue_review_requests(
    db: AsyncSession,
    today: date,
    notifier: NotificationService = notification_service,
) -> int:
    """Email every guest whose confirmed stay checked out the day before ``today``.

    Returns:
        Number of bookings whose invitation was sent without error
    """
    yesterday = today - timedelta(days=1)

    result = await db.execute(
        select(Booking)
        .options(selectinload(Booking.listing), selectinload(Booking.review))
        .where(
            Booking.status == BookingStatus.CONFIRMED.value,
            Booking.check_out == yesterday,
        )
    )
    bookings = result.scalars().all()

    effects = []
    for booking in bookings:
        if booking.review is not None or not review_eligibility(booking, today).ok:
            continue
        effects.append(
            (
                f"review request for booking {booking.id}",
                partial(notifier.send_review_request, db, booking, booking.listing.title),
            )
        )

    failed = await run_best_effort(effects)
    logger.info("Review requests: %d sent, %d failed", len(effects) - len(failed), len(failed))
    return len(effects) - len(failed)
