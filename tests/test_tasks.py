"""Scheduled review invitations."""

import asyncio
from datetime import date

from app.models.review import Review
from app.tasks import queue_review_requests, run_async
from tests.conftest import GUEST_ID

# make_booking default stay checks out on 2030-03-13
DAY_AFTER = date(2030, 3, 14)


async def test_invites_guests_who_checked_out_yesterday(db, make_listing, make_booking, notifier):
    listing = await make_listing()
    booking = await make_booking(listing, status="confirmed")
    await make_booking(listing, date(2030, 3, 1), date(2030, 3, 5), status="confirmed")

    sent = await queue_review_requests(db, DAY_AFTER, notifier)

    assert sent == 1
    db_arg, booking_arg, title = notifier.send_review_request.await_args.args
    assert booking_arg.id == booking.id
    assert title == listing.title


async def test_skips_unconfirmed_and_reviewed_stays(db, make_listing, make_booking, notifier):
    listing = await make_listing()
    await make_booking(listing)
    reviewed = await make_booking(listing, date(2030, 3, 11), date(2030, 3, 13), guest_id="user_b", status="confirmed")
    db.add(
        Review(
            booking_id=reviewed.id,
            listing_id=listing.id,
            reviewer_id="user_b",
            overall_rating=5,
            cleanliness_rating=5,
            communication_rating=5,
            location_rating=5,
            value_rating=5,
        )
    )
    await db.flush()

    sent = await queue_review_requests(db, DAY_AFTER, notifier)

    assert sent == 0
    notifier.send_review_request.assert_not_awaited()


async def test_email_failures_are_counted_not_raised(db, make_listing, make_booking, notifier):
    listing = await make_listing()
    await make_booking(listing, status="confirmed", guest_id=GUEST_ID)
    notifier.send_review_request.side_effect = RuntimeError("mail provider down")

    assert await queue_review_requests(db, DAY_AFTER, notifier) == 0


def test_task_runs_share_one_event_loop():
    async def running_loop():
        return asyncio.get_running_loop()

    first = run_async(running_loop())
    second = run_async(running_loop())

    assert first is second
    assert not first.is_closed()
