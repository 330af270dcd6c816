"""Reviews of completed stays."""

from datetime import date
from decimal import Decimal

from app.domain.results import ErrorKind
from app.services import review_service
from tests.conftest import GUEST_ID, HOST_ID

RATINGS = {
    "overall_rating": 5,
    "cleanliness_rating": 4,
    "communication_rating": 5,
    "location_rating": 4,
    "value_rating": 5,
}

# make_booking stays run 2030-03-10 .. 2030-03-13
AFTER_STAY = date(2030, 3, 14)


async def test_guest_reviews_finished_stay(db, make_listing, make_booking):
    listing = await make_listing()
    booking = await make_booking(listing, status="confirmed")

    result = await review_service.create_review(
        db, GUEST_ID, booking.id, RATINGS, "  Lovely flat, great host.  ", today=AFTER_STAY
    )

    review = result.value
    assert review.listing_id == listing.id
    assert review.reviewer_id == GUEST_ID
    assert review.comment == "Lovely flat, great host."
    assert review.overall_rating == 5


async def test_check_out_day_is_too_early(db, make_listing, make_booking):
    booking = await make_booking(await make_listing(), status="confirmed")

    result = await review_service.create_review(
        db, GUEST_ID, booking.id, RATINGS, today=date(2030, 3, 13)
    )

    assert result.error.kind == ErrorKind.TOO_EARLY


async def test_only_confirmed_stays_can_be_reviewed(db, make_listing, make_booking):
    booking = await make_booking(await make_listing(), status="cancelled")

    result = await review_service.create_review(db, GUEST_ID, booking.id, RATINGS, today=AFTER_STAY)

    assert result.error.kind == ErrorKind.VALIDATION


async def test_only_the_guest_can_review(db, make_listing, make_booking):
    booking = await make_booking(await make_listing(), status="confirmed")

    result = await review_service.create_review(db, HOST_ID, booking.id, RATINGS, today=AFTER_STAY)

    assert result.error.kind == ErrorKind.FORBIDDEN


async def test_one_review_per_booking(db, make_listing, make_booking):
    booking = await make_booking(await make_listing(), status="confirmed")

    first = await review_service.create_review(db, GUEST_ID, booking.id, RATINGS, today=AFTER_STAY)
    second = await review_service.create_review(db, GUEST_ID, booking.id, RATINGS, today=AFTER_STAY)

    assert first.ok
    assert second.error.kind == ErrorKind.ALREADY_REVIEWED


async def test_ratings_must_be_between_one_and_five(db, make_listing, make_booking):
    booking = await make_booking(await make_listing(), status="confirmed")

    result = await review_service.create_review(
        db, GUEST_ID, booking.id, {**RATINGS, "value_rating": 6}, today=AFTER_STAY
    )

    assert result.error.kind == ErrorKind.VALIDATION


async def test_short_comment_is_rejected(db, make_listing, make_booking):
    booking = await make_booking(await make_listing(), status="confirmed")

    result = await review_service.create_review(
        db, GUEST_ID, booking.id, RATINGS, "Nice", today=AFTER_STAY
    )

    assert result.error.kind == ErrorKind.VALIDATION


async def test_average_rating(db, make_listing, make_booking):
    listing = await make_listing()
    assert await review_service.get_average_rating(db, listing.id) is None

    for overall, check_in, check_out in (
        (5, date(2030, 1, 1), date(2030, 1, 3)),
        (4, date(2030, 1, 5), date(2030, 1, 7)),
        (4, date(2030, 1, 9), date(2030, 1, 11)),
    ):
        booking = await make_booking(listing, check_in, check_out, status="confirmed")
        result = await review_service.create_review(
            db, GUEST_ID, booking.id, {**RATINGS, "overall_rating": overall}, today=AFTER_STAY
        )
        assert result.ok

    summary = await review_service.get_average_rating(db, listing.id)
    assert summary.count == 3
    assert summary.average == Decimal("4.33")
    assert len(await review_service.list_listing_reviews(db, listing.id)) == 3
