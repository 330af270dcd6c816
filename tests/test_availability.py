"""Date-conflict detection."""

from datetime import date

from app.services.availability_service import has_conflict


async def test_no_bookings_means_no_conflict(db, make_listing):
    listing = await make_listing()
    assert not await has_conflict(db, listing.id, date(2030, 3, 1), date(2030, 3, 5))


async def test_overlapping_range_conflicts(db, make_listing, make_booking):
    listing = await make_listing()
    await make_booking(listing, date(2030, 3, 10), date(2030, 3, 13))

    assert await has_conflict(db, listing.id, date(2030, 3, 11), date(2030, 3, 12))
    assert await has_conflict(db, listing.id, date(2030, 3, 5), date(2030, 3, 20))


async def test_boundaries_are_inclusive(db, make_listing, make_booking):
    listing = await make_listing()
    await make_booking(listing, date(2030, 3, 10), date(2030, 3, 13))

    # Checking in on an existing check-out day
    assert await has_conflict(db, listing.id, date(2030, 3, 13), date(2030, 3, 15))
    # Checking out on an existing check-in day
    assert await has_conflict(db, listing.id, date(2030, 3, 7), date(2030, 3, 10))
    # One day clear on either side
    assert not await has_conflict(db, listing.id, date(2030, 3, 14), date(2030, 3, 16))
    assert not await has_conflict(db, listing.id, date(2030, 3, 6), date(2030, 3, 9))


async def test_cancelled_bookings_release_dates(db, make_listing, make_booking):
    listing = await make_listing()
    await make_booking(listing, date(2030, 3, 10), date(2030, 3, 13), status="cancelled")

    assert not await has_conflict(db, listing.id, date(2030, 3, 10), date(2030, 3, 13))


async def test_confirmed_bookings_block(db, make_listing, make_booking):
    listing = await make_listing()
    await make_booking(listing, date(2030, 3, 10), date(2030, 3, 13), status="confirmed")

    assert await has_conflict(db, listing.id, date(2030, 3, 12), date(2030, 3, 14))


async def test_other_listings_do_not_conflict(db, make_listing, make_booking):
    first = await make_listing()
    second = await make_listing()
    await make_booking(first, date(2030, 3, 10), date(2030, 3, 13))

    assert not await has_conflict(db, second.id, date(2030, 3, 10), date(2030, 3, 13))
