"""Admin reports and user management."""

from datetime import date, timedelta

import pytest

from app.core.exceptions import AuthorizationError, NotFoundError
from app.core.identity import Role
from app.services import admin_service
from tests.conftest import ADMIN_ID, GUEST_ID, HOST_ID


async def test_every_admin_operation_is_guarded(db, identity):
    calls = [
        admin_service.get_analytics(db, identity, HOST_ID),
        admin_service.get_financial_report(db, identity, HOST_ID),
        admin_service.list_all_bookings(db, identity, HOST_ID),
        admin_service.list_users(identity, HOST_ID),
        admin_service.update_user_role(identity, HOST_ID, GUEST_ID, Role.ADMIN),
        admin_service.ban_user(identity, HOST_ID, GUEST_ID),
        admin_service.unban_user(identity, HOST_ID, GUEST_ID),
    ]
    for call in calls:
        with pytest.raises(AuthorizationError):
            await call


async def test_demoted_admin_loses_access(db, identity):
    await admin_service.update_user_role(identity, ADMIN_ID, ADMIN_ID, Role.GUEST)

    with pytest.raises(AuthorizationError):
        await admin_service.list_users(identity, ADMIN_ID)


async def test_analytics(db, identity, make_listing, make_booking):
    listing = await make_listing()
    await make_listing(status="pending_review")
    await make_booking(listing, date(2030, 1, 1), date(2030, 1, 4), status="confirmed")
    await make_booking(listing, date(2030, 2, 1), date(2030, 2, 4))
    await make_booking(listing, date(2030, 3, 1), date(2030, 3, 4), status="cancelled")

    analytics = await admin_service.get_analytics(db, identity, ADMIN_ID)

    assert analytics.total_revenue == 85500
    assert analytics.platform_commission == 11970
    assert analytics.booking_stats == {"total": 3, "pending": 1, "confirmed": 1, "cancelled": 1}
    assert analytics.listing_stats["total"] == 2
    assert analytics.listing_stats["pending_review"] == 1
    assert analytics.user_stats == {"total": 4, "guest": 2, "host": 1, "admin": 1}


async def test_financial_report_counts_confirmed_bookings(db, identity, make_listing, make_booking):
    listing = await make_listing()
    await make_booking(listing, date(2030, 1, 1), date(2030, 1, 4), status="confirmed")
    await make_booking(listing, date(2030, 2, 1), date(2030, 2, 4), status="confirmed")
    await make_booking(listing, date(2030, 3, 1), date(2030, 3, 4))

    report = await admin_service.get_financial_report(db, identity, ADMIN_ID)

    assert report.booking_count == 2
    assert report.total_revenue == 171000
    assert report.platform_commission == 23940
    assert report.host_payouts == 171000 - 23940


async def test_financial_report_window_excludes_other_days(db, identity, make_listing, make_booking):
    listing = await make_listing()
    await make_booking(listing, status="confirmed")
    long_ago = date.today() - timedelta(days=400)

    report = await admin_service.get_financial_report(
        db, identity, ADMIN_ID, long_ago, long_ago + timedelta(days=1)
    )

    assert report.booking_count == 0
    assert report.total_revenue == 0


async def test_ban_and_unban(identity):
    await admin_service.ban_user(identity, ADMIN_ID, GUEST_ID)
    assert identity.users[GUEST_ID].banned

    await admin_service.unban_user(identity, ADMIN_ID, GUEST_ID)
    assert not identity.users[GUEST_ID].banned


async def test_role_change_for_unknown_user(identity):
    with pytest.raises(NotFoundError):
        await admin_service.update_user_role(identity, ADMIN_ID, "user_missing", Role.HOST)
