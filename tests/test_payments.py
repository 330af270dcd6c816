"""Checkout creation and payment webhook reconciliation."""

import uuid

import pytest

from app.core.exceptions import PaymentError, WebhookError
from app.domain.results import ErrorKind
from app.services import payment_service
from tests.conftest import GUEST_ID, OTHER_ID, FakeGateway


def _completed(booking_id, intent="pi_123") -> dict:
    return {
        "id": "evt_1",
        "type": "checkout.session.completed",
        "data": {
            "object": {
                "id": "cs_test_123",
                "payment_intent": intent,
                "metadata": {"booking_id": str(booking_id), "user_id": GUEST_ID},
            }
        },
    }


def _failed(booking_id) -> dict:
    return {
        "id": "evt_2",
        "type": "payment_intent.payment_failed",
        "data": {"object": {"id": "pi_123", "metadata": {"booking_id": str(booking_id)}}},
    }


# ==================== CHECKOUT ====================


async def test_checkout_sends_whole_xaf_amount(db, make_listing, make_booking, gateway):
    booking = await make_booking(await make_listing())

    result = await payment_service.create_checkout(
        db, gateway, GUEST_ID, booking.id, "Appartement Bonapriso", 85500
    )

    assert result.value.url.startswith("https://checkout.stripe.test/")
    session = gateway.sessions[0]
    assert session["amount"] == 85500
    assert session["currency"] == "xaf"
    assert session["metadata"]["booking_id"] == str(booking.id)
    assert session["success_url"].endswith("/bookings?success=true")
    assert session["cancel_url"].endswith("/bookings?cancelled=true")


async def test_checkout_rejects_amount_mismatch(db, make_listing, make_booking, gateway):
    booking = await make_booking(await make_listing())

    result = await payment_service.create_checkout(db, gateway, GUEST_ID, booking.id, "Stay", 85000)

    assert result.error.kind == ErrorKind.VALIDATION
    assert gateway.sessions == []


async def test_checkout_only_for_own_booking(db, make_listing, make_booking, gateway):
    booking = await make_booking(await make_listing())

    result = await payment_service.create_checkout(db, gateway, OTHER_ID, booking.id, "Stay", 85500)

    assert result.error.kind == ErrorKind.FORBIDDEN


async def test_checkout_refuses_paid_booking(db, make_listing, make_booking, gateway):
    booking = await make_booking(await make_listing(), status="confirmed", payment_status="paid")

    result = await payment_service.create_checkout(db, gateway, GUEST_ID, booking.id, "Stay", 85500)

    assert result.error.kind == ErrorKind.CONFLICT


async def test_checkout_refuses_cancelled_booking(db, make_listing, make_booking, gateway):
    booking = await make_booking(await make_listing(), status="cancelled")

    result = await payment_service.create_checkout(db, gateway, GUEST_ID, booking.id, "Stay", 85500)

    assert result.error.kind == ErrorKind.VALIDATION


async def test_checkout_gateway_failure_raises(db, make_listing, make_booking):
    booking = await make_booking(await make_listing())

    with pytest.raises(PaymentError):
        await payment_service.create_checkout(
            db, FakeGateway(succeed=False), GUEST_ID, booking.id, "Stay", 85500
        )


# ==================== WEBHOOKS ====================


async def test_completed_payment_confirms_booking(db, make_listing, make_booking, notifier):
    booking = await make_booking(await make_listing())

    await payment_service.handle_stripe_event(db, _completed(booking.id), notifier)

    await db.refresh(booking)
    assert booking.status == "confirmed"
    assert booking.payment_status == "paid"
    assert booking.stripe_payment_intent_id == "pi_123"
    assert booking.confirmed_at is not None
    notifier.notify_guest_booking_confirmed.assert_awaited_once()
    notifier.notify_host_booking_confirmed.assert_awaited_once()


async def test_redelivered_event_is_idempotent(db, make_listing, make_booking, notifier):
    booking = await make_booking(await make_listing())

    first = await payment_service.on_payment_completed(db, _completed(booking.id)["data"]["object"], notifier)
    confirmed_at = first.confirmed_at
    second = await payment_service.on_payment_completed(db, _completed(booking.id)["data"]["object"], notifier)

    assert second.status == "confirmed"
    assert second.payment_status == "paid"
    assert second.confirmed_at == confirmed_at
    # Emails are sent on every delivery
    assert notifier.notify_guest_booking_confirmed.await_count == 2


async def test_payment_after_cancellation_keeps_booking_cancelled(
    db, make_listing, make_booking, notifier
):
    booking = await make_booking(await make_listing(), status="cancelled")

    result = await payment_service.on_payment_completed(
        db, _completed(booking.id)["data"]["object"], notifier
    )

    assert result.status == "cancelled"
    assert result.payment_status == "paid"
    assert result.stripe_payment_intent_id == "pi_123"
    notifier.notify_guest_booking_confirmed.assert_not_awaited()


@pytest.mark.parametrize("metadata", [{}, {"booking_id": "not-a-uuid"}, None])
async def test_completed_without_usable_booking_id(db, notifier, metadata):
    session = {"id": "cs_1", "payment_intent": "pi_1", "metadata": metadata}

    with pytest.raises(WebhookError):
        await payment_service.on_payment_completed(db, session, notifier)


async def test_completed_for_unknown_booking(db, notifier):
    with pytest.raises(WebhookError):
        await payment_service.on_payment_completed(
            db, _completed(uuid.uuid4())["data"]["object"], notifier
        )


async def test_failed_payment_marks_payment_failed(db, make_listing, make_booking):
    booking = await make_booking(await make_listing())

    result = await payment_service.on_payment_failed(db, _failed(booking.id)["data"]["object"])

    assert result.payment_status == "failed"
    assert result.status == "pending"


async def test_failed_payment_never_overrides_paid(db, make_listing, make_booking):
    booking = await make_booking(await make_listing(), status="confirmed", payment_status="paid")

    result = await payment_service.on_payment_failed(db, _failed(booking.id)["data"]["object"])

    assert result is None
    await db.refresh(booking)
    assert booking.payment_status == "paid"


async def test_failed_payment_without_booking_id_is_ignored(db):
    assert await payment_service.on_payment_failed(db, {"id": "pi_1", "metadata": {}}) is None


async def test_other_events_are_ignored(db, notifier):
    event = {"type": "charge.refunded", "data": {"object": {}}}

    await payment_service.handle_stripe_event(db, event, notifier)

    notifier.notify_guest_booking_confirmed.assert_not_awaited()
