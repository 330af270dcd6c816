"""Stripe adapter: webhook signatures and checkout session parameters."""

import hashlib
import hmac
import json
import time
from types import SimpleNamespace

import pytest
import stripe

from app.config import settings
from app.gateways.stripe_gateway import StripeGateway
from app.services import payment_service
from tests.conftest import GUEST_ID

WEBHOOK_SECRET = "whsec_test_kmer"
EVENT = {
    "id": "evt_1",
    "object": "event",
    "type": "checkout.session.completed",
    "data": {"object": {"id": "cs_1", "metadata": {"booking_id": "b-1"}}},
}
PAYLOAD = json.dumps(EVENT).encode()


def stripe_signature(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """``Stripe-Signature`` header as Stripe computes it: HMAC-SHA256 over ``t.payload``."""
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f"{timestamp}.".encode() + payload
    digest = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


@pytest.fixture
def stripe_gateway(monkeypatch) -> StripeGateway:
    monkeypatch.setattr(settings, "stripe_secret_key", "sk_test_kmer")
    monkeypatch.setattr(settings, "stripe_webhook_secret", WEBHOOK_SECRET)
    monkeypatch.setattr(stripe, "api_key", None)
    return StripeGateway()


@pytest.fixture
def created_sessions(monkeypatch) -> list[dict]:
    calls: list[dict] = []

    def fake_create(**kwargs):
        calls.append(kwargs)
        return SimpleNamespace(id="cs_live_1", url="https://checkout.stripe.com/c/pay/cs_live_1")

    monkeypatch.setattr(stripe.checkout.Session, "create", fake_create)
    return calls


# ==================== WEBHOOKS ====================


def test_signed_event_is_accepted(stripe_gateway):
    event = stripe_gateway.verify_webhook(PAYLOAD, stripe_signature(PAYLOAD))

    assert event == EVENT


def test_tampered_payload_is_rejected(stripe_gateway):
    header = stripe_signature(PAYLOAD)
    tampered = PAYLOAD.replace(b"b-1", b"b-2")

    assert stripe_gateway.verify_webhook(tampered, header) is None


def test_other_secret_is_rejected(stripe_gateway):
    header = stripe_signature(PAYLOAD, secret="whsec_someone_else")

    assert stripe_gateway.verify_webhook(PAYLOAD, header) is None


def test_stale_signature_is_rejected(stripe_gateway):
    header = stripe_signature(PAYLOAD, timestamp=int(time.time()) - 3600)

    assert stripe_gateway.verify_webhook(PAYLOAD, header) is None


def test_unconfigured_secret_verifies_nothing(monkeypatch):
    monkeypatch.setattr(settings, "stripe_webhook_secret", None)
    gateway = StripeGateway()

    assert not gateway.webhook_configured
    assert gateway.verify_webhook(PAYLOAD, stripe_signature(PAYLOAD)) is None


# ==================== CHECKOUT ====================


async def test_checkout_passes_xaf_total_unscaled(db, make_listing, make_booking, stripe_gateway, created_sessions):
    booking = await make_booking(await make_listing())

    result = await payment_service.create_checkout(
        db, stripe_gateway, GUEST_ID, booking.id, "Appartement Bonapriso", booking.total_price
    )

    assert result.value.session_id == "cs_live_1"
    (params,) = created_sessions
    price_data = params["line_items"][0]["price_data"]
    assert price_data["unit_amount"] == booking.total_price == 85500
    assert price_data["currency"] == "xaf"
    assert price_data["product_data"] == {"name": "Appartement Bonapriso"}
    metadata = {"booking_id": str(booking.id), "user_id": GUEST_ID}
    assert params["metadata"] == metadata
    assert params["payment_intent_data"] == {"metadata": metadata}


async def test_stripe_error_becomes_failed_result(stripe_gateway, monkeypatch):
    def failing_create(**kwargs):
        raise stripe.StripeError("Your card was declined")

    monkeypatch.setattr(stripe.checkout.Session, "create", failing_create)

    result = await stripe_gateway.create_checkout_session(
        amount=85500,
        currency="xaf",
        description="Stay",
        success_url="https://kmerstays.cm/ok",
        cancel_url="https://kmerstays.cm/cancel",
        metadata={"booking_id": "b-1"},
    )

    assert not result.success
    assert "declined" in result.error_message


async def test_missing_secret_key_fails_without_calling_stripe(monkeypatch, created_sessions):
    monkeypatch.setattr(settings, "stripe_secret_key", None)

    result = await StripeGateway().create_checkout_session(
        amount=85500,
        currency="xaf",
        description="Stay",
        success_url="https://kmerstays.cm/ok",
        cancel_url="https://kmerstays.cm/cancel",
        metadata={},
    )

    assert not result.success
    assert created_sessions == []
