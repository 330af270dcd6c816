"""Identity-provider webhooks: signatures and profile sync."""

import base64
from datetime import UTC, datetime, timedelta

import pytest
from svix.webhooks import Webhook

from app.core.exceptions import WebhookError
from app.core.identity import Role, parse_user, role_from_metadata
from app.core.security import verify_identity_webhook
from app.models.profile import Profile
from app.services.profile_service import handle_identity_event

SECRET = "whsec_" + base64.b64encode(b"test-signing-secret").decode()
PAYLOAD = b'{"type":"user.created","data":{"id":"user_1"}}'


def signed_headers(
    payload: bytes = PAYLOAD,
    secret: str = SECRET,
    msg_id: str = "msg_1",
    sent_at: datetime | None = None,
) -> dict[str, str]:
    sent_at = sent_at or datetime.now(UTC)
    return {
        "svix-id": msg_id,
        "svix-timestamp": str(int(sent_at.timestamp())),
        "svix-signature": Webhook(secret).sign(msg_id, sent_at, payload.decode()),
    }


def test_valid_delivery_returns_event():
    event = verify_identity_webhook(SECRET, PAYLOAD, signed_headers())

    assert event == {"type": "user.created", "data": {"id": "user_1"}}


def test_tampered_payload_is_rejected():
    headers = signed_headers()

    with pytest.raises(WebhookError):
        verify_identity_webhook(SECRET, PAYLOAD + b" ", headers)


def test_signature_is_bound_to_message_id():
    headers = {**signed_headers(), "svix-id": "msg_2"}

    with pytest.raises(WebhookError):
        verify_identity_webhook(SECRET, PAYLOAD, headers)


def test_other_secret_is_rejected():
    other = "whsec_" + base64.b64encode(b"someone-else").decode()

    with pytest.raises(WebhookError):
        verify_identity_webhook(SECRET, PAYLOAD, signed_headers(secret=other))


def test_stale_delivery_is_rejected():
    headers = signed_headers(sent_at=datetime.now(UTC) - timedelta(hours=1))

    with pytest.raises(WebhookError):
        verify_identity_webhook(SECRET, PAYLOAD, headers)


def test_missing_headers_are_rejected():
    with pytest.raises(WebhookError):
        verify_identity_webhook(SECRET, PAYLOAD, {})


def test_role_defaults_to_guest():
    assert role_from_metadata(None) == Role.GUEST
    assert role_from_metadata({"role": "superuser"}) == Role.GUEST
    assert role_from_metadata({"role": "host"}) == Role.HOST


def test_parse_user_picks_primary_email():
    user = parse_user(
        {
            "id": "user_1",
            "primary_email_address_id": "idn_2",
            "email_addresses": [
                {"id": "idn_1", "email_address": "old@example.cm"},
                {"id": "idn_2", "email_address": "new@example.cm"},
            ],
            "public_metadata": {"role": "admin"},
        }
    )

    assert user.email == "new@example.cm"
    assert user.role == Role.ADMIN


def _user_event(event_type: str, **data) -> dict:
    return {"type": event_type, "data": {"id": "user_1", **data}}


async def test_user_lifecycle_syncs_profile(db):
    email = [{"id": "idn_1", "email_address": "awa@example.cm"}]

    await handle_identity_event(
        db, _user_event("user.created", first_name="Awa", email_addresses=email, primary_email_address_id="idn_1")
    )
    profile = await db.get(Profile, "user_1")
    assert (profile.first_name, profile.email) == ("Awa", "awa@example.cm")

    await handle_identity_event(
        db, _user_event("user.updated", first_name="Awa N.", email_addresses=email, primary_email_address_id="idn_1")
    )
    profile = await db.get(Profile, "user_1", populate_existing=True)
    assert profile.first_name == "Awa N."

    await handle_identity_event(db, _user_event("user.deleted"))
    assert await db.get(Profile, "user_1", populate_existing=True) is None


async def test_update_for_unknown_user_creates_profile(db):
    await handle_identity_event(db, _user_event("user.updated", first_name="Paul"))

    assert (await db.get(Profile, "user_1")).first_name == "Paul"


async def test_event_without_user_id_is_rejected(db):
    with pytest.raises(WebhookError):
        await handle_identity_event(db, {"type": "user.deleted", "data": {}})


async def test_other_events_are_acknowledged(db):
    await handle_identity_event(db, {"type": "session.created", "data": {"id": "sess_1"}})
