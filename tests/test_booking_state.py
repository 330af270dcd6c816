"""Booking state machine."""

import pytest

from app.domain.booking_state import (
    BookingActor,
    BookingStatus,
    check_transition,
    resolve_actor,
)
from app.domain.results import ErrorKind

PENDING = BookingStatus.PENDING
CONFIRMED = BookingStatus.CONFIRMED
CANCELLED = BookingStatus.CANCELLED


def test_resolve_actor():
    assert resolve_actor("h", "g", "h") == BookingActor.HOST
    assert resolve_actor("g", "g", "h") == BookingActor.GUEST
    assert resolve_actor("x", "g", "h") == BookingActor.NONE


@pytest.mark.parametrize(
    "current, target, actor",
    [
        (PENDING, CONFIRMED, BookingActor.HOST),
        (PENDING, CONFIRMED, BookingActor.PAYMENT),
        (PENDING, CANCELLED, BookingActor.GUEST),
        (PENDING, CANCELLED, BookingActor.HOST),
        (PENDING, CANCELLED, BookingActor.ADMIN),
        (CONFIRMED, CANCELLED, BookingActor.HOST),
        (CONFIRMED, CANCELLED, BookingActor.ADMIN),
    ],
)
def test_allowed_transitions(current, target, actor):
    assert check_transition(current, target, actor) is None


def test_guest_cannot_cancel_confirmed_booking():
    error = check_transition(CONFIRMED, CANCELLED, BookingActor.GUEST)
    assert error.kind == ErrorKind.CONTACT_SUPPORT
    assert "contact support" in error.message


def test_guest_cannot_confirm():
    error = check_transition(PENDING, CONFIRMED, BookingActor.GUEST)
    assert error.kind == ErrorKind.FORBIDDEN


def test_outsider_is_forbidden_everywhere():
    error = check_transition(PENDING, CANCELLED, BookingActor.NONE)
    assert error.kind == ErrorKind.FORBIDDEN


@pytest.mark.parametrize(
    "current, target",
    [
        (CANCELLED, CONFIRMED),
        (CANCELLED, PENDING),
        (CANCELLED, CANCELLED),
        (CONFIRMED, PENDING),
        (CONFIRMED, CONFIRMED),
    ],
)
def test_invalid_transitions(current, target):
    error = check_transition(current, target, BookingActor.HOST)
    assert error.kind == ErrorKind.INVALID_TRANSITION


def test_accepts_raw_status_strings():
    assert check_transition("pending", "confirmed", BookingActor.HOST) is None
