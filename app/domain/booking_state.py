"""Booking state machine.

Only ``pending``, ``confirmed`` and ``cancelled`` are produced. Transitions
depend on who asks: the actor's relation to the booking is derived from the
booking's guest and the listing's owner at the time of the request.
"""

from enum import Enum

from app.domain.results import ErrorKind, ServiceError


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class BookingActor(str, Enum):
    """Relation of the acting user to one booking."""

    GUEST = "guest"
    HOST = "host"
    ADMIN = "admin"
    PAYMENT = "payment"  # payment confirmation webhook
    NONE = "none"


# (from, to) -> actors allowed
BOOKING_TRANSITIONS: dict[tuple[BookingStatus, BookingStatus], set[BookingActor]] = {
    (BookingStatus.PENDING, BookingStatus.CONFIRMED): {BookingActor.HOST, BookingActor.PAYMENT},
    (BookingStatus.PENDING, BookingStatus.CANCELLED): {
        BookingActor.GUEST,
        BookingActor.HOST,
        BookingActor.ADMIN,
    },
    (BookingStatus.CONFIRMED, BookingStatus.CANCELLED): {BookingActor.HOST, BookingActor.ADMIN},
}


def resolve_actor(actor_id: str, guest_id: str, host_id: str) -> BookingActor:
    """Guest or host of this booking, else NONE."""
    if actor_id == host_id:
        return BookingActor.HOST
    if actor_id == guest_id:
        return BookingActor.GUEST
    return BookingActor.NONE


def check_transition(
    current: BookingStatus | str,
    target: BookingStatus | str,
    actor: BookingActor,
) -> ServiceError | None:
    """Return why ``actor`` may not move a booking from current to target, or None."""
    current = BookingStatus(current)
    target = BookingStatus(target)

    if actor == BookingActor.NONE:
        return ServiceError(ErrorKind.FORBIDDEN, "You are not a participant in this booking")

    allowed = BOOKING_TRANSITIONS.get((current, target))
    if allowed is None:
        return ServiceError(
            ErrorKind.INVALID_TRANSITION,
            f"Invalid booking transition: {current.value} → {target.value}",
        )

    if actor not in allowed:
        if (current, target) == (BookingStatus.CONFIRMED, BookingStatus.CANCELLED):
            return ServiceError(
                ErrorKind.CONTACT_SUPPORT,
                "Confirmed bookings cannot be cancelled online. Please contact support.",
            )
        return ServiceError(
            ErrorKind.FORBIDDEN,
            f"Only the host can change this booking to {target.value}",
        )
    return None
