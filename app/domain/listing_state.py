"""Listing moderation state machine."""

from enum import Enum

from app.domain.results import ErrorKind, ServiceError


class ListingStatus(str, Enum):
    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    SNOOZED = "snoozed"


# Admin moderation outcomes; reachable from any other status
MODERATION_TARGETS = {ListingStatus.APPROVED, ListingStatus.REJECTED}

# Owner visibility toggle
OWNER_TRANSITIONS = {
    ListingStatus.APPROVED: {ListingStatus.SNOOZED},
    ListingStatus.SNOOZED: {ListingStatus.APPROVED},
}


def check_moderation_transition(current: str, target: ListingStatus) -> ServiceError | None:
    if target not in MODERATION_TARGETS:
        return ServiceError(ErrorKind.VALIDATION, f"Moderation cannot set a listing to {target.value}")
    if ListingStatus(current) == target:
        return ServiceError(ErrorKind.VALIDATION, f"Listing is already {target.value}")
    return None


def check_owner_transition(current: str, target: ListingStatus) -> ServiceError | None:
    allowed = OWNER_TRANSITIONS.get(ListingStatus(current), set())
    if target not in allowed:
        return ServiceError(
            ErrorKind.VALIDATION,
            f"Cannot change listing from {current} to {target.value}",
        )
    return None
