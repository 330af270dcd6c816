"""Typed outcomes returned by service entry points.

Services report business-rule failures as values so that callers can render
them directly. Routers turn a failed result into the matching HTTP error with
``unwrap()``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from app.core.exceptions import (
    AlreadyReviewed,
    AppException,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    ContactSupportError,
    DatesNotAvailable,
    InvalidBookingTransition,
    ListingNotAvailable,
    NotFoundError,
    ReviewTooEarly,
    ValidationError,
)

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Business-rule failure categories."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    LISTING_UNAVAILABLE = "listing_unavailable"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    CONTACT_SUPPORT = "contact_support"
    CONFLICT = "conflict"
    DATES_UNAVAILABLE = "dates_unavailable"
    INVALID_TRANSITION = "invalid_transition"
    ALREADY_REVIEWED = "already_reviewed"
    TOO_EARLY = "too_early"


_EXCEPTIONS: dict[ErrorKind, type[AppException]] = {
    ErrorKind.VALIDATION: ValidationError,
    ErrorKind.LISTING_UNAVAILABLE: ListingNotAvailable,
    ErrorKind.UNAUTHORIZED: AuthenticationError,
    ErrorKind.FORBIDDEN: AuthorizationError,
    ErrorKind.CONTACT_SUPPORT: ContactSupportError,
    ErrorKind.CONFLICT: ConflictError,
    ErrorKind.DATES_UNAVAILABLE: DatesNotAvailable,
    ErrorKind.INVALID_TRANSITION: InvalidBookingTransition,
    ErrorKind.ALREADY_REVIEWED: AlreadyReviewed,
    ErrorKind.TOO_EARLY: ReviewTooEarly,
}


@dataclass
class ServiceError:
    """A user-facing failure reason."""

    kind: ErrorKind
    message: str

    def to_exception(self) -> AppException:
        if self.kind == ErrorKind.NOT_FOUND:
            return NotFoundError(detail=self.message)
        return _EXCEPTIONS[self.kind](self.message)


@dataclass
class ServiceResult(Generic[T]):
    """Either a value or a ServiceError."""

    value: T | None = None
    error: ServiceError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "ServiceResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "ServiceResult[T]":
        return cls(error=ServiceError(kind=kind, message=message))

    def unwrap(self) -> T:
        """Return the value or raise the matching AppException."""
        if self.error is not None:
            raise self.error.to_exception()
        return self.value  # type: ignore[return-value]
