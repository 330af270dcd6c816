"""HTTP-facing application errors.

Each subclass fixes a status code and a default message; all of them are
rendered as ``{"detail": ...}`` by the handler installed in ``app.main``.
"""

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception (500 unless a subclass says otherwise)."""

    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "An unexpected error occurred"

    def __init__(self, detail: str | None = None, headers: dict[str, str] | None = None) -> None:
        super().__init__(
            status_code=self.http_status,
            detail=detail or self.default_detail,
            headers=headers,
        )


class ValidationError(AppException):
    http_status = status.HTTP_422_UNPROCESSABLE_CONTENT
    default_detail = "Validation failed"


class NotFoundError(AppException):
    http_status = status.HTTP_404_NOT_FOUND

    def __init__(
        self,
        resource: str = "Resource",
        identifier: str | None = None,
        *,
        detail: str | None = None,
    ) -> None:
        if detail is None:
            detail = (
                f"{resource} '{identifier}' not found" if identifier else f"{resource} not found"
            )
        super().__init__(detail)


class AuthenticationError(AppException):
    """Missing or invalid session token."""

    http_status = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication failed"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class AuthorizationError(AppException):
    http_status = status.HTTP_403_FORBIDDEN
    default_detail = "You don't have permission to access this resource"


class ContactSupportError(AuthorizationError):
    """Guest tried to cancel a confirmed booking."""

    default_detail = "Confirmed bookings cannot be cancelled online. Please contact support."


class ListingNotAvailable(AppException):
    http_status = status.HTTP_404_NOT_FOUND
    default_detail = "This listing is not available"


class ConflictError(AppException):
    http_status = status.HTTP_409_CONFLICT
    default_detail = "The request conflicts with the current state"


class DatesNotAvailable(ConflictError):
    default_detail = "The selected dates are not available"


class InvalidBookingTransition(ConflictError):
    default_detail = "This operation is not allowed for the current booking status"


class AlreadyReviewed(ConflictError):
    default_detail = "You have already reviewed this booking"


class ReviewTooEarly(AppException):
    http_status = status.HTTP_400_BAD_REQUEST
    default_detail = "It is too early to review this stay; come back after check-out"


class PaymentError(AppException):
    http_status = status.HTTP_402_PAYMENT_REQUIRED
    default_detail = "Payment processing failed"


class WebhookError(AppException):
    """Inbound webhook rejected; the sender will retry."""

    http_status = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid webhook"


class RateLimitExceeded(AppException):
    http_status = status.HTTP_429_TOO_MANY_REQUESTS
    default_detail = "Too many requests. Please try again later."


class ExternalServiceError(AppException):
    """Email or identity provider unreachable or misconfigured."""

    http_status = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, service: str, detail: str | None = None) -> None:
        message = f"External service '{service}' is unavailable"
        super().__init__(f"{message}: {detail}" if detail else message)
