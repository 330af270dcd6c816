"""Core utilities and security modules."""

from app.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    ContactSupportError,
    DatesNotAvailable,
    ExternalServiceError,
    NotFoundError,
    PaymentError,
    ValidationError,
    WebhookError,
)
from app.core.security import verify_identity_webhook, verify_token

__all__ = [
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "ContactSupportError",
    "DatesNotAvailable",
    "ExternalServiceError",
    "NotFoundError",
    "PaymentError",
    "ValidationError",
    "WebhookError",
    "verify_token",
    "verify_identity_webhook",
]
