"""Session token and webhook signature verification.

Users sign in with the identity provider (Clerk); the API only verifies the
session JWT it issues and reads the user id from ``sub``.
"""

from typing import Any

from jose import JWTError, jwt
from svix.webhooks import Webhook, WebhookVerificationError

from app.config import settings
from app.core.exceptions import AuthenticationError, WebhookError


def verify_token(token: str) -> dict[str, Any]:
    """Verify and decode an identity-provider session token."""
    options = {"verify_aud": False}
    try:
        payload = jwt.decode(
            token,
            settings.auth_jwt_key,
            algorithms=[settings.auth_jwt_algorithm],
            issuer=settings.auth_jwt_issuer,
            options=options,
        )
    except JWTError as e:
        raise AuthenticationError(f"Token validation failed: {str(e)}")

    if not payload.get("sub"):
        raise AuthenticationError("Invalid token payload")
    return payload


def verify_identity_webhook(secret: str, payload: bytes, headers: dict[str, str]) -> dict[str, Any]:
    """Check a svix-signed identity-provider delivery and return its event.

    ``headers`` carries ``svix-id``, ``svix-timestamp`` and ``svix-signature``.
    The library also rejects deliveries outside its five-minute tolerance.

    Raises:
        WebhookError: missing headers, bad signature or stale timestamp
    """
    try:
        return Webhook(secret).verify(payload, headers)
    except WebhookVerificationError as e:
        raise WebhookError(f"Invalid signature: {e}") from e
