"""API dependencies for authentication and common operations."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.exceptions import AuthenticationError
from app.core.identity import get_identity_provider
from app.core.security import verify_token
from app.database import get_db
from app.gateways.stripe_gateway import get_payment_gateway
from app.services.notification_service import get_notification_service

__all__ = [
    "get_current_user_id",
    "get_db",
    "get_identity_provider",
    "get_notification_service",
    "get_optional_user_id",
    "get_payment_gateway",
]

# Security scheme
security = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str:
    """Get the current user's identity-provider id from the session token."""
    if not credentials:
        raise AuthenticationError("Not authenticated")
    payload = verify_token(credentials.credentials)
    return payload["sub"]


async def get_optional_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str | None:
    """Optionally get the current user id if authenticated."""
    if not credentials:
        return None
    try:
        payload = verify_token(credentials.credentials)
    except AuthenticationError:
        return None
    return payload["sub"]
