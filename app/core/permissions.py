"""Role checks against the identity provider."""

import logging

from app.core.exceptions import AuthorizationError
from app.core.identity import IdentityProvider, Role

logger = logging.getLogger(__name__)


async def is_admin(user_id: str, identity: IdentityProvider) -> bool:
    """Whether the user currently holds the admin role."""
    return await identity.get_role(user_id) == Role.ADMIN


async def require_admin(user_id: str, identity: IdentityProvider) -> None:
    """Guard for every admin operation.

    The role is re-read from the identity provider on each call, so a demoted
    admin loses access immediately.
    """
    if not await is_admin(user_id, identity):
        logger.warning("Admin access denied for user %s", user_id)
        raise AuthorizationError("Forbidden: admin only")
