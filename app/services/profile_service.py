"""Local profile copies synced from identity-provider webhooks."""

import logging
from typing import Any

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import WebhookError
from app.core.identity import parse_user
from app.models.profile import Profile

logger = logging.getLogger(__name__)


async def upsert_profile(db: AsyncSession, data: dict[str, Any]) -> Profile:
    """Create or refresh a profile from a provider user object."""
    if not data.get("id"):
        raise WebhookError("Missing user id")
    user = parse_user(data)

    profile = await db.get(Profile, user.id)
    if profile is None:
        profile = Profile(id=user.id)
        db.add(profile)
    profile.email = user.email
    profile.first_name = user.first_name
    profile.last_name = user.last_name
    profile.avatar_url = user.image_url

    await db.flush()
    return profile


async def delete_profile(db: AsyncSession, data: dict[str, Any]) -> None:
    user_id = data.get("id")
    if not user_id:
        raise WebhookError("Missing user id")
    await db.execute(delete(Profile).where(Profile.id == user_id))
    logger.info("Profile %s deleted", user_id)


async def handle_identity_event(db: AsyncSession, event: dict[str, Any]) -> None:
    """Apply a verified ``user.*`` event; other event types are acknowledged."""
    event_type = event.get("type")
    data = event.get("data") or {}

    if event_type in ("user.created", "user.updated"):
        profile = await upsert_profile(db, data)
        logger.info("Profile %s synced (%s)", profile.id, event_type)
    elif event_type == "user.deleted":
        await delete_profile(db, data)
    else:
        logger.debug("Ignoring identity event %s", event_type)
