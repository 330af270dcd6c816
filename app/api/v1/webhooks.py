"""Webhook endpoints for the payment processor and the identity provider."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db, get_notification_service, get_payment_gateway
from app.config import settings
from app.core.exceptions import AppException, WebhookError
from app.core.security import verify_identity_webhook
from app.gateways.base import PaymentGateway
from app.schemas.payment import WebhookAck
from app.services.notification_service import NotificationService
from app.services.payment_service import handle_stripe_event
from app.services.profile_service import handle_identity_event

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/stripe", response_model=WebhookAck, status_code=status.HTTP_200_OK)
async def stripe_webhook(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    gateway: Annotated[PaymentGateway, Depends(get_payment_gateway)],
    notifier: Annotated[NotificationService, Depends(get_notification_service)],
    stripe_signature: Annotated[str | None, Header(alias="Stripe-Signature")] = None,
) -> WebhookAck:
    """Handle Stripe webhook events.

    Non-2xx responses make Stripe retry, so only processing failures raise.
    """
    if not gateway.webhook_configured:
        logger.error("Stripe webhook received but no webhook secret is configured")
        raise AppException(detail="Stripe webhook secret is not configured")

    if not stripe_signature:
        raise WebhookError("Missing Stripe-Signature header")

    # Raw body for signature verification
    payload = await request.body()
    event = gateway.verify_webhook(payload, stripe_signature)
    if event is None:
        raise WebhookError("Invalid signature")

    logger.info("Stripe event %s (%s)", event.get("id"), event.get("type"))
    await handle_stripe_event(db, event, notifier)
    return WebhookAck()


@router.post("/identity", response_model=WebhookAck, status_code=status.HTTP_200_OK)
async def identity_webhook(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    svix_id: Annotated[str | None, Header(alias="svix-id")] = None,
    svix_timestamp: Annotated[str | None, Header(alias="svix-timestamp")] = None,
    svix_signature: Annotated[str | None, Header(alias="svix-signature")] = None,
) -> WebhookAck:
    """Sync profiles from identity-provider user events."""
    secret = settings.clerk_webhook_secret
    if not secret:
        logger.error("Identity webhook received but no signing secret is configured")
        raise AppException(detail="Identity webhook secret is not configured")

    if not (svix_id and svix_timestamp and svix_signature):
        raise WebhookError("Missing svix headers")

    payload = await request.body()
    event = verify_identity_webhook(
        secret,
        payload,
        {"svix-id": svix_id, "svix-timestamp": svix_timestamp, "svix-signature": svix_signature},
    )

    await handle_identity_event(db, event)
    return WebhookAck()
