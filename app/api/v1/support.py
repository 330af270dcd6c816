"""Support contact endpoint."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.api.deps import get_notification_service
from app.core.exceptions import ExternalServiceError
from app.core.middleware import support_limiter
from app.schemas.support import SupportRequest
from app.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter()


class SupportAck(BaseModel):
    success: bool = True


@router.post("/", response_model=SupportAck, dependencies=[Depends(support_limiter)])
async def contact_support(
    request: SupportRequest,
    notifier: Annotated[NotificationService, Depends(get_notification_service)],
) -> SupportAck:
    """Forward a message to the support inbox."""
    sent = await notifier.send_support_request(
        name=request.name,
        email=request.email,
        subject=request.subject,
        category=request.category,
        message=request.message,
    )
    if not sent:
        logger.error("Support request from %s could not be delivered", request.email)
        raise ExternalServiceError("email", "Support is unavailable right now, please try again later")
    return SupportAck()
