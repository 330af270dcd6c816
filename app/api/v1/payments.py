"""Payment endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user_id, get_db, get_payment_gateway
from app.gateways.base import PaymentGateway
from app.schemas.payment import CheckoutCreate, CheckoutResponse
from app.services import payment_service

router = APIRouter()


@router.post("/checkout", response_model=CheckoutResponse)
async def create_checkout_session(
    request: CheckoutCreate,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    gateway: Annotated[PaymentGateway, Depends(get_payment_gateway)],
) -> CheckoutResponse:
    """Open a hosted checkout session for a pending booking."""
    result = await payment_service.create_checkout(
        db,
        gateway,
        user_id,
        request.booking_id,
        request.display_name,
        request.total_amount,
    )
    checkout = result.unwrap()
    return CheckoutResponse(session_id=checkout.session_id, url=checkout.url)
