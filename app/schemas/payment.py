"""Payment-related Pydantic schemas."""

from uuid import UUID

from pydantic import BaseModel, Field


class CheckoutCreate(BaseModel):
    """Schema for opening a checkout session."""

    booking_id: UUID
    display_name: str = Field(..., min_length=1, max_length=250)
    # Whole XAF; must equal the booking total
    total_amount: int = Field(..., gt=0)


class CheckoutResponse(BaseModel):
    """Schema for checkout session response."""

    session_id: str
    url: str


class WebhookAck(BaseModel):
    """Acknowledgement returned to webhook senders."""

    received: bool = True
