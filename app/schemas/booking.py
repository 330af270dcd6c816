"""Booking-related Pydantic schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.listing import ListingSummary
from app.utils.constants import CURRENCY_CODE


class BookingCreate(BaseModel):
    """Schema for creating a booking."""

    listing_id: UUID
    check_in: date
    check_out: date
    num_guests: int = Field(default=1, ge=1, le=50)


class BookingQuoteRequest(BaseModel):
    """Schema for pricing a stay without booking it."""

    listing_id: UUID
    check_in: date
    check_out: date


class BookingPriceBreakdown(BaseModel):
    """Schema for booking price breakdown."""

    model_config = ConfigDict(from_attributes=True)

    nightly_rate: int
    nights: int
    subtotal: int
    service_fee_rate: Decimal
    service_fee: int
    total: int


class BookingQuoteResponse(BaseModel):
    """Schema for a price preview."""

    model_config = ConfigDict(from_attributes=True)

    listing_id: UUID
    check_in: date
    check_out: date
    price: BookingPriceBreakdown
    available: bool
    currency: str = CURRENCY_CODE


class BookingStatusUpdate(BaseModel):
    """Schema for a guest or host status change."""

    status: Literal["confirmed", "cancelled"]


class BookingAdminCancel(BaseModel):
    """Schema for an admin cancellation."""

    reason: str | None = Field(None, max_length=1000)


class BookingResponse(BaseModel):
    """Schema for booking response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    listing_id: UUID
    guest_id: str
    host_id: str

    # Dates
    check_in: date
    check_out: date
    nights: int
    num_guests: int

    # Pricing (whole XAF)
    nightly_rate: int
    subtotal: int
    service_fee: int
    total_price: int
    currency: str = CURRENCY_CODE

    # Status
    status: str
    payment_status: str
    cancelled_by: str | None

    # Timestamps
    confirmed_at: datetime | None
    cancelled_at: datetime | None
    created_at: datetime
    updated_at: datetime

    listing: ListingSummary | None = None
