"""Booking endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import (
    get_current_user_id,
    get_db,
    get_identity_provider,
    get_notification_service,
)
from app.core.identity import IdentityProvider
from app.core.middleware import booking_limiter
from app.domain.booking_state import BookingStatus
from app.models.booking import Booking
from app.schemas.booking import (
    BookingCreate,
    BookingQuoteRequest,
    BookingQuoteResponse,
    BookingResponse,
    BookingStatusUpdate,
)
from app.services import booking_service
from app.services.booking_service import BookingQuote
from app.services.notification_service import NotificationService

router = APIRouter()


@router.post("/quote", response_model=BookingQuoteResponse)
async def quote_booking(
    request: BookingQuoteRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingQuote:
    """Price a stay without creating a booking."""
    result = await booking_service.quote(db, request.listing_id, request.check_in, request.check_out)
    return result.unwrap()


@router.post(
    "/",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(booking_limiter)],
)
async def create_booking(
    booking_data: BookingCreate,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    notifier: Annotated[NotificationService, Depends(get_notification_service)],
) -> Booking:
    """Create a pending booking."""
    result = await booking_service.create_booking(
        db,
        user_id,
        booking_data.listing_id,
        booking_data.check_in,
        booking_data.check_out,
        booking_data.num_guests,
        notifier=notifier,
    )
    return result.unwrap()


@router.get("/", response_model=list[BookingResponse])
async def get_my_trips(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> list[Booking]:
    """Bookings made by the current user, newest first."""
    return await booking_service.list_guest_bookings(db, user_id)


@router.get("/hosting", response_model=list[BookingResponse])
async def get_hosting_bookings(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    status_filter: BookingStatus | None = Query(default=None, alias="status"),
) -> list[Booking]:
    """Bookings on the current user's listings, newest first."""
    return await booking_service.list_host_bookings(db, user_id, status_filter)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: UUID,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityProvider, Depends(get_identity_provider)],
) -> Booking:
    """Get a booking by ID (guest, host or admin)."""
    result = await booking_service.get_booking(db, identity, user_id, booking_id)
    return result.unwrap()


@router.patch("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: UUID,
    request: BookingStatusUpdate,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    notifier: Annotated[NotificationService, Depends(get_notification_service)],
) -> Booking:
    """Confirm (host) or cancel (guest or host) a booking."""
    result = await booking_service.update_status(
        db, booking_id, user_id, BookingStatus(request.status), notifier=notifier
    )
    return result.unwrap()
