"""Admin panel endpoints."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import (
    get_current_user_id,
    get_db,
    get_identity_provider,
    get_notification_service,
)
from app.core.exceptions import NotFoundError
from app.core.identity import IdentityProvider, IdentityUser
from app.domain.booking_state import BookingStatus
from app.models.booking import Booking
from app.models.listing import Listing
from app.schemas.admin import (
    AdminUserResponse,
    AnalyticsResponse,
    FinancialReportResponse,
    RoleUpdate,
)
from app.schemas.booking import BookingAdminCancel, BookingResponse
from app.schemas.listing import ListingRejectRequest, ListingResponse
from app.services import admin_service, booking_service, listing_service
from app.services.admin_service import Analytics, FinancialReport
from app.services.notification_service import NotificationService

router = APIRouter()


# ============ REPORTS ============


@router.get("/analytics", response_model=AnalyticsResponse)
async def get_analytics(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityProvider, Depends(get_identity_provider)],
) -> Analytics:
    """Platform-wide revenue, booking, listing and user counters."""
    return await admin_service.get_analytics(db, identity, user_id)


@router.get("/financial-report", response_model=FinancialReportResponse)
async def get_financial_report(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityProvider, Depends(get_identity_provider)],
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
) -> FinancialReport:
    """Confirmed bookings created between two dates (inclusive)."""
    return await admin_service.get_financial_report(db, identity, user_id, start_date, end_date)


# ============ BOOKINGS ============


@router.get("/bookings", response_model=list[BookingResponse])
async def get_all_bookings(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityProvider, Depends(get_identity_provider)],
    status_filter: BookingStatus | None = Query(default=None, alias="status"),
) -> list[Booking]:
    """All bookings, newest first."""
    return await admin_service.list_all_bookings(db, identity, user_id, status_filter)


@router.post("/bookings/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: UUID,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityProvider, Depends(get_identity_provider)],
    notifier: Annotated[NotificationService, Depends(get_notification_service)],
    request: BookingAdminCancel | None = None,
) -> Booking:
    """Cancel any booking on a guest's or host's behalf."""
    result = await booking_service.cancel_booking_admin(
        db,
        identity,
        user_id,
        booking_id,
        reason=request.reason if request else None,
        notifier=notifier,
    )
    return result.unwrap()


# ============ LISTING APPROVALS ============


@router.get("/listings/pending", response_model=list[ListingResponse])
async def get_pending_listings(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityProvider, Depends(get_identity_provider)],
) -> list[Listing]:
    """Get listings pending approval, oldest first."""
    return await listing_service.list_pending_listings(db, identity, user_id)


@router.get("/listings", response_model=list[ListingResponse])
async def get_all_listings(
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityProvider, Depends(get_identity_provider)],
) -> list[Listing]:
    """Get every listing in any status."""
    return await listing_service.list_all_listings(db, identity, user_id)


@router.post("/listings/{listing_id}/approve", response_model=ListingResponse)
async def approve_listing(
    listing_id: UUID,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityProvider, Depends(get_identity_provider)],
    notifier: Annotated[NotificationService, Depends(get_notification_service)],
) -> Listing:
    """Approve a listing."""
    result = await listing_service.moderate_listing(
        db, identity, user_id, listing_id, approve=True, notifier=notifier
    )
    return result.unwrap()


@router.post("/listings/{listing_id}/reject", response_model=ListingResponse)
async def reject_listing(
    listing_id: UUID,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityProvider, Depends(get_identity_provider)],
    notifier: Annotated[NotificationService, Depends(get_notification_service)],
    request: ListingRejectRequest | None = None,
) -> Listing:
    """Reject a listing."""
    result = await listing_service.moderate_listing(
        db,
        identity,
        user_id,
        listing_id,
        approve=False,
        reason=request.reason if request else None,
        notifier=notifier,
    )
    return result.unwrap()


# ============ USERS ============


async def _fetch_user(identity: IdentityProvider, user_id: str) -> IdentityUser:
    user = await identity.get_user(user_id)
    if not user:
        raise NotFoundError("User", user_id)
    return user


@router.get("/users", response_model=list[AdminUserResponse])
async def get_users(
    user_id: Annotated[str, Depends(get_current_user_id)],
    identity: Annotated[IdentityProvider, Depends(get_identity_provider)],
) -> list[IdentityUser]:
    """List users from the identity provider."""
    return await admin_service.list_users(identity, user_id)


@router.patch("/users/{target_id}/role", response_model=AdminUserResponse)
async def update_user_role(
    target_id: str,
    request: RoleUpdate,
    user_id: Annotated[str, Depends(get_current_user_id)],
    identity: Annotated[IdentityProvider, Depends(get_identity_provider)],
) -> IdentityUser:
    """Change a user's role."""
    await admin_service.update_user_role(identity, user_id, target_id, request.role)
    return await _fetch_user(identity, target_id)


@router.post("/users/{target_id}/ban", response_model=AdminUserResponse)
async def ban_user(
    target_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    identity: Annotated[IdentityProvider, Depends(get_identity_provider)],
) -> IdentityUser:
    """Ban a user."""
    await admin_service.ban_user(identity, user_id, target_id)
    return await _fetch_user(identity, target_id)


@router.post("/users/{target_id}/unban", response_model=AdminUserResponse)
async def unban_user(
    target_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    identity: Annotated[IdentityProvider, Depends(get_identity_provider)],
) -> IdentityUser:
    """Lift a ban."""
    await admin_service.unban_user(identity, user_id, target_id)
    return await _fetch_user(identity, target_id)
