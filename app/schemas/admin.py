"""Admin panel schemas (read-only reports and user management)."""

from datetime import date

from pydantic import BaseModel, ConfigDict

from app.core.identity import Role
from app.schemas.booking import BookingResponse
from app.utils.constants import CURRENCY_CODE


class AnalyticsResponse(BaseModel):
    """Platform-wide counters."""

    model_config = ConfigDict(from_attributes=True)

    total_revenue: int
    platform_commission: int
    booking_stats: dict[str, int]
    listing_stats: dict[str, int]
    user_stats: dict[str, int]
    currency: str = CURRENCY_CODE


class FinancialReportResponse(BaseModel):
    """Confirmed bookings in a window with revenue split."""

    model_config = ConfigDict(from_attributes=True)

    start_date: date | None
    end_date: date | None
    total_revenue: int
    platform_commission: int
    host_payouts: int
    booking_count: int
    bookings: list[BookingResponse]
    currency: str = CURRENCY_CODE


class AdminUserResponse(BaseModel):
    """User as listed in the admin panel."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str | None
    first_name: str | None
    last_name: str | None
    image_url: str | None
    role: Role
    banned: bool
    created_at: int | None


class RoleUpdate(BaseModel):
    """Schema for changing a user's role."""

    role: Role
