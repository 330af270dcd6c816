"""Pydantic schemas for API validation."""

from app.schemas.admin import (
    AdminUserResponse,
    AnalyticsResponse,
    FinancialReportResponse,
    RoleUpdate,
)
from app.schemas.booking import (
    BookingAdminCancel,
    BookingCreate,
    BookingQuoteRequest,
    BookingQuoteResponse,
    BookingResponse,
    BookingStatusUpdate,
)
from app.schemas.favorite import FavoriteResponse, FavoriteToggleResponse
from app.schemas.listing import (
    HostProfileResponse,
    ListingCreate,
    ListingRejectRequest,
    ListingResponse,
    ListingSummary,
    ListingUpdate,
    RatingSummaryResponse,
)
from app.schemas.message import (
    ConversationCreate,
    ConversationResponse,
    MessageCreate,
    MessageResponse,
)
from app.schemas.payment import CheckoutCreate, CheckoutResponse, WebhookAck
from app.schemas.review import ReviewCreate, ReviewResponse
from app.schemas.support import SupportRequest

__all__ = [
    # Admin
    "AdminUserResponse",
    "AnalyticsResponse",
    "FinancialReportResponse",
    "RoleUpdate",
    # Booking
    "BookingAdminCancel",
    "BookingCreate",
    "BookingQuoteRequest",
    "BookingQuoteResponse",
    "BookingResponse",
    "BookingStatusUpdate",
    # Favorite
    "FavoriteResponse",
    "FavoriteToggleResponse",
    # Listing
    "HostProfileResponse",
    "ListingCreate",
    "ListingRejectRequest",
    "ListingResponse",
    "ListingSummary",
    "ListingUpdate",
    "RatingSummaryResponse",
    # Message
    "ConversationCreate",
    "ConversationResponse",
    "MessageCreate",
    "MessageResponse",
    # Payment
    "CheckoutCreate",
    "CheckoutResponse",
    "WebhookAck",
    # Review
    "ReviewCreate",
    "ReviewResponse",
    # Support
    "SupportRequest",
]
