"""Notification Service for transactional email.

Emails go out through the Resend HTTP API. Recipients are addressed through
their synced profile; users without a profile or email are skipped.
"""

import html
import logging
from datetime import UTC, datetime
from typing import Any

import httpx
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import ExternalServiceError
from app.models.booking import Booking
from app.models.listing import Listing
from app.models.profile import Profile
from app.utils.constants import format_xaf

logger = logging.getLogger(__name__)


class NotificationService:
    """Service for sending transactional emails."""

    def __init__(self) -> None:
        """Initialize notification service."""
        self._http_client: httpx.AsyncClient | None = None

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Lazy-load HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=30.0)
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    # ==================== EMAIL (RESEND) ====================

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        reply_to: str | None = None,
    ) -> bool:
        """Send an email via Resend.

        Args:
            to_email: Recipient email
            subject: Email subject
            html_content: HTML body
            reply_to: Optional Reply-To address

        Returns:
            bool: False if email is not configured

        Raises:
            ExternalServiceError: If the provider is unreachable or rejects the email
        """
        if not settings.resend_api_key:
            logger.warning("Email not configured; dropping '%s' to %s", subject, to_email)
            return False

        payload: dict[str, Any] = {
            "from": settings.email_from_address,
            "to": [to_email],
            "subject": subject,
            "html": html_content,
        }
        if reply_to:
            payload["reply_to"] = reply_to

        try:
            response = await self.http_client.post(
                f"{settings.resend_api_url}/emails",
                headers={"Authorization": f"Bearer {settings.resend_api_key}"},
                json=payload,
            )
        except httpx.HTTPError as e:
            raise ExternalServiceError("email", str(e)) from e

        if response.status_code not in (200, 201, 202):
            raise ExternalServiceError("email", f"HTTP {response.status_code}")

        logger.info("Email '%s' sent to %s", subject, to_email)
        return True

    async def email_user(
        self,
        db: AsyncSession,
        user_id: str,
        title: str,
        body: str,
        action_url: str | None = None,
    ) -> bool:
        """Email a user by id using their synced profile."""
        result = await db.execute(select(Profile.email).where(Profile.id == user_id))
        email = result.scalar_one_or_none()
        if not email:
            logger.info("No email on file for user %s; skipping '%s'", user_id, title)
            return False

        return await self.send_email(
            to_email=email,
            subject=title,
            html_content=self._generate_email_html(title, body, action_url),
        )

    def _generate_email_html(self, title: str, body: str, action_url: str | None) -> str:
        """Generate simple HTML email content."""
        button_html = ""
        if action_url:
            button_html = f"""
            <p style="margin-top: 24px;">
                <a href="{settings.app_base_url}{action_url}"
                   style="background-color: #1E3A8A; color: white; padding: 12px 24px;
                          text-decoration: none; border-radius: 6px; display: inline-block;">
                    View Details
                </a>
            </p>
            """

        return f"""
        <!DOCTYPE html>
        <html>
        <head>
            <meta charset="utf-8">
            <meta name="viewport" content="width=device-width, initial-scale=1.0">
        </head>
        <body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
                     max-width: 600px; margin: 0 auto; padding: 20px; color: #333;">
            <div style="background-color: #f9fafb; border-radius: 8px; padding: 24px;">
                <h1 style="color: #111827; font-size: 24px; margin-bottom: 16px;">{html.escape(title)}</h1>
                <p style="color: #4b5563; font-size: 16px; line-height: 1.6; white-space: pre-wrap;">{html.escape(body)}</p>
                {button_html}
            </div>
            <p style="color: #9ca3af; font-size: 12px; margin-top: 24px; text-align: center;">
                &copy; {datetime.now(UTC).year} {settings.app_name}. All rights reserved.
            </p>
        </body>
        </html>
        """

    # ==================== BOOKING NOTIFICATIONS ====================

    async def notify_guest_booking_pending(
        self, db: AsyncSession, booking: Booking, listing_title: str
    ) -> bool:
        return await self.email_user(
            db,
            booking.guest_id,
            title="Reservation request received",
            body=(
                f"Your reservation at {listing_title} from {booking.check_in} to "
                f"{booking.check_out} is pending. Total: {format_xaf(booking.total_price)}. "
                "Complete payment to confirm it."
            ),
            action_url=f"/bookings/{booking.id}",
        )

    async def notify_host_booking_pending(
        self, db: AsyncSession, booking: Booking, listing_title: str
    ) -> bool:
        return await self.email_user(
            db,
            booking.host_id,
            title="New reservation request",
            body=(
                f"A guest requested {listing_title} from {booking.check_in} to "
                f"{booking.check_out} for {booking.num_guests} guest(s)."
            ),
            action_url="/host/bookings",
        )

    async def notify_guest_booking_confirmed(
        self, db: AsyncSession, booking: Booking, listing_title: str
    ) -> bool:
        return await self.email_user(
            db,
            booking.guest_id,
            title="Booking Confirmed!",
            body=(
                f"Your booking at {listing_title} from {booking.check_in} to "
                f"{booking.check_out} has been confirmed."
            ),
            action_url=f"/bookings/{booking.id}",
        )

    async def notify_host_booking_confirmed(
        self, db: AsyncSession, booking: Booking, listing_title: str
    ) -> bool:
        return await self.email_user(
            db,
            booking.host_id,
            title="New Booking Confirmed",
            body=(
                f"You have a new booking at {listing_title} from {booking.check_in} to "
                f"{booking.check_out}."
            ),
            action_url="/host/bookings",
        )

    async def notify_booking_cancelled(
        self, db: AsyncSession, booking: Booking, listing_title: str, recipient_id: str
    ) -> bool:
        """Tell one participant that a booking was cancelled."""
        return await self.email_user(
            db,
            recipient_id,
            title="Booking cancelled",
            body=(
                f"The booking at {listing_title} from {booking.check_in} to "
                f"{booking.check_out} has been cancelled."
            ),
            action_url=f"/bookings/{booking.id}",
        )

    async def send_review_request(
        self, db: AsyncSession, booking: Booking, listing_title: str
    ) -> bool:
        return await self.email_user(
            db,
            booking.guest_id,
            title=f"How was your stay at {listing_title}?",
            body="Thanks for staying with us. Take a minute to review your stay.",
            action_url=f"/bookings/{booking.id}/review",
        )

    # ==================== LISTING NOTIFICATIONS ====================

    async def notify_admin_listing_submitted(self, listing: Listing) -> bool:
        """Tell the moderation inbox that a listing awaits review."""
        return await self.send_email(
            to_email=settings.admin_email,
            subject=f"New listing pending review: {listing.title}",
            html_content=self._generate_email_html(
                "New listing pending review",
                f'"{listing.title}" in {listing.city} was submitted for review.',
                "/admin/listings",
            ),
        )

    async def notify_listing_approved(self, db: AsyncSession, listing: Listing) -> bool:
        return await self.email_user(
            db,
            listing.host_id,
            title="Listing Approved!",
            body=f'Your listing "{listing.title}" has been approved and is now live.',
            action_url=f"/listings/{listing.id}",
        )

    async def notify_listing_rejected(self, db: AsyncSession, listing: Listing) -> bool:
        reason = listing.rejection_reason or "No reason was given."
        return await self.email_user(
            db,
            listing.host_id,
            title="Listing not approved",
            body=f'Your listing "{listing.title}" was not approved.\n\nReason: {reason}',
            action_url="/host/listings",
        )

    # ==================== SUPPORT ====================

    async def send_support_request(
        self,
        name: str,
        email: str,
        subject: str,
        category: str,
        message: str,
    ) -> bool:
        """Forward a support request to the support inbox."""
        body = (
            f"From: {name}\nEmail: {email}\nCategory: {category}\nSubject: {subject}\n\n{message}"
        )
        return await self.send_email(
            to_email=settings.support_email,
            subject=f"[{category.upper()}] {subject}",
            html_content=self._generate_email_html("New Support Request", body, None),
            reply_to=email,
        )


# Singleton instance
notification_service = NotificationService()


def get_notification_service() -> NotificationService:
    """Dependency returning the shared notification service."""
    return notification_service
