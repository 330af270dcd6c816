"""Base payment gateway interface.

All gateway adapters must implement this interface.
Business logic should NOT live in adapters - only gateway communication.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class GatewayType(str, Enum):
    """Supported payment gateways."""

    STRIPE = "stripe"


@dataclass
class CheckoutResult:
    """Result of creating a hosted checkout session."""

    success: bool
    session_id: str | None = None
    url: str | None = None
    error_message: str | None = None


class PaymentGateway(ABC):
    """Abstract base class for payment gateways."""

    @property
    @abstractmethod
    def gateway_type(self) -> GatewayType:
        """Return the gateway type."""
        pass

    @property
    @abstractmethod
    def webhook_configured(self) -> bool:
        """Whether inbound webhooks can be verified."""
        pass

    @abstractmethod
    async def create_checkout_session(
        self,
        amount: int,
        currency: str,
        description: str,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
    ) -> CheckoutResult:
        """Create a hosted checkout session.

        Args:
            amount: Amount in whole currency units (XAF is zero-decimal)
            currency: Currency code
            description: Line item name shown to the payer
            success_url: Redirect after payment
            cancel_url: Redirect when the payer abandons checkout
            metadata: Attached to the session and to its payment intent

        Returns:
            CheckoutResult with the session id and redirect URL
        """
        pass

    @abstractmethod
    def verify_webhook(
        self,
        payload: bytes,
        signature: str,
    ) -> dict | None:
        """Verify webhook signature and parse payload.

        Args:
            payload: Raw request body
            signature: Webhook signature header

        Returns:
            Parsed event dict if valid, None if invalid
        """
        pass
