"""Stripe payment gateway adapter."""

import json
import logging

import stripe

from app.config import settings
from app.gateways.base import CheckoutResult, GatewayType, PaymentGateway

logger = logging.getLogger(__name__)


class StripeGateway(PaymentGateway):
    """Stripe Checkout implementation."""

    def __init__(self):
        self.secret_key = settings.stripe_secret_key
        self.webhook_secret = settings.stripe_webhook_secret

    @property
    def gateway_type(self) -> GatewayType:
        return GatewayType.STRIPE

    @property
    def webhook_configured(self) -> bool:
        return bool(self.webhook_secret)

    async def create_checkout_session(
        self,
        amount: int,
        currency: str,
        description: str,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
    ) -> CheckoutResult:
        """Create a Stripe Checkout Session for a single line item."""
        if not self.secret_key:
            return CheckoutResult(
                success=False,
                error_message="Stripe not configured",
            )

        try:
            stripe.api_key = self.secret_key

            session = stripe.checkout.Session.create(
                payment_method_types=["card"],
                mode="payment",
                line_items=[
                    {
                        "price_data": {
                            "currency": currency.lower(),
                            "product_data": {"name": description},
                            # Zero-decimal currency: no x100
                            "unit_amount": amount,
                        },
                        "quantity": 1,
                    }
                ],
                success_url=success_url,
                cancel_url=cancel_url,
                metadata=metadata,
                payment_intent_data={"metadata": metadata},
            )

            return CheckoutResult(
                success=True,
                session_id=session.id,
                url=session.url,
            )

        except stripe.StripeError as e:
            logger.error("Stripe checkout session creation failed: %s", e)
            return CheckoutResult(
                success=False,
                error_message=str(e),
            )

    def verify_webhook(
        self,
        payload: bytes,
        signature: str,
    ) -> dict | None:
        """Verify Stripe webhook signature."""
        if not self.webhook_secret:
            return None

        try:
            stripe.Webhook.construct_event(
                payload,
                signature,
                self.webhook_secret,
            )
            # Signature checked; hand back plain dicts
            return json.loads(payload)

        except (ValueError, stripe.SignatureVerificationError) as e:
            logger.warning("Stripe webhook verification failed: %s", e)
            return None


def get_payment_gateway() -> PaymentGateway:
    """Dependency returning the configured gateway."""
    return StripeGateway()
