"""
Stripe adapter. The coordinator only sees PaymentIntent/WebhookEvent values
and ProcessorError, so another processor (or a test double) can stand in.
"""
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, Optional

import stripe

from fastfeast import config
from fastfeast.errors import ProcessorError, ValidationError

logger = logging.getLogger(__name__)

SUCCEEDED = "succeeded"


@dataclass
class PaymentIntent:
    id: str
    status: str
    amount: int  # minor currency units
    currency: str
    client_secret: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)


@dataclass
class WebhookEvent:
    type: str
    object_id: str


def _to_intent(obj) -> PaymentIntent:
    return PaymentIntent(
        id=obj.id,
        status=obj.status,
        amount=obj.amount,
        currency=obj.currency,
        client_secret=obj.client_secret,
        metadata={k: str(v) for k, v in dict(obj.metadata or {}).items()},
    )


class StripeProcessor:
    def __init__(self, secret_key: str = "", currency: str = "inr", webhook_secret: str = ""):
        self.secret_key = secret_key
        self.currency = currency
        self.webhook_secret = webhook_secret
        if self.secret_key:
            stripe.api_key = self.secret_key

    def _require_key(self):
        if not self.secret_key:
            raise ProcessorError("Stripe not configured")

    def create_customer(self, email: str, name: str) -> str:
        self._require_key()
        try:
            customer = stripe.Customer.create(email=email, name=name)
        except stripe.StripeError as e:
            logger.error("Stripe customer creation error: %s", e)
            raise ProcessorError(e.user_message or str(e))
        return customer.id

    def create_intent(self, amount: int, metadata: Dict[str, str],
                      customer: Optional[str] = None) -> PaymentIntent:
        """Create an intent for ``amount`` minor units (paise for INR)."""
        self._require_key()
        params = {
            "amount": amount,
            "currency": self.currency,
            "payment_method_types": ["card"],
            "metadata": metadata,
        }
        if customer:
            params["customer"] = customer
        try:
            intent = stripe.PaymentIntent.create(**params)
        except stripe.StripeError as e:
            logger.error("Stripe payment intent creation error: %s", e)
            raise ProcessorError(e.user_message or str(e))
        return _to_intent(intent)

    def retrieve_intent(self, intent_id: str) -> PaymentIntent:
        self._require_key()
        try:
            intent = stripe.PaymentIntent.retrieve(intent_id)
        except stripe.StripeError as e:
            logger.error("Stripe payment intent retrieval error: %s", e)
            raise ProcessorError(e.user_message or str(e))
        return _to_intent(intent)

    def construct_event(self, payload: bytes, signature: Optional[str]) -> WebhookEvent:
        if not self.webhook_secret:
            raise ValidationError("Webhook not configured")
        if not signature:
            raise ValidationError("Missing Stripe-Signature header")
        try:
            event = stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except (ValueError, stripe.SignatureVerificationError) as e:
            raise ValidationError(f"Invalid webhook: {e}")
        return WebhookEvent(type=event.type, object_id=event.data.object.id)


@lru_cache()
def get_payment_processor() -> StripeProcessor:
    return StripeProcessor(
        secret_key=config.STRIPE_SECRET_KEY,
        currency=config.PAYMENT_CURRENCY,
        webhook_secret=config.STRIPE_WEBHOOK_SECRET,
    )
