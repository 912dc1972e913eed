"""
Stripe payment adapter.

Wraps Stripe Checkout through the stripe library. Sessions carry the
requested slug in metadata so the webhook path can publish without the
client.
"""

from __future__ import annotations

import logging
from typing import Any

import stripe

from footprint.core.ports.payment import (
    CheckoutRequest,
    CheckoutSession,
    PaymentEvent,
    PaymentNotFoundError,
    PaymentSession,
    PaymentUnavailableError,
    SignatureVerificationError,
)

logger = logging.getLogger(__name__)


def _get(obj: Any, key: str) -> Any:
    # StripeObject supports item access; plain dicts come from tests
    try:
        return obj[key]
    except (KeyError, TypeError):
        return None


def session_from_stripe(obj: Any) -> PaymentSession:
    details = _get(obj, "customer_details") or {}
    metadata = _get(obj, "metadata") or {}
    return PaymentSession(
        transaction_id=_get(obj, "id"),
        payment_status=_get(obj, "payment_status") or "unpaid",
        slug=_get(metadata, "slug"),
        amount_cents=_get(obj, "amount_total"),
        currency=_get(obj, "currency"),
        customer_email=_get(details, "email") or _get(obj, "customer_email"),
    )


class StripePaymentAdapter:
    """PaymentPort backed by Stripe Checkout."""

    def __init__(self, api_key: str, webhook_secret: str | None = None, timeout: float = 10.0):
        self.webhook_secret = webhook_secret
        self.client = stripe.StripeClient(
            api_key,
            max_network_retries=0,
            http_client=stripe.new_default_http_client(timeout=timeout),
        )

    def retrieve_session(self, transaction_id: str) -> PaymentSession:
        try:
            obj = self.client.checkout.sessions.retrieve(transaction_id)
        except stripe.InvalidRequestError as e:
            # Unknown or malformed session ids both land here
            logger.warning("Stripe rejected lookup of %s: %s", transaction_id, e)
            raise PaymentNotFoundError(transaction_id) from e
        except stripe.StripeError as e:
            logger.error("Stripe error retrieving %s: %s", transaction_id, e)
            raise PaymentUnavailableError(str(e)) from e

        return session_from_stripe(obj)

    def construct_event(self, payload: bytes, signature: str) -> PaymentEvent:
        if not self.webhook_secret:
            raise SignatureVerificationError("webhook secret is not configured")
        if not signature:
            raise SignatureVerificationError("missing signature header")

        try:
            event = stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except stripe.SignatureVerificationError as e:
            raise SignatureVerificationError(str(e)) from e
        except ValueError as e:
            raise SignatureVerificationError("payload is not valid JSON") from e

        obj = _get(_get(event, "data") or {}, "object")
        return PaymentEvent(
            event_id=_get(event, "id") or "",
            event_type=_get(event, "type") or "",
            session=session_from_stripe(obj) if obj is not None and _get(obj, "id") else None,
        )

    def create_checkout(self, request: CheckoutRequest) -> CheckoutSession:
        params: dict[str, Any] = {
            "payment_method_types": ["card"],
            "line_items": [
                {
                    "price_data": {
                        "currency": request.currency,
                        "unit_amount": request.amount_cents,
                        "product_data": {
                            "name": request.product_name,
                            "description": request.product_description or request.product_name,
                        },
                    },
                    "quantity": 1,
                }
            ],
            "mode": "payment",
            "success_url": request.success_url,
            "cancel_url": request.cancel_url,
            "metadata": {"slug": request.slug},
        }
        if request.email:
            params["customer_email"] = request.email

        try:
            session = self.client.checkout.sessions.create(params=params)
        except stripe.StripeError as e:
            logger.error("Stripe error creating checkout for %s: %s", request.slug, e)
            raise PaymentUnavailableError(str(e)) from e

        return CheckoutSession(transaction_id=session.id, url=session.url)
