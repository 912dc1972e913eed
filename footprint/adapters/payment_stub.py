"""
Payment stub adapter (dev/tests).

In-memory implementation of PaymentPort. Sessions are registered by tests
(or created through create_checkout and then marked paid). Event
notifications are signed the way the processor signs them: HMAC-SHA256
over "{timestamp}.{payload}" carried in a "t=...,v1=..." header.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import time
from dataclasses import dataclass, field, replace
from uuid import uuid4

from footprint.core.ports.payment import (
    CheckoutRequest,
    CheckoutSession,
    PaymentEvent,
    PaymentNotFoundError,
    PaymentPort,
    PaymentSession,
    PaymentUnavailableError,
    SignatureVerificationError,
)

logger = logging.getLogger(__name__)

DEFAULT_WEBHOOK_SECRET = "whsec_dev"


def sign_payload(payload: bytes, secret: str, timestamp: int | None = None) -> str:
    """Build a signature header for payload."""
    ts = int(time.time()) if timestamp is None else timestamp
    signed = f"{ts}.".encode() + payload
    digest = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={digest}"


def _session_from_object(obj: dict) -> PaymentSession:
    details = obj.get("customer_details") or {}
    metadata = obj.get("metadata") or {}
    return PaymentSession(
        transaction_id=obj["id"],
        payment_status=obj.get("payment_status", "unpaid"),
        slug=metadata.get("slug"),
        amount_cents=obj.get("amount_total"),
        currency=obj.get("currency"),
        customer_email=details.get("email") or obj.get("customer_email"),
    )


@dataclass
class PaymentStubAdapter:
    """
    Stub payment adapter for dev and tests.

    This adapter satisfies the PaymentPort protocol.
    """

    webhook_secret: str = DEFAULT_WEBHOOK_SECRET
    checkout_base_url: str = "https://checkout.invalid/pay"

    sessions: dict[str, PaymentSession] = field(default_factory=dict)
    lookups: list[str] = field(default_factory=list)

    # Simulated outage for retry tests
    _unavailable: bool = False

    def retrieve_session(self, transaction_id: str) -> PaymentSession:
        self.lookups.append(transaction_id)
        logger.debug("PaymentStubAdapter.retrieve_session: %s", transaction_id)

        if self._unavailable:
            raise PaymentUnavailableError("stub processor offline")

        session = self.sessions.get(transaction_id)
        if session is None:
            raise PaymentNotFoundError(transaction_id)
        return session

    def construct_event(self, payload: bytes, signature: str) -> PaymentEvent:
        if not signature:
            raise SignatureVerificationError("missing signature header")

        try:
            parts = dict(item.split("=", 1) for item in signature.split(","))
        except ValueError as e:
            raise SignatureVerificationError("malformed signature header") from e

        timestamp = parts.get("t", "")
        if not timestamp.isdigit():
            raise SignatureVerificationError("malformed signature header")

        expected = sign_payload(payload, self.webhook_secret, int(timestamp))
        if not hmac.compare_digest(expected, f"t={timestamp},v1={parts.get('v1', '')}"):
            raise SignatureVerificationError("signature mismatch")

        try:
            body = json.loads(payload)
        except ValueError as e:
            raise SignatureVerificationError("payload is not valid JSON") from e

        obj = (body.get("data") or {}).get("object")
        return PaymentEvent(
            event_id=body.get("id", ""),
            event_type=body.get("type", ""),
            session=_session_from_object(obj) if obj and "id" in obj else None,
        )

    def create_checkout(self, request: CheckoutRequest) -> CheckoutSession:
        if self._unavailable:
            raise PaymentUnavailableError("stub processor offline")

        transaction_id = f"cs_test_{uuid4().hex}"
        self.sessions[transaction_id] = PaymentSession(
            transaction_id=transaction_id,
            payment_status="unpaid",
            slug=request.slug,
            amount_cents=request.amount_cents,
            currency=request.currency,
            customer_email=request.email,
        )
        logger.info("Stub checkout %s created for slug=%s", transaction_id, request.slug)
        return CheckoutSession(
            transaction_id=transaction_id,
            url=f"{self.checkout_base_url}/{transaction_id}",
        )

    # --- Testing Helpers ---

    def add_session(
        self,
        transaction_id: str,
        payment_status: str = "paid",
        slug: str | None = None,
        amount_cents: int | None = 1000,
        currency: str | None = "usd",
        customer_email: str | None = None,
    ) -> PaymentSession:
        session = PaymentSession(
            transaction_id=transaction_id,
            payment_status=payment_status,
            slug=slug,
            amount_cents=amount_cents,
            currency=currency,
            customer_email=customer_email,
        )
        self.sessions[transaction_id] = session
        return session

    def mark_paid(self, transaction_id: str) -> PaymentSession:
        session = replace(self.sessions[transaction_id], payment_status="paid")
        self.sessions[transaction_id] = session
        return session

    def set_unavailable(self, unavailable: bool = True) -> None:
        self._unavailable = unavailable

    def completed_event(self, transaction_id: str, event_id: str | None = None) -> bytes:
        """Serialize a checkout-completed event for a registered session."""
        session = self.sessions[transaction_id]
        body = {
            "id": event_id or f"evt_{uuid4().hex}",
            "type": "checkout.session.completed",
            "data": {
                "object": {
                    "id": session.transaction_id,
                    "payment_status": session.payment_status,
                    "amount_total": session.amount_cents,
                    "currency": session.currency,
                    "customer_details": {"email": session.customer_email},
                    "metadata": {"slug": session.slug} if session.slug else {},
                }
            },
        }
        return json.dumps(body).encode()

    def sign(self, payload: bytes) -> str:
        return sign_payload(payload, self.webhook_secret)

    def clear(self) -> None:
        self.sessions.clear()
        self.lookups.clear()
        self._unavailable = False


# Verify protocol compliance at module load time
def _verify_protocol_compliance() -> None:
    """Verify PaymentStubAdapter satisfies PaymentPort protocol."""
    adapter: PaymentPort = PaymentStubAdapter()
    _ = adapter.create_checkout


_verify_protocol_compliance()
