"""
Payment port interface.

External interface to the payment processor: checkout creation, session
lookup, and verification of signed event notifications.

Implementations:
- StripePaymentAdapter: Stripe Checkout via the stripe library
- PaymentStubAdapter: in-memory sessions for dev and tests
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

# --- Models ---


@dataclass(frozen=True)
class PaymentSession:
    """
    A checkout session as the processor reports it.

    Attributes:
        transaction_id: Processor's unique session id (idempotency anchor)
        payment_status: "paid", "unpaid" or "no_payment_required"
        slug: Slug recorded in metadata when checkout was initiated
        amount_cents: Total charged, in the smallest currency unit
        currency: ISO currency code, lower-case
        customer_email: Email collected at checkout
    """

    transaction_id: str
    payment_status: str
    slug: str | None = None
    amount_cents: int | None = None
    currency: str | None = None
    customer_email: str | None = None

    @property
    def is_paid(self) -> bool:
        return self.payment_status == "paid"


@dataclass(frozen=True)
class PaymentEvent:
    """A verified event notification."""

    event_id: str
    event_type: str
    session: PaymentSession | None = None


@dataclass(frozen=True)
class CheckoutRequest:
    slug: str
    email: str | None
    amount_cents: int
    currency: str
    product_name: str
    product_description: str
    success_url: str
    cancel_url: str


@dataclass(frozen=True)
class CheckoutSession:
    transaction_id: str
    url: str


CHECKOUT_COMPLETED = "checkout.session.completed"


# --- Errors ---


class PaymentError(Exception):
    """Base class for payment processor errors."""

    retryable: bool = False


class PaymentNotFoundError(PaymentError):
    """The processor has no session with this id."""

    def __init__(self, transaction_id: str) -> None:
        self.transaction_id = transaction_id
        super().__init__(f"Payment session not found: {transaction_id}")


class PaymentUnavailableError(PaymentError):
    """Processor timed out or failed; the lookup may be retried."""

    retryable = True

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Payment processor unavailable: {reason}")


class SignatureVerificationError(PaymentError):
    """An event notification failed signature verification."""


# --- Port Interface ---


class PaymentPort(Protocol):
    """Port for the payment processor."""

    def retrieve_session(self, transaction_id: str) -> PaymentSession:
        """
        Fetch a checkout session by its transaction id.

        Raises:
            PaymentNotFoundError: unknown transaction id
            PaymentUnavailableError: timeout or processor outage
        """
        ...

    def construct_event(self, payload: bytes, signature: str) -> PaymentEvent:
        """
        Verify the signature and parse an event notification.

        Raises:
            SignatureVerificationError: signature missing or invalid
        """
        ...

    def create_checkout(self, request: CheckoutRequest) -> CheckoutSession:
        """
        Start a fixed-price checkout with the slug recorded in metadata.

        Raises:
            PaymentUnavailableError: processor refused or timed out
        """
        ...
