"""Publish component - payment-gated page publishing with serial identities."""

from footprint.components.publish.component import PublishComponent, run
from footprint.components.publish.models import (
    RETRYABLE_CODES,
    CheckoutInput,
    CheckoutOutput,
    PublishInput,
    PublishOutput,
    PublishValidationError,
    WebhookInput,
    WebhookOutput,
)
from footprint.components.publish.ports import ClockPort

__all__ = [
    # Entry point
    "run",
    # Component
    "PublishComponent",
    # Models
    "PublishInput",
    "PublishOutput",
    "CheckoutInput",
    "CheckoutOutput",
    "WebhookInput",
    "WebhookOutput",
    "PublishValidationError",
    "RETRYABLE_CODES",
    # Ports
    "ClockPort",
]
