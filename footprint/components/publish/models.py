"""Publish component models - frozen dataclass inputs and outputs."""

from dataclasses import dataclass, field
from typing import Literal

from footprint.domain.entities import Draft
from footprint.domain.state import PublishState

PublishSource = Literal["client", "webhook", "cli"]

# Codes a caller may resubmit unchanged
RETRYABLE_CODES = frozenset({"payment_unavailable", "allocation_failure", "store_write_failure"})


@dataclass(frozen=True)
class PublishValidationError:
    """Validation error details for publish operations."""

    code: str
    message: str
    field: str

    @property
    def retryable(self) -> bool:
        return self.code in RETRYABLE_CODES


@dataclass(frozen=True)
class PublishInput:
    """
    Input for a publish run.

    draft is None on the webhook path: the page is ensured but its profile
    and content are left as they are.
    """

    transaction_id: str
    slug: str
    draft: Draft | None = None
    source: PublishSource = "client"


@dataclass(frozen=True)
class PublishOutput:
    """Output for a publish run."""

    errors: list[PublishValidationError]
    success: bool
    state: PublishState
    serial_number: int | None = None
    slug: str | None = None
    created: bool = False
    transitions: list[PublishState] = field(default_factory=list)


@dataclass(frozen=True)
class CheckoutInput:
    """Input for starting a fixed-price checkout for a slug."""

    slug: str
    email: str | None = None
    app_url: str = ""


@dataclass(frozen=True)
class CheckoutOutput:
    errors: list[PublishValidationError]
    success: bool
    transaction_id: str | None = None
    url: str | None = None


@dataclass(frozen=True)
class WebhookInput:
    """Raw event notification as delivered by the processor."""

    payload: bytes
    signature: str


@dataclass(frozen=True)
class WebhookOutput:
    """
    Outcome of an event notification.

    handled is False for event types the pipeline ignores.
    """

    errors: list[PublishValidationError]
    success: bool
    event_type: str | None = None
    handled: bool = False
    publish: PublishOutput | None = None
