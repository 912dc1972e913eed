"""
Notifier interface.

Once-per-customer notices fired by the publish pipeline (welcome message
after the first completed purchase). Delivery is best-effort: a failed
notice never rolls back a publish.

Implementations:
1. DevNotifier: logs notices and keeps them in memory (dev/test)
2. Email providers (future)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Protocol


class NoticeStatus(Enum):
    """Notice delivery status."""

    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"  # Dev adapter or no recipient


@dataclass(frozen=True)
class WelcomeNotice:
    """Welcome notice for a newly numbered customer."""

    recipient: str | None
    serial_number: int
    slug: str

    @property
    def subject(self) -> str:
        return f"Welcome, #{self.serial_number}"

    @property
    def body_text(self) -> str:
        return (
            f"You are Footprint #{self.serial_number}. "
            f"Your page lives at /{self.slug} and the number is yours for good."
        )


@dataclass
class NoticeResult:
    """Result of a notice delivery attempt."""

    status: NoticeStatus
    recipient: str | None = None
    error: str | None = None
    sent_at: datetime | None = None

    @classmethod
    def sent(cls, recipient: str) -> NoticeResult:
        return cls(status=NoticeStatus.SENT, recipient=recipient, sent_at=datetime.now(UTC))

    @classmethod
    def skipped(cls, recipient: str | None, reason: str = "Dev mode") -> NoticeResult:
        return cls(status=NoticeStatus.SKIPPED, recipient=recipient, error=reason)

    @classmethod
    def failed(cls, recipient: str | None, error: str) -> NoticeResult:
        return cls(status=NoticeStatus.FAILED, recipient=recipient, error=error)


class NotifierPort(Protocol):
    """Sends customer notices."""

    def send_welcome(self, notice: WelcomeNotice) -> NoticeResult:
        """Deliver a welcome notice. Must not raise on delivery failure."""
        ...
