"""
Dev notifier adapter.

Logs customer notices instead of delivering them. Used for local
development and tests; notices are kept in memory for assertions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from footprint.core.ports.notify import NoticeResult, NotifierPort, WelcomeNotice

logger = logging.getLogger(__name__)


@dataclass
class LoggedNotice:
    """Record of a logged notice for test assertions."""

    recipient: str | None
    serial_number: int
    slug: str
    subject: str
    logged_at: datetime


@dataclass
class DevNotifier:
    """Notifier that logs instead of sending."""

    notices: list[LoggedNotice] = field(default_factory=list)
    log_level: int = logging.INFO

    # Simulated delivery failure for tests
    fail_with: str | None = None

    def send_welcome(self, notice: WelcomeNotice) -> NoticeResult:
        if self.fail_with:
            logger.warning("NOTICE (dev) failed for #%d: %s", notice.serial_number, self.fail_with)
            return NoticeResult.failed(notice.recipient, self.fail_with)

        self.notices.append(
            LoggedNotice(
                recipient=notice.recipient,
                serial_number=notice.serial_number,
                slug=notice.slug,
                subject=notice.subject,
                logged_at=datetime.now(UTC),
            )
        )
        logger.log(
            self.log_level,
            "NOTICE (dev): To=%s, Subject=%s, Slug=%s",
            notice.recipient or "<none>",
            notice.subject,
            notice.slug,
        )

        if not notice.recipient:
            return NoticeResult.skipped(None, "No recipient")
        return NoticeResult.skipped(notice.recipient, "Dev mode - notice logged, not sent")

    # --- Test Helper Methods ---

    def notices_for(self, serial_number: int) -> list[LoggedNotice]:
        return [n for n in self.notices if n.serial_number == serial_number]


def _verify_protocol_compliance() -> None:
    notifier: NotifierPort = DevNotifier()
    _ = notifier.send_welcome


_verify_protocol_compliance()
