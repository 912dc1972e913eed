"""Publish component port definitions - protocols for dependencies."""

from datetime import datetime
from typing import Protocol

from footprint.core.ports.db import (
    ContentStorePort,
    PageRepoPort,
    PurchaseLedgerPort,
    SerialCounterPort,
)
from footprint.core.ports.notify import NotifierPort
from footprint.core.ports.payment import PaymentPort


class ClockPort(Protocol):
    """Protocol for time operations."""

    def now(self) -> datetime:
        """Return current UTC time."""
        ...


__all__ = [
    "ClockPort",
    "ContentStorePort",
    "NotifierPort",
    "PageRepoPort",
    "PaymentPort",
    "PurchaseLedgerPort",
    "SerialCounterPort",
]
