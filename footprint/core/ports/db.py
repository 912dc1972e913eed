"""
Store interfaces.

Protocol-based interfaces for the relational store.
Implementations: SQLite (now), Postgres (future).

The store is the single source of truth and the only shared mutable
resource. All cross-request coordination is expressed through it:

- SerialCounterPort: atomic increment-and-return counter
- PurchaseLedgerPort: UNIQUE(transaction_id), the idempotency anchor
- PageRepoPort: UNIQUE(slug), one primary page per serial number
- ContentStorePort: two partitions behind one ordered sequence
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from footprint.domain.entities import ContentDescriptor, Page, PurchaseRecord

# -----------------------------------------------------------------------------
# Errors
# -----------------------------------------------------------------------------


class StoreError(Exception):
    """Base class for store errors."""

    retryable: bool = True


class AllocationError(StoreError):
    """The serial counter could not be claimed."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Serial allocation failed: {reason}")


class StoreWriteError(StoreError):
    """A write failed and was rolled back."""

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(f"Store write failed during {operation}: {reason}")


class SlugConflictError(StoreError):
    """The slug already belongs to a different serial number."""

    retryable = False

    def __init__(self, slug: str, owner_serial: int | None = None) -> None:
        self.slug = slug
        self.owner_serial = owner_serial
        super().__init__(f"Slug already taken: {slug}")


# -----------------------------------------------------------------------------
# Identity Allocator
# -----------------------------------------------------------------------------


class SerialCounterPort(Protocol):
    """
    Store-owned serial counter.

    Invariants:
    - Concurrent claims never return the same value
    - Values are strictly increasing
    - A claimed value is burnt even if the caller never uses it
    """

    def claim_next_serial(self) -> int:
        """Atomically increment and return the next serial number."""
        ...

    def peek_next_serial(self) -> int:
        """Value the next claim would return (display only, not reserved)."""
        ...


# -----------------------------------------------------------------------------
# Purchase Ledger
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class LedgerResult:
    """Outcome of record_if_absent."""

    created: bool
    record: PurchaseRecord

    @property
    def serial_number(self) -> int:
        return self.record.serial_number


class PurchaseLedgerPort(Protocol):
    """
    One immutable row per completed payment, keyed by transaction id.
    """

    def get(self, transaction_id: str) -> PurchaseRecord | None:
        """Get the purchase recorded for a transaction, if any."""
        ...

    def record_if_absent(self, record: PurchaseRecord) -> LedgerResult:
        """
        Insert the record unless the transaction id is already present.

        A concurrent or repeated call with the same transaction id returns
        the existing record with created=False.
        """
        ...


# -----------------------------------------------------------------------------
# Pages
# -----------------------------------------------------------------------------


class PageRepoPort(Protocol):
    """Pages keyed by serial number, slug as a second unique index."""

    def get_by_slug(self, slug: str) -> Page | None:
        ...

    def get_primary(self, serial_number: int) -> Page | None:
        ...

    def get_by_origin_transaction(self, transaction_id: str) -> Page | None:
        ...

    def list_by_serial(self, serial_number: int) -> list[Page]:
        ...

    def upsert_primary(self, page: Page, overwrite_profile: bool = True) -> Page:
        """
        Insert the primary page for page.serial_number, or update it.

        With overwrite_profile=False an existing row is returned untouched.
        Raises SlugConflictError if the slug belongs to another serial.
        """
        ...

    def delete(self, page_id: UUID) -> None:
        """Delete a page and (by cascade) its content."""
        ...


# -----------------------------------------------------------------------------
# Content Store
# -----------------------------------------------------------------------------


class ContentStorePort(Protocol):
    """
    A page's tiles as one position-ordered sequence.

    The media/embed split is a storage detail of the implementation.
    """

    def list(self, page_id: UUID) -> list[ContentDescriptor]:
        """All tiles, merged and ordered by position."""
        ...

    def get(self, page_id: UUID, item_id: UUID) -> ContentDescriptor | None:
        ...

    def insert(self, page_id: UUID, descriptor: ContentDescriptor) -> ContentDescriptor:
        """Append at max(position) + 1 and return the stored tile."""
        ...

    def delete(self, page_id: UUID, item_id: UUID) -> bool:
        """Remove a tile. Remaining positions keep their values."""
        ...

    def reorder(self, page_id: UUID, item_id: UUID, new_index: int) -> list[ContentDescriptor]:
        """Move a tile and renumber the whole page densely."""
        ...

    def replace_all(
        self, page_id: UUID, descriptors: list[ContentDescriptor]
    ) -> list[ContentDescriptor]:
        """Atomically delete all tiles and insert these at positions 0..n-1."""
        ...

    def delete_all(self, page_id: UUID) -> int:
        """Remove every tile of a page from both partitions. Returns the count."""
        ...
