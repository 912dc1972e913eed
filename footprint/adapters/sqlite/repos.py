"""
SQLite store adapters.

Every write runs inside ``BEGIN IMMEDIATE`` so concurrent writers, whether
threads or separate processes, queue on the database write lock. Uniqueness
(slug, transaction id, primary page per serial) is enforced by the schema;
the counter increment and its read happen in the same write transaction.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from footprint.core.ports.db import (
    AllocationError,
    LedgerResult,
    SlugConflictError,
    StoreWriteError,
)
from footprint.core.services.classifier import partition_for
from footprint.core.services.reorder import merge, next_position, renumber
from footprint.core.services.reorder import reorder as reorder_sequence
from footprint.domain.entities import ContentDescriptor, Page, PurchaseRecord

logger = logging.getLogger(__name__)

DEFAULT_BUSY_TIMEOUT = 30.0


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def parse_dt(s: str | None) -> datetime | None:
    return datetime.fromisoformat(s) if s else None


def _now() -> str:
    return datetime.now(UTC).isoformat()


# -----------------------------------------------------------------------------
# Base SQLite Repository
# -----------------------------------------------------------------------------


class SQLiteRepoBase:
    """Base class: one short-lived connection per operation."""

    def __init__(self, db_path: str, busy_timeout: float = DEFAULT_BUSY_TIMEOUT):
        self.db_path = db_path
        self.busy_timeout = busy_timeout

    def _get_conn(self) -> sqlite3.Connection:
        # isolation_level=None: transactions are opened explicitly below
        conn = sqlite3.connect(self.db_path, timeout=self.busy_timeout, isolation_level=None)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    @staticmethod
    def _rollback(conn: sqlite3.Connection) -> None:
        if conn.in_transaction:
            conn.execute("ROLLBACK")

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[sqlite3.Connection]:
        """
        Write transaction holding the database write lock.

        sqlite3 errors are rolled back and surfaced as StoreWriteError;
        any other exception is rolled back and re-raised unchanged.
        """
        conn = self._get_conn()
        try:
            conn.execute("BEGIN IMMEDIATE")
            yield conn
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            self._rollback(conn)
            logger.exception("Store write failed during %s", operation)
            raise StoreWriteError(operation, str(e)) from e
        except Exception:
            self._rollback(conn)
            raise
        finally:
            conn.close()

    @contextmanager
    def _snapshot(self) -> Iterator[sqlite3.Connection]:
        """Read transaction so multi-statement reads see one snapshot."""
        conn = self._get_conn()
        try:
            conn.execute("BEGIN")
            yield conn
            conn.execute("COMMIT")
        finally:
            self._rollback(conn)
            conn.close()


# -----------------------------------------------------------------------------
# Identity Allocator
# -----------------------------------------------------------------------------


class SQLiteSerialCounter(SQLiteRepoBase):
    """SQLite implementation of SerialCounterPort."""

    def __init__(
        self,
        db_path: str,
        first_serial: int,
        counter_name: str = "serial",
        busy_timeout: float = DEFAULT_BUSY_TIMEOUT,
    ):
        super().__init__(db_path, busy_timeout)
        self.first_serial = first_serial
        self.counter_name = counter_name

    def claim_next_serial(self) -> int:
        try:
            with self._transaction("claim_next_serial") as conn:
                conn.execute(
                    "INSERT OR IGNORE INTO serial_counters (name, last_value) VALUES (?, ?)",
                    (self.counter_name, self.first_serial - 1),
                )
                # MAX() honours a first_serial raised after the counter existed
                conn.execute(
                    "UPDATE serial_counters SET last_value = MAX(last_value + 1, ?) WHERE name = ?",
                    (self.first_serial, self.counter_name),
                )
                row = conn.execute(
                    "SELECT last_value FROM serial_counters WHERE name = ?",
                    (self.counter_name,),
                ).fetchone()
        except StoreWriteError as e:
            raise AllocationError(e.reason) from e

        if row is None:
            raise AllocationError("counter row missing after increment")

        serial = int(row["last_value"])
        logger.info("Claimed serial #%d", serial)
        return serial

    def peek_next_serial(self) -> int:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT last_value FROM serial_counters WHERE name = ?",
                (self.counter_name,),
            ).fetchone()
        finally:
            conn.close()

        if row is None:
            return self.first_serial
        return max(int(row["last_value"]) + 1, self.first_serial)


# -----------------------------------------------------------------------------
# Purchase Ledger
# -----------------------------------------------------------------------------


class SQLitePurchaseLedger(SQLiteRepoBase):
    """SQLite implementation of PurchaseLedgerPort."""

    def get(self, transaction_id: str) -> PurchaseRecord | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM purchases WHERE transaction_id = ?", (transaction_id,)
            ).fetchone()
            return self._map_row(row) if row else None
        finally:
            conn.close()

    def record_if_absent(self, record: PurchaseRecord) -> LedgerResult:
        with self._transaction("record_purchase") as conn:
            cursor = conn.execute(
                """
                INSERT INTO purchases (
                    transaction_id, serial_number, amount_cents, currency,
                    customer_email, status, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(transaction_id) DO NOTHING
                """,
                (
                    record.transaction_id,
                    record.serial_number,
                    record.amount_cents,
                    record.currency,
                    record.customer_email,
                    record.status,
                    record.created_at.isoformat(),
                ),
            )
            created = cursor.rowcount == 1
            row = conn.execute(
                "SELECT * FROM purchases WHERE transaction_id = ?", (record.transaction_id,)
            ).fetchone()

        stored = self._map_row(row)
        if not created and stored.serial_number != record.serial_number:
            logger.warning(
                "Ledger already holds %s for serial #%d (caller resolved #%d)",
                record.transaction_id,
                stored.serial_number,
                record.serial_number,
            )
        return LedgerResult(created=created, record=stored)

    def list_by_serial(self, serial_number: int) -> list[PurchaseRecord]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM purchases WHERE serial_number = ? ORDER BY created_at",
                (serial_number,),
            ).fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            conn.close()

    def _map_row(self, row: dict[str, Any]) -> PurchaseRecord:
        return PurchaseRecord(
            transaction_id=row["transaction_id"],
            serial_number=row["serial_number"],
            amount_cents=row["amount_cents"],
            currency=row["currency"],
            customer_email=row["customer_email"],
            status=row["status"],
            created_at=parse_dt(row["created_at"]) or datetime.min.replace(tzinfo=UTC),
        )


# -----------------------------------------------------------------------------
# Pages
# -----------------------------------------------------------------------------


_PROFILE_COLUMNS = (
    "slug",
    "display_name",
    "handle",
    "bio",
    "avatar_url",
    "background_url",
    "theme",
    "is_public",
)


class SQLitePageRepo(SQLiteRepoBase):
    """SQLite implementation of PageRepoPort."""

    def _get_one(self, where: str, params: tuple[Any, ...]) -> Page | None:
        conn = self._get_conn()
        try:
            row = conn.execute(f"SELECT * FROM pages WHERE {where}", params).fetchone()
            return self._map_row(row) if row else None
        finally:
            conn.close()

    def get_by_id(self, page_id: UUID) -> Page | None:
        return self._get_one("id = ?", (str(page_id),))

    def get_by_slug(self, slug: str) -> Page | None:
        return self._get_one("slug = ?", (slug,))

    def get_primary(self, serial_number: int) -> Page | None:
        return self._get_one("serial_number = ? AND is_primary = 1", (serial_number,))

    def get_by_origin_transaction(self, transaction_id: str) -> Page | None:
        return self._get_one("origin_transaction_id = ?", (transaction_id,))

    def list_by_serial(self, serial_number: int) -> list[Page]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM pages WHERE serial_number = ? ORDER BY is_primary DESC, created_at",
                (serial_number,),
            ).fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            conn.close()

    def upsert_primary(self, page: Page, overwrite_profile: bool = True) -> Page:
        with self._transaction("upsert_page") as conn:
            owner = conn.execute(
                "SELECT serial_number FROM pages WHERE slug = ?", (page.slug,)
            ).fetchone()
            if owner and owner["serial_number"] != page.serial_number:
                raise SlugConflictError(page.slug, owner["serial_number"])

            existing = conn.execute(
                "SELECT * FROM pages WHERE serial_number = ? AND is_primary = 1",
                (page.serial_number,),
            ).fetchone()

            if existing is None:
                self._insert(conn, page.model_copy(update={"is_primary": True}))
                row = conn.execute("SELECT * FROM pages WHERE id = ?", (str(page.id),)).fetchone()
            elif overwrite_profile:
                assignments = ", ".join(f"{col}=?" for col in _PROFILE_COLUMNS)
                conn.execute(
                    f"UPDATE pages SET {assignments}, updated_at=? WHERE id = ?",
                    (
                        page.slug,
                        page.display_name,
                        page.handle,
                        page.bio,
                        page.avatar_url,
                        page.background_url,
                        page.theme,
                        int(page.is_public),
                        _now(),
                        existing["id"],
                    ),
                )
                row = conn.execute("SELECT * FROM pages WHERE id = ?", (existing["id"],)).fetchone()
            else:
                row = existing

        return self._map_row(row)

    def delete(self, page_id: UUID) -> None:
        with self._transaction("delete_page") as conn:
            # Explicit deletes cover databases created without ON DELETE CASCADE
            conn.execute("DELETE FROM media_items WHERE page_id = ?", (str(page_id),))
            conn.execute("DELETE FROM embed_items WHERE page_id = ?", (str(page_id),))
            conn.execute("DELETE FROM pages WHERE id = ?", (str(page_id),))

    def _insert(self, conn: sqlite3.Connection, page: Page) -> None:
        conn.execute(
            """
            INSERT INTO pages (
                id, serial_number, slug, display_name, handle, bio,
                avatar_url, background_url, theme, is_primary, is_public,
                origin_transaction_id, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(page.id),
                page.serial_number,
                page.slug,
                page.display_name,
                page.handle,
                page.bio,
                page.avatar_url,
                page.background_url,
                page.theme,
                int(page.is_primary),
                int(page.is_public),
                page.origin_transaction_id,
                page.created_at.isoformat(),
                page.updated_at.isoformat(),
            ),
        )

    def _map_row(self, row: dict[str, Any]) -> Page:
        return Page(
            id=UUID(row["id"]),
            serial_number=row["serial_number"],
            slug=row["slug"],
            display_name=row["display_name"],
            handle=row["handle"],
            bio=row["bio"],
            avatar_url=row["avatar_url"],
            background_url=row["background_url"],
            theme=row["theme"],
            is_primary=bool(row["is_primary"]),
            is_public=bool(row["is_public"]),
            origin_transaction_id=row["origin_transaction_id"],
            created_at=parse_dt(row["created_at"]) or datetime.min.replace(tzinfo=UTC),
            updated_at=parse_dt(row["updated_at"]) or datetime.min.replace(tzinfo=UTC),
        )


# -----------------------------------------------------------------------------
# Content Store (media + embed partitions)
# -----------------------------------------------------------------------------


class SQLiteContentStore(SQLiteRepoBase):
    """
    SQLite implementation of ContentStorePort.

    Images live in media_items, everything else in embed_items. Both share
    one position space per page and are merged on read.
    """

    def __init__(
        self,
        db_path: str,
        media_types: tuple[str, ...] = ("image",),
        busy_timeout: float = DEFAULT_BUSY_TIMEOUT,
    ):
        super().__init__(db_path, busy_timeout)
        self.media_types = media_types

    def _table_for(self, descriptor: ContentDescriptor) -> str:
        if partition_for(descriptor.type, self.media_types) == "media":
            return "media_items"
        return "embed_items"

    def _load(self, conn: sqlite3.Connection, page_id: UUID) -> list[ContentDescriptor]:
        media_rows = conn.execute(
            "SELECT * FROM media_items WHERE page_id = ? ORDER BY seq", (str(page_id),)
        ).fetchall()
        embed_rows = conn.execute(
            "SELECT * FROM embed_items WHERE page_id = ? ORDER BY seq", (str(page_id),)
        ).fetchall()
        return merge(
            [self._map_media(r) for r in media_rows],
            [self._map_embed(r) for r in embed_rows],
        )

    def list(self, page_id: UUID) -> list[ContentDescriptor]:
        with self._snapshot() as conn:
            return self._load(conn, page_id)

    def get(self, page_id: UUID, item_id: UUID) -> ContentDescriptor | None:
        for item in self.list(page_id):
            if item.id == item_id:
                return item
        return None

    def insert(self, page_id: UUID, descriptor: ContentDescriptor) -> ContentDescriptor:
        with self._transaction("insert_tile") as conn:
            position = next_position(self._load(conn, page_id))
            stored = descriptor.model_copy(update={"position": position})
            self._insert(conn, page_id, stored)
        return stored

    def delete(self, page_id: UUID, item_id: UUID) -> bool:
        with self._transaction("delete_tile") as conn:
            removed = 0
            for table in ("media_items", "embed_items"):
                cursor = conn.execute(
                    f"DELETE FROM {table} WHERE page_id = ? AND id = ?",
                    (str(page_id), str(item_id)),
                )
                removed += cursor.rowcount
        return removed > 0

    def reorder(self, page_id: UUID, item_id: UUID, new_index: int) -> list[ContentDescriptor]:
        with self._transaction("reorder_tiles") as conn:
            reordered = reorder_sequence(self._load(conn, page_id), item_id, new_index)
            for item in reordered:
                conn.execute(
                    f"UPDATE {self._table_for(item)} SET position = ? WHERE page_id = ? AND id = ?",
                    (item.position, str(page_id), str(item.id)),
                )
        return reordered

    def replace_all(
        self, page_id: UUID, descriptors: list[ContentDescriptor]
    ) -> list[ContentDescriptor]:
        stored = renumber(descriptors)
        with self._transaction("replace_tiles") as conn:
            conn.execute("DELETE FROM media_items WHERE page_id = ?", (str(page_id),))
            conn.execute("DELETE FROM embed_items WHERE page_id = ?", (str(page_id),))
            for item in stored:
                self._insert(conn, page_id, item)
        return stored

    def delete_all(self, page_id: UUID) -> int:
        with self._transaction("clear_tiles") as conn:
            removed = 0
            for table in ("media_items", "embed_items"):
                removed += conn.execute(
                    f"DELETE FROM {table} WHERE page_id = ?", (str(page_id),)
                ).rowcount
        return removed

    def _insert(self, conn: sqlite3.Connection, page_id: UUID, item: ContentDescriptor) -> None:
        if self._table_for(item) == "media_items":
            conn.execute(
                """
                INSERT INTO media_items (
                    id, page_id, platform, image_url, title, description,
                    thumbnail_url, embed_html, position, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(item.id),
                    str(page_id),
                    item.type,
                    item.url or "",
                    item.title,
                    item.description,
                    item.thumbnail_url,
                    item.embed_html,
                    item.position,
                    _now(),
                ),
            )
            return

        conn.execute(
            """
            INSERT INTO embed_items (
                id, page_id, platform, url, external_id, title,
                thumbnail_url, metadata_json, position, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(item.id),
                str(page_id),
                item.type,
                item.url,
                item.external_id,
                item.title,
                item.thumbnail_url,
                json.dumps({"description": item.description, "embed_html": item.embed_html}),
                item.position,
                _now(),
            ),
        )

    def _map_media(self, row: dict[str, Any]) -> ContentDescriptor:
        return ContentDescriptor(
            id=UUID(row["id"]),
            type=row["platform"],
            url=row["image_url"],
            title=row["title"],
            description=row["description"],
            thumbnail_url=row["thumbnail_url"],
            embed_html=row["embed_html"],
            position=row["position"],
        )

    def _map_embed(self, row: dict[str, Any]) -> ContentDescriptor:
        metadata = json.loads(row["metadata_json"] or "{}")
        return ContentDescriptor(
            id=UUID(row["id"]),
            type=row["platform"],
            url=row["url"],
            external_id=row["external_id"],
            title=row["title"],
            description=metadata.get("description"),
            thumbnail_url=row["thumbnail_url"],
            embed_html=metadata.get("embed_html"),
            position=row["position"],
        )
