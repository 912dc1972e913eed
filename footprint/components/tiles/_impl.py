"""
TileService - tile management on published pages.

Classifies pasted text, appends it after the last tile, deletes tiles
(leaving gaps) and moves tiles (renumbering densely).

Functional Core - pure business logic over the store ports.
"""

from __future__ import annotations

import logging
from uuid import UUID

from footprint.core.ports.db import StoreError
from footprint.core.services.classifier import classify
from footprint.domain.entities import ContentDescriptor, Page
from footprint.domain.sanitize import normalize_slug
from footprint.rules.models import ContentRules

from .models import TileValidationError
from .ports import PageLookupPort, TileStorePort

logger = logging.getLogger(__name__)


def _page_not_found(slug: str) -> TileValidationError:
    return TileValidationError(
        code="page_not_found",
        message=f"No footprint at '{slug}'",
        field="slug",
    )


def _tile_not_found(tile_id: UUID) -> TileValidationError:
    return TileValidationError(
        code="tile_not_found",
        message=f"Tile {tile_id} not found",
        field="tile_id",
    )


def _store_failure(e: StoreError) -> TileValidationError:
    return TileValidationError(code="store_write_failure", message=str(e))


# --- Tile Service ---


class TileService:
    """
    Tile service.

    Operates on the primary page addressed by slug.
    """

    def __init__(
        self,
        pages: PageLookupPort,
        store: TileStorePort,
        rules: ContentRules,
    ) -> None:
        self._pages = pages
        self._store = store
        self._rules = rules

    def parse(self, text: str) -> ContentDescriptor:
        """Classify text without saving. Never fails."""
        return classify(text, max_note_length=self._rules.max_note_length)

    def get_page(self, slug: str) -> Page | None:
        return self._pages.get_by_slug(normalize_slug(slug))

    def list(self, slug: str) -> tuple[list[ContentDescriptor], list[TileValidationError]]:
        page = self.get_page(slug)
        if page is None:
            return [], [_page_not_found(slug)]
        return self._store.list(page.id), []

    def add(
        self, slug: str, text: str
    ) -> tuple[ContentDescriptor | None, list[TileValidationError]]:
        """
        Classify text and append it at the next position.

        Returns:
            Tuple of (tile, errors). Tile is None on failure.
        """
        if not text or not text.strip():
            return None, [
                TileValidationError(
                    code="invalid_input",
                    message="Paste a link or write a note",
                    field="text",
                )
            ]

        page = self.get_page(slug)
        if page is None:
            return None, [_page_not_found(slug)]

        current = self._store.list(page.id)
        if len(current) >= self._rules.max_tiles_per_page:
            return None, [
                TileValidationError(
                    code="too_many_tiles",
                    message=f"A page holds at most {self._rules.max_tiles_per_page} tiles",
                    field="text",
                )
            ]

        tile = self.parse(text)
        try:
            saved = self._store.insert(page.id, tile)
        except StoreError as e:
            return None, [_store_failure(e)]

        logger.info("Added %s tile to /%s at %d", saved.type, page.slug, saved.position)
        return saved, []

    def delete(self, slug: str, tile_id: UUID) -> tuple[bool, list[TileValidationError]]:
        page = self.get_page(slug)
        if page is None:
            return False, [_page_not_found(slug)]

        try:
            removed = self._store.delete(page.id, tile_id)
        except StoreError as e:
            return False, [_store_failure(e)]

        if not removed:
            return False, [_tile_not_found(tile_id)]
        return True, []

    def move(
        self, slug: str, tile_id: UUID, new_index: int
    ) -> tuple[list[ContentDescriptor], list[TileValidationError]]:
        """Move a tile; the returned sequence is densely renumbered."""
        page = self.get_page(slug)
        if page is None:
            return [], [_page_not_found(slug)]

        try:
            tiles = self._store.reorder(page.id, tile_id, new_index)
        except KeyError:
            return [], [_tile_not_found(tile_id)]
        except StoreError as e:
            return [], [_store_failure(e)]
        return tiles, []
