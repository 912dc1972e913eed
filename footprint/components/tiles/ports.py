"""
Tiles component - Port definitions.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from footprint.domain.entities import ContentDescriptor, Page


class PageLookupPort(Protocol):
    """Read access to pages."""

    def get_by_slug(self, slug: str) -> Page | None:
        ...


class TileStorePort(Protocol):
    """Subset of ContentStorePort the tiles component uses."""

    def list(self, page_id: UUID) -> list[ContentDescriptor]:
        ...

    def get(self, page_id: UUID, item_id: UUID) -> ContentDescriptor | None:
        ...

    def insert(self, page_id: UUID, descriptor: ContentDescriptor) -> ContentDescriptor:
        ...

    def delete(self, page_id: UUID, item_id: UUID) -> bool:
        ...

    def reorder(self, page_id: UUID, item_id: UUID, new_index: int) -> list[ContentDescriptor]:
        ...
