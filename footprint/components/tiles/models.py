"""
Tiles component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from footprint.domain.entities import ContentDescriptor, Page

# --- Validation Errors ---


@dataclass(frozen=True)
class TileValidationError:
    """Tile validation error."""

    code: str
    message: str
    field: str | None = None


# --- Input Models ---


@dataclass(frozen=True)
class ParseInput:
    """Raw text to classify without saving."""

    text: str


@dataclass(frozen=True)
class AddTileInput:
    """Input for appending a tile to a page."""

    slug: str
    text: str


@dataclass(frozen=True)
class DeleteTileInput:
    slug: str
    tile_id: UUID


@dataclass(frozen=True)
class MoveTileInput:
    """Input for moving a tile to a new index."""

    slug: str
    tile_id: UUID
    new_index: int


@dataclass(frozen=True)
class GetFootprintInput:
    slug: str


# --- Output Models ---


@dataclass(frozen=True)
class ParseOutput:
    tile: ContentDescriptor


@dataclass(frozen=True)
class TileOperationOutput:
    """Output from a tile operation."""

    tile: ContentDescriptor | None
    errors: list[TileValidationError]
    success: bool


@dataclass(frozen=True)
class TileListOutput:
    """Output from list or move: the page's full ordered sequence."""

    tiles: list[ContentDescriptor]
    errors: list[TileValidationError]
    success: bool

    @property
    def total(self) -> int:
        return len(self.tiles)


@dataclass(frozen=True)
class FootprintOutput:
    """A page with its merged tile list."""

    page: Page | None
    tiles: list[ContentDescriptor]
    errors: list[TileValidationError]
    success: bool
