"""
Tiles component - tile management on a published footprint.

Shell Layer - converts service results to component outputs.
"""

from __future__ import annotations

from ._impl import TileService
from .models import (
    AddTileInput,
    DeleteTileInput,
    FootprintOutput,
    GetFootprintInput,
    MoveTileInput,
    ParseInput,
    ParseOutput,
    TileListOutput,
    TileOperationOutput,
)

# --- Shell Layer Functions ---


def run_parse(input_data: ParseInput, service: TileService) -> ParseOutput:
    """Classify pasted text."""
    return ParseOutput(tile=service.parse(input_data.text))


def run_add(input_data: AddTileInput, service: TileService) -> TileOperationOutput:
    """Append a tile."""
    tile, errors = service.add(input_data.slug, input_data.text)
    return TileOperationOutput(tile=tile, errors=errors, success=tile is not None)


def run_delete(input_data: DeleteTileInput, service: TileService) -> TileOperationOutput:
    """Delete a tile."""
    success, errors = service.delete(input_data.slug, input_data.tile_id)
    return TileOperationOutput(tile=None, errors=errors, success=success)


def run_move(input_data: MoveTileInput, service: TileService) -> TileListOutput:
    """Move a tile and return the renumbered sequence."""
    tiles, errors = service.move(input_data.slug, input_data.tile_id, input_data.new_index)
    return TileListOutput(tiles=tiles, errors=errors, success=not errors)


def run_list(input_data: GetFootprintInput, service: TileService) -> TileListOutput:
    tiles, errors = service.list(input_data.slug)
    return TileListOutput(tiles=tiles, errors=errors, success=not errors)


def run_get_footprint(input_data: GetFootprintInput, service: TileService) -> FootprintOutput:
    """Get a page with its merged tiles."""
    page = service.get_page(input_data.slug)
    if page is None:
        _, errors = service.list(input_data.slug)
        return FootprintOutput(page=None, tiles=[], errors=errors, success=False)

    tiles, errors = service.list(page.slug)
    return FootprintOutput(page=page, tiles=tiles, errors=errors, success=not errors)
