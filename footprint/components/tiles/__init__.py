"""
Tiles component - classified content tiles on a footprint page.
"""

from ._impl import TileService
from .component import (
    run_add,
    run_delete,
    run_get_footprint,
    run_list,
    run_move,
    run_parse,
)
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
    TileValidationError,
)
from .ports import PageLookupPort, TileStorePort

__all__ = [
    # Entry points
    "run_parse",
    "run_add",
    "run_delete",
    "run_move",
    "run_list",
    "run_get_footprint",
    # Input models
    "ParseInput",
    "AddTileInput",
    "DeleteTileInput",
    "MoveTileInput",
    "GetFootprintInput",
    # Output models
    "ParseOutput",
    "TileOperationOutput",
    "TileListOutput",
    "FootprintOutput",
    "TileValidationError",
    # Ports
    "PageLookupPort",
    "TileStorePort",
    # Service
    "TileService",
]
