"""Footprint pages and their tiles."""

from uuid import UUID

from fastapi import APIRouter, Depends

from footprint.api.deps import get_serial_counter, get_tile_service
from footprint.api.errors import http_error
from footprint.api.schemas import (
    FootprintResponse,
    NextSerialResponse,
    PageResponse,
    ParseRequest,
    TileAddRequest,
    TileListResponse,
    TileReorderRequest,
    TileResponse,
)
from footprint.components.tiles import (
    AddTileInput,
    DeleteTileInput,
    GetFootprintInput,
    MoveTileInput,
    ParseInput,
    TileService,
    run_add,
    run_delete,
    run_get_footprint,
    run_list,
    run_move,
    run_parse,
)
from footprint.core.ports.db import SerialCounterPort

router = APIRouter()


def _tile_list(tiles: list) -> TileListResponse:
    return TileListResponse(
        items=[TileResponse.from_descriptor(t) for t in tiles],
        total=len(tiles),
    )


@router.post("/parse", response_model=TileResponse)
def parse(
    data: ParseRequest,
    service: TileService = Depends(get_tile_service),
) -> TileResponse:
    """Classify pasted text without saving it."""
    result = run_parse(ParseInput(text=data.input), service)
    return TileResponse.from_descriptor(result.tile)


@router.get("/serials/next", response_model=NextSerialResponse)
def next_serial(counter: SerialCounterPort = Depends(get_serial_counter)) -> NextSerialResponse:
    """Serial the next purchase would get (display only)."""
    return NextSerialResponse(next_serial=counter.peek_next_serial())


@router.get("/footprints/{slug}", response_model=FootprintResponse)
def get_footprint(
    slug: str,
    service: TileService = Depends(get_tile_service),
) -> FootprintResponse:
    result = run_get_footprint(GetFootprintInput(slug=slug), service)
    if not result.success:
        raise http_error(result.errors)

    assert result.page is not None
    return FootprintResponse(
        page=PageResponse.from_page(result.page),
        tiles=[TileResponse.from_descriptor(t) for t in result.tiles],
    )


@router.get("/footprints/{slug}/tiles", response_model=TileListResponse)
def list_tiles(
    slug: str,
    service: TileService = Depends(get_tile_service),
) -> TileListResponse:
    result = run_list(GetFootprintInput(slug=slug), service)
    if not result.success:
        raise http_error(result.errors)
    return _tile_list(result.tiles)


@router.post("/footprints/{slug}/tiles", response_model=TileResponse, status_code=201)
def add_tile(
    slug: str,
    data: TileAddRequest,
    service: TileService = Depends(get_tile_service),
) -> TileResponse:
    """Classify and append a tile."""
    result = run_add(AddTileInput(slug=slug, text=data.input), service)
    if not result.success:
        raise http_error(result.errors)

    assert result.tile is not None
    return TileResponse.from_descriptor(result.tile)


@router.delete("/footprints/{slug}/tiles/{tile_id}", status_code=204)
def delete_tile(
    slug: str,
    tile_id: UUID,
    service: TileService = Depends(get_tile_service),
) -> None:
    result = run_delete(DeleteTileInput(slug=slug, tile_id=tile_id), service)
    if not result.success:
        raise http_error(result.errors)


@router.post("/footprints/{slug}/tiles/reorder", response_model=TileListResponse)
def reorder_tiles(
    slug: str,
    data: TileReorderRequest,
    service: TileService = Depends(get_tile_service),
) -> TileListResponse:
    """Move one tile; every position is renumbered densely."""
    result = run_move(
        MoveTileInput(slug=slug, tile_id=data.tile_id, new_index=data.new_index), service
    )
    if not result.success:
        raise http_error(result.errors)
    return _tile_list(result.tiles)
