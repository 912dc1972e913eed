"""
Reorder engine - position bookkeeping for a page's tile sequence.

Tiles live in two physical partitions (media and embeds) that share one
position space. These pure functions merge the partitions into a single
ordered sequence and keep positions meaningful as tiles are inserted,
deleted and dragged.

Key behaviors:
- merge() orders by position, then partition, then insertion order
- reorder() and renumber() always produce dense positions 0..n-1
- remove() leaves gaps; next_position() appends after the current max
"""

from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID

from footprint.domain.entities import ContentDescriptor

# Media sorts before embeds when positions tie
_PARTITION_RANK = {"media": 0, "embed": 1}


def merge(
    media: Sequence[ContentDescriptor],
    embeds: Sequence[ContentDescriptor],
) -> list[ContentDescriptor]:
    """
    Merge both partitions into one sequence ordered by position.

    Each partition is expected in insertion order. Ties (which dense
    positions never produce) fall back to partition then insertion order;
    a missing position sorts last.
    """
    keyed: list[tuple[tuple[int, int, int, int], ContentDescriptor]] = []
    for partition, items in (("media", media), ("embed", embeds)):
        for seq, item in enumerate(items):
            has_position = 0 if item.position is not None else 1
            position = item.position if item.position is not None else 0
            keyed.append(
                ((has_position, position, _PARTITION_RANK[partition], seq), item)
            )

    keyed.sort(key=lambda pair: pair[0])
    return [item for _, item in keyed]


def renumber(sequence: Sequence[ContentDescriptor]) -> list[ContentDescriptor]:
    """Return copies with positions 0..n-1 in the current order."""
    return [item.model_copy(update={"position": i}) for i, item in enumerate(sequence)]


def reorder(
    sequence: Sequence[ContentDescriptor],
    moved_id: UUID,
    new_index: int,
) -> list[ContentDescriptor]:
    """
    Move one tile to new_index and renumber every tile densely.

    new_index is clamped into range. Raises KeyError if moved_id is not in
    the sequence.
    """
    items = list(sequence)
    for old_index, item in enumerate(items):
        if item.id == moved_id:
            break
    else:
        raise KeyError(str(moved_id))

    moved = items.pop(old_index)
    target = max(0, min(new_index, len(items)))
    items.insert(target, moved)
    return renumber(items)


def next_position(sequence: Sequence[ContentDescriptor]) -> int:
    """Position for an appended tile: max(existing, -1) + 1."""
    return max((item.position for item in sequence if item.position is not None), default=-1) + 1


def remove(
    sequence: Sequence[ContentDescriptor],
    item_id: UUID,
) -> list[ContentDescriptor]:
    """Drop a tile. Remaining positions are left as-is (gaps allowed)."""
    return [item for item in sequence if item.id != item_id]


def is_dense(sequence: Sequence[ContentDescriptor]) -> bool:
    """True when positions are exactly 0..n-1 in order."""
    return [item.position for item in sequence] == list(range(len(sequence)))
