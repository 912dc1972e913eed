"""
Unit tests for the reorder engine.

Merging of the two partitions and position bookkeeping.
"""

from __future__ import annotations

import random
from uuid import uuid4

import pytest

from footprint.core.services.reorder import (
    is_dense,
    merge,
    next_position,
    remove,
    renumber,
    reorder,
)
from footprint.domain.entities import ContentDescriptor


def image(position: int | None) -> ContentDescriptor:
    return ContentDescriptor(type="image", url="https://cdn.example.com/a.png", position=position)


def note(position: int | None, title: str = "") -> ContentDescriptor:
    return ContentDescriptor(type="note", title=title, position=position)


class TestMerge:
    def test_orders_by_position_across_partitions(self) -> None:
        media = [image(1), image(3)]
        embeds = [note(0), note(2)]

        merged = merge(media, embeds)
        assert [t.position for t in merged] == [0, 1, 2, 3]
        assert [t.type for t in merged] == ["note", "image", "note", "image"]

    def test_ties_put_media_first(self) -> None:
        a_note = note(0)
        an_image = image(0)

        merged = merge([an_image], [a_note])
        assert [t.id for t in merged] == [an_image.id, a_note.id]

    def test_ties_within_partition_keep_insertion_order(self) -> None:
        first, second = note(5, "first"), note(5, "second")

        merged = merge([], [first, second])
        assert [t.title for t in merged] == ["first", "second"]

    def test_missing_position_sorts_last(self) -> None:
        unplaced = note(None)
        merged = merge([image(7)], [unplaced, note(0)])

        assert merged[-1].id == unplaced.id

    def test_empty(self) -> None:
        assert merge([], []) == []


class TestReorder:
    def test_move_to_front(self) -> None:
        tiles = renumber([note(None, t) for t in "abcd"])
        moved = reorder(tiles, tiles[3].id, 0)

        assert [t.title for t in moved] == ["d", "a", "b", "c"]
        assert is_dense(moved)

    def test_move_down(self) -> None:
        tiles = renumber([note(None, t) for t in "abcd"])
        moved = reorder(tiles, tiles[0].id, 2)

        assert [t.title for t in moved] == ["b", "c", "a", "d"]

    @pytest.mark.parametrize(("index", "expected"), [(-5, "cab"), (99, "abc")])
    def test_index_clamped(self, index: int, expected: str) -> None:
        tiles = renumber([note(None, t) for t in "abc"])
        moved = reorder(tiles, tiles[2].id, index)

        assert "".join(t.title for t in moved) == expected

    def test_unknown_id(self) -> None:
        tiles = renumber([note(None, "a")])
        with pytest.raises(KeyError):
            reorder(tiles, uuid4(), 0)

    def test_closes_gaps(self) -> None:
        tiles = [note(0, "a"), note(4, "b"), note(9, "c")]
        moved = reorder(tiles, tiles[1].id, 1)

        assert [t.position for t in moved] == [0, 1, 2]

    def test_inputs_not_mutated(self) -> None:
        tiles = [note(3, "a"), note(8, "b")]
        reorder(tiles, tiles[1].id, 0)

        assert [t.position for t in tiles] == [3, 8]


class TestPositions:
    def test_next_position(self) -> None:
        assert next_position([]) == 0
        assert next_position([note(0), note(4)]) == 5
        assert next_position([note(None)]) == 0

    def test_remove_leaves_gap(self) -> None:
        tiles = renumber([note(None, t) for t in "abc"])
        remaining = remove(tiles, tiles[1].id)

        assert [t.position for t in remaining] == [0, 2]
        assert not is_dense(remaining)

    def test_dense_after_random_operations(self) -> None:
        rng = random.Random(7)
        tiles: list[ContentDescriptor] = []

        for step in range(60):
            action = rng.choice(["add", "add", "delete", "move"])
            if action == "add" or not tiles:
                tiles.append(note(next_position(tiles), str(step)))
            elif action == "delete":
                tiles = remove(tiles, rng.choice(tiles).id)
            else:
                tiles = reorder(tiles, rng.choice(tiles).id, rng.randrange(len(tiles) + 2))
                assert is_dense(tiles)

        final = renumber(tiles)
        assert is_dense(final)
        assert len({t.id for t in final}) == len(final)
