from datetime import UTC, datetime

from footprint.adapters.clock import FrozenClock, SystemClock


def test_system_clock_is_utc():
    now = SystemClock().now()
    assert now.tzinfo is not None
    assert now.utcoffset().total_seconds() == 0


def test_frozen_clock_advances():
    start = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)
    clock = FrozenClock(start)

    assert clock.now() == start
    clock.advance(90)
    assert (clock.now() - start).total_seconds() == 90
