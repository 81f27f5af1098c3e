"""
hotelcore.clock tests
"""
from datetime import datetime, timedelta, timezone

from hotelcore.clock import FixedClock, SystemClock, to_naive_utc


def test_to_naive_utc_converts_aware_values():
    aware = datetime(2024, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=-5)))

    assert to_naive_utc(aware) == datetime(2024, 1, 1, 17, 0)


def test_to_naive_utc_keeps_naive_values():
    naive = datetime(2024, 1, 1, 12, 0)

    assert to_naive_utc(naive) is naive


def test_fixed_clock():
    clock = FixedClock(datetime(2024, 1, 1, tzinfo=timezone.utc))

    assert clock.now() == datetime(2024, 1, 1)
    clock.advance(hours=1, minutes=30)
    assert clock.now() == datetime(2024, 1, 1, 1, 30)


def test_system_clock_is_naive():
    assert SystemClock().now().tzinfo is None
