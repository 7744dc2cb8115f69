from __future__ import annotations

from datetime import UTC, datetime

import pytest

from stoppage_analyze.timeutils import INVALID_TIME, delta_stats, format_local, parse_epoch_ms, tzinfo_from_name

TZ = "Asia/Kolkata"
T0 = 1705287600000  # 2024-01-15 08:30:00 +05:30
NY = "America/New_York"


def _utc_ms(*args: int) -> int:
    return int(datetime(*args, tzinfo=UTC).timestamp() * 1000)


def test_format_and_parse_round_trip():
    text = format_local(T0, TZ)
    assert text == "2024-01-15 08:30:00"
    assert parse_epoch_ms(text, TZ) == T0
    assert parse_epoch_ms("2024-01-15T03:00:00+00:00", TZ) == T0
    assert format_local(T0, TZ, with_offset=True) == "2024-01-15 08:30:00+05:30"


@pytest.mark.parametrize("epoch_ms", [10**17, -(10**17), 10**20])
def test_out_of_range_timestamps_render_as_invalid(epoch_ms):
    assert format_local(epoch_ms, "UTC") == INVALID_TIME
    assert format_local(epoch_ms, TZ, with_offset=True) == INVALID_TIME


def test_repeated_dst_hour_keeps_offset():
    first = _utc_ms(2024, 11, 3, 5, 30)  # 01:30 EDT
    second = _utc_ms(2024, 11, 3, 6, 30)  # 01:30 EST

    assert format_local(first, NY) == format_local(second, NY) == "2024-11-03 01:30:00"
    assert format_local(second, NY, with_offset=True) == "2024-11-03 01:30:00-05:00"
    assert parse_epoch_ms(format_local(first, NY, with_offset=True), NY) == first
    assert parse_epoch_ms(format_local(second, NY, with_offset=True), NY) == second
    # wall-clock text without an offset resolves to the first occurrence
    assert parse_epoch_ms("2024-11-03 01:30:00", NY) == first


def test_bad_timezone_and_datetime():
    with pytest.raises(ValueError):
        tzinfo_from_name("Mars/Olympus_Mons")
    with pytest.raises(ValueError):
        format_local(T0, "Mars/Olympus_Mons")
    with pytest.raises(ValueError):
        parse_epoch_ms("yesterday", TZ)


def test_delta_stats():
    assert delta_stats([T0]) is None
    stats = delta_stats([T0 + 6000, T0, T0 + 3000, T0 + 1000])
    assert stats is not None
    assert stats.count == 3
    assert (stats.min_s, stats.median_s, stats.max_s) == (1.0, 2.0, 3.0)
