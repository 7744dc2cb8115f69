"""Rendering and parsing of epoch-ms timestamps in a named timezone."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from typing import Final, Iterable

from zoneinfo import ZoneInfo

HUMAN_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"
INVALID_TIME: Final[str] = "Invalid Date"


@lru_cache(maxsize=32)
def tzinfo_from_name(tz_name: str) -> ZoneInfo:
    """Look up an IANA timezone ("Asia/Kolkata", "UTC", ...).

    Raises:
        ValueError: If the name is unknown on this system.
    """

    try:
        return ZoneInfo(tz_name)
    except Exception as exc:  # ZoneInfo raises KeyError / ZoneInfoNotFoundError (platform dependent)
        raise ValueError(f"无效时区：{tz_name!r}。例如可用：Asia/Kolkata") from exc


def format_local(epoch_ms: int, tz_name: str, *, with_offset: bool = False) -> str:
    """Render epoch milliseconds as local wall-clock text.

    Timestamps outside what datetime can represent render as INVALID_TIME
    instead of raising, so one corrupt sample does not sink a whole run.
    An unknown tz_name still raises ValueError.
    """

    tz = tzinfo_from_name(tz_name)
    try:
        dt = datetime.fromtimestamp(epoch_ms / 1000.0, tz=tz)
    except (OverflowError, OSError, ValueError):
        return INVALID_TIME
    if with_offset:
        # the offset keeps the repeated hour of a DST change unambiguous
        return dt.isoformat(sep=" ", timespec="seconds")
    return dt.strftime(HUMAN_FORMAT)


def parse_epoch_ms(text: str, tz_name: str) -> int:
    """Parse "YYYY-MM-DD HH:MM:SS" (optionally with "T" and an offset) to epoch ms.

    Text without an offset is read as wall-clock time in tz_name; during a
    repeated DST hour that picks the first occurrence.

    Raises:
        ValueError: If the text cannot be parsed.
    """

    try:
        dt = datetime.fromisoformat(text.strip().replace("T", " "))
    except ValueError as exc:
        raise ValueError(f"无法解析时间：{text!r}。建议格式：2024-01-15 09:30:00+05:30") from exc
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=tzinfo_from_name(tz_name))
    return round(dt.timestamp() * 1000)


@dataclass(frozen=True, slots=True)
class DeltaStats:
    """Gaps between consecutive samples, in seconds."""

    count: int
    min_s: float
    median_s: float
    p95_s: float
    max_s: float


def delta_stats(epoch_ms: Iterable[int]) -> DeltaStats | None:
    """Sampling-interval statistics over the time-sorted timestamps.

    Returns None for fewer than two timestamps.
    """

    ms = sorted(epoch_ms)
    gaps = sorted((b - a) / 1000.0 for a, b in zip(ms, ms[1:]))
    if not gaps:
        return None
    n = len(gaps)
    mid = n // 2
    return DeltaStats(
        count=n,
        min_s=gaps[0],
        median_s=gaps[mid] if n % 2 else (gaps[mid - 1] + gaps[mid]) / 2.0,
        p95_s=gaps[int(0.95 * (n - 1))],
        max_s=gaps[-1],
    )
