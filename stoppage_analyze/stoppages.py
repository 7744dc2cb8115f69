"""Stoppage detection, threshold filtering and reporting."""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Sequence

from stoppage_analyze.models import DEFAULT_TZ, MS_PER_MINUTE, StoppageRecord, TelemetrySample
from stoppage_analyze.timeutils import INVALID_TIME, format_local, parse_epoch_ms

logger = logging.getLogger(__name__)

STOPPAGE_FIELDNAMES = [
    "stoppage_id",
    "latitude",
    "longitude",
    "stoppage_minutes",
    "reach_time",
    "leave_time",
    "start_epoch_ms",
    "end_epoch_ms",
]


def stoppage_minutes(start_ms: int, end_ms: int) -> int:
    """Whole minutes between two epoch-ms timestamps (built-in round, half to even)."""

    return round((end_ms - start_ms) / MS_PER_MINUTE)


def detect_stoppages(
    samples: Sequence[TelemetrySample],
    tz_name: str = DEFAULT_TZ,
) -> list[StoppageRecord]:
    """Detect stoppages (runs of zero speed) in a single forward pass.

    Adjacent pairs (current, next) are walked once. A run opens at the first
    zero-speed sample and closes on the pair where next has positive speed;
    that next sample is the departure. The record keeps the position of the
    first stopped sample.

    Args:
        samples: Telemetry samples, assumed sorted by time. Not re-sorted.
        tz_name: IANA timezone for reach/leave rendering.

    Returns:
        Stoppage records in the order the runs appear.

    Notes:
        A run still open at the end of the sequence is dropped, since no
        departure was observed. Negative speeds neither open a run nor count
        as a departure.
    """

    stoppages: list[StoppageRecord] = []
    start_idx: int | None = None

    for i in range(len(samples) - 1):
        cur = samples[i]
        nxt = samples[i + 1]

        if cur.speed == 0 and start_idx is None:
            start_idx = i
        if start_idx is not None and nxt.speed > 0:
            start = samples[start_idx]
            start_ms = start.event_generated_time_ms
            end_ms = nxt.event_generated_time_ms
            stoppages.append(
                StoppageRecord(
                    latitude=start.latitude,
                    longitude=start.longitude,
                    stoppage_time=stoppage_minutes(start_ms, end_ms),
                    reach_time=format_local(start_ms, tz_name),
                    leave_time=format_local(end_ms, tz_name),
                    start_ms=start_ms,
                    end_ms=end_ms,
                )
            )
            start_idx = None

    if start_idx is not None:
        logger.debug("sequence ends while stopped (run from index %s); not emitted", start_idx)

    return stoppages


def filter_stoppages(
    records: Iterable[StoppageRecord],
    threshold_minutes: int = 0,
) -> list[StoppageRecord]:
    """Keep records with stoppage_time >= threshold_minutes, preserving order."""

    return [r for r in records if r.stoppage_time >= threshold_minutes]


def _format_hhmm(minutes: int) -> str:
    m = max(0, int(minutes))
    return f"{m // 60:02d}:{m % 60:02d}"


def write_stoppages_csv(
    records: Sequence[StoppageRecord],
    out_path: str | Path,
    tz_name: str = DEFAULT_TZ,
) -> None:
    """Write stoppages to CSV (reach/leave times may be edited by hand afterwards).

    reach_time/leave_time carry the UTC offset, so the file reads back to the
    same instants in any timezone, including across DST changes.
    """

    p = Path(out_path)
    with p.open("w", encoding="utf-8", newline="") as f:
        w = csv.DictWriter(f, fieldnames=STOPPAGE_FIELDNAMES)
        w.writeheader()
        for idx, r in enumerate(records, start=1):
            w.writerow(
                {
                    "stoppage_id": idx,
                    "latitude": r.latitude,
                    "longitude": r.longitude,
                    "stoppage_minutes": r.stoppage_time,
                    "reach_time": format_local(r.start_ms, tz_name, with_offset=True),
                    "leave_time": format_local(r.end_ms, tz_name, with_offset=True),
                    "start_epoch_ms": r.start_ms,
                    "end_epoch_ms": r.end_ms,
                }
            )


def _row_epoch_ms(text: str, epoch_text: str | None, tz_name: str) -> int:
    if text.strip() == INVALID_TIME and epoch_text:
        return int(epoch_text)
    return parse_epoch_ms(text, tz_name)


def iter_stoppages_from_csv(csv_path: str | Path, tz_name: str = DEFAULT_TZ) -> Iterator[StoppageRecord]:
    """Read stoppages.csv (possibly manually edited) and yield StoppageRecord objects.

    Manual editing guidance:
        - reach_time/leave_time are authoritative. Text without an offset is
          read as local time in tz_name.
        - A time written as "Invalid Date" falls back to its epoch column.
        - start_epoch_ms/end_epoch_ms and stoppage_minutes are recomputed from them.
    """

    p = Path(csv_path)
    with p.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            start_ms = _row_epoch_ms(row["reach_time"], row.get("start_epoch_ms"), tz_name)
            end_ms = _row_epoch_ms(row["leave_time"], row.get("end_epoch_ms"), tz_name)
            yield StoppageRecord(
                latitude=float(row["latitude"]),
                longitude=float(row["longitude"]),
                stoppage_time=stoppage_minutes(start_ms, end_ms),
                reach_time=format_local(start_ms, tz_name),
                leave_time=format_local(end_ms, tz_name),
                start_ms=start_ms,
                end_ms=end_ms,
            )


@dataclass(frozen=True, slots=True)
class StoppagesTotal:
    """Total duration summary."""

    stoppages: int
    total_minutes: int

    @property
    def total_hhmm(self) -> str:
        return _format_hhmm(self.total_minutes)


def sum_stoppages(records: Iterable[StoppageRecord]) -> StoppagesTotal:
    """Sum stoppage durations (whole minutes, as reported per record)."""

    total = 0
    count = 0
    for r in records:
        total += r.stoppage_time
        count += 1
    return StoppagesTotal(stoppages=count, total_minutes=total)
