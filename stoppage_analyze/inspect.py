"""Inspect telemetry samples and export a readable time series."""

from __future__ import annotations

import csv
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from stoppage_analyze.models import TelemetrySample
from stoppage_analyze.timeutils import DeltaStats, delta_stats, format_local


@dataclass(frozen=True, slots=True)
class InspectResult:
    """High-level inspection result for a loaded sample sequence."""

    samples: int
    min_time_ms: int | None
    max_time_ms: int | None
    delta: DeltaStats | None
    min_lat: float | None
    max_lat: float | None
    min_lon: float | None
    max_lon: float | None
    zero_speed: int
    negative_speed: int
    out_of_order: int


def count_out_of_order(samples: Sequence[TelemetrySample]) -> int:
    """Number of adjacent pairs whose timestamp goes backwards."""

    return sum(
        1
        for i in range(1, len(samples))
        if samples[i].event_generated_time_ms < samples[i - 1].event_generated_time_ms
    )


def inspect_samples(samples: Sequence[TelemetrySample]) -> InspectResult:
    """Inspect already-loaded samples (file order is what gets checked for ordering)."""

    if not samples:
        return InspectResult(
            samples=0,
            min_time_ms=None,
            max_time_ms=None,
            delta=None,
            min_lat=None,
            max_lat=None,
            min_lon=None,
            max_lon=None,
            zero_speed=0,
            negative_speed=0,
            out_of_order=0,
        )

    times = sorted(s.event_generated_time_ms for s in samples)
    lats = [s.latitude for s in samples]
    lons = [s.longitude for s in samples]
    return InspectResult(
        samples=len(samples),
        min_time_ms=times[0],
        max_time_ms=times[-1],
        delta=delta_stats(times),
        min_lat=min(lats),
        max_lat=max(lats),
        min_lon=min(lons),
        max_lon=max(lons),
        zero_speed=sum(1 for s in samples if s.speed == 0),
        negative_speed=sum(1 for s in samples if s.speed < 0),
        out_of_order=count_out_of_order(samples),
    )


def export_readable_csv(
    samples: Iterable[TelemetrySample],
    out_path: str | Path,
    tz_name: str,
) -> None:
    """Export samples to a human-readable CSV.

    Output columns:
        - time_local: "YYYY-MM-DD HH:MM:SS" in tz_name
        - epoch_ms, latitude, longitude, speed
        - moving: 1 if speed > 0, else 0
    """

    p = Path(out_path)
    with p.open("w", encoding="utf-8", newline="") as f:
        w = csv.DictWriter(
            f,
            fieldnames=["time_local", "epoch_ms", "latitude", "longitude", "speed", "moving"],
        )
        w.writeheader()
        for s in samples:
            w.writerow(
                {
                    "time_local": format_local(s.event_generated_time_ms, tz_name),
                    "epoch_ms": s.event_generated_time_ms,
                    "latitude": s.latitude,
                    "longitude": s.longitude,
                    "speed": s.speed,
                    "moving": 1 if s.speed > 0 else 0,
                }
            )
