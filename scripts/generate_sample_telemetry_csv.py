from __future__ import annotations

import argparse
import csv
import random
from datetime import datetime, timedelta
from pathlib import Path
from typing import Final

from zoneinfo import ZoneInfo

TZ: Final[str] = "Asia/Kolkata"
START_LAT: Final[float] = 13.0
START_LON: Final[float] = 74.9173533


def _epoch_ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


def generate_samples(
    *,
    stops: int,
    seed: int,
    start_local: datetime,
    sample_seconds: float,
) -> list[dict[str, str]]:
    """Generate a fake drive: moving legs alternating with stationary stops (speed 0)."""

    rng = random.Random(seed)
    cur = start_local.replace(tzinfo=ZoneInfo(TZ))
    lat, lon = START_LAT, START_LON
    heading_lat = rng.uniform(-1.0, 1.0)
    heading_lon = rng.uniform(-1.0, 1.0)

    out: list[dict[str, str]] = []

    def emit(speed: float) -> None:
        out.append(
            {
                "eventGeneratedTime": str(_epoch_ms(cur)),
                "latitude": f"{lat:.7f}",
                "longitude": f"{lon:.7f}",
                "speed": f"{speed:.1f}" if speed else "0",
            }
        )

    for _ in range(stops):
        # moving leg: 5-20 samples
        for _ in range(rng.randint(5, 20)):
            speed = rng.uniform(10.0, 60.0)  # km/h
            step = speed / 3600.0 * sample_seconds / 111.0  # rough degrees
            heading_lat += rng.uniform(-0.2, 0.2)
            heading_lon += rng.uniform(-0.2, 0.2)
            lat += step * heading_lat
            lon += step * heading_lon
            emit(speed)
            cur = cur + timedelta(seconds=sample_seconds)

        # stop: 1-45 samples at the same position
        for _ in range(rng.randint(1, 45)):
            emit(0.0)
            cur = cur + timedelta(seconds=sample_seconds)

    # departure sample so the last stop is closed
    emit(rng.uniform(10.0, 60.0))
    cur = cur + timedelta(seconds=sample_seconds)
    emit(rng.uniform(10.0, 60.0))
    return out


def main() -> int:
    p = argparse.ArgumentParser(description="Generate a fake telemetry CSV for demo/testing.")
    p.add_argument("--out", type=str, default="sample_data/telemetry.csv", help="Output CSV path")
    p.add_argument("--stops", type=int, default=12, help="Number of stationary stops")
    p.add_argument("--seed", type=int, default=42, help="Random seed (reproducible)")
    p.add_argument("--sample-seconds", type=float, default=60.0, help="Sampling interval in seconds")
    p.add_argument(
        "--start",
        type=str,
        default="2024-01-15 08:00:00",
        help="Start local time in Asia/Kolkata, e.g. '2024-01-15 08:00:00'",
    )
    args = p.parse_args()

    rows = generate_samples(
        stops=args.stops,
        seed=args.seed,
        start_local=datetime.fromisoformat(args.start),
        sample_seconds=args.sample_seconds,
    )
    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    with out_path.open("w", encoding="utf-8", newline="") as f:
        w = csv.DictWriter(f, fieldnames=["eventGeneratedTime", "latitude", "longitude", "speed"])
        w.writeheader()
        w.writerows(rows)

    print(f"Generated: {out_path} (rows={len(rows)}, seed={args.seed})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
