"""Data models for telemetry samples and stoppages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True, slots=True)
class TelemetrySample:
    """A single GPS telemetry sample.

    Attributes:
        latitude: Latitude in decimal degrees.
        longitude: Longitude in decimal degrees.
        speed: Reported speed. 0 means stopped, >0 means moving.
        event_generated_time_ms: Unix epoch milliseconds (``eventGeneratedTime``).
    """

    latitude: float
    longitude: float
    speed: float
    event_generated_time_ms: int


@dataclass(frozen=True, slots=True)
class StoppageRecord:
    """One contiguous run of zero-speed samples.

    Note:
        reach_time/leave_time are rendered in local time for display.
        The epoch fields are kept for stable numeric computations.
    """

    latitude: float
    longitude: float
    stoppage_time: int
    reach_time: str
    leave_time: str
    start_ms: int
    end_ms: int

    @property
    def key(self) -> tuple[float, float]:
        """(latitude, longitude) pair used to match markers and table rows."""

        return (self.latitude, self.longitude)


DEFAULT_TZ: Final[str] = "Asia/Kolkata"

MS_PER_MINUTE: Final[int] = 60_000
