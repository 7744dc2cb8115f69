"""Marker colours for stoppages on the map."""

from __future__ import annotations

import hashlib
from typing import Final, Iterable

from stoppage_analyze.models import StoppageRecord

SELECTED_COLOR: Final[str] = "#FF0000"


def color_for_key(latitude: float, longitude: float) -> str:
    """Deterministic "#RRGGBB" colour derived from a (lat, lon) pair.

    repr() keeps the full float precision, so distinct coordinates give distinct digests.
    """

    key = f"{latitude!r},{longitude!r}".encode("utf-8")
    digest = hashlib.md5(key, usedforsecurity=False).hexdigest()
    return "#" + digest[:6].upper()


def marker_colors(records: Iterable[StoppageRecord]) -> dict[tuple[float, float], str]:
    """Map each distinct (latitude, longitude) among records to its colour.

    Pass the unfiltered stoppages so a marker keeps its colour while the threshold changes.
    """

    colors: dict[tuple[float, float], str] = {}
    for r in records:
        if r.key not in colors:
            colors[r.key] = color_for_key(r.latitude, r.longitude)
    return colors


def hex_to_rgb(color: str) -> list[int]:
    """"#RRGGBB" -> [r, g, b], the form deck.gl layers take for colours."""

    h = color.lstrip("#")
    if len(h) != 6:
        raise ValueError(f"颜色格式应为 #RRGGBB：{color!r}")
    return [int(h[i : i + 2], 16) for i in (0, 2, 4)]
