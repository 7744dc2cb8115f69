from __future__ import annotations

import pydeck as pdk
from streamlit_app import (
    DEFAULT_CENTER,
    MARKER_RADIUS_PX,
    TOOLTIP,
    _build_deck,
    _marker_rows,
    _table_rows,
    _track_path,
)

from stoppage_analyze.colors import SELECTED_COLOR, hex_to_rgb, marker_colors
from stoppage_analyze.models import TelemetrySample
from stoppage_analyze.stoppages import detect_stoppages

SAMPLES = [
    TelemetrySample(13.000, 74.90, 5, 0),
    TelemetrySample(13.001, 74.91, 0, 60_000),
    TelemetrySample(13.002, 74.92, 6, 120_000),
    TelemetrySample(13.003, 74.93, 0, 180_000),
    TelemetrySample(13.004, 74.94, 0, 300_000),
    TelemetrySample(13.005, 74.95, 6, 420_000),
]


def test_table_rows_are_numbered_in_order():
    records = detect_stoppages(SAMPLES, "UTC")
    rows = _table_rows(records)

    assert [r["No"] for r in rows] == [1, 2]
    assert [r["Stoppage Time (minutes)"] for r in rows] == [1, 4]
    assert rows[1]["Reach Time"] == "1970-01-01 00:03:00"


def test_track_is_one_connected_path_in_sample_order():
    path = _track_path(SAMPLES)

    assert len(path) == 1
    assert path[0]["path"] == [[s.longitude, s.latitude] for s in SAMPLES]


def test_marker_rows_highlight_selected_and_carry_tooltip_fields():
    records = detect_stoppages(SAMPLES, "UTC")
    colors = marker_colors(records)
    rows = _marker_rows(records, colors, selected=records[1].key)

    assert rows[0]["color"] == hex_to_rgb(colors[records[0].key])
    assert rows[1]["color"] == hex_to_rgb(SELECTED_COLOR)
    assert rows[0]["radius"] == MARKER_RADIUS_PX
    assert rows[1]["radius"] > MARKER_RADIUS_PX
    assert rows[1]["position"] == [records[1].longitude, records[1].latitude]

    # every {placeholder} in the popup html has a matching field
    for field in ("stoppage_time", "reach_time", "leave_time", "latitude", "longitude"):
        assert "{" + field + "}" in TOOLTIP["html"]
        assert field in rows[0]
    assert rows[1]["stoppage_time"] == 4
    assert rows[1]["leave_time"] == "1970-01-01 00:07:00"


def test_deck_has_track_and_markers_layers():
    records = detect_stoppages(SAMPLES, "UTC")
    deck = _build_deck(SAMPLES, records, marker_colors(records), selected=None)

    assert isinstance(deck, pdk.Deck)
    assert [layer.type for layer in deck.layers] == ["PathLayer", "ScatterplotLayer"]
    assert deck.initial_view_state.latitude == SAMPLES[0].latitude
    assert deck.initial_view_state.longitude == SAMPLES[0].longitude


def test_deck_without_samples_uses_default_center():
    deck = _build_deck([], [], {}, selected=None)

    assert (deck.initial_view_state.latitude, deck.initial_view_state.longitude) == DEFAULT_CENTER
