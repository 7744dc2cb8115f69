from __future__ import annotations

from pathlib import Path
from typing import Sequence

import pydeck as pdk
import streamlit as st

from stoppage_analyze.colors import SELECTED_COLOR, hex_to_rgb, marker_colors
from stoppage_analyze.csv_io import load_samples
from stoppage_analyze.models import DEFAULT_TZ, StoppageRecord, TelemetrySample
from stoppage_analyze.stoppages import detect_stoppages, filter_stoppages, sum_stoppages

TRACK_COLOR = [30, 64, 175]
TRACK_WIDTH_PX = 3
MARKER_RADIUS_PX = 10
DEFAULT_CENTER = (13.0, 74.9173533)

TOOLTIP = {
    "html": (
        "Stoppage Time: <b style='color: red'>{stoppage_time} minutes</b><br/>"
        "Reach Time : {reach_time}<br/>"
        "Leave Time : {leave_time}<br/>"
        "Latitude: {latitude}<br/>"
        "Longitude: {longitude}"
    )
}


def _table_rows(records: Sequence[StoppageRecord]) -> list[dict[str, object]]:
    return [
        {
            "No": idx,
            "Latitude": r.latitude,
            "Longitude": r.longitude,
            "Stoppage Time (minutes)": r.stoppage_time,
            "Reach Time": r.reach_time,
            "Leave Time": r.leave_time,
        }
        for idx, r in enumerate(records, start=1)
    ]


def _track_path(samples: Sequence[TelemetrySample]) -> list[dict[str, object]]:
    """One PathLayer row holding the whole track as [lon, lat] pairs."""

    return [{"path": [[s.longitude, s.latitude] for s in samples]}]


def _marker_rows(
    records: Sequence[StoppageRecord],
    colors: dict[tuple[float, float], str],
    selected: tuple[float, float] | None,
) -> list[dict[str, object]]:
    """ScatterplotLayer rows; the fields double as tooltip placeholders."""

    rows: list[dict[str, object]] = []
    for r in records:
        is_selected = r.key == selected
        color = SELECTED_COLOR if is_selected else colors.get(r.key, SELECTED_COLOR)
        rows.append(
            {
                "position": [r.longitude, r.latitude],
                "latitude": r.latitude,
                "longitude": r.longitude,
                "stoppage_time": r.stoppage_time,
                "reach_time": r.reach_time,
                "leave_time": r.leave_time,
                "color": hex_to_rgb(color),
                "radius": MARKER_RADIUS_PX * 1.2 if is_selected else MARKER_RADIUS_PX,
            }
        )
    return rows


def _build_deck(
    samples: Sequence[TelemetrySample],
    records: Sequence[StoppageRecord],
    colors: dict[tuple[float, float], str],
    selected: tuple[float, float] | None,
) -> pdk.Deck:
    lat, lon = (samples[0].latitude, samples[0].longitude) if samples else DEFAULT_CENTER
    layers = [
        pdk.Layer(
            "PathLayer",
            data=_track_path(samples),
            get_path="path",
            get_color=TRACK_COLOR,
            width_units="pixels",
            get_width=TRACK_WIDTH_PX,
        ),
        pdk.Layer(
            "ScatterplotLayer",
            data=_marker_rows(records, colors, selected),
            get_position="position",
            get_fill_color="color",
            get_radius="radius",
            radius_units="pixels",
            pickable=True,
        ),
    ]
    return pdk.Deck(
        layers=layers,
        initial_view_state=pdk.ViewState(latitude=lat, longitude=lon, zoom=13),
        map_style=None,
        tooltip=TOOLTIP,
    )


@st.cache_data(show_spinner=False)
def _load(data_path: str, tz_name: str, mtime: float) -> tuple[list[TelemetrySample], list[StoppageRecord]]:
    _ = mtime  # part of cache key so updated files reload automatically
    samples, _summary = load_samples(data_path)
    return samples, detect_stoppages(samples, tz_name)


def main() -> None:
    st.set_page_config(page_title="停车点分析", layout="wide")
    st.title("停车点分析：按速度为0的连续区间识别停车")

    with st.sidebar:
        st.subheader("数据与时区")
        tz_name = st.text_input("时区（IANA）", value=DEFAULT_TZ)
        data_path = st.text_input("遥测文件路径（.csv / .json）", value="telemetry.csv")

        st.subheader("Threshold Minutes")
        threshold = st.number_input("最短停车时长（分钟）", value=0, step=1, format="%d")

    p = Path(data_path)
    if not p.exists():
        st.error(f"找不到文件：{data_path!r}。可以先运行 scripts/generate_sample_telemetry_csv.py 生成示例数据。")
        return

    try:
        samples, stoppages = _load(data_path, tz_name, p.stat().st_mtime)
    except (KeyError, ValueError) as exc:
        st.error(str(exc))
        return

    # colours come from the unfiltered set so markers keep them as the threshold changes
    colors = marker_colors(stoppages)
    kept = filter_stoppages(stoppages, int(threshold))
    total = sum_stoppages(kept)

    c1, c2, c3 = st.columns(3)
    c1.metric("遥测点数", str(len(samples)))
    c2.metric("停车段数（过滤后/全部）", f"{total.stoppages}/{len(stoppages)}")
    c3.metric("过滤后合计停车时长", total.total_hhmm)

    map_slot = st.empty()

    st.subheader("Stoppage Points Information")
    event = st.dataframe(
        _table_rows(kept),
        use_container_width=True,
        hide_index=True,
        on_select="rerun",
        selection_mode="single-row",
        key="stoppage_table",
    )
    selected_rows = event.selection.rows if event is not None else []
    selected = kept[selected_rows[0]].key if selected_rows and selected_rows[0] < len(kept) else None

    with map_slot.container():
        st.pydeck_chart(_build_deck(samples, kept, colors, selected), use_container_width=True)

    st.caption("说明：停车段 = 速度为0的连续采样，结束于其后第一个速度>0的采样；序列末尾仍在停车的段不计入。")


if __name__ == "__main__":
    main()
