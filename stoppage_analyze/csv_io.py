"""Input utilities for exported telemetry files (CSV or JSON)."""

from __future__ import annotations

import csv
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Sequence

from stoppage_analyze.models import TelemetrySample

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("latitude", "longitude", "speed", "eventGeneratedTime")


@dataclass(frozen=True, slots=True)
class CsvSummary:
    """Quick summary of telemetry parsing."""

    rows_total: int
    rows_parsed: int
    rows_skipped: int
    fieldnames: Sequence[str]


def _parse_time_ms(value: Any) -> int:
    # 有些导出会写成 "1705287600000.0"
    if isinstance(value, str):
        value = value.strip()
        return int(value) if value.lstrip("-").isdigit() else int(float(value))
    if isinstance(value, bool):
        raise TypeError("eventGeneratedTime 不能是布尔值")
    return int(value)


def _parse_float(value: Any) -> float:
    if isinstance(value, str):
        return float(value.strip())
    return float(value)


def sample_from_row(row: Mapping[str, Any]) -> TelemetrySample:
    """Build a TelemetrySample from a CSV row or JSON object.

    Raises:
        KeyError: If a required key is missing.
        ValueError/TypeError: If a value cannot be parsed.
    """

    return TelemetrySample(
        latitude=_parse_float(row["latitude"]),
        longitude=_parse_float(row["longitude"]),
        speed=_parse_float(row["speed"]),
        event_generated_time_ms=_parse_time_ms(row["eventGeneratedTime"]),
    )


def load_samples_csv(csv_path: str | Path) -> tuple[list[TelemetrySample], CsvSummary]:
    """Load all samples from a CSV into memory.

    Returns:
        (samples, summary)
    """

    p = Path(csv_path)
    rows_total = 0
    parsed: list[TelemetrySample] = []
    fieldnames: Sequence[str] = ()

    with p.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        fieldnames = reader.fieldnames or ()
        missing = [k for k in REQUIRED_FIELDS if k not in fieldnames]
        if fieldnames and missing:
            raise KeyError(f"CSV缺少必要字段：{missing}. 实际字段：{list(fieldnames)}")
        for row in reader:
            rows_total += 1
            try:
                parsed.append(sample_from_row(row))
            except (ValueError, TypeError):
                continue

    return parsed, _summarize(rows_total, parsed, fieldnames)


def load_samples_json(json_path: str | Path) -> tuple[list[TelemetrySample], CsvSummary]:
    """Load samples from a JSON array of objects.

    Each object uses the same keys as the CSV header
    (latitude, longitude, speed, eventGeneratedTime). Objects missing a key
    or holding unparsable values are skipped.

    Raises:
        ValueError: If the top-level JSON value is not a list.
    """

    p = Path(json_path)
    data = json.loads(p.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"JSON顶层必须是数组：{str(p)!r}")

    parsed: list[TelemetrySample] = []
    keys: dict[str, None] = {}
    for obj in data:
        if not isinstance(obj, dict):
            continue
        keys.update(dict.fromkeys(obj))
        try:
            parsed.append(sample_from_row(obj))
        except (KeyError, ValueError, TypeError):
            continue

    return parsed, _summarize(len(data), parsed, tuple(keys))


def load_samples(path: str | Path) -> tuple[list[TelemetrySample], CsvSummary]:
    """Load samples from ``.json`` or CSV (anything else), keeping file order."""

    if Path(path).suffix.lower() == ".json":
        return load_samples_json(path)
    return load_samples_csv(path)


def _summarize(rows_total: int, parsed: Sequence[TelemetrySample], fieldnames: Sequence[str]) -> CsvSummary:
    summary = CsvSummary(
        rows_total=rows_total,
        rows_parsed=len(parsed),
        rows_skipped=rows_total - len(parsed),
        fieldnames=fieldnames,
    )
    if summary.rows_skipped > 0:
        logger.warning("数据中有 %s 行解析失败已跳过", summary.rows_skipped)
    return summary
