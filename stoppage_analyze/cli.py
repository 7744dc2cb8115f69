"""Command-line interface for stoppage_analyze.

Run:
    python -m stoppage_analyze find-stoppages --data telemetry.csv --threshold 5
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from typing import Sequence

from stoppage_analyze.csv_io import load_samples
from stoppage_analyze.inspect import count_out_of_order, export_readable_csv, inspect_samples
from stoppage_analyze.models import DEFAULT_TZ, StoppageRecord
from stoppage_analyze.stoppages import (
    detect_stoppages,
    filter_stoppages,
    iter_stoppages_from_csv,
    sum_stoppages,
    write_stoppages_csv,
)
from stoppage_analyze.timeutils import format_local

logger = logging.getLogger(__name__)

EXIT_INPUT_ERROR = 2


def _print_stoppages(records: Sequence[StoppageRecord]) -> None:
    print(f"{'No':>3}  {'Latitude':>12}  {'Longitude':>12}  {'Minutes':>7}  {'Reach Time':<19}  {'Leave Time':<19}")
    for idx, r in enumerate(records, start=1):
        print(
            f"{idx:>3}  {r.latitude:>12}  {r.longitude:>12}  {r.stoppage_time:>7}  "
            f"{r.reach_time:<19}  {r.leave_time:<19}"
        )


def _cmd_inspect(args: argparse.Namespace) -> int:
    samples, summary = load_samples(args.data)
    res = inspect_samples(samples)

    print("### 字段")
    print(", ".join(summary.fieldnames))
    print()

    print("### 行数")
    print(f"total_rows={summary.rows_total}, parsed={summary.rows_parsed}, skipped={summary.rows_skipped}")
    print()

    if res.min_time_ms is not None and res.max_time_ms is not None:
        print("### 时间范围（本地时区）")
        print(f"start={format_local(res.min_time_ms, args.tz)}, end={format_local(res.max_time_ms, args.tz)}")
        print()

    if res.delta is not None:
        print("### 采样间隔（秒）")
        print(
            f"count={res.delta.count}, min={res.delta.min_s:.3f}, median={res.delta.median_s:.3f}, "
            f"p95={res.delta.p95_s:.3f}, max={res.delta.max_s:.3f}"
        )
        print()

    print("### 经纬度范围（粗略）")
    print(f"lat=[{res.min_lat}, {res.max_lat}], lon=[{res.min_lon}, {res.max_lon}]")
    print()

    print("### 速度")
    print(f"zero_speed={res.zero_speed}, negative_speed={res.negative_speed}")
    print()

    print("### 时间倒序（相邻两点时间倒退次数）")
    print(res.out_of_order)
    print()

    if args.json:
        payload = asdict(res) | {
            "rows_total": summary.rows_total,
            "rows_parsed": summary.rows_parsed,
            "rows_skipped": summary.rows_skipped,
            "fieldnames": list(summary.fieldnames),
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


def _cmd_export_readable(args: argparse.Namespace) -> int:
    samples, _ = load_samples(args.data)
    export_readable_csv(samples, args.out, args.tz)
    print(f"已导出：{args.out}")
    return 0


def _cmd_find_stoppages(args: argparse.Namespace) -> int:
    samples, _ = load_samples(args.data)
    if args.sort:
        samples = sorted(samples, key=lambda s: s.event_generated_time_ms)
    else:
        bad = count_out_of_order(samples)
        if bad:
            logger.warning("有 %s 处时间倒序，结果可能不准确；可加 --sort 先按时间排序", bad)

    stoppages = detect_stoppages(samples, args.tz)
    kept = filter_stoppages(stoppages, args.threshold)
    _print_stoppages(kept)

    total = sum_stoppages(kept)
    print(
        f"识别到 stoppages={len(stoppages)} 段，阈值 {args.threshold} 分钟后保留 {total.stoppages} 段，"
        f"合计={total.total_hhmm}（{total.total_minutes} 分钟）"
    )
    if args.out:
        write_stoppages_csv(kept, args.out, args.tz)
        print(f"已导出：{args.out}（你可以手工修改 reach_time/leave_time 后再 filter-stoppages）")
    return 0


def _cmd_filter_stoppages(args: argparse.Namespace) -> int:
    stoppages = list(iter_stoppages_from_csv(args.stoppages, args.tz))
    kept = filter_stoppages(stoppages, args.threshold)
    _print_stoppages(kept)
    total = sum_stoppages(kept)
    print(f"stoppages={total.stoppages}/{len(stoppages)}, total={total.total_hhmm}（{total.total_minutes} 分钟）")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""

    p = argparse.ArgumentParser(prog="stoppage_analyze")
    p.add_argument("-v", "--verbose", action="store_true", help="输出调试日志")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_ins = sub.add_parser("inspect", help="分析遥测文件的结构/时间范围/采样间隔/速度等")
    p_ins.add_argument("--data", type=str, default="telemetry.csv", help="输入文件路径（.csv 或 .json）")
    p_ins.add_argument("--tz", type=str, default=DEFAULT_TZ, help=f"时区（IANA），默认 {DEFAULT_TZ}")
    p_ins.add_argument("--json", action="store_true", help="额外输出JSON（便于后处理）")
    p_ins.set_defaults(func=_cmd_inspect)

    p_exp = sub.add_parser("export-readable", help="导出可读时间的遥测点CSV")
    p_exp.add_argument("--data", type=str, default="telemetry.csv", help="输入文件路径（.csv 或 .json）")
    p_exp.add_argument("--out", type=str, default="readable.csv", help="输出CSV路径")
    p_exp.add_argument("--tz", type=str, default=DEFAULT_TZ, help="时区（IANA）")
    p_exp.set_defaults(func=_cmd_export_readable)

    p_fs = sub.add_parser("find-stoppages", help="按速度为0的连续区间识别停车点，并按阈值过滤")
    p_fs.add_argument("--data", type=str, default="telemetry.csv", help="输入文件路径（.csv 或 .json）")
    p_fs.add_argument("--threshold", type=int, default=0, help="最短停车时长（分钟），默认0即全部保留")
    p_fs.add_argument("--tz", type=str, default=DEFAULT_TZ, help="时区（IANA）")
    p_fs.add_argument("--sort", action="store_true", help="识别前先按 eventGeneratedTime 排序")
    p_fs.add_argument("--out", type=str, default=None, help="可选：输出 stoppages.csv 路径")
    p_fs.set_defaults(func=_cmd_find_stoppages)

    p_ff = sub.add_parser("filter-stoppages", help="按阈值重新过滤 stoppages.csv（支持手工改过的时间）")
    p_ff.add_argument("--stoppages", type=str, default="stoppages.csv", help="stoppages.csv 路径")
    p_ff.add_argument("--threshold", type=int, default=0, help="最短停车时长（分钟）")
    p_ff.add_argument("--tz", type=str, default=DEFAULT_TZ, help="时区（IANA）")
    p_ff.set_defaults(func=_cmd_filter_stoppages)

    return p


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""

    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return int(args.func(args))
    except (FileNotFoundError, KeyError, ValueError) as exc:
        print(f"错误：{exc}", file=sys.stderr)
        return EXIT_INPUT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
