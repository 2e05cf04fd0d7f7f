"""Delivery market report CLI for warehouse CSV exports."""

from __future__ import annotations

import argparse
import importlib.util
import logging
import sys
from dataclasses import fields
from pathlib import Path
from typing import Dict, List, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
# Running as ``python cli/dashboard_report.py`` from a checkout without an install.
if importlib.util.find_spec("Delivery_analytics") is None:
    sys.path.insert(0, str(PROJECT_ROOT))

from Delivery_analytics import ColumnMapping, DashboardPipeline, DashboardSettings, SalesFilters
from Delivery_analytics.channels import CHANNEL_NAMES
from Delivery_analytics.config import GRANULARITIES
from Delivery_analytics.formatting import format_currency, format_number, format_percentage


def parse_mapping_overrides(pairs: list[str]) -> Dict[str, object]:
    overrides: Dict[str, object] = {}
    for pair in pairs:
        if "=" not in pair:
            raise ValueError(f"Invalid mapping override '{pair}'. Expected KEY=VALUE format.")
        key, value = pair.split("=", 1)
        key = key.strip()
        value = value.strip()
        if value.lower() == "none":
            overrides[key] = None
        else:
            overrides[key] = value
    return overrides


def build_settings(args: argparse.Namespace) -> DashboardSettings:
    mapping = ColumnMapping()
    overrides = parse_mapping_overrides(args.map or [])
    valid_fields = {field.name for field in fields(mapping)}
    for key, value in overrides.items():
        if key not in valid_fields:
            raise ValueError(f"Unknown mapping field '{key}'. Valid options: {', '.join(sorted(valid_fields))}")
        setattr(mapping, key, value)

    filters = SalesFilters(
        months=tuple(args.month or ()),
        cities=tuple(args.city or ()),
        areas=tuple(args.area or ()),
        cuisines=tuple(args.cuisine or ()),
    )
    return DashboardSettings(
        data_path=args.data,
        output_dir=args.output_dir,
        mapping=mapping,
        granularity=args.granularity,
        filters=filters,
        channel_map_min_orders=args.min_orders,
        channel_filter=args.channel,
        include_visuals=not args.no_visuals,
        stop_on_fail=args.stop_on_fail,
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Aggregate delivery channel sales into market share, signal and channel map reports.",
    )
    parser.add_argument("--data", type=Path, default=Path("data/sales_export.csv"), help="Path to the CSV export.")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("reports"),
        help="Directory to write reports and derived artifacts.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Optional JSON config file specifying settings and column mapping.",
    )
    parser.add_argument("--granularity", choices=GRANULARITIES, default="monthly", help="Period grain of the export.")
    parser.add_argument(
        "--map",
        action="append",
        metavar="KEY=VALUE",
        help="Override column mapping fields (e.g., --map net_sales=net_revenue). Use 'none' to unset.",
    )
    parser.add_argument("--month", action="append", help="Keep only this period (repeatable).")
    parser.add_argument("--city", action="append", help="Keep only this city (repeatable).")
    parser.add_argument("--area", action="append", help="Keep only this area (repeatable).")
    parser.add_argument("--cuisine", action="append", help="Keep only this cuisine (repeatable).")
    parser.add_argument(
        "--channel",
        type=str.lower,
        choices=("all", *(name.lower() for name in CHANNEL_NAMES)),
        default="all",
        help="Channel map filter: 'all' or a channel name.",
    )
    parser.add_argument("--min-orders", type=float, default=1000, help="Minimum orders for an area on the channel map.")
    parser.add_argument("--no-visuals", action="store_true", help="Skip chart generation stage.")
    parser.add_argument("--stop-on-fail", action="store_true", help="Abort when a data quality rule fails.")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose logging for troubleshooting.",
    )
    return parser.parse_args(argv)


def display_console_summary(results: Dict[str, object]) -> None:
    summary = results["summary"]
    report_path: Path = results.get("report_path")  # type: ignore[assignment]
    summary_path: Path = results.get("summary_path")  # type: ignore[assignment]
    quality = results.get("quality")

    print("\nDelivery market report completed.\n")
    print(f"  {'Rows analyzed':20s} {format_number(results.get('rows_analyzed', 0))}")
    for label, value in summary.totals().items():  # type: ignore[attr-defined]
        formatted = format_number(value) if label == "total_orders" else format_currency(value)
        print(f"  {label.replace('_', ' ').capitalize():20s} {formatted}")

    print("\nChannels:")
    for item in summary.channel_data:  # type: ignore[attr-defined]
        share = item.orders / summary.total_orders * 100 if summary.total_orders else 0.0  # type: ignore[attr-defined]
        print(
            f"  {item.channel.value:10s} orders={format_number(item.orders):>10s} "
            f"share={format_percentage(share):>6s} roas={item.roas:.2f} aov={format_currency(item.aov)}"
        )

    if quality is not None:
        print(f"\nData quality: {quality.status}")  # type: ignore[attr-defined]

    print("\nArtifacts:")
    print(f"  Markdown report: {report_path}")
    print(f"  Dashboard summary: {summary_path}")
    figures = results.get("figures", {})
    if figures:
        for name, filename in figures.items():  # type: ignore[union-attr]
            print(f"  Figure ({name}): {filename}")


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.config:
        if not args.config.exists():
            raise SystemExit(f"Config file not found: {args.config}")
        pipeline = DashboardPipeline.from_config_file(args.config)
    else:
        pipeline = DashboardPipeline(build_settings(args))

    results = pipeline.run()
    display_console_summary(results)


if __name__ == "__main__":
    main()
