"""Reporting helpers for the delivery market dashboard."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence
import json

import pandas as pd

from Delivery_analytics.brands import MissingBrand, missing_brands_frame
from Delivery_analytics.channel_map import ChannelMapEntry
from Delivery_analytics.config import DashboardSettings
from Delivery_analytics.data_loader import DatasetBundle
from Delivery_analytics.formatting import cuisine_icon, format_currency, format_number, format_percentage
from Delivery_analytics.market_share import AreaSignal, MarketShareRow
from Delivery_analytics.metrics import AggregatedChannelMetric
from Delivery_analytics.metrics_registry import compute_series
from Delivery_analytics.quality import QualityReport
from Delivery_analytics.summary import DashboardSummary


def rows_frame(rows: Iterable[object], columns: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """Flatten result dataclasses exposing ``as_dict`` into a frame."""

    records = [row.as_dict() for row in rows]
    if not records:
        return pd.DataFrame(columns=list(columns) if columns else None)
    return pd.DataFrame(records)


SUMMARY_RATIOS = ("RETENTION", "ADS_SHARE", "DISCOUNT_SHARE", "MARKETING_SHARE")


def channel_summary_frame(channel_data: Sequence[AggregatedChannelMetric]) -> pd.DataFrame:
    """Channel rows with net-to-gross retention and spend as a share of gross sales."""

    frame = rows_frame(
        channel_data,
        columns=["channel", "orders", "net_sales", "gross_sales", "ads_spend", "discount_spend", "ads_return", "roas", "aov"],
    )
    ratios = compute_series(frame, SUMMARY_RATIOS)
    return frame.join(ratios.rename(columns=str.lower))


def channel_map_frame(entries: Sequence[ChannelMapEntry]) -> pd.DataFrame:
    return rows_frame(entries, columns=["area", "city", "lat", "lng", "total_orders", "total_sales", "dominant_channel"])


def _frame_to_json_records(df: pd.DataFrame) -> list[dict[str, object]]:
    if df.empty:
        return []
    return json.loads(df.to_json(orient="records", date_format="iso"))


def dataframe_to_csv(df: pd.DataFrame, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if df.empty and not len(df.columns):
        path.write_text("", encoding="utf-8")
    else:
        df.to_csv(path, index=False)


def dataframe_to_markdown(df: pd.DataFrame) -> str:
    if df.empty:
        return "_No data available._"
    return df.to_markdown(index=False)


def build_summary_payload(
    *,
    settings: DashboardSettings,
    bundle: DatasetBundle,
    summary: DashboardSummary,
    area_signals: Sequence[AreaSignal],
    cuisine_share: Sequence[MarketShareRow],
    channel_map: Sequence[ChannelMapEntry],
    quality: Optional[QualityReport] = None,
    brands: Sequence[MissingBrand] = (),
    rows_analyzed: Optional[int] = None,
) -> Dict[str, object]:
    payload: Dict[str, object] = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "data_path": str(settings.data_path),
        "rows_analyzed": int(len(bundle.frame) if rows_analyzed is None else rows_analyzed),
        "granularity": summary.granularity,
        "column_mapping": asdict(bundle.mapping),
        "filters": asdict(settings.filters),
        "summary": summary.totals(),
        "channel_data": _frame_to_json_records(channel_summary_frame(summary.channel_data)),
        "period_data": _frame_to_json_records(rows_frame(summary.period_data)),
        "filter_options": asdict(summary.filter_options),
        "report_version": "delivery-analytics/1.0",
    }

    if area_signals:
        payload["area_signals"] = _frame_to_json_records(rows_frame(area_signals))
    if cuisine_share:
        payload["cuisine_share"] = _frame_to_json_records(rows_frame(cuisine_share))
    if channel_map:
        payload["channel_map"] = _frame_to_json_records(channel_map_frame(channel_map))
    if brands:
        payload["missing_brands"] = _frame_to_json_records(missing_brands_frame(list(brands)))
    if quality:
        payload["quality_status"] = quality.status

    return payload


def _display_channels(channel_data: Sequence[AggregatedChannelMetric]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Channel": row["channel"],
                "Orders": format_number(row["orders"]),
                "Net sales": format_currency(row["net_sales"]),
                "Gross sales": format_currency(row["gross_sales"]),
                "Ads spend": format_currency(row["ads_spend"]),
                "Discounts": format_currency(row["discount_spend"]),
                "Marketing % of gross": format_percentage(row["marketing_share"]),
                "Retention": format_percentage(row["retention"] * 100),
                "ROAS": f"{row['roas']:.2f}",
                "AOV": format_currency(row["aov"]),
            }
            for row in channel_summary_frame(channel_data).to_dict(orient="records")
        ]
    )


def _display_shares(frame: pd.DataFrame, *, label_columns: Sequence[str]) -> pd.DataFrame:
    if frame.empty:
        return frame
    display = frame.copy()
    for column in display.columns:
        if column in label_columns:
            continue
        if column in {"total_orders"}:
            display[column] = display[column].map(format_number)
        elif display[column].dtype.kind == "f":
            display[column] = display[column].map(format_percentage)
    return display


def build_markdown_report(
    *,
    settings: DashboardSettings,
    summary: DashboardSummary,
    area_signals: Sequence[AreaSignal],
    cuisine_share: Sequence[MarketShareRow],
    channel_map: Sequence[ChannelMapEntry],
    quality: Optional[QualityReport] = None,
    brands: Sequence[MissingBrand] = (),
    rows_analyzed: Optional[int] = None,
) -> str:
    period_label = "Week" if summary.granularity == "weekly" else "Month"
    lines = [
        "# Delivery Market Summary",
        "",
        f"**Dataset:** `{settings.data_path.name}`",
        f"**Rows analyzed:** {rows_analyzed}" if rows_analyzed is not None else None,
        f"**Granularity:** {summary.granularity}",
        f"**Data quality:** {quality.status}" if quality else None,
        "",
        "## Key Metrics",
        f"- **Orders:** {format_number(summary.total_orders)}",
        f"- **Net sales:** {format_currency(summary.total_net_sales)}",
        f"- **Gross sales:** {format_currency(summary.total_gross_sales)}",
        f"- **Ads spend:** {format_currency(summary.total_ads_spend)}",
        f"- **Discount spend:** {format_currency(summary.total_discount_spend)}",
        "",
        "## Channel performance",
        "",
        dataframe_to_markdown(_display_channels(summary.channel_data)),
        "",
        f"## Market share by {period_label.lower()}",
        "",
        dataframe_to_markdown(
            _display_shares(rows_frame(summary.period_data), label_columns=("key", "week_label", "week_start_date"))
        ),
    ]

    if area_signals:
        top_areas = sorted(area_signals, key=lambda item: item.total_orders, reverse=True)[:15]
        lines.extend(["", "## Top areas", ""])
        lines.append(
            dataframe_to_markdown(_display_shares(rows_frame(top_areas), label_columns=("area", "city", "cuisine_count", "signal_strength")))
        )

    if cuisine_share:
        cuisines = rows_frame(cuisine_share)
        cuisines.insert(0, "icon", [cuisine_icon(row.key) for row in cuisine_share])
        lines.extend(["", "## Market share by cuisine", ""])
        lines.append(dataframe_to_markdown(_display_shares(cuisines, label_columns=("icon", "key"))))

    lines.extend(["", "## Channel map", ""])
    if channel_map:
        lines.append(f"{len(channel_map)} areas with at least {format_number(settings.channel_map_min_orders)} orders.")
        lines.append("")
        top = channel_map_frame(channel_map[:15])[["area", "city", "total_orders", "dominant_channel"]]
        top["total_orders"] = top["total_orders"].map(format_number)
        lines.append(dataframe_to_markdown(top))
    else:
        lines.append("_No area reaches the channel map order threshold._")

    if brands:
        lines.extend(["", "## Missing brands", ""])
        lines.append(dataframe_to_markdown(missing_brands_frame(list(brands)).head(20)))

    return "\n".join(line for line in lines if line is not None)
