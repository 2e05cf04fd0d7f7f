from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Literal, Optional

import json
import pandas as pd

from Delivery_analytics.data_loader import CHANNEL_KEY, NUMERIC_COLUMNS, Records, as_frame, is_month_key, is_week_key
from Delivery_analytics.geo import MATCH_FALLBACK, GeoResolver

RuleStatus = Literal["PASS", "WARN", "FAIL"]


@dataclass(slots=True)
class RuleResult:
    name: str
    status: RuleStatus
    detail: str
    sample_rows: Optional[int] = None


@dataclass(slots=True)
class QualityReport:
    status: RuleStatus
    rules: List[RuleResult]
    stats: Dict[str, object]


def _preview(values: Iterable[str], limit: int = 5) -> str:
    items = list(values)
    text = ", ".join(repr(item) for item in items[:limit])
    return text + (" ..." if len(items) > limit else "")


def run_quality_checks(
    records: Records,
    *,
    missing_columns: Iterable[str] = (),
    resolver: Optional[GeoResolver] = None,
    stop_on_fail: bool = False,
) -> QualityReport:
    """Surface the rows the engine drops or repairs silently.

    *missing_columns* lists mapped export columns that were absent at load time.
    """

    df = as_frame(records)
    resolver = resolver or GeoResolver()
    rules: List[RuleResult] = []

    # R1 Schema
    missing = [col for col in missing_columns if col]
    if missing:
        rules.append(
            RuleResult(
                name="R1 Schema",
                status="WARN",
                detail=f"Optional columns missing (treated as empty/zero): {', '.join(missing)}",
                sample_rows=len(missing),
            )
        )
    else:
        rules.append(RuleResult(name="R1 Schema", status="PASS", detail="All mapped columns present"))

    # R2 Channels
    unknown = df.loc[df[CHANNEL_KEY].isna(), "channel"]
    if len(unknown):
        labels = sorted(set(unknown.tolist()))
        rules.append(
            RuleResult(
                name="R2 Channels",
                status="WARN",
                detail=f"Rows with unrecognized channel labels excluded: {_preview(labels)}",
                sample_rows=int(len(unknown)),
            )
        )
    else:
        rules.append(RuleResult(name="R2 Channels", status="PASS", detail="Every channel label is recognized"))

    # R3 Grouping keys
    recognised = df.loc[df[CHANNEL_KEY].notna()]
    empty_keys: Dict[str, int] = {}
    for column in ("area", "cuisine", "period"):
        count = int((recognised[column] == "").sum())
        if count:
            empty_keys[column] = count
    if empty_keys:
        detail = ", ".join(f"{col} ({count})" for col, count in empty_keys.items())
        rules.append(
            RuleResult(
                name="R3 Grouping keys",
                status="WARN",
                detail=f"Rows skipped by breakdowns on empty keys: {detail}",
                sample_rows=max(empty_keys.values()),
            )
        )
    else:
        rules.append(RuleResult(name="R3 Grouping keys", status="PASS", detail="Area, cuisine and period are populated"))

    # R4 Range sanity (non-negative)
    negative_columns: Dict[str, int] = {}
    for column in NUMERIC_COLUMNS:
        count = int((df[column] < 0).sum())
        if count > 0:
            negative_columns[column] = count
    if negative_columns:
        detail = ", ".join(f"{col} ({count})" for col, count in negative_columns.items())
        rules.append(
            RuleResult(
                name="R4 Range",
                status="FAIL",
                detail=f"Negative values detected in: {detail}",
                sample_rows=sum(negative_columns.values()),
            )
        )
    else:
        rules.append(RuleResult(name="R4 Range", status="PASS", detail="Orders, sales and spend are non-negative"))

    # R5 Periods
    periods = [value for value in df["period"].tolist() if value]
    odd_periods = sorted({value for value in periods if not (is_month_key(value) or is_week_key(value))})
    if odd_periods:
        rules.append(
            RuleResult(
                name="R5 Periods",
                status="WARN",
                detail=f"Period labels kept verbatim (not YYYY-MM or YYYY-Www): {_preview(odd_periods)}",
                sample_rows=len(odd_periods),
            )
        )
    else:
        rules.append(RuleResult(name="R5 Periods", status="PASS", detail="Period labels are month or week keys"))

    # R6 Geo coverage
    areas = sorted({value for value in recognised["area"].tolist() if value})
    fallback_areas = [area for area in areas if resolver.resolve_with_method(area)[1] == MATCH_FALLBACK]
    if fallback_areas:
        rules.append(
            RuleResult(
                name="R6 Geo coverage",
                status="WARN",
                detail=f"Areas placed at a city centroid offset: {_preview(fallback_areas)}",
                sample_rows=len(fallback_areas),
            )
        )
    else:
        rules.append(RuleResult(name="R6 Geo coverage", status="PASS", detail="Every area matched the reference table"))

    has_fail = any(rule.status == "FAIL" for rule in rules)
    has_warn = any(rule.status == "WARN" for rule in rules)

    if stop_on_fail and has_fail:
        overall_status: RuleStatus = "FAIL"
    elif has_fail or has_warn:
        overall_status = "WARN"
    else:
        overall_status = "PASS"

    known_periods = sorted(value for value in set(periods) if is_month_key(value) or is_week_key(value))
    stats = {
        "rows": int(len(df)),
        "recognized_rows": int(len(recognised)),
        "first_period": known_periods[0] if known_periods else None,
        "last_period": known_periods[-1] if known_periods else None,
        "areas": len(areas),
        "fallback_areas": len(fallback_areas),
    }

    return QualityReport(status=overall_status, rules=rules, stats=stats)


def write_quality_artifacts(report: QualityReport, output_dir: Path) -> Dict[str, str]:
    output_dir.mkdir(parents=True, exist_ok=True)

    report_dict = asdict(report)
    json_path = output_dir / "quality_report.json"
    json_path.write_text(json.dumps(report_dict, indent=2), encoding="utf-8")

    lines = [
        "# Data Quality Report",
        f"**Status:** {report.status}",
        "",
        "## Summary",
        f"- Rows: {report.stats.get('rows')} ({report.stats.get('recognized_rows')} with a known channel)",
        f"- Periods: {report.stats.get('first_period')} -> {report.stats.get('last_period')}",
        f"- Areas: {report.stats.get('areas')} ({report.stats.get('fallback_areas')} via fallback)",
        "",
        "## Rules",
    ]
    for rule in report.rules:
        sample = f" (count={rule.sample_rows})" if rule.sample_rows else ""
        lines.append(f"- [{rule.status}] {rule.name}: {rule.detail}{sample}")
    markdown_path = output_dir / "quality_report.md"
    markdown_path.write_text("\n".join(lines), encoding="utf-8")

    return {"json": str(json_path), "markdown": str(markdown_path)}
