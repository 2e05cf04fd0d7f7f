"""High-level pipeline orchestration."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Dict, List

from Delivery_analytics.brands import MissingBrand, missing_brands, missing_brands_frame
from Delivery_analytics.channel_map import build_channel_map
from Delivery_analytics.config import DashboardSettings, settings_from_dict
from Delivery_analytics.data_loader import DatasetBundle, apply_filters, load_dataset
from Delivery_analytics.geo import GeoResolver
from Delivery_analytics.market_share import (
    calculate_market_share_by_area,
    calculate_market_share_by_area_extended,
    calculate_market_share_by_cuisine,
)
from Delivery_analytics.quality import run_quality_checks, write_quality_artifacts
from Delivery_analytics.reporting import (
    build_markdown_report,
    build_summary_payload,
    channel_map_frame,
    channel_summary_frame,
    dataframe_to_csv,
    rows_frame,
)
from Delivery_analytics.summary import dashboard_summary
from Delivery_analytics.visualization import generate_visuals


logger = logging.getLogger(__name__)


class DashboardPipeline:
    """Run the end-to-end delivery market report over a warehouse CSV export."""

    def __init__(self, settings: DashboardSettings) -> None:
        self.settings = settings
        self.settings.resolve_paths()
        self.settings.ensure_output_tree()
        self.resolver = GeoResolver(default_city=settings.default_city)

    @classmethod
    def from_config_file(cls, path: Path) -> "DashboardPipeline":
        payload = json.loads(path.read_text(encoding="utf-8"))
        settings = settings_from_dict(payload, base_path=path.parent)
        return cls(settings)

    def _prepare_dataset(self) -> DatasetBundle:
        return load_dataset(self.settings.data_path, self.settings.mapping, granularity=self.settings.granularity)

    def run(self) -> Dict[str, object]:
        bundle = self._prepare_dataset()
        output_dir = self.settings.output_dir

        quality = run_quality_checks(
            bundle.frame,
            missing_columns=bundle.missing_columns,
            resolver=self.resolver,
            stop_on_fail=self.settings.stop_on_fail,
        )
        quality_paths = write_quality_artifacts(quality, output_dir)
        if quality.status == "FAIL" and self.settings.stop_on_fail:
            failing = ", ".join(rule.name for rule in quality.rules if rule.status == "FAIL") or "unknown"
            raise RuntimeError(f"Data quality gate failed (rules: {failing})")

        df = apply_filters(bundle.frame, self.settings.filters)
        logger.info("Analyzing %d of %d rows after filters", len(df), len(bundle.frame))

        summary = dashboard_summary(df, granularity=self.settings.granularity, options_source=bundle.frame)
        area_share = calculate_market_share_by_area(df)
        cuisine_share = calculate_market_share_by_cuisine(df)
        area_signals = calculate_market_share_by_area_extended(df)
        channel_map = build_channel_map(
            df,
            min_orders=self.settings.channel_map_min_orders,
            channel=self.settings.channel_filter,
            resolver=self.resolver,
        )
        brands: List[MissingBrand] = missing_brands(df) if self.settings.mapping.brand else []

        period_frame = rows_frame(summary.period_data)
        period_key = "week_label" if self.settings.granularity == "weekly" else "key"
        figures = (
            generate_visuals(
                output_dir=output_dir,
                channel_data=summary.channel_data,
                period_shares=period_frame,
                key_column=period_key,
            )
            if self.settings.include_visuals
            else {}
        )

        summary_payload = build_summary_payload(
            settings=self.settings,
            bundle=bundle,
            summary=summary,
            area_signals=area_signals,
            cuisine_share=cuisine_share,
            channel_map=channel_map,
            quality=quality,
            brands=brands,
            rows_analyzed=len(df),
        )
        report_text = build_markdown_report(
            settings=self.settings,
            summary=summary,
            area_signals=area_signals,
            cuisine_share=cuisine_share,
            channel_map=channel_map,
            quality=quality,
            brands=brands,
            rows_analyzed=len(df),
        )

        summary_path = output_dir / "dashboard_summary.json"
        summary_path.write_text(json.dumps(summary_payload, indent=2), encoding="utf-8")

        report_path = output_dir / "dashboard_report.md"
        report_path.write_text(report_text, encoding="utf-8")

        dataframe_to_csv(channel_summary_frame(summary.channel_data), output_dir / "channel_summary.csv")
        dataframe_to_csv(period_frame, output_dir / "market_share_by_period.csv")
        dataframe_to_csv(rows_frame(area_share), output_dir / "market_share_by_area.csv")
        dataframe_to_csv(rows_frame(cuisine_share), output_dir / "market_share_by_cuisine.csv")
        dataframe_to_csv(rows_frame(area_signals), output_dir / "area_signals.csv")
        dataframe_to_csv(channel_map_frame(channel_map), output_dir / "channel_map.csv")
        if brands:
            dataframe_to_csv(missing_brands_frame(brands), output_dir / "missing_brands.csv")

        settings_snapshot = asdict(self.settings)
        settings_snapshot["data_path"] = str(self.settings.data_path)
        settings_snapshot["output_dir"] = str(self.settings.output_dir)

        return {
            "settings": settings_snapshot,
            "rows": int(len(bundle.frame)),
            "rows_analyzed": int(len(df)),
            "summary": summary,
            "area_share": area_share,
            "cuisine_share": cuisine_share,
            "area_signals": area_signals,
            "channel_map": channel_map,
            "missing_brands": brands,
            "quality": quality,
            "quality_paths": quality_paths,
            "figures": figures,
            "summary_path": summary_path,
            "report_path": report_path,
        }
