"""Streamlit dashboard over a delivery sales export."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from Delivery_analytics.brands import missing_brands, missing_brands_frame
from Delivery_analytics.channel_map import build_channel_map
from Delivery_analytics.channels import CHANNEL_COLORS, CHANNEL_NAMES, CHANNELS
from Delivery_analytics.chart_data import ChartPoint, dashboard_chart_data
from Delivery_analytics.config import ColumnMapping, DashboardSettings, SalesFilters, settings_from_dict
from Delivery_analytics.data_loader import apply_filters, load_dataset
from Delivery_analytics.formatting import cuisine_icon, format_currency, format_number, format_percentage
from Delivery_analytics.geo import GeoResolver
from Delivery_analytics.market_share import (
    calculate_area_monthly_trend,
    calculate_cuisine_detail_by_area,
    calculate_market_share_by_area_extended,
    calculate_market_share_by_cuisine,
)
from Delivery_analytics.quality import run_quality_checks
from Delivery_analytics.reporting import rows_frame
from Delivery_analytics.summary import dashboard_summary

PAGE_CONFIG = {
    "page_title": "Delivery Market Dashboard",
    "layout": "wide",
    "initial_sidebar_state": "expanded",
}

st.set_page_config(**PAGE_CONFIG)

CONFIG_ENV = "DELIVERY_DASHBOARD_CONFIG"
_COLORS = {channel.value: color for channel, color in CHANNEL_COLORS.items()}


def _candidate_configs() -> List[Path]:
    override = os.getenv(CONFIG_ENV)
    candidates = [Path(override)] if override else []
    candidates.append(Path.cwd() / "configs" / "dashboard.json")
    candidates.append(Path(__file__).resolve().parent.parent / "configs" / "dashboard.json")
    return candidates


def _resolve_settings() -> Optional[DashboardSettings]:
    for candidate in _candidate_configs():
        if candidate.exists():
            payload = json.loads(candidate.read_text(encoding="utf-8"))
            return settings_from_dict(payload, base_path=candidate.parent)
    return None


def _mtime(path: Path) -> float:
    try:
        return path.stat().st_mtime
    except FileNotFoundError:
        return 0.0


@st.cache_data(show_spinner=False)
def _load_frame(path_str: str, granularity: str, stamp: float) -> pd.DataFrame:
    if not path_str or stamp <= 0:
        return pd.DataFrame()
    settings = _resolve_settings()
    mapping = settings.mapping if settings else ColumnMapping()
    return load_dataset(Path(path_str), mapping, granularity=granularity).frame


def _sidebar_filters(frame: pd.DataFrame) -> SalesFilters:
    st.sidebar.subheader("Filters")

    def _choice(label: str, column: str) -> tuple[str, ...]:
        options = ["all", *sorted({value for value in frame[column].tolist() if value})]
        selected = st.sidebar.selectbox(label, options, index=0)
        return () if selected == "all" else (selected,)

    return SalesFilters(
        months=_choice("Period", "period"),
        cities=_choice("City", "city"),
        areas=_choice("Area", "area"),
        cuisines=_choice("Cuisine", "cuisine"),
    )


def _bar_chart(points: List[ChartPoint], title: str, *, suffix: str = "") -> go.Figure:
    fig = go.Figure(
        go.Bar(
            x=[point.channel.value for point in points],
            y=[point.value for point in points],
            marker_color=[point.color for point in points],
        )
    )
    fig.update_layout(title=title, yaxis_ticksuffix=suffix, margin=dict(l=20, r=20, t=50, b=20), height=320)
    return fig


def _share_chart(shares: pd.DataFrame, key_column: str, title: str) -> go.Figure:
    fig = go.Figure()
    for name in CHANNEL_NAMES:
        fig.add_trace(go.Bar(x=shares[key_column], y=shares[name], name=name, marker_color=_COLORS[name]))
    fig.update_layout(barmode="stack", title=title, yaxis_ticksuffix="%", yaxis_range=[0, 100], height=380)
    return fig


def render_overview(frame: pd.DataFrame, settings: DashboardSettings) -> None:
    st.title("Overview")
    summary = dashboard_summary(frame, granularity=settings.granularity)
    cols = st.columns(5)
    cols[0].metric("Orders", format_number(summary.total_orders))
    cols[1].metric("Net sales", format_currency(summary.total_net_sales))
    cols[2].metric("Gross sales", format_currency(summary.total_gross_sales))
    cols[3].metric("Ads spend", format_currency(summary.total_ads_spend))
    cols[4].metric("Discount spend", format_currency(summary.total_discount_spend))

    if not summary.channel_data:
        st.info("No orders for the current filters.")
        return

    charts = dashboard_chart_data(summary.channel_data)
    left, right = st.columns(2)
    left.plotly_chart(_bar_chart(charts["orders"], "Orders"), use_container_width=True)
    right.plotly_chart(_bar_chart(charts["net_sales"], "Net sales (AED)"), use_container_width=True)
    left.plotly_chart(_bar_chart(charts["ads_spend_vs_gross"], "Ads spend vs gross", suffix="%"), use_container_width=True)
    right.plotly_chart(
        _bar_chart(charts["discount_spend_vs_gross"], "Discount spend vs gross", suffix="%"), use_container_width=True
    )
    left.plotly_chart(_bar_chart(charts["roas"], "ROAS"), use_container_width=True)
    right.plotly_chart(_bar_chart(charts["aov"], "AOV (AED)"), use_container_width=True)

    periods = rows_frame(summary.period_data)
    if not periods.empty:
        key = "week_label" if settings.granularity == "weekly" else "key"
        st.plotly_chart(_share_chart(periods, key, "Market share over time"), use_container_width=True)


def render_areas(frame: pd.DataFrame, settings: DashboardSettings) -> None:
    st.title("Area level")
    signals = calculate_market_share_by_area_extended(frame)
    if not signals:
        st.info("No area data for the current filters.")
        return
    table = rows_frame(signals)
    table["signal"] = table["signal_strength"].map(lambda score: "▮" * int(score))
    st.dataframe(table, hide_index=True, use_container_width=True)

    area = st.selectbox("Drill into area", [signal.area for signal in signals])
    detail = calculate_cuisine_detail_by_area(frame, area)
    if detail:
        detail_frame = rows_frame(detail)
        detail_frame.insert(0, "icon", [cuisine_icon(row.cuisine) for row in detail])
        st.subheader(f"Cuisines in {area}")
        st.dataframe(detail_frame, hide_index=True, use_container_width=True)
    trend = rows_frame(calculate_area_monthly_trend(frame, area))
    if not trend.empty:
        st.plotly_chart(_share_chart(trend, "key", f"Monthly market share in {area}"), use_container_width=True)


def render_cuisines(frame: pd.DataFrame, settings: DashboardSettings) -> None:
    st.title("Cuisine level")
    rows = calculate_market_share_by_cuisine(frame)
    if not rows:
        st.info("No cuisine data for the current filters.")
        return
    table = rows_frame(rows)
    table.insert(0, "icon", [cuisine_icon(row.key) for row in rows])
    for name in CHANNEL_NAMES:
        table[name] = table[name].map(format_percentage)
    st.dataframe(table, hide_index=True, use_container_width=True)


def render_channel_map(frame: pd.DataFrame, settings: DashboardSettings) -> None:
    st.title("Channel map")
    channel = st.selectbox("Channel", ["all", *CHANNEL_NAMES], index=0)
    min_orders = st.number_input("Minimum orders per area", min_value=0, value=int(settings.channel_map_min_orders), step=100)
    entries = build_channel_map(
        frame,
        min_orders=min_orders,
        channel=channel,
        resolver=GeoResolver(default_city=settings.default_city),
    )
    if not entries:
        st.info("No area reaches the order threshold.")
        return

    fig = go.Figure()
    for item in CHANNELS:
        subset = [entry for entry in entries if entry.dominant_channel is item]
        if not subset:
            continue
        fig.add_trace(
            go.Scattergeo(
                lat=[entry.lat for entry in subset],
                lon=[entry.lng for entry in subset],
                text=[
                    f"{entry.area} ({entry.city})<br>{format_number(entry.total_orders)} orders"
                    f"<br>{item.value}: {format_percentage(entry.channel_breakdown[item].share)}"
                    for entry in subset
                ],
                hoverinfo="text",
                name=item.value,
                marker=dict(
                    color=CHANNEL_COLORS[item],
                    size=[max(6.0, min(30.0, entry.total_orders ** 0.5 / 10)) for entry in subset],
                    line=dict(width=0.5, color="#1F2937"),
                ),
            )
        )
    fig.update_geos(fitbounds="locations", showcountries=True, showland=True, landcolor="#F3F4F6")
    fig.update_layout(height=600, margin=dict(l=0, r=0, t=20, b=0), legend_title="Dominant channel")
    st.plotly_chart(fig, use_container_width=True)
    st.dataframe(rows_frame(entries), hide_index=True, use_container_width=True)


def render_missing_brands(frame: pd.DataFrame, settings: DashboardSettings) -> None:
    st.title("Missing brands")
    if not settings.mapping.brand:
        st.info("Map a `brand` column in the configuration to enable this view.")
        return
    brands = missing_brands(frame)
    if not brands:
        st.success("Every Talabat brand is also listed on Careem.")
        return
    table = missing_brands_frame(brands)
    table.insert(0, "icon", [cuisine_icon(brand.cuisine) for brand in brands])
    st.dataframe(table, hide_index=True, use_container_width=True)


def render_quality(frame: pd.DataFrame, settings: DashboardSettings) -> None:
    st.title("Data quality")
    report = run_quality_checks(frame, resolver=GeoResolver(default_city=settings.default_city))
    banner = {"PASS": st.success, "WARN": st.warning, "FAIL": st.error}[report.status]
    banner(f"Overall status: {report.status}")
    st.dataframe(
        pd.DataFrame([{"rule": rule.name, "status": rule.status, "detail": rule.detail} for rule in report.rules]),
        hide_index=True,
        use_container_width=True,
    )
    st.json(report.stats)


def main() -> None:
    settings = _resolve_settings()
    if settings is None:
        st.error(f"No dashboard configuration found. Set {CONFIG_ENV} or add configs/dashboard.json.")
        return
    frame = _load_frame(str(settings.data_path), settings.granularity, _mtime(settings.data_path))
    if frame.empty:
        st.warning(f"No rows loaded from `{settings.data_path}`.")
        return

    st.sidebar.title("Navigation")
    section = st.sidebar.radio(
        "Go to",
        ("Overview", "Area level", "Cuisine level", "Channel map", "Missing brands", "Data quality"),
    )
    filtered = apply_filters(frame, _sidebar_filters(frame))
    renderers: Dict[str, Callable[[pd.DataFrame, DashboardSettings], None]] = {
        "Overview": render_overview,
        "Area level": render_areas,
        "Cuisine level": render_cuisines,
        "Channel map": render_channel_map,
        "Missing brands": render_missing_brands,
        "Data quality": render_quality,
    }
    renderer = renderers[section]
    renderer(frame if section == "Data quality" else filtered, settings)


if __name__ == "__main__":  # pragma: no cover
    main()
