"""Public API for the Delivery_analytics package."""

from .aggregation import Dimension, aggregate, aggregate_by_channel, aggregate_weekly_by_channel
from .channel_map import ChannelMapEntry, build_channel_map
from .channels import CHANNELS, Channel, normalize_channel
from .config import ColumnMapping, DashboardSettings, SalesFilters, settings_from_dict
from .data_loader import SalesRecord, apply_filters, filter_options, load_dataset
from .geo import GeoCoordinate, GeoResolver, city_from_area, resolve
from .market_share import (
    AreaSignal,
    CuisineDetail,
    MarketShareRow,
    WeeklyMarketShareRow,
    calculate_area_monthly_trend,
    calculate_cuisine_detail_by_area,
    calculate_market_share_by_area,
    calculate_market_share_by_area_extended,
    calculate_market_share_by_cuisine,
    calculate_monthly_market_share,
    calculate_weekly_market_share,
)
from .metrics import AggregatedChannelMetric, RawSums, market_share_percent
from .metrics_registry import compute_series, list_metrics
from .pipeline import DashboardPipeline
from .signal_strength import signal_strength
from .summary import DashboardSummary, dashboard_summary

__all__ = [
    "AggregatedChannelMetric",
    "AreaSignal",
    "CHANNELS",
    "Channel",
    "ChannelMapEntry",
    "ColumnMapping",
    "CuisineDetail",
    "DashboardPipeline",
    "DashboardSettings",
    "DashboardSummary",
    "Dimension",
    "GeoCoordinate",
    "GeoResolver",
    "MarketShareRow",
    "RawSums",
    "SalesFilters",
    "SalesRecord",
    "WeeklyMarketShareRow",
    "aggregate",
    "aggregate_by_channel",
    "aggregate_weekly_by_channel",
    "apply_filters",
    "build_channel_map",
    "calculate_area_monthly_trend",
    "calculate_cuisine_detail_by_area",
    "calculate_market_share_by_area",
    "calculate_market_share_by_area_extended",
    "calculate_market_share_by_cuisine",
    "calculate_monthly_market_share",
    "calculate_weekly_market_share",
    "city_from_area",
    "compute_series",
    "dashboard_summary",
    "filter_options",
    "list_metrics",
    "load_dataset",
    "market_share_percent",
    "normalize_channel",
    "resolve",
    "settings_from_dict",
    "signal_strength",
]
