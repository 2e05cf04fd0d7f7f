"""Per-channel series backing the dashboard bar and pie charts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence

import pandas as pd

from Delivery_analytics.channels import Channel, channel_color
from Delivery_analytics.metrics import AggregatedChannelMetric
from Delivery_analytics.metrics_registry import metric_function


@dataclass(frozen=True)
class ChartPoint:
    channel: Channel
    value: float
    color: str


# series name -> metric registry key, or None to read the summed field directly
CHART_SERIES: Dict[str, str | None] = {
    "orders": None,
    "net_sales": None,
    "ads_spend_vs_gross": "ADS_SHARE",
    "discount_spend_vs_gross": "DISCOUNT_SHARE",
    "total_marketing_vs_gross": "MARKETING_SHARE",
    "roas": "ROAS",
    "aov": "AOV",
}


def _series_value(metric: AggregatedChannelMetric, name: str) -> float:
    registry_key = CHART_SERIES[name]
    if registry_key is None:
        return float(getattr(metric, name))
    return metric_function(registry_key)(metric.as_dict())


def dashboard_chart_data(channel_data: Sequence[AggregatedChannelMetric]) -> Dict[str, List[ChartPoint]]:
    """One point per summarised channel for every chart series, in summary order."""

    return {
        name: [
            ChartPoint(channel=metric.channel, value=_series_value(metric, name), color=channel_color(metric.channel))
            for metric in channel_data
        ]
        for name in CHART_SERIES
    }


def chart_frame(chart_data: Dict[str, List[ChartPoint]]) -> pd.DataFrame:
    """Long format (series, channel, value, color) for plotting libraries."""

    rows = [
        {"series": name, "channel": point.channel.value, "value": point.value, "color": point.color}
        for name, points in chart_data.items()
        for point in points
    ]
    return pd.DataFrame(rows, columns=["series", "channel", "value", "color"])
