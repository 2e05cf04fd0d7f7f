"""Headline totals plus the channel and period views shown on the dashboard landing page."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence, Union

from Delivery_analytics.aggregation import aggregate_by_channel, aggregate_weekly_by_channel
from Delivery_analytics.data_loader import FilterOptions, Records, as_frame, filter_options
from Delivery_analytics.market_share import (
    MarketShareRow,
    WeeklyMarketShareRow,
    calculate_monthly_market_share,
    calculate_weekly_market_share,
)
from Delivery_analytics.metrics import AggregatedChannelMetric


PeriodRow = Union[MarketShareRow, WeeklyMarketShareRow]


@dataclass(frozen=True)
class DashboardSummary:
    granularity: str
    total_orders: float
    total_net_sales: float
    total_gross_sales: float
    total_ads_spend: float
    total_discount_spend: float
    channel_data: Sequence[AggregatedChannelMetric]
    period_data: Sequence[PeriodRow]
    filter_options: FilterOptions

    def totals(self) -> Dict[str, float]:
        return {
            "total_orders": self.total_orders,
            "total_net_sales": self.total_net_sales,
            "total_gross_sales": self.total_gross_sales,
            "total_ads_spend": self.total_ads_spend,
            "total_discount_spend": self.total_discount_spend,
        }


def dashboard_summary(
    records: Records,
    *,
    granularity: str = "monthly",
    options_source: Records | None = None,
) -> DashboardSummary:
    """Summarise *records*; totals are taken over the per-channel summary rows.

    Filter options come from *options_source* (typically the unfiltered dataset) when given.
    """

    df = as_frame(records)
    if granularity == "weekly":
        channel_data: List[AggregatedChannelMetric] = aggregate_weekly_by_channel(df)
        period_data: List[PeriodRow] = list(calculate_weekly_market_share(df))
    else:
        channel_data = aggregate_by_channel(df)
        period_data = list(calculate_monthly_market_share(df))

    return DashboardSummary(
        granularity=granularity,
        total_orders=sum(item.orders for item in channel_data),
        total_net_sales=sum(item.net_sales for item in channel_data),
        total_gross_sales=sum(item.gross_sales for item in channel_data),
        total_ads_spend=sum(item.ads_spend for item in channel_data),
        total_discount_spend=sum(item.discount_spend for item in channel_data),
        channel_data=tuple(channel_data),
        period_data=tuple(period_data),
        filter_options=filter_options(df if options_source is None else options_source),
    )
