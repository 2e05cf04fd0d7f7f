"""Derived metrics computed from aggregated per-channel sums."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping

import pandas as pd

from Delivery_analytics.channels import CHANNELS, CHANNEL_NAMES, Channel
from Delivery_analytics.metrics_registry import safe_ratio


@dataclass(frozen=True)
class RawSums:
    orders: float = 0.0
    net_sales: float = 0.0
    gross_sales: float = 0.0
    ads_spend: float = 0.0
    discount_spend: float = 0.0
    ads_return: float = 0.0

    def as_dict(self) -> Dict[str, float]:
        return {
            "orders": self.orders,
            "net_sales": self.net_sales,
            "gross_sales": self.gross_sales,
            "ads_spend": self.ads_spend,
            "discount_spend": self.discount_spend,
            "ads_return": self.ads_return,
        }


@dataclass(frozen=True)
class AggregatedChannelMetric:
    channel: Channel
    orders: float
    net_sales: float
    gross_sales: float
    ads_spend: float
    discount_spend: float
    ads_return: float
    roas: float
    aov: float

    def as_dict(self) -> Dict[str, object]:
        return {
            "channel": self.channel.value,
            "orders": self.orders,
            "net_sales": self.net_sales,
            "gross_sales": self.gross_sales,
            "ads_spend": self.ads_spend,
            "discount_spend": self.discount_spend,
            "ads_return": self.ads_return,
            "roas": self.roas,
            "aov": self.aov,
        }


def roas(sums: RawSums) -> float:
    return safe_ratio(sums.ads_return, sums.ads_spend)


def aov(sums: RawSums) -> float:
    return safe_ratio(sums.gross_sales, sums.orders)


def channel_metric(channel: Channel, sums: RawSums) -> AggregatedChannelMetric:
    return AggregatedChannelMetric(
        channel=channel,
        orders=sums.orders,
        net_sales=sums.net_sales,
        gross_sales=sums.gross_sales,
        ads_spend=sums.ads_spend,
        discount_spend=sums.discount_spend,
        ads_return=sums.ads_return,
        roas=roas(sums),
        aov=aov(sums),
    )


def market_share_percent(channel_orders: Mapping[Channel, float]) -> Mapping[Channel, float]:
    """Order-count share per channel, in percent.

    Every channel appears in the result. When the total is zero every share is zero.
    """

    total = sum(float(channel_orders.get(channel, 0.0)) for channel in CHANNELS)
    shares = {
        channel: safe_ratio(float(channel_orders.get(channel, 0.0)), total, scale=100.0)
        for channel in CHANNELS
    }
    return MappingProxyType(shares)


def market_share_frame(orders: pd.DataFrame) -> pd.DataFrame:
    """Vectorised market share.

    *orders* is indexed by grouping key with one column per channel name; missing
    channel columns are added as zero. Returns percentages with the same shape.
    """

    frame = orders.reindex(columns=list(CHANNEL_NAMES), fill_value=0.0).astype(float)
    total = frame.sum(axis=1)
    shares = frame.div(total.where(total > 0), axis=0).mul(100.0)
    return shares.fillna(0.0)


def share_mapping(row: pd.Series) -> Mapping[Channel, float]:
    return MappingProxyType({channel: float(row.get(channel.value, 0.0)) for channel in CHANNELS})
