"""Order-count market share breakdowns by period, area and cuisine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping

import pandas as pd

from Delivery_analytics.aggregation import Dimension, keyed_frame
from Delivery_analytics.channels import CHANNEL_NAMES, CHANNELS, Channel
from Delivery_analytics.data_loader import CHANNEL_KEY, Records, as_frame
from Delivery_analytics.metrics import market_share_frame, share_mapping
from Delivery_analytics.signal_strength import signal_strength


def _share_columns(market_share: Mapping[Channel, float]) -> Dict[str, float]:
    return {channel.value: float(market_share.get(channel, 0.0)) for channel in CHANNELS}


@dataclass(frozen=True)
class MarketShareRow:
    key: str
    market_share: Mapping[Channel, float]

    def as_dict(self) -> Dict[str, object]:
        return {"key": self.key, **_share_columns(self.market_share)}


@dataclass(frozen=True)
class WeeklyMarketShareRow:
    week_label: str
    week_start_date: str
    market_share: Mapping[Channel, float]

    def as_dict(self) -> Dict[str, object]:
        return {
            "week_label": self.week_label,
            "week_start_date": self.week_start_date,
            **_share_columns(self.market_share),
        }


@dataclass(frozen=True)
class AreaSignal:
    area: str
    city: str
    market_share: Mapping[Channel, float]
    total_orders: float
    cuisine_count: int
    signal_strength: int

    def as_dict(self) -> Dict[str, object]:
        return {
            "area": self.area,
            "city": self.city,
            "total_orders": self.total_orders,
            "cuisine_count": self.cuisine_count,
            "signal_strength": self.signal_strength,
            **_share_columns(self.market_share),
        }


@dataclass(frozen=True)
class CuisineDetail:
    cuisine: str
    market_share: Mapping[Channel, float]
    total_orders: float

    def as_dict(self) -> Dict[str, object]:
        return {"cuisine": self.cuisine, "total_orders": self.total_orders, **_share_columns(self.market_share)}


def _orders_by_key(df: pd.DataFrame, column: str, *, sort: bool = True) -> pd.DataFrame:
    """Orders per key (rows) and channel name (columns); absent channels are zero."""

    if df.empty:
        return pd.DataFrame(columns=list(CHANNEL_NAMES), dtype=float)
    grouped = df.groupby([column, CHANNEL_KEY], sort=sort)["orders"].sum()
    table = grouped.unstack(CHANNEL_KEY, fill_value=0.0)
    if not sort:
        table = table.reindex(pd.unique(df[column]))
    return table.reindex(columns=list(CHANNEL_NAMES), fill_value=0.0).fillna(0.0).astype(float)


def _share_rows(df: pd.DataFrame, column: str) -> List[MarketShareRow]:
    shares = market_share_frame(_orders_by_key(df, column))
    return [MarketShareRow(key=str(key), market_share=share_mapping(row)) for key, row in shares.iterrows()]


def _area_subset(records: Records, area: str) -> pd.DataFrame:
    df = as_frame(records)
    return df.loc[df["area"] == area]


def calculate_monthly_market_share(records: Records) -> List[MarketShareRow]:
    """Market share per month, in chronological order."""

    df, _ = keyed_frame(records, Dimension.MONTH)
    return _share_rows(df, "period")


def calculate_weekly_market_share(records: Records) -> List[WeeklyMarketShareRow]:
    """Market share per ``YYYY-Www`` key; the start date is the first one seen for the week."""

    df, _ = keyed_frame(records, Dimension.WEEK)
    shares = market_share_frame(_orders_by_key(df, "period"))
    if df.empty:
        return []
    start_dates = df.groupby("period", sort=True)["week_start_date"].first()
    return [
        WeeklyMarketShareRow(
            week_label=str(week),
            week_start_date=str(start_dates.get(week, "")),
            market_share=share_mapping(row),
        )
        for week, row in shares.iterrows()
    ]


def calculate_market_share_by_area(records: Records) -> List[MarketShareRow]:
    df, _ = keyed_frame(records, Dimension.AREA)
    return _share_rows(df, "area")


def calculate_market_share_by_cuisine(records: Records) -> List[MarketShareRow]:
    df, _ = keyed_frame(records, Dimension.CUISINE)
    return _share_rows(df, "cuisine")


def calculate_market_share_by_area_extended(records: Records) -> List[AreaSignal]:
    """Per-area market share with order volume, cuisine diversity and signal strength.

    The city is the one carried by the first record seen for the area. Only rows with a
    recognised channel count towards orders and cuisines.
    """

    df, _ = keyed_frame(records, Dimension.AREA)
    if df.empty:
        return []

    orders = _orders_by_key(df, "area")
    shares = market_share_frame(orders)
    totals = orders.sum(axis=1)
    cities = df.groupby("area", sort=True)["city"].first()
    with_cuisine = df.loc[df["cuisine"] != ""]
    cuisine_counts = with_cuisine.groupby("area")["cuisine"].nunique()

    signals: List[AreaSignal] = []
    for area, row in shares.iterrows():
        total = float(totals.get(area, 0.0))
        cuisine_count = int(cuisine_counts.get(area, 0))
        signals.append(
            AreaSignal(
                area=str(area),
                city=str(cities.get(area, "")),
                market_share=share_mapping(row),
                total_orders=total,
                cuisine_count=cuisine_count,
                signal_strength=signal_strength(total, cuisine_count),
            )
        )
    return signals


def calculate_cuisine_detail_by_area(records: Records, area: str) -> List[CuisineDetail]:
    """Cuisine breakdown inside one area, busiest cuisine first.

    Cuisines with equal order totals keep the order in which they first appear.
    """

    df, _ = keyed_frame(_area_subset(records, area), Dimension.CUISINE)
    if df.empty:
        return []

    orders = _orders_by_key(df, "cuisine", sort=False)
    totals = orders.sum(axis=1).sort_values(ascending=False, kind="stable")
    shares = market_share_frame(orders)
    return [
        CuisineDetail(
            cuisine=str(cuisine),
            market_share=share_mapping(shares.loc[cuisine]),
            total_orders=float(total),
        )
        for cuisine, total in totals.items()
    ]


def calculate_area_monthly_trend(records: Records, area: str) -> List[MarketShareRow]:
    """Monthly market share restricted to rows of exactly *area*."""

    return calculate_monthly_market_share(_area_subset(records, area))
