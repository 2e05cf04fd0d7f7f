"""Grouping of sales rows into per-channel sums."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Hashable, List, Sequence, Tuple, Union

import pandas as pd

from Delivery_analytics.channels import CHANNELS, Channel
from Delivery_analytics.data_loader import CHANNEL_KEY, NUMERIC_COLUMNS, Records, as_frame, is_month_key, is_week_key
from Delivery_analytics.metrics import AggregatedChannelMetric, RawSums, channel_metric


class Dimension(str, Enum):
    CHANNEL = "channel"
    MONTH = "month"
    WEEK = "week"
    AREA = "area"
    CITY = "city"
    CUISINE = "cuisine"


_DIMENSION_COLUMNS: Dict[Dimension, str] = {
    Dimension.CHANNEL: CHANNEL_KEY,
    Dimension.MONTH: "period",
    Dimension.WEEK: "period",
    Dimension.AREA: "area",
    Dimension.CITY: "city",
    Dimension.CUISINE: "cuisine",
}

GroupBy = Union[Dimension, str, Sequence[Union[Dimension, str]]]
GroupKey = Union[str, Tuple[str, ...]]


def _as_dimensions(group_by: GroupBy) -> List[Dimension]:
    items = [group_by] if isinstance(group_by, (Dimension, str)) else list(group_by)
    if not items:
        raise ValueError("At least one grouping dimension is required")
    dimensions = []
    for item in items:
        try:
            dimensions.append(Dimension(item))
        except ValueError:
            raise ValueError(f"Unknown grouping dimension: {item!r}") from None
    return dimensions


def keyed_frame(records: Records, group_by: GroupBy) -> Tuple[pd.DataFrame, List[str]]:
    """Return the recognised-channel rows that carry every grouping key, plus the key
    column names. A month grouping skips week-keyed periods and a week grouping skips
    month-keyed ones; unparseable period labels are kept verbatim."""

    dimensions = _as_dimensions(group_by)
    df = as_frame(records)
    mask = df[CHANNEL_KEY].notna()
    columns: List[str] = []
    for dimension in dimensions:
        column = _DIMENSION_COLUMNS[dimension]
        if column not in columns:
            columns.append(column)
        if dimension is Dimension.CHANNEL:
            continue
        values = df[column]
        mask &= values.map(bool).astype(bool)
        if dimension is Dimension.MONTH:
            mask &= ~values.map(is_week_key).astype(bool)
        elif dimension is Dimension.WEEK:
            mask &= ~values.map(is_month_key).astype(bool)
    return df.loc[mask], columns


def _group_key(value: Hashable, width: int) -> GroupKey:
    if width == 1:
        return value[0] if isinstance(value, tuple) else str(value)
    return tuple(str(part) for part in value)


def aggregate(records: Records, group_by: GroupBy) -> Dict[GroupKey, Dict[Channel, RawSums]]:
    """Sum raw metrics per grouping key and channel.

    Every key seen in the (recognised) data maps to all five channels; inactive channels
    carry zero sums. Rows with an unrecognised channel or an empty key are skipped.
    Keys come back in sorted order so month and week keys read chronologically.
    """

    df, columns = keyed_frame(records, group_by)
    if df.empty:
        return {}

    group_columns = columns if CHANNEL_KEY in columns else [*columns, CHANNEL_KEY]
    channel_position = group_columns.index(CHANNEL_KEY)
    sums = df.groupby(group_columns, sort=True)[list(NUMERIC_COLUMNS)].sum()
    result: Dict[GroupKey, Dict[Channel, RawSums]] = {}
    for index, row in sums.iterrows():
        parts = index if isinstance(index, tuple) else (index,)
        key = _group_key(tuple(parts[: len(columns)]), len(columns))
        channels = result.setdefault(key, {channel: RawSums() for channel in CHANNELS})
        channels[Channel(parts[channel_position])] = RawSums(**{col: float(row[col]) for col in NUMERIC_COLUMNS})
    return {key: result[key] for key in sorted(result)}


def channel_totals(records: Records) -> Dict[Channel, RawSums]:
    df = as_frame(records)
    df = df.loc[df[CHANNEL_KEY].notna()]
    totals = {channel: RawSums() for channel in CHANNELS}
    if df.empty:
        return totals
    sums = df.groupby(CHANNEL_KEY)[list(NUMERIC_COLUMNS)].sum()
    for name, row in sums.iterrows():
        totals[Channel(name)] = RawSums(**{col: float(row[col]) for col in NUMERIC_COLUMNS})
    return totals


def aggregate_by_channel(records: Records) -> List[AggregatedChannelMetric]:
    """Per-channel summary in channel order; channels without orders are left out."""

    totals = channel_totals(records)
    metrics = [channel_metric(channel, totals[channel]) for channel in CHANNELS]
    return [metric for metric in metrics if metric.orders > 0]


def aggregate_weekly_by_channel(records: Records) -> List[AggregatedChannelMetric]:
    """Weekly rows share the monthly channel summary semantics."""

    return aggregate_by_channel(records)
