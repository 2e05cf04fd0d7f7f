"""Per-area channel dominance with map coordinates."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from Delivery_analytics.channels import CHANNELS, Channel, normalize_channel
from Delivery_analytics.data_loader import CHANNEL_KEY, Records, as_frame
from Delivery_analytics.geo import GeoResolver, city_from_area
from Delivery_analytics.metrics_registry import safe_ratio


logger = logging.getLogger(__name__)

DEFAULT_MIN_ORDERS = 1000


@dataclass(frozen=True)
class ChannelBreakdown:
    orders: float
    sales: float
    share: float


@dataclass(frozen=True)
class ChannelMapEntry:
    area: str
    city: str
    lat: float
    lng: float
    total_orders: float
    total_sales: float
    dominant_channel: Channel
    channel_breakdown: Mapping[Channel, ChannelBreakdown]

    def as_dict(self) -> Dict[str, object]:
        row: Dict[str, object] = {
            "area": self.area,
            "city": self.city,
            "lat": self.lat,
            "lng": self.lng,
            "total_orders": self.total_orders,
            "total_sales": self.total_sales,
            "dominant_channel": self.dominant_channel.value,
        }
        for channel, breakdown in self.channel_breakdown.items():
            row[f"{channel.value}_orders"] = breakdown.orders
            row[f"{channel.value}_sales"] = breakdown.sales
            row[f"{channel.value}_share"] = breakdown.share
        return row


def dominant_channel(orders: Mapping[Channel, float]) -> Channel:
    """Channel with the most orders; ties go to the earlier channel, Talabat when all are zero."""

    winner = Channel.TALABAT
    best = 0.0
    for channel in CHANNELS:
        value = float(orders.get(channel, 0.0))
        if value > best:
            best = value
            winner = channel
    return winner


def _channel_filter(channel: Optional[str]) -> Tuple[bool, Optional[Channel]]:
    """Return ``(filtering, selected)``; an unrecognised name filters with no channel."""

    if not channel or channel.lower() == "all":
        return False, None
    return True, normalize_channel(channel)


def build_channel_map(
    records: Records,
    *,
    min_orders: float = DEFAULT_MIN_ORDERS,
    channel: Optional[str] = "all",
    resolver: Optional[GeoResolver] = None,
) -> List[ChannelMapEntry]:
    """Summarise each area's orders and net sales by channel and place it on the map.

    Areas below *min_orders* are dropped. With a *channel* other than ``"all"`` only areas
    where that channel has orders are kept; an unrecognised channel name yields an empty
    map. Entries come back busiest area first.
    """

    filtering, selected = _channel_filter(channel)
    if filtering and selected is None:
        logger.warning("Unknown channel filter %r; channel map is empty", channel)
        return []
    resolver = resolver or GeoResolver()
    df = as_frame(records)
    df = df.loc[df["area"] != ""]
    if df.empty:
        return []

    # The city comes from the first row seen for the area, even if its channel is unknown.
    first_cities = df.groupby("area", sort=False)["city"].first()
    recognised = df.loc[df[CHANNEL_KEY].notna()]
    sums = recognised.groupby(["area", CHANNEL_KEY])[["orders", "net_sales"]].sum()

    by_area: Dict[str, Dict[Channel, Tuple[float, float]]] = {}
    for (area, name), row in sums.iterrows():
        by_area.setdefault(area, {})[Channel(name)] = (float(row["orders"]), float(row["net_sales"]))

    entries: List[ChannelMapEntry] = []
    for area, raw_city in first_cities.items():
        city = raw_city or city_from_area(area, resolver.default_city)
        seen = by_area.get(area, {})
        orders = {item: seen.get(item, (0.0, 0.0))[0] for item in CHANNELS}
        sales = {item: seen.get(item, (0.0, 0.0))[1] for item in CHANNELS}

        total_orders = sum(orders.values())
        total_sales = sum(sales.values())
        if total_orders < min_orders:
            continue
        if selected is not None and orders[selected] == 0:
            continue

        coordinate = resolver.resolve(area, city)
        breakdown = MappingProxyType(
            {
                item: ChannelBreakdown(
                    orders=orders[item],
                    sales=sales[item],
                    share=safe_ratio(orders[item], total_orders, scale=100.0),
                )
                for item in CHANNELS
            }
        )
        entries.append(
            ChannelMapEntry(
                area=str(area),
                city=str(city),
                lat=coordinate.lat,
                lng=coordinate.lng,
                total_orders=total_orders,
                total_sales=total_sales,
                dominant_channel=dominant_channel(orders),
                channel_breakdown=breakdown,
            )
        )

    entries.sort(key=lambda entry: entry.total_orders, reverse=True)
    logger.debug("Channel map holds %d areas (min_orders=%s, channel=%s)", len(entries), min_orders, channel)
    return entries
