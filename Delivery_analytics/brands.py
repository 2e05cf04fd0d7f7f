"""Brands listed on one delivery channel but missing from another."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import List

import pandas as pd

from Delivery_analytics.channels import Channel
from Delivery_analytics.data_loader import CHANNEL_KEY, Records, as_frame


UNKNOWN_LOCATION = "Unknown"


@dataclass(frozen=True)
class MissingBrand:
    name: str
    cuisine: str
    location: str
    location_count: int


def missing_brands(
    records: Records,
    *,
    present_on: Channel = Channel.TALABAT,
    absent_from: Channel = Channel.CAREEM,
    limit: int = 100,
) -> List[MissingBrand]:
    """Brands selling on *present_on* with no row at all on *absent_from*.

    Rows without a brand or cuisine are ignored. Results are grouped by brand, cuisine
    and area, most rows first (ties by brand name), and capped at *limit*.
    """

    df = as_frame(records)
    df = df.loc[(df["brand"] != "") & df[CHANNEL_KEY].notna()]
    listed = df.loc[df[CHANNEL_KEY] == absent_from.value, "brand"]
    candidates = df.loc[(df[CHANNEL_KEY] == present_on.value) & (df["cuisine"] != "") & ~df["brand"].isin(listed)]
    if candidates.empty:
        return []

    candidates = candidates.assign(location=candidates["area"].where(candidates["area"] != "", UNKNOWN_LOCATION))
    counts = candidates.groupby(["brand", "cuisine", "location"]).size().rename("location_count").reset_index()
    counts = counts.sort_values(["location_count", "brand"], ascending=[False, True], kind="stable").head(limit)
    return [
        MissingBrand(
            name=str(row.brand),
            cuisine=str(row.cuisine),
            location=str(row.location),
            location_count=int(row.location_count),
        )
        for row in counts.itertuples(index=False)
    ]


def missing_brands_frame(brands: List[MissingBrand]) -> pd.DataFrame:
    return pd.DataFrame(
        [asdict(brand) for brand in brands],
        columns=["name", "cuisine", "location", "location_count"],
    )
