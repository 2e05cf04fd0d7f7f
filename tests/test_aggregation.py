from __future__ import annotations

import pytest

from Delivery_analytics.aggregation import Dimension, aggregate, aggregate_by_channel, aggregate_weekly_by_channel
from Delivery_analytics.channels import CHANNELS, Channel
from Delivery_analytics.data_loader import SalesRecord


def test_aggregate_by_area_fills_every_channel(sample_records):
    result = aggregate(sample_records, Dimension.AREA)

    # The empty-area Noon row and the unknown "uber eats" row are skipped.
    assert list(result) == ["Dubai Marina", "JBR"]
    for channels in result.values():
        assert set(channels) == set(CHANNELS)

    marina = result["Dubai Marina"]
    assert marina[Channel.TALABAT].orders == 100
    assert marina[Channel.DELIVEROO].orders == 80
    assert marina[Channel.CAREEM].orders == 0
    assert marina[Channel.NOON].net_sales == 0
    assert result["JBR"][Channel.TALABAT].ads_return == 1200


def test_aggregate_by_composite_key(sample_records):
    result = aggregate(sample_records, [Dimension.MONTH, Dimension.AREA])

    assert list(result) == [("2025-01", "Dubai Marina"), ("2025-02", "JBR")]
    assert result[("2025-02", "JBR")][Channel.CAREEM].orders == 50


def test_aggregate_accepts_dimension_names(sample_records):
    assert aggregate(sample_records, "cuisine") == aggregate(sample_records, Dimension.CUISINE)


def test_aggregate_by_channel_dimension(sample_records):
    result = aggregate(sample_records, Dimension.CHANNEL)

    assert set(result) == {"Talabat", "Deliveroo", "Careem", "Noon"}
    assert result["Talabat"][Channel.TALABAT].orders == 250
    assert result["Talabat"][Channel.CAREEM].orders == 0


def test_unknown_dimension_is_rejected(sample_records):
    with pytest.raises(ValueError):
        aggregate(sample_records, "brand")
    with pytest.raises(ValueError):
        aggregate(sample_records, [])


def test_week_keys_sort_chronologically():
    records = [
        SalesRecord(channel="talabat", period="2024-W10", orders=5),
        SalesRecord(channel="talabat", period="2024-W09", orders=3),
        SalesRecord(channel="careem", period="2025-W01", orders=7),
        SalesRecord(channel="careem", period="2025-01", orders=7),
    ]
    result = aggregate(records, Dimension.WEEK)

    assert list(result) == ["2024-W09", "2024-W10", "2025-W01"]


def test_month_grouping_skips_week_keys():
    records = [
        SalesRecord(channel="talabat", period="2025-02", orders=5),
        SalesRecord(channel="talabat", period="2025-W05", orders=3),
    ]
    assert list(aggregate(records, Dimension.MONTH)) == ["2025-02"]


def test_empty_input_gives_empty_result():
    assert aggregate([], Dimension.AREA) == {}
    assert aggregate_by_channel([]) == []


def test_channel_summary_in_channel_order(sample_records):
    summary = aggregate_by_channel(sample_records)

    assert [item.channel for item in summary] == [Channel.TALABAT, Channel.DELIVEROO, Channel.CAREEM, Channel.NOON]
    talabat = summary[0]
    assert talabat.orders == 250
    assert talabat.net_sales == 10000
    assert talabat.roas == pytest.approx(2000 / 500)
    assert talabat.aov == pytest.approx(12000 / 250)


def test_zero_order_channel_dropped_from_summary_but_kept_in_shares():
    records = [
        SalesRecord(channel="talabat", area="Dubai Marina", orders=100, gross_sales=1000),
        SalesRecord(channel="noon", area="Dubai Marina", orders=0, gross_sales=0),
    ]
    summary = aggregate_by_channel(records)
    assert [item.channel for item in summary] == [Channel.TALABAT]

    by_area = aggregate(records, Dimension.AREA)
    assert by_area["Dubai Marina"][Channel.NOON].orders == 0


def test_zero_spend_gives_zero_ratios():
    records = [SalesRecord(channel="deliveroo", orders=10, gross_sales=0, ads_spend=0, ads_return=50)]
    (metric,) = aggregate_by_channel(records)

    assert metric.roas == 0.0
    assert metric.aov == 0.0


def test_weekly_summary_matches_monthly_semantics(sample_records):
    assert aggregate_weekly_by_channel(sample_records) == aggregate_by_channel(sample_records)
