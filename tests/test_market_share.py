from __future__ import annotations

import pandas as pd
import pytest

from Delivery_analytics.aggregation import aggregate_by_channel
from Delivery_analytics.channels import CHANNELS, Channel
from Delivery_analytics.data_loader import SalesRecord
from Delivery_analytics.market_share import (
    calculate_area_monthly_trend,
    calculate_cuisine_detail_by_area,
    calculate_market_share_by_area,
    calculate_market_share_by_area_extended,
    calculate_market_share_by_cuisine,
    calculate_monthly_market_share,
    calculate_weekly_market_share,
)


def test_area_share_two_channels():
    records = [
        SalesRecord(channel="talabat", area="Marina", orders=100),
        SalesRecord(channel="deliveroo", area="Marina", orders=80),
    ]
    (row,) = calculate_market_share_by_area(records)

    assert row.key == "Marina"
    assert row.market_share[Channel.TALABAT] == pytest.approx(55.56, abs=0.01)
    assert row.market_share[Channel.DELIVEROO] == pytest.approx(44.44, abs=0.01)
    assert row.market_share[Channel.CAREEM] == 0.0
    assert row.market_share[Channel.NOON] == 0.0
    assert row.market_share[Channel.KEETA] == 0.0


def test_monthly_share_in_chronological_order(sample_records):
    rows = calculate_monthly_market_share(sample_records)

    assert [row.key for row in rows] == ["2025-01", "2025-02"]
    february = rows[1].market_share
    # Talabat 150, Careem 50, Noon 30 (the empty-area row still counts per month)
    assert february[Channel.TALABAT] == pytest.approx(150 / 230 * 100)
    assert february[Channel.NOON] == pytest.approx(30 / 230 * 100)
    for row in rows:
        assert set(row.market_share) == set(CHANNELS)
        assert sum(row.market_share.values()) == pytest.approx(100.0)


def test_zero_order_area_reports_zero_shares():
    records = [SalesRecord(channel="noon", area="Hessa", orders=0)]
    (row,) = calculate_market_share_by_area(records)

    assert all(value == 0.0 for value in row.market_share.values())


def test_cuisine_share_skips_empty_cuisine(sample_records):
    rows = calculate_market_share_by_cuisine(sample_records)

    assert [row.key for row in rows] == ["American", "Indian", "Italian"]
    assert rows[0].market_share[Channel.TALABAT] == pytest.approx(100.0)


def test_weekly_share_keeps_first_start_date():
    records = [
        SalesRecord(channel="talabat", period="2025-W02", week_start_date="2025-01-06", orders=30),
        SalesRecord(channel="careem", period="2025-W02", week_start_date="2025-01-07", orders=10),
        SalesRecord(channel="keeta", period="2025-W01", week_start_date="2024-12-30", orders=5),
    ]
    rows = calculate_weekly_market_share(records)

    assert [row.week_label for row in rows] == ["2025-W01", "2025-W02"]
    assert rows[1].week_start_date == "2025-01-06"
    assert rows[1].market_share[Channel.TALABAT] == pytest.approx(75.0)
    assert rows[0].market_share[Channel.KEETA] == pytest.approx(100.0)
    assert rows[1].as_dict()["Careem"] == pytest.approx(25.0)


def test_extended_area_signal():
    records = [
        SalesRecord(channel="talabat", city="Dubai", area="Business Bay", cuisine="Italian", orders=30000),
        SalesRecord(channel="careem", city="Abu Dhabi", area="Business Bay", cuisine="Indian", orders=15000),
        SalesRecord(channel="careem", city="Dubai", area="Business Bay", cuisine="", orders=0),
        SalesRecord(channel="unknown", city="Dubai", area="Business Bay", cuisine="Thai", orders=99999),
    ]
    (signal,) = calculate_market_share_by_area_extended(records)

    assert signal.area == "Business Bay"
    assert signal.city == "Dubai"
    assert signal.total_orders == 45000
    assert signal.cuisine_count == 2
    assert signal.signal_strength == 3
    assert signal.market_share[Channel.TALABAT] == pytest.approx(66.67, abs=0.01)
    assert signal.as_dict()["signal_strength"] == 3


def test_cuisine_detail_orders_busiest_first_with_stable_ties():
    records = [
        SalesRecord(channel="talabat", area="JLT", cuisine="Sushi", orders=20),
        SalesRecord(channel="talabat", area="JLT", cuisine="Burgers", orders=50),
        SalesRecord(channel="deliveroo", area="JLT", cuisine="Pizza", orders=20),
        SalesRecord(channel="deliveroo", area="JLT", cuisine="Burgers", orders=50),
        SalesRecord(channel="talabat", area="JVC", cuisine="Sushi", orders=500),
    ]
    details = calculate_cuisine_detail_by_area(records, "JLT")

    assert [detail.cuisine for detail in details] == ["Burgers", "Sushi", "Pizza"]
    assert details[0].total_orders == 100
    assert details[0].market_share[Channel.DELIVEROO] == pytest.approx(50.0)
    assert details[2].market_share[Channel.DELIVEROO] == pytest.approx(100.0)
    assert calculate_cuisine_detail_by_area(records, "Nowhere") == []


def test_area_monthly_trend_uses_exact_area(sample_records):
    rows = calculate_area_monthly_trend(sample_records, "JBR")

    assert [row.key for row in rows] == ["2025-02"]
    assert rows[0].market_share[Channel.TALABAT] == pytest.approx(75.0)
    assert calculate_area_monthly_trend(sample_records, "jbr") == []


def test_monthly_share_same_for_raw_frame_and_mappings():
    rows = [
        {"channel": "talabat", "month": "January-2025", "orders": 60},
        {"channel": "noon", "monthYear": "Jan 2025", "orders": 40},
    ]

    from_mappings = calculate_monthly_market_share(rows)
    from_frame = calculate_monthly_market_share(pd.DataFrame(rows))

    assert [row.key for row in from_frame] == [row.key for row in from_mappings] == ["2025-01"]
    assert from_frame[0].market_share[Channel.NOON] == pytest.approx(40.0)


def test_zero_order_channel_is_dropped_from_aggregation_but_shares_zero():
    records = [
        SalesRecord(channel="talabat", area="Marina", orders=100),
        SalesRecord(channel="noon", area="Marina", orders=0),
    ]

    assert [item.channel for item in aggregate_by_channel(records)] == [Channel.TALABAT]
    (row,) = calculate_market_share_by_area(records)
    assert row.market_share[Channel.NOON] == 0.0
    assert row.market_share[Channel.TALABAT] == 100.0
