from __future__ import annotations

import pytest

from Delivery_analytics.brands import missing_brands, missing_brands_frame
from Delivery_analytics.channels import Channel
from Delivery_analytics.data_loader import SalesRecord
from Delivery_analytics.market_share import WeeklyMarketShareRow
from Delivery_analytics.summary import dashboard_summary


def test_summary_totals_cover_recognised_channels(sample_records):
    summary = dashboard_summary(sample_records)

    assert summary.granularity == "monthly"
    assert summary.total_orders == 100 + 80 + 150 + 50 + 30
    assert summary.total_net_sales == 4000 + 3000 + 6000 + 1800 + 900
    assert summary.total_ads_spend == 600
    assert summary.totals()["total_discount_spend"] == 500
    assert [row.key for row in summary.period_data] == ["2025-01", "2025-02"]
    assert summary.filter_options.areas == ("Dubai Marina", "JBR")


def test_summary_filter_options_from_unfiltered_source(sample_records):
    summary = dashboard_summary(sample_records[:2], options_source=sample_records)

    assert summary.total_orders == 180
    assert summary.filter_options.months == ("2025-01", "2025-02")


def test_weekly_summary_uses_week_rows():
    records = [
        SalesRecord(channel="talabat", period="2025-W04", week_start_date="2025-01-20", orders=9),
        SalesRecord(channel="keeta", period="2025-W04", week_start_date="2025-01-20", orders=1),
    ]
    summary = dashboard_summary(records, granularity="weekly")

    (row,) = summary.period_data
    assert isinstance(row, WeeklyMarketShareRow)
    assert row.market_share[Channel.KEETA] == pytest.approx(10.0)
    assert [item.channel for item in summary.channel_data] == [Channel.TALABAT, Channel.KEETA]


def test_empty_summary():
    summary = dashboard_summary([])

    assert summary.total_orders == 0
    assert summary.channel_data == ()
    assert summary.period_data == ()


def _brand(channel, brand, area="JBR", cuisine="Italian"):
    return SalesRecord(channel=channel, brand=brand, area=area, cuisine=cuisine, orders=1)


def test_missing_brands_on_second_channel():
    records = [
        _brand("talabat", "Pasta Corner", area="Dubai Marina"),
        _brand("talabat", "Pasta Corner", area="Dubai Marina"),
        _brand("talabat", "Spice Route", area="", cuisine="Indian"),
        _brand("talabat", "Burger Yard", cuisine="American"),
        _brand("careem", "Burger Yard", cuisine="American"),
        _brand("talabat", "Anon", cuisine=""),
        _brand("deliveroo", "Wok This Way", cuisine="Asian"),
    ]
    brands = missing_brands(records)

    assert [(item.name, item.location, item.location_count) for item in brands] == [
        ("Pasta Corner", "Dubai Marina", 2),
        ("Spice Route", "Unknown", 1),
    ]


def test_missing_brands_channel_pair_and_limit():
    records = [
        _brand("deliveroo", "Wok This Way", cuisine="Asian"),
        _brand("deliveroo", "Sugar Rush", cuisine="Desserts"),
        _brand("noon", "Sugar Rush", cuisine="Desserts"),
    ]
    brands = missing_brands(records, present_on=Channel.DELIVEROO, absent_from=Channel.NOON, limit=5)
    assert [item.name for item in brands] == ["Wok This Way"]

    assert len(missing_brands(records, present_on=Channel.DELIVEROO, absent_from=Channel.KEETA, limit=1)) == 1
    assert missing_brands([]) == []


def test_missing_brands_frame_columns():
    frame = missing_brands_frame([])
    assert list(frame.columns) == ["name", "cuisine", "location", "location_count"]
