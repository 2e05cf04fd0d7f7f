from __future__ import annotations

import pytest

from Delivery_analytics.aggregation import aggregate_by_channel
from Delivery_analytics.data_loader import SalesRecord
from Delivery_analytics.reporting import channel_summary_frame


def test_channel_summary_carries_retention_and_spend_shares():
    records = [
        SalesRecord(channel="careem", orders=10, net_sales=900, gross_sales=1000, ads_spend=50, discount_spend=30),
        SalesRecord(channel="noon", orders=5, net_sales=200, gross_sales=0),
    ]
    frame = channel_summary_frame(aggregate_by_channel(records))

    assert frame["channel"].tolist() == ["Careem", "Noon"]
    careem, noon = frame.to_dict(orient="records")
    assert careem["retention"] == pytest.approx(0.9)
    assert careem["ads_share"] == pytest.approx(5.0)
    assert careem["discount_share"] == pytest.approx(3.0)
    assert careem["marketing_share"] == pytest.approx(8.0)
    assert noon["retention"] == 0.0
    assert noon["marketing_share"] == 0.0


def test_empty_channel_summary_keeps_ratio_columns():
    frame = channel_summary_frame([])

    assert frame.empty
    assert {"retention", "ads_share", "discount_share", "marketing_share"} <= set(frame.columns)
