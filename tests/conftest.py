from __future__ import annotations

from typing import List

import pandas as pd
import pytest

from Delivery_analytics.data_loader import SalesRecord


@pytest.fixture
def sample_records() -> List[SalesRecord]:
    return [
        SalesRecord(
            channel="talabat",
            city="Dubai",
            area="Dubai Marina",
            cuisine="Italian",
            period="2025-01",
            orders=100,
            net_sales=4000,
            gross_sales=5000,
            ads_spend=200,
            discount_spend=100,
            ads_return=800,
        ),
        SalesRecord(
            channel="Deliveroo",
            city="Dubai",
            area="Dubai Marina",
            cuisine="Italian",
            period="2025-01",
            orders=80,
            net_sales=3000,
            gross_sales=3600,
            ads_spend=0,
            discount_spend=150,
            ads_return=0,
        ),
        SalesRecord(
            channel="TALABAT",
            city="Dubai",
            area="JBR",
            cuisine="American",
            period="2025-02",
            orders=150,
            net_sales=6000,
            gross_sales=7000,
            ads_spend=300,
            discount_spend=200,
            ads_return=1200,
        ),
        SalesRecord(
            channel="careem",
            city="Dubai",
            area="JBR",
            cuisine="Indian",
            period="2025-02",
            orders=50,
            net_sales=1800,
            gross_sales=2000,
            ads_spend=100,
            discount_spend=50,
            ads_return=250,
        ),
        SalesRecord(
            channel="uber eats",
            city="Dubai",
            area="Dubai Marina",
            cuisine="Italian",
            period="2025-01",
            orders=999,
            net_sales=9999,
            gross_sales=9999,
        ),
        SalesRecord(
            channel="noon",
            city="Dubai",
            area="",
            cuisine="",
            period="2025-02",
            orders=30,
            net_sales=900,
            gross_sales=1000,
        ),
    ]


@pytest.fixture
def export_frame() -> pd.DataFrame:
    """Raw warehouse-style export with camelCase headers and formatted numbers."""

    return pd.DataFrame(
        {
            "channel": ["talabat", "deliveroo", "careem", "Keeta", "unknown"],
            "city": ["Dubai", "Dubai", "Abu Dhabi", "Sharjah", "Dubai"],
            "area": ["Dubai Marina", "Dubai Marina", "Khalifa City", "Al Majaz", "JBR"],
            "cuisine": ["Italian", "Italian", "Middle Eastern", "Desserts", "Italian"],
            "monthYear": ["January-2025", "Jan 2025", "2025-2", "2025-02", "2025-02"],
            "orders": ["1,200", "800", "1500", "300", "10"],
            "netSales": ["AED 54,000", "36000", "52500", "9000", "100"],
            "grossSales": ["60000", "40000", "57000", "9900", "120"],
            "adsSpend": ["3000", "0", "1500", "300", "0"],
            "discountSpend": ["2400", "1600", "1800", "500", "0"],
            "adsReturn": ["15000", "0", "6000", "900", "0"],
        }
    )
