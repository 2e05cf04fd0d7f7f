"""Display helpers shared by the report, CLI and dashboard."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Tuple


# Checked in order; the first keyword found in the lower-cased cuisine wins.
CUISINE_ICONS: Tuple[Tuple[str, str], ...] = (
    ("American", "🍔"),
    ("Fast Food", "🍔"),
    ("Asian", "🥢"),
    ("Beverages", "☕"),
    ("Breakfast", "🥐"),
    ("Bakery", "🥐"),
    ("Desserts", "🍰"),
    ("Sweets", "🍰"),
    ("Healthy", "🥗"),
    ("Special Diets", "🥗"),
    ("Indian", "🔥"),
    ("International", "🌍"),
    ("Italian", "🍝"),
    ("Mexican", "🌮"),
    ("Middle Eastern", "🥙"),
    ("Seafood", "🐟"),
    ("Shawarma", "🥙"),
    ("Soup", "🍜"),
    ("Turkish", "🥘"),
)
DEFAULT_CUISINE_ICON = "🍽️"


def cuisine_icon(cuisine: str) -> str:
    lowered = (cuisine or "").lower()
    for keyword, icon in CUISINE_ICONS:
        if keyword.lower() in lowered:
            return icon
    return DEFAULT_CUISINE_ICON


def _finite(value: float) -> float:
    # NaN and infinities render as zero.
    return value if math.isfinite(value) else 0.0


def _rounded(value: float) -> int:
    # Half away from zero, the way the dashboard's number formatter rounds.
    return int(Decimal(str(_finite(value))).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_number(value: float) -> str:
    """``1234.5`` -> ``"1,235"``."""

    return f"{_rounded(value):,}"


def format_currency(value: float) -> str:
    """``1234.5`` -> ``"AED 1,235"``; negatives read ``"-AED 1,235"``."""

    amount = _rounded(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}AED {abs(amount):,}"


def format_percentage(value: float) -> str:
    return f"{_finite(value):.1f}%"
