"""Signal strength: a coarse 1-5 maturity score for an area."""

from __future__ import annotations

from typing import Tuple


# (score, minimum total orders, minimum distinct cuisines), evaluated top-down.
SIGNAL_TIERS: Tuple[Tuple[int, float, int], ...] = (
    (5, 100_000, 6),
    (4, 50_000, 5),
    (3, 40_000, 4),
    (2, 20_000, 3),
)


def signal_strength(total_orders: float, cuisine_count: int) -> int:
    """Score an area from its order volume and cuisine diversity.

    The first tier where either threshold is met wins; areas meeting none score 1.
    """

    for score, min_orders, min_cuisines in SIGNAL_TIERS:
        if total_orders >= min_orders or cuisine_count >= min_cuisines:
            return score
    return 1
