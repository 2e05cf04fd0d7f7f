"""Centralised delivery KPI registry.

All ratios read the canonical sales columns so the channel summary, chart series and
report tables agree. Supported metrics (case-insensitive):

* ``ROAS``            = ads_return / ads_spend
* ``AOV``             = gross_sales / orders
* ``RETENTION``       = net_sales / gross_sales
* ``ADS_SHARE``       = ads_spend / gross_sales * 100
* ``DISCOUNT_SHARE``  = discount_spend / gross_sales * 100
* ``MARKETING_SHARE`` = (ads_spend + discount_spend) / gross_sales * 100

Each ratio is zero guarded: a denominator ``<= 0`` (or missing) yields ``0.0``, never
``NaN`` or ``inf``. A zero therefore also stands for "no spend" or "no orders".
"""

from __future__ import annotations

import math
from typing import Callable, Dict, Iterable, List, Tuple

import numpy as np
import pandas as pd


_Parts = Tuple[Tuple[str, ...], str, float]

# metric -> (numerator columns, denominator column, scale)
_DEFINITIONS: Dict[str, _Parts] = {
    "ROAS": (("ads_return",), "ads_spend", 1.0),
    "AOV": (("gross_sales",), "orders", 1.0),
    "RETENTION": (("net_sales",), "gross_sales", 1.0),
    "ADS_SHARE": (("ads_spend",), "gross_sales", 100.0),
    "DISCOUNT_SHARE": (("discount_spend",), "gross_sales", 100.0),
    "MARKETING_SHARE": (("ads_spend", "discount_spend"), "gross_sales", 100.0),
}


def list_metrics() -> List[str]:
    """Return the list of supported metric names."""

    return list(_DEFINITIONS)


def safe_ratio(numerator: float, denominator: float, *, scale: float = 1.0) -> float:
    """Scalar ratio with the zero-on-empty policy."""

    if denominator is None or not math.isfinite(denominator) or denominator <= 0:
        return 0.0
    value = float(numerator) / float(denominator) * scale
    return value if math.isfinite(value) else 0.0


def compute_series(df: pd.DataFrame, metrics: Iterable[str]) -> pd.DataFrame:
    """Compute multiple KPI series against *df* using canonical column names."""

    metrics_upper = [metric.upper() for metric in metrics]
    unknown = [m for m in metrics_upper if m not in _DEFINITIONS]
    if unknown:
        raise ValueError(f"Unsupported metrics requested: {unknown}")

    results: Dict[str, pd.Series] = {}
    for metric in metrics_upper:
        numerators, denominator, scale = _DEFINITIONS[metric]
        numerator = sum((_ensure_float(df, column) for column in numerators), start=pd.Series(0.0, index=df.index))
        results[metric] = _safe_ratio(numerator, _ensure_float(df, denominator)) * scale

    frame = pd.DataFrame(results, index=df.index)
    return frame[[m for m in metrics_upper]]


def metric_function(metric: str) -> Callable[[Dict[str, float]], float]:
    """Return a scalar evaluator for *metric* over a mapping of summed columns."""

    key = metric.upper()
    if key not in _DEFINITIONS:
        raise ValueError(f"Unsupported metric requested: {metric}")
    numerators, denominator, scale = _DEFINITIONS[key]

    def _evaluate(sums: Dict[str, float]) -> float:
        numerator = sum(float(sums.get(column, 0.0)) for column in numerators)
        return safe_ratio(numerator, float(sums.get(denominator, 0.0)), scale=scale)

    return _evaluate


def _ensure_float(df: pd.DataFrame, column: str) -> pd.Series:
    if column not in df.columns:
        raise KeyError(f"Expected column '{column}' in dataframe")
    series = pd.to_numeric(df[column], errors="coerce")
    return series.astype(float)


def _safe_ratio(numerator: pd.Series, denominator: pd.Series) -> pd.Series:
    mask = denominator > 0
    result = pd.Series(0.0, index=numerator.index, dtype="float64")
    if mask.any():
        result.loc[mask] = numerator.loc[mask].astype(float) / denominator.loc[mask].astype(float)
    return result.replace([np.inf, -np.inf], 0.0).fillna(0.0)
