"""Loading, reconciling and filtering delivery sales exports."""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Tuple, Union

import numpy as np
import pandas as pd

from Delivery_analytics.channels import normalize_channel
from Delivery_analytics.config import ColumnMapping, SalesFilters


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SalesRecord:
    """One channel x location x period row as delivered by the warehouse."""

    channel: str
    city: str = ""
    area: str = ""
    cuisine: str = ""
    period: str = ""
    orders: float = 0.0
    net_sales: float = 0.0
    gross_sales: float = 0.0
    ads_spend: float = 0.0
    discount_spend: float = 0.0
    ads_return: float = 0.0
    week_start_date: str = ""
    brand: str = ""


TEXT_COLUMNS: tuple[str, ...] = ("channel", "city", "area", "cuisine", "period", "week_start_date", "brand")
NUMERIC_COLUMNS: tuple[str, ...] = (
    "orders",
    "net_sales",
    "gross_sales",
    "ads_spend",
    "discount_spend",
    "ads_return",
)
RECORD_COLUMNS: tuple[str, ...] = tuple(f.name for f in fields(SalesRecord))
# Canonical channel name, or None for labels that must be excluded.
CHANNEL_KEY = "channel_name"

Records = Union[pd.DataFrame, Iterable[Union[SalesRecord, Mapping[str, object]]]]


@dataclass(slots=True)
class DatasetBundle:
    """Container for the prepared sales frame and useful metadata."""

    frame: pd.DataFrame
    mapping: ColumnMapping
    column_aliases: Dict[str, str]
    missing_columns: tuple[str, ...] = ()
    granularity: str = "monthly"

    @property
    def columns(self) -> list[str]:
        return list(self.frame.columns)

    def records(self) -> list[SalesRecord]:
        return frame_to_records(self.frame)


@dataclass(frozen=True)
class FilterOptions:
    months: tuple[str, ...]
    cities: tuple[str, ...]
    areas: tuple[str, ...]
    cuisines: tuple[str, ...]


# ----------------------------
# Period reconciliation
# ----------------------------

_MONTH_NAMES: Dict[str, int] = {}
for _index, _name in enumerate(
    [
        "january",
        "february",
        "march",
        "april",
        "may",
        "june",
        "july",
        "august",
        "september",
        "october",
        "november",
        "december",
    ],
    start=1,
):
    _MONTH_NAMES[_name] = _index
    _MONTH_NAMES[_name[:3]] = _index
_MONTH_NAMES["sept"] = 9

_MONTH_KEY = re.compile(r"^\d{4}-\d{2}$")
_WEEK_KEY = re.compile(r"^\d{4}-W\d{2}$")
_YEAR_MONTH = re.compile(r"^(\d{4})[-/](\d{1,2})(?:[-/]\d{1,2}.*)?$")
_NAME_YEAR = re.compile(r"^([A-Za-z]+)[\s\-/]+(\d{4})$")
_YEAR_NAME = re.compile(r"^(\d{4})[\s\-/]+([A-Za-z]+)$")


def is_month_key(value: str) -> bool:
    return bool(_MONTH_KEY.match(value or ""))


def is_week_key(value: str) -> bool:
    return bool(_WEEK_KEY.match(value or ""))


def _is_missing(value: object) -> bool:
    return value is None or value is pd.NA or (isinstance(value, float) and np.isnan(value))


def _text(value: object) -> str:
    return "" if _is_missing(value) else str(value).strip()


def _cell(value: object) -> str:
    return "" if _is_missing(value) else str(value)


def _month_number(token: str) -> Optional[int]:
    token = token.strip().lower()
    if token.isdigit():
        number = int(token)
        return number if 1 <= number <= 12 else None
    return _MONTH_NAMES.get(token)


def _year_number(token: object) -> Optional[int]:
    text = _text(token)
    if not text:
        return None
    try:
        return int(float(text))
    except ValueError:
        return None


def normalize_month(value: object) -> str:
    """Reconcile a month label to ``YYYY-MM``.

    Accepts ``2025-01``, ``2025-1``, ``2025-01-15``, ``January-2025``, ``Jan 2025`` and
    ``2025-Jan``. Labels that cannot be parsed are returned stripped but otherwise
    unchanged.
    """

    text = _text(value)
    if not text:
        return ""
    match = _YEAR_MONTH.match(text)
    if match:
        month = int(match.group(2))
        if 1 <= month <= 12:
            return f"{match.group(1)}-{month:02d}"
        return text
    match = _NAME_YEAR.match(text)
    if match:
        month = _month_number(match.group(1))
        return f"{match.group(2)}-{month:02d}" if month else text
    match = _YEAR_NAME.match(text)
    if match:
        month = _month_number(match.group(2))
        return f"{match.group(1)}-{month:02d}" if month else text
    return text


def month_from_parts(month: object, year: object) -> str:
    """Build ``YYYY-MM`` from a month token (name, abbreviation or number) and a year."""

    month_text = _text(month)
    if is_month_key(normalize_month(month_text)):
        return normalize_month(month_text)
    number = _month_number(month_text) if month_text else None
    year_number = _year_number(year)
    if number is None or year_number is None:
        return ""
    return f"{year_number:04d}-{number:02d}"


def week_key(year: object, week: object) -> str:
    """Return a ``YYYY-Www`` key whose string order matches chronological order."""

    year_number = _year_number(year)
    week_number = _year_number(week)
    if year_number is None or week_number is None:
        return ""
    return f"{year_number:04d}-W{week_number:02d}"


# ----------------------------
# Canonical frame construction
# ----------------------------

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_NON_ALNUM_PATTERN = re.compile(r"[^0-9a-zA-Z]+")


def _normalize_column_name(name: str) -> str:
    spaced = _CAMEL_BOUNDARY.sub("_", str(name).strip())
    normalized = _NON_ALNUM_PATTERN.sub("_", spaced.lower())
    return normalized.strip("_")


def normalize_columns(df: pd.DataFrame) -> Tuple[pd.DataFrame, Dict[str, str]]:
    renamed = {col: _normalize_column_name(col) for col in df.columns}
    return df.rename(columns=renamed), renamed


def resolve_mapping(mapping: ColumnMapping, aliases: Dict[str, str]) -> ColumnMapping:
    """Adjust mapping attributes to reflect normalized column names."""

    normalized: Dict[str, object] = {}
    alias_lookup = {orig.lower(): new for orig, new in aliases.items()}
    for field in fields(mapping):
        column_name = getattr(mapping, field.name)
        if column_name:
            normalized[field.name] = alias_lookup.get(column_name.lower(), _normalize_column_name(column_name))
        else:
            normalized[field.name] = column_name
    return ColumnMapping(**normalized)


def _sanitize_numeric_series(series: pd.Series) -> pd.Series:
    if series.dtype.kind not in {"O", "U", "S"}:
        return series
    cleaned = (
        series.astype(str)
        .str.replace(r"(?i)aed", "", regex=True)
        .str.replace(r"[,%$]", "", regex=True)
        .str.replace(r"\s", "", regex=True)
        .str.replace(r"\(([^)]+)\)", r"-\1", regex=True)
        .replace({"": np.nan, "none": np.nan, "nan": np.nan, "None": np.nan})
    )
    return cleaned


def coerce_numeric(df: pd.DataFrame, columns: Iterable[str]) -> None:
    for column in columns:
        if column in df.columns:
            df[column] = pd.to_numeric(_sanitize_numeric_series(df[column]), errors="coerce")


def _channel_key(value: object) -> Optional[str]:
    channel = normalize_channel(value)
    return channel.value if channel else None


def prepare_frame(frame: pd.DataFrame) -> pd.DataFrame:
    """Return a canonical copy of *frame*: every record column present, numerics as
    floats with missing values treated as zero, text as ``str`` with missing values
    as ``""`` and the normalized channel in ``channel_name``."""

    df = frame.copy()
    for column in TEXT_COLUMNS:
        if column not in df.columns:
            df[column] = ""
        df[column] = df[column].map(_cell) if len(df) else df[column].astype(object)
    for column in NUMERIC_COLUMNS:
        if column not in df.columns:
            df[column] = 0.0
        values = pd.to_numeric(_sanitize_numeric_series(df[column]), errors="coerce")
        df[column] = values.fillna(0.0).astype(float)
    df[CHANNEL_KEY] = df["channel"].map(_channel_key) if len(df) else pd.Series(dtype=object)
    return df[[*RECORD_COLUMNS, CHANNEL_KEY]].reset_index(drop=True)


def as_frame(records: Records) -> pd.DataFrame:
    """Accept a canonical frame, :class:`SalesRecord` values or plain mappings."""

    if isinstance(records, pd.DataFrame):
        if CHANNEL_KEY in records.columns and all(col in records.columns for col in RECORD_COLUMNS):
            return records
        renamed, _ = normalize_columns(records)
        return prepare_frame(_fill_periods(renamed))

    rows = []
    for record in records:
        if isinstance(record, SalesRecord):
            rows.append(asdict(record))
        elif isinstance(record, Mapping):
            row = {_normalize_column_name(key): value for key, value in record.items()}
            if not _text(row.get("period")):
                row["period"] = _period_from_row(row)
            rows.append(row)
    return prepare_frame(pd.DataFrame(rows, columns=None if rows else list(RECORD_COLUMNS)))


def _month_period(month: object, month_year: object, year: object) -> str:
    period = normalize_month(month)
    if not is_month_key(period) and _text(month) and _text(year):
        period = month_from_parts(month, year) or period
    if not is_month_key(period) and _text(month_year):
        period = normalize_month(month_year)
    return period


def _period_from_row(row: Mapping[str, object]) -> str:
    if _text(row.get("week")) and _text(row.get("year")):
        return week_key(row.get("year"), row.get("week"))
    return _month_period(row.get("month"), row.get("month_year"), row.get("year"))


def _fill_periods(df: pd.DataFrame) -> pd.DataFrame:
    """Derive ``period`` for rows without one from their week/month/year columns."""

    if "period" in df.columns:
        periods = df["period"].map(_text).astype(object)
    else:
        periods = pd.Series("", index=df.index, dtype=object)
    missing = periods == ""
    if missing.any():
        rows = df.loc[missing].to_dict(orient="records")
        periods.loc[missing] = [_period_from_row(row) for row in rows]
    return df.assign(period=periods)


def frame_to_records(frame: pd.DataFrame) -> list[SalesRecord]:
    df = as_frame(frame)
    return [SalesRecord(**{col: row[col] for col in RECORD_COLUMNS}) for row in df.to_dict(orient="records")]


def _resolve_periods(df: pd.DataFrame, mapping: ColumnMapping, granularity: str) -> pd.Series:
    def column(name: Optional[str]) -> list[object]:
        if name and name in df.columns:
            return df[name].tolist()
        return [None] * len(df)

    if granularity == "weekly":
        return pd.Series(
            [week_key(year, week) for year, week in zip(column(mapping.year), column(mapping.week))],
            index=df.index,
            dtype=object,
        )

    periods = [
        _month_period(month, month_year, year)
        for month, month_year, year in zip(column(mapping.month), column(mapping.month_year), column(mapping.year))
    ]
    return pd.Series(periods, index=df.index, dtype=object)


def load_dataset(path: str | Path, mapping: ColumnMapping, *, granularity: str = "monthly") -> DatasetBundle:
    raw = pd.read_csv(path, dtype=str)
    return bundle_from_frame(raw, mapping, granularity=granularity)


def bundle_from_frame(raw: pd.DataFrame, mapping: ColumnMapping, *, granularity: str = "monthly") -> DatasetBundle:
    """Reconcile a raw export frame into a canonical :class:`DatasetBundle`."""

    df, aliases = normalize_columns(raw)
    resolved_mapping = resolve_mapping(mapping, aliases)

    missing = [col for col in resolved_mapping.required_columns() if col not in df.columns]
    if missing:
        raise ValueError(f"Required columns missing from dataset: {missing}")

    canonical = pd.DataFrame(index=df.index)
    optional_missing: list[str] = []
    for target, source in {**resolved_mapping.text_fields(), **resolved_mapping.numeric_fields()}.items():
        if source and source in df.columns:
            canonical[target] = df[source]
        elif source:
            optional_missing.append(source)

    coerce_numeric(canonical, NUMERIC_COLUMNS)
    canonical["period"] = _resolve_periods(df, resolved_mapping, granularity)

    prepared = prepare_frame(canonical)
    dropped = int(prepared[CHANNEL_KEY].isna().sum())
    logger.info("Loaded %d sales rows (%d with unrecognized channels)", len(prepared), dropped)

    return DatasetBundle(
        frame=prepared,
        mapping=resolved_mapping,
        column_aliases=aliases,
        missing_columns=tuple(optional_missing),
        granularity=granularity,
    )


# ----------------------------
# Filtering
# ----------------------------


def apply_filters(records: Records, filters: SalesFilters) -> pd.DataFrame:
    df = as_frame(records)
    if filters.is_empty():
        return df

    def _values(values: tuple[str, ...]) -> list[str]:
        return [value for value in values if value and value != "all"]

    mask = pd.Series(True, index=df.index)
    months = [normalize_month(value) for value in _values(filters.months)]
    if months:
        mask &= df["period"].isin(months)
    for column, values in (("city", filters.cities), ("area", filters.areas), ("cuisine", filters.cuisines)):
        selected = _values(values)
        if selected:
            mask &= df[column].isin(selected)
    return df.loc[mask].reset_index(drop=True)


def filter_options(records: Records) -> FilterOptions:
    df = as_frame(records)

    def _distinct(column: str) -> tuple[str, ...]:
        return tuple(sorted({value for value in df[column].tolist() if value}))

    return FilterOptions(
        months=_distinct("period"),
        cities=_distinct("city"),
        areas=_distinct("area"),
        cuisines=_distinct("cuisine"),
    )
