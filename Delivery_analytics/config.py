"""Configuration models for the delivery market dashboard."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import MutableMapping, Optional


GRANULARITIES = ("monthly", "weekly")


@dataclass(slots=True)
class ColumnMapping:
    """Describe how raw warehouse export columns map onto sales record fields."""

    channel: str = "channel"
    city: Optional[str] = "city"
    area: Optional[str] = "area"
    cuisine: Optional[str] = "cuisine"
    month: Optional[str] = "month"
    month_year: Optional[str] = "monthYear"
    year: Optional[str] = "year"
    week: Optional[str] = "week"
    week_start_date: Optional[str] = "weekStartDate"
    orders: str = "orders"
    net_sales: Optional[str] = "netSales"
    gross_sales: Optional[str] = "grossSales"
    ads_spend: Optional[str] = "adsSpend"
    discount_spend: Optional[str] = "discountSpend"
    ads_return: Optional[str] = "adsReturn"
    brand: Optional[str] = None

    def required_columns(self) -> list[str]:
        return [self.channel, self.orders]

    def text_fields(self) -> dict[str, Optional[str]]:
        return {
            "channel": self.channel,
            "city": self.city,
            "area": self.area,
            "cuisine": self.cuisine,
            "brand": self.brand,
            "week_start_date": self.week_start_date,
        }

    def numeric_fields(self) -> dict[str, Optional[str]]:
        return {
            "orders": self.orders,
            "net_sales": self.net_sales,
            "gross_sales": self.gross_sales,
            "ads_spend": self.ads_spend,
            "discount_spend": self.discount_spend,
            "ads_return": self.ads_return,
        }


@dataclass(slots=True)
class SalesFilters:
    """Dimension filters; an empty tuple or ``"all"`` means no filtering."""

    months: tuple[str, ...] = ()
    cities: tuple[str, ...] = ()
    areas: tuple[str, ...] = ()
    cuisines: tuple[str, ...] = ()

    def is_empty(self) -> bool:
        return not any(_active(values) for values in (self.months, self.cities, self.areas, self.cuisines))


def _active(values: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(value for value in values if value and value != "all")


@dataclass(slots=True)
class DashboardSettings:
    """Execution parameters for the dashboard pipeline."""

    data_path: Path
    output_dir: Path = Path("reports")
    mapping: ColumnMapping = field(default_factory=ColumnMapping)
    granularity: str = "monthly"
    filters: SalesFilters = field(default_factory=SalesFilters)
    channel_map_min_orders: float = 1000
    channel_filter: str = "all"
    default_city: str = "Dubai"
    include_visuals: bool = True
    stop_on_fail: bool = False

    def resolve_paths(self) -> None:
        self.data_path = self.data_path.expanduser().resolve()
        self.output_dir = self.output_dir.expanduser().resolve()

    def ensure_output_tree(self) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        (self.output_dir / "figures").mkdir(exist_ok=True)


def _as_tuple(value: object) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)):
        return tuple(str(item) for item in value)
    return ()


def settings_from_dict(payload: MutableMapping[str, object], *, base_path: Path | None = None) -> DashboardSettings:
    """Create :class:`DashboardSettings` from a dictionary (e.g., parsed JSON)."""

    if not isinstance(payload, MutableMapping):
        raise ValueError("Dashboard configuration must be a JSON object")

    base = base_path or Path.cwd()

    mapping_payload = payload.get("mapping", {})
    mapping = ColumnMapping(**mapping_payload) if isinstance(mapping_payload, MutableMapping) else ColumnMapping()

    data_path_value = payload.get("data_path")
    if not data_path_value:
        raise ValueError("`data_path` is required in the configuration payload")

    granularity = str(payload.get("granularity", "monthly"))
    if granularity not in GRANULARITIES:
        raise ValueError(f"Unsupported granularity '{granularity}'. Expected one of {GRANULARITIES}")

    filters_payload = payload.get("filters")
    filters = SalesFilters()
    if isinstance(filters_payload, MutableMapping):
        filters = SalesFilters(
            months=_as_tuple(filters_payload.get("months")),
            cities=_as_tuple(filters_payload.get("cities")),
            areas=_as_tuple(filters_payload.get("areas")),
            cuisines=_as_tuple(filters_payload.get("cuisines")),
        )

    data_path = Path(str(data_path_value))
    output_dir_value = payload.get("output_dir")
    output_dir = Path(str(output_dir_value)) if output_dir_value else Path("reports")
    if not data_path.is_absolute():
        data_path = base / data_path
    if not output_dir.is_absolute():
        output_dir = base / output_dir

    settings = DashboardSettings(
        data_path=data_path,
        output_dir=output_dir,
        mapping=mapping,
        granularity=granularity,
        filters=filters,
        channel_map_min_orders=float(payload.get("channel_map_min_orders", 1000)),
        channel_filter=str(payload.get("channel_filter", "all")),
        default_city=str(payload.get("default_city", "Dubai")),
        include_visuals=bool(payload.get("include_visuals", True)),
        stop_on_fail=bool(payload.get("stop_on_fail", False)),
    )
    settings.resolve_paths()
    return settings
