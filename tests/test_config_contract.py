from __future__ import annotations

import json
from pathlib import Path

import pytest

from Delivery_analytics.config import ColumnMapping, settings_from_dict


PROJECT_ROOT = Path(__file__).resolve().parents[1]
CONFIG_PATH = PROJECT_ROOT / "configs" / "dashboard.json"


def _load_config() -> dict:
    return json.loads(CONFIG_PATH.read_text(encoding="utf-8"))


def test_shipped_config_resolves_paths():
    settings = settings_from_dict(_load_config(), base_path=CONFIG_PATH.parent)

    assert settings.data_path == (PROJECT_ROOT / "data" / "sales_export.csv").resolve()
    assert settings.data_path.exists()
    assert settings.output_dir == (PROJECT_ROOT / "reports" / "dashboard").resolve()
    assert settings.granularity == "monthly"
    assert settings.channel_map_min_orders == 1000
    assert settings.mapping.month_year == "monthYear"
    assert settings.mapping.brand == "brand"
    assert settings.filters.is_empty()


def test_mapping_keys_are_column_mapping_fields():
    mapping = _load_config()["mapping"]
    assert set(mapping) <= set(ColumnMapping.__dataclass_fields__)


def test_filters_accept_single_values(tmp_path):
    settings = settings_from_dict(
        {"data_path": "sales.csv", "filters": {"months": "2025-01", "cities": ["Dubai", "Sharjah"]}},
        base_path=tmp_path,
    )

    assert settings.data_path == (tmp_path / "sales.csv").resolve()
    assert settings.filters.months == ("2025-01",)
    assert settings.filters.cities == ("Dubai", "Sharjah")
    assert not settings.filters.is_empty()


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"data_path": ""},
        {"data_path": "sales.csv", "granularity": "daily"},
    ],
)
def test_invalid_payloads_are_rejected(payload, tmp_path):
    with pytest.raises(ValueError):
        settings_from_dict(payload, base_path=tmp_path)


def test_non_mapping_payload_is_rejected():
    with pytest.raises(ValueError):
        settings_from_dict(["data_path"])  # type: ignore[arg-type]
