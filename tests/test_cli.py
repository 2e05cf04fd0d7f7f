from __future__ import annotations

import json

import pytest

from cli.dashboard_report import build_settings, main, parse_args, parse_mapping_overrides

import manage


def test_mapping_overrides():
    assert parse_mapping_overrides(["net_sales=Net Revenue", "brand=none"]) == {
        "net_sales": "Net Revenue",
        "brand": None,
    }
    with pytest.raises(ValueError):
        parse_mapping_overrides(["net_sales"])


def test_build_settings_from_flags(tmp_path):
    args = parse_args(
        [
            "--data",
            str(tmp_path / "sales.csv"),
            "--output-dir",
            str(tmp_path / "out"),
            "--map",
            "brand=Brand Name",
            "--city",
            "Dubai",
            "--channel",
            "keeta",
            "--min-orders",
            "250",
            "--no-visuals",
        ]
    )
    settings = build_settings(args)

    assert settings.mapping.brand == "Brand Name"
    assert settings.filters.cities == ("Dubai",)
    assert settings.channel_filter == "keeta"
    assert settings.channel_map_min_orders == 250
    assert settings.include_visuals is False


def test_channel_flag_accepts_known_names_only():
    assert parse_args(["--channel", "Deliveroo"]).channel == "deliveroo"
    assert parse_args([]).channel == "all"
    with pytest.raises(SystemExit):
        parse_args(["--channel", "uber"])


def test_unknown_mapping_field_rejected():
    args = parse_args(["--map", "sku=SKU"])
    with pytest.raises(ValueError):
        build_settings(args)


def test_main_runs_from_config(tmp_path, capsys):
    config = json.loads(manage.DEFAULT_CONFIG.read_text(encoding="utf-8"))
    config["data_path"] = str(manage.PROJECT_ROOT / "data" / "sales_export.csv")
    config["output_dir"] = str(tmp_path / "reports")
    config["include_visuals"] = False
    config_path = tmp_path / "dashboard.json"
    config_path.write_text(json.dumps(config), encoding="utf-8")

    main(["--config", str(config_path)])

    out = capsys.readouterr().out
    assert "Delivery market report completed." in out
    assert "Talabat" in out
    assert (tmp_path / "reports" / "dashboard_report.md").exists()


def test_main_missing_config(tmp_path):
    with pytest.raises(SystemExit):
        main(["--config", str(tmp_path / "missing.json")])


def test_manage_artifact_root_reads_config(tmp_path):
    config_path = tmp_path / "cfg.json"
    config_path.write_text(json.dumps({"data_path": "x.csv", "output_dir": "out"}), encoding="utf-8")

    assert manage._artifact_root(config_path) == (tmp_path / "out").resolve()
    assert manage._artifact_root(tmp_path / "missing.json") == manage.PROJECT_ROOT / "reports"
