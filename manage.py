from __future__ import annotations

import argparse
import json
import os
import shutil
import subprocess
import sys
from datetime import datetime
from importlib import metadata
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).resolve().parent
DEFAULT_CONFIG = PROJECT_ROOT / "configs" / "dashboard.json"
REQUIRED_PACKAGES = ("pandas", "numpy", "matplotlib", "seaborn", "plotly", "streamlit", "tabulate")


def _fmt_rel(path: Path) -> str:
    try:
        return str(path.relative_to(PROJECT_ROOT))
    except ValueError:
        return str(path)


def _load_config(config_path: Path) -> dict:
    if not config_path.exists():
        return {}
    payload = json.loads(config_path.read_text(encoding="utf-8"))
    return payload if isinstance(payload, dict) else {}


def _config_path(config_path: Path, key: str) -> Optional[Path]:
    value = _load_config(config_path).get(key)
    if not value:
        return None
    path = Path(value)
    return path if path.is_absolute() else (config_path.parent / path).resolve()


def _artifact_root(config_path: Path) -> Path:
    """Output directory named by the config, or ``reports/`` next to it."""

    return _config_path(config_path, "output_dir") or PROJECT_ROOT / "reports"


def _run_report(args: argparse.Namespace) -> int:
    config_path = Path(args.config or DEFAULT_CONFIG).resolve()
    if not config_path.exists():
        print(f"[Run] Config file not found: {config_path}")
        return 1
    cli_script = PROJECT_ROOT / "cli" / "dashboard_report.py"
    cmd = [sys.executable, str(cli_script), "--config", str(config_path)]
    if args.debug:
        cmd.append("--debug")
    print(f"[Run] Running: {' '.join(cmd)}")
    return subprocess.call(cmd)


def _run_ui(args: argparse.Namespace) -> int:
    script = PROJECT_ROOT / "Delivery_analytics" / "dashboard.py"
    if not script.exists():
        print(f"[UI] dashboard.py not found at {script}")
        return 1
    env = dict(os.environ)
    if args.config:
        env["DELIVERY_DASHBOARD_CONFIG"] = str(Path(args.config).resolve())
    cmd = [sys.executable, "-m", "streamlit", "run", str(script)]
    print("[UI] Launching Streamlit dashboard...")
    return subprocess.call(cmd, env=env)


def _run_doctor(args: argparse.Namespace) -> int:
    config_path = Path(args.config or DEFAULT_CONFIG).resolve()
    print("[Doctor] Environment check")
    print(f"- Python: {sys.version.split()[0]}")
    for pkg in REQUIRED_PACKAGES:
        try:
            print(f"- {pkg}: {metadata.version(pkg)}")
        except metadata.PackageNotFoundError:
            print(f"- {pkg}: missing")

    print(f"- Config: {'ok' if config_path.exists() else 'missing'} ({_fmt_rel(config_path)})")
    data_path = _config_path(config_path, "data_path")
    if data_path is None:
        print("- Sales export: not configured")
    elif data_path.exists():
        with data_path.open(encoding="utf-8") as handle:
            rows = max(sum(1 for _ in handle) - 1, 0)
        print(f"- Sales export: ok ({_fmt_rel(data_path)}, {rows} rows)")
    else:
        print(f"- Sales export: missing ({_fmt_rel(data_path)})")
    artifacts = _artifact_root(config_path)
    print(f"- Reports: {'ok' if artifacts.exists() else 'not generated yet'} ({_fmt_rel(artifacts)})")
    return 0


def _run_clean(args: argparse.Namespace) -> int:
    config_path = Path(args.config or DEFAULT_CONFIG).resolve()
    root = _artifact_root(config_path)
    protected = {PROJECT_ROOT, PROJECT_ROOT / "data", (_config_path(config_path, "data_path") or PROJECT_ROOT).parent}
    if root in protected:
        print(f"[Clean] Refusing to clear {_fmt_rel(root)}: it holds source data")
        return 1
    if not root.exists() or not any(root.iterdir()):
        print(f"[Clean] Nothing to remove in {_fmt_rel(root)}")
        return 0
    entries = sorted(root.iterdir())
    print(f"[Clean] Reports under {_fmt_rel(root)}:")
    for entry in entries:
        if entry.is_dir():
            count = sum(1 for path in entry.rglob("*") if path.is_file())
            print(f"  - {entry.name}/ ({count} files)")
        else:
            print(f"  - {entry.name}")
    if not args.yes and input("Delete them? [y/N] ").strip().lower() not in {"y", "yes"}:
        print("[Clean] Aborted")
        return 0
    for entry in entries:
        if entry.is_dir():
            shutil.rmtree(entry, ignore_errors=True)
        else:
            entry.unlink(missing_ok=True)
    print(f"[Clean] Removed {len(entries)} entries from {_fmt_rel(root)}")
    return 0


def _run_artifacts(args: argparse.Namespace) -> int:
    root = _artifact_root(Path(args.config or DEFAULT_CONFIG).resolve())
    if not root.exists():
        print(f"[Artifacts] Directory not found: {_fmt_rel(root)}")
        return 1
    files = sorted(path for path in root.rglob("*") if path.is_file())
    if not files:
        print(f"[Artifacts] No reports found in {_fmt_rel(root)}")
        return 0
    print(f"[Artifacts] {len(files)} report files in {_fmt_rel(root)}")
    for suffix in sorted({path.suffix for path in files}):
        print(f"  {suffix.lstrip('.') or 'other'}:")
        for path in (item for item in files if item.suffix == suffix):
            stats = path.stat()
            modified = datetime.fromtimestamp(stats.st_mtime).isoformat(timespec="seconds")
            print(f"    - {str(path.relative_to(root)):36s} {modified} ({stats.st_size} bytes)")
    return 0


def _run_test(_: argparse.Namespace) -> int:
    cmd = [sys.executable, "-m", "pytest", "-q"]
    return subprocess.call(cmd)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Delivery analytics project utilities.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Build the delivery market report")
    run_parser.add_argument("--config", help="Config file", default=str(DEFAULT_CONFIG))
    run_parser.add_argument("--debug", action="store_true", help="Verbose logging")
    run_parser.set_defaults(func=_run_report)

    ui_parser = subparsers.add_parser("ui", help="Open the delivery market dashboard (Streamlit)")
    ui_parser.add_argument("--config", help="Config file", default=None)
    ui_parser.set_defaults(func=_run_ui)

    doctor_parser = subparsers.add_parser("doctor", help="Check packages, config and sales export")
    doctor_parser.add_argument("--config", help="Config file", default=str(DEFAULT_CONFIG))
    doctor_parser.set_defaults(func=_run_doctor)

    artifacts_parser = subparsers.add_parser("artifacts", help="List generated reports and figures")
    artifacts_parser.add_argument("--config", help="Config file", default=str(DEFAULT_CONFIG))
    artifacts_parser.set_defaults(func=_run_artifacts)

    clean_parser = subparsers.add_parser("clean", help="Delete generated reports")
    clean_parser.add_argument("--config", help="Config file", default=str(DEFAULT_CONFIG))
    clean_parser.add_argument("--yes", action="store_true", help="Do not ask before deleting")
    clean_parser.set_defaults(func=_run_clean)

    test_parser = subparsers.add_parser("test", help="Run pytest -q")
    test_parser.set_defaults(func=_run_test)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    func = getattr(args, "func", None)
    if func is None:
        parser.error("No command specified")
    return int(func(args))


if __name__ == "__main__":
    sys.exit(main())
