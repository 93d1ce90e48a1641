from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any


def default_data_dir() -> Path:
    override = os.environ.get("CONNCHECK_DATA_DIR", "").strip()
    if override:
        return Path(override).expanduser()
    return Path.home() / "conncheck-data"


def default_logs_dir() -> Path:
    return default_data_dir() / "logs"


def build_default_config() -> dict[str, Any]:
    return {
        "device_serial": "",
        "adb_bin": "adb",
        "paths": {"logs_dir": str(default_logs_dir())},
        "connectivity": {
            "namespace": "global",
            "restriction": "no_config_private_dns",
            "user_id": None,
            "verify_after_apply": True,
        },
        "revision": {
            "key": "remix_revision",
            "int_prop": "ro.remix.revision.int",
            "strings_prop": "ro.remix.revision.strings",
            "url_prop": "ro.remix.revision.url",
        },
        "export": {"workbook": True},
    }


def resolve_config_path(explicit: str = "") -> Path:
    explicit = explicit.strip() or os.environ.get("CONNCHECK_CONFIG", "").strip()
    if explicit:
        return Path(explicit).expanduser()
    return default_data_dir() / "config.json"


def _backfill(cfg: dict[str, Any], defaults: dict[str, Any]) -> bool:
    changed = False
    for key, value in defaults.items():
        if key not in cfg:
            cfg[key] = json.loads(json.dumps(value))
            changed = True
        elif isinstance(value, dict) and isinstance(cfg[key], dict):
            changed = _backfill(cfg[key], value) or changed
    return changed


def load_or_create_config(config_path: Path, default_config: dict[str, Any]) -> dict[str, Any]:
    cfg_path = Path(config_path).expanduser()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    if not cfg_path.exists() or not cfg_path.read_text(encoding="utf-8").strip():
        cfg_path.write_text(json.dumps(default_config, indent=2), encoding="utf-8")
        return json.loads(json.dumps(default_config))
    cfg = json.loads(cfg_path.read_text(encoding="utf-8"))
    changed = _backfill(cfg, default_config)
    paths = cfg.setdefault("paths", {})
    logs_dir_cfg = str(paths.get("logs_dir", "")).strip()
    if logs_dir_cfg in {"", "logs", "./logs"}:
        paths["logs_dir"] = str(default_logs_dir())
        changed = True
    if changed:
        cfg_path.write_text(json.dumps(cfg, indent=2), encoding="utf-8")
    return cfg


def resolve_logs_dir(cfg: dict[str, Any]) -> Path:
    logs_dir_cfg = str((cfg.get("paths") or {}).get("logs_dir", "")).strip()
    if logs_dir_cfg:
        return Path(logs_dir_cfg).expanduser()
    return default_logs_dir()
