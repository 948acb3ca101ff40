"""Load and freeze configuration files."""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import yaml

from lev_dca.config.models import AppConfig, MonitoringConfig, StorageConfig
from lev_dca.simulator.models import SimulationParams
from lev_dca.store.params import parse_params


def load_config(path: str | Path) -> AppConfig:
    path = Path(path)
    data = _load_yaml(path)

    name = str(_require(data, "name"))
    version = str(_require(data, "version"))
    run_id_prefix = str(data.get("run_id_prefix", name))
    params = _parse_params(data.get("params") or {})
    storage = _parse_storage(data.get("storage") or {})
    monitoring = _parse_monitoring(data.get("monitoring") or {})

    return AppConfig(
        name=name,
        version=version,
        run_id_prefix=run_id_prefix,
        params=params,
        storage=storage,
        monitoring=monitoring,
    )


def compute_config_hash(path: str | Path) -> str:
    path = Path(path)
    content = path.read_bytes()
    return hashlib.sha256(content).hexdigest()


def freeze_config(path: str | Path, lock_path: Optional[str | Path] = None) -> Path:
    path = Path(path)
    config_hash = compute_config_hash(path)
    if lock_path is None:
        lock_path = path.with_suffix(path.suffix + ".lock.json")
    lock_path = Path(lock_path)

    payload = {
        "config_path": str(path),
        "config_hash": config_hash,
        "frozen_at_utc": datetime.now(timezone.utc).isoformat(),
    }
    lock_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return lock_path


def verify_config_lock(path: str | Path, lock_path: Optional[str | Path] = None) -> bool:
    path = Path(path)
    if lock_path is None:
        lock_path = path.with_suffix(path.suffix + ".lock.json")
    lock_path = Path(lock_path)
    if not lock_path.exists():
        return False
    payload = json.loads(lock_path.read_text(encoding="utf-8"))
    expected = payload.get("config_hash")
    return expected == compute_config_hash(path)


def _load_yaml(path: Path) -> dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("Config must be a mapping")
    return data


def _require(data: dict[str, Any], key: str) -> Any:
    if key not in data:
        raise ValueError(f"Missing required config key: {key}")
    return data[key]


def _parse_params(data: dict[str, Any]) -> SimulationParams:
    if not isinstance(data, dict):
        raise ValueError("params must be a mapping")
    params = parse_params(data)
    if params.initial_capital <= 0:
        raise ValueError(f"Invalid initial_capital: {params.initial_capital}")
    if params.leverage < 1:
        raise ValueError(f"Invalid leverage: {params.leverage}")
    if not 0 <= params.reinvestment_ratio <= 100:
        raise ValueError(f"Invalid reinvestment_ratio: {params.reinvestment_ratio}")
    return params


def _parse_storage(data: dict[str, Any]) -> StorageConfig:
    return StorageConfig(
        prices_path=str(data.get("prices_path", "data/prices.json")),
        params_path=str(data.get("params_path", "data/params.json")),
    )


def _parse_monitoring(data: dict[str, Any]) -> MonitoringConfig:
    return MonitoringConfig(
        audit_log_path=str(data.get("audit_log_path", "runtime/audit.log")),
        notify_prefix=str(data.get("notify_prefix", "[LEV-DCA]")),
    )


def serialize_config(config: AppConfig) -> dict[str, Any]:
    return asdict(config)
