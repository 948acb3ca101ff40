"""Configuration models for reproducible runs."""

from __future__ import annotations

from dataclasses import dataclass

from lev_dca.simulator.models import SimulationParams


@dataclass(frozen=True)
class StorageConfig:
    prices_path: str = "data/prices.json"
    params_path: str = "data/params.json"


@dataclass(frozen=True)
class MonitoringConfig:
    audit_log_path: str = "runtime/audit.log"
    notify_prefix: str = "[LEV-DCA]"


@dataclass(frozen=True)
class AppConfig:
    name: str
    version: str
    run_id_prefix: str
    params: SimulationParams
    storage: StorageConfig = StorageConfig()
    monitoring: MonitoringConfig = MonitoringConfig()
