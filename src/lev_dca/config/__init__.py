"""Config loading and freezing."""

from lev_dca.config.loader import (
    compute_config_hash,
    freeze_config,
    load_config,
    serialize_config,
    verify_config_lock,
)
from lev_dca.config.models import AppConfig, MonitoringConfig, StorageConfig

__all__ = [
    "AppConfig",
    "MonitoringConfig",
    "StorageConfig",
    "compute_config_hash",
    "freeze_config",
    "load_config",
    "serialize_config",
    "verify_config_lock",
]
