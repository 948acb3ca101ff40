"""Persist and load simulation parameters."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Mapping

from lev_dca.simulator.models import SimulationParams
from lev_dca.store.models import StoreError

DEFAULT_INITIAL_CAPITAL = 10000.0
DEFAULT_LEVERAGE = 2.0
DEFAULT_MAX_LEVERAGE = 10.0
DEFAULT_REINVESTMENT_RATIO = 100.0

# Saved records from the browser version use camelCase keys.
_ALIASES = {
    "initialCapital": "initial_capital",
    "maxLeverage": "max_leverage",
    "reinvestmentRatio": "reinvestment_ratio",
}


def default_params() -> SimulationParams:
    return SimulationParams(
        initial_capital=DEFAULT_INITIAL_CAPITAL,
        leverage=DEFAULT_LEVERAGE,
        max_leverage=DEFAULT_MAX_LEVERAGE,
        reinvestment_ratio=DEFAULT_REINVESTMENT_RATIO,
    )


def parse_params(data: Mapping[str, Any]) -> SimulationParams:
    """Build parameters from a saved record, filling fields older records lack."""
    normalized = {_ALIASES.get(key, key): value for key, value in data.items()}

    def number(key: str, default: float) -> float:
        value = normalized.get(key)
        if value is None:
            return default
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise StoreError(f"Invalid {key}: {value!r}") from exc

    return SimulationParams(
        initial_capital=number("initial_capital", DEFAULT_INITIAL_CAPITAL),
        leverage=number("leverage", DEFAULT_LEVERAGE),
        max_leverage=number("max_leverage", DEFAULT_MAX_LEVERAGE),
        reinvestment_ratio=number("reinvestment_ratio", DEFAULT_REINVESTMENT_RATIO),
    )


class ParameterStore:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> SimulationParams:
        if not self.path.exists():
            return default_params()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise StoreError(f"Failed to parse saved params at {self.path}") from exc
        if not isinstance(data, dict):
            raise StoreError("Saved params must be a mapping")
        return parse_params(data)

    def save(self, params: SimulationParams) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(asdict(params), indent=2), encoding="utf-8")
