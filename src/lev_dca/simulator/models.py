"""Simulation data structures."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional


def is_positive(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value) and value > 0


class Action(str, Enum):
    OPEN = "OPEN"
    ADD = "ADD"
    HOLD = "HOLD"
    LIQUIDATED = "LIQUIDATED"


@dataclass(frozen=True)
class WeeklyPrice:
    week_index: int
    date: date
    open_price: float = 0.0
    low_price: float = 0.0
    high_price: float = 0.0

    def has_price(self) -> bool:
        return is_positive(self.open_price)

    def effective_low(self) -> float:
        if is_positive(self.low_price):
            return self.low_price
        return self.open_price

    def effective_high(self) -> float:
        if is_positive(self.high_price):
            return self.high_price
        return max(self.open_price, self.effective_low())


@dataclass(frozen=True)
class SimulationParams:
    initial_capital: float
    leverage: float
    max_leverage: float = 10.0
    reinvestment_ratio: float = 100.0

    @property
    def reinvest_fraction(self) -> float:
        return self.reinvestment_ratio / 100.0


@dataclass(frozen=True)
class WeeklyResult:
    week_index: int
    date: date
    open_price: float
    low_price: float
    high_price: float

    action: Action
    btc_added: float
    action_reason: str

    # Position entering the week
    pre_action_holdings: float
    pre_action_cost_basis: float
    theoretical_liq_price: float

    # Position after the week's action
    total_btc_holdings: float
    cost_basis: float

    # Valued at the weekly low
    position_value: float
    debt: float
    equity: float
    leverage: float
    floating_pnl: float

    # Valued at the weekly high
    position_value_high: float
    equity_high: float
    leverage_high: float
    floating_pnl_high: float

    is_liquidated: bool
    next_week_condition: str
