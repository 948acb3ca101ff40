"""Simulation helpers."""

from lev_dca.simulator.engine import (
    LeverageSimulator,
    RunState,
    leverage_ratio,
    liquidation_price,
    simulate,
)
from lev_dca.simulator.models import Action, SimulationParams, WeeklyPrice, WeeklyResult
from lev_dca.simulator.summary import RunSummary, result_to_dict, summarize, summary_to_dict
from lev_dca.simulator.window import (
    SimulationWindow,
    bound_window,
    clamp_window,
    lowest_low_window,
    slice_prices,
    sync_window,
)

__all__ = [
    "Action",
    "LeverageSimulator",
    "RunState",
    "RunSummary",
    "SimulationParams",
    "SimulationWindow",
    "WeeklyPrice",
    "WeeklyResult",
    "bound_window",
    "clamp_window",
    "leverage_ratio",
    "liquidation_price",
    "lowest_low_window",
    "result_to_dict",
    "simulate",
    "slice_prices",
    "summarize",
    "summary_to_dict",
    "sync_window",
]
