"""Headline figures for a simulation run."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Iterable, Optional

from lev_dca.simulator.models import Action, WeeklyResult


@dataclass(frozen=True)
class RunSummary:
    weeks: int
    final_position_value: float
    final_equity: float
    total_pnl: float
    roi_pct: float
    is_liquidated: bool
    liquidation_week: Optional[int]
    add_count: int
    total_btc_added: float


def summarize(results: Iterable[WeeklyResult], initial_capital: float) -> RunSummary:
    results_list = list(results)
    if not results_list:
        return RunSummary(0, 0.0, 0.0, 0.0, 0.0, False, None, 0, 0.0)

    last = results_list[-1]
    liquidation_week = next(
        (index for index, result in enumerate(results_list) if result.is_liquidated),
        None,
    )
    adds = [result for result in results_list if result.action == Action.ADD]
    total_pnl = last.floating_pnl
    roi_pct = total_pnl / initial_capital * 100.0 if initial_capital > 0 else 0.0

    return RunSummary(
        weeks=len(results_list),
        final_position_value=last.position_value,
        final_equity=last.equity,
        total_pnl=total_pnl,
        roi_pct=roi_pct,
        is_liquidated=last.is_liquidated,
        liquidation_week=liquidation_week,
        add_count=len(adds),
        total_btc_added=sum(result.btc_added for result in adds),
    )


def result_to_dict(result: WeeklyResult) -> dict[str, Any]:
    payload = asdict(result)
    payload["date"] = result.date.isoformat()
    payload["action"] = result.action.value
    return payload


def summary_to_dict(summary: RunSummary) -> dict[str, Any]:
    return asdict(summary)
