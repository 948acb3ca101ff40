"""Monitoring and alert routing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from lev_dca.monitoring.notifier import Notifier
from lev_dca.simulator.engine import WAITING_REASON
from lev_dca.simulator.models import Action, WeeklyResult


@dataclass
class Monitor:
    notifier: Notifier

    def liquidated(self, result: WeeklyResult) -> None:
        self.notifier.notify(
            "LIQUIDATED",
            f"week {result.week_index} ({result.date}): {result.action_reason}",
        )

    def rebalance(self, result: WeeklyResult) -> None:
        self.notifier.notify(
            "REBALANCE",
            f"week {result.week_index} ({result.date}): +{result.btc_added:.6f} at "
            f"{result.open_price:,.2f}, leverage {result.leverage:.2f}x",
        )

    def waiting_input(self, count: int) -> None:
        self.notifier.notify("WAITING_INPUT", f"{count} week(s) have no open price yet")


def report_results(results: Iterable[WeeklyResult], monitor: Monitor) -> None:
    """Notify once per rebalance, once for the liquidation week and once for missing prices."""
    waiting = 0
    already_liquidated = False
    for result in results:
        if result.is_liquidated:
            if not already_liquidated:
                monitor.liquidated(result)
            already_liquidated = True
        elif result.action == Action.ADD:
            monitor.rebalance(result)
        elif result.action_reason == WAITING_REASON:
            waiting += 1
    if waiting:
        monitor.waiting_input(waiting)
