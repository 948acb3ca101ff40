"""Selection of the contiguous range of weeks to simulate."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from lev_dca.simulator.models import WeeklyPrice


@dataclass(frozen=True)
class SimulationWindow:
    start: int = 0
    end: int = 0

    def absolute_index(self, relative_index: int) -> int:
        return self.start + relative_index

    def shifted(self, offset: int) -> "SimulationWindow":
        return SimulationWindow(self.start + offset, self.end + offset)

    @classmethod
    def full(cls, length: int) -> "SimulationWindow":
        return cls(0, max(0, length - 1))


def clamp_window(window: SimulationWindow, length: int) -> SimulationWindow:
    """Fit ``window`` to a series of ``length`` rows after the series changed.

    A fresh (0, 0) window opens to the full range once there is more than one
    row; an end of 0 is also widened to the last row.
    """
    max_index = length - 1
    if max_index < 0:
        return SimulationWindow(0, 0)
    if window.start == 0 and window.end == 0 and max_index > 0:
        return SimulationWindow(0, max_index)

    start = min(window.start, max_index)
    end = min(window.end, max_index)
    if end < start:
        end = start
    return SimulationWindow(start, max_index if end == 0 else end)


def bound_window(window: SimulationWindow, length: int) -> SimulationWindow:
    """Fit ``window`` inside a series of ``length`` rows without widening it."""
    max_index = length - 1
    if max_index < 0:
        return SimulationWindow(0, 0)
    start = min(max(window.start, 0), max_index)
    end = min(max(window.end, start), max_index)
    return SimulationWindow(start, end)


def sync_window(
    window: SimulationWindow, previous_length: Optional[int], length: int
) -> SimulationWindow:
    """Re-fit the window on a rerun; the first-load widening applies only when the length changed."""
    if previous_length != length:
        return clamp_window(window, length)
    return bound_window(window, length)


def slice_prices(prices: Sequence[WeeklyPrice], window: SimulationWindow) -> list[WeeklyPrice]:
    if not prices:
        return []
    return list(prices[window.start : window.end + 1])


def lowest_low_window(prices: Sequence[WeeklyPrice]) -> Optional[SimulationWindow]:
    """Window starting at the week with the lowest low and running to the end."""
    best_index: Optional[int] = None
    best_low = 0.0
    for index, week in enumerate(prices):
        low = week.effective_low()
        if low is None or not low > 0:
            continue
        if best_index is None or low < best_low:
            best_index = index
            best_low = low
    if best_index is None:
        return None
    return SimulationWindow(best_index, len(prices) - 1)
