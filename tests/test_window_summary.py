from datetime import date, timedelta

import pytest

from lev_dca.simulator import (
    SimulationParams,
    SimulationWindow,
    WeeklyPrice,
    bound_window,
    clamp_window,
    lowest_low_window,
    result_to_dict,
    simulate,
    slice_prices,
    summarize,
    sync_window,
)


def _week(index, open_price, low_price=0.0):
    return WeeklyPrice(
        week_index=index + 1,
        date=date(2024, 1, 1) + timedelta(weeks=index),
        open_price=open_price,
        low_price=low_price,
    )


PARAMS = SimulationParams(initial_capital=10000, leverage=2.0, max_leverage=10.0)


def test_clamp_window_follows_series_length():
    assert clamp_window(SimulationWindow(0, 0), 0) == SimulationWindow(0, 0)
    assert clamp_window(SimulationWindow(0, 0), 1) == SimulationWindow(0, 0)
    assert clamp_window(SimulationWindow(0, 0), 5) == SimulationWindow(0, 4)
    assert clamp_window(SimulationWindow(2, 3), 3) == SimulationWindow(2, 2)
    assert clamp_window(SimulationWindow(3, 4), 2) == SimulationWindow(1, 1)
    assert clamp_window(SimulationWindow(1, 2), 6) == SimulationWindow(1, 2)


def test_bound_window_never_widens():
    assert bound_window(SimulationWindow(0, 0), 5) == SimulationWindow(0, 0)
    assert bound_window(SimulationWindow(3, 40), 5) == SimulationWindow(3, 4)
    assert bound_window(SimulationWindow(6, 2), 5) == SimulationWindow(4, 4)
    assert bound_window(SimulationWindow(-2, 1), 5) == SimulationWindow(0, 1)
    assert bound_window(SimulationWindow(2, 3), 0) == SimulationWindow(0, 0)


def test_sync_window_widens_only_when_length_changes():
    # First load of a series opens the full range.
    assert sync_window(SimulationWindow(0, 0), None, 5) == SimulationWindow(0, 4)
    # A single-week selection survives later reruns.
    assert sync_window(SimulationWindow(0, 0), 5, 5) == SimulationWindow(0, 0)
    assert sync_window(SimulationWindow(2, 2), 5, 5) == SimulationWindow(2, 2)
    assert sync_window(SimulationWindow(2, 4), 5, 3) == SimulationWindow(2, 2)


def test_window_index_helpers():
    window = SimulationWindow(2, 5)

    assert window.absolute_index(1) == 3
    assert window.shifted(1) == SimulationWindow(3, 6)
    assert SimulationWindow.full(4) == SimulationWindow(0, 3)
    assert SimulationWindow.full(0) == SimulationWindow(0, 0)


def test_slice_prices_is_inclusive():
    prices = [_week(index, 100 + index) for index in range(5)]

    sliced = slice_prices(prices, SimulationWindow(1, 3))

    assert [week.open_price for week in sliced] == [101, 102, 103]
    assert slice_prices([], SimulationWindow(0, 0)) == []


def test_lowest_low_window_uses_effective_low():
    prices = [_week(0, 100, 95), _week(1, 80), _week(2, 90, 85), _week(3, 0)]

    assert lowest_low_window(prices) == SimulationWindow(1, 3)
    assert lowest_low_window([_week(0, 0), _week(1, 0)]) is None


def test_summary_of_profitable_run():
    results = simulate([_week(0, 100, 100), _week(1, 150, 140)], PARAMS)

    summary = summarize(results, PARAMS.initial_capital)

    holdings = 200 + 10000 / 150
    assert summary.weeks == 2
    assert summary.add_count == 1
    assert summary.total_btc_added == pytest.approx(10000 / 150)
    assert summary.final_position_value == pytest.approx(holdings * 140)
    assert summary.total_pnl == pytest.approx(holdings * 140 - 30000)
    assert summary.roi_pct == pytest.approx((holdings * 140 - 30000) / 100)
    assert summary.is_liquidated is False
    assert summary.liquidation_week is None


def test_summary_of_liquidated_run():
    results = simulate([_week(0, 100, 100), _week(1, 150, 45), _week(2, 150, 150)], PARAMS)

    summary = summarize(results, PARAMS.initial_capital)

    assert summary.is_liquidated is True
    assert summary.liquidation_week == 1
    assert summary.total_pnl == -10000
    assert summary.roi_pct == pytest.approx(-100)


def test_summary_of_empty_run():
    summary = summarize([], 10000)

    assert summary.weeks == 0
    assert summary.final_equity == 0
    assert summary.liquidation_week is None


def test_result_to_dict_is_json_friendly():
    result = simulate([_week(0, 100, 100)], PARAMS)[0]

    payload = result_to_dict(result)

    assert payload["date"] == "2024-01-01"
    assert payload["action"] == "OPEN"
    assert payload["total_btc_holdings"] == pytest.approx(200)
