from __future__ import annotations

import os
from dataclasses import replace
from pathlib import Path

import streamlit as st

from lev_dca.simulator import (
    SimulationParams,
    SimulationWindow,
    clamp_window,
    lowest_low_window,
    result_to_dict,
    simulate,
    slice_prices,
    summarize,
    sync_window,
)
from lev_dca.store import (
    ImportFormatError,
    ParameterStore,
    PriceSeriesStore,
    StoreError,
    parse_klines_text,
)

TABLE_COLUMNS = [
    "week_index",
    "date",
    "open_price",
    "low_price",
    "high_price",
    "action",
    "btc_added",
    "total_btc_holdings",
    "cost_basis",
    "theoretical_liq_price",
    "position_value",
    "debt",
    "equity",
    "leverage",
    "floating_pnl",
    "equity_high",
    "floating_pnl_high",
    "action_reason",
    "next_week_condition",
]


def _format_currency(value: float) -> str:
    return f"${value:,.0f}"


def _load_stores(prices_path: Path, params_path: Path) -> tuple[PriceSeriesStore, ParameterStore]:
    if "price_store" not in st.session_state:
        store = PriceSeriesStore(prices_path)
        store.load()
        st.session_state.price_store = store
        st.session_state.window = SimulationWindow(0, 0)
        st.session_state.series_length = None
    return st.session_state.price_store, ParameterStore(params_path)


def _params_sidebar(saved: SimulationParams) -> SimulationParams:
    st.sidebar.header("Parameters")
    initial_capital = st.sidebar.number_input(
        "Initial capital", min_value=1.0, value=float(saved.initial_capital), step=1000.0
    )
    leverage = st.sidebar.number_input("Target leverage", min_value=1.0, value=float(saved.leverage), step=0.1)
    max_leverage = st.sidebar.number_input(
        "Max leverage (liquidation)", min_value=1.0, value=float(saved.max_leverage), step=0.5
    )
    reinvestment_ratio = st.sidebar.slider(
        "Reinvestment ratio (%)", min_value=0, max_value=100, value=int(saved.reinvestment_ratio)
    )
    return SimulationParams(
        initial_capital=initial_capital,
        leverage=leverage,
        max_leverage=max_leverage,
        reinvestment_ratio=float(reinvestment_ratio),
    )


def main() -> None:
    st.set_page_config(page_title="BTC Leveraged DCA", layout="wide")
    st.title("BTC Leveraged DCA")

    prices_path = Path(st.sidebar.text_input("Prices path", value=os.getenv("LEV_DCA_PRICES_PATH", "data/prices.json")))
    params_path = Path(st.sidebar.text_input("Params path", value=os.getenv("LEV_DCA_PARAMS_PATH", "data/params.json")))

    try:
        store, param_store = _load_stores(prices_path, params_path)
        saved_params = param_store.load()
    except StoreError as exc:
        st.error(f"Could not load saved data: {exc}")
        return

    params = _params_sidebar(saved_params)
    if params != saved_params:
        param_store.save(params)
    st.caption(
        f"Strategy: maintain {params.leverage:g}x leverage by reinvesting floating profits. Hold on loss."
    )

    window = sync_window(st.session_state.window, st.session_state.series_length, len(store.rows))
    col_prev, col_next, col_lowest, col_clear = st.columns(4)
    if col_prev.button("Add previous week"):
        store.add_previous_week()
        window = window.shifted(1)
        store.save()
    if col_next.button("Add next week"):
        at_end = window.end == len(store.rows) - 1
        store.add_next_week()
        if at_end:
            window = replace(window, end=window.end + 1)
        store.save()
    if col_lowest.button("Restart from lowest"):
        window = lowest_low_window(store.rows) or window
    if col_clear.button("Clear data"):
        store.clear()
        store.save()
        window = SimulationWindow(0, 0)

    if len(store.rows) > 1:
        start, end = st.slider(
            "Simulation window",
            min_value=0,
            max_value=len(store.rows) - 1,
            value=(window.start, window.end),
        )
        window = SimulationWindow(start, end)
    st.session_state.window = window
    st.session_state.series_length = len(store.rows)

    results = simulate(slice_prices(store.rows, window), params)
    summary = summarize(results, params.initial_capital)

    col_a, col_b, col_c = st.columns(3)
    col_a.metric("Position size", _format_currency(summary.final_position_value))
    col_b.metric("Final equity", _format_currency(summary.final_equity))
    if summary.is_liquidated:
        col_c.metric("Total PnL", "BUSTED")
    else:
        col_c.metric("Total PnL", _format_currency(summary.total_pnl), f"{summary.roi_pct:.2f}%")

    if results:
        st.subheader("Performance")
        st.line_chart(
            {
                "equity (low)": [result.equity for result in results],
                "equity (high)": [result.equity_high for result in results],
                "debt": [result.debt for result in results],
            }
        )

    st.subheader("Weekly prices")
    edited = st.data_editor(
        [
            {
                "date": week.date.isoformat(),
                "open_price": week.open_price,
                "low_price": week.low_price,
                "high_price": week.high_price,
            }
            for week in slice_prices(store.rows, window)
        ],
        key="price_editor",
        use_container_width=True,
    )
    changed = False
    for relative_index, row in enumerate(edited):
        absolute_index = window.absolute_index(relative_index)
        current = store.rows[absolute_index]
        for field in ("date", "open_price", "low_price", "high_price"):
            before = current.date.isoformat() if field == "date" else getattr(current, field)
            if row[field] != before:
                try:
                    current = store.update_row(absolute_index, field, row[field])
                except StoreError as exc:
                    st.error(str(exc))
                    continue
                changed = True
    if changed:
        store.save()
        st.rerun()

    delete_choices = st.multiselect(
        "Delete weeks",
        options=list(range(len(results))),
        format_func=lambda index: f"#{results[index].week_index} {results[index].date}",
    )
    if delete_choices and st.button("Delete selected"):
        store.delete_rows(window.absolute_index(index) for index in delete_choices)
        store.save()
        st.session_state.window = clamp_window(window, len(store.rows))
        st.session_state.series_length = len(store.rows)
        st.rerun()

    st.subheader("Results")
    st.dataframe(
        [{column: result_to_dict(result)[column] for column in TABLE_COLUMNS} for result in results],
        use_container_width=True,
    )

    st.subheader("Import weekly data (JSON)")
    st.caption('Paste a JSON array of arrays: [timestamp, "open", "high", "low", "close", ...].')
    raw = st.text_area("Kline data", value="", height=120)
    if st.button("Apply JSON data", disabled=not raw.strip()):
        try:
            weeks = parse_klines_text(raw)
        except ImportFormatError as exc:
            st.error(f"Error: {exc}")
        else:
            store.replace_all(weeks)
            store.save()
            st.session_state.window = SimulationWindow.full(len(store.rows))
            st.rerun()


if __name__ == "__main__":
    main()
