"""Leveraged DCA simulator.

The engine is a left fold over the weekly price series: each step takes the
running state entering a week plus that week's prices and returns the state
leaving the week together with one ledger row. Nothing is shared between
runs, so ``simulate`` is safe to call repeatedly and from several threads.

Liquidation is tested against the weekly low before any rebalancing, and
rebalancing is decided at the weekly open. Every reported figure is valued
twice, at the low (conservative) and at the high (optimistic).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Optional

from lev_dca.simulator.models import Action, SimulationParams, WeeklyPrice, WeeklyResult, is_positive

WAITING_REASON = "Waiting for price input"


@dataclass(frozen=True)
class RunState:
    """Totals carried from one week into the next.

    ``equity`` records the equity at the last open-price decision. Reported
    rows always revalue the position at the week's low and high instead.
    """

    equity: float
    debt: float = 0.0
    btc_holdings: float = 0.0
    total_cost_basis_usd: float = 0.0
    is_open: bool = False
    is_liquidated: bool = False

    @classmethod
    def initial(cls, params: SimulationParams) -> "RunState":
        return cls(equity=params.initial_capital)

    def cost_basis(self) -> float:
        if self.btc_holdings > 0:
            return self.total_cost_basis_usd / self.btc_holdings
        return 0.0


@dataclass(frozen=True)
class Valuation:
    position_value: float
    equity: float
    leverage: float
    floating_pnl: float


def leverage_ratio(position_value: float, equity: float) -> Optional[float]:
    """Position value over equity, or ``None`` when equity is exhausted (unbounded)."""
    if equity > 0:
        return position_value / equity
    return None


def liquidation_price(debt: float, btc_holdings: float, max_leverage: float) -> float:
    """Highest price at which the position is liquidated.

    Equity reaches zero at ``debt / holdings``; leverage reaches the maximum at
    ``max_lev * debt / (holdings * (max_lev - 1))``. With a maximum of 1 or less
    only the bankruptcy price applies.
    """
    if btc_holdings <= 0:
        return 0.0
    bankruptcy_price = debt / btc_holdings
    if max_leverage > 1:
        max_lev_price = (max_leverage * debt) / (btc_holdings * (max_leverage - 1))
    else:
        max_lev_price = bankruptcy_price
    return max(bankruptcy_price, max_lev_price)


def value_at(state: RunState, price: float, initial_capital: float) -> Valuation:
    position_value = state.btc_holdings * price
    equity = position_value - state.debt
    return Valuation(
        position_value=position_value,
        equity=equity,
        leverage=leverage_ratio(position_value, equity) or 0.0,
        floating_pnl=equity - initial_capital,
    )


def _format_leverage(value: Optional[float]) -> str:
    if value is None:
        return "unbounded"
    return f"{value:.2f}x"


class LeverageSimulator:
    def __init__(self, params: SimulationParams) -> None:
        self.params = params

    def run(self, prices: Iterable[WeeklyPrice]) -> list[WeeklyResult]:
        state = RunState.initial(self.params)
        results: list[WeeklyResult] = []
        for week in prices:
            state, result = self.step(state, week)
            results.append(result)
        return results

    def step(self, state: RunState, week: WeeklyPrice) -> tuple[RunState, WeeklyResult]:
        pre_holdings = state.btc_holdings
        pre_cost_basis = state.cost_basis()

        if state.is_liquidated:
            return state, self._dead_row(week)
        if not week.has_price():
            return state, self._waiting_row(week, pre_holdings, pre_cost_basis)

        open_price = week.open_price
        low_price = week.effective_low()
        high_price = week.effective_high()

        if not state.is_open:
            state = self._open(state, open_price)
            action = Action.OPEN
            btc_added = state.btc_holdings
            reason = f"Initial entry. Leverage set to {self.params.leverage:g}x."
            liq_price = liquidation_price(state.debt, state.btc_holdings, self.params.max_leverage)
            if self.breach_reason(state, low_price) is not None:
                action = Action.LIQUIDATED
                reason = "Liquidated immediately due to the opening week low."
        else:
            liq_price = liquidation_price(state.debt, state.btc_holdings, self.params.max_leverage)
            breach = self.breach_reason(state, low_price)
            if breach is not None:
                action = Action.LIQUIDATED
                btc_added = 0.0
                reason = breach
            else:
                state, action, btc_added, reason = self._rebalance(state, open_price)

        liquidated = action == Action.LIQUIDATED
        low = value_at(state, low_price, self.params.initial_capital)
        high = value_at(state, high_price, self.params.initial_capital)
        if liquidated:
            reason += f" (Debt: ${state.debt:,.0f}, Pos: ${low.position_value:,.0f})"

        result = WeeklyResult(
            week_index=week.week_index,
            date=week.date,
            open_price=open_price,
            low_price=low_price,
            high_price=high_price,
            action=action,
            btc_added=btc_added,
            action_reason=reason,
            pre_action_holdings=pre_holdings,
            pre_action_cost_basis=pre_cost_basis,
            theoretical_liq_price=liq_price,
            total_btc_holdings=state.btc_holdings,
            cost_basis=state.cost_basis(),
            position_value=low.position_value,
            debt=state.debt,
            equity=low.equity,
            leverage=low.leverage,
            floating_pnl=low.floating_pnl,
            position_value_high=high.position_value,
            equity_high=high.equity,
            leverage_high=high.leverage,
            floating_pnl_high=high.floating_pnl,
            is_liquidated=liquidated,
            next_week_condition=self._forecast(liquidated, low, low_price),
        )

        if liquidated:
            state = RunState(equity=0.0, is_open=True, is_liquidated=True)
        return state, result

    def breach_reason(self, state: RunState, low_price: float) -> Optional[str]:
        """Why the position busts at ``low_price``, or ``None`` if it survives."""
        position_value = state.btc_holdings * low_price
        equity = position_value - state.debt
        if equity <= 0:
            return "Equity hit 0 at weekly low."
        leverage = leverage_ratio(position_value, equity)
        if leverage is not None and leverage >= self.params.max_leverage:
            return (
                f"Leverage ({leverage:.2f}x) exceeded max ({self.params.max_leverage:g}x) at weekly low."
            )
        return None

    def _open(self, state: RunState, open_price: float) -> RunState:
        capital = self.params.initial_capital
        target_position = capital * self.params.leverage
        return replace(
            state,
            equity=capital,
            btc_holdings=target_position / open_price,
            debt=target_position - capital,
            total_cost_basis_usd=target_position,
            is_open=True,
        )

    def _rebalance(
        self, state: RunState, open_price: float
    ) -> tuple[RunState, Action, float, str]:
        params = self.params
        position_value = state.btc_holdings * open_price
        equity = position_value - state.debt
        current_leverage = leverage_ratio(position_value, equity)
        state = replace(state, equity=equity)

        if not equity > params.initial_capital:
            return (
                state,
                Action.HOLD,
                0.0,
                f"PnL <= 0 (Equity: ${equity:,.0f}). Strategy only adds when in profit.",
            )
        if current_leverage is None or current_leverage >= params.leverage:
            return (
                state,
                Action.HOLD,
                0.0,
                f"Current leverage ({_format_leverage(current_leverage)}) >= target "
                f"({params.leverage:g}x). No need to add.",
            )
        if params.reinvestment_ratio <= 0:
            return state, Action.HOLD, 0.0, "Profitable, but reinvestment ratio is set to 0%. Holding."

        raw_difference = equity * params.leverage - position_value
        difference = raw_difference * params.reinvest_fraction
        if difference <= 0:
            return state, Action.HOLD, 0.0, "Rebalance amount rounds to zero. Holding."

        btc_to_buy = difference / open_price
        state = replace(
            state,
            btc_holdings=state.btc_holdings + btc_to_buy,
            debt=state.debt + difference,
            total_cost_basis_usd=state.total_cost_basis_usd + difference,
        )
        pct_text = f" ({params.reinvestment_ratio:g}% reinvest)" if params.reinvestment_ratio < 100 else ""
        reason = (
            f"Profit detected. Leverage dropped to {current_leverage:.2f}x. "
            f"Rebalancing{pct_text} towards {params.leverage:g}x."
        )
        return state, Action.ADD, btc_to_buy, reason

    def _forecast(self, liquidated: bool, low: Valuation, low_price: float) -> str:
        if liquidated:
            return f"Liquidated at low: ${low_price:,.2f}"
        if low.equity > self.params.initial_capital:
            return "In profit (at low). Maintaining strategy."
        return "In loss (at low). Holding position."

    def _waiting_row(
        self, week: WeeklyPrice, pre_holdings: float, pre_cost_basis: float
    ) -> WeeklyResult:
        return WeeklyResult(
            week_index=week.week_index,
            date=week.date,
            open_price=0.0,
            low_price=week.low_price if is_positive(week.low_price) else 0.0,
            high_price=week.high_price if is_positive(week.high_price) else 0.0,
            action=Action.HOLD,
            btc_added=0.0,
            action_reason=WAITING_REASON,
            pre_action_holdings=pre_holdings,
            pre_action_cost_basis=pre_cost_basis,
            theoretical_liq_price=0.0,
            total_btc_holdings=0.0,
            cost_basis=0.0,
            position_value=0.0,
            debt=0.0,
            equity=0.0,
            leverage=0.0,
            floating_pnl=0.0,
            position_value_high=0.0,
            equity_high=0.0,
            leverage_high=0.0,
            floating_pnl_high=0.0,
            is_liquidated=False,
            next_week_condition="Waiting for price input...",
        )

    def _dead_row(self, week: WeeklyPrice) -> WeeklyResult:
        priced = week.has_price()
        lost = -self.params.initial_capital
        return WeeklyResult(
            week_index=week.week_index,
            date=week.date,
            open_price=week.open_price if priced else 0.0,
            low_price=week.effective_low() if priced else 0.0,
            high_price=week.effective_high() if priced else 0.0,
            action=Action.LIQUIDATED,
            btc_added=0.0,
            action_reason="Account previously liquidated",
            pre_action_holdings=0.0,
            pre_action_cost_basis=0.0,
            theoretical_liq_price=0.0,
            total_btc_holdings=0.0,
            cost_basis=0.0,
            position_value=0.0,
            debt=0.0,
            equity=0.0,
            leverage=0.0,
            floating_pnl=lost,
            position_value_high=0.0,
            equity_high=0.0,
            leverage_high=0.0,
            floating_pnl_high=lost,
            is_liquidated=True,
            next_week_condition="Account liquidated",
        )


def simulate(prices: Iterable[WeeklyPrice], params: SimulationParams) -> list[WeeklyResult]:
    return LeverageSimulator(params).run(prices)
