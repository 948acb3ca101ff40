from datetime import date, timedelta

from lev_dca.simulator import SimulationParams, WeeklyPrice, simulate, summarize


start = date(2024, 1, 1)
weeks = [
    (42283.58, 40750.00, 44729.58),
    (43960.00, 41500.00, 48969.48),
    (41732.35, 40280.00, 43578.01),
    (0.0, 0.0, 0.0),  # not entered yet
    (42031.05, 41884.28, 43882.36),
    (48300.00, 47710.01, 52816.62),
    (51728.85, 50901.44, 64000.00),
    (63113.97, 59005.00, 69000.00),
]
prices = [
    WeeklyPrice(
        week_index=index + 1,
        date=start + timedelta(weeks=index),
        open_price=open_price,
        low_price=low_price,
        high_price=high_price,
    )
    for index, (open_price, low_price, high_price) in enumerate(weeks)
]

params = SimulationParams(initial_capital=10000, leverage=3.0, max_leverage=10, reinvestment_ratio=50)
results = simulate(prices, params)

for result in results:
    print(
        f"{result.date} {result.action.value:<10} btc={result.total_btc_holdings:.4f} "
        f"equity={result.equity:,.0f} lev={result.leverage:.2f}x | {result.action_reason}"
    )

summary = summarize(results, params.initial_capital)
print("Final equity:", round(summary.final_equity, 2))
print("ROI %:", round(summary.roi_pct, 2))
print("Liquidated:", summary.is_liquidated)
