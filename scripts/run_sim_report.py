from __future__ import annotations

import argparse
import json
from datetime import datetime, timezone
from pathlib import Path

from lev_dca.config import freeze_config, load_config, verify_config_lock
from lev_dca.monitoring import AuditLog, LogNotifier, Monitor, report_results
from lev_dca.runtime import create_run_context
from lev_dca.simulator import (
    SimulationWindow,
    bound_window,
    lowest_low_window,
    result_to_dict,
    simulate,
    slice_prices,
    summarize,
    summary_to_dict,
)
from lev_dca.store import ParameterStore, PriceSeriesStore


def main() -> None:
    parser = argparse.ArgumentParser(description="Replay the leveraged DCA strategy over stored weekly prices.")
    parser.add_argument("--config", required=True)
    parser.add_argument("--output", required=True)
    parser.add_argument("--prices", help="Price store JSON (defaults to storage.prices_path)")
    parser.add_argument("--params", help="Saved params JSON overriding the config params")
    parser.add_argument("--start", type=int, default=0)
    parser.add_argument("--end", type=int)
    parser.add_argument("--from-lowest", action="store_true", help="Start the window at the lowest weekly low")
    parser.add_argument("--freeze", action="store_true", help="Write a lock file for the config before running")
    parser.add_argument("--require-lock", action="store_true", help="Refuse to run if the config lock does not match")
    args = parser.parse_args()

    config_path = Path(args.config)
    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if args.freeze:
        lock_path = freeze_config(config_path)
        print(f"Frozen {config_path} -> {lock_path}")
    if args.require_lock and not verify_config_lock(config_path):
        raise SystemExit(f"Config lock missing or stale for {config_path}")

    config = load_config(config_path)
    context = create_run_context(config_path, config.run_id_prefix)
    params = ParameterStore(args.params).load() if args.params else config.params

    store = PriceSeriesStore(args.prices or config.storage.prices_path)
    prices = store.load()

    if args.from_lowest:
        window = lowest_low_window(prices) or SimulationWindow.full(len(prices))
    else:
        end = args.end if args.end is not None else len(prices) - 1
        window = bound_window(SimulationWindow(args.start, end), len(prices))
    results = simulate(slice_prices(prices, window), params)
    summary = summarize(results, params.initial_capital)

    audit = AuditLog(
        Path(config.monitoring.audit_log_path),
        run_id=context.run_id,
        config_hash=context.config_hash,
    )
    audit.log(
        "simulation_run",
        {
            "prices": str(store.path),
            "window": [window.start, window.end],
            "weeks": summary.weeks,
            "is_liquidated": summary.is_liquidated,
            "final_equity": summary.final_equity,
        },
    )
    report_results(results, Monitor(LogNotifier(prefix=config.monitoring.notify_prefix)))

    report = {
        "generated_at_utc": datetime.now(timezone.utc).isoformat(),
        "run_id": context.run_id,
        "config_path": str(config_path),
        "config_hash": context.config_hash,
        "params": {
            "initial_capital": params.initial_capital,
            "leverage": params.leverage,
            "max_leverage": params.max_leverage,
            "reinvestment_ratio": params.reinvestment_ratio,
        },
        "window": {"start": window.start, "end": window.end},
        "summary": summary_to_dict(summary),
        "weeks": [result_to_dict(result) for result in results],
    }

    output_path.write_text(json.dumps(report, indent=2, default=str), encoding="utf-8")
    print(f"Wrote {output_path}")


if __name__ == "__main__":
    main()
