from pathlib import Path

from lev_dca.config import freeze_config, load_config, verify_config_lock
from lev_dca.monitoring import AuditLog, LogNotifier, Monitor, report_results
from lev_dca.runtime import create_run_context
from lev_dca.simulator import simulate, summarize
from lev_dca.store import PriceSeriesStore, parse_klines_text


config_path = Path("configs") / "default.yaml"
config = load_config(config_path)
lock_path = freeze_config(config_path)
assert verify_config_lock(config_path, lock_path)

context = create_run_context(config_path, config.run_id_prefix)

monitor = Monitor(LogNotifier(prefix=config.monitoring.notify_prefix))
audit = AuditLog(
    Path(config.monitoring.audit_log_path),
    run_id=context.run_id,
    config_hash=context.config_hash,
)
audit.log("run_start", {"config": str(config_path), "lock": str(lock_path)})

store = PriceSeriesStore(config.storage.prices_path)
store.replace_all(parse_klines_text((Path("data") / "sample_klines.json").read_text(encoding="utf-8")))
store.save()

results = simulate(store.rows, config.params)
report_results(results, monitor)
summary = summarize(results, config.params.initial_capital)
audit.log("run_end", {"final_equity": summary.final_equity, "is_liquidated": summary.is_liquidated})

print("Run complete:", context.run_id)
