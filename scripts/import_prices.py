from __future__ import annotations

import argparse
from pathlib import Path

from lev_dca.config import load_config
from lev_dca.monitoring import AuditLog
from lev_dca.store import ImportFormatError, PriceSeriesStore, parse_klines_text


def main() -> None:
    parser = argparse.ArgumentParser(description="Replace the stored price series with imported klines.")
    parser.add_argument("--input", required=True, help='JSON array of [timestamp_ms, "open", "high", "low", ...]')
    parser.add_argument("--config", help="Config providing storage.prices_path")
    parser.add_argument("--store", help="Price store JSON to write")
    args = parser.parse_args()

    config = load_config(args.config) if args.config else None
    if args.store:
        store_path = Path(args.store)
    elif config is not None:
        store_path = Path(config.storage.prices_path)
    else:
        raise SystemExit("Either --store or --config is required")

    try:
        weeks = parse_klines_text(Path(args.input).read_text(encoding="utf-8"))
    except ImportFormatError as exc:
        raise SystemExit(f"Import failed: {exc}") from exc

    store = PriceSeriesStore(store_path)
    store.replace_all(weeks)
    store.save()

    if config is not None:
        AuditLog(config.monitoring.audit_log_path).log(
            "prices_imported",
            {"input": args.input, "store": str(store_path), "weeks": len(store.rows)},
        )
    print(f"Imported {len(store.rows)} weeks into {store_path}")


if __name__ == "__main__":
    main()
