from __future__ import annotations

import argparse
from pathlib import Path

from lev_dca.config import freeze_config, load_config, verify_config_lock


def main() -> None:
    parser = argparse.ArgumentParser(description="Write or check the lock file for a simulation config.")
    parser.add_argument("config")
    parser.add_argument("--lock", help="Lock file path (defaults to <config>.lock.json)")
    parser.add_argument("--check", action="store_true", help="Only verify the existing lock, do not rewrite it")
    args = parser.parse_args()

    path = Path(args.config)
    lock_path = Path(args.lock) if args.lock else None
    if args.check:
        if not verify_config_lock(path, lock_path):
            raise SystemExit(f"Config lock missing or stale for {path}")
        print(f"Lock ok for {path}")
        return

    # Reject configs the loader would refuse before locking them.
    load_config(path)
    written = freeze_config(path, lock_path)
    status = "ok" if verify_config_lock(path, written) else "mismatch"
    print(f"Frozen {path} -> {written} ({status})")


if __name__ == "__main__":
    main()
