import json
import runpy
import sys
from datetime import date, timedelta
from pathlib import Path

import pytest

pytest.importorskip("yaml")

from lev_dca.config import verify_config_lock
from lev_dca.simulator import WeeklyPrice
from lev_dca.store import PriceSeriesStore

SCRIPTS = Path(__file__).resolve().parents[1] / "scripts"


def _write_config(tmp_path):
    config = tmp_path / "config.yaml"
    config.write_text(
        "\n".join(
            [
                "name: script-test",
                "version: 1",
                "storage:",
                f"  prices_path: {(tmp_path / 'prices.json').as_posix()}",
                f"  params_path: {(tmp_path / 'params.json').as_posix()}",
                "monitoring:",
                f"  audit_log_path: {(tmp_path / 'audit.log').as_posix()}",
                "",
            ]
        ),
        encoding="utf-8",
    )
    return config


def _write_prices(tmp_path, count=5):
    store = PriceSeriesStore(tmp_path / "prices.json")
    store.replace_all(
        [
            WeeklyPrice(
                week_index=0,
                date=date(2024, 1, 1) + timedelta(weeks=index),
                open_price=100 + index,
                low_price=99 + index,
            )
            for index in range(count)
        ]
    )
    store.save()


def _run(monkeypatch, script, *args):
    monkeypatch.setattr(sys, "argv", [script, *[str(arg) for arg in args]])
    runpy.run_path(str(SCRIPTS / script), run_name="__main__")


def test_run_sim_report_keeps_single_week_window(tmp_path, monkeypatch):
    config = _write_config(tmp_path)
    _write_prices(tmp_path)
    output = tmp_path / "report.json"

    _run(monkeypatch, "run_sim_report.py", "--config", config, "--output", output, "--start", 0, "--end", 0)

    report = json.loads(output.read_text(encoding="utf-8"))
    assert report["window"] == {"start": 0, "end": 0}
    assert len(report["weeks"]) == 1
    assert report["weeks"][0]["action"] == "OPEN"


def test_run_sim_report_bounds_requested_window(tmp_path, monkeypatch):
    config = _write_config(tmp_path)
    _write_prices(tmp_path)
    output = tmp_path / "report.json"

    _run(monkeypatch, "run_sim_report.py", "--config", config, "--output", output, "--start", 3, "--end", 40)

    report = json.loads(output.read_text(encoding="utf-8"))
    assert report["window"] == {"start": 3, "end": 4}
    assert [week["week_index"] for week in report["weeks"]] == [4, 5]


def test_freeze_config_script_writes_and_checks_lock(tmp_path, monkeypatch, capsys):
    config = _write_config(tmp_path)

    _run(monkeypatch, "freeze_config.py", config)

    assert verify_config_lock(config)
    assert "(ok)" in capsys.readouterr().out

    _run(monkeypatch, "freeze_config.py", config, "--check")
    assert "Lock ok" in capsys.readouterr().out

    config.write_text(config.read_text(encoding="utf-8") + "# edited\n", encoding="utf-8")
    with pytest.raises(SystemExit, match="stale"):
        _run(monkeypatch, "freeze_config.py", config, "--check")
