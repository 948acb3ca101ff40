from pathlib import Path

import pytest

yaml = pytest.importorskip("yaml")

from lev_dca.config import freeze_config, load_config, serialize_config, verify_config_lock

CONFIG = Path(__file__).resolve().parents[1] / "configs" / "default.yaml"


def test_load_config_sample():
    config = load_config(CONFIG)

    assert config.name == "btc-lev-dca"
    assert config.run_id_prefix == "levdca"
    assert config.params.initial_capital == 10000
    assert config.params.leverage == 2.0
    assert config.params.reinvestment_ratio == 100
    assert config.storage.prices_path == "data/prices.json"
    assert config.monitoring.audit_log_path == "runtime/audit.log"


def test_missing_params_fall_back_to_defaults(tmp_path):
    path = tmp_path / "minimal.yaml"
    path.write_text("name: minimal\nversion: 2\n", encoding="utf-8")

    config = load_config(path)

    assert config.run_id_prefix == "minimal"
    assert config.params.max_leverage == 10
    assert config.params.reinvestment_ratio == 100
    assert serialize_config(config)["params"]["initial_capital"] == 10000


@pytest.mark.parametrize(
    "body, message",
    [
        ("- just\n- a list\n", "Config must be a mapping"),
        ("version: 1\n", "Missing required config key: name"),
        ("name: x\nversion: 1\nparams:\n  reinvestment_ratio: 150\n", "Invalid reinvestment_ratio"),
        ("name: x\nversion: 1\nparams:\n  initial_capital: 0\n", "Invalid initial_capital"),
        ("name: x\nversion: 1\nparams:\n  leverage: 0.5\n", "Invalid leverage"),
    ],
)
def test_invalid_config(tmp_path, body, message):
    path = tmp_path / "bad.yaml"
    path.write_text(body, encoding="utf-8")

    with pytest.raises(ValueError, match=message):
        load_config(path)


def test_freeze_and_verify(tmp_path):
    target = tmp_path / "default.yaml"
    target.write_text(CONFIG.read_text(encoding="utf-8"), encoding="utf-8")

    lock_path = freeze_config(target)
    assert verify_config_lock(target, lock_path)

    target.write_text(target.read_text(encoding="utf-8") + "# edited\n", encoding="utf-8")
    assert not verify_config_lock(target, lock_path)
    assert not verify_config_lock(tmp_path / "other.yaml")
