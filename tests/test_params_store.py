import json

import pytest

from lev_dca.simulator import SimulationParams
from lev_dca.store import ParameterStore, StoreError, default_params, parse_params


def test_missing_file_gives_defaults(tmp_path):
    params = ParameterStore(tmp_path / "params.json").load()

    assert params == default_params()
    assert params.reinvestment_ratio == 100
    assert params.max_leverage == 10


def test_legacy_record_gets_missing_fields():
    params = parse_params({"initialCapital": 5000, "leverage": 3})

    assert params == SimulationParams(
        initial_capital=5000,
        leverage=3,
        max_leverage=10,
        reinvestment_ratio=100,
    )


def test_explicit_zero_ratio_is_kept():
    params = parse_params({"initial_capital": 5000, "leverage": 2, "reinvestment_ratio": 0})

    assert params.reinvestment_ratio == 0
    assert params.reinvest_fraction == 0


def test_save_and_load_round_trip(tmp_path):
    store = ParameterStore(tmp_path / "nested" / "params.json")
    params = SimulationParams(initial_capital=2500, leverage=1.5, max_leverage=4, reinvestment_ratio=40)

    store.save(params)

    assert store.load() == params
    assert json.loads(store.path.read_text(encoding="utf-8"))["reinvestment_ratio"] == 40


def test_invalid_values_raise(tmp_path):
    with pytest.raises(StoreError):
        parse_params({"leverage": "lots"})

    path = tmp_path / "params.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(StoreError):
        ParameterStore(path).load()
