"""Price series and parameter persistence."""

from lev_dca.store.importer import parse_klines, parse_klines_text
from lev_dca.store.models import ImportFormatError, StoreError
from lev_dca.store.params import ParameterStore, default_params, parse_params
from lev_dca.store.prices import PriceSeriesStore, week_start

__all__ = [
    "ImportFormatError",
    "ParameterStore",
    "PriceSeriesStore",
    "StoreError",
    "default_params",
    "parse_klines",
    "parse_klines_text",
    "parse_params",
    "week_start",
]
