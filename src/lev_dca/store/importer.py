"""Import weekly prices from exchange kline arrays.

Expected payload is a JSON array of rows shaped like
``[timestamp_ms, "open", "high", "low", "close", ...]``. Only the timestamp and
open are required; a missing high or low falls back to the open.
"""

from __future__ import annotations

import json
import math
from datetime import datetime, timezone
from typing import Any

from lev_dca.simulator.models import WeeklyPrice
from lev_dca.store.models import ImportFormatError


def parse_klines_text(text: str) -> list[WeeklyPrice]:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ImportFormatError(f"Failed to parse JSON: {exc.msg}") from exc
    return parse_klines(payload)


def parse_klines(payload: Any) -> list[WeeklyPrice]:
    if not isinstance(payload, list):
        raise ImportFormatError(
            'Data must be an array (e.g. [[timestamp, "open", "high", "low", ...], ...])'
        )

    weeks: list[WeeklyPrice] = []
    for index, item in enumerate(payload):
        if not isinstance(item, (list, tuple)) or len(item) < 2:
            raise ImportFormatError(
                f'Item at index {index} is invalid. Expected array [timestamp, "open", "high", "low", ...]'
            )

        timestamp = item[0]
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            raise ImportFormatError(f"Invalid timestamp at index {index}")
        try:
            week_date = datetime.fromtimestamp(timestamp / 1000.0, tz=timezone.utc).date()
        except (OverflowError, OSError, ValueError) as exc:
            raise ImportFormatError(f"Invalid timestamp at index {index}") from exc

        open_price = _parse_price(item[1], index)
        high_price = _optional_price(item, 2, open_price, index)
        low_price = _optional_price(item, 3, open_price, index)

        weeks.append(
            WeeklyPrice(
                week_index=index + 1,
                date=week_date,
                open_price=open_price,
                low_price=low_price,
                high_price=high_price,
            )
        )
    return weeks


def _parse_price(value: Any, index: int) -> float:
    if isinstance(value, bool):
        raise ImportFormatError(f"Invalid price format at index {index}")
    try:
        price = float(value)
    except (TypeError, ValueError) as exc:
        raise ImportFormatError(f"Invalid price format at index {index}") from exc
    if math.isnan(price) or math.isinf(price):
        raise ImportFormatError(f"Invalid price format at index {index}")
    return round(price, 2)


def _optional_price(item: Any, position: int, default: float, index: int) -> float:
    if len(item) <= position or item[position] is None:
        return default
    return _parse_price(item[position], index)
