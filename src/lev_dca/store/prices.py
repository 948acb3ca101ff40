"""Persist and edit the weekly price series."""

from __future__ import annotations

import json
import math
from dataclasses import replace
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Iterable, Optional

from lev_dca.simulator.models import WeeklyPrice
from lev_dca.store.models import StoreError

WEEK = timedelta(days=7)

EDITABLE_FIELDS = ("date", "open_price", "low_price", "high_price")

_ALIASES = {
    "weekIndex": "week_index",
    "openPrice": "open_price",
    "lowPrice": "low_price",
    "highPrice": "high_price",
}


def week_start(today: Optional[date] = None) -> date:
    """Monday of the week containing ``today``."""
    today = today or date.today()
    return today - timedelta(days=today.weekday())


def blank_week(week_date: date, week_index: int = 1) -> WeeklyPrice:
    return WeeklyPrice(week_index=week_index, date=week_date)


def renumber(rows: Iterable[WeeklyPrice]) -> list[WeeklyPrice]:
    return [replace(row, week_index=index + 1) for index, row in enumerate(rows)]


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise StoreError(f"Invalid date: {value!r}")
    try:
        if len(value) > 10:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        return date.fromisoformat(value)
    except ValueError as exc:
        raise StoreError(f"Invalid date: {value!r}") from exc


def _parse_price(value: Any, key: str) -> float:
    if value is None or value == "":
        return 0.0
    try:
        price = float(value)
    except (TypeError, ValueError) as exc:
        raise StoreError(f"Invalid {key}: {value!r}") from exc
    if not math.isfinite(price):
        raise StoreError(f"Invalid {key}: {value!r}")
    return price


def price_from_dict(data: dict[str, Any], position: int) -> WeeklyPrice:
    normalized = {_ALIASES.get(key, key): value for key, value in data.items()}
    if "date" not in normalized:
        raise StoreError(f"Row {position} is missing a date")
    open_price = _parse_price(normalized.get("open_price"), "open_price")
    low_value = normalized.get("low_price")
    return WeeklyPrice(
        week_index=position + 1,
        date=_parse_date(normalized["date"]),
        open_price=open_price,
        low_price=open_price if low_value is None else _parse_price(low_value, "low_price"),
        high_price=_parse_price(normalized.get("high_price"), "high_price"),
    )


def price_to_dict(week: WeeklyPrice) -> dict[str, Any]:
    return {
        "week_index": week.week_index,
        "date": week.date.isoformat(),
        "open_price": week.open_price,
        "low_price": week.low_price,
        "high_price": week.high_price,
    }


class PriceSeriesStore:
    """Ordered weekly series backed by a JSON file.

    Rows are kept in ascending date order and renumbered after every edit.
    Rows added at either end are dated a week from their neighbour and carry
    no prices until the user enters them.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.rows: list[WeeklyPrice] = []

    def load(self, today: Optional[date] = None) -> list[WeeklyPrice]:
        if not self.path.exists():
            self.rows = [blank_week(week_start(today))]
            return self.rows
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise StoreError(f"Failed to parse saved prices at {self.path}") from exc
        if not isinstance(data, list):
            raise StoreError("Saved prices must be a list")
        rows = []
        for position, item in enumerate(data):
            if not isinstance(item, dict):
                raise StoreError(f"Row {position} must be a mapping")
            rows.append(price_from_dict(item, position))
        self.rows = rows
        return self.rows

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [price_to_dict(week) for week in self.rows]
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def add_previous_week(self, today: Optional[date] = None) -> WeeklyPrice:
        new_date = self.rows[0].date - WEEK if self.rows else (today or date.today())
        self.rows = renumber([blank_week(new_date), *self.rows])
        return self.rows[0]

    def add_next_week(self, today: Optional[date] = None) -> WeeklyPrice:
        new_date = self.rows[-1].date + WEEK if self.rows else (today or date.today())
        self.rows = renumber([*self.rows, blank_week(new_date)])
        return self.rows[-1]

    def update_row(self, index: int, field: str, value: Any) -> WeeklyPrice:
        if not 0 <= index < len(self.rows):
            raise StoreError(f"Row index out of range: {index}")
        field = _ALIASES.get(field, field)
        if field not in EDITABLE_FIELDS:
            raise StoreError(f"Field is not editable: {field}")
        if field == "date":
            coerced: Any = _parse_date(value)
        else:
            coerced = _parse_price(value, field)
        updated = replace(self.rows[index], **{field: coerced})
        self.rows[index] = updated
        return updated

    def delete_rows(self, indices: Iterable[int]) -> int:
        doomed = set(indices)
        kept = [row for position, row in enumerate(self.rows) if position not in doomed]
        removed = len(self.rows) - len(kept)
        self.rows = renumber(kept)
        return removed

    def replace_all(self, rows: Iterable[WeeklyPrice]) -> None:
        self.rows = renumber(rows)

    def clear(self, today: Optional[date] = None) -> None:
        self.rows = [blank_week(week_start(today))]
