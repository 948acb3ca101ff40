"""Errors raised while reading or editing stored data."""

from __future__ import annotations


class StoreError(ValueError):
    """Stored content or an edit request is not usable."""


class ImportFormatError(ValueError):
    """Imported price payload does not match the kline array format."""
