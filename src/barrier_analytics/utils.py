"""Helpers shared by the valuation engine and the warrant layer."""

from __future__ import annotations

from contextlib import contextmanager
import datetime as dt
from collections.abc import Iterator
import logging
import time

from .enums import DayCountConvention
from .exceptions import ConfigurationError, ValidationError

__all__ = [
    "log_timing",
    "calculate_year_fraction",
]

# actual-day conventions: days in a year
_ACTUAL_BASIS: dict[DayCountConvention, float] = {
    DayCountConvention.ACT_360: 360.0,
    DayCountConvention.ACT_365F: 365.0,
    DayCountConvention.ACT_365_25: 365.25,
}


@contextmanager
def log_timing(logger: logging.Logger, label: str, enabled: bool) -> Iterator[None]:
    """Log the wall time of a block at debug level when ``enabled``."""
    if not enabled:
        yield
        return
    start = time.perf_counter()
    try:
        yield
    finally:
        logger.debug("Timing %s: %.3f ms", label, 1e3 * (time.perf_counter() - start))


def _as_datetime(value: dt.date, name: str) -> dt.datetime:
    # warrant expiries are often plain dates
    if isinstance(value, dt.datetime):
        return value
    if isinstance(value, dt.date):
        return dt.datetime(value.year, value.month, value.day)
    raise ConfigurationError(f"{name} must be a date or datetime, got {type(value).__name__}")


def _thirty_360_us(start: dt.datetime, end: dt.datetime) -> float:
    d1 = min(start.day, 30)
    d2 = end.day
    if d2 == 31 and d1 == 30:
        d2 = 30
    days = 360 * (end.year - start.year) + 30 * (end.month - start.month) + (d2 - d1)
    return days / 360.0


def calculate_year_fraction(
    start_date: dt.date,
    end_date: dt.date,
    day_count_convention: DayCountConvention = DayCountConvention.ACT_365F,
) -> float:
    """Year fraction between two dates under a day-count convention.

    Parameters
    ==========
    start_date, end_date: date or datetime
        period bounds; plain dates are taken at midnight
    day_count_convention: DayCountConvention
        ACT/360, ACT/365F (default), ACT/365.25 or 30/360 US

    Returns
    =======
    float
        negative when ``end_date`` precedes ``start_date``
    """
    start = _as_datetime(start_date, "start_date")
    end = _as_datetime(end_date, "end_date")

    if day_count_convention is DayCountConvention.THIRTY_360_US:
        return _thirty_360_us(start, end)
    basis = _ACTUAL_BASIS.get(day_count_convention)
    if basis is None:
        raise ValidationError(f"Unsupported day_count_convention: {day_count_convention}")
    return (end - start).total_seconds() / 86_400.0 / basis
