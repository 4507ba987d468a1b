"""Tests for day-count helpers and timing logs."""

import datetime as dt
import logging

import numpy as np
import pytest

from barrier_analytics.enums import DayCountConvention
from barrier_analytics.exceptions import ConfigurationError
from barrier_analytics.utils import calculate_year_fraction, log_timing


START = dt.datetime(2025, 1, 1)
END = dt.datetime(2026, 1, 1)


@pytest.mark.parametrize(
    "convention,expected",
    [
        (DayCountConvention.ACT_365F, 1.0),
        (DayCountConvention.ACT_360, 365.0 / 360.0),
        (DayCountConvention.ACT_365_25, 365.0 / 365.25),
        (DayCountConvention.THIRTY_360_US, 1.0),
    ],
)
def test_year_fraction_conventions(convention, expected):
    assert np.isclose(calculate_year_fraction(START, END, convention), expected)


def test_thirty_360_month_ends():
    frac = calculate_year_fraction(
        dt.datetime(2025, 1, 31), dt.datetime(2025, 3, 31), DayCountConvention.THIRTY_360_US
    )
    assert np.isclose(frac, 60.0 / 360.0)


def test_thirty_360_day_thirty_start():
    frac = calculate_year_fraction(
        dt.date(2025, 1, 30), dt.date(2025, 3, 31), DayCountConvention.THIRTY_360_US
    )
    assert np.isclose(frac, 60.0 / 360.0)


def test_plain_dates_match_midnight_datetimes():
    assert calculate_year_fraction(START.date(), END.date()) == calculate_year_fraction(START, END)
    assert calculate_year_fraction(START.date(), END) == 1.0


def test_intraday_datetimes_count_fractional_days():
    end = START + dt.timedelta(hours=12)
    assert np.isclose(calculate_year_fraction(START, end, DayCountConvention.ACT_360), 0.5 / 360.0)


@pytest.mark.parametrize("bad", ["2025-01-01", 20250101, None])
def test_non_date_rejected(bad):
    with pytest.raises(ConfigurationError):
        calculate_year_fraction(bad, END)


def test_negative_when_reversed():
    assert calculate_year_fraction(END, START) < 0


def test_log_timing_emits_when_enabled(caplog):
    logger = logging.getLogger("barrier_analytics.tests")
    with caplog.at_level(logging.DEBUG, logger="barrier_analytics.tests"):
        with log_timing(logger, "block", True):
            pass
    messages = [rec.getMessage() for rec in caplog.records]
    assert any(msg.startswith("Timing block") and msg.endswith(" ms") for msg in messages)


def test_log_timing_silent_when_disabled(caplog):
    logger = logging.getLogger("barrier_analytics.tests")
    with caplog.at_level(logging.DEBUG, logger="barrier_analytics.tests"):
        with log_timing(logger, "block", False):
            pass
    assert not caplog.records
