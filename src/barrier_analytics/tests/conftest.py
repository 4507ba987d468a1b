"""Shared pytest fixtures for barrier_analytics tests."""

import datetime as dt

import pytest

from barrier_analytics.valuation import BarrierOptionValuation

from barrier_analytics.tests.helpers import (
    BARRIER,
    RATE,
    SPOT,
    STRIKE,
    VOL,
    build_valuation,
)


PRICING_DATE = dt.datetime(2025, 1, 1)
MATURITY = dt.datetime(2026, 1, 1)


@pytest.fixture()
def pricing_date() -> dt.datetime:
    return PRICING_DATE


@pytest.fixture()
def maturity() -> dt.datetime:
    return MATURITY


@pytest.fixture()
def spot() -> float:
    return SPOT


@pytest.fixture()
def strike() -> float:
    return STRIKE


@pytest.fixture()
def barrier() -> float:
    return BARRIER


@pytest.fixture()
def risk_free_rate() -> float:
    return RATE


@pytest.fixture()
def vol() -> float:
    return VOL


@pytest.fixture()
def up_and_out_call() -> BarrierOptionValuation:
    """S=95, X=100, H=110, r=5%, sigma=25%, T=1, n=200."""
    return build_valuation()
