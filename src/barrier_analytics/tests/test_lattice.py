"""Tests for the barrier-aligned trinomial lattice geometry."""

import math

import numpy as np
import pytest

from barrier_analytics.enums import BarrierOptionType
from barrier_analytics.exceptions import (
    ArbitrageViolationError,
    BarrierUnreachableError,
    InvalidProbabilityMeasureError,
)
from barrier_analytics.valuation import build_lattice
from barrier_analytics.valuation.lattice import barrier_log_distance


UP = BarrierOptionType.UP_AND_OUT_CALL
DOWN = BarrierOptionType.DOWN_AND_OUT_PUT


class TestLatticeGeometry:
    def setup_method(self):
        self.lattice = build_lattice(
            UP,
            spot=95.0,
            volatility=0.25,
            risk_free_rate=0.05,
            time_to_maturity=1.0,
            barrier=110.0,
            num_steps=200,
        )

    def test_rows_to_barrier(self):
        # ln(110/95) / (0.25 * sqrt(1/200)) = 8.29
        assert self.lattice.h == 8
        assert self.lattice.num_steps == 200
        assert not self.lattice.enlarged

    def test_barrier_sits_on_node_row(self):
        assert np.isclose(95.0 * self.lattice.u**self.lattice.h, 110.0, rtol=1e-12)

    def test_stretch_factor_at_least_one(self):
        assert 1.0 <= self.lattice.lam < (self.lattice.h + 1) / self.lattice.h

    def test_probabilities_sum_to_one(self):
        lat = self.lattice
        assert np.isclose(lat.pu + lat.pm + lat.pd, 1.0, atol=1e-14)
        for p in (lat.pu, lat.pm, lat.pd):
            assert 0.0 <= p <= 1.0

    def test_growth_factor(self):
        assert np.isclose(self.lattice.growth, math.exp(0.05 / 200))

    def test_drift_tilts_up_probability(self):
        # r > sigma^2 / 2
        assert self.lattice.pu > self.lattice.pd


def test_call_and_put_share_geometry_under_spot_barrier_swap():
    call = build_lattice(UP, 95.0, 0.25, 0.05, 1.0, 110.0, 200)
    put = build_lattice(DOWN, 110.0, 0.25, 0.05, 1.0, 95.0, 200)
    assert call == put


def test_log_distance_positive_while_live():
    assert barrier_log_distance(UP, 100.0, 120.0) > 0
    assert barrier_log_distance(DOWN, 100.0, 80.0) > 0
    assert barrier_log_distance(UP, 120.0, 100.0) < 0


@pytest.mark.parametrize(
    "option_type,spot,barrier",
    [(UP, 110.0, 110.0), (UP, 120.0, 110.0), (DOWN, 90.0, 90.0), (DOWN, 80.0, 90.0)],
)
def test_breached_barrier_raises(option_type, spot, barrier):
    with pytest.raises(BarrierUnreachableError):
        build_lattice(option_type, spot, 0.2, 0.05, 1.0, barrier, 100)


class TestStepEnlargement:
    spot = 100.0
    barrier = 100.5
    vol = 0.2

    def test_close_barrier_enlarges_steps(self):
        lat = build_lattice(UP, self.spot, self.vol, 0.05, 1.0, self.barrier, 10)
        log_distance = math.log(self.barrier / self.spot)
        expected_n = math.ceil(self.vol**2 * 1.0 / log_distance**2)

        assert lat.enlarged
        assert lat.requested_steps == 10
        assert lat.num_steps == expected_n
        assert 1 <= lat.h <= lat.num_steps
        assert np.isclose(self.spot * lat.u**lat.h, self.barrier, rtol=1e-12)

    def test_enlargement_above_ceiling_raises(self):
        with pytest.raises(BarrierUnreachableError) as exc_info:
            build_lattice(UP, self.spot, self.vol, 0.05, 1.0, self.barrier, 10, max_num_steps=500)
        assert exc_info.value.num_steps > 500

    def test_barrier_exactly_one_enlarged_row_away(self):
        # sigma^2 T / L^2 lands on an integer, so the ceiling alone can leave h at zero
        barrier = 100.0 * math.exp(0.2 / math.sqrt(3723))
        lat = build_lattice(UP, 100.0, 0.2, 0.05, 1.0, barrier, 200)

        assert lat.enlarged
        assert lat.h >= 1
        assert lat.num_steps >= 3723
        assert np.isclose(100.0 * lat.u**lat.h, barrier, rtol=1e-12)

    def test_no_enlargement_when_barrier_spans_a_row(self):
        lat = build_lattice(UP, 100.0, 0.2, 0.05, 1.0, 130.0, 50)
        assert not lat.enlarged
        assert lat.num_steps == 50


def test_barrier_beyond_lattice_reach_raises():
    # ln(1000) / (0.01 * sqrt(0.1)) rows away from spot, far more than 10 steps
    with pytest.raises(BarrierUnreachableError) as exc_info:
        build_lattice(UP, 1.0, 0.01, 0.05, 1.0, 1000.0, 10)
    assert exc_info.value.h > exc_info.value.num_steps


def test_negative_probability_raises():
    # one coarse step with a high rate and low volatility pushes pd below zero
    with pytest.raises(InvalidProbabilityMeasureError):
        build_lattice(UP, 100.0, 0.05, 0.5, 1.0, 110.0, 1)


def test_probability_error_is_arbitrage_violation():
    assert issubclass(InvalidProbabilityMeasureError, ArbitrageViolationError)
