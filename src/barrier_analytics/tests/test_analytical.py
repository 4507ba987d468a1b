"""Tests for the continuous-monitoring knock-out closed form."""

import numpy as np
import pytest

from barrier_analytics.enums import BarrierOptionType, OptionType
from barrier_analytics.exceptions import ValidationError
from barrier_analytics.valuation import bsm_price, knock_out_analytical


UP = BarrierOptionType.UP_AND_OUT_CALL
DOWN = BarrierOptionType.DOWN_AND_OUT_PUT


@pytest.mark.parametrize(
    "option_type,spot,strike,barrier",
    [(UP, 95.0, 100.0, 120.0), (DOWN, 105.0, 100.0, 85.0)],
)
def test_knock_out_between_zero_and_vanilla(option_type, spot, strike, barrier):
    price = knock_out_analytical(option_type, spot, strike, barrier, 0.05, 0.2, 1.0)
    vanilla = bsm_price(option_type.vanilla_type, spot, strike, 0.05, 0.2, 1.0)
    assert 0.0 < price < vanilla


def test_far_barrier_recovers_vanilla():
    price = knock_out_analytical(UP, 100.0, 100.0, 1000.0, 0.05, 0.2, 1.0)
    vanilla = bsm_price(OptionType.CALL, 100.0, 100.0, 0.05, 0.2, 1.0)
    assert np.isclose(price, vanilla, rtol=1e-8)


def test_price_vanishes_towards_barrier():
    near = knock_out_analytical(UP, 119.99, 100.0, 120.0, 0.05, 0.2, 1.0)
    assert near < 0.05


@pytest.mark.parametrize("option_type,spot", [(UP, 120.0), (UP, 130.0), (DOWN, 80.0)])
def test_breached_barrier_is_zero(option_type, spot):
    barrier = 120.0 if option_type is UP else 85.0
    assert knock_out_analytical(option_type, spot, 100.0, barrier, 0.05, 0.2, 1.0) == 0.0


def test_barrier_strike_relation_enforced():
    with pytest.raises(ValidationError):
        knock_out_analytical(UP, 95.0, 100.0, 100.0, 0.05, 0.2, 1.0)
    with pytest.raises(ValidationError):
        knock_out_analytical(DOWN, 105.0, 100.0, 110.0, 0.05, 0.2, 1.0)
