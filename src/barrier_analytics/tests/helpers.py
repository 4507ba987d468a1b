"""Builders shared by the test modules."""

from barrier_analytics.enums import BarrierOptionType, ExerciseType
from barrier_analytics.valuation import (
    BarrierOptionSpec,
    BarrierOptionValuation,
    TrinomialParams,
    UnderlyingPricingData,
)

# base scenario: up-and-out call, one year, n=200
SPOT = 95.0
STRIKE = 100.0
BARRIER = 110.0
RATE = 0.05
VOL = 0.25
NUM_STEPS = 200


def build_valuation(
    *,
    option_type: BarrierOptionType = BarrierOptionType.UP_AND_OUT_CALL,
    spot: float = SPOT,
    strike: float = STRIKE,
    barrier: float = BARRIER,
    vol: float = VOL,
    rate: float = RATE,
    maturity: float = 1.0,
    num_steps: int = NUM_STEPS,
    exercise_type: ExerciseType = ExerciseType.EUROPEAN,
    rebate: float | None = None,
    **param_kwargs,
) -> BarrierOptionValuation:
    """Knock-out valuation around the base scenario; extra kwargs go to TrinomialParams."""
    underlying = UnderlyingPricingData(initial_value=spot, volatility=vol, risk_free_rate=rate)
    spec = BarrierOptionSpec(
        option_type=option_type,
        strike=strike,
        barrier=barrier,
        maturity=maturity,
        exercise_type=exercise_type,
        rebate=rebate,
    )
    params = TrinomialParams(num_steps=num_steps, **param_kwargs)
    return BarrierOptionValuation(underlying, spec, params, name="test")
