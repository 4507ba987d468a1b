from .enums import (
    BarrierOptionType,
    ExerciseType,
    Greek,
    ImpliedVolMethod,
    OptionType,
    ValuationStatus,
)
from .exceptions import BarrierAnalyticsError
from .valuation import (
    BarrierOptionSpec,
    BarrierOptionValuation,
    TrinomialParams,
    UnderlyingPricingData,
    barrier_implied_volatility,
    vanilla_implied_volatility,
)
from .warrants import (
    Warrant,
    CallWarrant,
    PutWarrant,
    CallUpOutWarrant,
    PutDownOutWarrant,
    warrant_from_code,
)


__all__ = [
    "BarrierOptionType",
    "ExerciseType",
    "Greek",
    "ImpliedVolMethod",
    "OptionType",
    "ValuationStatus",
    "BarrierAnalyticsError",
    "BarrierOptionSpec",
    "BarrierOptionValuation",
    "TrinomialParams",
    "UnderlyingPricingData",
    "barrier_implied_volatility",
    "vanilla_implied_volatility",
    "Warrant",
    "CallWarrant",
    "PutWarrant",
    "CallUpOutWarrant",
    "PutDownOutWarrant",
    "warrant_from_code",
]
