"""Enums for barrier option valuation."""

from enum import Enum, Flag, auto

__all__ = [
    "OptionType",
    "BarrierOptionType",
    "ExerciseType",
    "Greek",
    "ValuationStatus",
    "ImpliedVolMethod",
    "DayCountConvention",
]


class OptionType(Enum):
    CALL = "call"
    PUT = "put"


class BarrierOptionType(Enum):
    """Supported single-barrier knock-out contracts."""

    UP_AND_OUT_CALL = "up_and_out_call"
    DOWN_AND_OUT_PUT = "down_and_out_put"

    @property
    def is_up(self) -> bool:
        return self is BarrierOptionType.UP_AND_OUT_CALL

    @property
    def vanilla_type(self) -> OptionType:
        return OptionType.CALL if self.is_up else OptionType.PUT


class ExerciseType(Enum):
    EUROPEAN = "european"
    AMERICAN = "american"


class Greek(Flag):
    """Bitmask selecting the outputs of a single valuation call."""

    PRICE = auto()
    DELTA = auto()
    GAMMA = auto()
    THETA = auto()
    VEGA = auto()
    RHO = auto()

    # read off the shallow lattice layers of one sweep
    LATTICE = DELTA | GAMMA | THETA
    # need a second lattice build per output
    BUMP = VEGA | RHO
    ALL = PRICE | DELTA | GAMMA | THETA | VEGA | RHO


class ValuationStatus(Enum):
    VALUE = "value"
    DEGENERATE = "degenerate"
    BARRIER_UNREACHABLE = "barrier_unreachable"
    INVALID_PROBABILITY_MEASURE = "invalid_probability_measure"
    NO_CONVERGENCE = "no_convergence"


class ImpliedVolMethod(Enum):
    NEWTON_RAPHSON = "newton_raphson"
    BISECTION = "bisection"


class DayCountConvention(Enum):
    ACT_360 = "ACT/360"
    ACT_365F = "ACT/365F"
    ACT_365_25 = "ACT/365.25"
    THIRTY_360_US = "30/360 US"
