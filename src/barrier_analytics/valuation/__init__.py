"""Knock-out option valuation on a barrier-aligned trinomial lattice.

Public API
----------
Core classes:
    BarrierOptionValuation: Lattice pricing dispatcher (price and Greeks)
    BarrierOptionSpec: Contract specification for knock-out options
    UnderlyingPricingData: Minimal underlying data container
    ValuationResult: Tagged outcome of one valuation call

Parameter classes:
    TrinomialParams: Configuration for trinomial lattice pricing

Lattice:
    LatticeParameters, build_lattice: barrier-aligned geometry
    SweepResult, sweep: backward induction

Implied volatility:
    ImpliedVolResult, barrier_implied_volatility, vanilla_implied_volatility

Closed forms:
    bsm_price, bsm_greeks: Black-Scholes-Merton vanilla prices and Greeks
    knock_out_analytical: continuous-monitoring knock-out price
"""

from .core import (
    BarrierOptionValuation,
    BarrierOptionSpec,
    UnderlyingPricingData,
    ValuationResult,
)
from .params import TrinomialParams
from .lattice import LatticeParameters, build_lattice
from .trinomial import SweepResult, sweep
from .implied_volatility import (
    ImpliedVolResult,
    barrier_implied_volatility,
    vanilla_implied_volatility,
)
from .bsm import bsm_price, bsm_greeks
from .analytical import knock_out_analytical

__all__ = [
    # Core valuation classes
    "BarrierOptionValuation",
    "BarrierOptionSpec",
    "UnderlyingPricingData",
    "ValuationResult",
    # Parameter classes
    "TrinomialParams",
    # Lattice
    "LatticeParameters",
    "build_lattice",
    "SweepResult",
    "sweep",
    # Implied volatility
    "ImpliedVolResult",
    "barrier_implied_volatility",
    "vanilla_implied_volatility",
    # Closed forms
    "bsm_price",
    "bsm_greeks",
    "knock_out_analytical",
]
