"""Warrant positions priced per underlying option and scaled by the conversion ratio.

Issuers quote warrants by a short class code:

=====  ==============================  =====================
code   contract                        pricing
=====  ==============================  =====================
c      call warrant                    Black-Scholes-Merton
p      put warrant                     Black-Scholes-Merton
cuo    up-and-out call warrant         trinomial lattice
pdo    down-and-out put warrant        trinomial lattice
=====  ==============================  =====================
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace as dc_replace
import datetime as dt
import logging

import numpy as np
import pandas as pd

from .enums import BarrierOptionType, DayCountConvention, Greek, OptionType
from .exceptions import ConfigurationError, ValidationError
from .utils import calculate_year_fraction
from .valuation.bsm import bsm_greeks
from .valuation.core import BarrierOptionSpec, BarrierOptionValuation, UnderlyingPricingData
from .valuation.params import TrinomialParams

logger = logging.getLogger(__name__)

_OUTPUTS: tuple[tuple[Greek, str], ...] = (
    (Greek.PRICE, "price"),
    (Greek.DELTA, "delta"),
    (Greek.GAMMA, "gamma"),
    (Greek.THETA, "theta"),
    (Greek.VEGA, "vega"),
    (Greek.RHO, "rho"),
)


@dataclass(frozen=True, slots=True, kw_only=True)
class Warrant(ABC):
    """Listed warrant on a single underlying.

    Attributes
    ==========
    warrant_id: str
        warrant identifier
    issuer: str
        issuing house
    underlying_id: str
        identifier of the underlying stock
    strike: float
        exercise price X
    maturity: date or datetime
        expiry date
    conversion_ratio: float
        underlying options per warrant; every output is scaled by it
    risk_free_rate: float
        flat continuously-compounded rate. Default: 0.025
    volatility: float
        pricing volatility. Default: 0.1
    spot: float
        last underlying price. Default: 0.0 (not yet observed)
    day_count_convention: DayCountConvention
        basis for the time to maturity. Default: ACT/365F
    """

    warrant_id: str
    issuer: str
    underlying_id: str
    strike: float
    maturity: dt.date
    conversion_ratio: float
    risk_free_rate: float = 0.025
    volatility: float = 0.1
    spot: float = 0.0
    day_count_convention: DayCountConvention = DayCountConvention.ACT_365F

    def __post_init__(self) -> None:
        if not isinstance(self.maturity, dt.date):
            raise ConfigurationError(
                f"maturity must be a date or datetime, got {type(self.maturity).__name__}"
            )
        if not isinstance(self.day_count_convention, DayCountConvention):
            raise ConfigurationError("day_count_convention must be a DayCountConvention enum")
        for name in ("strike", "conversion_ratio", "risk_free_rate", "volatility", "spot"):
            value = float(getattr(self, name))
            if not np.isfinite(value):
                raise ValidationError(f"{name} must be finite")
            object.__setattr__(self, name, value)
        if self.conversion_ratio <= 0:
            raise ValidationError("conversion_ratio must be positive")
        if self.strike < 0 or self.spot < 0 or self.volatility < 0:
            raise ValidationError("strike, spot and volatility must be non-negative")

    def time_to_maturity(self, pricing_date: dt.date) -> float:
        """Year fraction to expiry, floored at zero once the warrant has expired."""
        return max(
            calculate_year_fraction(pricing_date, self.maturity, self.day_count_convention), 0.0
        )

    def with_market(self, *, spot: float | None = None, volatility: float | None = None) -> Warrant:
        """Copy of the warrant with an updated spot and/or volatility."""
        changes = {}
        if spot is not None:
            changes["spot"] = spot
        if volatility is not None:
            changes["volatility"] = volatility
        return dc_replace(self, **changes)

    @abstractmethod
    def _option_values(self, time_to_maturity: float, greeks: Greek) -> dict[str, float]:
        """Per-option outputs selected by ``greeks``."""

    def evaluate(self, pricing_date: dt.datetime, greeks: Greek = Greek.ALL) -> dict[str, float]:
        """Per-warrant price and Greeks selected by the ``greeks`` bitmask."""
        if not isinstance(greeks, Greek):
            raise ConfigurationError(f"greeks must be a Greek flag, got {type(greeks).__name__}")
        T = self.time_to_maturity(pricing_date)
        values = self._option_values(T, greeks)
        return {name: value * self.conversion_ratio for name, value in values.items()}

    def price(self, pricing_date: dt.datetime) -> float:
        return self.evaluate(pricing_date, Greek.PRICE)["price"]

    def delta(self, pricing_date: dt.datetime) -> float:
        return self.evaluate(pricing_date, Greek.DELTA)["delta"]

    def gamma(self, pricing_date: dt.datetime) -> float:
        return self.evaluate(pricing_date, Greek.GAMMA)["gamma"]

    def theta(self, pricing_date: dt.datetime) -> float:
        return self.evaluate(pricing_date, Greek.THETA)["theta"]

    def vega(self, pricing_date: dt.datetime) -> float:
        return self.evaluate(pricing_date, Greek.VEGA)["vega"]

    def rho(self, pricing_date: dt.datetime) -> float:
        return self.evaluate(pricing_date, Greek.RHO)["rho"]

    def report(self, pricing_date: dt.datetime, greeks: Greek = Greek.ALL) -> pd.Series:
        """Per-warrant outputs as a Series named by the warrant id."""
        return pd.Series(self.evaluate(pricing_date, greeks), name=self.warrant_id, dtype=float)


@dataclass(frozen=True, slots=True, kw_only=True)
class _VanillaWarrant(Warrant):
    option_type = OptionType.CALL

    def _option_values(self, time_to_maturity: float, greeks: Greek) -> dict[str, float]:
        return bsm_greeks(
            self.option_type,
            self.spot,
            self.strike,
            self.risk_free_rate,
            self.volatility,
            time_to_maturity,
            greeks=greeks | Greek.PRICE,
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class CallWarrant(_VanillaWarrant):
    option_type = OptionType.CALL


@dataclass(frozen=True, slots=True, kw_only=True)
class PutWarrant(_VanillaWarrant):
    option_type = OptionType.PUT


@dataclass(frozen=True, slots=True, kw_only=True)
class BarrierWarrant(Warrant):
    """Knock-out warrant valued on the barrier-aligned trinomial lattice.

    Attributes
    ==========
    barrier: float
        knock-out level H
    params: TrinomialParams
        lattice configuration
    """

    barrier_type = BarrierOptionType.UP_AND_OUT_CALL

    barrier: float
    params: TrinomialParams = field(default_factory=TrinomialParams)

    def _option_values(self, time_to_maturity: float, greeks: Greek) -> dict[str, float]:
        valuation = BarrierOptionValuation(
            UnderlyingPricingData(
                initial_value=self.spot,
                volatility=self.volatility,
                risk_free_rate=self.risk_free_rate,
            ),
            BarrierOptionSpec(
                option_type=self.barrier_type,
                strike=self.strike,
                barrier=self.barrier,
                maturity=time_to_maturity,
            ),
            params=self.params,
            name=self.warrant_id,
        )
        result = valuation.evaluate(greeks)
        if not result.ok:
            logger.debug("%s: lattice valuation failed with %s", self.warrant_id, result.status)
        requested = greeks | Greek.PRICE
        return {name: result.get(greek) for greek, name in _OUTPUTS if greek in requested}


@dataclass(frozen=True, slots=True, kw_only=True)
class CallUpOutWarrant(BarrierWarrant):
    barrier_type = BarrierOptionType.UP_AND_OUT_CALL


@dataclass(frozen=True, slots=True, kw_only=True)
class PutDownOutWarrant(BarrierWarrant):
    barrier_type = BarrierOptionType.DOWN_AND_OUT_PUT


# mapping of issuer class codes to warrant kinds
WARRANT_TYPES: dict[str, type[Warrant]] = {
    "c": CallWarrant,
    "p": PutWarrant,
    "cuo": CallUpOutWarrant,
    "pdo": PutDownOutWarrant,
}


def warrant_from_code(code: str, **kwargs) -> Warrant:
    """Build a warrant from its issuer class code.

    ``barrier`` is required for ``cuo``/``pdo`` and rejected for ``c``/``p``.
    """
    cls = WARRANT_TYPES.get(code.strip().lower())
    if cls is None:
        raise ValidationError(
            f"Unsupported warrant code {code!r}; expected one of {sorted(WARRANT_TYPES)}"
        )
    is_barrier = issubclass(cls, BarrierWarrant)
    if is_barrier and kwargs.get("barrier") is None:
        raise ValidationError(f"Warrant code {code!r} requires a barrier")
    if not is_barrier and "barrier" in kwargs:
        raise ValidationError(f"Warrant code {code!r} takes no barrier")
    return cls(**kwargs)
