"""Barrier option contract, market inputs and the valuation dispatcher."""

from __future__ import annotations

from dataclasses import dataclass, replace as dc_replace
import logging

import numpy as np
import pandas as pd

from ..enums import BarrierOptionType, ExerciseType, Greek, ValuationStatus
from ..exceptions import (
    BarrierUnreachableError,
    ConfigurationError,
    ConvergenceError,
    InvalidProbabilityMeasureError,
    NumericalError,
    ValidationError,
)
from ..utils import log_timing
from .lattice import LatticeParameters, build_lattice
from .params import TrinomialParams
from .trinomial import SweepResult, sweep

logger = logging.getLogger(__name__)

# Greek flag -> ValuationResult field
_GREEK_FIELDS: dict[Greek, str] = {
    Greek.PRICE: "price",
    Greek.DELTA: "delta",
    Greek.GAMMA: "gamma",
    Greek.THETA: "theta",
    Greek.VEGA: "vega",
    Greek.RHO: "rho",
}

_STATUS_ERRORS: dict[ValuationStatus, type[NumericalError]] = {
    ValuationStatus.BARRIER_UNREACHABLE: BarrierUnreachableError,
    ValuationStatus.INVALID_PROBABILITY_MEASURE: InvalidProbabilityMeasureError,
    ValuationStatus.NO_CONVERGENCE: ConvergenceError,
}


def _finite_non_negative(value: object, name: str, owner: str) -> float:
    if value is None:
        raise ValidationError(f"{owner}.{name} must be provided")
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{owner}.{name} must be numeric") from exc
    if not np.isfinite(number):
        raise ValidationError(f"{owner}.{name} must be finite")
    if number < 0.0:
        raise ValidationError(f"{owner}.{name} must be >= 0")
    return number


@dataclass(frozen=True, slots=True)
class BarrierOptionSpec:
    """Contract specification for a single-barrier knock-out option.

    Attributes
    ==========
    option_type: BarrierOptionType
        up-and-out call or down-and-out put
    strike: float
        exercise price X
    barrier: float
        knock-out level H, continuously monitored
    maturity: float
        time to maturity T in years
    exercise_type: ExerciseType
        EUROPEAN (default) or AMERICAN
    rebate: float, optional
        value paid on knock-out. ``None`` pays the intrinsic value at the
        barrier (``H - X`` for the call, ``X - H`` for the put).
    """

    option_type: BarrierOptionType
    strike: float
    barrier: float
    maturity: float
    exercise_type: ExerciseType = ExerciseType.EUROPEAN
    rebate: float | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.option_type, BarrierOptionType):
            raise ConfigurationError(
                f"option_type must be BarrierOptionType enum, got {type(self.option_type).__name__}"
            )
        if not isinstance(self.exercise_type, ExerciseType):
            raise ConfigurationError(
                f"exercise_type must be ExerciseType enum, got {type(self.exercise_type).__name__}"
            )
        owner = type(self).__name__
        strike = _finite_non_negative(self.strike, "strike", owner)
        barrier = _finite_non_negative(self.barrier, "barrier", owner)
        maturity = _finite_non_negative(self.maturity, "maturity", owner)
        object.__setattr__(self, "strike", strike)
        object.__setattr__(self, "barrier", barrier)
        object.__setattr__(self, "maturity", maturity)

        if strike > 0.0 and barrier > 0.0:
            if self.option_type.is_up and barrier <= strike:
                raise ValidationError("For an up-and-out call, barrier must be > strike")
            if not self.option_type.is_up and barrier >= strike:
                raise ValidationError("For a down-and-out put, barrier must be < strike")

        if self.rebate is not None:
            rebate = float(self.rebate)
            if not np.isfinite(rebate):
                raise ValidationError(f"{owner}.rebate must be finite")
            object.__setattr__(self, "rebate", rebate)

    @property
    def barrier_payoff(self) -> float:
        """Value assigned to lattice nodes on the barrier."""
        if self.rebate is not None:
            return self.rebate
        if self.option_type.is_up:
            return self.barrier - self.strike
        return self.strike - self.barrier


@dataclass(frozen=True, slots=True)
class UnderlyingPricingData:
    """Spot, volatility and flat continuously-compounded rate of the underlying."""

    initial_value: float
    volatility: float
    risk_free_rate: float

    def __post_init__(self) -> None:
        owner = type(self).__name__
        object.__setattr__(
            self, "initial_value", _finite_non_negative(self.initial_value, "initial_value", owner)
        )
        object.__setattr__(
            self, "volatility", _finite_non_negative(self.volatility, "volatility", owner)
        )
        try:
            rate = float(self.risk_free_rate)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"{owner}.risk_free_rate must be numeric") from exc
        if not np.isfinite(rate):
            raise ValidationError(f"{owner}.risk_free_rate must be finite")
        object.__setattr__(self, "risk_free_rate", rate)

    def replace(self, **kwargs: object) -> "UnderlyingPricingData":
        """Create a new instance with modified fields, for bump-and-revalue."""
        return dc_replace(self, **kwargs)


@dataclass(frozen=True, slots=True)
class ValuationResult:
    """Tagged outcome of one valuation call.

    ``status`` is VALUE for a priced option (including a knocked-out one, whose
    outputs are all zero), DEGENERATE when an input is zero, or the numerical
    failure that prevented pricing. Outputs that were not requested, or could
    not be computed, are ``None``.
    """

    status: ValuationStatus
    price: float | None = None
    delta: float | None = None
    gamma: float | None = None
    theta: float | None = None
    vega: float | None = None
    rho: float | None = None
    num_steps: int | None = None
    lattice: LatticeParameters | None = None
    knocked_out: bool = False
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.status in (ValuationStatus.VALUE, ValuationStatus.DEGENERATE)

    def get(self, greek: Greek) -> float:
        """Return one output, raising the matching library error if it is unavailable."""
        field_name = _GREEK_FIELDS.get(greek)
        if field_name is None:
            raise ConfigurationError(f"get() takes a single Greek, got {greek}")
        value = getattr(self, field_name)
        if value is None:
            error_cls = _STATUS_ERRORS.get(self.status)
            if error_cls is not None:
                raise error_cls(self.detail or f"{field_name} unavailable: {self.status.value}")
            raise ConfigurationError(f"{field_name} was not requested")
        return value


def _status_for(exc: NumericalError) -> ValuationStatus:
    if isinstance(exc, InvalidProbabilityMeasureError):
        return ValuationStatus.INVALID_PROBABILITY_MEASURE
    if isinstance(exc, BarrierUnreachableError):
        return ValuationStatus.BARRIER_UNREACHABLE
    return ValuationStatus.NO_CONVERGENCE


class BarrierOptionValuation:
    """Knock-out option valuation on a barrier-aligned trinomial lattice.

    Attributes
    ==========
    underlying: UnderlyingPricingData
        spot, volatility and rate
    spec: BarrierOptionSpec
        contract terms
    params: TrinomialParams
        lattice configuration
    name: str
        identifier used in log messages

    Methods
    =======
    evaluate:
        price and any selection of Greeks from one parameterised sweep
    present_value, delta, gamma, theta, vega, rho:
        single-output convenience accessors
    greeks_frame:
        requested outputs as a pandas Series
    """

    def __init__(
        self,
        underlying: UnderlyingPricingData,
        spec: BarrierOptionSpec,
        params: TrinomialParams | None = None,
        name: str = "",
    ) -> None:
        if not isinstance(underlying, UnderlyingPricingData):
            raise ConfigurationError(
                f"underlying must be UnderlyingPricingData, got {type(underlying).__name__}"
            )
        if not isinstance(spec, BarrierOptionSpec):
            raise ConfigurationError(f"spec must be BarrierOptionSpec, got {type(spec).__name__}")
        if params is None:
            params = TrinomialParams()
        elif not isinstance(params, TrinomialParams):
            raise ConfigurationError(f"params must be TrinomialParams, got {type(params).__name__}")

        self.underlying = underlying
        self.spec = spec
        self.params = params
        self.name = name or spec.option_type.value

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, spot={self.underlying.initial_value}, "
            f"strike={self.spec.strike}, barrier={self.spec.barrier}, "
            f"num_steps={self.params.num_steps})"
        )

    def _is_degenerate(self) -> bool:
        inputs = (
            self.underlying.initial_value,
            self.underlying.volatility,
            self.underlying.risk_free_rate,
            self.spec.strike,
            self.spec.barrier,
            self.spec.maturity,
            self.params.num_steps,
        )
        return any(value == 0 for value in inputs)

    def _is_breached(self) -> bool:
        spot, barrier = self.underlying.initial_value, self.spec.barrier
        if self.spec.option_type.is_up:
            return spot >= barrier
        return spot <= barrier

    def _sweep_at(self, volatility: float, risk_free_rate: float) -> SweepResult:
        """Build the lattice at the given volatility and rate and run one sweep."""
        spec = self.spec
        spot = self.underlying.initial_value
        lattice = build_lattice(
            spec.option_type,
            spot=spot,
            volatility=volatility,
            risk_free_rate=risk_free_rate,
            time_to_maturity=spec.maturity,
            barrier=spec.barrier,
            num_steps=self.params.num_steps,
            max_num_steps=self.params.max_num_steps,
        )
        with log_timing(logger, f"{self.name} trinomial sweep", self.params.log_timings):
            return sweep(
                spec.option_type,
                lattice,
                spot=spot,
                strike=spec.strike,
                barrier_payoff=spec.barrier_payoff,
                exercise_type=spec.exercise_type,
            )

    def evaluate(self, greeks: Greek = Greek.PRICE) -> ValuationResult:
        """Price the option and compute the Greeks selected by ``greeks``.

        Delta, Gamma and Theta are read from the first lattice layer of the
        base sweep. Vega and Rho are forward differences, each costing one
        more lattice build and sweep with the bumped volatility or rate.

        Parameters
        ==========
        greeks: Greek
            bitmask of requested outputs; the price is always returned

        Returns
        =======
        ValuationResult
        """
        if not isinstance(greeks, Greek):
            raise ConfigurationError(f"greeks must be a Greek flag, got {type(greeks).__name__}")
        requested = greeks | Greek.PRICE

        if self._is_degenerate() or self._is_breached():
            degenerate = self._is_degenerate()
            logger.debug(
                "%s: %s, all outputs zero",
                self.name,
                "degenerate input" if degenerate else "barrier already breached",
            )
            zeros = {_GREEK_FIELDS[g]: 0.0 for g in _GREEK_FIELDS if g in requested}
            return ValuationResult(
                status=ValuationStatus.DEGENERATE if degenerate else ValuationStatus.VALUE,
                knocked_out=not degenerate,
                **zeros,
            )

        volatility = self.underlying.volatility
        rate = self.underlying.risk_free_rate
        spot = self.underlying.initial_value

        try:
            base = self._sweep_at(volatility, rate)
        except (BarrierUnreachableError, InvalidProbabilityMeasureError) as exc:
            logger.debug("%s: lattice rejected: %s", self.name, exc)
            return ValuationResult(
                status=_status_for(exc),
                num_steps=getattr(exc, "num_steps", None),
                detail=str(exc),
            )

        outputs: dict[str, float] = {"price": base.price}
        if Greek.DELTA in requested:
            outputs["delta"] = base.delta(spot)
        if Greek.GAMMA in requested:
            outputs["gamma"] = base.gamma(spot)
        if Greek.THETA in requested:
            outputs["theta"] = base.theta()

        status = ValuationStatus.VALUE
        detail = None
        bumps = []
        if Greek.VEGA in requested:
            bumps.append(("vega", volatility + self.params.vega_bump, rate, self.params.vega_bump))
        if Greek.RHO in requested:
            bumps.append(("rho", volatility, rate + self.params.rho_bump, self.params.rho_bump))

        for field_name, bumped_vol, bumped_rate, bump in bumps:
            try:
                bumped = self._sweep_at(bumped_vol, bumped_rate)
            except (BarrierUnreachableError, InvalidProbabilityMeasureError) as exc:
                logger.debug("%s: bumped lattice for %s rejected: %s", self.name, field_name, exc)
                status, detail = _status_for(exc), str(exc)
                continue
            outputs[field_name] = (bumped.price - base.price) / bump

        return ValuationResult(
            status=status,
            num_steps=base.lattice.num_steps,
            lattice=base.lattice,
            detail=detail,
            **outputs,
        )

    def present_value(self) -> float:
        """Return the option value; zero for degenerate or knocked-out inputs."""
        return self.evaluate(Greek.PRICE).get(Greek.PRICE)

    def delta(self) -> float:
        """Lattice Delta from the nodes ``S*u`` and ``S/u`` one step ahead."""
        return self.evaluate(Greek.DELTA).get(Greek.DELTA)

    def gamma(self) -> float:
        """Lattice Gamma from the three nodes one step ahead."""
        return self.evaluate(Greek.GAMMA).get(Greek.GAMMA)

    def theta(self) -> float:
        """Lattice Theta per year."""
        return self.evaluate(Greek.THETA).get(Greek.THETA)

    def vega(self) -> float:
        """Forward-difference Vega per unit volatility."""
        return self.evaluate(Greek.VEGA).get(Greek.VEGA)

    def rho(self) -> float:
        """Forward-difference Rho per unit rate."""
        return self.evaluate(Greek.RHO).get(Greek.RHO)

    def greeks_frame(self, greeks: Greek = Greek.ALL) -> pd.Series:
        """Requested outputs as a Series indexed by output name."""
        result = self.evaluate(greeks)
        data = {
            name: getattr(result, name)
            for greek, name in _GREEK_FIELDS.items()
            if greek in (greeks | Greek.PRICE)
        }
        return pd.Series(data, name=self.name, dtype=float)
