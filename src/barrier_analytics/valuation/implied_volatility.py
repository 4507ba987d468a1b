"""Implied volatility solvers for knock-out options and their vanilla counterparts."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import logging
import math

import numpy as np

from ..enums import Greek, ImpliedVolMethod, OptionType, ValuationStatus
from ..exceptions import (
    BarrierUnreachableError,
    ConfigurationError,
    InvalidProbabilityMeasureError,
    ValidationError,
)
from ..utils import log_timing
from .bsm import bsm_greeks, bsm_price
from .core import BarrierOptionValuation, _status_for

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ImpliedVolResult:
    """Result container for implied volatility calculation.

    ``status`` is VALUE on success, DEGENERATE when the target sits below the
    lowest searchable price (``implied_vol`` is then 0), NO_CONVERGENCE when the
    search failed, or the lattice failure met at a trial volatility.
    """

    implied_vol: float
    iterations: int
    converged: bool
    status: ValuationStatus = ValuationStatus.VALUE


class _DegenerateTrial(Exception):
    """A trial valuation priced to zero by construction (degenerate or knocked out)."""


def _valuation_with_vol(valuation: BarrierOptionValuation, vol: float) -> BarrierOptionValuation:
    """Clone valuation with bumped volatility."""
    return BarrierOptionValuation(
        underlying=valuation.underlying.replace(volatility=float(vol)),
        spec=valuation.spec,
        params=valuation.params,
        name=f"{valuation.name}_iv",
    )


def barrier_implied_volatility(
    target_price: float,
    valuation: BarrierOptionValuation,
    *,
    vol_bounds: tuple[float, float] = (0.05, 2.0),
    tol: float = 1.0e-4,
    max_vol: float = 9.0,
    arbitrage_check: bool = True,
    log_timings: bool = False,
) -> ImpliedVolResult:
    """Solve for the volatility that reproduces ``target_price`` on the lattice.

    Bisection on the residual ``price(vol) - target_price`` over ``vol_bounds``.
    Each iteration keeps the half-interval whose end points straddle a sign
    change; when neither half does, the search stops and returns the current
    upper bound as a best-effort, non-converged answer.

    Parameters
    ----------
    target_price
        Observed option price.
    valuation
        Valuation whose contract, spot, rate and lattice settings are used;
        its own volatility is ignored.
    vol_bounds
        Initial search interval.
    tol
        Stop once the interval is narrower than this.
    max_vol
        Solutions above this are reported as non-converged with ``implied_vol=0``.
    arbitrage_check
        Return 0 immediately when the price at the lower bound already exceeds
        the target.
    log_timings
        When ``True``, emit timing logs for the solver section.

    Returns
    -------
    ImpliedVolResult
    """
    if not isinstance(valuation, BarrierOptionValuation):
        raise ConfigurationError("valuation must be a BarrierOptionValuation instance")
    if not np.isfinite(target_price):
        raise ValidationError("target_price must be finite")
    if target_price < 0:
        raise ValidationError("target_price must be non-negative")
    low, high = vol_bounds
    if low <= 0 or high <= 0 or low >= high:
        raise ValidationError("vol_bounds must be positive and satisfy low < high")
    if tol <= 0:
        raise ValidationError("tol must be positive")

    iterations = 0

    def f(vol: float) -> float:
        nonlocal iterations
        iterations += 1
        result = _valuation_with_vol(valuation, vol).evaluate(Greek.PRICE)
        if result.status is ValuationStatus.DEGENERATE or result.knocked_out:
            raise _DegenerateTrial
        return result.get(Greek.PRICE) - target_price

    with log_timing(logger, "Barrier implied vol solver", log_timings):
        try:
            f_low = f(low)
            if arbitrage_check and f_low > 0:
                logger.debug("Price at vol=%.4g exceeds target %.6g", low, target_price)
                return ImpliedVolResult(0.0, iterations, False, ValuationStatus.DEGENERATE)
            if f_low == 0.0:
                return ImpliedVolResult(low, iterations, True)

            mid = 0.5 * (low + high)
            f_high = f(high)
            if f_high == 0.0:
                return ImpliedVolResult(high, iterations, True)
            f_mid = f(mid)

            while True:
                if f_mid == 0.0:
                    return ImpliedVolResult(mid, iterations, True)
                if f_low * f_mid < 0:
                    high, f_high = mid, f_mid
                elif f_high * f_mid < 0:
                    low, f_low = mid, f_mid
                else:
                    logger.debug(
                        "Implied vol bracket lost on [%.6g, %.6g]; returning upper bound",
                        low,
                        high,
                    )
                    return ImpliedVolResult(
                        high, iterations, False, ValuationStatus.NO_CONVERGENCE
                    )
                mid = 0.5 * (low + high)
                f_mid = f(mid)
                if high - low < tol:
                    break
        except _DegenerateTrial:
            return ImpliedVolResult(0.0, iterations, False, ValuationStatus.DEGENERATE)
        except (BarrierUnreachableError, InvalidProbabilityMeasureError) as exc:
            logger.debug("Implied vol trial rejected by lattice: %s", exc)
            return ImpliedVolResult(0.0, iterations, False, _status_for(exc))

    implied = 0.5 * (low + high)
    logger.debug("Barrier implied vol=%.6g iterations=%d", implied, iterations)
    if implied > max_vol:
        return ImpliedVolResult(0.0, iterations, False, ValuationStatus.NO_CONVERGENCE)
    return ImpliedVolResult(implied, iterations, True)


def _vanilla_bisection(
    f: Callable[[float], float], low: float, high: float, accuracy: float, max_iter: int
) -> ImpliedVolResult:
    sigma = 0.5 * (low + high)
    for i in range(max_iter):
        sigma = 0.5 * (low + high)
        diff = f(sigma)
        if abs(diff) < accuracy:
            return ImpliedVolResult(sigma, i + 1, True)
        if diff < 0.0:
            low = sigma
        else:
            high = sigma
    return ImpliedVolResult(sigma, max_iter, False, ValuationStatus.NO_CONVERGENCE)


def _vanilla_newton(
    f: Callable[[float], float],
    vega: Callable[[float], float],
    low: float,
    high: float,
    initial: float,
    accuracy: float,
    max_iter: int,
) -> ImpliedVolResult:
    """Newton steps kept inside a shrinking bracket; a step leaving it falls back to the midpoint."""
    vol = initial if low < initial < high else 0.5 * (low + high)
    for i in range(max_iter):
        diff = f(vol)
        if abs(diff) < accuracy:
            return ImpliedVolResult(vol, i + 1, True)

        # price is increasing in vol
        if diff > 0.0:
            high = vol
        else:
            low = vol

        slope = vega(vol)
        candidate = vol - diff / slope if slope > 0 and np.isfinite(slope) else math.nan
        if not np.isfinite(candidate) or candidate <= low or candidate >= high:
            candidate = 0.5 * (low + high)
        vol = candidate

    return ImpliedVolResult(vol, max_iter, False, ValuationStatus.NO_CONVERGENCE)


def vanilla_implied_volatility(
    target_price: float,
    option_type: OptionType,
    spot: float,
    strike: float,
    risk_free_rate: float,
    time_to_maturity: float,
    *,
    method: ImpliedVolMethod = ImpliedVolMethod.BISECTION,
    accuracy: float = 1.0e-5,
    max_iter: int = 100,
    max_vol: float = 1.0e10,
) -> ImpliedVolResult:
    """Black-Scholes implied volatility of a call or put.

    Both methods share the arbitrage check at ``sigma = 1e-4`` and the upper
    bracket, which starts at 0.3 and doubles until it prices above the target;
    exceeding ``max_vol`` on the way reports NO_CONVERGENCE.

    Parameters
    ==========
    method: ImpliedVolMethod
        BISECTION (default) halves the bracket; NEWTON_RAPHSON starts from the
        Brenner-Subrahmanyam guess and takes vega steps inside the bracket.
    accuracy: float
        absolute price tolerance
    """
    if not isinstance(method, ImpliedVolMethod):
        raise ConfigurationError(f"method must be ImpliedVolMethod enum, got {type(method).__name__}")
    if not np.isfinite(target_price):
        raise ValidationError("target_price must be finite")

    def f(vol: float) -> float:
        return (
            bsm_price(option_type, spot, strike, risk_free_rate, vol, time_to_maturity)
            - target_price
        )

    sigma_low = 1.0e-4
    if f(sigma_low) > 0.0:
        return ImpliedVolResult(0.0, 0, False, ValuationStatus.DEGENERATE)

    sigma_high = 0.3
    while f(sigma_high) < 0.0:
        sigma_high *= 2.0
        if sigma_high > max_vol:
            return ImpliedVolResult(math.nan, 0, False, ValuationStatus.NO_CONVERGENCE)

    if method is ImpliedVolMethod.BISECTION:
        return _vanilla_bisection(f, sigma_low, sigma_high, accuracy, max_iter)

    def vega(vol: float) -> float:
        return bsm_greeks(
            option_type, spot, strike, risk_free_rate, vol, time_to_maturity, greeks=Greek.VEGA
        )["vega"]

    if spot > 0.0 and time_to_maturity > 0.0:
        initial = (target_price / spot) / (0.398 * math.sqrt(time_to_maturity))
    else:
        initial = 0.5 * (sigma_low + sigma_high)
    return _vanilla_newton(f, vega, sigma_low, sigma_high, initial, accuracy, max_iter)
