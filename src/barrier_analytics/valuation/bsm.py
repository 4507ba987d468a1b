"""Black-Scholes-Merton closed forms for plain-vanilla calls and puts (no dividends).

These are the reference prices the barrier lattice is compared against and the
pricing kernel behind vanilla warrants.
"""

from __future__ import annotations

import numpy as np
from scipy.stats import norm

from ..enums import Greek, OptionType
from ..exceptions import ConfigurationError


def _calculate_d_values(
    spot: float,
    strike: float,
    risk_free_rate: float,
    volatility: float,
    time_to_maturity: float,
) -> tuple[float, float]:
    """Calculate d1 and d2, with the limits for zero spot and zero volatility."""
    if spot <= 0.0:
        # worthless underlying: the call never pays, the put pays the full strike
        return -np.inf, -np.inf
    forward = spot * np.exp(risk_free_rate * time_to_maturity)
    denominator = volatility * np.sqrt(time_to_maturity)

    if denominator < 1e-300:
        # d1 = d2 = +inf / -inf / 0 as the forward is above / below / at the strike
        if forward > strike:
            return np.inf, np.inf
        elif forward < strike:
            return -np.inf, -np.inf
        else:
            return 0.0, 0.0

    d1 = (np.log(forward / strike) + 0.5 * volatility**2 * time_to_maturity) / denominator
    d2 = d1 - denominator
    return d1, d2


def _check_option_type(option_type: OptionType) -> None:
    if not isinstance(option_type, OptionType):
        raise ConfigurationError(
            f"option_type must be OptionType enum, got {type(option_type).__name__}"
        )


def bsm_price(
    option_type: OptionType,
    spot: float,
    strike: float,
    risk_free_rate: float,
    volatility: float,
    time_to_maturity: float,
) -> float:
    """Black-Scholes-Merton price of a European call or put.

    Returns the intrinsic value when ``time_to_maturity <= 0``.
    """
    _check_option_type(option_type)
    if time_to_maturity <= 0:
        if option_type is OptionType.CALL:
            return max(spot - strike, 0.0)
        return max(strike - spot, 0.0)

    d1, d2 = _calculate_d_values(spot, strike, risk_free_rate, volatility, time_to_maturity)
    df_r = np.exp(-risk_free_rate * time_to_maturity)
    if option_type is OptionType.CALL:
        return float(spot * norm.cdf(d1) - strike * df_r * norm.cdf(d2))
    return float(strike * df_r * norm.cdf(-d2) - spot * norm.cdf(-d1))


def bsm_greeks(
    option_type: OptionType,
    spot: float,
    strike: float,
    risk_free_rate: float,
    volatility: float,
    time_to_maturity: float,
    greeks: Greek = Greek.ALL,
) -> dict[str, float]:
    """Closed-form Greeks selected by the ``greeks`` bitmask.

    Theta is per year of calendar time, Vega per unit volatility and Rho per
    unit rate, matching the lattice outputs.

    Returns
    =======
    dict
        keys among ``price``, ``delta``, ``gamma``, ``theta``, ``vega``, ``rho``
    """
    _check_option_type(option_type)
    is_call = option_type is OptionType.CALL
    out: dict[str, float] = {}

    if Greek.PRICE in greeks:
        out["price"] = bsm_price(
            option_type, spot, strike, risk_free_rate, volatility, time_to_maturity
        )

    if time_to_maturity <= 0:
        in_the_money = spot > strike if is_call else spot < strike
        if Greek.DELTA in greeks:
            out["delta"] = (1.0 if is_call else -1.0) if in_the_money else 0.0
        for greek, name in (
            (Greek.GAMMA, "gamma"),
            (Greek.THETA, "theta"),
            (Greek.VEGA, "vega"),
            (Greek.RHO, "rho"),
        ):
            if greek in greeks:
                out[name] = 0.0
        return out

    T = time_to_maturity
    d1, d2 = _calculate_d_values(spot, strike, risk_free_rate, volatility, T)
    df_r = np.exp(-risk_free_rate * T)
    sqrt_t = np.sqrt(T)
    n_prime_d1 = norm.pdf(d1)

    if Greek.DELTA in greeks:
        out["delta"] = float(norm.cdf(d1) if is_call else norm.cdf(d1) - 1.0)
    if Greek.GAMMA in greeks:
        denom = spot * volatility * sqrt_t
        out["gamma"] = float(n_prime_d1 / denom) if denom > 0 else 0.0
    if Greek.THETA in greeks:
        decay = -spot * n_prime_d1 * volatility / (2.0 * sqrt_t)
        if is_call:
            out["theta"] = float(decay - risk_free_rate * strike * df_r * norm.cdf(d2))
        else:
            out["theta"] = float(decay + risk_free_rate * strike * df_r * norm.cdf(-d2))
    if Greek.VEGA in greeks:
        out["vega"] = float(spot * sqrt_t * n_prime_d1)
    if Greek.RHO in greeks:
        if is_call:
            out["rho"] = float(strike * T * df_r * norm.cdf(d2))
        else:
            out["rho"] = float(-strike * T * df_r * norm.cdf(-d2))

    return out
