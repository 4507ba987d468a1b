"""Closed-form prices for continuously monitored knock-out options.

Merton (1973) / Reiner-Rubinstein (1991) formulas without dividends or rebate,
for the two contracts the lattice supports:

- up-and-out call with barrier above the strike
- down-and-out put with barrier below the strike

Knock-out = vanilla - knock-in, with the knock-in leg from Hull, *Options,
Futures and Other Derivatives*, section 26.9.
"""

import numpy as np
from scipy.stats import norm

from ..enums import BarrierOptionType
from ..exceptions import ValidationError
from .bsm import bsm_price


def knock_out_analytical(
    option_type: BarrierOptionType,
    spot: float,
    strike: float,
    barrier: float,
    risk_free_rate: float,
    volatility: float,
    time_to_maturity: float,
) -> float:
    """Calculate a knock-out option price with zero rebate.

    Parameters
    ----------
    option_type : BarrierOptionType
        UP_AND_OUT_CALL (requires barrier > strike) or DOWN_AND_OUT_PUT
        (requires barrier < strike)
    spot, strike, barrier : float
        Current spot, strike and barrier level
    risk_free_rate : float
        Continuously compounded risk-free rate
    volatility : float
        Annualised volatility, strictly positive
    time_to_maturity : float
        Time to maturity in years

    Returns
    -------
    float
        Option price; zero once the barrier has been breached
    """
    S, K, H = spot, strike, barrier
    r, sigma, T = risk_free_rate, volatility, time_to_maturity
    is_up = option_type.is_up

    if is_up and H <= K:
        raise ValidationError("Up-and-out call formula requires barrier > strike")
    if not is_up and H >= K:
        raise ValidationError("Down-and-out put formula requires barrier < strike")
    if (is_up and S >= H) or (not is_up and S <= H):
        return 0.0

    vanilla = bsm_price(option_type.vanilla_type, S, K, r, sigma, T)
    if T <= 0:
        return vanilla
    if sigma <= 0:
        raise ValidationError("volatility must be positive")

    vol_sqrt_t = sigma * np.sqrt(T)
    df_r = np.exp(-r * T)
    lam = (r + 0.5 * sigma**2) / sigma**2
    y = np.log(H**2 / (S * K)) / vol_sqrt_t + lam * vol_sqrt_t
    x1 = np.log(S / H) / vol_sqrt_t + lam * vol_sqrt_t
    y1 = np.log(H / S) / vol_sqrt_t + lam * vol_sqrt_t
    reflect = (H / S) ** (2 * lam)
    reflect_k = (H / S) ** (2 * lam - 2)

    if is_up:
        knock_in = (
            S * norm.cdf(x1)
            - K * df_r * norm.cdf(x1 - vol_sqrt_t)
            - S * reflect * (norm.cdf(-y) - norm.cdf(-y1))
            + K * df_r * reflect_k * (norm.cdf(-y + vol_sqrt_t) - norm.cdf(-y1 + vol_sqrt_t))
        )
    else:
        knock_in = (
            -S * norm.cdf(-x1)
            + K * df_r * norm.cdf(-x1 + vol_sqrt_t)
            + S * reflect * (norm.cdf(y) - norm.cdf(y1))
            - K * df_r * reflect_k * (norm.cdf(y - vol_sqrt_t) - norm.cdf(y1 - vol_sqrt_t))
        )

    return max(float(vanilla - knock_in), 0.0)
