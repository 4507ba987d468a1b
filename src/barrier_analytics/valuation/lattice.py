"""Barrier-aligned trinomial lattice geometry.

The vertical spacing of the trinomial lattice is stretched by a factor
``lambda >= 1`` so that the barrier falls exactly on a node row ``h`` rows away
from the starting spot (Ritchken, 1995). This removes the interpolation error
a plain lattice makes when the barrier sits between two rows.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import math

from ..enums import BarrierOptionType
from ..exceptions import BarrierUnreachableError, InvalidProbabilityMeasureError

logger = logging.getLogger(__name__)

# pu + pm + pd is 1 by construction; allow for rounding when validating
_PROBABILITY_TOL = 1.0e-12


@dataclass(frozen=True, slots=True)
class LatticeParameters:
    """Derived lattice geometry for one valuation.

    Attributes
    ==========
    num_steps:
        effective number of time steps (may exceed ``requested_steps``)
    requested_steps:
        step count the caller asked for
    dt:
        time step in years
    h:
        number of node rows between the starting spot and the barrier
    lam:
        vertical stretch factor
    u:
        up-move multiplier, ``exp(lam * sigma * sqrt(dt))``
    pu, pm, pd:
        risk-neutral up / middle / down transition probabilities
    growth:
        one-step growth ``exp(r * dt)`` used for discounting
    """

    num_steps: int
    requested_steps: int
    dt: float
    h: int
    lam: float
    u: float
    pu: float
    pm: float
    pd: float
    growth: float

    @property
    def enlarged(self) -> bool:
        return self.num_steps != self.requested_steps


def barrier_log_distance(option_type: BarrierOptionType, spot: float, barrier: float) -> float:
    """Log distance from spot to barrier, positive while the barrier is live."""
    if option_type.is_up:
        return math.log(barrier / spot)
    return math.log(spot / barrier)


def _rows_to_barrier(log_distance: float, volatility: float, dt: float) -> int:
    return int(math.floor(log_distance / (volatility * math.sqrt(dt))))


def build_lattice(
    option_type: BarrierOptionType,
    spot: float,
    volatility: float,
    risk_free_rate: float,
    time_to_maturity: float,
    barrier: float,
    num_steps: int,
    max_num_steps: int | None = None,
) -> LatticeParameters:
    """Compute the trinomial lattice with the barrier on node row ``h``.

    Parameters
    ==========
    option_type: BarrierOptionType
        selects the barrier direction (``ln(H/S)`` up, ``ln(S/H)`` down)
    spot, volatility, risk_free_rate, time_to_maturity, barrier: float
        market and contract inputs, all strictly positive
    num_steps: int
        requested number of time steps
    max_num_steps: int, optional
        ceiling on the automatically enlarged step count

    Returns
    =======
    LatticeParameters

    Raises
    ======
    BarrierUnreachableError
        the barrier is breached, or cannot be placed on a row inside the tree
    InvalidProbabilityMeasureError
        a transition probability falls outside [0, 1]
    """
    log_distance = barrier_log_distance(option_type, spot, barrier)
    if log_distance <= 0.0:
        raise BarrierUnreachableError(
            f"Barrier {barrier} already breached at spot {spot}", h=0, num_steps=num_steps
        )

    n = int(num_steps)
    dt = time_to_maturity / n
    h = _rows_to_barrier(log_distance, volatility, dt)

    if h < 1:
        # barrier closer than one row: refine the time step until it spans a full row
        n = int(math.ceil(volatility**2 * time_to_maturity / log_distance**2))
        if max_num_steps is not None and n > max_num_steps:
            raise BarrierUnreachableError(
                f"Barrier needs {n} steps, above max_num_steps={max_num_steps}",
                h=h,
                num_steps=n,
            )
        dt = time_to_maturity / n
        h = _rows_to_barrier(log_distance, volatility, dt)
        # rounding can leave the row a hair wider than the barrier distance
        while h < 1 and (max_num_steps is None or n < max_num_steps):
            n += 1
            dt = time_to_maturity / n
            h = _rows_to_barrier(log_distance, volatility, dt)
        logger.debug(
            "Enlarging trinomial steps from %d to %d to resolve the barrier", num_steps, n
        )

    if h <= 0 or h > n:
        raise BarrierUnreachableError(
            f"Barrier lies {h} rows from spot, outside a {n}-step lattice",
            h=h,
            num_steps=n,
        )

    vol_sqrt_dt = volatility * math.sqrt(dt)
    lam = log_distance / (h * vol_sqrt_dt)
    u = math.exp(lam * vol_sqrt_dt)
    growth = math.exp(risk_free_rate * dt)

    drift_term = (risk_free_rate - 0.5 * volatility**2) * math.sqrt(dt) / (2.0 * lam * volatility)
    pu = 1.0 / (2.0 * lam**2) + drift_term
    pd = 1.0 / (2.0 * lam**2) - drift_term
    pm = 1.0 - pu - pd

    for name, p in (("pu", pu), ("pm", pm), ("pd", pd)):
        if p < -_PROBABILITY_TOL or p > 1.0 + _PROBABILITY_TOL:
            raise InvalidProbabilityMeasureError(
                f"Trinomial probability {name}={p:.6g} outside [0, 1] "
                f"(sigma={volatility}, r={risk_free_rate}, dt={dt:.6g})"
            )

    logger.debug(
        "Trinomial lattice n=%d h=%d lambda=%.6f u=%.6f pu=%.6f pm=%.6f pd=%.6f",
        n,
        h,
        lam,
        u,
        pu,
        pm,
        pd,
    )

    return LatticeParameters(
        num_steps=n,
        requested_steps=int(num_steps),
        dt=dt,
        h=h,
        lam=lam,
        u=u,
        pu=pu,
        pm=pm,
        pd=pd,
        growth=growth,
    )
