"""Backward induction over the barrier-aligned trinomial lattice.

A single buffer of ``2n+1`` node values is overwritten in place, walking from
maturity (``j = n``) back to the valuation date (``j = 0``). At layer ``j`` the
buffer index ``i`` (``0 <= i <= 2j``) holds the value at spot ``S * u**(j - i)``,
so index 0 is the highest node and the centre node sits at ``i = j``.

The barrier row is ``i = j - h`` for an up barrier and ``i = j + h`` for a down
barrier. While ``j >= h`` that row is inside the live range of the layer and is
forced to the barrier payoff after each step; rows on the far side of it are
never read again. Once ``j < h`` no node of the layer can reach the barrier and
the plain recursion is applied to every row.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging

import numpy as np

from ..enums import BarrierOptionType, ExerciseType
from .lattice import LatticeParameters

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SweepResult:
    """Output of one backward sweep.

    ``first_layer`` holds the three node values at ``j = 1`` ordered from the
    up node ``S*u`` to the down node ``S/u``.
    """

    price: float
    first_layer: np.ndarray
    lattice: LatticeParameters

    def delta(self, spot: float) -> float:
        u = self.lattice.u
        v = self.first_layer
        return float((v[0] - v[2]) / (spot * (u - 1.0 / u)))

    def gamma(self, spot: float) -> float:
        # nodes are not evenly spaced in price: normalise each difference by its own gap
        u = self.lattice.u
        v = self.first_layer
        upper = (v[0] - v[1]) / (spot * (u - 1.0))
        lower = (v[1] - v[2]) / (spot * (1.0 - 1.0 / u))
        return float((upper - lower) / (0.5 * spot * (u - 1.0 / u)))

    def theta(self) -> float:
        """Value decay per year between the two shallowest layers."""
        return float((self.first_layer[1] - self.price) / self.lattice.dt)


def _payoff(option_type: BarrierOptionType, spots: np.ndarray, strike: float) -> np.ndarray:
    if option_type.is_up:
        return np.maximum(spots - strike, 0.0)
    return np.maximum(strike - spots, 0.0)


def _inner_rows(option_type: BarrierOptionType, j: int, h: int) -> tuple[int, int]:
    """Inclusive row range updated by the recursion at layer ``j``."""
    if j < h:
        return 0, 2 * j
    if option_type.is_up:
        return j - h + 1, 2 * j
    return 0, j + h - 1


def _barrier_row(option_type: BarrierOptionType, j: int, h: int) -> int:
    return j - h if option_type.is_up else j + h


def _backward_step(
    values: np.ndarray,
    option_type: BarrierOptionType,
    lattice: LatticeParameters,
    j: int,
    spot: float,
    strike: float,
    barrier_payoff: float,
    is_american: bool,
) -> None:
    """Overwrite ``values`` with layer ``j`` given layer ``j + 1``."""
    h = lattice.h
    lo, hi = _inner_rows(option_type, j, h)
    # RHS is evaluated on the old layer before the slice is written back
    continuation = (
        lattice.pu * values[lo : hi + 1]
        + lattice.pm * values[lo + 1 : hi + 2]
        + lattice.pd * values[lo + 2 : hi + 3]
    ) / lattice.growth
    if is_american:
        rows = np.arange(lo, hi + 1)
        exercise = _payoff(option_type, spot * lattice.u ** (j - rows), strike)
        continuation = np.maximum(continuation, exercise)
    values[lo : hi + 1] = continuation

    if j >= h:
        values[_barrier_row(option_type, j, h)] = barrier_payoff


def sweep(
    option_type: BarrierOptionType,
    lattice: LatticeParameters,
    spot: float,
    strike: float,
    barrier_payoff: float,
    exercise_type: ExerciseType = ExerciseType.EUROPEAN,
) -> SweepResult:
    """Value a knock-out option by backward induction.

    Parameters
    ==========
    option_type: BarrierOptionType
        up-and-out call or down-and-out put
    lattice: LatticeParameters
        geometry from :func:`build_lattice`
    spot, strike: float
        valuation-date spot and option strike
    barrier_payoff: float
        deterministic value assigned to nodes on the barrier row
    exercise_type: ExerciseType
        AMERICAN compares each continuation value with immediate exercise

    Returns
    =======
    SweepResult
    """
    n, h = lattice.num_steps, lattice.h
    is_american = exercise_type is ExerciseType.AMERICAN

    values = np.zeros(2 * n + 1, dtype=float)

    # Terminal layer: payoff inside the barrier, barrier payoff on it, zero beyond
    lo, hi = _inner_rows(option_type, n, h)
    rows = np.arange(lo, hi + 1)
    values[lo : hi + 1] = _payoff(option_type, spot * lattice.u ** (n - rows), strike)
    values[_barrier_row(option_type, n, h)] = barrier_payoff

    for j in range(n - 1, 0, -1):
        _backward_step(values, option_type, lattice, j, spot, strike, barrier_payoff, is_american)

    first_layer = values[:3].copy()
    _backward_step(values, option_type, lattice, 0, spot, strike, barrier_payoff, is_american)

    logger.debug("Trinomial sweep n=%d h=%d price=%.8g", n, h, values[0])
    return SweepResult(price=float(values[0]), first_layer=first_layer, lattice=lattice)
