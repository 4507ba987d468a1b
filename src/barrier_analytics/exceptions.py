"""Custom exception hierarchy for the barrier_analytics library.

All library-specific exceptions inherit from :class:`BarrierAnalyticsError`,
enabling callers to catch *any* library error with a single ``except`` clause::

    try:
        pv = BarrierOptionValuation(...).present_value()
    except BarrierAnalyticsError as exc:
        log.error("Library error: %s", exc)
"""

from __future__ import annotations


class BarrierAnalyticsError(Exception):
    """Base exception for all library errors."""


# ── Input validation ────────────────────────────────────────────────


class ValidationError(BarrierAnalyticsError):
    """Invalid input values (out-of-range, non-finite, mutually exclusive inputs, etc.)."""


class ConfigurationError(BarrierAnalyticsError):
    """Wrong types passed to a public API (e.g. raw string instead of enum)."""


# ── Numerical issues ────────────────────────────────────────────────


class NumericalError(BarrierAnalyticsError):
    """Base for errors arising from numerical computation."""


class BarrierUnreachableError(NumericalError):
    """The barrier cannot be placed on a lattice row for the given step count.

    Recoverable by retrying with a different ``num_steps``.
    """

    def __init__(self, message: str, *, h: int | None = None, num_steps: int | None = None):
        super().__init__(message)
        self.h = h
        self.num_steps = num_steps


class ArbitrageViolationError(NumericalError):
    """Model parameters imply an arbitrage (e.g. risk-neutral probability outside [0, 1])."""


class InvalidProbabilityMeasureError(ArbitrageViolationError):
    """Trinomial transition probabilities do not form a probability measure."""


class ConvergenceError(NumericalError):
    """An iterative solver failed to converge within the allowed tolerance / iterations."""
