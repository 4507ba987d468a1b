"""Parameter classes for lattice valuation and implied-volatility configuration."""

from dataclasses import dataclass
import warnings


@dataclass(frozen=True, slots=True)
class TrinomialParams:
    """Parameters for barrier-aligned trinomial lattice valuation.

    Attributes
    ==========
    num_steps:
        Requested number of time steps. The lattice may enlarge it when the
        barrier is closer to spot than one un-stretched row. Default: 200.
    max_num_steps:
        Ceiling on the enlarged step count; valuation cost is O(n^2).
        Default: 20_000.
    vega_bump:
        Forward-difference volatility bump for Vega. Default: 1e-4.
    rho_bump:
        Forward-difference rate bump for Rho. Default: 1e-4.
    log_timings:
        Emit debug timing logs around each sweep.
    """

    num_steps: int = 200
    max_num_steps: int = 20_000
    vega_bump: float = 1.0e-4
    rho_bump: float = 1.0e-4
    log_timings: bool = False

    def __post_init__(self):
        if self.num_steps < 0:
            raise ValueError(f"num_steps must be >= 0, got {self.num_steps}")
        if self.max_num_steps < max(self.num_steps, 1):
            raise ValueError(
                f"max_num_steps must be >= num_steps, got {self.max_num_steps} < {self.num_steps}"
            )
        if self.vega_bump <= 0:
            raise ValueError(f"vega_bump must be positive, got {self.vega_bump}")
        if self.rho_bump <= 0:
            raise ValueError(f"rho_bump must be positive, got {self.rho_bump}")
        if self.num_steps > 5_000:
            warnings.warn(
                f"num_steps={self.num_steps} means ~{self.num_steps**2:.2e} node updates per "
                "sweep; Vega, Rho and implied volatility repeat the sweep.",
                RuntimeWarning,
            )
