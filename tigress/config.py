"""
Run Configuration for TIGRESS
=============================
Parameter defaults, numerical tolerances, and the StabilityConfig
dataclass validated before any computation begins.
"""

import numbers
from dataclasses import dataclass, asdict, fields
from typing import Any, Dict, Optional

from .validation import ValidationError

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_NSTEPS_LARS = 5
DEFAULT_ALPHA = 0.2
DEFAULT_NSPLIT = 100
# Used whenever the caller does not pass a seed, so test runs are reproducible
DEFAULT_SEED = 42

# ---------------------------------------------------------------------------
# Numerical tolerances (path solver)
# ---------------------------------------------------------------------------

# Residual correlations at or below this (unit-norm response) are treated as zero
CORRELATION_TOL = 1e-10
# Correlations / step lengths closer than this count as tied; lowest index wins
TIE_TOL = 1e-12
# Squared relative residual below which a column lies in the active span
COLLINEARITY_TOL = 1e-10
# Centered column norm below this fraction of the raw norm means zero variance
VARIANCE_TOL = 1e-10

MAX_SEED = 2 ** 32


def _is_int(value: Any) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


@dataclass
class StabilityConfig:
    """
    Parameters of one stability-selection run.

    Attributes:
        nsteps_lars: Number of LARS steps scored (length of the score tensor)
        alpha: Lower bound of the per-TF reweighting factor, in (0, 1)
        nsplit: Number of randomized trials per target gene
        seed: Root seed; each trial derives its own stream from it
        n_jobs: joblib worker count across target genes (never changes results)
        progress: Show a tqdm progress bar over target genes
    """
    nsteps_lars: int = DEFAULT_NSTEPS_LARS
    alpha: float = DEFAULT_ALPHA
    nsplit: int = DEFAULT_NSPLIT
    seed: int = DEFAULT_SEED
    n_jobs: Optional[int] = 1
    progress: bool = False

    def validate(self) -> "StabilityConfig":
        """Raise ValidationError for the first out-of-range parameter."""
        if not _is_int(self.nsteps_lars) or self.nsteps_lars < 1:
            raise ValidationError(f"nsteps_lars must be an integer >= 1, got {self.nsteps_lars!r}")
        if not _is_int(self.nsplit) or self.nsplit < 1:
            raise ValidationError(f"nsplit must be an integer >= 1, got {self.nsplit!r}")
        try:
            alpha = float(self.alpha)
        except (TypeError, ValueError):
            raise ValidationError(f"alpha must be a real number in (0, 1), got {self.alpha!r}")
        if not 0.0 < alpha < 1.0:
            raise ValidationError(f"alpha must lie in the open interval (0, 1), got {self.alpha!r}")
        if not _is_int(self.seed) or not 0 <= self.seed < MAX_SEED:
            raise ValidationError(f"seed must be an integer in [0, 2**32), got {self.seed!r}")
        if self.n_jobs is not None and (not _is_int(self.n_jobs) or self.n_jobs == 0):
            raise ValidationError(f"n_jobs must be a non-zero integer or None, got {self.n_jobs!r}")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, params: Dict[str, Any]) -> "StabilityConfig":
        """Build a validated config from a plain dict (e.g. loaded from JSON)."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(params) - known)
        if unknown:
            raise ValidationError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**params).validate()
