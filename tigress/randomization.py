"""
Key-derived Randomness
======================
Subsampling and reweighting draws for one stability-selection trial.

Each trial seeds its own RandomState from (seed, target index, iteration),
never from a shared generator, so the draws do not depend on execution
order or on how many workers run the trials.
"""

from typing import Tuple

import numpy as np

from .data_structures import TrialKey
from .validation import MIN_EXPERIMENTS, ValidationError


def trial_random_state(key: TrialKey) -> np.random.RandomState:
    """Independent, reproducible stream for one trial."""
    return np.random.RandomState(key.as_seed_array())


def subsample_size(n_experiments: int) -> int:
    return n_experiments // 2


def draw_subsample(n_experiments: int, rng: np.random.RandomState) -> np.ndarray:
    """
    Draw floor(n/2) distinct experiment indices without replacement.

    Returns:
        Sorted integer array of column indices
    """
    if n_experiments < MIN_EXPERIMENTS:
        raise ValidationError(
            f"Need at least {MIN_EXPERIMENTS} experiments to subsample, got {n_experiments}"
        )
    chosen = rng.choice(n_experiments, size=subsample_size(n_experiments), replace=False)
    return np.sort(chosen)


def draw_reweighting(n_tfs: int, alpha: float, rng: np.random.RandomState) -> np.ndarray:
    """One multiplicative factor per TF, i.i.d. uniform on [alpha, 1)."""
    if not 0.0 < alpha < 1.0:
        raise ValidationError(f"alpha must lie in the open interval (0, 1), got {alpha!r}")
    return rng.uniform(alpha, 1.0, size=n_tfs)


def draw_trial(key: TrialKey, n_experiments: int, n_tfs: int,
               alpha: float) -> Tuple[np.ndarray, np.ndarray]:
    """Subsample and reweighting for one trial, always drawn in that order."""
    rng = trial_random_state(key)
    subsample = draw_subsample(n_experiments, rng)
    weights = draw_reweighting(n_tfs, alpha, rng)
    return subsample, weights
