"""
Core Data Structures for TIGRESS
================================
Trial keys and the score tensor returned by a stability-selection run.
"""

from dataclasses import dataclass, field
from typing import Dict, Hashable, Iterator, List

import numpy as np
import pandas as pd

from .config import StabilityConfig


@dataclass(frozen=True)
class TrialKey:
    """
    Identifies one randomized trial.

    All randomness of a trial is derived from this key alone, so the same
    key yields the same subsample and reweighting regardless of scheduling.
    """
    seed: int
    target_index: int
    iteration: int

    def as_seed_array(self) -> List[int]:
        return [self.seed, self.target_index, self.iteration]


@dataclass
class ScoreTensor:
    """
    Per-step TF × target selection frequencies.

    Attributes:
        steps: One DataFrame per LARS step (index = TFs, columns = targets);
            steps[s - 1] holds the frequency of entering within s steps
        config: Parameters the tensor was computed with
        failures: Target id -> diagnostic for targets whose column is NaN
    """
    steps: List[pd.DataFrame]
    config: StabilityConfig
    failures: Dict[Hashable, str] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.steps)

    def __getitem__(self, index: int) -> pd.DataFrame:
        return self.steps[index]

    def __iter__(self) -> Iterator[pd.DataFrame]:
        return iter(self.steps)

    @property
    def nsteps(self) -> int:
        return len(self.steps)

    @property
    def tf_ids(self) -> List[Hashable]:
        return self.steps[0].index.tolist()

    @property
    def target_ids(self) -> List[Hashable]:
        return self.steps[0].columns.tolist()

    def step(self, s: int) -> pd.DataFrame:
        """Frequency matrix for a budget of s LARS steps (1-based)."""
        if not 1 <= s <= self.nsteps:
            raise IndexError(f"Step must be in 1..{self.nsteps}, got {s}")
        return self.steps[s - 1]

    def to_array(self) -> np.ndarray:
        """Stack into an array of shape (nsteps, n_tfs, n_targets)."""
        return np.stack([df.to_numpy(dtype=float) for df in self.steps])
