"""
TIGRESS: Trustful Inference of Gene REgulation using Stability Selection
========================================================================
Scores transcription factor → target gene edges from an expression matrix
by stability selection over randomized Least Angle Regression paths.

This package contains:
- config: StabilityConfig, parameter defaults and numerical tolerances
- validation: input checks and ValidationError
- data_structures: TrialKey, ScoreTensor
- randomization: key-derived subsampling and reweighting draws
- lars: LAR path solver returning predictor entry order
- stability: per-target trials and selection frequencies
- inference: score tensor assembly (infer_network)
- edges: edge scoring and ranking from a score tensor
"""

from .config import (
    StabilityConfig,
    DEFAULT_NSTEPS_LARS,
    DEFAULT_ALPHA,
    DEFAULT_NSPLIT,
    DEFAULT_SEED,
)

from .validation import ValidationError

from .data_structures import (
    TrialKey,
    ScoreTensor,
)

from .lars import lars_entry_order, LarsPathSolver

from .stability import stability_frequencies, selection_counts

from .inference import infer_network, assemble_score_tensor

from .edges import score_edges, rank_edges

__all__ = [
    # Configuration
    'StabilityConfig',
    'DEFAULT_NSTEPS_LARS',
    'DEFAULT_ALPHA',
    'DEFAULT_NSPLIT',
    'DEFAULT_SEED',
    'ValidationError',
    # Data structures
    'TrialKey',
    'ScoreTensor',
    # Algorithms
    'lars_entry_order',
    'LarsPathSolver',
    'stability_frequencies',
    'selection_counts',
    'infer_network',
    'assemble_score_tensor',
    # Edge scoring
    'score_edges',
    'rank_edges',
]

__version__ = '1.0.0'
