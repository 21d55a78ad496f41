"""
Score Tensor Assembly
=====================
Library entry point: validates inputs, runs stability selection for every
target gene (in parallel with joblib), and stacks the per-target
frequencies into one TF × target matrix per LARS step.

Usage:
    from tigress import infer_network

    tensor = infer_network(expression, tf_ids, target_ids,
                           nsteps_lars=5, alpha=0.2, nsplit=100, seed=1)
    tensor.step(3)   # TF × target frequencies within 3 LARS steps
"""

import logging
import time
from typing import Hashable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from tqdm import tqdm

from .config import (
    StabilityConfig,
    DEFAULT_NSTEPS_LARS,
    DEFAULT_ALPHA,
    DEFAULT_NSPLIT,
    DEFAULT_SEED,
)
from .data_structures import ScoreTensor
from .stability import stability_frequencies
from .validation import validate_inputs

logger = logging.getLogger(__name__)


def _score_target(tf_expression: np.ndarray, response: np.ndarray,
                  predictors: np.ndarray, target_index: int, target_id: Hashable,
                  config: StabilityConfig) -> Tuple[Optional[np.ndarray], Optional[str]]:
    """Frequencies for one target; a failure is returned, not raised."""
    try:
        frequencies = stability_frequencies(
            tf_expression, response, predictors, target_index, config
        )
    except Exception as e:
        logger.warning(f"Target {target_id} failed and is marked NaN: {type(e).__name__}: {e}")
        return None, f"{type(e).__name__}: {e}"
    logger.debug(f"Scored target {target_id} ({target_index})")
    return frequencies, None


def assemble_score_tensor(expression: pd.DataFrame,
                          tf_ids: Sequence[Hashable],
                          target_ids: Sequence[Hashable],
                          config: StabilityConfig) -> ScoreTensor:
    """
    Run stability selection for every target and build the score tensor.

    Args:
        expression: Genes × experiments, indexed by gene identifier
        tf_ids: Candidate regulators (row labels of every step matrix)
        target_ids: Genes to explain (column labels of every step matrix)
        config: Run parameters

    Returns:
        ScoreTensor with config.nsteps_lars step matrices

    Raises:
        ValidationError: on any invalid input or parameter, before computing
    """
    config.validate()
    tfs, targets = validate_inputs(expression, tf_ids, target_ids)

    n_tfs, n_targets = len(tfs), len(targets)
    logger.info(
        f"Stability selection: {n_tfs} TFs × {n_targets} targets, "
        f"{expression.shape[1]} experiments, nsteps_lars={config.nsteps_lars}, "
        f"alpha={config.alpha}, nsplit={config.nsplit}, seed={config.seed}"
    )
    t0 = time.time()

    # Experiments × TFs, shared read-only by every task
    tf_expression = expression.loc[tfs].to_numpy(dtype=float).T
    tf_position = {gene: i for i, gene in enumerate(tfs)}
    all_positions = np.arange(n_tfs)

    def task_args(target_index: int, target_id: Hashable):
        response = expression.loc[target_id].to_numpy(dtype=float)
        own = tf_position.get(target_id)
        predictors = all_positions if own is None else np.delete(all_positions, own)
        return tf_expression, response, predictors, target_index, target_id, config

    results = Parallel(n_jobs=config.n_jobs, prefer="threads")(
        delayed(_score_target)(*task_args(t, target_id))
        for t, target_id in enumerate(
            tqdm(targets, desc="Targets", disable=not config.progress)
        )
    )

    scores = np.zeros((config.nsteps_lars, n_tfs, n_targets))
    failures = {}
    for t, (frequencies, error) in enumerate(results):
        if error is not None:
            scores[:, :, t] = np.nan
            failures[targets[t]] = error
        else:
            scores[:, :, t] = frequencies.T

    steps: List[pd.DataFrame] = [
        pd.DataFrame(scores[s], index=pd.Index(tfs, name="tf"),
                     columns=pd.Index(targets, name="target"))
        for s in range(config.nsteps_lars)
    ]

    logger.info(
        f"Scored {n_targets - len(failures)}/{n_targets} targets in {time.time() - t0:.1f}s"
        + (f" ({len(failures)} failed)" if failures else "")
    )
    return ScoreTensor(steps=steps, config=config, failures=failures)


def infer_network(expression: pd.DataFrame,
                  tf_ids: Sequence[Hashable],
                  target_ids: Sequence[Hashable],
                  nsteps_lars: int = DEFAULT_NSTEPS_LARS,
                  alpha: float = DEFAULT_ALPHA,
                  nsplit: int = DEFAULT_NSPLIT,
                  seed: Optional[int] = None,
                  n_jobs: Optional[int] = 1,
                  progress: bool = False) -> ScoreTensor:
    """
    Score every TF → target edge by stability selection over LARS paths.

    Args:
        expression: Genes × experiments expression matrix
        tf_ids: Transcription factor identifiers (rows of the output)
        target_ids: Target gene identifiers (columns of the output)
        nsteps_lars: Number of LARS steps scored (>= 1)
        alpha: Lower bound of the random reweighting factor, in (0, 1)
        nsplit: Randomized trials per target (>= 1)
        seed: Root seed (DEFAULT_SEED when None)
        n_jobs: joblib workers across targets; results are identical for any value
        progress: Show a progress bar over targets

    Returns:
        ScoreTensor: nsteps_lars TF × target matrices with entries in [0, 1]
            (NaN columns for targets listed in `failures`)
    """
    config = StabilityConfig(
        nsteps_lars=nsteps_lars,
        alpha=alpha,
        nsplit=nsplit,
        seed=DEFAULT_SEED if seed is None else seed,
        n_jobs=n_jobs,
        progress=progress,
    )
    return assemble_score_tensor(expression, tf_ids, target_ids, config)
