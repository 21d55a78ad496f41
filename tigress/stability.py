"""
Stability Selection per Target Gene
===================================
Runs `nsplit` randomized LARS trials for one target gene and turns the
entry orders into per-step selection frequencies.

Each trial is a pure function of its TrialKey (map); trial results are
0/1 indicator matrices summed into a task-local accumulator (reduce), so
the outcome does not depend on the order trials are evaluated in.
"""

import logging
from typing import List, Sequence

import numpy as np

from .config import StabilityConfig
from .data_structures import TrialKey
from .lars import center_and_scale, lars_entry_order
from .randomization import draw_trial

logger = logging.getLogger(__name__)


def build_design(tf_expression: np.ndarray, subsample: np.ndarray,
                 weights: np.ndarray):
    """
    Design matrix for one trial.

    Rows are restricted to the subsample, each column is centered and
    scaled to unit norm, then multiplied by its reweighting factor so a
    column's norm equals its factor.

    Args:
        tf_expression: Experiments × predictors
        subsample: Experiment indices kept in this trial
        weights: One factor per predictor

    Returns:
        (design matrix, mask of predictors with non-zero variance)
    """
    standardized, valid = center_and_scale(tf_expression[subsample])
    return standardized * weights, valid


def run_trial(tf_expression: np.ndarray, response: np.ndarray,
              predictors: np.ndarray, key: TrialKey,
              config: StabilityConfig) -> List[int]:
    """
    Entry order of one randomized trial.

    Args:
        tf_expression: Experiments × all TFs
        response: Target expression across all experiments
        predictors: TF positions usable for this target (the target itself
            removed when it is also a TF)
        key: Trial identity; all randomness derives from it
        config: Run parameters

    Returns:
        TF positions (into the full TF list) in the order they entered
    """
    n_experiments, n_tfs = tf_expression.shape
    subsample, weights = draw_trial(key, n_experiments, n_tfs, config.alpha)
    design, valid = build_design(tf_expression[:, predictors], subsample, weights[predictors])
    order = lars_entry_order(design, response[subsample], config.nsteps_lars, available=valid)
    return [int(predictors[k]) for k in order]


def entry_indicator(order: Sequence[int], n_tfs: int, nsteps: int) -> np.ndarray:
    """
    0/1 matrix (n_tfs × nsteps): entry [tf, s] is 1 if tf entered within s + 1 steps.
    """
    indicator = np.zeros((n_tfs, nsteps), dtype=np.int64)
    for position, tf in enumerate(order[:nsteps]):
        indicator[tf, position:] = 1
    return indicator


def selection_counts(tf_expression: np.ndarray, response: np.ndarray,
                     predictors: np.ndarray, target_index: int,
                     config: StabilityConfig) -> np.ndarray:
    """
    Selection counts (n_tfs × nsteps) over all trials of one target.

    Counts are non-decreasing along the step axis and bounded by nsplit.
    """
    n_tfs = tf_expression.shape[1]
    counts = np.zeros((n_tfs, config.nsteps_lars), dtype=np.int64)
    short_paths = 0
    for iteration in range(config.nsplit):
        key = TrialKey(config.seed, target_index, iteration)
        order = run_trial(tf_expression, response, predictors, key, config)
        counts += entry_indicator(order, n_tfs, config.nsteps_lars)
        if len(order) < min(config.nsteps_lars, len(predictors)):
            short_paths += 1
    if short_paths:
        logger.debug(f"Target {target_index}: {short_paths}/{config.nsplit} trials ended early")
    return counts


def stability_frequencies(tf_expression: np.ndarray, response: np.ndarray,
                          predictors: np.ndarray, target_index: int,
                          config: StabilityConfig) -> np.ndarray:
    """Selection frequencies in [0, 1], shape (n_tfs × nsteps)."""
    counts = selection_counts(tf_expression, response, predictors, target_index, config)
    return counts / config.nsplit
