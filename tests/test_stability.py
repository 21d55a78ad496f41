"""
Unit Tests for Per-target Stability Selection
=============================================
Trial construction, indicator counting, and count/frequency invariants.
"""

import pytest
import numpy as np

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from tigress.config import StabilityConfig
from tigress.data_structures import TrialKey
from tigress.stability import (
    build_design,
    run_trial,
    entry_indicator,
    selection_counts,
    stability_frequencies,
)


def _problem(n_experiments=30, n_tfs=8, seed=0):
    rng = np.random.RandomState(seed)
    tf_expression = rng.normal(size=(n_experiments, n_tfs))
    response = 2.0 * tf_expression[:, 2] - tf_expression[:, 5] + 0.5 * rng.normal(size=n_experiments)
    return tf_expression, response


class TestEntryIndicator:
    """Tests for converting an entry order to step indicators"""

    def test_cumulative_rows(self):
        indicator = entry_indicator([2, 0], n_tfs=3, nsteps=4)
        assert indicator[2].tolist() == [1, 1, 1, 1]
        assert indicator[0].tolist() == [0, 1, 1, 1]
        assert indicator[1].tolist() == [0, 0, 0, 0]

    def test_empty_order(self):
        assert entry_indicator([], 4, 3).sum() == 0

    def test_column_sums_bounded_by_step(self):
        indicator = entry_indicator([4, 1, 3], n_tfs=5, nsteps=3)
        assert indicator.sum(axis=0).tolist() == [1, 2, 3]


class TestBuildDesign:
    """Tests for the per-trial design matrix"""

    def test_column_norms_equal_weights(self):
        tf_expression, _ = _problem()
        subsample = np.arange(0, 30, 2)
        weights = np.linspace(0.2, 1.0, 8)
        design, valid = build_design(tf_expression, subsample, weights)
        assert design.shape == (15, 8)
        assert valid.all()
        np.testing.assert_allclose(np.linalg.norm(design, axis=0), weights)
        np.testing.assert_allclose(design.mean(axis=0), 0.0, atol=1e-12)

    def test_constant_within_subsample_flagged(self):
        tf_expression, _ = _problem()
        subsample = np.arange(10)
        tf_expression[subsample, 3] = 1.5
        design, valid = build_design(tf_expression, subsample, np.ones(8))
        assert not valid[3]
        assert np.all(design[:, 3] == 0.0)


class TestRunTrial:
    """Tests for one randomized trial"""

    def test_excluded_predictor_never_returned(self):
        tf_expression, response = _problem()
        predictors = np.array([0, 1, 3, 4, 5, 6, 7])  # position 2 removed
        config = StabilityConfig(nsteps_lars=7, nsplit=1)
        for iteration in range(20):
            order = run_trial(tf_expression, response, predictors,
                              TrialKey(1, 0, iteration), config)
            assert 2 not in order
            assert set(order) <= set(predictors.tolist())

    def test_reproducible(self):
        tf_expression, response = _problem()
        predictors = np.arange(8)
        config = StabilityConfig(nsteps_lars=4)
        key = TrialKey(5, 2, 9)
        assert run_trial(tf_expression, response, predictors, key, config) == \
            run_trial(tf_expression, response, predictors, key, config)

    def test_respects_step_budget(self):
        tf_expression, response = _problem()
        config = StabilityConfig(nsteps_lars=3)
        order = run_trial(tf_expression, response, np.arange(8), TrialKey(0, 0, 0), config)
        assert len(order) == 3

    def test_no_predictors(self):
        tf_expression, response = _problem()
        config = StabilityConfig(nsteps_lars=3)
        order = run_trial(tf_expression, response, np.array([], dtype=int),
                          TrialKey(0, 0, 0), config)
        assert order == []


class TestSelectionCounts:
    """Tests for count accumulation over trials"""

    def test_non_decreasing_in_step(self):
        tf_expression, response = _problem()
        config = StabilityConfig(nsteps_lars=5, nsplit=25)
        counts = selection_counts(tf_expression, response, np.arange(8), 0, config)
        assert counts.shape == (8, 5)
        assert np.all(np.diff(counts, axis=1) >= 0)
        assert counts.max() <= config.nsplit
        assert counts.min() >= 0

    def test_each_step_adds_at_most_one_per_trial(self):
        tf_expression, response = _problem()
        config = StabilityConfig(nsteps_lars=4, nsplit=20)
        counts = selection_counts(tf_expression, response, np.arange(8), 0, config)
        for s in range(4):
            assert counts[:, s].sum() <= config.nsplit * (s + 1)

    def test_frequencies_are_counts_over_nsplit(self):
        tf_expression, response = _problem()
        config = StabilityConfig(nsteps_lars=3, nsplit=16)
        counts = selection_counts(tf_expression, response, np.arange(8), 1, config)
        freqs = stability_frequencies(tf_expression, response, np.arange(8), 1, config)
        np.testing.assert_array_equal(freqs, counts / 16)
        assert np.all((freqs >= 0) & (freqs <= 1))

    def test_true_regulators_ranked_highest(self):
        tf_expression, response = _problem(n_experiments=60)
        config = StabilityConfig(nsteps_lars=2, nsplit=40)
        freqs = stability_frequencies(tf_expression, response, np.arange(8), 0, config)
        top_two = set(np.argsort(-freqs[:, 1])[:2].tolist())
        assert top_two == {2, 5}

    def test_constant_response_scores_zero(self):
        tf_expression, _ = _problem()
        config = StabilityConfig(nsteps_lars=3, nsplit=10)
        freqs = stability_frequencies(tf_expression, np.full(30, 4.0), np.arange(8), 0, config)
        assert np.all(freqs == 0.0)
