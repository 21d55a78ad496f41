"""
Least Angle Regression Path
===========================
Computes the order in which predictors enter the active set along the
LAR path (Efron, Hastie, Johnstone & Tibshirani, 2004).

Only the entry order is needed for stability selection, so coefficients
are never returned. The solver is a small state machine:

    SELECTING   -> pick the candidate most correlated with the residual
    STEP_LENGTH -> move along the equiangular direction until a candidate
                   ties with the active set, or to the active-set OLS fit
    UPDATING    -> append the entering predictor to the active set
    TERMINAL    -> step budget reached, predictors exhausted, or the
                   residual is uncorrelated with every candidate

Correlation ties within TIE_TOL go to the lowest predictor index.
Degenerate inputs (constant response, zero-variance columns, columns in
the span of the active set) shorten the path instead of raising.
"""

import logging
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np
from scipy.linalg import cho_factor, cho_solve, lstsq

from .config import CORRELATION_TOL, TIE_TOL, COLLINEARITY_TOL, VARIANCE_TOL

logger = logging.getLogger(__name__)


class PathState(Enum):
    SELECTING = "selecting-variable"
    STEP_LENGTH = "computing-step-length"
    UPDATING = "updating-active-set"
    TERMINAL = "terminal"


def center_and_scale(values: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Center columns to zero mean and scale them to unit L2 norm.

    A column whose centered norm is negligible relative to its raw norm is
    constant; it is returned as zeros and flagged invalid.

    Returns:
        (standardized copy, boolean mask of non-constant columns)
    """
    values = np.asarray(values, dtype=float)
    squeeze = values.ndim == 1
    if squeeze:
        values = values[:, None]

    raw_norms = np.sqrt((values ** 2).sum(axis=0))
    centered = values - values.mean(axis=0)
    norms = np.sqrt((centered ** 2).sum(axis=0))
    valid = norms > VARIANCE_TOL * raw_norms
    valid &= norms > 0

    scaled = np.zeros_like(centered)
    scaled[:, valid] = centered[:, valid] / norms[valid]

    if squeeze:
        return scaled[:, 0], valid
    return scaled, valid


class LarsPathSolver:
    """
    Entry order of predictors along the LAR path for one regression.

    Args:
        X: Design matrix (observations × predictors), columns centered
        y: Centered response vector
        max_steps: Maximum number of predictors to admit
        available: Optional mask of predictors allowed to enter
    """

    def __init__(self, X: np.ndarray, y: np.ndarray, max_steps: int,
                 available: Optional[np.ndarray] = None):
        self.X = np.asarray(X, dtype=float)
        self.y = np.asarray(y, dtype=float)
        n_obs, n_predictors = self.X.shape
        if self.y.shape != (n_obs,):
            raise ValueError(
                f"Response has shape {self.y.shape}, expected ({n_obs},) to match design matrix"
            )

        if available is None:
            available = np.ones(n_predictors, dtype=bool)
        self.available = np.array(available, dtype=bool)
        self.available &= (self.X ** 2).sum(axis=0) > 0

        self.max_steps = min(int(max_steps), n_predictors)
        self.y_norm = float(np.linalg.norm(self.y))

        self.active: List[int] = []
        self.fit = np.zeros(n_obs)
        self.residual = self.y.copy()
        self.pending: Optional[int] = None
        self.state = PathState.SELECTING

    @property
    def candidates(self) -> np.ndarray:
        """Indices still allowed to enter, in increasing order."""
        mask = self.available.copy()
        mask[self.active] = False
        return np.flatnonzero(mask)

    def run(self) -> List[int]:
        handlers = {
            PathState.SELECTING: self._select,
            PathState.STEP_LENGTH: self._step_length,
            PathState.UPDATING: self._update,
        }
        while self.state is not PathState.TERMINAL:
            self.state = handlers[self.state]()
        return list(self.active)

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    def _select(self) -> PathState:
        if len(self.active) >= self.max_steps:
            return PathState.TERMINAL
        cand = self.candidates
        if cand.size == 0:
            return PathState.TERMINAL

        abs_corr = np.abs(self.X[:, cand].T @ self.residual)
        c_max = abs_corr.max()
        if c_max <= CORRELATION_TOL * self.y_norm:
            return PathState.TERMINAL

        j = int(cand[np.flatnonzero(abs_corr >= c_max - TIE_TOL)[0]])
        if self._is_collinear(j):
            self.available[j] = False
            return PathState.SELECTING
        self.pending = j
        return PathState.UPDATING

    def _step_length(self) -> PathState:
        cand = self.candidates
        if cand.size == 0:
            return PathState.TERMINAL

        X_active = self.X[:, self.active]
        c_active = X_active.T @ self.residual
        signs = np.sign(c_active)
        signs[signs == 0] = 1.0
        C = np.abs(c_active).max()
        # Inactive correlations never exceed C, so nothing non-negligible is left
        if C <= CORRELATION_TOL * self.y_norm:
            return PathState.TERMINAL

        signed = X_active * signs
        gram = signed.T @ signed
        ones = np.ones(len(self.active))
        g_inv_ones = cho_solve(cho_factor(gram), ones)
        A = 1.0 / np.sqrt(ones @ g_inv_ones)
        direction = signed @ (A * g_inv_ones)
        gamma_ols = C / A

        c = self.X[:, cand].T @ self.residual
        a = self.X[:, cand].T @ direction
        with np.errstate(divide='ignore', invalid='ignore'):
            steps = np.vstack([(C - c) / (A - a), (C + c) / (A + a)])
        steps[~np.isfinite(steps) | (steps <= 0)] = np.inf
        gammas = steps.min(axis=0)
        # Already tied with the active set: enters without moving
        gammas[np.abs(c) >= C - TIE_TOL] = 0.0

        gamma = gammas.min()
        if not np.isfinite(gamma) or gamma >= gamma_ols - TIE_TOL:
            self._move(gamma_ols, direction)
            return PathState.SELECTING

        j = int(cand[np.flatnonzero(gammas <= gamma + TIE_TOL)[0]])
        if self._is_collinear(j):
            self.available[j] = False
            return PathState.STEP_LENGTH
        self._move(gamma, direction)
        self.pending = j
        return PathState.UPDATING

    def _update(self) -> PathState:
        self.active.append(self.pending)
        self.pending = None
        if len(self.active) >= self.max_steps:
            return PathState.TERMINAL
        return PathState.STEP_LENGTH

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _move(self, gamma: float, direction: np.ndarray) -> None:
        self.fit = self.fit + gamma * direction
        self.residual = self.y - self.fit

    def _is_collinear(self, j: int) -> bool:
        """True if column j lies (numerically) in the span of the active set."""
        if not self.active:
            return False
        X_active = self.X[:, self.active]
        column = self.X[:, j]
        coef, _, _, _ = lstsq(X_active, column)
        remainder = column - X_active @ coef
        collinear = remainder @ remainder <= COLLINEARITY_TOL * (column @ column)
        if collinear:
            logger.debug(f"Predictor {j} is collinear with active set {self.active}; dropped")
        return bool(collinear)


def lars_entry_order(X: np.ndarray, y: np.ndarray, max_steps: int,
                     available: Optional[np.ndarray] = None) -> List[int]:
    """
    Order in which the columns of X enter the LAR path for response y.

    The response is centered and scaled to unit norm; a constant response
    yields an empty order. X is used as given and should already be
    column-centered.

    Args:
        X: Design matrix (observations × predictors)
        y: Response vector
        max_steps: Maximum length of the returned order
        available: Optional mask of predictors allowed to enter

    Returns:
        Predictor indices in entry order, length <= max_steps
    """
    y_std, valid = center_and_scale(y)
    if not valid[0]:
        return []
    return LarsPathSolver(X, y_std, max_steps, available=available).run()
