"""
Edge Scoring and Ranking
========================
Collapse a ScoreTensor into one score per TF → target edge and rank them.

Two scoring rules:
- 'original': selection frequency at a fixed step budget
- 'area':     mean frequency over steps 1..L, i.e. the normalized area under
              the cumulative selection curve; rewards edges that enter early
"""

from typing import Optional

import numpy as np
import pandas as pd

from .data_structures import ScoreTensor
from .validation import ValidationError

SCORING_METHODS = ("original", "area")


def score_edges(tensor: ScoreTensor, method: str = "area",
                step: Optional[int] = None) -> pd.DataFrame:
    """
    One score per edge, as a TF × target DataFrame.

    Args:
        tensor: Output of infer_network
        method: 'original' or 'area'
        step: Step budget L (1-based); defaults to the last step

    Returns:
        DataFrame of scores in [0, 1]; self-edges are 0, failed targets NaN
    """
    if method not in SCORING_METHODS:
        raise ValidationError(
            f"Unknown scoring method {method!r}; expected one of {', '.join(SCORING_METHODS)}"
        )
    if step is None:
        step = tensor.nsteps
    if not 1 <= step <= tensor.nsteps:
        raise ValidationError(f"step must be in 1..{tensor.nsteps}, got {step}")

    stacked = tensor.to_array()[:step]
    if method == "original":
        values = stacked[step - 1]
    else:
        values = stacked.mean(axis=0)

    template = tensor.step(step)
    scores = pd.DataFrame(values, index=template.index.copy(), columns=template.columns.copy())
    for gene in set(tensor.tf_ids) & set(tensor.target_ids):
        scores.loc[gene, gene] = 0.0
    return scores


def rank_edges(scores: pd.DataFrame, top_n: Optional[int] = None) -> pd.DataFrame:
    """
    Edge list sorted by decreasing score.

    Self-edges and NaN scores are dropped. Equal scores keep TF order, then
    target order.

    Returns:
        DataFrame with columns ['tf', 'target', 'score']
    """
    n_tfs, n_targets = scores.shape
    edges = pd.DataFrame({
        'tf': np.repeat(scores.index.to_numpy(), n_targets),
        'target': np.tile(scores.columns.to_numpy(), n_tfs),
        'score': scores.to_numpy(dtype=float).ravel(),
    })
    keep = (edges['tf'] != edges['target']) & edges['score'].notna()
    edges = edges[keep].sort_values('score', ascending=False, kind='mergesort')
    if top_n is not None:
        edges = edges.head(top_n)
    return edges.reset_index(drop=True)
