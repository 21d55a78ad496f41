"""
Input Validation for TIGRESS
============================
Checks run before any computation starts. Every failure raises
ValidationError naming the offending identifiers or parameter, so no
partial score tensor is ever produced from bad input.
"""

from typing import Hashable, List, Sequence, Tuple

import numpy as np
import pandas as pd
from pandas.api.types import is_numeric_dtype

# Fewer experiments than this leave a half-sample too small to regress on
MIN_EXPERIMENTS = 4


class ValidationError(ValueError):
    """Raised when inputs or parameters are rejected before computation."""


def _format_ids(ids: Sequence[Hashable], limit: int = 20) -> str:
    shown = ", ".join(str(i) for i in ids[:limit])
    if len(ids) > limit:
        shown += f", ... ({len(ids) - limit} more)"
    return shown


def validate_expression(expression: pd.DataFrame) -> None:
    """
    Check the expression matrix (genes × experiments).

    Raises:
        ValidationError: if it is not a DataFrame, has duplicated gene
            identifiers, non-numeric or non-finite values, or fewer than
            MIN_EXPERIMENTS experiment columns.
    """
    if not isinstance(expression, pd.DataFrame):
        raise ValidationError(
            f"Expression matrix must be a pandas DataFrame (genes × experiments), "
            f"got {type(expression).__name__}"
        )

    n_experiments = expression.shape[1]
    if n_experiments < MIN_EXPERIMENTS:
        raise ValidationError(
            f"Expression matrix has {n_experiments} experiment columns; "
            f"at least {MIN_EXPERIMENTS} are required to subsample"
        )

    duplicated = expression.index[expression.index.duplicated()].unique().tolist()
    if duplicated:
        raise ValidationError(
            f"Duplicated gene identifiers in expression matrix: {_format_ids(duplicated)}"
        )

    non_numeric = [col for col, dtype in expression.dtypes.items() if not is_numeric_dtype(dtype)]
    if non_numeric:
        raise ValidationError(
            f"Non-numeric experiment columns in expression matrix: {_format_ids(non_numeric)}"
        )

    values = expression.to_numpy(dtype=float)
    bad_rows = ~np.isfinite(values).all(axis=1)
    if bad_rows.any():
        raise ValidationError(
            f"Missing or non-finite expression values for genes: "
            f"{_format_ids(expression.index[bad_rows].tolist())}"
        )


def validate_gene_list(ids: Sequence[Hashable], name: str,
                       known: pd.Index) -> List[Hashable]:
    """
    Check one identifier list (TFs or targets) against the expression index.

    Args:
        ids: Gene identifiers, in output order
        name: Label used in error messages ('TF', 'target')
        known: Gene identifiers present in the expression matrix

    Returns:
        The identifiers as a list, order preserved
    """
    if isinstance(ids, (str, bytes)):
        raise ValidationError(f"{name} list must be a sequence of identifiers, not a string")

    ids = list(ids)
    if not ids:
        raise ValidationError(f"{name} list is empty")

    as_index = pd.Index(ids)
    duplicated = as_index[as_index.duplicated()].unique().tolist()
    if duplicated:
        raise ValidationError(f"Duplicated {name} identifiers: {_format_ids(duplicated)}")

    missing = [gene for gene in ids if gene not in known]
    if missing:
        raise ValidationError(
            f"{name} identifiers not found in expression matrix: {_format_ids(missing)}"
        )
    return ids


def validate_inputs(expression: pd.DataFrame,
                    tf_ids: Sequence[Hashable],
                    target_ids: Sequence[Hashable]) -> Tuple[List[Hashable], List[Hashable]]:
    """Validate the expression matrix and both identifier lists together."""
    validate_expression(expression)
    tfs = validate_gene_list(tf_ids, "TF", expression.index)
    targets = validate_gene_list(target_ids, "target", expression.index)
    return tfs, targets
