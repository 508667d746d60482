"""Cutoff-based selection of differentially expressed rows."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

import numpy as np
import pandas as pd

from degbook.core.types import EFFECT_SIZE, SIGNIFICANCE
from degbook.core.utils import finite_float, require_columns
from degbook.errors import InvalidParameterError

RowPredicate = Callable[[pd.DataFrame], pd.Series]


def column_equals(column: str, value: Any) -> RowPredicate:
    """Predicate keeping rows whose `column` equals `value` (e.g. de_denom == "control")."""

    def _predicate(df: pd.DataFrame) -> pd.Series:
        if column not in df.columns:
            raise InvalidParameterError(
                f"Extra filter column '{column}' not found. Available columns: {list(df.columns)}"
            )
        return df[column] == value

    _predicate.__name__ = f"{column}=={value!r}"
    return _predicate


def predicate_from_mapping(require: Mapping[str, Any] | None) -> RowPredicate | None:
    """AND together one `column_equals` predicate per mapping entry."""
    if not require:
        return None
    parts = [column_equals(str(col), val) for col, val in require.items()]

    def _all(df: pd.DataFrame) -> pd.Series:
        mask = pd.Series(True, index=df.index)
        for part in parts:
            mask &= part(df).astype(bool)
        return mask

    return _all


def validate_cutoffs(log2fc_cut: float, adj_pval_cut: float) -> tuple[float, float]:
    fc = finite_float("log2fc_cut", log2fc_cut)
    if fc < 0.0:
        raise InvalidParameterError(f"log2fc_cut must be >= 0, got {log2fc_cut!r}.")
    p = finite_float("adj_pval_cut", adj_pval_cut)
    if not 0.0 <= p <= 1.0:
        raise InvalidParameterError(f"adj_pval_cut must be in [0, 1], got {adj_pval_cut!r}.")
    return fc, p


def significance_mask(df: pd.DataFrame, log2fc_cut: float, adj_pval_cut: float) -> pd.Series:
    """Boolean mask: |effect| >= log2fc_cut and score < adj_pval_cut.

    NaN effects or scores never pass.
    """
    fc, p = validate_cutoffs(log2fc_cut, adj_pval_cut)
    require_columns(df, (EFFECT_SIZE, SIGNIFICANCE))
    effect = pd.to_numeric(df[EFFECT_SIZE], errors="coerce").to_numpy(dtype=float)
    score = pd.to_numeric(df[SIGNIFICANCE], errors="coerce").to_numpy(dtype=float)
    with np.errstate(invalid="ignore"):
        keep = (np.abs(effect) >= fc) & (score < p)
    return pd.Series(keep, index=df.index)


def filter_significant(
    df: pd.DataFrame,
    log2fc_cut: float,
    adj_pval_cut: float,
    *,
    extra_predicate: RowPredicate | None = None,
    logger: logging.Logger | None = None,
) -> pd.DataFrame:
    """Return the rows passing both cutoffs (and `extra_predicate`), in input order."""
    mask = significance_mask(df, log2fc_cut, adj_pval_cut)
    if extra_predicate is not None:
        mask &= extra_predicate(df).reindex(df.index, fill_value=False).astype(bool)
    out = df.loc[mask.to_numpy()].reset_index(drop=True)

    log = logger or logging.getLogger("degbook")
    if out.empty:
        log.warning(
            "No rows pass log2fc_cut=%s, adj_pval_cut=%s (of %d rows)",
            log2fc_cut,
            adj_pval_cut,
            len(df),
        )
    else:
        log.info("%d of %d rows pass the significance cutoffs", len(out), len(df))
    return out
