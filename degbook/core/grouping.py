"""Comparison keys, per-comparison DEG counts, and per-comparison row groups.

Counting and partitioning share one key function, so for every comparison
the summary count equals the number of rows on its sheet.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Union

import numpy as np
import pandas as pd

from degbook.core.types import (
    COMPARISON,
    DEG_COUNT,
    GENE_ID,
    SUMMARY_COLUMNS,
    TIMEPOINT,
    TREATMENT,
)
from degbook.core.utils import require_columns
from degbook.errors import InvalidParameterError

KeyFunc = Callable[[pd.DataFrame], pd.Series]
GeneLookup = Union[pd.DataFrame, Mapping[str, Mapping[str, Any]]]


def _format_timepoint(values: pd.Series) -> pd.Series:
    if pd.api.types.is_float_dtype(values):
        finite = values.dropna()
        if finite.size == values.size and np.all(np.mod(finite.to_numpy(), 1.0) == 0.0):
            return values.astype(np.int64).astype(str)
    return values.astype(str)


def _require_complete(df: pd.DataFrame, column: str) -> None:
    n_missing = int(df[column].isna().sum())
    if n_missing:
        raise InvalidParameterError(
            f"Column '{column}' has {n_missing} blank values; every row needs a comparison key."
        )


def key_from_treatment_timepoint(df: pd.DataFrame) -> pd.Series:
    """`<treatment>_<timepoint>` for every row."""
    require_columns(df, (TREATMENT, TIMEPOINT))
    _require_complete(df, TREATMENT)
    _require_complete(df, TIMEPOINT)
    return df[TREATMENT].astype(str) + "_" + _format_timepoint(df[TIMEPOINT])


def key_from_column(column: str) -> KeyFunc:
    """Key function reading a precomputed comparison column."""

    def _key(df: pd.DataFrame) -> pd.Series:
        require_columns(df, (column,))
        _require_complete(df, column)
        return df[column].astype(str)

    return _key


def default_comparison_key(df: pd.DataFrame) -> pd.Series:
    """Use the `comparison` column when present, else treatment + timepoint."""
    if COMPARISON in df.columns:
        return key_from_column(COMPARISON)(df)
    return key_from_treatment_timepoint(df)


def resolve_key_func(key_column: str | None) -> KeyFunc:
    if key_column is None:
        return default_comparison_key
    return key_from_column(key_column)


def _empty_summary() -> pd.DataFrame:
    return pd.DataFrame(
        {
            COMPARISON: pd.Series(dtype=object),
            DEG_COUNT: pd.Series(dtype=np.int64),
        }
    )


def summarize_comparisons(
    filtered: pd.DataFrame, key_func: KeyFunc = default_comparison_key
) -> pd.DataFrame:
    """Count passing rows per comparison.

    Comparisons without passing rows are absent rather than listed with a
    zero count. Rows are sorted by comparison key.
    """
    if filtered.empty:
        return _empty_summary()
    keys = key_func(filtered)
    counts = keys.groupby(keys.to_numpy(), sort=True, dropna=False).size()
    summary = pd.DataFrame(
        {
            COMPARISON: counts.index.astype(str).to_numpy(dtype=object),
            DEG_COUNT: counts.to_numpy(dtype=np.int64),
        }
    )
    summary = summary.sort_values(COMPARISON, kind="mergesort").reset_index(drop=True)
    return summary.loc[:, list(SUMMARY_COLUMNS)]


def _lookup_frame(lookup: GeneLookup, logger: logging.Logger) -> pd.DataFrame:
    if isinstance(lookup, pd.DataFrame):
        table = lookup.copy()
        if GENE_ID not in table.columns:
            if table.index.name == GENE_ID:
                table = table.reset_index()
            else:
                require_columns(table, (GENE_ID,), what="gene annotation lookup")
    else:
        table = pd.DataFrame.from_dict(
            {str(k): dict(v) for k, v in lookup.items()}, orient="index"
        )
        table.index.name = GENE_ID
        table = table.reset_index()
    table[GENE_ID] = table[GENE_ID].astype(str)

    dupes = table[GENE_ID].duplicated(keep="first")
    if dupes.any():
        logger.warning(
            "Gene annotation lookup has %d duplicate gene ids; keeping the first record for each",
            int(dupes.sum()),
        )
        table = table.loc[~dupes.to_numpy()]
    return table


def annotate_genes(
    frame: pd.DataFrame,
    lookup: GeneLookup,
    *,
    logger: logging.Logger | None = None,
) -> pd.DataFrame:
    """Left-join gene annotations on `gene_id`.

    Row count and order are unchanged; genes absent from the lookup get
    empty annotation fields. Annotation columns that clash with existing
    columns are suffixed with `_annot`.
    """
    log = logger or logging.getLogger("degbook")
    require_columns(frame, (GENE_ID,))
    table = _lookup_frame(lookup, log)
    left = frame.copy()
    join_ids = left[GENE_ID].astype(str)
    left["_join_gene_id"] = join_ids.to_numpy()
    right = table.rename(columns={GENE_ID: "_join_gene_id"})
    merged = left.merge(
        right,
        on="_join_gene_id",
        how="left",
        suffixes=("", "_annot"),
        validate="many_to_one",
    )
    return merged.drop(columns="_join_gene_id")


def partition_by_comparison(
    filtered: pd.DataFrame,
    key_func: KeyFunc = default_comparison_key,
    *,
    annotations: GeneLookup | None = None,
    logger: logging.Logger | None = None,
) -> dict[str, pd.DataFrame]:
    """Split passing rows into one frame per comparison key, ordered by key.

    Only comparisons with at least one passing row get an entry. Rows keep
    their input order inside each group.
    """
    log = logger or logging.getLogger("degbook")
    if filtered.empty:
        return {}
    keys = key_func(filtered).to_numpy(dtype=object)
    groups: dict[str, pd.DataFrame] = {}
    for key, sub in filtered.groupby(keys, sort=False, dropna=False):
        part = sub.reset_index(drop=True)
        if annotations is not None:
            part = annotate_genes(part, annotations, logger=log)
        groups[str(key)] = part
    ordered = {k: groups[k] for k in sorted(groups)}
    log.info("Partitioned %d rows into %d comparisons", len(filtered), len(ordered))
    return ordered
