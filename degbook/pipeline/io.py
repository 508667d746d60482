"""Pipeline I/O and logging helpers."""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from degbook.core.types import (
    DIFFEXPR_COLUMNS,
    EFFECT_SIZE,
    GENE_ID,
    SIGNIFICANCE,
    TIMEPOINT,
)
from degbook.core.utils import require_columns
from degbook.errors import InvalidParameterError


def ensure_dir(path: str | Path) -> None:
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)


def setup_logger(log_path: Path | None, logger_name: str = "degbook") -> logging.Logger:
    logger = logging.getLogger(logger_name)
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")
    if log_path is not None:
        ensure_dir(log_path.parent)
        fh = logging.FileHandler(log_path, mode="w", encoding="utf-8")
        fh.setFormatter(formatter)
        logger.addHandler(fh)
    sh = logging.StreamHandler()
    sh.setFormatter(formatter)
    logger.addHandler(sh)
    return logger


def _sep_for(path: Path) -> str:
    suffixes = [s.lower() for s in path.suffixes]
    if suffixes and suffixes[-1] == ".gz":
        suffixes = suffixes[:-1]
    if suffixes and suffixes[-1] in {".tsv", ".txt", ".tab"}:
        return "\t"
    return ","


def read_table(path: str | Path) -> pd.DataFrame:
    """Read a TSV (.tsv/.txt/.tab, optionally gzipped) or CSV file."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Input file not found: {p}")
    return pd.read_csv(p, sep=_sep_for(p), low_memory=False)


def load_diffexpr_table(path: str | Path) -> pd.DataFrame:
    """Read an existing DE results table and coerce its numeric columns.

    Required columns come first in the returned frame; any others (e.g. a
    precomputed `comparison` or `de_denom`) follow unchanged.
    """
    df = read_table(path)
    require_columns(df, DIFFEXPR_COLUMNS, what=f"DE table '{path}'")
    out = df.copy()
    out[GENE_ID] = out[GENE_ID].astype(str)
    for col in (EFFECT_SIZE, SIGNIFICANCE):
        out[col] = pd.to_numeric(out[col], errors="coerce")
    tp = pd.to_numeric(out[TIMEPOINT], errors="coerce")
    if tp.isna().any() or not (tp % 1 == 0).all():
        raise InvalidParameterError(f"DE table '{path}' has non-integer timepoint values.")
    out[TIMEPOINT] = tp.astype("int64")
    extra = [c for c in out.columns if c not in DIFFEXPR_COLUMNS]
    return out.loc[:, list(DIFFEXPR_COLUMNS) + extra]


def load_gene_annotations(path: str | Path) -> pd.DataFrame:
    """Read a gene metadata lookup keyed on `gene_id` (all columns as strings)."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Annotation file not found: {p}")
    df = pd.read_csv(p, sep=_sep_for(p), dtype=str, keep_default_na=False, low_memory=False)
    require_columns(df, (GENE_ID,), what=f"annotation table '{p}'")
    return df
