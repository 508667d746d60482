"""Typed containers for design rows, pipeline configuration, and results."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd

GENE_ID = "gene_id"
TREATMENT = "treatment"
TIMEPOINT = "timepoint"
EFFECT_SIZE = "effect_size"
SIGNIFICANCE = "significance_score"
COMPARISON = "comparison"
DEG_COUNT = "DEGcount"

DIFFEXPR_COLUMNS = (GENE_ID, TREATMENT, TIMEPOINT, EFFECT_SIZE, SIGNIFICANCE)
SUMMARY_COLUMNS = (COMPARISON, DEG_COUNT)


@dataclass(frozen=True)
class ExperimentDesignRow:
    """One treatment/timepoint combination to simulate."""

    treatment: str
    timepoint: int
    effect_sd: float
    null_fraction: float


@dataclass(frozen=True)
class PipelineConfig:
    """Options recognized by one workbook-writing run."""

    destination_path: str
    design: tuple[ExperimentDesignRow, ...] = ()
    n_per_group: int = 2000
    seed: int = 0
    log2fc_cut: float = 1.0
    adj_pval_cut: float = 0.05
    key_column: str | None = None
    require: dict[str, Any] = field(default_factory=dict)
    input_path: str | None = None
    annotation_path: str | None = None
    log_path: str | None = None


@dataclass(frozen=True)
class PipelineResult:
    """Everything one pipeline pass produced.

    - `filtered`: rows passing the cutoffs, in input order.
    - `summary`: one row per non-empty comparison, sorted by key.
    - `partitions`: comparison key -> passing rows, sorted by key.
    """

    n_input: int
    filtered: pd.DataFrame
    summary: pd.DataFrame
    partitions: dict[str, pd.DataFrame]
    workbook_path: Path
