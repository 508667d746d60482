"""Core table transforms (no filesystem I/O)."""

from degbook.core.filtering import column_equals, filter_significant
from degbook.core.generate import design_from_records, generate_diffexpr
from degbook.core.grouping import (
    annotate_genes,
    default_comparison_key,
    key_from_column,
    key_from_treatment_timepoint,
    partition_by_comparison,
    summarize_comparisons,
)
from degbook.core.types import ExperimentDesignRow, PipelineConfig, PipelineResult

__all__ = [
    "ExperimentDesignRow",
    "PipelineConfig",
    "PipelineResult",
    "annotate_genes",
    "column_equals",
    "default_comparison_key",
    "design_from_records",
    "filter_significant",
    "generate_diffexpr",
    "key_from_column",
    "key_from_treatment_timepoint",
    "partition_by_comparison",
    "summarize_comparisons",
]
