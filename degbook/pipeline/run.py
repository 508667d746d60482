"""One-pass orchestration: generate or load, filter, count, split, write."""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from degbook.config import load_pipeline_config
from degbook.core.filtering import filter_significant, predicate_from_mapping
from degbook.core.generate import generate_diffexpr
from degbook.core.grouping import (
    GeneLookup,
    partition_by_comparison,
    resolve_key_func,
    summarize_comparisons,
)
from degbook.core.types import PipelineConfig, PipelineResult
from degbook.errors import InvalidParameterError
from degbook.pipeline.io import load_diffexpr_table, load_gene_annotations, setup_logger
from degbook.workbook import write_workbook


def _input_table(config: PipelineConfig, logger: logging.Logger) -> pd.DataFrame:
    if config.input_path is not None:
        logger.info("Reading DE table from %s", config.input_path)
        return load_diffexpr_table(config.input_path)
    if not config.design:
        raise InvalidParameterError(
            "Config needs either a non-empty 'design' or an 'input_path'."
        )
    return generate_diffexpr(config.design, config.n_per_group, config.seed, logger=logger)


def run_workbook_pipeline(
    config: PipelineConfig,
    *,
    table: pd.DataFrame | None = None,
    annotations: GeneLookup | None = None,
    logger: logging.Logger | None = None,
) -> PipelineResult:
    """Run the pipeline once and write the workbook to `config.destination_path`.

    `table` and `annotations` override `input_path`/`design` and
    `annotation_path` respectively.
    """
    log = logger or logging.getLogger("degbook")
    data = table if table is not None else _input_table(config, log)
    if annotations is None and config.annotation_path is not None:
        annotations = load_gene_annotations(config.annotation_path)

    key_func = resolve_key_func(config.key_column)
    filtered = filter_significant(
        data,
        config.log2fc_cut,
        config.adj_pval_cut,
        extra_predicate=predicate_from_mapping(config.require),
        logger=log,
    )
    summary = summarize_comparisons(filtered, key_func)
    partitions = partition_by_comparison(
        filtered, key_func, annotations=annotations, logger=log
    )
    path = write_workbook(summary, partitions, config.destination_path, logger=log)
    return PipelineResult(
        n_input=len(data),
        filtered=filtered,
        summary=summary,
        partitions=partitions,
        workbook_path=path,
    )


def run_pipeline(config_path: str | Path) -> PipelineResult:
    config = load_pipeline_config(config_path)
    log_path = Path(config.log_path) if config.log_path is not None else None
    logger = setup_logger(log_path, "degbook")
    result = run_workbook_pipeline(config, logger=logger)
    logger.info(
        "Pipeline complete: %d of %d rows in %d comparisons. Workbook at %s",
        len(result.filtered),
        result.n_input,
        len(result.partitions),
        result.workbook_path.as_posix(),
    )
    return result
