"""Command-line interface for writing DEG summary workbooks."""

from __future__ import annotations

import argparse
import dataclasses
from pathlib import Path
from typing import Iterable

from degbook.config import load_pipeline_config
from degbook.core.types import PipelineConfig
from degbook.errors import DegbookError
from degbook.pipeline.io import setup_logger
from degbook.pipeline.run import run_workbook_pipeline


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Filter a DE table by cutoffs and write a per-comparison Excel workbook."
    )
    parser.add_argument("--config", required=True, help="Path to JSON pipeline config.")
    parser.add_argument("--n-per-group", type=int, default=None, help="Genes simulated per design row.")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for the generator.")
    parser.add_argument("--log2fc-cut", type=float, default=None, help="Minimum |effect size|.")
    parser.add_argument(
        "--adj-pval-cut", type=float, default=None, help="Significance scores must be below this."
    )
    parser.add_argument("--out", default=None, help="Destination .xlsx path (overrides config).")
    return parser.parse_args(list(argv) if argv is not None else None)


def apply_overrides(config: PipelineConfig, args: argparse.Namespace) -> PipelineConfig:
    overrides = {
        "n_per_group": args.n_per_group,
        "seed": args.seed,
        "log2fc_cut": args.log2fc_cut,
        "adj_pval_cut": args.adj_pval_cut,
        "destination_path": args.out,
    }
    return dataclasses.replace(config, **{k: v for k, v in overrides.items() if v is not None})


def main(argv: Iterable[str] | None = None) -> int:
    """Run the workbook pipeline.

    Args:
        argv: Command-line arguments (if None, uses sys.argv).

    Returns:
        Exit code (0 for success, 1 when the pipeline rejected its inputs
        or could not write the workbook).
    """
    args = parse_args(argv)
    config = apply_overrides(load_pipeline_config(args.config), args)
    log_path = Path(config.log_path) if config.log_path is not None else None
    logger = setup_logger(log_path, "degbook")
    try:
        result = run_workbook_pipeline(config, logger=logger)
    except DegbookError as exc:
        logger.error("%s", exc)
        return 1
    logger.info(
        "summary: %d comparisons, %d DEG rows -> %s",
        len(result.summary),
        len(result.filtered),
        result.workbook_path.as_posix(),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
