"""degbook public API."""

from degbook._version import __version__
from degbook.core.filtering import filter_significant
from degbook.core.generate import generate_diffexpr
from degbook.core.grouping import partition_by_comparison, summarize_comparisons
from degbook.core.types import ExperimentDesignRow
from degbook.errors import InvalidParameterError, SheetNameError, WorkbookWriteError
from degbook.workbook import write_workbook


def run_pipeline(*args, **kwargs):
    """Lazy wrapper so importing degbook does not pull in the pipeline layer."""
    from degbook.pipeline.run import run_pipeline as _run_pipeline

    return _run_pipeline(*args, **kwargs)


__all__ = [
    "__version__",
    "ExperimentDesignRow",
    "InvalidParameterError",
    "SheetNameError",
    "WorkbookWriteError",
    "filter_significant",
    "generate_diffexpr",
    "partition_by_comparison",
    "run_pipeline",
    "summarize_comparisons",
    "write_workbook",
]
