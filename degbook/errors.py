"""Exception types raised by degbook pipelines."""

from __future__ import annotations


class DegbookError(Exception):
    """Base class for all degbook errors."""


class InvalidParameterError(DegbookError, ValueError):
    """Generator, filter, or config input outside its accepted range."""


class SheetNameError(DegbookError, ValueError):
    """A comparison key cannot be used as a worksheet name."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Comparison key {key!r} is not a usable sheet name: {reason}.")


class WorkbookWriteError(DegbookError, OSError):
    """The workbook could not be written to its destination."""
