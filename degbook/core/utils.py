"""Small validation helpers shared by core modules."""

from __future__ import annotations

import math
from typing import Iterable

import pandas as pd

from degbook.errors import InvalidParameterError


def finite_float(name: str, value: object) -> float:
    try:
        out = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise InvalidParameterError(f"{name} must be a number, got {value!r}.") from exc
    if not math.isfinite(out):
        raise InvalidParameterError(f"{name} must be finite, got {value!r}.")
    return out


def require_columns(df: pd.DataFrame, columns: Iterable[str], what: str = "table") -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise InvalidParameterError(
            f"{what} is missing required columns {missing}. "
            f"Available columns: {list(df.columns)}"
        )
