"""Synthetic differential-expression tables for demos and tests."""

from __future__ import annotations

import logging
import numbers
from typing import Any, Iterable, Mapping, Sequence

import numpy as np
import pandas as pd

from degbook.core.types import (
    DIFFEXPR_COLUMNS,
    EFFECT_SIZE,
    GENE_ID,
    SIGNIFICANCE,
    TIMEPOINT,
    TREATMENT,
    ExperimentDesignRow,
)
from degbook.core.utils import finite_float
from degbook.errors import InvalidParameterError

_TREATMENT_KEYS = ("treatment", "trt")
_TIMEPOINT_KEYS = ("timepoint", "timep", "tp")


def rng_from_seed(seed: int) -> np.random.Generator:
    """Construct a NumPy Generator from seed."""
    return np.random.default_rng(int(seed))


def _pick(record: Mapping[str, Any], keys: Sequence[str], field_name: str) -> Any:
    for k in keys:
        if k in record:
            return record[k]
    raise InvalidParameterError(
        f"Design row {dict(record)!r} has no {field_name} (tried {', '.join(keys)})."
    )


def _as_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidParameterError(f"{name} must be an integer, got {value!r}.")
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise InvalidParameterError(f"{name} must be an integer, got {value!r}.")


def validate_design_row(row: ExperimentDesignRow) -> ExperimentDesignRow:
    if not isinstance(row.treatment, str) or row.treatment == "":
        raise InvalidParameterError(
            f"treatment must be a non-empty string, got {row.treatment!r}."
        )
    _as_int("timepoint", row.timepoint)
    sd = finite_float("effect_sd", row.effect_sd)
    if sd < 0.0:
        raise InvalidParameterError(
            f"effect_sd must be >= 0 for {row.treatment}/{row.timepoint}, got {row.effect_sd!r}."
        )
    frac = finite_float("null_fraction", row.null_fraction)
    if not 0.0 <= frac <= 1.0:
        raise InvalidParameterError(
            f"null_fraction must be in [0, 1] for {row.treatment}/{row.timepoint}, got {row.null_fraction!r}."
        )
    return row


def design_from_records(
    records: Iterable[Mapping[str, Any] | ExperimentDesignRow],
) -> tuple[ExperimentDesignRow, ...]:
    """Build validated design rows from dicts (legacy `trt`/`timep` keys accepted)."""
    rows: list[ExperimentDesignRow] = []
    for rec in records:
        if isinstance(rec, ExperimentDesignRow):
            row = rec
        elif isinstance(rec, Mapping):
            row = ExperimentDesignRow(
                treatment=str(_pick(rec, _TREATMENT_KEYS, "treatment")),
                timepoint=_as_int("timepoint", _pick(rec, _TIMEPOINT_KEYS, "timepoint")),
                effect_sd=finite_float("effect_sd", _pick(rec, ("effect_sd",), "effect_sd")),
                null_fraction=finite_float(
                    "null_fraction", _pick(rec, ("null_fraction",), "null_fraction")
                ),
            )
        else:
            raise InvalidParameterError(
                f"Design rows must be mappings or ExperimentDesignRow, got {type(rec).__name__}."
            )
        rows.append(validate_design_row(row))
    return tuple(rows)


def _empty_table() -> pd.DataFrame:
    return pd.DataFrame(
        {
            GENE_ID: pd.Series(dtype=object),
            TREATMENT: pd.Series(dtype=object),
            TIMEPOINT: pd.Series(dtype=np.int64),
            EFFECT_SIZE: pd.Series(dtype=float),
            SIGNIFICANCE: pd.Series(dtype=float),
        }
    )


def generate_diffexpr(
    design: Sequence[ExperimentDesignRow | Mapping[str, Any]],
    n_per_group: int,
    seed: int,
    *,
    logger: logging.Logger | None = None,
) -> pd.DataFrame:
    """Simulate one DE batch per design row.

    Within a group, all significance scores are drawn first
    (uniform on ``[0, 1 - null_fraction]``) and then all effect sizes
    (normal with mean 0 and sd ``effect_sd``); groups follow design order.
    The generator is private to the call, so equal seeds give equal tables.
    Gene ids restart at ``gene1`` for every group.
    """
    n = _as_int("n_per_group", n_per_group)
    if n <= 0:
        raise InvalidParameterError(f"n_per_group must be positive, got {n_per_group!r}.")
    rows = design_from_records(design)
    rng = rng_from_seed(_as_int("seed", seed))

    gene_ids = np.array([f"gene{i}" for i in range(1, n + 1)], dtype=object)
    frames: list[pd.DataFrame] = []
    for row in rows:
        scores = rng.uniform(0.0, 1.0 - float(row.null_fraction), size=n)
        effects = rng.normal(0.0, float(row.effect_sd), size=n)
        frames.append(
            pd.DataFrame(
                {
                    GENE_ID: gene_ids.copy(),
                    TREATMENT: np.full(n, row.treatment, dtype=object),
                    TIMEPOINT: np.full(n, int(row.timepoint), dtype=np.int64),
                    EFFECT_SIZE: effects.astype(float),
                    SIGNIFICANCE: scores.astype(float),
                }
            )
        )

    table = pd.concat(frames, ignore_index=True) if frames else _empty_table()
    log = logger or logging.getLogger("degbook")
    log.info(
        "Generated %d rows for %d design rows (n_per_group=%d, seed=%s)",
        len(table),
        len(rows),
        n,
        seed,
    )
    return table.loc[:, list(DIFFEXPR_COLUMNS)]
