"""Configuration loading for degbook workbook pipelines."""

from __future__ import annotations

import json
import math
from dataclasses import fields
from pathlib import Path
from typing import Any, Mapping

from degbook.core.generate import design_from_records
from degbook.core.types import PipelineConfig
from degbook.errors import InvalidParameterError


def load_json_config(path: str | Path) -> dict[str, Any]:
    """Read a workbook pipeline config; the file must hold one JSON object."""
    cfg_path = Path(path)
    if not cfg_path.is_file():
        raise FileNotFoundError(f"Workbook config not found: {cfg_path}")
    if cfg_path.suffix.lower() != ".json":
        raise ValueError(
            f"Workbook config '{cfg_path.name}' has suffix {cfg_path.suffix!r}. Use a .json config file."
        )

    text = cfg_path.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(
            f"Workbook config '{cfg_path}' is not valid JSON (line {exc.lineno}, "
            f"column {exc.colno}): {exc.msg}"
        ) from exc

    if not isinstance(data, dict):
        raise ValueError(
            f"Workbook config '{cfg_path}' must be a JSON object of options, "
            f"got {type(data).__name__}."
        )
    return data


def _opt_str(cfg: Mapping[str, Any], key: str) -> str | None:
    value = cfg.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or value == "":
        raise InvalidParameterError(f"Config '{key}' must be a non-empty string or null.")
    return value


def _number(cfg: Mapping[str, Any], key: str, default: float) -> float:
    value = cfg.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
        raise InvalidParameterError(f"Config '{key}' must be a number, got {value!r}.")
    return float(value)


def _integer(cfg: Mapping[str, Any], key: str, default: int) -> int:
    value = cfg.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidParameterError(f"Config '{key}' must be an integer, got {value!r}.")
    return value


def config_from_dict(cfg: Mapping[str, Any]) -> PipelineConfig:
    """Build a `PipelineConfig`, rejecting unknown keys and mistyped values."""
    known = {f.name for f in fields(PipelineConfig)}
    unknown = sorted(set(cfg) - known)
    if unknown:
        raise InvalidParameterError(
            f"Unknown config keys {unknown}. Recognized keys: {sorted(known)}"
        )

    destination = _opt_str(cfg, "destination_path")
    if destination is None:
        raise InvalidParameterError("Config 'destination_path' is required.")

    require = cfg.get("require", {}) or {}
    if not isinstance(require, dict):
        raise InvalidParameterError("Config 'require' must be an object of column -> value.")

    design_raw = cfg.get("design", []) or []
    if not isinstance(design_raw, list):
        raise InvalidParameterError("Config 'design' must be a list of design rows.")

    return PipelineConfig(
        destination_path=destination,
        design=design_from_records(design_raw),
        n_per_group=_integer(cfg, "n_per_group", 2000),
        seed=_integer(cfg, "seed", 0),
        log2fc_cut=_number(cfg, "log2fc_cut", 1.0),
        adj_pval_cut=_number(cfg, "adj_pval_cut", 0.05),
        key_column=_opt_str(cfg, "key_column"),
        require=dict(require),
        input_path=_opt_str(cfg, "input_path"),
        annotation_path=_opt_str(cfg, "annotation_path"),
        log_path=_opt_str(cfg, "log_path"),
    )


def load_pipeline_config(path: str | Path) -> PipelineConfig:
    return config_from_dict(load_json_config(path))
