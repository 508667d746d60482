from __future__ import annotations

import logging

import numpy as np
import pandas as pd
import pytest

from degbook.core.filtering import filter_significant
from degbook.core.generate import generate_diffexpr
from degbook.core.grouping import (
    annotate_genes,
    default_comparison_key,
    key_from_column,
    key_from_treatment_timepoint,
    partition_by_comparison,
    summarize_comparisons,
)
from degbook.errors import InvalidParameterError


def _rows(records) -> pd.DataFrame:
    return pd.DataFrame(
        records,
        columns=["gene_id", "treatment", "timepoint", "effect_size", "significance_score"],
    )


@pytest.fixture()
def filtered() -> pd.DataFrame:
    design = [
        {"treatment": "B", "timepoint": 2, "effect_sd": 2.0, "null_fraction": 0.5},
        {"treatment": "A", "timepoint": 1, "effect_sd": 3.0, "null_fraction": 0.5},
        {"treatment": "A", "timepoint": 10, "effect_sd": 2.5, "null_fraction": 0.6},
    ]
    table = generate_diffexpr(design, n_per_group=1500, seed=2)
    return filter_significant(table, 1.0, 0.05)


def test_summary_counts_sum_to_filtered_length(filtered):
    summary = summarize_comparisons(filtered)
    assert list(summary.columns) == ["comparison", "DEGcount"]
    assert int(summary["DEGcount"].sum()) == len(filtered)


def test_summary_and_partitions_are_a_bijection(filtered):
    summary = summarize_comparisons(filtered)
    parts = partition_by_comparison(filtered)
    assert summary["comparison"].tolist() == list(parts)
    for key, count in zip(summary["comparison"], summary["DEGcount"]):
        assert count == len(parts[key])


def test_keys_are_sorted_lexicographically(filtered):
    summary = summarize_comparisons(filtered)
    assert summary["comparison"].tolist() == ["A_1", "A_10", "B_2"]
    assert list(partition_by_comparison(filtered)) == ["A_1", "A_10", "B_2"]


def test_order_does_not_depend_on_input_order(filtered):
    shuffled = filtered.sample(frac=1.0, random_state=0).reset_index(drop=True)
    pd.testing.assert_frame_equal(summarize_comparisons(shuffled), summarize_comparisons(filtered))
    assert list(partition_by_comparison(shuffled)) == list(partition_by_comparison(filtered))


def test_groups_without_passing_rows_are_absent():
    df = _rows(
        [
            ("gene1", "A", 1, 3.0, 0.01),
            ("gene1", "B", 1, 0.1, 0.01),
            ("gene2", "A", 1, 2.5, 0.02),
        ]
    )
    passing = filter_significant(df, 1.0, 0.05)
    summary = summarize_comparisons(passing)
    assert summary["comparison"].tolist() == ["A_1"]
    assert summary["DEGcount"].tolist() == [2]
    assert list(partition_by_comparison(passing)) == ["A_1"]


def test_partition_rows_keep_input_order_and_columns():
    df = _rows(
        [
            ("gene3", "A", 1, 3.0, 0.01),
            ("gene1", "B", 1, 3.0, 0.01),
            ("gene2", "A", 1, -3.0, 0.01),
        ]
    )
    parts = partition_by_comparison(df)
    assert parts["A_1"]["gene_id"].tolist() == ["gene3", "gene2"]
    assert list(parts["A_1"].columns) == list(df.columns)
    assert parts["A_1"].index.tolist() == [0, 1]


def test_empty_input_gives_empty_summary_and_no_partitions():
    empty = _rows([])
    summary = summarize_comparisons(empty)
    assert summary.empty
    assert list(summary.columns) == ["comparison", "DEGcount"]
    assert partition_by_comparison(empty) == {}


def test_comparison_column_takes_precedence():
    df = _rows([("gene1", "A", 1, 3.0, 0.01), ("gene2", "A", 1, 3.0, 0.01)])
    df["comparison"] = ["A_vs_ctrl", "A_vs_veh"]
    assert default_comparison_key(df).tolist() == ["A_vs_ctrl", "A_vs_veh"]
    assert summarize_comparisons(df)["comparison"].tolist() == ["A_vs_ctrl", "A_vs_veh"]


def test_explicit_key_column():
    df = _rows([("gene1", "A", 1, 3.0, 0.01), ("gene2", "B", 1, 3.0, 0.01)])
    df["contrast"] = ["x", "x"]
    key = key_from_column("contrast")
    summary = summarize_comparisons(df, key)
    assert summary["comparison"].tolist() == ["x"]
    assert summary["DEGcount"].tolist() == [2]
    assert list(partition_by_comparison(df, key)) == ["x"]
    with pytest.raises(InvalidParameterError, match="missing"):
        key_from_column("absent")(df)


def test_float_timepoints_format_as_integers():
    df = _rows([("gene1", "A", 1, 3.0, 0.01)])
    df["timepoint"] = df["timepoint"].astype(float)
    assert key_from_treatment_timepoint(df).tolist() == ["A_1"]


def test_annotate_genes_left_join_keeps_rows():
    df = _rows(
        [
            ("gene2", "A", 1, 3.0, 0.01),
            ("gene9", "A", 1, 3.0, 0.01),
            ("gene1", "A", 1, 3.0, 0.01),
        ]
    )
    lookup = pd.DataFrame({"gene_id": ["gene1", "gene2"], "symbol": ["TP53", "MYC"]})
    out = annotate_genes(df, lookup)
    assert out["gene_id"].tolist() == ["gene2", "gene9", "gene1"]
    assert out.loc[0, "symbol"] == "MYC"
    assert pd.isna(out.loc[1, "symbol"])
    assert out.loc[2, "symbol"] == "TP53"
    assert list(out.columns)[:5] == list(df.columns)


def test_annotate_genes_accepts_mapping_and_warns_on_duplicates(caplog):
    caplog.set_level(logging.WARNING)
    df = _rows([("gene1", "A", 1, 3.0, 0.01)])
    out = annotate_genes(df, {"gene1": {"function": "kinase"}})
    assert out.loc[0, "function"] == "kinase"

    dupes = pd.DataFrame({"gene_id": ["gene1", "gene1"], "function": ["first", "second"]})
    out = annotate_genes(df, dupes)
    assert len(out) == 1
    assert out.loc[0, "function"] == "first"
    assert "duplicate gene ids" in caplog.text


def test_annotation_does_not_change_counts(filtered):
    lookup = pd.DataFrame({"gene_id": ["gene1", "gene5"], "function": ["a", "b"]})
    parts = partition_by_comparison(filtered, annotations=lookup)
    summary = summarize_comparisons(filtered)
    for key, count in zip(summary["comparison"], summary["DEGcount"]):
        assert len(parts[key]) == count
        assert "function" in parts[key].columns
    assert np.all(np.isin(parts["A_1"]["function"].dropna().unique(), ["a", "b"]))


@pytest.mark.parametrize("column", ["treatment", "timepoint"])
def test_blank_key_components_are_rejected(column):
    df = _rows([("gene1", "A", 1, 3.0, 0.01), ("gene2", "A", 1, 3.0, 0.01)])
    df[column] = df[column].astype(object)
    df.loc[1, column] = np.nan
    with pytest.raises(InvalidParameterError, match=column):
        summarize_comparisons(df)
    with pytest.raises(InvalidParameterError, match=column):
        partition_by_comparison(df)


def test_blank_comparison_cells_are_rejected():
    df = _rows([("gene1", "A", 1, 3.0, 0.01), ("gene2", "B", 1, 3.0, 0.01)])
    df["comparison"] = ["A_vs_ctrl", None]
    with pytest.raises(InvalidParameterError, match="comparison"):
        summarize_comparisons(df)
    with pytest.raises(InvalidParameterError, match="comparison"):
        partition_by_comparison(df)
