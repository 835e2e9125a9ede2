"""
Tests for the rank table and step distribution summary.
"""
import pandas as pd

from hobong.engines.dynamic_rank import RankOutcome
from hobong.reporting.rank_table import (
    RANK_COLUMNS,
    build_rank_frame,
    status_counts,
    summarize_rank_distribution,
)
from hobong.result import CalcResult


def _results():
    return {
        "E1": CalcResult.success(RankOutcome(1, "2021-01-10", 4, "2024-01-10")),
        "E2": CalcResult.success(
            RankOutcome(
                1,
                "2021-12-31",
                4,
                "2024-12-31",
                adjusted=True,
                lost_days=365,
                adjusted_entry_date="2020-12-31",
            )
        ),
        "E3": CalcResult.success(RankOutcome(2, "2022-03-01", 2, "2022-03-01")),
        "F1": CalcResult.success(RankOutcome.not_applicable()),
        "X": CalcResult.failure("EmployeeDataInvalid", "Invalid entry date"),
    }


def test_frame_has_one_typed_row_per_result(make_employee):
    df = build_rank_frame(_results(), {"E1": make_employee("E1")})

    assert list(df.columns) == RANK_COLUMNS
    assert df["employee_id"].tolist() == ["E1", "E2", "E3", "F1", "X"]
    assert df["status"].tolist() == ["ok", "ok", "ok", "not_applicable", "error"]
    assert df["name"].iloc[0] == "Employee E1"
    assert str(df["current_rank"].dtype) == "Int64"
    assert pd.isna(df["current_rank"].iloc[3])
    assert df["next_upgrade_date"].iloc[0] == pd.Timestamp("2024-01-10")
    assert df["lost_days"].iloc[1] == 365
    assert df["error_kind"].iloc[4] == "EmployeeDataInvalid"


def test_distribution_counts_ok_rows_only():
    df = build_rank_frame(_results())
    summary = summarize_rank_distribution(df)

    assert summary["current_rank"].tolist() == [2, 4]
    assert summary["employee_count"].tolist() == [1, 2]
    assert summary["adjusted_count"].tolist() == [0, 1]


def test_distribution_of_no_computed_rows_is_empty():
    df = build_rank_frame({"X": CalcResult.failure("DateInvalid", "bad")})
    summary = summarize_rank_distribution(df)
    assert summary.empty
    assert list(summary.columns) == ["current_rank", "employee_count", "adjusted_count"]


def test_status_counts():
    assert status_counts(build_rank_frame(_results())) == {
        "ok": 3,
        "not_applicable": 1,
        "error": 1,
    }
