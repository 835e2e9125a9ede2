"""
Rank table module: turns batch results into a per-employee DataFrame and
summarises the step distribution.
"""

from typing import Mapping, Optional

import pandas as pd

from hobong.constants import NOT_APPLICABLE
from hobong.result import CalcResult
from hobong.schema.employee import Employee

EMP_ID = "employee_id"

RANK_COLUMNS = [
    EMP_ID,
    "name",
    "status",
    "start_rank",
    "first_upgrade_date",
    "current_rank",
    "next_upgrade_date",
    "adjusted",
    "lost_days",
    "adjusted_entry_date",
    "error_kind",
    "error_message",
]

STATUS_OK = "ok"
STATUS_NOT_APPLICABLE = "not_applicable"
STATUS_ERROR = "error"


def build_rank_frame(
    results: Mapping[str, CalcResult],
    employees: Optional[Mapping[str, Employee]] = None,
) -> pd.DataFrame:
    """One row per employee, in the order of ``results``.

    Steps of employees off the stepped track, and of failed records, are
    left empty (``<NA>``) so the step columns stay integer-typed.
    """
    employees = employees or {}
    rows = []
    for employee_id, result in results.items():
        employee = employees.get(employee_id)
        row = {col: None for col in RANK_COLUMNS}
        row[EMP_ID] = employee_id
        row["name"] = employee.name if employee else None

        if not result.ok:
            row["status"] = STATUS_ERROR
            row["error_kind"] = result.error.kind
            row["error_message"] = result.error.message
        else:
            outcome = result.value
            row["status"] = STATUS_OK if outcome.is_applicable else STATUS_NOT_APPLICABLE
            row["adjusted"] = outcome.adjusted
            row["lost_days"] = outcome.lost_days
            row["adjusted_entry_date"] = outcome.adjusted_entry_date
            if outcome.is_applicable:
                row["start_rank"] = outcome.start_rank
                row["current_rank"] = outcome.current_rank
                if outcome.first_upgrade_date != NOT_APPLICABLE:
                    row["first_upgrade_date"] = outcome.first_upgrade_date
                if outcome.next_upgrade_date != NOT_APPLICABLE:
                    row["next_upgrade_date"] = outcome.next_upgrade_date
        rows.append(row)

    df = pd.DataFrame(rows, columns=RANK_COLUMNS)
    for col in ("start_rank", "current_rank", "lost_days"):
        df[col] = df[col].astype("Int64")
    for col in ("first_upgrade_date", "next_upgrade_date", "adjusted_entry_date"):
        df[col] = pd.to_datetime(df[col], errors="coerce")
    df["adjusted"] = df["adjusted"].astype("boolean")
    return df


def summarize_rank_distribution(rank_df: pd.DataFrame) -> pd.DataFrame:
    """
    Head-count per current step, ascending.

    Only employees with status ``ok`` are counted. Returns the columns
    ``current_rank``, ``employee_count`` and ``adjusted_count``.
    """
    ok = rank_df[rank_df["status"] == STATUS_OK]
    if ok.empty:
        return pd.DataFrame(
            {
                "current_rank": pd.Series([], dtype="Int64"),
                "employee_count": pd.Series([], dtype="int64"),
                "adjusted_count": pd.Series([], dtype="int64"),
            }
        )

    summary = (
        ok.assign(adjusted=ok["adjusted"].fillna(False).astype(bool))
        .groupby("current_rank")
        .agg(employee_count=(EMP_ID, "size"), adjusted_count=("adjusted", "sum"))
        .reset_index()
        .sort_values("current_rank")
        .reset_index(drop=True)
    )
    summary["adjusted_count"] = summary["adjusted_count"].astype("int64")
    return summary


def status_counts(rank_df: pd.DataFrame) -> dict:
    """``{"ok": n, "not_applicable": n, "error": n}``."""
    counts = rank_df["status"].value_counts()
    return {s: int(counts.get(s, 0)) for s in (STATUS_OK, STATUS_NOT_APPLICABLE, STATUS_ERROR)}
