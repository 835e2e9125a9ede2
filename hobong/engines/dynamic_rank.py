# hobong/engines/dynamic_rank.py
"""
Per-employee step figures as of a reference date.

Two paths produce the same :class:`RankOutcome`:

* stored path: the saved ``(start_rank, first_upgrade_date)`` are already
  right whenever every internal assignment is recognised at 100%, so only
  the current step and next upgrade date are recomputed;
* dynamic path: when some earlier assignment is recognised below 100% as of
  the target date, the lost days push the effective entry date forward and
  the start step and first-upgrade date are derived again.

The dynamic path run on a 100%-everywhere employee returns exactly the
stored path's outcome; tests hold both paths to that.

Calculation errors never escape :func:`get_dynamic_rank_info`: they degrade
to the stored figures, and if those cannot be evaluated either, to the
cached values saved on the record.
"""
from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from hobong.calculators import rank as rank_calc
from hobong.calculators.career import sum_periods
from hobong.calculators.internal_career import (
    InternalCareerResult,
    calculate_with_prior_career_rate,
)
from hobong.calculators.tenure import Period, calculate_days
from hobong.config.models import RankRules
from hobong.constants import MIN_RANK, NOT_APPLICABLE
from hobong.result import attempt, use_previous
from hobong.schema.employee import Employee, SalaryType
from hobong.schema.migration import normalize_employee
from hobong.utils.date_utils import DateLike, format_date, resolve_target_date

logger = logging.getLogger(__name__)

RankValue = Union[int, str]


@dataclass(frozen=True)
class RankOutcome:
    """Step figures for one employee; ``"-"`` marks "not applicable"."""

    start_rank: RankValue
    first_upgrade_date: str
    current_rank: RankValue
    next_upgrade_date: str
    adjusted: bool = False
    lost_days: Optional[int] = None
    adjusted_entry_date: Optional[str] = None

    @classmethod
    def not_applicable(cls) -> "RankOutcome":
        return cls(NOT_APPLICABLE, NOT_APPLICABLE, NOT_APPLICABLE, NOT_APPLICABLE, False)

    @property
    def is_applicable(self) -> bool:
        return self.current_rank != NOT_APPLICABLE

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "startRank": self.start_rank,
            "firstUpgradeDate": self.first_upgrade_date,
            "currentRank": self.current_rank,
            "nextUpgradeDate": self.next_upgrade_date,
            "adjusted": self.adjusted,
        }
        if self.adjusted:
            data["lostDays"] = self.lost_days
            data["adjustedEntryDate"] = self.adjusted_entry_date
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RankOutcome":
        return cls(
            start_rank=data["startRank"],
            first_upgrade_date=data["firstUpgradeDate"],
            current_rank=data["currentRank"],
            next_upgrade_date=data["nextUpgradeDate"],
            adjusted=bool(data.get("adjusted", False)),
            lost_days=data.get("lostDays"),
            adjusted_entry_date=data.get("adjustedEntryDate"),
        )


def _date_text(value: Optional[dt.date]) -> str:
    return format_date(value) if value is not None else NOT_APPLICABLE


def is_rank_based(employee: Employee) -> bool:
    """
    Whether the employee is on the stepped track.

    A flat salary type always wins; otherwise an explicit flag decides; an
    unset flag (records saved before the flag existed) falls back to
    "has a first-upgrade date".
    """
    rank = employee.rank
    if rank.salary_type == SalaryType.FLAT:
        return False
    if rank.is_rank_based is not None:
        return rank.is_rank_based
    return rank.first_upgrade_date is not None


def total_prior_career(employee: Employee) -> Period:
    """External prior career, converted per record and summed with carry."""
    return sum_periods(c.converted_period for c in employee.career_details)


def cached_rank_info(employee: Employee) -> RankOutcome:
    """The figures saved on the record, without any recomputation."""
    rank = employee.rank
    start = rank.start_rank if rank.start_rank is not None else MIN_RANK
    current = rank.current_rank if rank.current_rank is not None else start
    return RankOutcome(
        start_rank=start,
        first_upgrade_date=_date_text(rank.first_upgrade_date),
        current_rank=current,
        next_upgrade_date=_date_text(rank.next_upgrade_date),
        adjusted=False,
    )


def compute_stored_rank_info(
    employee: Employee, target: dt.date, rules: Optional[RankRules] = None
) -> RankOutcome:
    """Current step and next upgrade date from the stored start figures."""
    rules = rules or RankRules()
    rank = employee.rank
    start = rank.start_rank if rank.start_rank is not None else MIN_RANK
    rank_calc.validate_rank_inputs(
        start,
        rank.first_upgrade_date,
        employee.entry_date,
        max_prior_years=rules.max_prior_career_years,
        interval_years=rules.upgrade_interval_years,
    )
    position = rank_calc.calculate(
        start, rank.first_upgrade_date, target, interval_years=rules.upgrade_interval_years
    )
    return RankOutcome(
        start_rank=start,
        first_upgrade_date=_date_text(rank.first_upgrade_date),
        current_rank=position.current_rank,
        next_upgrade_date=_date_text(position.next_upgrade_date),
        adjusted=False,
    )


def compute_dynamic_rank_info(
    employee: Employee,
    target: dt.date,
    rules: Optional[RankRules] = None,
    internal: Optional[InternalCareerResult] = None,
) -> RankOutcome:
    """
    Re-derive every figure from the entry date, prior career and internal
    recognition rates.

    ``adjusted`` is set, with ``lost_days`` and ``adjusted_entry_date``,
    only when partial recognition actually lost days.

    Raises:
        RankCalculationError: when the entry date is missing or inconsistent.
        AssignmentDataInvalid, CareerDataInvalid: from the inputs.
    """
    rules = rules or RankRules()
    if employee.entry_date is None:
        raise rank_calc.RankCalculationError(f"Employee {employee.id!r} has no entry date")
    if internal is None:
        internal = calculate_with_prior_career_rate(employee, target)

    original_days = calculate_days(employee.entry_date, target)
    lost_days = original_days - internal.total_days
    adjusted_entry = employee.entry_date
    if lost_days > 0:
        adjusted_entry = employee.entry_date + dt.timedelta(days=lost_days)

    derived = rank_calc.derive_rank_info(
        adjusted_entry,
        total_prior_career(employee),
        snap_to_month_start=rules.snap_upgrade_to_month_start,
        interval_years=rules.upgrade_interval_years,
    )
    position = rank_calc.calculate(
        derived.start_rank,
        derived.first_upgrade_date,
        target,
        interval_years=rules.upgrade_interval_years,
    )

    adjusted = lost_days > 0
    if adjusted:
        logger.info(
            f"Employee {employee.id!r}: {lost_days} day(s) lost to partial recognition as of "
            f"{target}; effective entry {adjusted_entry}"
        )
    return RankOutcome(
        start_rank=derived.start_rank,
        first_upgrade_date=format_date(derived.first_upgrade_date),
        current_rank=position.current_rank,
        next_upgrade_date=_date_text(position.next_upgrade_date),
        adjusted=adjusted,
        lost_days=lost_days if adjusted else None,
        adjusted_entry_date=format_date(adjusted_entry) if adjusted else None,
    )


def resolve_rank_info(
    employee: Employee, target: dt.date, rules: Optional[RankRules] = None
) -> RankOutcome:
    """Pick the stored or the dynamic path for one employee."""
    if employee.entry_date is None:
        return compute_stored_rank_info(employee, target, rules)

    internal = calculate_with_prior_career_rate(employee, target)
    if internal.all_full_rate:
        return compute_stored_rank_info(employee, target, rules)
    return compute_dynamic_rank_info(employee, target, rules, internal=internal)


def get_dynamic_rank_info(
    employee: Any,
    target_date: Optional[DateLike] = None,
    *,
    rules: Optional[RankRules] = None,
) -> RankOutcome:
    """
    Step figures for ``employee`` as of ``target_date`` (default: today).

    ``employee`` may be an :class:`Employee` or a raw record in any
    supported shape. Employees not on the stepped track get the
    all-``"-"`` outcome.

    Raises:
        EmployeeDataInvalid: if a raw record cannot be normalised.
        DateInvalid: if ``target_date`` is malformed.
    """
    employee = normalize_employee(employee)
    target = resolve_target_date(target_date)

    if not is_rank_based(employee):
        return RankOutcome.not_applicable()

    result = attempt(resolve_rank_info, employee, target, rules)
    if not result.ok:
        logger.warning(f"Rank recomputation failed for employee {employee.id!r}")
    return use_previous(
        result,
        lambda: use_previous(
            attempt(compute_stored_rank_info, employee, target, rules),
            lambda: cached_rank_info(employee),
        ),
    )


def get_current_rank(
    employee: Any, target_date: Optional[DateLike] = None, *, rules: Optional[RankRules] = None
) -> RankValue:
    return get_dynamic_rank_info(employee, target_date, rules=rules).current_rank


def get_next_upgrade_date(
    employee: Any, target_date: Optional[DateLike] = None, *, rules: Optional[RankRules] = None
) -> str:
    return get_dynamic_rank_info(employee, target_date, rules=rules).next_upgrade_date


__all__ = [
    "RankOutcome",
    "is_rank_based",
    "total_prior_career",
    "cached_rank_info",
    "compute_stored_rank_info",
    "compute_dynamic_rank_info",
    "resolve_rank_info",
    "get_dynamic_rank_info",
    "get_current_rank",
    "get_next_upgrade_date",
]
