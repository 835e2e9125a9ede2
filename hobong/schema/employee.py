# hobong/schema/employee.py
"""
Employee record subset read by the calculators.

Only the fields that drive step and seniority arithmetic are modelled.
Raw records in any historical shape go through
:func:`hobong.schema.migration.normalize_employee` before reaching here.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from hobong.calculators.career import apply_conversion_rate
from hobong.calculators.tenure import Period
from hobong.constants import DEFAULT_RATE, STANDARD_WEEKLY_HOURS


class SalaryType(str, Enum):
    """Salary track of an employee."""

    STEPPED = "stepped"  # 호봉제
    FLAT = "flat"  # 연봉제


@dataclass
class RankInfo:
    """Stored step figures as of the last save.

    ``current_rank`` and ``next_upgrade_date`` are the derived figures cached
    on the record; they are only read back when recomputation fails.

    ``first_upgrade_date is None`` is the "none" sentinel used for
    employees without a stepped progression.
    """

    start_rank: Optional[int] = None
    first_upgrade_date: Optional[dt.date] = None
    is_rank_based: Optional[bool] = None
    current_rank: Optional[int] = None
    next_upgrade_date: Optional[dt.date] = None
    salary_type: SalaryType = SalaryType.STEPPED


@dataclass
class PriorCareerRecord:
    """One period of service at an external organization."""

    original_period: Period
    recognition_rate: float = DEFAULT_RATE
    weekly_working_hours: float = STANDARD_WEEKLY_HOURS
    name: str = ""
    start_date: Optional[dt.date] = None
    end_date: Optional[dt.date] = None

    @property
    def converted_period(self) -> Period:
        return apply_conversion_rate(
            self.original_period, self.recognition_rate, self.weekly_working_hours
        )


@dataclass
class PriorCareerRate:
    """Recognition rate an assignment applies to an earlier assignment."""

    rate: float
    note: str = ""


@dataclass
class Assignment:
    """A bounded period of service within the organization."""

    id: str
    start_date: Optional[dt.date]
    end_date: Optional[dt.date] = None
    department: str = ""
    position: str = ""
    weekly_working_hours: float = STANDARD_WEEKLY_HOURS
    payment_method: str = ""
    # earlier assignment id -> rate recognised from this assignment onward
    prior_career_rates: Dict[str, PriorCareerRate] = field(default_factory=dict)

    @property
    def is_active(self) -> bool:
        return self.end_date is None


@dataclass
class Employee:
    id: str
    name: str = ""
    entry_date: Optional[dt.date] = None
    retirement_date: Optional[dt.date] = None
    rank: RankInfo = field(default_factory=RankInfo)
    career_details: List[PriorCareerRecord] = field(default_factory=list)
    assignments: List[Assignment] = field(default_factory=list)

    @property
    def is_retired(self) -> bool:
        return self.retirement_date is not None

    def sorted_assignments(self) -> List[Assignment]:
        """Assignments with a start date, ordered by start date."""
        dated = [a for a in self.assignments if a.start_date is not None]
        return sorted(dated, key=lambda a: a.start_date)

    def find_assignment(self, assignment_id: str) -> Optional[Assignment]:
        for assignment in self.assignments:
            if assignment.id == assignment_id:
                return assignment
        return None


__all__ = [
    "SalaryType",
    "RankInfo",
    "PriorCareerRecord",
    "PriorCareerRate",
    "Assignment",
    "Employee",
]
