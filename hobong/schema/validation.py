"""
Data-entry validation for employee records.

The calculators do not clamp step numbers or reject unusual
but computable data; this is where the employee-edit and assignment-edit
workflows enforce the configured bounds before a record is saved.
"""

import datetime as dt
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from hobong.calculators.career import validate_conversion_inputs
from hobong.calculators.internal_career import validate_assignments
from hobong.constants import MAX_RANK, MIN_RANK
from hobong.errors import AssignmentDataInvalid, CareerDataInvalid
from hobong.schema.employee import Employee


@dataclass
class ValidationResult:
    """Result of validating one employee record."""
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def add_error(self, message: str, context: Optional[Dict[str, Any]] = None):
        """Add an error to the validation result."""
        self.errors.append(message)
        self.is_valid = False
        if context:
            self.metadata.setdefault("error_contexts", []).append(context)

    def add_warning(self, message: str, context: Optional[Dict[str, Any]] = None):
        """Add a warning to the validation result."""
        self.warnings.append(message)
        if context:
            self.metadata.setdefault("warning_contexts", []).append(context)

    def has_issues(self) -> bool:
        return bool(self.errors or self.warnings)

    def get_summary(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "error_count": len(self.errors),
            "warning_count": len(self.warnings),
            "has_issues": self.has_issues(),
        }


def validate_rank_bounds(
    value: Optional[int], result: ValidationResult, *, label: str,
    min_rank: int = MIN_RANK, max_rank: int = MAX_RANK,
) -> None:
    if value is None:
        return
    if not min_rank <= value <= max_rank:
        result.add_error(f"{label} {value} outside [{min_rank}, {max_rank}]", {"field": label})


def validate_career_period(start: Optional[dt.date], end: Optional[dt.date], result: ValidationResult) -> None:
    if start is not None and end is not None and end < start:
        result.add_error(f"Career end date ({end}) is before its start date ({start})")


def validate_assignment_date(entry: Optional[dt.date], assignment_date: Optional[dt.date], result: ValidationResult) -> None:
    """An assignment may start on, but not before, the entry date."""
    if entry is not None and assignment_date is not None and assignment_date < entry:
        result.add_error(f"Assignment date ({assignment_date}) is before entry date ({entry})")


def validate_employee(
    employee: Employee, *, min_rank: int = MIN_RANK, max_rank: int = MAX_RANK
) -> ValidationResult:
    """Check a normalised employee record against the data-entry rules."""
    result = ValidationResult()

    if employee.entry_date is None:
        result.add_warning("Entry date is missing; step figures cannot be recomputed")

    validate_rank_bounds(employee.rank.start_rank, result, label="Start step",
                         min_rank=min_rank, max_rank=max_rank)
    validate_rank_bounds(employee.rank.current_rank, result, label="Current step",
                         min_rank=min_rank, max_rank=max_rank)

    for i, career in enumerate(employee.career_details):
        validate_career_period(career.start_date, career.end_date, result)
        try:
            validate_conversion_inputs(career.recognition_rate, career.weekly_working_hours)
        except CareerDataInvalid as e:
            result.add_error(str(e), {"career_index": i, "name": career.name})

    for assignment in employee.assignments:
        validate_assignment_date(employee.entry_date, assignment.start_date, result)

    try:
        validate_assignments(employee.assignments)
    except AssignmentDataInvalid as e:
        result.add_error(str(e))

    active = [a for a in employee.assignments if a.end_date is None]
    if len(active) > 1 and not employee.is_retired:
        result.add_warning(
            f"{len(active)} assignments have no end date; only the latest is treated as active"
        )

    return result


__all__ = [
    "ValidationResult",
    "validate_employee",
    "validate_rank_bounds",
    "validate_career_period",
    "validate_assignment_date",
]
