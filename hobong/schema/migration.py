"""
Migration of raw employee records into the canonical data model.

Stored records come in several historical shapes (``employment.entryDate``
vs ``entryDate``, ``personalInfo.name`` vs ``name``, percentage strings,
period text instead of dates, the single-valued ``priorCareerRate`` on an
assignment, and so on). All of them are resolved here, once, by
:func:`normalize_employee`; the calculators only ever see
:class:`~hobong.schema.employee.Employee`.
"""

import datetime as dt
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from hobong.calculators.tenure import Period, calculate, parse_period_text
from hobong.constants import DEFAULT_RATE, NONE_DATE_MARKERS, NOT_APPLICABLE, STANDARD_WEEKLY_HOURS
from hobong.errors import DateInvalid, EmployeeDataInvalid
from hobong.schema.employee import (
    Assignment,
    Employee,
    PriorCareerRate,
    PriorCareerRecord,
    RankInfo,
    SalaryType,
)
from hobong.utils.date_utils import format_date, parse_date

logger = logging.getLogger(__name__)


class LegacyFieldMapper:
    """Canonical field -> candidate source paths, in priority order."""

    EMPLOYEE_FIELDS: Dict[str, Tuple[str, ...]] = {
        "id": ("id", "uniqueCode", "employeeId", "employee_id"),
        "name": ("personalInfo.name", "name"),
        "entry_date": ("employment.entryDate", "entryDate", "entry_date"),
        "retirement_date": (
            "employment.retirementDate",
            "retirementDate",
            "retirement_date",
        ),
        "career_details": ("careerDetails", "career_details"),
        "assignments": ("assignments",),
        "rank": ("rank",),
    }

    RANK_FIELDS: Dict[str, Tuple[str, ...]] = {
        "start_rank": ("startRank", "start_rank"),
        "first_upgrade_date": ("firstUpgradeDate", "first_upgrade_date"),
        "is_rank_based": ("isRankBased", "is_rank_based"),
        "current_rank": ("currentRank", "current_rank"),
        "next_upgrade_date": ("nextUpgradeDate", "next_upgrade_date"),
        "salary_type": ("salaryType", "salary_type"),
    }

    CAREER_FIELDS: Dict[str, Tuple[str, ...]] = {
        "name": ("name", "organization"),
        "start_date": ("startDate", "start_date"),
        "end_date": ("endDate", "end_date"),
        "period": ("originalPeriod", "original_period", "period"),
        "rate": ("recognitionRate", "recognition_rate", "rate", "conversionRate"),
        "hours": ("weeklyWorkingHours", "weekly_working_hours", "workingHours"),
    }

    ASSIGNMENT_FIELDS: Dict[str, Tuple[str, ...]] = {
        "id": ("id", "assignmentId"),
        "start_date": ("startDate", "start_date", "assignmentDate"),
        "end_date": ("endDate", "end_date"),
        "department": ("dept", "department", "newDept"),
        "position": ("position", "newPosition"),
        "hours": ("weeklyWorkingHours", "weekly_working_hours", "workingHours"),
        "payment_method": ("paymentMethod", "payment_method"),
        "prior_career_rates": ("priorCareerRates", "prior_career_rates"),
        "legacy_rate": ("priorCareerRate",),
        "legacy_rate_note": ("priorCareerRateNote",),
    }

    SALARY_TYPES: Dict[str, SalaryType] = {
        "stepped": SalaryType.STEPPED,
        "호봉제": SalaryType.STEPPED,
        "flat": SalaryType.FLAT,
        "annual": SalaryType.FLAT,
        "연봉제": SalaryType.FLAT,
    }

    @staticmethod
    def lookup(raw: Mapping[str, Any], paths: Tuple[str, ...]) -> Any:
        """First non-empty value among dotted ``paths``."""
        for path in paths:
            node: Any = raw
            for part in path.split("."):
                if not isinstance(node, Mapping) or part not in node:
                    node = None
                    break
                node = node[part]
            if node is not None and node != "":
                return node
        return None

    @classmethod
    def extract(cls, raw: Mapping[str, Any], table: Dict[str, Tuple[str, ...]]) -> Dict[str, Any]:
        return {name: cls.lookup(raw, paths) for name, paths in table.items()}


def _optional_date(value: Any, what: str) -> Optional[dt.date]:
    if value is None or (isinstance(value, str) and value.strip() in NONE_DATE_MARKERS):
        return None
    try:
        return parse_date(value)
    except DateInvalid as e:
        raise EmployeeDataInvalid(f"Invalid {what}: {e}") from e


def _number(value: Any, default: float, what: str) -> float:
    if value is None:
        return default
    if isinstance(value, str):
        value = value.strip().rstrip("%").strip()
        if not value:
            return default
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise EmployeeDataInvalid(f"Invalid {what}: {value!r}") from e


def _optional_int(value: Any, what: str) -> Optional[int]:
    if value is None or (isinstance(value, str) and value.strip() in ("", NOT_APPLICABLE)):
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise EmployeeDataInvalid(f"Invalid {what}: {value!r}") from e


def _optional_bool(value: Any) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes"):
            return True
        if lowered in ("false", "0", "no"):
            return False
        return None
    return bool(value)


def _period(value: Any) -> Optional[Period]:
    if value is None:
        return None
    if isinstance(value, Period):
        return value
    if isinstance(value, Mapping):
        return Period.from_dict(value)
    try:
        return parse_period_text(str(value))
    except DateInvalid as e:
        raise EmployeeDataInvalid(f"Invalid career period: {e}") from e


def migrate_rank(raw: Optional[Mapping[str, Any]]) -> RankInfo:
    fields = LegacyFieldMapper.extract(raw or {}, LegacyFieldMapper.RANK_FIELDS)

    salary_raw = fields["salary_type"]
    salary_type = SalaryType.STEPPED
    if salary_raw is not None:
        key = str(salary_raw.value if isinstance(salary_raw, SalaryType) else salary_raw).strip()
        try:
            salary_type = LegacyFieldMapper.SALARY_TYPES[key]
        except KeyError:
            raise EmployeeDataInvalid(f"Unknown salary type: {salary_raw!r}") from None

    return RankInfo(
        start_rank=_optional_int(fields["start_rank"], "start rank"),
        first_upgrade_date=_optional_date(fields["first_upgrade_date"], "first-upgrade date"),
        is_rank_based=_optional_bool(fields["is_rank_based"]),
        current_rank=_optional_int(fields["current_rank"], "current rank"),
        next_upgrade_date=_optional_date(fields["next_upgrade_date"], "next upgrade date"),
        salary_type=salary_type,
    )


def migrate_career(raw: Mapping[str, Any]) -> PriorCareerRecord:
    """
    One prior-career record. The original period comes from the start/end
    dates when both are present (end date counted as worked), otherwise
    from a stored period (mapping or ``"N년 M개월 D일"`` text).
    """
    fields = LegacyFieldMapper.extract(raw, LegacyFieldMapper.CAREER_FIELDS)
    start = _optional_date(fields["start_date"], "career start date")
    end = _optional_date(fields["end_date"], "career end date")

    if start is not None and end is not None:
        if end < start:
            raise EmployeeDataInvalid(f"Career end date {end} is before start date {start}")
        period = calculate(start, end, inclusive=True)
    else:
        period = _period(fields["period"])
        if period is None:
            raise EmployeeDataInvalid(
                f"Career record {fields['name']!r} has neither dates nor a period"
            )

    return PriorCareerRecord(
        original_period=period,
        recognition_rate=_number(fields["rate"], DEFAULT_RATE, "recognition rate"),
        weekly_working_hours=_number(fields["hours"], STANDARD_WEEKLY_HOURS, "weekly hours"),
        name=str(fields["name"] or ""),
        start_date=start,
        end_date=end,
    )


def _migrate_rates(raw_rates: Any, owner: str) -> Dict[str, PriorCareerRate]:
    if raw_rates is None:
        return {}
    if not isinstance(raw_rates, Mapping):
        raise EmployeeDataInvalid(f"priorCareerRates on {owner!r} must be a mapping")
    rates = {}
    for target_id, info in raw_rates.items():
        if isinstance(info, Mapping):
            rate_value, note = info.get("rate"), str(info.get("note") or "")
        else:
            rate_value, note = info, ""
        if rate_value is None:
            continue
        rates[str(target_id)] = PriorCareerRate(
            rate=_number(rate_value, DEFAULT_RATE, "prior-career rate"), note=note
        )
    return rates


def migrate_assignments(raw_list: Optional[List[Mapping[str, Any]]]) -> List[Assignment]:
    """
    Assignments in stored order. Missing ids become ``assignment-<n>``. A
    legacy ``priorCareerRate`` applies to the assignment immediately before
    this one (by start date) unless the mapping already rates it.
    """
    assignments: List[Assignment] = []
    legacy: Dict[str, Tuple[float, str]] = {}
    for n, raw in enumerate(raw_list or []):
        fields = LegacyFieldMapper.extract(raw, LegacyFieldMapper.ASSIGNMENT_FIELDS)
        assignment_id = str(fields["id"]) if fields["id"] is not None else f"assignment-{n + 1}"
        assignment = Assignment(
            id=assignment_id,
            start_date=_optional_date(fields["start_date"], f"start date of {assignment_id}"),
            end_date=_optional_date(fields["end_date"], f"end date of {assignment_id}"),
            department=str(fields["department"] or ""),
            position=str(fields["position"] or ""),
            weekly_working_hours=_number(fields["hours"], STANDARD_WEEKLY_HOURS, "weekly hours"),
            payment_method=str(fields["payment_method"] or ""),
            prior_career_rates=_migrate_rates(fields["prior_career_rates"], assignment_id),
        )
        if fields["legacy_rate"] is not None:
            legacy[assignment_id] = (
                _number(fields["legacy_rate"], DEFAULT_RATE, "prior-career rate"),
                str(fields["legacy_rate_note"] or ""),
            )
        assignments.append(assignment)

    if legacy:
        ordered = sorted(
            (a for a in assignments if a.start_date is not None), key=lambda a: a.start_date
        )
        for previous, assignment in zip(ordered, ordered[1:]):
            if assignment.id in legacy and previous.id not in assignment.prior_career_rates:
                rate, note = legacy[assignment.id]
                assignment.prior_career_rates[previous.id] = PriorCareerRate(rate=rate, note=note)
                logger.debug(
                    f"Migrated legacy priorCareerRate {rate} on {assignment.id!r} to {previous.id!r}"
                )
    return assignments


def normalize_employee(raw: Any) -> Employee:
    """
    Build an :class:`Employee` from a raw record of any supported shape.

    Already-normalised ``Employee`` instances are returned unchanged.

    Raises:
        EmployeeDataInvalid: when a field cannot be interpreted.
    """
    if isinstance(raw, Employee):
        return raw
    if not isinstance(raw, Mapping):
        raise EmployeeDataInvalid(f"Employee record must be a mapping, got {type(raw).__name__}")

    fields = LegacyFieldMapper.extract(raw, LegacyFieldMapper.EMPLOYEE_FIELDS)
    if fields["id"] is None:
        raise EmployeeDataInvalid("Employee record has no identifier")
    employee_id = str(fields["id"])

    careers_raw = fields["career_details"] or []
    if not isinstance(careers_raw, list):
        raise EmployeeDataInvalid(f"careerDetails of {employee_id!r} must be a list")

    return Employee(
        id=employee_id,
        name=str(fields["name"] or ""),
        entry_date=_optional_date(fields["entry_date"], "entry date"),
        retirement_date=_optional_date(fields["retirement_date"], "retirement date"),
        rank=migrate_rank(fields["rank"]),
        career_details=[migrate_career(c) for c in careers_raw],
        assignments=migrate_assignments(fields["assignments"]),
    )


def _date_or_none(value: Optional[dt.date]) -> Optional[str]:
    return format_date(value) if value is not None else None


def employee_to_dict(employee: Employee) -> Dict[str, Any]:
    """Canonical camelCase form, as sent over the wire; round-trips through
    :func:`normalize_employee`."""
    rank = employee.rank
    return {
        "id": employee.id,
        "name": employee.name,
        "entryDate": _date_or_none(employee.entry_date),
        "retirementDate": _date_or_none(employee.retirement_date),
        "rank": {
            "startRank": rank.start_rank,
            "firstUpgradeDate": _date_or_none(rank.first_upgrade_date) or NOT_APPLICABLE,
            "isRankBased": rank.is_rank_based,
            "currentRank": rank.current_rank,
            "nextUpgradeDate": _date_or_none(rank.next_upgrade_date),
            "salaryType": rank.salary_type.value,
        },
        "careerDetails": [
            {
                "name": c.name,
                "startDate": _date_or_none(c.start_date),
                "endDate": _date_or_none(c.end_date),
                "originalPeriod": c.original_period.as_dict(),
                "recognitionRate": c.recognition_rate,
                "weeklyWorkingHours": c.weekly_working_hours,
            }
            for c in employee.career_details
        ],
        "assignments": [
            {
                "id": a.id,
                "startDate": _date_or_none(a.start_date),
                "endDate": _date_or_none(a.end_date),
                "department": a.department,
                "position": a.position,
                "weeklyWorkingHours": a.weekly_working_hours,
                "paymentMethod": a.payment_method,
                "priorCareerRates": {
                    target: {"rate": r.rate, "note": r.note}
                    for target, r in a.prior_career_rates.items()
                },
            }
            for a in employee.assignments
        ],
    }


__all__ = [
    "LegacyFieldMapper",
    "normalize_employee",
    "employee_to_dict",
    "migrate_rank",
    "migrate_career",
    "migrate_assignments",
]
