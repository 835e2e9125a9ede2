# hobong/calculators/internal_career.py
"""
Service within the current organization under per-assignment recognition rates.

When an employee moves to a new assignment, the organization may recognise
only part of the service accrued in earlier assignments. The rate is
recorded on the *later* assignment (``prior_career_rates``: earlier
assignment id -> rate) and takes effect once that later assignment has
started. An assignment's own elapsed time is never discounted by its own
rates.

The service timeline runs from the entry date to the target date and is cut
at each assignment's start date. Every boundary is measured as an offset
from the entry date with :func:`hobong.calculators.tenure.calculate_days`,
and a segment's raw days are the difference of its two offsets. The raw
days therefore telescope: at 100% everywhere, the total equals the entry-to-
target tenure in days exactly.
"""
from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from hobong.calculators.tenure import Period, calculate_days, from_days
from hobong.constants import DEFAULT_RATE, MAX_RATE, MIN_RATE
from hobong.errors import AssignmentDataInvalid, CareerDataInvalid
from hobong.schema.employee import Assignment, Employee, PriorCareerRate
from hobong.utils.date_utils import DateLike, add_days, resolve_target_date
from hobong.utils.decimal_helpers import floor_percent

logger = logging.getLogger(__name__)

__all__ = [
    "SegmentDetail",
    "InternalCareerResult",
    "validate_assignments",
    "build_rate_map",
    "calculate_with_prior_career_rate",
    "has_prior_career_rate_settings",
    "get_prior_career_rate_summary",
    "get_prior_rates_for_assignment",
]


@dataclass(frozen=True)
class SegmentDetail:
    """Recognised days for the slice of service spent in one assignment."""

    assignment_id: Optional[str]
    rate: float
    raw_days: int
    recognized_days: int
    start_date: dt.date
    end_date: dt.date
    department: str = ""
    position: str = ""
    note: str = ""

    def as_dict(self) -> Dict[str, object]:
        return {
            "assignmentId": self.assignment_id,
            "rate": self.rate,
            "rawDays": self.raw_days,
            "recognizedDays": self.recognized_days,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "department": self.department,
            "position": self.position,
            "note": self.note,
        }


@dataclass(frozen=True)
class InternalCareerResult:
    total_days: int
    details: List[SegmentDetail] = field(default_factory=list)

    @property
    def period(self) -> Period:
        return from_days(self.total_days)

    @property
    def all_full_rate(self) -> bool:
        return all(d.rate == DEFAULT_RATE for d in self.details)

    @property
    def raw_days(self) -> int:
        return sum(d.raw_days for d in self.details)


@dataclass(frozen=True)
class _RateEntry:
    rate: float
    note: str
    set_by: str


def validate_assignments(assignments: List[Assignment], entry_date: Optional[dt.date] = None) -> None:
    """
    Re-check assignment integrity before computing with it.

    An explicit end date closes an assignment at that date (exclusive); a
    missing end date on an earlier assignment is closed implicitly by the
    next start.

    Raises:
        AssignmentDataInvalid: missing start date, end before start, start
            before the entry date, duplicate ids, or overlapping intervals.
    """
    seen_ids = set()
    for a in assignments:
        if a.start_date is None:
            raise AssignmentDataInvalid(f"Assignment {a.id!r} has no start date")
        if a.end_date is not None and a.end_date < a.start_date:
            raise AssignmentDataInvalid(
                f"Assignment {a.id!r} ends ({a.end_date}) before it starts ({a.start_date})"
            )
        if entry_date is not None and a.start_date < entry_date:
            raise AssignmentDataInvalid(
                f"Assignment {a.id!r} starts ({a.start_date}) before entry date ({entry_date})"
            )
        if a.id in seen_ids:
            raise AssignmentDataInvalid(f"Duplicate assignment id {a.id!r}")
        seen_ids.add(a.id)

    ordered = sorted(assignments, key=lambda a: a.start_date)
    for prev, nxt in zip(ordered, ordered[1:]):
        if nxt.start_date == prev.start_date:
            raise AssignmentDataInvalid(
                f"Assignments {prev.id!r} and {nxt.id!r} start on the same day ({nxt.start_date})"
            )
        if prev.end_date is not None and prev.end_date > nxt.start_date:
            raise AssignmentDataInvalid(
                f"Assignment {prev.id!r} ({prev.start_date}..{prev.end_date}) overlaps "
                f"{nxt.id!r} starting {nxt.start_date}"
            )


def _check_rate(rate: float, owner: str) -> float:
    try:
        value = float(rate)
    except (TypeError, ValueError) as e:
        raise CareerDataInvalid(f"Non-numeric prior-career rate {rate!r} on {owner!r}") from e
    if not MIN_RATE <= value <= MAX_RATE:
        raise CareerDataInvalid(f"Prior-career rate {value} on {owner!r} outside [0, 100]")
    return value


def build_rate_map(ordered: List[Assignment], target: Optional[dt.date] = None) -> Dict[str, _RateEntry]:
    """
    Effective rate per earlier assignment id as of ``target``.

    Only assignments started on or before ``target`` contribute. When several
    later assignments rate the same earlier one, the most recent wins.
    References to unknown or not-earlier assignments are ignored.
    """
    position = {a.id: i for i, a in enumerate(ordered)}
    rate_map: Dict[str, _RateEntry] = {}
    for i, assignment in enumerate(ordered):
        if target is not None and assignment.start_date > target:
            continue
        for target_id, rate_info in assignment.prior_career_rates.items():
            if position.get(target_id, i) >= i:
                logger.warning(
                    f"Assignment {assignment.id!r} rates {target_id!r}, which is not an earlier "
                    f"assignment; ignored"
                )
                continue
            rate_map[target_id] = _RateEntry(
                rate=_check_rate(rate_info.rate, assignment.id),
                note=rate_info.note,
                set_by=assignment.id,
            )
    return rate_map


def calculate_with_prior_career_rate(
    employee: Employee, target_date: Optional[DateLike] = None
) -> InternalCareerResult:
    """
    Recognised internal service days as of ``target_date`` (default: today).

    Segments: the first runs from the entry date (or the first assignment's
    start if the entry date is unknown) to the second assignment's start;
    each later one from its own start to the next start; the last to the
    target date. Segments starting after the target are dropped. Each
    segment's recognised days are ``floor(raw_days * rate / 100)`` with the
    rate set for it by a later, already started assignment (100% if none).

    An employee with no assignment started by the target date has a single
    segment at 100%.

    Raises:
        AssignmentDataInvalid: see :func:`validate_assignments`.
        CareerDataInvalid: for a rate outside [0, 100].
    """
    target = resolve_target_date(target_date)
    validate_assignments(employee.assignments, employee.entry_date)
    ordered = sorted(employee.assignments, key=lambda a: a.start_date)

    origin = employee.entry_date or (ordered[0].start_date if ordered else None)
    if origin is None:
        raise AssignmentDataInvalid(
            f"Employee {employee.id!r} has neither an entry date nor assignments"
        )
    if target < origin:
        return InternalCareerResult(total_days=0, details=[])

    active = [a for a in ordered if a.start_date <= target]
    if not active:
        raw = calculate_days(origin, target)
        detail = SegmentDetail(None, DEFAULT_RATE, raw, raw, origin, target, note="100% 적용")
        return InternalCareerResult(total_days=raw, details=[detail])

    rate_map = build_rate_map(ordered, target)

    details: List[SegmentDetail] = []
    total = 0
    offset_start = 0
    for i, assignment in enumerate(active):
        seg_start = origin if i == 0 else assignment.start_date
        seg_end = active[i + 1].start_date if i + 1 < len(active) else target
        offset_end = calculate_days(origin, seg_end)
        raw = offset_end - offset_start
        offset_start = offset_end

        entry = rate_map.get(assignment.id)
        rate = entry.rate if entry else DEFAULT_RATE
        recognized = floor_percent(raw, rate)
        total += recognized

        note = entry.note if entry and entry.note else f"{rate:g}% 적용"
        details.append(
            SegmentDetail(
                assignment_id=assignment.id,
                rate=rate,
                raw_days=raw,
                recognized_days=recognized,
                start_date=seg_start,
                end_date=seg_end,
                department=assignment.department,
                position=assignment.position,
                note=note,
            )
        )

    logger.debug(
        f"Internal career for {employee.id!r} as of {target}: {total} recognised days "
        f"over {len(details)} segment(s)"
    )
    return InternalCareerResult(total_days=total, details=details)


def has_prior_career_rate_settings(employee: Employee) -> bool:
    """True when any assignment recognises earlier service below 100%."""
    return any(
        rate_info.rate < DEFAULT_RATE
        for assignment in employee.assignments
        for rate_info in assignment.prior_career_rates.values()
    )


def get_prior_career_rate_summary(employee: Employee) -> List[Dict[str, object]]:
    """One entry per assignment that sets rates, listing the assignments it rates."""
    summaries = []
    for assignment in employee.sorted_assignments():
        targets = []
        for target_id, rate_info in assignment.prior_career_rates.items():
            rated = employee.find_assignment(target_id)
            targets.append(
                {
                    "targetId": target_id,
                    "targetDepartment": rated.department if rated else "-",
                    "rate": rate_info.rate,
                    "note": rate_info.note,
                }
            )
        if targets:
            summaries.append(
                {
                    "date": assignment.start_date.isoformat(),
                    "department": assignment.department,
                    "targetAssignments": targets,
                }
            )
    return summaries


def get_prior_rates_for_assignment(
    assignment: Assignment, all_assignments: List[Assignment]
) -> List[Dict[str, object]]:
    """
    Earlier assignments as seen from ``assignment``, with the rate it sets for
    each (``None`` when unset). Used by the assignment-edit workflow.
    """
    ordered = sorted(
        (a for a in all_assignments if a.start_date is not None), key=lambda a: a.start_date
    )
    index = next((i for i, a in enumerate(ordered) if a.id == assignment.id), -1)
    if index <= 0:
        return []

    prior = []
    for i in range(index):
        earlier = ordered[i]
        rate_info: Optional[PriorCareerRate] = assignment.prior_career_rates.get(earlier.id)
        prior.append(
            {
                "assignmentId": earlier.id,
                "department": earlier.department,
                "position": earlier.position,
                "startDate": earlier.start_date.isoformat(),
                "endDate": add_days(ordered[i + 1].start_date, -1),
                "rate": rate_info.rate if rate_info else None,
                "note": rate_info.note if rate_info else "",
                "hasRate": rate_info is not None,
            }
        )
    return prior
