# hobong/calculators/tenure.py
"""Elapsed-time calculation normalised to (years, months, days).

Two conventions live here side by side:

* :func:`calculate` measures calendar time with ``relativedelta`` borrowing,
  so ``months`` is 0-11 and ``days`` is 0-30.
* :func:`to_days` / :func:`from_days` convert a period to and from a day
  count using the fixed 365-day year / 30-day month convention that every
  seniority figure in the system is stored in.
"""
from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from dateutil.relativedelta import relativedelta

from hobong.constants import DAYS_PER_MONTH, DAYS_PER_YEAR
from hobong.errors import DateInvalid
from hobong.utils.date_utils import DateLike, parse_date

__all__ = [
    "Period",
    "ZERO_PERIOD",
    "calculate",
    "calculate_days",
    "to_days",
    "from_days",
    "format_period",
    "parse_period_text",
    "sum_days",
]

UNIT_LABELS: Dict[str, tuple] = {
    "ko": ("{}년", "{}개월", "{}일"),
    "en": ("{} years", "{} months", "{} days"),
}

_PERIOD_TEXT = re.compile(r"(-?\d+)\s*년\s*(-?\d+)\s*개월\s*(-?\d+)\s*일")


@dataclass(frozen=True)
class Period:
    """A (years, months, days) triple."""

    years: int = 0
    months: int = 0
    days: int = 0

    def to_days(self) -> int:
        return to_days(self)

    def normalized(self) -> "Period":
        return from_days(self.to_days())

    def as_dict(self) -> Dict[str, int]:
        return {"years": self.years, "months": self.months, "days": self.days}

    @classmethod
    def from_dict(cls, data: Dict[str, int]) -> "Period":
        return cls(
            years=int(data.get("years", 0) or 0),
            months=int(data.get("months", 0) or 0),
            days=int(data.get("days", 0) or 0),
        )

    def __str__(self) -> str:
        return format_period(self)


ZERO_PERIOD = Period(0, 0, 0)


def calculate(start_date: DateLike, end_date: DateLike, *, inclusive: bool = False) -> Period:
    """
    Elapsed time from ``start_date`` to ``end_date``.

    Components are borrowed calendar-wise by ``relativedelta``: a short day
    count borrows a month, a short month count borrows a year, and month-end
    start days are clamped to the shorter month. ``start == end`` gives a
    zero period. When ``end`` is
    before ``start`` the components are non-positive; nothing is raised and
    callers must guard.

    With ``inclusive=True`` the end date itself counts as a served day, which
    is how career periods entered as first/last working day are measured
    (2020-01-01 .. 2020-12-31 is exactly one year).
    """
    start = parse_date(start_date)
    end = parse_date(end_date)
    if inclusive:
        end = end + dt.timedelta(days=1)
    delta = relativedelta(end, start)
    return Period(years=delta.years, months=delta.months, days=delta.days)


def to_days(period: Period) -> int:
    """Day count of a period under the 365/30 convention."""
    return period.years * DAYS_PER_YEAR + period.months * DAYS_PER_MONTH + period.days


def from_days(total_days: int) -> Period:
    """Split a day count back into a period under the 365/30 convention.

    Negative totals produce a period whose components are all non-positive.
    """
    total_days = int(total_days)
    sign = -1 if total_days < 0 else 1
    remaining = abs(total_days)
    years, remaining = divmod(remaining, DAYS_PER_YEAR)
    # 365 = 12 * 30 + 5: leftovers of 360-364 days read as 12 months, as stored data does
    months, days = divmod(remaining, DAYS_PER_MONTH)
    return Period(years=sign * years, months=sign * months, days=sign * days)


def calculate_days(start_date: DateLike, end_date: DateLike, *, inclusive: bool = False) -> int:
    """:func:`calculate` converted to days with the 365/30 convention."""
    return to_days(calculate(start_date, end_date, inclusive=inclusive))


def format_period(period: Period, *, elide_zero: bool = False, locale: str = "ko") -> str:
    """
    Render a period as text, e.g. ``"3년 2개월 0일"``.

    With ``elide_zero=True`` zero components are omitted (``"3년 2개월"``);
    an all-zero period still renders its day component.
    """
    try:
        labels = UNIT_LABELS[locale]
    except KeyError:
        raise ValueError(f"Unsupported locale: {locale!r}") from None

    parts = [
        (period.years, labels[0]),
        (period.months, labels[1]),
        (period.days, labels[2]),
    ]
    if elide_zero:
        kept = [label.format(value) for value, label in parts if value != 0]
        return " ".join(kept) if kept else labels[2].format(0)
    return " ".join(label.format(value) for value, label in parts)


def parse_period_text(text: Optional[str]) -> Period:
    """Parse a stored ``"N년 M개월 D일"`` string back into a :class:`Period`."""
    if not text:
        raise DateInvalid("Empty period text")
    match = _PERIOD_TEXT.search(str(text))
    if not match:
        raise DateInvalid(f"Unrecognised period text: {text!r}")
    years, months, days = (int(g) for g in match.groups())
    return Period(years, months, days)


def sum_days(periods: Iterable[Period]) -> int:
    """Total day count of several periods."""
    return sum(to_days(p) for p in periods)
