# hobong/calculators/career.py
"""
Conversion of external prior-career periods into recognised seniority.

The conversion runs in two explicit stages, recognition rate first and
weekly-hours ratio second, each truncating fractional days. Applying the
combined ratio in one step rounds differently for non-100% rates, so the
order is part of the contract.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Optional

from hobong.calculators.tenure import Period, ZERO_PERIOD, calculate, from_days, to_days
from hobong.constants import (
    DAYS_PER_MONTH,
    MAX_RATE,
    MIN_RATE,
    MIN_WEEKLY_HOURS,
    MONTHS_PER_YEAR,
    STANDARD_WEEKLY_HOURS,
)
from hobong.errors import CareerDataInvalid
from hobong.utils.date_utils import DateLike
from hobong.utils.decimal_helpers import floor_percent, floor_ratio

if TYPE_CHECKING:
    from hobong.schema.employee import PriorCareerRecord

logger = logging.getLogger(__name__)

__all__ = [
    "apply_conversion_rate",
    "validate_conversion_inputs",
    "career_period_from_dates",
    "calculate_total_career",
    "sum_periods",
    "working_hours_rate",
    "format_working_hours_percent",
]


def validate_conversion_inputs(recognition_rate: float, weekly_hours: float) -> None:
    """Raise CareerDataInvalid for a rate outside [0, 100] or hours outside [1, 40]."""
    try:
        rate = float(recognition_rate)
        hours = float(weekly_hours)
    except (TypeError, ValueError) as e:
        raise CareerDataInvalid(
            f"Rate and hours must be numeric, got rate={recognition_rate!r} hours={weekly_hours!r}"
        ) from e

    if not MIN_RATE <= rate <= MAX_RATE:
        raise CareerDataInvalid(f"Recognition rate {rate} outside [{MIN_RATE}, {MAX_RATE}]")
    if not MIN_WEEKLY_HOURS <= hours <= STANDARD_WEEKLY_HOURS:
        raise CareerDataInvalid(
            f"Weekly working hours {hours} outside [{MIN_WEEKLY_HOURS}, {STANDARD_WEEKLY_HOURS}]"
        )


def apply_conversion_rate(
    period: Period,
    recognition_rate_percent: float,
    weekly_hours: float = STANDARD_WEEKLY_HOURS,
) -> Period:
    """
    Convert a raw prior-career period into its recognised equivalent.

    1. raw days = years*365 + months*30 + days
    2. recognised = floor(raw * rate / 100)
    3. converted = floor(recognised * hours / 40)
    4. split back into (years, months, days) with the same convention

    Args:
        period: elapsed duration at the external organization.
        recognition_rate_percent: 0-100.
        weekly_hours: contractual weekly hours, 1-40 (40 = full time).

    Returns:
        The converted :class:`Period`. Rate 100 and 40 hours return a
        normalised period equal to the input.

    Raises:
        CareerDataInvalid: if rate or hours are out of range.
    """
    validate_conversion_inputs(recognition_rate_percent, weekly_hours)

    raw_days = to_days(period)
    recognized_days = floor_percent(raw_days, recognition_rate_percent)
    converted_days = floor_ratio(recognized_days, weekly_hours, STANDARD_WEEKLY_HOURS)
    return from_days(converted_days)


def career_period_from_dates(start_date: DateLike, end_date: DateLike) -> Period:
    """Period of an external career entered as first and last working day."""
    return calculate(start_date, end_date, inclusive=True)


def sum_periods(periods: Iterable[Period]) -> Period:
    """
    Add periods component-wise, then carry days into months (30) and months
    into years (12).
    """
    years = months = days = 0
    for p in periods:
        years += p.years
        months += p.months
        days += p.days

    months += days // DAYS_PER_MONTH
    days = days % DAYS_PER_MONTH
    years += months // MONTHS_PER_YEAR
    months = months % MONTHS_PER_YEAR
    return Period(years, months, days)


def calculate_total_career(records: Optional[Iterable["PriorCareerRecord"]]) -> Period:
    """Total recognised prior career: converted day counts summed, then split."""
    if not records:
        return ZERO_PERIOD

    total_days = 0
    for record in records:
        converted = record.converted_period
        total_days += to_days(converted)
        logger.debug(
            f"Career '{record.name}': {record.original_period} at {record.recognition_rate}% "
            f"/ {record.weekly_working_hours}h -> {converted}"
        )
    return from_days(total_days)


def working_hours_rate(weekly_hours: Optional[float]) -> float:
    """Ratio of ``weekly_hours`` to full time, clamped to [1, 40] hours; missing means full time."""
    hours = weekly_hours or STANDARD_WEEKLY_HOURS
    hours = min(STANDARD_WEEKLY_HOURS, max(MIN_WEEKLY_HOURS, hours))
    return hours / STANDARD_WEEKLY_HOURS


def format_working_hours_percent(weekly_hours: Optional[float]) -> str:
    return f"{working_hours_rate(weekly_hours) * 100:.0f}%"
