# hobong/calculators/rank.py
"""
Pay-step (호봉) progression.

A step position is fully described by ``(start_rank, first_upgrade_date)``:
one step is granted on the first-upgrade date itself and one more on every
later anniversary. Everything here is a pure function of its arguments;
nothing is cached.

QuickStart::

    >>> calculate_current_rank(5, "2024-03-01", "2024-03-01")
    6
    >>> calculate_next_upgrade_date("2024-03-01", "2024-03-01")
    datetime.date(2025, 3, 1)
"""
from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

from hobong.calculators.tenure import Period
from hobong.constants import (
    DAYS_PER_MONTH,
    MIN_RANK,
    MONTHS_PER_YEAR,
    NONE_DATE_MARKERS,
    UPGRADE_INTERVAL_YEARS,
)
from hobong.errors import DateInvalid, RankCalculationError
from hobong.utils.date_utils import DateLike, parse_date, resolve_target_date

logger = logging.getLogger(__name__)

__all__ = [
    "RankPosition",
    "DerivedRank",
    "parse_upgrade_date",
    "calculate_initial_rank",
    "calculate_first_upgrade_date",
    "calculate_current_rank",
    "calculate_next_upgrade_date",
    "calculate",
    "derive_rank_info",
    "validate_rank_inputs",
]

UpgradeDate = Union[DateLike, None]


@dataclass(frozen=True)
class RankPosition:
    """Step position as of a target date."""

    current_rank: int
    next_upgrade_date: Optional[dt.date]


@dataclass(frozen=True)
class DerivedRank:
    """Initial step figures derived from an entry date and prior service."""

    start_rank: int
    first_upgrade_date: dt.date
    prior_period: Period


def parse_upgrade_date(value: UpgradeDate) -> Optional[dt.date]:
    """Parse a first-upgrade date, mapping the stored "none" markers to ``None``."""
    if value is None:
        return None
    if isinstance(value, str) and value.strip() in NONE_DATE_MARKERS:
        return None
    try:
        return parse_date(value)
    except DateInvalid as e:
        raise RankCalculationError(f"Malformed first-upgrade date {value!r}: {e}") from e


def _parse_target(value: Optional[DateLike]) -> dt.date:
    try:
        return resolve_target_date(value)
    except DateInvalid as e:
        raise RankCalculationError(f"Malformed target date {value!r}: {e}") from e


def _check_start_rank(start_rank) -> int:
    if isinstance(start_rank, bool) or not isinstance(start_rank, int):
        raise RankCalculationError(f"Start step must be an integer, got {start_rank!r}")
    if start_rank < MIN_RANK:
        raise RankCalculationError(f"Start step must be >= {MIN_RANK}, got {start_rank}")
    return start_rank


def _check_interval(interval_years: int) -> int:
    if interval_years < 1:
        raise RankCalculationError(f"Upgrade interval must be >= 1 year, got {interval_years}")
    return interval_years


def calculate_initial_rank(prior_years: int) -> int:
    """Entry step: one plus the whole years of recognised prior career."""
    return max(MIN_RANK, int(prior_years or 0) + 1)


def calculate_first_upgrade_date(
    adjusted_entry_date: DateLike,
    prior_years: int = 0,
    prior_months: int = 0,
    prior_days: int = 0,
    *,
    years_in_start_rank: bool = True,
    snap_to_month_start: bool = False,
    interval_years: int = UPGRADE_INTERVAL_YEARS,
) -> dt.date:
    """
    Date on which the first step increase falls due.

    The wait of one upgrade interval after ``adjusted_entry_date`` is
    shortened by the recognised prior service. Months count as calendar
    months; leftover days shorten the last month on the 30-day convention
    (e.g. 3 months 10 days of prior service leaves 8 months and 20 days).

    By default whole prior years are assumed to be already reflected in the
    start step (see :func:`calculate_initial_rank`), so only the months and
    days shorten the wait. With ``years_in_start_rank=False`` the whole prior
    duration is subtracted, and prior service of a year or more puts the
    first-upgrade date on or before the entry date.

    With ``snap_to_month_start=True`` a result that is not the 1st of a month
    moves to the 1st of the following month.

    Raises:
        RankCalculationError: for malformed dates or negative durations.
    """
    try:
        entry = parse_date(adjusted_entry_date)
    except DateInvalid as e:
        raise RankCalculationError(f"Malformed entry date {adjusted_entry_date!r}: {e}") from e
    _check_interval(interval_years)

    years, months, days = (int(v or 0) for v in (prior_years, prior_months, prior_days))
    if years < 0 or months < 0 or days < 0:
        raise RankCalculationError(
            f"Prior service cannot be negative: {years}y {months}m {days}d"
        )
    months += days // DAYS_PER_MONTH
    days = days % DAYS_PER_MONTH
    years += months // MONTHS_PER_YEAR
    months = months % MONTHS_PER_YEAR

    months_needed = interval_years * MONTHS_PER_YEAR - months
    if not years_in_start_rank:
        months_needed -= years * MONTHS_PER_YEAR

    days_adjustment = 0
    if days > 0:
        months_needed -= 1
        days_adjustment = DAYS_PER_MONTH - days

    upgrade = entry + relativedelta(months=months_needed) + dt.timedelta(days=days_adjustment)

    if snap_to_month_start and upgrade.day != 1:
        upgrade = upgrade.replace(day=1) + relativedelta(months=1)

    logger.debug(
        f"First upgrade from {entry} with prior {years}y {months}m {days}d: {upgrade}"
    )
    return upgrade


def _elapsed_intervals(first_upgrade: dt.date, target: dt.date, interval_years: int) -> int:
    """Whole upgrade intervals from ``first_upgrade`` to ``target`` (target >= first)."""
    return relativedelta(target, first_upgrade).years // interval_years


def calculate_current_rank(
    start_rank: int,
    first_upgrade_date: UpgradeDate,
    target_date: Optional[DateLike] = None,
    *,
    interval_years: int = UPGRADE_INTERVAL_YEARS,
) -> int:
    """
    Current step as of ``target_date`` (default: today).

    ``start_rank + 1`` on the first-upgrade date, plus one per full interval
    after it. Before the first-upgrade date, or when there is none, the
    start step. Step bounds are not clamped here.
    """
    start_rank = _check_start_rank(start_rank)
    first_upgrade = parse_upgrade_date(first_upgrade_date)
    if first_upgrade is None:
        return start_rank

    target = _parse_target(target_date)
    if target < first_upgrade:
        return start_rank
    return start_rank + 1 + _elapsed_intervals(first_upgrade, target, _check_interval(interval_years))


def calculate_next_upgrade_date(
    first_upgrade_date: UpgradeDate,
    target_date: Optional[DateLike] = None,
    *,
    interval_years: int = UPGRADE_INTERVAL_YEARS,
) -> Optional[dt.date]:
    """
    First upgrade anniversary strictly after ``target_date`` (default: today).

    While the first-upgrade date is still ahead it is itself the next
    upgrade. Otherwise ``first_upgrade_date + k * interval`` for the
    smallest ``k >= 1`` landing after the target. Anniversaries are always
    taken from the first-upgrade date, so a 29 February start falls on
    28 February in common years without drifting.

    Returns ``None`` when there is no first-upgrade date.
    """
    first_upgrade = parse_upgrade_date(first_upgrade_date)
    if first_upgrade is None:
        return None

    target = _parse_target(target_date)
    if first_upgrade > target:
        return first_upgrade

    interval_years = _check_interval(interval_years)
    k = _elapsed_intervals(first_upgrade, target, interval_years) + 1
    return first_upgrade + relativedelta(years=k * interval_years)


def calculate(
    start_rank: int,
    first_upgrade_date: UpgradeDate,
    target_date: Optional[DateLike] = None,
    *,
    interval_years: int = UPGRADE_INTERVAL_YEARS,
) -> RankPosition:
    """Current step and next upgrade date in one call."""
    target = _parse_target(target_date)
    return RankPosition(
        current_rank=calculate_current_rank(
            start_rank, first_upgrade_date, target, interval_years=interval_years
        ),
        next_upgrade_date=calculate_next_upgrade_date(
            first_upgrade_date, target, interval_years=interval_years
        ),
    )


def derive_rank_info(
    entry_date: DateLike,
    prior_period: Period,
    *,
    snap_to_month_start: bool = False,
    interval_years: int = UPGRADE_INTERVAL_YEARS,
) -> DerivedRank:
    """Start step and first-upgrade date for an entry date and total prior career."""
    return DerivedRank(
        start_rank=calculate_initial_rank(prior_period.years),
        first_upgrade_date=calculate_first_upgrade_date(
            entry_date,
            prior_period.years,
            prior_period.months,
            prior_period.days,
            snap_to_month_start=snap_to_month_start,
            interval_years=interval_years,
        ),
        prior_period=prior_period,
    )


def validate_rank_inputs(
    start_rank: int,
    first_upgrade_date: UpgradeDate,
    entry_date: Optional[DateLike] = None,
    *,
    max_prior_years: int = 50,
    interval_years: int = UPGRADE_INTERVAL_YEARS,
) -> None:
    """
    Check that stored step figures are chronologically consistent.

    The first-upgrade date may precede the entry date by at most
    ``max_prior_years`` (plus one interval). Later first-upgrade dates are
    accepted as stored; imported and re-derived records can carry them.

    Raises:
        RankCalculationError: on any inconsistency.
    """
    _check_start_rank(start_rank)
    first_upgrade = parse_upgrade_date(first_upgrade_date)
    if first_upgrade is None or entry_date is None:
        return

    try:
        entry = parse_date(entry_date)
    except DateInvalid as e:
        raise RankCalculationError(f"Malformed entry date {entry_date!r}: {e}") from e

    earliest = entry - relativedelta(years=max_prior_years + interval_years)
    if first_upgrade < earliest:
        raise RankCalculationError(
            f"First-upgrade date {first_upgrade} is more than {max_prior_years} years "
            f"before entry date {entry}"
        )
