# hobong/utils/date_utils.py

"""Calendar arithmetic on ``YYYY-MM-DD`` dates."""

import datetime as dt
from typing import Optional, Union

import pandas as pd  # type: ignore[import-untyped]
from dateutil.relativedelta import relativedelta

from hobong.constants import DATE_FORMAT, MAX_YEAR, MIN_YEAR
from hobong.errors import DateInvalid

DateLike = Union[str, dt.date, dt.datetime, pd.Timestamp]


def parse_date(value: DateLike) -> dt.date:
    """
    Coerce ``value`` to a :class:`datetime.date`.

    Strings must be in ``YYYY-MM-DD`` form. Datetimes and Timestamps are
    truncated to their local calendar date; no timezone conversion happens.

    Raises:
        DateInvalid: if the value is empty, malformed, not a real calendar
            date, or outside the supported year range.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise DateInvalid("Date value is missing")

    if isinstance(value, pd.Timestamp):
        if pd.isna(value):
            raise DateInvalid("Date value is NaT")
        parsed = value.date()
    elif isinstance(value, dt.datetime):
        parsed = value.date()
    elif isinstance(value, dt.date):
        parsed = value
    elif isinstance(value, str):
        ts = pd.to_datetime(value.strip(), format=DATE_FORMAT, errors="coerce")
        if pd.isna(ts):
            raise DateInvalid(f"Not a valid YYYY-MM-DD date: {value!r}")
        parsed = ts.date()
    else:
        raise DateInvalid(f"Unsupported date value: {value!r}")

    if not MIN_YEAR <= parsed.year <= MAX_YEAR:
        raise DateInvalid(f"Date {parsed.isoformat()} outside {MIN_YEAR}-{MAX_YEAR}")
    return parsed


def format_date(value: DateLike) -> str:
    """Render a date in the fixed ``YYYY-MM-DD`` format."""
    return parse_date(value).strftime(DATE_FORMAT)


def add_days(value: DateLike, days: int) -> str:
    """Calendar-correct day addition; ``days`` may be negative."""
    return format_date(parse_date(value) + dt.timedelta(days=int(days)))


def add_months(value: DateLike, months: int) -> str:
    """Add whole months, clamping the day to the end of the resulting month."""
    return format_date(parse_date(value) + relativedelta(months=int(months)))


def today() -> str:
    """Current local date as ``YYYY-MM-DD``."""
    return dt.date.today().strftime(DATE_FORMAT)


def resolve_target_date(value: Optional[DateLike] = None) -> dt.date:
    """
    Resolve a reference date.

    A missing reference date means "as of today". Present but malformed
    values still raise DateInvalid.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return dt.date.today()
    return parse_date(value)
