from .date_utils import add_days, add_months, format_date, parse_date, resolve_target_date, today
from .decimal_helpers import floor_percent, floor_ratio

__all__ = [
    "add_days",
    "add_months",
    "format_date",
    "parse_date",
    "resolve_target_date",
    "today",
    "floor_percent",
    "floor_ratio",
]
