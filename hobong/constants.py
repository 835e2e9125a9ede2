# hobong/constants.py
"""Fixed conventions shared by the calculators."""

# Day-count convention used for every period <-> days conversion.
# Not calendar accurate; changing it would shift every stored seniority figure.
DAYS_PER_YEAR = 365
DAYS_PER_MONTH = 30
MONTHS_PER_YEAR = 12

DATE_FORMAT = "%Y-%m-%d"
MIN_YEAR = 1900
MAX_YEAR = 2100

STANDARD_WEEKLY_HOURS = 40
MIN_WEEKLY_HOURS = 1
MIN_RATE = 0
MAX_RATE = 100
DEFAULT_RATE = 100

MIN_RANK = 1
MAX_RANK = 99
UPGRADE_INTERVAL_YEARS = 1

# Marker for "not applicable" values in outward results (flat-salary employees).
NOT_APPLICABLE = "-"

# Stored text values that mean "no date" (e.g. no first-upgrade date)
NONE_DATE_MARKERS = frozenset({"", NOT_APPLICABLE, "null", "none", "None"})
