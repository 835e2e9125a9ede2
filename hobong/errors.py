# hobong/errors.py
"""
Typed errors raised by the calculation layer.

Each error carries a ``kind`` string so it can be reported across the
network boundary as a discriminated result instead of being raised.
"""


class CalculationError(Exception):
    """Base class for all calculation-layer failures."""

    kind = "CalculationError"


class DateInvalid(CalculationError, ValueError):
    """A value did not parse as a supported calendar date."""

    kind = "DateInvalid"


class CareerDataInvalid(CalculationError, ValueError):
    """Recognition rate or weekly working hours out of range."""

    kind = "CareerDataInvalid"


class AssignmentDataInvalid(CalculationError, ValueError):
    """Assignments are missing start dates or overlap."""

    kind = "AssignmentDataInvalid"


class RankCalculationError(CalculationError):
    """Inconsistent start step / first-upgrade date / target date."""

    kind = "RankCalculationError"


class EmployeeDataInvalid(CalculationError, ValueError):
    """A raw employee record could not be normalised."""

    kind = "EmployeeDataInvalid"


class RemoteError(Exception):
    """Base class for failures talking to the remote calculation service."""

    pass


class RemoteUnavailable(RemoteError):
    """The remote service could not be reached after all retries."""

    pass


class RemoteAuthError(RemoteError):
    """The remote service rejected our credentials."""

    pass


__all__ = [
    "CalculationError",
    "DateInvalid",
    "CareerDataInvalid",
    "AssignmentDataInvalid",
    "RankCalculationError",
    "EmployeeDataInvalid",
    "RemoteError",
    "RemoteUnavailable",
    "RemoteAuthError",
]
