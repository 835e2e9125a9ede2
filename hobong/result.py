# hobong/result.py
"""
Explicit success/failure values for the aggregator and batch layers.

Calculators raise typed errors; the layers that must never abort a report
for one bad record wrap calls with :func:`attempt` and resolve failures
with :func:`use_previous`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

from hobong.errors import CalculationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CalcError:
    """Discriminated error: a ``kind`` from the error taxonomy and a message."""

    kind: str
    message: str

    @classmethod
    def from_exception(cls, exc: BaseException) -> "CalcError":
        kind = getattr(exc, "kind", type(exc).__name__)
        return cls(kind=kind, message=str(exc))

    def to_dict(self) -> Dict[str, str]:
        return {"kind": self.kind, "message": self.message}


@dataclass(frozen=True)
class CalcResult(Generic[T]):
    """Either a value or a :class:`CalcError`, never both."""

    value: Optional[T] = None
    error: Optional[CalcError] = None

    def __post_init__(self):
        if self.error is not None and self.value is not None:
            raise ValueError("CalcResult cannot hold both a value and an error")

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "CalcResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: str, message: str) -> "CalcResult[T]":
        return cls(error=CalcError(kind=kind, message=message))

    def unwrap(self) -> T:
        if self.error is not None:
            raise CalculationError(f"{self.error.kind}: {self.error.message}")
        return self.value

    def to_dict(self, value_to_dict: Optional[Callable[[T], Any]] = None) -> Dict[str, Any]:
        if self.error is not None:
            return {"ok": False, "error": self.error.to_dict()}
        value = value_to_dict(self.value) if value_to_dict else self.value
        return {"ok": True, "value": value}

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], value_from_dict: Optional[Callable[[Any], T]] = None
    ) -> "CalcResult[T]":
        if data.get("ok"):
            value = data.get("value")
            return cls.success(value_from_dict(value) if value_from_dict else value)
        err = data.get("error") or {}
        return cls.failure(err.get("kind", "CalculationError"), err.get("message", ""))


def attempt(fn: Callable[..., T], *args, **kwargs) -> CalcResult[T]:
    """Call ``fn`` and capture calculation-layer errors as a failed result.

    Only :class:`CalculationError` is captured; programming errors propagate.
    """
    try:
        return CalcResult.success(fn(*args, **kwargs))
    except CalculationError as e:
        return CalcResult(error=CalcError.from_exception(e))


def use_previous(result: CalcResult[T], fallback: Callable[[], T]) -> T:
    """Return the result's value, or the previously known value from ``fallback``."""
    if result.ok:
        return result.value
    logger.warning(
        f"Falling back to previous values after {result.error.kind}: {result.error.message}"
    )
    return fallback()


__all__ = ["CalcError", "CalcResult", "attempt", "use_previous"]
