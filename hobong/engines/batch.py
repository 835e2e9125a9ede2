# hobong/engines/batch.py
"""
Batch evaluation of step figures and the request handler of the rank service.

One bad record never aborts a batch: every employee gets its own
``{"ok": ...}`` entry in the result mapping.
"""
import datetime as dt
import logging
from typing import Any, Dict, Iterable, Mapping, Optional

from hobong.config.models import RankRules
from hobong.engines.dynamic_rank import RankOutcome, get_dynamic_rank_info
from hobong.errors import DateInvalid
from hobong.result import CalcError, CalcResult, attempt
from hobong.schema.employee import Employee
from hobong.schema.migration import LegacyFieldMapper, employee_to_dict, normalize_employee
from hobong.utils.date_utils import format_date, resolve_target_date

logger = logging.getLogger(__name__)

BatchResults = Dict[str, CalcResult]


def record_id(record: Any, index: int) -> str:
    """Identifier of a raw or normalised record, ``#<index>`` if it has none."""
    if isinstance(record, Employee):
        return record.id
    if isinstance(record, Mapping):
        value = LegacyFieldMapper.lookup(record, LegacyFieldMapper.EMPLOYEE_FIELDS["id"])
        if value is not None:
            return str(value)
    return f"#{index}"


def normalize_batch(records: Iterable[Any]) -> Dict[str, CalcResult]:
    """Normalise every record, keyed by employee id; failures are kept as results."""
    normalized: Dict[str, CalcResult] = {}
    for index, record in enumerate(records):
        key = record_id(record, index)
        if key in normalized:
            logger.warning(f"Duplicate employee id {key!r} in batch; keeping the last record")
        normalized[key] = attempt(normalize_employee, record)
    return normalized


def compute_batch_locally(
    employees: Iterable[Employee], target: dt.date, rules: Optional[RankRules] = None
) -> BatchResults:
    """Evaluate normalised employees in-process."""
    results: BatchResults = {}
    for employee in employees:
        results[employee.id] = attempt(get_dynamic_rank_info, employee, target, rules=rules)
    return results


def results_to_dict(results: BatchResults) -> Dict[str, Dict[str, Any]]:
    return {key: r.to_dict(RankOutcome.to_dict) for key, r in results.items()}


def results_from_dict(data: Mapping[str, Any]) -> BatchResults:
    return {key: CalcResult.from_dict(item, RankOutcome.from_dict) for key, item in data.items()}


def build_batch_request(employees: Iterable[Any], target: dt.date) -> Dict[str, Any]:
    """Request body understood by :func:`serve_rank_batch`."""
    return {
        "targetDate": format_date(target),
        "employees": [
            employee_to_dict(e) if isinstance(e, Employee) else dict(e) for e in employees
        ],
    }


def _error_response(kind: str, message: str) -> Dict[str, Any]:
    return {"success": False, "error": CalcError(kind, message).to_dict()}


def serve_rank_batch(payload: Any, *, rules: Optional[RankRules] = None) -> Dict[str, Any]:
    """
    Handle one ``calculate-rank-batch`` request.

    Request: ``{"targetDate": "YYYY-MM-DD" | null, "employees": [...]}``.
    Response: ``{"success": true, "data": {id: {"ok": ...}}}``, or
    ``{"success": false, "error": {...}}`` when the request itself is
    malformed. Never raises for bad input.
    """
    if not isinstance(payload, Mapping):
        return _error_response("RequestInvalid", "Request body must be a JSON object")

    employees = payload.get("employees")
    if not isinstance(employees, list):
        return _error_response("RequestInvalid", "'employees' must be a list")

    try:
        target = resolve_target_date(payload.get("targetDate"))
    except DateInvalid as e:
        return _error_response(e.kind, str(e))

    results: BatchResults = {}
    valid = []
    for key, normalized in normalize_batch(employees).items():
        if normalized.ok:
            valid.append(normalized.value)
        else:
            results[key] = normalized
    results.update(compute_batch_locally(valid, target, rules))

    failed = sum(1 for r in results.values() if not r.ok)
    logger.info(
        f"Served rank batch for {target}: {len(results)} employee(s), {failed} failure(s)"
    )
    return {"success": True, "data": results_to_dict(results)}


__all__ = [
    "BatchResults",
    "record_id",
    "normalize_batch",
    "compute_batch_locally",
    "results_to_dict",
    "results_from_dict",
    "build_batch_request",
    "serve_rank_batch",
]
