# hobong/engines/remote.py
"""
HTTP client for a remote ``calculate-rank-batch`` endpoint.

The remote side runs :func:`hobong.engines.batch.serve_rank_batch`, so both
ends share one request and response format. Transient failures
(connection errors, timeouts, 429 and 5xx) are retried with exponential
backoff; once retries are exhausted :class:`RemoteUnavailable` is raised so
the caller can fall back to local evaluation. Rejected credentials raise
:class:`RemoteAuthError` straight away.
"""
import datetime as dt
import logging
from typing import Any, Dict, Iterable, Optional

import requests
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from hobong.config.models import RemoteSettings
from hobong.engines.batch import BatchResults, build_batch_request, results_from_dict
from hobong.errors import RemoteAuthError, RemoteError, RemoteUnavailable
from hobong.result import CalcResult
from hobong.schema.employee import Employee

logger = logging.getLogger(__name__)

_AUTH_STATUSES = {401, 403}
_RETRY_STATUSES = {429}


class _TransientFailure(Exception):
    """A failure worth retrying."""

    pass


class RemoteRankClient:
    def __init__(self, settings: RemoteSettings, session: Optional[requests.Session] = None):
        if not settings.base_url:
            raise RemoteError("Remote rank client needs a base_url")
        self.settings = settings
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.settings.api_key:
            headers["Authorization"] = f"Bearer {self.settings.api_key}"
        return headers

    def _send(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self.session.post(
                self.settings.url,
                json=payload,
                headers=self._headers(),
                timeout=self.settings.timeout_seconds,
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            raise _TransientFailure(f"{type(e).__name__}: {e}") from e

        status = response.status_code
        if status in _AUTH_STATUSES:
            raise RemoteAuthError(f"Remote rank service rejected credentials (HTTP {status})")
        if status in _RETRY_STATUSES or status >= 500:
            raise _TransientFailure(f"HTTP {status} from {self.settings.url}")
        if status >= 400:
            raise RemoteError(f"HTTP {status} from {self.settings.url}: {response.text[:200]}")

        try:
            return response.json()
        except ValueError as e:
            raise RemoteError(f"Malformed JSON from {self.settings.url}") from e

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        retrying = Retrying(
            stop=stop_after_attempt(self.settings.max_attempts),
            wait=wait_exponential(
                min=self.settings.backoff_min_seconds, max=self.settings.backoff_max_seconds
            ),
            retry=retry_if_exception_type(_TransientFailure),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        try:
            return retrying(self._send, payload)
        except _TransientFailure as e:
            raise RemoteUnavailable(
                f"Remote rank service unavailable after {self.settings.max_attempts} attempt(s): {e}"
            ) from e

    def compute_batch(self, employees: Iterable[Employee], target: dt.date) -> BatchResults:
        """
        Evaluate ``employees`` remotely.

        Employees missing from the response get a ``RemoteResultMissing``
        failure of their own.

        Raises:
            RemoteUnavailable: the service could not be reached.
            RemoteAuthError: credentials were rejected.
            RemoteError: the service answered with an unusable response.
        """
        employees = list(employees)
        body = self._post(build_batch_request(employees, target))
        if not isinstance(body, dict):
            raise RemoteError("Remote rank service returned a non-object body")
        if not body.get("success"):
            error = body.get("error") or {}
            raise RemoteError(
                f"Remote rank service refused the batch: "
                f"{error.get('kind', 'Unknown')}: {error.get('message', '')}"
            )

        data = body.get("data")
        if not isinstance(data, dict):
            raise RemoteError("Remote rank service response has no 'data' object")
        try:
            results = results_from_dict(data)
        except (KeyError, TypeError, AttributeError) as e:
            raise RemoteError(f"Remote rank service returned a malformed result: {e!r}") from e

        for employee in employees:
            if employee.id not in results:
                results[employee.id] = CalcResult.failure(
                    "RemoteResultMissing", "No result returned for this employee"
                )
        logger.info(f"Remote rank batch for {target}: {len(results)} result(s)")
        return results


__all__ = ["RemoteRankClient"]
