# hobong/engines/service.py
"""
Batch entry point used by reports and screens.

``RankService`` chooses where step figures are computed from
``EngineConfig.remote.mode``:

* ``local``: in-process, :func:`compute_locally`;
* ``remote``: one round trip per batch through :class:`RemoteRankClient`,
  falling back to local evaluation when the service stays unreachable.

Results are memoised per ``(employee_id, target_date)`` in an injected
:class:`RankCache`.
"""
import datetime as dt
import logging
from typing import Any, Dict, Iterable, List, Optional

from hobong.config.models import EngineConfig
from hobong.engines.batch import BatchResults, compute_batch_locally, normalize_batch
from hobong.engines.cache import RankCache
from hobong.engines.dynamic_rank import RankOutcome
from hobong.engines.remote import RemoteRankClient
from hobong.errors import RemoteAuthError, RemoteError
from hobong.result import CalcResult
from hobong.schema.employee import Employee
from hobong.utils.date_utils import DateLike, resolve_target_date
from logging_config import ERROR_LOGGER, RANK_LOGGER, REMOTE_LOGGER

logger = logging.getLogger(__name__)
rank_logger = logging.getLogger(RANK_LOGGER)
remote_logger = logging.getLogger(REMOTE_LOGGER)
error_logger = logging.getLogger(ERROR_LOGGER)


class RankService:
    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        *,
        client: Optional[RemoteRankClient] = None,
        cache: Optional[RankCache] = None,
    ):
        self.config = config or EngineConfig()
        self.cache = cache if cache is not None else (RankCache() if self.config.cache_enabled else None)
        self._client = client

    @property
    def mode(self) -> str:
        return self.config.remote.mode

    @property
    def client(self) -> RemoteRankClient:
        if self._client is None:
            self._client = RemoteRankClient(self.config.remote)
        return self._client

    def compute_locally(self, employees: List[Employee], target: dt.date) -> BatchResults:
        return compute_batch_locally(employees, target, self.config.rank)

    def compute_remotely(self, employees: List[Employee], target: dt.date) -> BatchResults:
        """
        Remote evaluation with local fallback.

        Raises:
            RemoteAuthError: credentials were rejected; not retried and not
                masked by the fallback.
        """
        try:
            return self.client.compute_batch(employees, target)
        except RemoteAuthError:
            error_logger.error(f"Remote rank service rejected credentials for {self.config.remote.url}")
            raise
        except RemoteError as e:
            remote_logger.warning(
                f"Remote rank service failed ({e}); computing {len(employees)} employee(s) locally"
            )
            return self.compute_locally(employees, target)

    def _strategy(self, employees: List[Employee], target: dt.date) -> BatchResults:
        if self.mode == "remote":
            return self.compute_remotely(employees, target)
        return self.compute_locally(employees, target)

    def compute(self, records: Iterable[Any], target_date: Optional[DateLike] = None) -> BatchResults:
        """
        Step figures for every record as of ``target_date`` (default: today).

        Returns a mapping from employee id to a :class:`CalcResult` holding
        a :class:`RankOutcome` or the error of that one record.

        Raises:
            DateInvalid: ``target_date`` is malformed.
            RemoteAuthError: see :meth:`compute_remotely`.
        """
        target = resolve_target_date(target_date)
        normalized = normalize_batch(records)

        results: Dict[str, CalcResult] = {}
        pending: List[Employee] = []
        for key, item in normalized.items():
            if not item.ok:
                results[key] = item
                continue
            cached = self.cache.get(key, target) if self.cache is not None else None
            if cached is not None:
                results[key] = cached
            else:
                pending.append(item.value)

        if pending:
            computed = self._strategy(pending, target)
            for employee in pending:
                result = computed.get(employee.id) or CalcResult.failure(
                    "RemoteResultMissing", "No result returned for this employee"
                )
                if self.cache is not None:
                    self.cache.put(employee.id, target, result)
                results[employee.id] = result

        # Preserve input order
        ordered = {key: results[key] for key in normalized}
        failures = 0
        for key, result in ordered.items():
            if not result.ok:
                failures += 1
                error_logger.error(
                    f"Employee {key!r}: {result.error.kind}: {result.error.message}"
                )
        rank_logger.info(
            f"Computed step figures for {len(ordered)} employee(s) as of {target} "
            f"({self.mode}, {len(ordered) - len(pending)} cached or invalid, {failures} failed)"
        )
        return ordered

    def compute_one(self, record: Any, target_date: Optional[DateLike] = None) -> RankOutcome:
        """
        Single-employee convenience wrapper around :meth:`compute`.

        Raises:
            CalculationError: the record could not be evaluated.
        """
        results = self.compute([record], target_date)
        return next(iter(results.values())).unwrap()


__all__ = ["RankService"]
