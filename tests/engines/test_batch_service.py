"""
Tests for batch evaluation, the rank service handler, the remote client and
RankService mode selection.
"""
import datetime as dt
from unittest.mock import Mock

import pytest
import requests

from hobong.config.models import EngineConfig, RemoteSettings
from hobong.engines.batch import (
    build_batch_request,
    record_id,
    results_from_dict,
    results_to_dict,
    serve_rank_batch,
)
from hobong.engines.cache import RankCache
from hobong.engines.dynamic_rank import RankOutcome
from hobong.engines.remote import RemoteRankClient
from hobong.engines.service import RankService
from hobong.errors import CalculationError, RemoteAuthError, RemoteError, RemoteUnavailable
from hobong.result import CalcResult

TARGET = dt.date(2023, 1, 10)


def _record(employee_id="E1", entry="2020-01-10", first="2021-01-10"):
    return {
        "id": employee_id,
        "name": f"Employee {employee_id}",
        "entryDate": entry,
        "rank": {"startRank": 1, "firstUpgradeDate": first, "isRankBased": True},
    }


def _response(status_code=200, body=None):
    response = Mock(status_code=status_code, text="")
    response.json.return_value = body
    return response


def _serving_session():
    """A requests session stand-in whose server side is serve_rank_batch."""
    session = Mock()
    session.post.side_effect = lambda url, json=None, headers=None, timeout=None: _response(
        200, serve_rank_batch(json)
    )
    return session


def _remote_config(**overrides):
    settings = dict(
        mode="remote",
        base_url="http://rank.test/api/",
        api_key="secret",
        max_attempts=2,
        backoff_min_seconds=0,
        backoff_max_seconds=0,
    )
    settings.update(overrides)
    return EngineConfig(remote=RemoteSettings(**settings))


# --- serve_rank_batch ------------------------------------------------------


@pytest.mark.parametrize(
    "payload", ["not an object", {"targetDate": "2023-01-10"}, {"employees": {"id": "E1"}}]
)
def test_malformed_requests_are_refused(payload):
    response = serve_rank_batch(payload)
    assert response["success"] is False
    assert response["error"]["kind"] == "RequestInvalid"


def test_bad_target_date_is_refused():
    response = serve_rank_batch({"targetDate": "2023-02-30", "employees": []})
    assert response["success"] is False
    assert response["error"]["kind"] == "DateInvalid"


def test_one_bad_record_does_not_abort_the_batch():
    response = serve_rank_batch(
        {
            "targetDate": "2023-01-10",
            "employees": [
                _record("E1"),
                {"id": "X", "entryDate": "2020-02-30"},
                {"id": "F1", "rank": {"salaryType": "연봉제"}},
                {"name": "no id"},
            ],
        }
    )
    assert response["success"] is True
    data = response["data"]
    assert set(data) == {"E1", "X", "F1", "#3"}

    assert data["E1"]["ok"] is True
    assert data["E1"]["value"]["currentRank"] == 4
    assert data["E1"]["value"]["nextUpgradeDate"] == "2024-01-10"

    assert data["X"]["ok"] is False
    assert data["X"]["error"]["kind"] == "EmployeeDataInvalid"
    assert data["F1"]["value"]["currentRank"] == "-"
    assert data["#3"]["error"]["kind"] == "EmployeeDataInvalid"


def test_none_first_upgrade_marker_is_accepted():
    response = serve_rank_batch(
        {
            "targetDate": "2023-01-10",
            "employees": [
                {"id": "N1", "entryDate": "2020-01-01", "rank": {"startRank": 1, "firstUpgradeDate": "none"}}
            ],
        }
    )
    assert response["data"]["N1"]["ok"] is True
    # no first-upgrade date and no explicit flag: not on the stepped track
    assert response["data"]["N1"]["value"]["currentRank"] == "-"


def test_results_survive_the_wire_format():
    data = serve_rank_batch({"targetDate": "2023-01-10", "employees": [_record()]})["data"]
    results = results_from_dict(data)
    assert results["E1"].value == RankOutcome(1, "2021-01-10", 4, "2024-01-10")
    assert results_to_dict(results) == data


def test_record_id_fallbacks():
    assert record_id({"uniqueCode": 7}, 0) == "7"
    assert record_id({"name": "x"}, 3) == "#3"
    assert record_id("junk", 5) == "#5"


# --- RankCache -------------------------------------------------------------


def test_cache_keeps_only_successes():
    cache = RankCache()
    ok = CalcResult.success(RankOutcome.not_applicable())
    cache.put("E1", TARGET, ok)
    cache.put("E2", TARGET, CalcResult.failure("DateInvalid", "bad"))

    assert cache.get("E1", TARGET) is ok
    assert cache.get("E2", TARGET) is None
    assert (cache.hits, cache.misses) == (1, 1)
    assert ("E1", "2023-01-10") in cache
    assert len(cache) == 1

    assert cache.invalidate("E1") == 1
    assert len(cache) == 0

    cache.put("E3", TARGET, ok)
    cache.clear()
    assert len(cache) == 0
    assert (cache.hits, cache.misses) == (0, 0)


# --- RankService, local mode -----------------------------------------------


def test_local_service_preserves_input_order_and_caches():
    service = RankService()
    records = [_record("E2"), {"id": "X", "entryDate": "bad"}, _record("E1")]

    first = service.compute(records, TARGET)
    assert list(first) == ["E2", "X", "E1"]
    assert first["E1"].value.current_rank == 4
    assert not first["X"].ok

    second = service.compute(records, TARGET)
    assert second == first
    assert service.cache.hits == 2
    assert len(service.cache) == 2


def test_cache_can_be_disabled():
    service = RankService(EngineConfig(cache_enabled=False))
    service.compute([_record()], TARGET)
    assert service.cache is None


def test_compute_one():
    service = RankService()
    assert service.compute_one(_record(), "2023-01-10").next_upgrade_date == "2024-01-10"
    with pytest.raises(CalculationError):
        service.compute_one({"id": "X", "entryDate": "2020-02-30"}, "2023-01-10")


# --- Remote client and remote mode -------------------------------------------


def test_client_needs_a_base_url():
    with pytest.raises(RemoteError):
        RemoteRankClient(RemoteSettings())


def test_remote_results_match_local_results():
    session = _serving_session()
    config = _remote_config()
    service = RankService(config, client=RemoteRankClient(config.remote, session=session))

    records = [_record("E1"), _record("E2", entry="2021-05-01", first="2022-05-01")]
    remote = service.compute(records, TARGET)
    local = RankService().compute(records, TARGET)
    assert remote == local

    session.post.assert_called_once()
    args, kwargs = session.post.call_args
    assert args[0] == "http://rank.test/api/calculate-rank-batch"
    assert kwargs["headers"]["Authorization"] == "Bearer secret"
    assert kwargs["json"]["targetDate"] == "2023-01-10"


def test_transient_failures_are_retried_then_computed_locally():
    session = Mock()
    session.post.return_value = _response(503)
    config = _remote_config()
    service = RankService(config, client=RemoteRankClient(config.remote, session=session))

    results = service.compute([_record()], TARGET)
    assert session.post.call_count == 2
    assert results["E1"].value.current_rank == 4


def test_connection_errors_raise_unavailable_from_the_client():
    session = Mock()
    session.post.side_effect = requests.ConnectionError("refused")
    config = _remote_config(max_attempts=3)
    client = RemoteRankClient(config.remote, session=session)

    with pytest.raises(RemoteUnavailable):
        client.compute_batch([], TARGET)
    assert session.post.call_count == 3


def test_rejected_credentials_are_not_masked():
    session = Mock()
    session.post.return_value = _response(401)
    config = _remote_config()
    service = RankService(config, client=RemoteRankClient(config.remote, session=session))

    with pytest.raises(RemoteAuthError):
        service.compute([_record()], TARGET)
    assert session.post.call_count == 1


def test_refused_batch_falls_back_to_local():
    session = Mock()
    session.post.return_value = _response(
        200, {"success": False, "error": {"kind": "RequestInvalid", "message": "nope"}}
    )
    config = _remote_config()
    service = RankService(config, client=RemoteRankClient(config.remote, session=session))

    assert service.compute([_record()], TARGET)["E1"].ok


def test_employee_missing_from_the_response_gets_its_own_failure():
    session = Mock()
    session.post.return_value = _response(200, {"success": True, "data": {}})
    config = _remote_config()
    service = RankService(config, client=RemoteRankClient(config.remote, session=session))

    results = service.compute([_record()], TARGET)
    assert results["E1"].error.kind == "RemoteResultMissing"
    assert len(service.cache) == 0


def test_client_sends_the_canonical_request(make_employee):
    employee = make_employee(entry="2020-01-10")
    request = build_batch_request([employee], TARGET)
    assert request["employees"][0]["id"] == "E001"
    assert request["employees"][0]["rank"]["firstUpgradeDate"] == "2021-01-10"
