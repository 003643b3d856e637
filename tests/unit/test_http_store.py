"""
Unit tests for the HTTP document-store client.
"""
from unittest.mock import MagicMock

import pytest
import requests

from jobmatch import retry as retry_module
from jobmatch.errors import StoreError
from jobmatch.store.http import HttpJobStore


def _response(status_code=200, payload=None):
    r = MagicMock()
    r.status_code = status_code
    r.json.return_value = payload
    return r


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr(retry_module.time, "sleep", lambda s: None)


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def store(session):
    return HttpJobStore("http://store.local/api/", session, timeout=3)


def test_profile_lookup_unwraps_envelope(store, session):
    session.get.return_value = _response(200, {
        "success": True,
        "data": {"user": "u1", "skills": ["Go"]},
    })
    profile = store.find_job_seeker_profile("u1")
    assert profile.skills == ["Go"]
    session.get.assert_called_once_with(
        "http://store.local/api/profiles/u1", params=None, timeout=3
    )


def test_missing_profile_is_none(store, session):
    session.get.return_value = _response(404)
    assert store.find_job_seeker_profile("ghost") is None


def test_open_jobs_filters_status(store, session):
    session.get.return_value = _response(200, [
        {"_id": "a", "status": "active"},
        {"_id": "b", "status": "paused"},
        "junk",
    ])
    assert [j.id for j in store.find_open_jobs()] == ["a"]
    assert session.get.call_args.kwargs["params"] == {"status": "active"}


def test_open_jobs_excluding(store, session):
    session.get.return_value = _response(200, [{"_id": "a"}, {"_id": "b"}])
    assert [j.id for j in store.find_open_jobs_excluding({"a"})] == ["b"]


def test_application_ids_accept_populated_jobs(store, session):
    session.get.return_value = _response(200, {"success": True, "data": [
        {"job": "j1"},
        {"job": {"_id": "j2", "title": "Dev"}},
        {"job": None},
    ]})
    assert store.find_application_job_ids("u1") == {"j1", "j2"}
    assert session.get.call_args.kwargs["params"] == {"jobSeeker": "u1"}


def test_job_by_id_not_found(store, session):
    session.get.return_value = _response(404)
    assert store.find_job_by_id("nope") is None


def test_server_error_raises_store_error(store, session):
    session.get.return_value = _response(503)
    with pytest.raises(StoreError) as exc:
        store.find_open_jobs()
    assert exc.value.status_code == 503
    assert session.get.call_count == 1


def test_unexpected_shape_raises_store_error(store, session):
    session.get.return_value = _response(200, {"_id": "not-a-list"})
    with pytest.raises(StoreError):
        store.find_open_jobs()


def test_transient_errors_are_retried(store, session):
    session.get.side_effect = [
        requests.ConnectionError("reset"),
        _response(200, {"_id": "j1", "title": "Dev"}),
    ]
    assert store.find_job_by_id("j1").title == "Dev"
    assert session.get.call_count == 2


def test_persistent_transport_failure_propagates(store, session):
    session.get.side_effect = requests.Timeout("slow")
    with pytest.raises(requests.Timeout):
        store.find_open_jobs()
    assert session.get.call_count == 3
