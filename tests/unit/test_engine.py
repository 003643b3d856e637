"""
Unit tests for the recommendation engine orchestration.
"""
import threading
import time
from concurrent.futures import TimeoutError as FutureTimeoutError
from datetime import datetime, timedelta
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from jobmatch import engine as engine_module
from jobmatch.engine import (
    COLD_START_REASON,
    COLD_START_SCORE,
    RecommendationEngine,
    cold_start_recommendations,
    rank_recommendations,
)
from jobmatch.models import Location
from jobmatch.store.base import JobStore
from jobmatch.store.memory import InMemoryJobStore


def test_applied_jobs_are_excluded(engine):
    recs = engine.get_job_recommendations("seeker-1")
    ids = [r.job.id for r in recs]
    assert "job-a" not in ids
    assert "job-closed" not in ids
    assert set(ids) == {"job-b", "job-c"}


def test_results_sorted_by_score_descending(engine):
    recs = engine.get_job_recommendations("seeker-1")
    scores = [r.score for r in recs]
    assert scores == sorted(scores, reverse=True)
    assert recs[0].job.id == "job-c"
    assert all(r.match_reasons for r in recs)


def test_limit_truncates_large_candidate_sets(make_job, full_profile):
    jobs = [make_job(f"job-{i}", skills=["python"]) for i in range(50)]
    store = InMemoryJobStore(jobs=jobs, profiles=[full_profile])
    with RecommendationEngine(store) as eng:
        recs = eng.get_job_recommendations("seeker-1", limit=3)
    assert len(recs) == 3


def test_non_positive_limit_returns_nothing(engine):
    assert engine.get_job_recommendations("seeker-1", limit=0) == []
    assert engine.get_similar_jobs("job-a", limit=0) == []


def test_cold_start_returns_newest_open_jobs(engine):
    recs = engine.get_job_recommendations("nobody", limit=10)
    assert [r.job.id for r in recs] == ["job-b", "job-a", "job-c"]
    assert all(r.score == COLD_START_SCORE for r in recs)
    assert all(r.match_reasons == [COLD_START_REASON] for r in recs)


def test_cold_start_respects_limit_and_puts_undated_last(make_job):
    base = datetime(2026, 1, 1)
    jobs = [
        make_job("undated"),
        make_job("old", posted_at=base),
        make_job("new", posted_at=base + timedelta(days=3)),
        make_job("mid", posted_at=base + timedelta(days=1)),
    ]
    assert [s.job.id for s in cold_start_recommendations(jobs, 10)] == [
        "new", "mid", "old", "undated",
    ]
    assert [s.job.id for s in cold_start_recommendations(jobs, 2)] == ["new", "mid"]


def test_equal_scores_keep_candidate_order(make_job, make_profile):
    jobs = [make_job(f"job-{i}", skills=["python"]) for i in range(5)]
    profile = make_profile(skills=["python"])
    ranked = rank_recommendations(jobs, profile, limit=5)
    assert [s.job.id for s in ranked] == [f"job-{i}" for i in range(5)]


def test_profile_and_applications_fetched_concurrently(make_job, full_profile):
    barrier = threading.Barrier(2, timeout=5)

    class BarrierStore(InMemoryJobStore):
        def find_job_seeker_profile(self, user_id):
            barrier.wait()
            return super().find_job_seeker_profile(user_id)

        def find_application_job_ids(self, user_id):
            barrier.wait()
            return super().find_application_job_ids(user_id)

    store = BarrierStore(jobs=[make_job("job-1", skills=["python"])], profiles=[full_profile])
    with RecommendationEngine(store) as eng:
        recs = eng.get_job_recommendations("seeker-1")
    assert [r.job.id for r in recs] == ["job-1"]


def test_upstream_failure_propagates():
    store = MagicMock(spec=JobStore)
    store.find_job_seeker_profile.side_effect = ConnectionError("db down")
    store.find_application_job_ids.return_value = set()
    with RecommendationEngine(store) as eng:
        with pytest.raises(ConnectionError, match="db down"):
            eng.get_job_recommendations("seeker-1")
    store.find_open_jobs_excluding.assert_not_called()


def test_candidate_fetch_failure_propagates(full_profile):
    store = MagicMock(spec=JobStore)
    store.find_job_seeker_profile.return_value = full_profile
    store.find_application_job_ids.return_value = {"x"}
    store.find_open_jobs_excluding.side_effect = TimeoutError("slow query")
    with RecommendationEngine(store) as eng:
        with pytest.raises(TimeoutError, match="slow query"):
            eng.get_job_recommendations("seeker-1")
    store.find_open_jobs_excluding.assert_called_once_with({"x"})


def test_fetch_timeout_is_raised_to_caller(full_profile):
    release = threading.Event()
    store = MagicMock(spec=JobStore)
    store.find_job_seeker_profile.side_effect = lambda uid: release.wait(5) and full_profile
    store.find_application_job_ids.return_value = set()
    eng = RecommendationEngine(store)
    try:
        with pytest.raises(FutureTimeoutError):
            eng.get_job_recommendations("seeker-1", timeout=0.05)
    finally:
        release.set()
        eng.close()


def test_timeout_is_shared_across_both_fetches(full_profile, monkeypatch):
    clock = iter([0.0, 1.0, 31.0, 31.0])
    monkeypatch.setattr(engine_module, "time", SimpleNamespace(monotonic=lambda: next(clock)))
    release = threading.Event()
    store = MagicMock(spec=JobStore)
    store.find_job_seeker_profile.return_value = full_profile
    store.find_application_job_ids.side_effect = lambda uid: release.wait(60) and set()
    eng = RecommendationEngine(store)
    started = time.monotonic()
    try:
        with pytest.raises(FutureTimeoutError):
            eng.get_job_recommendations("seeker-1", timeout=30)
        assert time.monotonic() - started < 10
    finally:
        release.set()
        eng.close()


def test_similar_jobs_missing_reference_returns_empty(engine):
    assert engine.get_similar_jobs("does-not-exist") == []


def test_similar_jobs_excludes_reference_and_closed(make_job):
    ref = make_job("ref", job_type="contract", skills=["react"], location=Location(remote=True))
    jobs = [
        ref,
        make_job("twin", job_type="contract", skills=["react"], location=Location(remote=True)),
        make_job("remote-only", job_type="full-time", location=Location(remote=True)),
        make_job("closed-twin", job_type="contract", skills=["react"], status="closed"),
        make_job("unrelated", job_type="full-time"),
    ]
    with RecommendationEngine(InMemoryJobStore(jobs=jobs)) as eng:
        similar = eng.get_similar_jobs("ref", limit=5)
    assert [j.id for j in similar] == ["twin", "remote-only", "unrelated"]
