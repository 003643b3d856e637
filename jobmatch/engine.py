"""
Job recommendation engine.

Runs: fetch profile + applied ids (in parallel) → fetch candidates → score → rank → cap.
"""
from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Optional

from jobmatch.log import get_logger
from jobmatch.models import JobPosting, JobSeekerProfile, ScoredJob
from jobmatch.scorer import compute_match_score, get_match_reasons
from jobmatch.similarity import rank_similar_jobs
from jobmatch.store.base import JobStore

log = get_logger(__name__)

COLD_START_SCORE = 50
COLD_START_REASON = "New job posting"


def _remaining(deadline: Optional[float]) -> Optional[float]:
    if deadline is None:
        return None
    return max(deadline - time.monotonic(), 0.0)


def rank_recommendations(
    jobs: list[JobPosting],
    profile: JobSeekerProfile,
    limit: int,
    now: Optional[datetime] = None,
) -> list[ScoredJob]:
    """Score every job against ``profile``; highest first, ties in input order."""
    scored = [
        ScoredJob(
            job=job,
            score=compute_match_score(job, profile, now=now),
            match_reasons=get_match_reasons(job, profile, now=now),
        )
        for job in jobs
    ]
    scored = sorted(scored, key=lambda s: s.score, reverse=True)
    return scored[:limit]


def cold_start_recommendations(jobs: list[JobPosting], limit: int) -> list[ScoredJob]:
    """Newest open postings with a flat score, for seekers without a profile."""
    dated = sorted(
        (j for j in jobs if j.posted_at is not None),
        key=lambda j: j.posted_at,
        reverse=True,
    )
    undated = [j for j in jobs if j.posted_at is None]
    newest = (dated + undated)[:limit]
    return [
        ScoredJob(job=job, score=COLD_START_SCORE, match_reasons=[COLD_START_REASON])
        for job in newest
    ]


class RecommendationEngine:
    """Ranks open jobs for a seeker and finds jobs similar to a given one.

    The store is injected; the engine keeps no per-request state, so one
    instance can serve concurrent callers.
    """

    def __init__(self, store: JobStore, max_workers: int = 2) -> None:
        self.store = store
        self._pool = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="jobmatch-fetch"
        )

    def close(self) -> None:
        self._pool.shutdown(wait=True)

    def __enter__(self) -> RecommendationEngine:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def get_job_recommendations(
        self,
        user_id: str,
        limit: int = 10,
        *,
        timeout: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> list[ScoredJob]:
        if limit <= 0:
            return []

        deadline = None if timeout is None else time.monotonic() + timeout
        profile_future = self._pool.submit(self.store.find_job_seeker_profile, user_id)
        applied_future = self._pool.submit(self.store.find_application_job_ids, user_id)
        try:
            profile = profile_future.result(timeout=_remaining(deadline))
            applied_ids = applied_future.result(timeout=_remaining(deadline))
        except Exception:
            profile_future.cancel()
            applied_future.cancel()
            log.exception("Recommendation fetch failed for user %s", user_id)
            raise

        try:
            if profile is None:
                log.info("No profile for user %s — returning newest postings", user_id)
                return cold_start_recommendations(self.store.find_open_jobs(), limit)
            candidates = self.store.find_open_jobs_excluding(set(applied_ids))
        except Exception:
            log.exception("Candidate fetch failed for user %s", user_id)
            raise

        result = rank_recommendations(candidates, profile, limit, now=now)
        log.info(
            "Scored %d jobs for user %s → returning %d (excluded %d applied)",
            len(candidates), user_id, len(result), len(applied_ids),
        )
        return result

    def get_similar_jobs(self, job_id: str, limit: int = 5) -> list[JobPosting]:
        if limit <= 0:
            return []
        try:
            reference = self.store.find_job_by_id(job_id)
            if reference is None:
                log.debug("Reference job %s not found", job_id)
                return []
            candidates = [j for j in self.store.find_open_jobs() if j.id != reference.id]
        except Exception:
            log.exception("Similar-jobs fetch failed for job %s", job_id)
            raise
        result = rank_similar_jobs(reference, candidates, limit)
        log.debug("Similar to %s: %d of %d candidates", job_id, len(result), len(candidates))
        return result
