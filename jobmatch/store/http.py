"""Document-store REST client.

The ``requests.Session`` is created by the caller at process start and
injected here; this module keeps no connection state of its own.

Endpoints:
  GET {base}/jobs?status=active
  GET {base}/jobs/{id}
  GET {base}/profiles/{user_id}
  GET {base}/applications?jobSeeker={user_id}

Responses may be a bare JSON document/list or wrapped in the marketplace's
``{"success": true, "data": ...}`` envelope.
"""
from __future__ import annotations

from typing import Any

import requests

from jobmatch.errors import StoreError
from jobmatch.log import get_logger
from jobmatch.models import OPEN_STATUS, JobPosting, JobSeekerProfile
from jobmatch.retry import retry
from jobmatch.store.base import JobStore

log = get_logger(__name__)

_TRANSIENT = (requests.ConnectionError, requests.Timeout)


def _unwrap(payload: Any) -> Any:
    if isinstance(payload, dict) and "data" in payload and "success" in payload:
        return payload["data"]
    return payload


class HttpJobStore(JobStore):
    def __init__(
        self,
        base_url: str,
        session: requests.Session,
        timeout: float = 10.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.timeout = timeout

    @retry(max_attempts=3, base_delay=0.5, max_delay=5.0, retryable=_TRANSIENT)
    def _get(self, path: str, params: dict | None = None) -> Any:
        """GET a document; returns None on 404."""
        url = f"{self.base_url}{path}"
        r = self.session.get(url, params=params, timeout=self.timeout)
        if r.status_code == 404:
            log.debug("GET %s → 404", path)
            return None
        if r.status_code >= 400:
            raise StoreError(
                f"GET {path} failed with HTTP {r.status_code}", status_code=r.status_code
            )
        try:
            return _unwrap(r.json())
        except ValueError as exc:
            raise StoreError(f"GET {path} returned invalid JSON") from exc

    def _get_list(self, path: str, params: dict | None = None) -> list:
        data = self._get(path, params)
        if data is None:
            return []
        if not isinstance(data, list):
            raise StoreError(f"GET {path} expected a list, got {type(data).__name__}")
        return data

    def find_job_seeker_profile(self, user_id: str) -> JobSeekerProfile | None:
        data = self._get(f"/profiles/{user_id}")
        if not data:
            return None
        return JobSeekerProfile.from_dict(data)

    def find_open_jobs(self) -> list[JobPosting]:
        docs = self._get_list("/jobs", {"status": OPEN_STATUS})
        jobs = [JobPosting.from_dict(d) for d in docs if isinstance(d, dict)]
        return [j for j in jobs if j.is_open]

    def find_open_jobs_excluding(self, excluded_ids: set[str]) -> list[JobPosting]:
        return [j for j in self.find_open_jobs() if j.id not in excluded_ids]

    def find_application_job_ids(self, user_id: str) -> set[str]:
        docs = self._get_list("/applications", {"jobSeeker": user_id})
        ids: set[str] = set()
        for d in docs:
            if not isinstance(d, dict):
                continue
            job = d.get("job")
            if isinstance(job, dict):
                job = job.get("_id") or job.get("id")
            if job:
                ids.add(str(job))
        return ids

    def find_job_by_id(self, job_id: str) -> JobPosting | None:
        data = self._get(f"/jobs/{job_id}")
        if not data:
            return None
        return JobPosting.from_dict(data)
