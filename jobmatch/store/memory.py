"""In-memory job store for tests, demos and fixture-driven runs."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

import yaml

from jobmatch.log import get_logger
from jobmatch.models import JobPosting, JobSeekerProfile
from jobmatch.store.base import JobStore

log = get_logger(__name__)


def _coerce_jobs(jobs: Iterable[JobPosting | dict]) -> list[JobPosting]:
    return [j if isinstance(j, JobPosting) else JobPosting.from_dict(j) for j in jobs]


def _coerce_profiles(
    profiles: Iterable[JobSeekerProfile | dict],
) -> dict[str, JobSeekerProfile]:
    out: dict[str, JobSeekerProfile] = {}
    for p in profiles:
        profile = p if isinstance(p, JobSeekerProfile) else JobSeekerProfile.from_dict(p)
        out[profile.user_id] = profile
    return out


class InMemoryJobStore(JobStore):
    """Jobs keep insertion order; that order is the store's enumeration order."""

    def __init__(
        self,
        jobs: Iterable[JobPosting | dict] = (),
        profiles: Iterable[JobSeekerProfile | dict] = (),
        applications: Iterable[dict] = (),
    ) -> None:
        self.jobs: list[JobPosting] = _coerce_jobs(jobs)
        self.profiles: dict[str, JobSeekerProfile] = _coerce_profiles(profiles)
        self.applications: list[dict[str, str]] = [
            {
                "job": str(a.get("job") or a.get("job_id") or ""),
                "jobSeeker": str(a.get("jobSeeker") or a.get("user_id") or ""),
                "status": str(a.get("status") or "pending"),
            }
            for a in applications
        ]

    @classmethod
    def from_file(cls, path: str | Path) -> InMemoryJobStore:
        """Load a YAML or JSON fixture with ``jobs``, ``profiles``, ``applications``."""
        path = Path(path)
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                data: Any = json.load(f)
            else:
                data = yaml.safe_load(f)
        data = data or {}
        store = cls(
            jobs=data.get("jobs") or [],
            profiles=data.get("profiles") or [],
            applications=data.get("applications") or [],
        )
        log.info(
            "Loaded fixture %s: %d jobs, %d profiles, %d applications",
            path.name, len(store.jobs), len(store.profiles), len(store.applications),
        )
        return store

    def add_job(self, job: JobPosting | dict) -> JobPosting:
        posting = _coerce_jobs([job])[0]
        self.jobs.append(posting)
        return posting

    def add_application(self, user_id: str, job_id: str, status: str = "pending") -> None:
        self.applications.append({"job": job_id, "jobSeeker": user_id, "status": status})

    def find_job_seeker_profile(self, user_id: str) -> JobSeekerProfile | None:
        return self.profiles.get(user_id)

    def find_open_jobs_excluding(self, excluded_ids: set[str]) -> list[JobPosting]:
        return [j for j in self.jobs if j.is_open and j.id not in excluded_ids]

    def find_application_job_ids(self, user_id: str) -> set[str]:
        return {a["job"] for a in self.applications if a["jobSeeker"] == user_id}

    def find_job_by_id(self, job_id: str) -> JobPosting | None:
        for j in self.jobs:
            if j.id == job_id:
                return j
        return None

    def find_open_jobs(self) -> list[JobPosting]:
        return [j for j in self.jobs if j.is_open]
