"""
Shared fixtures for the matching core tests.

- now: fixed clock so experience totals are deterministic
- make_job / make_profile: factories with sensible defaults
- memory_store: small marketplace with open, closed and applied jobs
- engine: RecommendationEngine over memory_store (closed after the test)
"""
import os
from datetime import datetime

# Keep test runs from writing log files into the project tree.
os.environ.setdefault("LOG_DIR", "-")

import pytest

from jobmatch.engine import RecommendationEngine
from jobmatch.models import (
    EducationEntry,
    JobPosting,
    JobSeekerProfile,
    Location,
    SalaryRange,
    WorkHistoryEntry,
)
from jobmatch.store.memory import InMemoryJobStore

NOW = datetime(2026, 10, 16)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_job():
    def _make(job_id="job-1", **kwargs):
        kwargs.setdefault("title", "Software Engineer")
        kwargs.setdefault("job_type", "full-time")
        return JobPosting(id=job_id, **kwargs)

    return _make


@pytest.fixture
def make_profile():
    def _make(user_id="seeker-1", **kwargs):
        return JobSeekerProfile(user_id=user_id, **kwargs)

    return _make


@pytest.fixture
def backend_job(make_job):
    return make_job(
        "job-backend",
        title="Backend Python Developer",
        description="Build REST APIs with Django.",
        job_type="full-time",
        skills=["Python", "Django", "PostgreSQL", "REST"],
        location=Location(city="Casablanca", country="Morocco"),
        salary=SalaryRange(min=90000, max=120000),
        posted_at=datetime(2026, 9, 1),
    )


@pytest.fixture
def full_profile(make_profile):
    return make_profile(
        skills=["Python", "SQL", "Django"],
        experience=[
            WorkHistoryEntry(
                company="Atlas Soft",
                start_date=datetime(2023, 10, 1),
                end_date=datetime(2026, 10, 1),
            )
        ],
        education=[EducationEntry(field_of_study="Computer Engineering")],
        location=Location(city="Casablanca", country="Morocco"),
        preferred_job_types=["full-time"],
        expected_salary=SalaryRange(min=85000, max=110000),
    )


@pytest.fixture
def memory_store(make_job, full_profile):
    jobs = [
        make_job(
            "job-a",
            title="Python Developer",
            skills=["Python", "Django"],
            location=Location(city="Casablanca", country="Morocco"),
            posted_at=datetime(2026, 10, 1),
        ),
        make_job(
            "job-b",
            title="Java Developer",
            skills=["Java", "Spring"],
            location=Location(city="Paris", country="France"),
            posted_at=datetime(2026, 10, 10),
        ),
        make_job(
            "job-c",
            title="Data Engineer",
            skills=["SQL", "Python", "Airflow"],
            location=Location(remote=True),
            posted_at=datetime(2026, 9, 20),
        ),
        make_job(
            "job-closed",
            title="Closed Python Role",
            skills=["Python"],
            status="closed",
            posted_at=datetime(2026, 10, 15),
        ),
    ]
    store = InMemoryJobStore(jobs=jobs, profiles=[full_profile])
    store.add_application("seeker-1", "job-a")
    return store


@pytest.fixture
def engine(memory_store):
    eng = RecommendationEngine(memory_store)
    yield eng
    eng.close()
