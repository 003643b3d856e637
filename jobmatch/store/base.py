from abc import ABC, abstractmethod
from typing import Optional

from jobmatch.models import JobPosting, JobSeekerProfile


class JobStore(ABC):
    """Read-only view of the marketplace's document store."""

    @abstractmethod
    def find_job_seeker_profile(self, user_id: str) -> Optional[JobSeekerProfile]:
        pass

    @abstractmethod
    def find_open_jobs_excluding(self, excluded_ids: set[str]) -> list[JobPosting]:
        pass

    @abstractmethod
    def find_application_job_ids(self, user_id: str) -> set[str]:
        pass

    @abstractmethod
    def find_job_by_id(self, job_id: str) -> Optional[JobPosting]:
        pass

    @abstractmethod
    def find_open_jobs(self) -> list[JobPosting]:
        pass
