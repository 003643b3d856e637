"""Data models for job postings, seeker profiles and ranked results.

Payloads coming from the document store use camelCase keys
(``jobType``, ``requirements.skills``, ``fieldOfStudy`` ...). Each model's
``from_dict`` also accepts snake_case and tolerates missing sub-fields.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

EMPLOYMENT_TYPES: tuple[str, ...] = (
    "full-time", "part-time", "contract", "internship", "temporary",
)
JOB_STATUSES: tuple[str, ...] = ("draft", "active", "paused", "closed")
OPEN_STATUS = "active"
_TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})


def _pick(data: dict, *keys: str, default: Any = None) -> Any:
    for k in keys:
        if k in data and data[k] is not None:
            return data[k]
    return default


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _as_str_list(value: Any) -> list[str]:
    return [str(v) for v in _as_list(value) if v is not None]


def _as_number(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return False


def parse_datetime(value: Any) -> datetime | None:
    """Parse ISO strings, dates and datetimes; anything else is None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text).replace(tzinfo=None)
        except ValueError:
            return None
    return None


@dataclass
class Location:
    city: str = ""
    state: str = ""
    country: str = ""
    remote: bool = False

    @classmethod
    def from_dict(cls, data: dict | None) -> Location | None:
        if not isinstance(data, dict):
            return None
        return cls(
            city=str(data.get("city") or ""),
            state=str(data.get("state") or ""),
            country=str(data.get("country") or ""),
            remote=_as_bool(data.get("remote")),
        )


@dataclass
class SalaryRange:
    min: float | None = None
    max: float | None = None
    currency: str = "USD"
    period: str = "yearly"

    @property
    def midpoint(self) -> float:
        return ((self.min or 0) + (self.max or 0)) / 2

    @classmethod
    def from_dict(cls, data: dict | None) -> SalaryRange | None:
        if not isinstance(data, dict):
            return None
        return cls(
            min=_as_number(data.get("min")),
            max=_as_number(data.get("max")),
            currency=str(data.get("currency") or "USD"),
            period=str(data.get("period") or "yearly"),
        )


@dataclass
class JobPosting:
    id: str
    title: str = ""
    description: str = ""
    job_type: str = ""
    skills: list[str] = field(default_factory=list)
    location: Location | None = None
    salary: SalaryRange | None = None
    status: str = OPEN_STATUS
    posted_at: datetime | None = None
    employer_id: str | None = None
    raw: dict = field(default_factory=dict)

    @property
    def is_remote(self) -> bool:
        return bool(self.location and self.location.remote)

    @property
    def is_open(self) -> bool:
        return self.status == OPEN_STATUS

    @classmethod
    def from_dict(cls, data: dict) -> JobPosting:
        requirements = data.get("requirements")
        if isinstance(requirements, dict):
            skills = requirements.get("skills")
        else:
            skills = _pick(data, "skills", "required_skills")
        return cls(
            id=str(_pick(data, "_id", "id", default="")),
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
            job_type=str(_pick(data, "jobType", "job_type", default="")),
            skills=_as_str_list(skills),
            location=Location.from_dict(data.get("location")),
            salary=SalaryRange.from_dict(data.get("salary")),
            status=str(data.get("status") or OPEN_STATUS),
            posted_at=parse_datetime(
                _pick(data, "postedDate", "posted_at", "createdAt", "created_at")
            ),
            employer_id=_pick(data, "employer", "employer_id"),
            raw=dict(data),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "jobType": self.job_type,
            "requirements": {"skills": list(self.skills)},
            "status": self.status,
        }
        if self.location is not None:
            out["location"] = {
                "city": self.location.city,
                "state": self.location.state,
                "country": self.location.country,
                "remote": self.location.remote,
            }
        if self.salary is not None:
            out["salary"] = {
                "min": self.salary.min,
                "max": self.salary.max,
                "currency": self.salary.currency,
                "period": self.salary.period,
            }
        if self.posted_at is not None:
            out["postedDate"] = self.posted_at.isoformat()
        if self.employer_id is not None:
            out["employer"] = self.employer_id
        return out


@dataclass
class WorkHistoryEntry:
    company: str = ""
    position: str = ""
    start_date: datetime | None = None
    end_date: datetime | None = None
    current: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> WorkHistoryEntry:
        return cls(
            company=str(data.get("company") or ""),
            position=str(data.get("position") or ""),
            start_date=parse_datetime(_pick(data, "startDate", "start_date")),
            end_date=parse_datetime(_pick(data, "endDate", "end_date")),
            current=_as_bool(data.get("current")),
        )


@dataclass
class EducationEntry:
    institution: str = ""
    degree: str = ""
    field_of_study: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> EducationEntry:
        return cls(
            institution=str(data.get("institution") or ""),
            degree=str(data.get("degree") or ""),
            field_of_study=str(_pick(data, "fieldOfStudy", "field_of_study", default="")),
        )


@dataclass
class JobSeekerProfile:
    user_id: str
    first_name: str = ""
    last_name: str = ""
    skills: list[str] = field(default_factory=list)
    experience: list[WorkHistoryEntry] = field(default_factory=list)
    education: list[EducationEntry] = field(default_factory=list)
    location: Location | None = None
    preferred_job_types: list[str] = field(default_factory=list)
    expected_salary: SalaryRange | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def from_dict(cls, data: dict) -> JobSeekerProfile:
        return cls(
            user_id=str(_pick(data, "user", "user_id", "userId", default="")),
            first_name=str(_pick(data, "firstName", "first_name", default="")),
            last_name=str(_pick(data, "lastName", "last_name", default="")),
            skills=_as_str_list(data.get("skills")),
            experience=[
                WorkHistoryEntry.from_dict(e)
                for e in _as_list(data.get("experience"))
                if isinstance(e, dict)
            ],
            education=[
                EducationEntry.from_dict(e)
                for e in _as_list(data.get("education"))
                if isinstance(e, dict)
            ],
            location=Location.from_dict(data.get("location")),
            preferred_job_types=_as_str_list(
                _pick(data, "preferredJobTypes", "preferred_job_types")
            ),
            expected_salary=SalaryRange.from_dict(
                _pick(data, "expectedSalary", "expected_salary")
            ),
        )


@dataclass
class ScoredJob:
    job: JobPosting
    score: int
    match_reasons: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "job": self.job.to_dict(),
            "matchScore": self.score,
            "matchReasons": list(self.match_reasons),
        }


@dataclass
class SimilarityResult:
    job: JobPosting
    score: float
