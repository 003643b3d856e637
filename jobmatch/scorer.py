"""Score a job posting against a job seeker profile.

Five weighted factors contribute to a 0-100 compatibility score:

    skills overlap          0.40
    experience level        0.20
    education relevance     0.15
    location fit            0.15
    employment-type pref    0.10

A factor without usable data on the profile (or job) is skipped and the
result is renormalized over the weights that did apply.
"""
from __future__ import annotations

import math
from datetime import datetime

from jobmatch.models import JobPosting, JobSeekerProfile, WorkHistoryEntry

SKILLS_WEIGHT = 0.40
EXPERIENCE_WEIGHT = 0.20
EDUCATION_WEIGHT = 0.15
LOCATION_WEIGHT = 0.15
JOB_TYPE_WEIGHT = 0.10

# Years of experience a seeker is expected to bring, by employment type.
EXPECTED_YEARS: dict[str, float] = {
    "full-time": 2,
    "part-time": 1,
    "contract": 3,
    "internship": 0,
    "temporary": 1,
}
DEFAULT_EXPECTED_YEARS = 2

# Fields of study treated as broadly applicable to any posting.
BROAD_FIELDS: tuple[str, ...] = ("computer", "engineering", "business")

FALLBACK_REASON = "New opportunity"


def _normalize(s: str | None) -> str:
    return (s or "").lower()


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def matched_skills(profile_skills: list[str], job_skills: list[str]) -> list[str]:
    """Profile skills (lower-cased, in profile order) matching any requirement.

    Containment is checked in both directions, so "java" matches
    "javascript" and vice versa.
    """
    requirements = [_normalize(r) for r in job_skills]
    return [
        skill
        for skill in (_normalize(s) for s in profile_skills)
        if any(req in skill or skill in req for req in requirements)
    ]


def total_experience_years(
    entries: list[WorkHistoryEntry], now: datetime | None = None
) -> float:
    """Sum of calendar months across work history, expressed in years."""
    if not entries:
        return 0.0
    now = now or datetime.now()
    total_months = 0
    for entry in entries:
        if entry.start_date is None:
            continue
        end = now if entry.current or entry.end_date is None else entry.end_date
        months = (end.year - entry.start_date.year) * 12 + (
            end.month - entry.start_date.month
        )
        total_months += max(0, months)
    return total_months / 12


def _skills_score(job: JobPosting, profile: JobSeekerProfile) -> float | None:
    if not profile.skills or not job.skills:
        return None
    matched = matched_skills(profile.skills, job.skills)
    return len(matched) / max(len(job.skills), 1) * 100


def experience_level_score(years: float, job_type: str) -> float:
    expected = EXPECTED_YEARS.get(job_type, DEFAULT_EXPECTED_YEARS)
    if years >= expected:
        return 100
    if years >= expected * 0.5:
        return 70
    return 40


def _education_score(job: JobPosting, profile: JobSeekerProfile) -> float | None:
    if not profile.education:
        return None
    title = _normalize(job.title)
    description = _normalize(job.description)
    for edu in profile.education:
        fos = _normalize(edu.field_of_study)
        if fos in title or fos in description:
            return 100
        if any(word in fos for word in BROAD_FIELDS):
            return 100
    return 50


def _location_score(job: JobPosting, profile: JobSeekerProfile) -> float | None:
    if profile.location is None:
        return None
    profile_city = _normalize(profile.location.city)
    profile_country = _normalize(profile.location.country)
    job_city = _normalize(job.location.city if job.location else "")
    job_country = _normalize(job.location.country if job.location else "")

    if job.is_remote:
        return 100
    if profile_city and job_city:
        if job_city in profile_city or profile_city in job_city:
            return 100
        if job_country == profile_country:
            return 70
        return 50
    if profile_country and job_country and profile_country == job_country:
        return 70
    return 50


def _job_type_score(job: JobPosting, profile: JobSeekerProfile) -> float | None:
    preferred = profile.preferred_job_types
    if not preferred:
        return None
    if job.job_type in preferred:
        return 100
    if "remote" in preferred and job.is_remote:
        return 100
    return 50


def compute_match_score(
    job: JobPosting, profile: JobSeekerProfile, now: datetime | None = None
) -> int:
    """Weighted 0-100 compatibility score for one (job, profile) pair."""
    score = 0.0
    applied = 0.0

    skills = _skills_score(job, profile)
    if skills is not None:
        score += skills * SKILLS_WEIGHT
        applied += SKILLS_WEIGHT

    if profile.experience:
        years = total_experience_years(profile.experience, now=now)
        score += experience_level_score(years, job.job_type) * EXPERIENCE_WEIGHT
        applied += EXPERIENCE_WEIGHT

    for factor, weight in (
        (_education_score(job, profile), EDUCATION_WEIGHT),
        (_location_score(job, profile), LOCATION_WEIGHT),
        (_job_type_score(job, profile), JOB_TYPE_WEIGHT),
    ):
        if factor is not None:
            score += factor * weight
            applied += weight

    # The full weight set sums to 1.0 only up to float error.
    if 0 < applied < 1 - 1e-9:
        score = score / applied

    return max(0, min(100, _round_half_up(score)))


def get_match_reasons(
    job: JobPosting, profile: JobSeekerProfile, now: datetime | None = None
) -> list[str]:
    """Short explanations for a match, in skills/experience/location/type/salary order."""
    reasons: list[str] = []

    if profile.skills and job.skills:
        matched = matched_skills(profile.skills, job.skills)
        if matched:
            reasons.append(f"Skills match: {', '.join(matched[:3])}")

    if profile.experience:
        years = total_experience_years(profile.experience, now=now)
        if years > 0:
            reasons.append(f"{_round_half_up(years)} years of experience")

    if job.is_remote:
        reasons.append("Remote work available")
    elif profile.location is not None:
        profile_city = _normalize(profile.location.city)
        job_city = _normalize(job.location.city if job.location else "")
        if profile_city and job_city and (
            job_city in profile_city or profile_city in job_city
        ):
            reasons.append("Location matches preference")

    if profile.preferred_job_types and job.job_type in profile.preferred_job_types:
        reasons.append(f"Matches preferred job type: {job.job_type}")

    if profile.expected_salary is not None and job.salary is not None:
        if job.salary.min and job.salary.max:
            expected_min = profile.expected_salary.min or 0
            if job.salary.max >= expected_min:
                reasons.append("Salary in expected range")

    if not reasons:
        reasons.append(FALLBACK_REASON)
    return reasons
