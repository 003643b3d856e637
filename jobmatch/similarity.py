"""Additive similarity between a reference job and candidate postings."""
from __future__ import annotations

from jobmatch.models import JobPosting, SimilarityResult
from jobmatch.scorer import matched_skills

JOB_TYPE_POINTS = 30
SKILLS_POINTS = 40
LOCATION_POINTS = 15
SALARY_POINTS = 15
SALARY_TOLERANCE = 0.3


def similarity_score(reference: JobPosting, candidate: JobPosting) -> float:
    """Unnormalized similarity; only comparable against the same reference."""
    score = 0.0

    if candidate.job_type == reference.job_type:
        score += JOB_TYPE_POINTS

    if candidate.skills and reference.skills:
        overlap = matched_skills(candidate.skills, reference.skills)
        fraction = min(len(overlap) / max(len(reference.skills), 1), 1.0)
        score += fraction * SKILLS_POINTS

    if candidate.location is not None and reference.location is not None:
        cand_city = (candidate.location.city or "").lower()
        ref_city = (reference.location.city or "").lower()
        if cand_city and ref_city and cand_city == ref_city:
            score += LOCATION_POINTS
        elif candidate.location.remote and reference.location.remote:
            score += LOCATION_POINTS

    if candidate.salary is not None and reference.salary is not None:
        ref_mid = reference.salary.midpoint
        if ref_mid > 0 and abs(candidate.salary.midpoint - ref_mid) / ref_mid < SALARY_TOLERANCE:
            score += SALARY_POINTS

    return score


def rank_similar_jobs(
    reference: JobPosting, candidates: list[JobPosting], limit: int = 5
) -> list[JobPosting]:
    """Candidates ordered by similarity to ``reference``; ties keep input order."""
    if limit <= 0:
        return []
    results = [
        SimilarityResult(job=c, score=similarity_score(reference, c))
        for c in candidates
        if c.id != reference.id
    ]
    results = sorted(results, key=lambda r: r.score, reverse=True)
    return [r.job for r in results[:limit]]
