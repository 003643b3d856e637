"""
Unit tests for the recommendation digest.
"""
from jobmatch.digest import MAX_DIGEST_JOBS, build_recommendation_digest
from jobmatch.models import Location, SalaryRange, ScoredJob


def _scored(job, score=80, reasons=None):
    return ScoredJob(job=job, score=score, match_reasons=reasons or ["New opportunity"])


def test_empty_digest():
    text = build_recommendation_digest([], "Salma")
    assert "Hello Salma," in text
    assert "No new openings" in text


def test_digest_lists_jobs_with_details(make_job):
    job = make_job(
        "j1",
        title="Backend Developer",
        location=Location(city="Rabat", country="Morocco", remote=True),
        salary=SalaryRange(min=90000, max=120000, currency="MAD"),
    )
    text = build_recommendation_digest(
        [_scored(job, 91, ["Skills match: python", "Remote work available"])],
        frontend_url="https://jobs.example/",
    )
    assert "### Backend Developer" in text
    assert "- **Match:** 91%" in text
    assert "Rabat, Morocco (Remote)" in text
    assert "MAD 90,000–120,000 / yearly" in text
    assert "Skills match: python, Remote work available" in text
    assert "(https://jobs.example/jobs/j1)" in text
    assert "| 1 | Backend Developer | full-time |" in text


def test_digest_caps_job_count(make_job):
    recs = [_scored(make_job(f"j{i}", title=f"Role {i}")) for i in range(MAX_DIGEST_JOBS + 5)]
    text = build_recommendation_digest(recs)
    assert f"**{MAX_DIGEST_JOBS + 5}** openings" in text
    assert text.count("### Role") == MAX_DIGEST_JOBS
