"""Build a markdown digest of a seeker's recommended jobs."""
from __future__ import annotations

from datetime import datetime, timezone

from jobmatch.log import get_logger
from jobmatch.models import JobPosting, ScoredJob

log = get_logger(__name__)

MAX_DIGEST_JOBS = 10


def _location_label(job: JobPosting) -> str:
    if job.location is None:
        return "—"
    parts = [p for p in (job.location.city, job.location.country) if p]
    label = ", ".join(parts)
    if job.location.remote:
        label = f"{label} (Remote)" if label else "Remote"
    return label or "—"


def _salary_label(job: JobPosting) -> str:
    s = job.salary
    if s is None or (not s.min and not s.max):
        return ""
    if s.min and s.max:
        return f"{s.currency} {s.min:,.0f}–{s.max:,.0f} / {s.period}"
    amount = s.min or s.max
    return f"{s.currency} {amount:,.0f} / {s.period}"


def _truncate(text: str, width: int) -> str:
    return text[:width] + ("…" if len(text) > width else "")


def build_recommendation_digest(
    scored_jobs: list[ScoredJob],
    seeker_name: str = "",
    *,
    frontend_url: str = "",
) -> str:
    date = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    greeting = f"Hello {seeker_name}," if seeker_name else "Hello,"
    lines: list[str] = [f"# Your Job Recommendations — {date}", "", greeting, ""]

    top = scored_jobs[:MAX_DIGEST_JOBS]
    if not top:
        lines.append("No new openings match your profile right now. Check back soon!")
        log.info("Built empty recommendation digest")
        return "\n".join(lines)

    lines.append(f"We found **{len(scored_jobs)}** openings for you. Here are the best matches:")
    lines.append("")

    for s in top:
        job = s.job
        lines.append(f"### {job.title}")
        lines.append(f"- **Match:** {s.score}%")
        lines.append(f"- **Type:** {job.job_type or '—'}")
        lines.append(f"- **Location:** {_location_label(job)}")
        salary = _salary_label(job)
        if salary:
            lines.append(f"- **Salary:** {salary}")
        lines.append(f"- **Why:** {', '.join(s.match_reasons[:4])}")
        if frontend_url and job.id:
            lines.append(f"- **View:** [Open posting]({frontend_url.rstrip('/')}/jobs/{job.id})")
        lines.append("")

    lines.append("---")
    lines.append("")
    lines.append("| # | Role | Type | Location | Match |")
    lines.append("|--:|------|------|----------|------:|")
    for i, s in enumerate(top, 1):
        lines.append(
            f"| {i} | {_truncate(s.job.title, 40)} | {s.job.job_type or '—'} "
            f"| {_truncate(_location_label(s.job), 24)} | {s.score}% |"
        )
    lines.append("")

    log.info("Built recommendation digest: %d of %d jobs", len(top), len(scored_jobs))
    return "\n".join(lines)
