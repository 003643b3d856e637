"""Streamlit explorer for the recommendation engine over a fixture file."""
from __future__ import annotations

import sys
from pathlib import Path

import streamlit as st

ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(ROOT))

from jobmatch.config import load_settings
from jobmatch.engine import RecommendationEngine
from jobmatch.log import get_logger
from jobmatch.models import JobPosting
from jobmatch.scorer import compute_match_score, get_match_reasons
from jobmatch.store import InMemoryJobStore

log = get_logger(__name__)

# ── Helpers ──────────────────────────────────────────────────────────────


@st.cache_resource
def _load_store(path: str) -> InMemoryJobStore:
    return InMemoryJobStore.from_file(path)


@st.cache_resource
def _engine(path: str) -> RecommendationEngine:
    return RecommendationEngine(_load_store(path))


def _job_label(job: JobPosting) -> str:
    where = "Remote" if job.is_remote else (job.location.city if job.location else "—")
    return f"{job.title} · {job.job_type or '—'} · {where}"


# ── Pages ────────────────────────────────────────────────────────────────


def page_recommendations(store: InMemoryJobStore, engine: RecommendationEngine) -> None:
    st.header("Recommendations")

    user_ids = sorted(store.profiles) + ["(no profile)"]
    c1, c2 = st.columns([3, 1])
    with c1:
        user_id = st.selectbox("Job seeker", user_ids)
    with c2:
        limit = st.number_input("Limit", 1, 50, 10)

    recs = engine.get_job_recommendations(user_id, int(limit))
    if not recs:
        st.info("No open jobs to recommend.")
        return

    applied = store.find_application_job_ids(user_id)
    c1, c2, c3 = st.columns(3)
    c1.metric("Open jobs", len(store.find_open_jobs()))
    c2.metric("Already applied", len(applied))
    c3.metric("Top score", f"{recs[0].score}%")

    for r in recs:
        with st.expander(f"{r.score}%  —  {_job_label(r.job)}", expanded=False):
            st.progress(r.score / 100)
            for reason in r.match_reasons:
                st.markdown(f"- {reason}")
            st.caption(r.job.description)


def page_similar(store: InMemoryJobStore, engine: RecommendationEngine) -> None:
    st.header("Similar Jobs")

    jobs = store.find_open_jobs()
    if not jobs:
        st.info("Fixture has no open jobs.")
        return
    labels = {_job_label(j): j for j in jobs}
    choice = st.selectbox("Reference job", list(labels))
    limit = st.slider("Limit", 1, 20, 5)
    for i, job in enumerate(engine.get_similar_jobs(labels[choice].id, limit), 1):
        st.markdown(f"**{i}.** {_job_label(job)}")


def page_fit(store: InMemoryJobStore) -> None:
    st.header("Check One Job")

    if not store.profiles:
        st.info("Fixture has no profiles.")
        return
    profile = store.profiles[st.selectbox("Job seeker", sorted(store.profiles))]
    labels = {_job_label(j): j for j in store.jobs}
    job = labels[st.selectbox("Job", list(labels))]
    st.metric("Match score", f"{compute_match_score(job, profile)}%")
    for reason in get_match_reasons(job, profile):
        st.markdown(f"- {reason}")


# ── Main ─────────────────────────────────────────────────────────────────


def main() -> None:
    st.set_page_config(page_title="JobAgency Matching", layout="wide")
    settings = load_settings()
    default_fixture = str(settings.fixture_path or ROOT / "data" / "sample_marketplace.yaml")

    with st.sidebar:
        st.title("JobAgency Matching")
        fixture = st.text_input("Fixture file", default_fixture)
        page = st.radio("Page", ["Recommendations", "Similar Jobs", "Check One Job"])

    if not Path(fixture).exists():
        st.error(f"Fixture not found: `{fixture}`")
        return

    store = _load_store(fixture)
    engine = _engine(fixture)
    if page == "Recommendations":
        page_recommendations(store, engine)
    elif page == "Similar Jobs":
        page_similar(store, engine)
    else:
        page_fit(store)


main()
