#!/usr/bin/env python3
"""Print job recommendations (or similar jobs) from the configured store."""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import requests

sys.path.insert(0, str(Path(__file__).resolve().parent))

from jobmatch.config import load_settings
from jobmatch.engine import RecommendationEngine
from jobmatch.errors import JobMatchError
from jobmatch.log import get_logger
from jobmatch.store import get_store

log = get_logger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description=__doc__)
    p.add_argument("user_id", nargs="?", help="job seeker user id")
    p.add_argument("--limit", type=int, default=None, help="max results")
    p.add_argument("--similar", metavar="JOB_ID", help="list jobs similar to JOB_ID instead")
    p.add_argument("--json", action="store_true", help="print JSON instead of text")
    p.add_argument("--email", metavar="ADDR", help="send the recommendations as a digest email")
    p.add_argument("--settings", type=Path, default=None, help="path to settings.yaml")
    args = p.parse_args(argv)
    if not args.user_id and not args.similar:
        p.error("either user_id or --similar is required")
    return args


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = load_settings(args.settings)

    with requests.Session() as session:
        store = get_store(settings, session)
        with RecommendationEngine(store, max_workers=settings.fetch_workers) as engine:
            if args.similar:
                limit = args.limit if args.limit is not None else settings.similar_limit
                jobs = engine.get_similar_jobs(args.similar, limit)
                if args.json:
                    print(json.dumps([j.to_dict() for j in jobs], indent=2))
                else:
                    for i, job in enumerate(jobs, 1):
                        print(f"{i:>2}. {job.title} [{job.job_type}] ({job.id})")
                return 0

            limit = args.limit if args.limit is not None else settings.recommendation_limit
            recs = engine.get_job_recommendations(args.user_id, limit)

        if args.json:
            print(json.dumps([r.to_dict() for r in recs], indent=2))
        else:
            for i, r in enumerate(recs, 1):
                print(f"{i:>2}. {r.score:>3}  {r.job.title} ({r.job.id})")
                print(f"       {'; '.join(r.match_reasons)}")

        if args.email:
            from jobmatch.mailer import Mailer

            profile = store.find_job_seeker_profile(args.user_id)
            name = profile.full_name if profile else ""
            Mailer(settings.smtp).send_recommendation_digest(args.email, recs, name)
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except JobMatchError as exc:
        log.error("%s", exc)
        sys.exit(1)
