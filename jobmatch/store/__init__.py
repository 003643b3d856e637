from __future__ import annotations

from typing import Optional

import requests

from jobmatch.config import Settings
from jobmatch.errors import ConfigError
from jobmatch.log import get_logger
from jobmatch.store.base import JobStore
from jobmatch.store.http import HttpJobStore
from jobmatch.store.memory import InMemoryJobStore

log = get_logger(__name__)

__all__ = ["JobStore", "HttpJobStore", "InMemoryJobStore", "get_store"]


def get_store(settings: Settings, session: Optional[requests.Session] = None) -> JobStore:
    """Build the configured store; the HTTP backend needs an injected session."""
    if settings.store_backend == "http":
        if not settings.store_url:
            raise ConfigError("store.backend is 'http' but JOBMATCH_STORE_URL is not set")
        if session is None:
            raise ConfigError("HTTP store requires a requests.Session")
        log.info("Using HTTP job store at %s", settings.store_url)
        return HttpJobStore(settings.store_url, session, timeout=settings.store_timeout)

    if settings.store_backend == "memory":
        if settings.fixture_path and settings.fixture_path.exists():
            return InMemoryJobStore.from_file(settings.fixture_path)
        log.warning("No fixture found — using empty in-memory store")
        return InMemoryJobStore()

    raise ConfigError(f"Unknown store backend: {settings.store_backend!r}")
