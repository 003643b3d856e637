"""Exception hierarchy for the matching core and its collaborators."""
from __future__ import annotations


class JobMatchError(Exception):
    """Base class for all errors raised by jobmatch."""


class ConfigError(JobMatchError):
    """Settings file or environment is invalid."""


class StoreError(JobMatchError):
    """The persistence collaborator answered with an unusable response."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class EmailNotConfiguredError(JobMatchError):
    """SMTP credentials are missing."""

    code = "EMAIL_NOT_CONFIGURED"
