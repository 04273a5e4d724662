"""Error taxonomy for the paper search pipeline."""

from __future__ import annotations


class PaperSearchError(Exception):
    """Base class for pipeline errors."""


class InvalidRequestError(PaperSearchError):
    """The caller sent an empty or missing query."""


class SearchUnavailableError(PaperSearchError):
    """The bibliographic search upstream failed; fatal for the request."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SummaryUnavailableError(PaperSearchError):
    """The text-generation upstream failed for one paper; recovered locally."""
