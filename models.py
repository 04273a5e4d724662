"""Shared typed models for the search and enrichment pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

NO_TITLE = "[No title]"


@dataclass(frozen=True, slots=True)
class Paper:
    """Normalized paper record produced by the search adapter."""

    id: str
    title: str = NO_TITLE
    authors: tuple[str, ...] = field(default_factory=tuple)
    year: int | None = None
    venue: str | None = None
    abstract: str | None = None
    doi: str | None = None
    url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "authors": list(self.authors),
            "year": self.year,
            "venue": self.venue,
            "abstract": self.abstract,
            "doi": self.doi,
            "url": self.url,
        }


@dataclass(frozen=True, slots=True)
class EnrichedPaper:
    """A Paper plus the fields attached by the enrichment pipeline.

    The wrapped Paper is never modified; enrichment only adds fields.
    """

    paper: Paper
    apa_citation: str
    bibtex_citation: str
    summary: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the public JSON field names."""
        data = self.paper.to_dict()
        data["apaCitation"] = self.apa_citation
        data["bibtexCitation"] = self.bibtex_citation
        data["summary"] = self.summary
        return data
