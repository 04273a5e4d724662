"""Search -> citations -> summary enrichment for a single query."""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from functools import partial

from citations import format_apa, format_bibtex
from errors import InvalidRequestError
from llm_client import summarize_abstract
from models import EnrichedPaper, Paper
from openalex_feed import search_works

SEARCH_CANDIDATE_LIMIT = int(os.getenv("SEARCH_CANDIDATE_LIMIT", "8"))
ENRICH_MAX_WORKERS = int(os.getenv("ENRICH_MAX_WORKERS", "8"))

LOGGER = logging.getLogger(__name__)


def enrich_paper(paper: Paper, summarize: bool = True) -> EnrichedPaper:
    """Attach both citations and (optionally) a summary to one paper."""
    return EnrichedPaper(
        paper=paper,
        apa_citation=format_apa(paper),
        bibtex_citation=format_bibtex(paper),
        summary=summarize_abstract(paper) if summarize else None,
    )


def handle_search(
    query: str | None,
    limit: int | None = None,
    summarize: bool = True,
) -> list[EnrichedPaper]:
    """Run the full pipeline for one query.

    Raises InvalidRequestError for a blank query, before any search call.
    SearchUnavailableError from the search adapter propagates; per-paper
    summary failures only leave that paper's summary as None.
    Output order always matches the search adapter's order.
    """
    cleaned = (query or "").strip()
    if not cleaned:
        raise InvalidRequestError("Missing 'query' in request body.")

    papers = search_works(cleaned, limit=limit or SEARCH_CANDIDATE_LIMIT)
    if not papers:
        LOGGER.info("Search complete: query=%r papers=0", cleaned)
        return []

    enrich = partial(enrich_paper, summarize=summarize)
    workers = max(1, min(ENRICH_MAX_WORKERS, len(papers)))
    # Executor.map yields in submission order, not completion order.
    with ThreadPoolExecutor(max_workers=workers) as executor:
        enriched = list(executor.map(enrich, papers))

    LOGGER.info(
        "Search complete: query=%r papers=%s summarized=%s",
        cleaned,
        len(enriched),
        sum(1 for item in enriched if item.summary is not None),
    )
    return enriched
