"""OpenAlex works search and normalization helpers."""

from __future__ import annotations

import logging
import os
import re
from typing import Any

import requests

from errors import SearchUnavailableError
from models import NO_TITLE, Paper

OPENALEX_BASE_URL = os.getenv("OPENALEX_BASE_URL", "https://api.openalex.org/works")
OPENALEX_EMAIL = os.getenv("OPENALEX_EMAIL")
REQUEST_TIMEOUT_SECONDS = float(os.getenv("OPENALEX_TIMEOUT_SECONDS", "20"))
DOI_RESOLVER = "https://doi.org/"

_DOI_PREFIX_RE = re.compile(r"^https?://doi\.org/", re.IGNORECASE)

LOGGER = logging.getLogger(__name__)


def search_works(query: str, limit: int = 8) -> list[Paper]:
    """Search OpenAlex for works matching ``query`` and normalize them.

    Results come back in OpenAlex relevance order, at most ``limit`` of them.
    Any transport failure or non-success status raises SearchUnavailableError;
    there is no retry.
    """
    params: dict[str, Any] = {
        "search": query,
        "per-page": limit,
        "sort": "relevance_score:desc",
    }
    if OPENALEX_EMAIL:
        # OpenAlex polite pool
        params["mailto"] = OPENALEX_EMAIL

    try:
        response = requests.get(
            OPENALEX_BASE_URL,
            params=params,
            headers={"Content-Type": "application/json"},
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
    except requests.RequestException as exc:
        LOGGER.error("OpenAlex request failed for query=%r: %s", query, exc)
        raise SearchUnavailableError("OpenAlex request failed") from exc

    if not response.ok:
        LOGGER.error(
            "OpenAlex error: status=%s body=%s",
            response.status_code,
            response.text[:500],
        )
        raise SearchUnavailableError("OpenAlex request failed", status_code=response.status_code)

    try:
        payload = response.json()
    except ValueError as exc:
        LOGGER.error("OpenAlex returned a non-JSON body for query=%r", query)
        raise SearchUnavailableError("OpenAlex returned malformed JSON") from exc

    papers = _parse_works_payload(payload)
    LOGGER.info("OpenAlex search: query=%r limit=%s returned=%s", query, limit, len(papers))
    return papers


def _parse_works_payload(payload: Any) -> list[Paper]:
    """Parse an OpenAlex list response into Paper objects, preserving order."""
    if not isinstance(payload, dict):
        raise SearchUnavailableError("Unexpected OpenAlex payload shape: expected an object")

    works = payload.get("results") or []
    if not isinstance(works, list):
        raise SearchUnavailableError("Unexpected OpenAlex payload shape: results is not a list")

    parsed: list[Paper] = []
    seen_ids: set[str] = set()
    for work in works:
        if not isinstance(work, dict):
            continue

        paper = _parse_work(work)
        if paper is None:
            LOGGER.debug("Skipping OpenAlex work without an id")
            continue
        if paper.id in seen_ids:
            continue

        seen_ids.add(paper.id)
        parsed.append(paper)

    return parsed


def _parse_work(work: dict[str, Any]) -> Paper | None:
    work_id = _as_str(work.get("id"))
    if not work_id:
        return None

    ids_block = work.get("ids") if isinstance(work.get("ids"), dict) else {}
    doi = normalize_doi(_as_str(work.get("doi")) or _as_str(ids_block.get("doi")))

    index = work.get("abstract_inverted_index")
    abstract = rebuild_abstract(index) if isinstance(index, dict) else None

    return Paper(
        id=work_id,
        title=_as_str(work.get("display_name")) or NO_TITLE,
        authors=_author_names(work.get("authorships")),
        year=_as_year(work.get("publication_year")),
        venue=_venue_name(work.get("primary_location")),
        abstract=abstract or None,
        doi=doi,
        url=f"{DOI_RESOLVER}{doi}" if doi else work_id,
    )


def normalize_doi(raw: str | None) -> str | None:
    """Strip a leading DOI resolver prefix, returning the bare identifier."""
    if not raw:
        return None
    bare = _DOI_PREFIX_RE.sub("", raw.strip())
    return bare or None


def rebuild_abstract(index: dict[str, Any]) -> str:
    """Rebuild prose from OpenAlex's ``abstract_inverted_index``.

    Each word is placed at every position listed for it. Positions that no
    word claims become empty strings.
    """
    slots: dict[int, str] = {}
    for word, positions in index.items():
        if not isinstance(positions, list):
            continue
        for position in positions:
            if isinstance(position, int) and not isinstance(position, bool) and position >= 0:
                slots[position] = word

    if not slots:
        return ""

    words = [""] * (max(slots) + 1)
    for position, word in slots.items():
        words[position] = word
    return " ".join(words)


def _author_names(authorships: Any) -> tuple[str, ...]:
    if not isinstance(authorships, list):
        return ()

    names: list[str] = []
    for entry in authorships:
        author = entry.get("author") if isinstance(entry, dict) else None
        name = _as_str(author.get("display_name")) if isinstance(author, dict) else None
        if name:
            names.append(name)
    return tuple(names)


def _venue_name(location: Any) -> str | None:
    if not isinstance(location, dict):
        return None
    source = location.get("source")
    if not isinstance(source, dict):
        return None
    return _as_str(source.get("display_name"))


def _as_year(value: Any) -> int | None:
    return value if isinstance(value, int) and not isinstance(value, bool) else None


def _as_str(value: Any) -> str | None:
    return value.strip() if isinstance(value, str) and value.strip() else None
