"""APA and BibTeX citation formatting (pure, no I/O)."""

from __future__ import annotations

import re

from models import NO_TITLE, Paper

DOI_RESOLVER = "https://doi.org/"

_KEY_UNSAFE_RE = re.compile(r"[^A-Za-z0-9]")


def _inline_authors(authors: tuple[str, ...]) -> str:
    if not authors:
        return ""
    if len(authors) == 1:
        return authors[0]
    if len(authors) == 2:
        return f"{authors[0]} & {authors[1]}"
    return f"{authors[0]} et al."


def format_apa(paper: Paper) -> str:
    """Format an APA-style reference line.

    Missing fields degrade to "(n.d.).", "[No title]" or an empty segment.
    """
    authors = _inline_authors(paper.authors)
    year = f"({paper.year})." if paper.year is not None else "(n.d.)."
    title = paper.title or NO_TITLE
    venue = f" {paper.venue}" if paper.venue else ""
    if paper.doi:
        locator = f" {DOI_RESOLVER}{paper.doi}"
    elif paper.url:
        locator = f" {paper.url}"
    else:
        locator = ""

    return f"{authors} {year} {title}.{venue}{locator}"


def bibtex_key(paper: Paper) -> str:
    """First author's surname plus year, reduced to ASCII letters and digits.

    Two papers by the same surname in the same year share a key.
    """
    tokens = paper.authors[0].split() if paper.authors else []
    surname = tokens[-1] if tokens else "key"
    year = str(paper.year) if paper.year is not None else ""
    return _KEY_UNSAFE_RE.sub("", surname + year)


def format_bibtex(paper: Paper) -> str:
    """Format a ``@article`` BibTeX entry, omitting lines for absent fields."""
    lines = [
        f"@article{{{bibtex_key(paper)},",
        f"  title   = {{{paper.title or ''}}},",
    ]
    if paper.authors:
        lines.append(f"  author  = {{{' and '.join(paper.authors)}}},")
    if paper.venue:
        lines.append(f"  journal = {{{paper.venue}}},")
    if paper.year is not None:
        lines.append(f"  year    = {{{paper.year}}},")
    if paper.doi:
        lines.append(f"  doi     = {{{paper.doi}}},")
    if paper.url:
        lines.append(f"  url     = {{{paper.url}}},")
    lines.append("}")

    return "\n".join(lines)
