"""CLI entrypoint for the paper search and enrichment pipeline."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys

from dotenv import load_dotenv

from errors import InvalidRequestError, SearchUnavailableError
from llm_client import require_llm_api_key
from models import EnrichedPaper
from pipeline import handle_search


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(description="Search OpenAlex and enrich papers with citations and summaries")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    commands = parser.add_subparsers(dest="command", required=True)

    search = commands.add_parser("search", help="Run one query and print enriched papers")
    search.add_argument("query", help="Free-text research topic")
    search.add_argument("--limit", type=int, default=None, help="Number of candidate papers to fetch (default: 8)")
    search.add_argument(
        "--no-summary",
        action="store_true",
        help="Skip LLM summaries; no LLM credential is needed",
    )
    search.add_argument("--format", choices=["json", "text"], default="json", help="Output format")

    serve = commands.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=os.getenv("HOST", "127.0.0.1"))
    serve.add_argument("--port", type=int, default=int(os.getenv("PORT", "8000")))

    return parser.parse_args(argv)


def render_text(papers: list[EnrichedPaper]) -> str:
    """Human-readable listing: title, APA citation and summary per paper."""
    if not papers:
        return "No papers found."

    blocks = []
    for index, item in enumerate(papers, start=1):
        lines = [f"{index}. {item.paper.title}", f"   {item.apa_citation}"]
        if item.summary:
            lines.append(f"   Summary: {item.summary}")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def run_search(query: str, limit: int | None, summarize: bool, output_format: str) -> int:
    """Run one query and print the result; returns a process exit status."""
    try:
        papers = handle_search(query, limit=limit, summarize=summarize)
    except InvalidRequestError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except SearchUnavailableError as exc:
        logging.error("Search failed: %s", exc)
        return 1

    if output_format == "text":
        print(render_text(papers))
    else:
        print(json.dumps({"papers": [p.to_dict() for p in papers]}, indent=2, ensure_ascii=False))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Initialize config and execute the requested command."""
    load_dotenv()
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )

    if args.command == "serve":
        import uvicorn  # noqa: PLC0415

        require_llm_api_key()
        uvicorn.run("server:app", host=args.host, port=args.port)
        return 0

    summarize = not args.no_summary
    if summarize:
        require_llm_api_key()
    return run_search(args.query, args.limit, summarize, args.format)


if __name__ == "__main__":
    sys.exit(main())
