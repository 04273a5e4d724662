"""LLM-backed abstract summarization for search results."""

from __future__ import annotations

import logging
import os

from openai import OpenAI

from errors import SummaryUnavailableError
from models import Paper

LLM_BASE_URL = os.getenv("LLM_BASE_URL", "https://api.groq.com/openai/v1")
LLM_MODEL = os.getenv("LLM_MODEL", "llama-3.1-8b-instant")
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.2"))
LLM_MAX_TOKENS = int(os.getenv("LLM_MAX_TOKENS", "256"))
REQUEST_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "30"))

SHORT_ABSTRACT_SENTINEL = "No abstract found in the paper metadata."
MIN_ABSTRACT_CHARS = 40

LOGGER = logging.getLogger(__name__)

SYSTEM_PROMPT = """You summarize scholarly papers for a general audience.
Use ONLY information that is explicitly present in the abstract you are given.
Do not invent methods, results, numbers, datasets or conclusions.
If the abstract does not specify something, say explicitly that it is not specified.
Write 2-3 plain sentences. No lists, no markdown."""


def summary_provider() -> str:
    return os.getenv("SUMMARY_PROVIDER", "openai").strip().lower()


def require_llm_api_key() -> str:
    """Return the credential for the configured provider or fail loudly.

    Called at process start by the CLI and the HTTP app.
    """
    env_name = "ANTHROPIC_API_KEY" if summary_provider() == "anthropic" else "LLM_API_KEY"
    api_key = os.getenv(env_name)
    if not api_key:
        raise RuntimeError(f"{env_name} environment variable is required")
    return api_key


def build_summary_messages(abstract: str) -> list[dict[str, str]]:
    user_prompt = (
        "Summarize the following abstract.\n\n"
        f'Abstract:\n"""\n{abstract}\n"""\n\n'
        "If the abstract is empty or unclear, say: "
        "'No reliable abstract-based summary is possible.'"
    )
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": user_prompt},
    ]


def summarize_abstract(paper: Paper) -> str | None:
    """Summarize one paper's abstract in 2-3 sentences.

    Never raises. Abstracts of 40 characters or fewer get the fixed sentinel
    without calling the model; upstream failures and empty output give None.
    """
    abstract = (paper.abstract or "").strip()
    if len(abstract) <= MIN_ABSTRACT_CHARS:
        LOGGER.debug("Abstract too short to summarize for paper_id=%s", paper.id)
        return SHORT_ABSTRACT_SENTINEL

    messages = build_summary_messages(abstract)
    try:
        content = _generate(messages)
    except SummaryUnavailableError as exc:
        LOGGER.warning("Summary unavailable for paper_id=%s: %s", paper.id, exc)
        return None

    summary = content.strip()
    if not summary:
        LOGGER.info("Model returned an empty summary for paper_id=%s", paper.id)
        return None

    LOGGER.info("Summarized paper_id=%s", paper.id)
    return summary


def _generate(messages: list[dict[str, str]]) -> str:
    """Run one completion on the configured provider.

    Any failure, from a missing key to a malformed response, surfaces as
    SummaryUnavailableError.
    """
    try:
        if summary_provider() == "anthropic":
            from anthropic_client import claude_chat  # noqa: PLC0415 — lazy import

            return claude_chat(
                messages,
                max_tokens=LLM_MAX_TOKENS,
                temperature=LLM_TEMPERATURE,
            )
        return _call_openai(messages)
    except SummaryUnavailableError:
        raise
    except Exception as exc:  # broad to keep one paper's failure local
        raise SummaryUnavailableError(str(exc) or type(exc).__name__) from exc


def _call_openai(messages: list[dict[str, str]]) -> str:
    client = OpenAI(
        api_key=require_llm_api_key(),
        base_url=LLM_BASE_URL,
        timeout=REQUEST_TIMEOUT_SECONDS,
        max_retries=0,
    )

    response = client.chat.completions.create(
        model=LLM_MODEL,
        temperature=LLM_TEMPERATURE,
        max_tokens=LLM_MAX_TOKENS,
        messages=messages,
    )

    try:
        content = response.choices[0].message.content
    except (AttributeError, IndexError, TypeError) as exc:
        raise SummaryUnavailableError("Unexpected completion response shape") from exc
    return content or ""
