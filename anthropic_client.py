"""Thin wrapper around the Anthropic Messages API."""

from __future__ import annotations

import logging
import os
from typing import Any

import anthropic

LOGGER = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "30"))


def claude_chat(
    messages: list[dict[str, str]],
    max_tokens: int = 256,
    temperature: float | None = None,
) -> str:
    """Call the Claude API and return the assistant reply as a string.

    Args:
        messages: List of message dicts with "role" and "content" keys.
                  A "system" role message is passed through the API's
                  dedicated system= parameter.
        max_tokens: Hard cap on output tokens.
        temperature: Sampling temperature; the API default when None.
    """
    api_key = os.getenv("ANTHROPIC_API_KEY")
    if not api_key:
        raise RuntimeError("ANTHROPIC_API_KEY environment variable is required")

    claude_model = os.getenv("CLAUDE_MODEL", "claude-3-5-haiku-latest")
    client = anthropic.Anthropic(api_key=api_key, timeout=REQUEST_TIMEOUT_SECONDS, max_retries=0)

    system: str | None = None
    filtered: list[dict[str, Any]] = []
    for msg in messages:
        if msg["role"] == "system":
            system = msg["content"]
        else:
            filtered.append({"role": msg["role"], "content": msg["content"]})

    kwargs: dict[str, Any] = {
        "model": claude_model,
        "max_tokens": max_tokens,
        "messages": filtered,
    }
    if system:
        kwargs["system"] = system
    if temperature is not None:
        kwargs["temperature"] = temperature

    LOGGER.debug("Calling Claude model=%s max_tokens=%s", claude_model, max_tokens)
    response = client.messages.create(**kwargs)
    return "".join(
        block.text for block in response.content if getattr(block, "type", None) == "text"
    )
