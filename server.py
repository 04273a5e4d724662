"""FastAPI application exposing the paper search pipeline.

Run:
    python main.py serve
    uvicorn server:app --reload
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from errors import InvalidRequestError
from llm_client import require_llm_api_key
from pipeline import handle_search

LOGGER = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Summaries need the LLM credential; refuse to start without it.
    require_llm_api_key()
    LOGGER.info("Paper search API ready")
    yield


def create_app() -> FastAPI:
    app = FastAPI(title="Paper Search", lifespan=lifespan)

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/search")
    async def search(request: Request) -> JSONResponse:
        body = await _json_body(request)
        query = str(body.get("query") or "").strip()

        try:
            papers = await run_in_threadpool(handle_search, query)
        except InvalidRequestError as exc:
            return JSONResponse({"error": str(exc)}, status_code=400)
        except Exception:
            LOGGER.exception("Error in /api/search")
            return JSONResponse({"error": "Internal server error"}, status_code=500)

        return JSONResponse({"papers": [paper.to_dict() for paper in papers]})

    return app


async def _json_body(request: Request) -> dict[str, Any]:
    """Parse the request body, treating malformed or non-object JSON as empty."""
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


app = create_app()
