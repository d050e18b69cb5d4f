# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_cui_search

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from coreason_cui_search.config import SearchSettings
from coreason_cui_search.exceptions import InvalidRequest, RetrievalFailure
from coreason_cui_search.pipeline import SearchContext
from coreason_cui_search.schemas import SearchRequest
from coreason_cui_search.utils.logger import logger


# Lifespan Management
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager to connect to the concept index on startup.
    """
    try:
        settings = SearchSettings.from_env()
        logger.info(f"Initializing CUI Search Server against {settings.es_url}/{settings.index_name}")
        SearchContext.initialize(settings)
        logger.info("CUI Search Engine Loaded Successfully.")
    except Exception as e:
        logger.exception("Failed to initialize CUI Search Engine.")
        # We raise to ensure the server doesn't start in a broken state
        raise RuntimeError(f"Server initialization failed: {e}") from e

    yield

    logger.info("Shutting down CUI Search Server.")


app = FastAPI(title="Coreason CUI Search API", lifespan=lifespan)


@app.exception_handler(InvalidRequest)
async def invalid_request_handler(request: Request, exc: InvalidRequest) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": exc.message, "details": exc.details})


@app.exception_handler(RetrievalFailure)
async def retrieval_failure_handler(request: Request, exc: RetrievalFailure) -> JSONResponse:
    logger.error(f"Search failed for {request.url.path}?{request.url.query}: {exc.details}")
    return JSONResponse(status_code=500, content={"error": exc.message, "details": exc.details})


@app.get("/health")
def health_check() -> JSONResponse:
    """
    Health check endpoint. Returns status ready if the index answers.
    """
    ctx = SearchContext.get_instance()
    if not ctx.client.ping():
        return JSONResponse(status_code=503, content={"status": "unavailable"})
    return JSONResponse(content={"status": "ready"})


@app.get("/api/search")
def search(
    q: Optional[str] = None,
    page: Optional[str] = None,
    size: Optional[str] = None,
    fuzzy: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Search concepts by free text. Returns `{total, results}` for the requested page.

    Parameters are read leniently: non-numeric page/size use their defaults.
    """
    ctx = SearchContext.get_instance()
    request = SearchRequest.from_params(q, page, size, fuzzy, default_size=ctx.settings.default_page_size)
    return ctx.engine.search(request).to_response()
