"""
Ingestion API Routes

Receives extracted point records and merges them into the ledger.
"""

import json
import logging
from typing import Generator, Literal

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from point_ledger import IngestionEngine, MalformedBatchError, error_response

from ..settings import get_engine_context

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ingest"])


class RecordOutcome(BaseModel):
    """Outcome for one submitted record."""

    status: Literal["added", "skipped"]


class IngestResponse(BaseModel):
    """Successful ingestion response."""

    status: Literal["success"]
    message: str
    addedCount: int
    results: list[RecordOutcome]


class ErrorResponse(BaseModel):
    """Failed ingestion response."""

    status: Literal["error"]
    message: str


def get_engine() -> Generator[IngestionEngine, None, None]:
    """Get ingestion engine for FastAPI dependency injection."""
    with get_engine_context() as engine:
        yield engine


@router.post(
    "/ingest",
    response_model=IngestResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def ingest(
    request: Request,
    engine: IngestionEngine = Depends(get_engine),
):
    """Merge a JSON array of records into the per-site ledger.

    The body is read as raw text so clients posting text/plain (to avoid a
    CORS preflight) are accepted.

    Returns:
        Added count and one outcome per record, in request order
    """
    body = await request.body()

    try:
        batch = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning(f"Rejected ingest body: {e}")
        return JSONResponse(status_code=400, content=error_response(f"Invalid JSON: {e}"))

    try:
        result = await run_in_threadpool(engine.ingest, batch)
    except MalformedBatchError as e:
        logger.warning(f"Rejected ingest batch: {e.message}")
        return JSONResponse(status_code=400, content=error_response(e.message))
    except Exception as e:
        logger.error(f"Ingestion failed: {e}")
        return JSONResponse(status_code=500, content=error_response(str(e)))

    return IngestResponse(**result.to_response())
