"""API routes for cleaned route playback data."""

import asyncio
import logging
from collections.abc import Awaitable
from typing import Annotated, Any, TypeVar

from fastapi import APIRouter, HTTPException, Query, Request

from config import get_route_cache_ttl_seconds
from core.api import api_route
from core.exceptions import ValidationException
from date_utils import format_timestamp, get_current_utc_time
from trace_cleaning import PipelineOptions, ResultCache, TracePipeline, TraceStore

logger = logging.getLogger(__name__)
router = APIRouter()

store = TraceStore()
pipeline = TracePipeline()
result_cache = ResultCache(get_route_cache_ttl_seconds())

DISCONNECT_POLL_SECONDS = 0.5
CLIENT_CLOSED_REQUEST = 499

T = TypeVar("T")


async def run_until_disconnect(
    request: Request,
    work: Awaitable[T],
    *,
    poll_interval: float = DISCONNECT_POLL_SECONDS,
) -> T:
    """Await ``work``, cancelling it if the client goes away first."""
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info("Client disconnected, cancelling %s", request.url.path)
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)
                raise HTTPException(
                    status_code=CLIENT_CLOSED_REQUEST,
                    detail="Client closed request",
                )
    finally:
        if not task.done():
            task.cancel()


@router.get("/api/route/{date}", response_model=dict[str, Any])
@api_route(logger)
async def get_route(
    request: Request,
    date: str,
    snap: Annotated[str | None, Query()] = None,
    smooth: Annotated[str | None, Query()] = None,
):
    """Return the stored trace for ``date`` after cleaning."""
    options = PipelineOptions.from_query(snap, smooth)

    cached = result_cache.get(date, options)
    if cached is not None:
        return cached.to_response()

    document = await store.load(date)
    coordinates = document.get("coordinates") if isinstance(document, dict) else None
    if not isinstance(coordinates, list):
        msg = "Invalid coordinates format"
        raise ValidationException(msg, {"type": type(coordinates).__name__})

    result = await run_until_disconnect(
        request,
        pipeline.run(coordinates, options, label=date),
    )

    if result.snap_error is None:
        result_cache.set(date, options, result)
    return result.to_response()


@router.get("/api/health")
async def health_check():
    """Liveness check; independent of storage and the map matching service."""
    return {"status": "OK", "timestamp": format_timestamp(get_current_utc_time())}
