from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import Response

from api.config import log_level, respect_bbox_filenames, subtrahend_sources
from api.stream import DifferenceAssembler, assemble_async
from documents.loaders import flatten_paths
from engine.errors import DifferenceError, MalformedJsonError
from engine.types import DifferenceOptions
from logging_config import setup_logging

setup_logging(log_level())
logger = logging.getLogger(__name__)

app = FastAPI(title="geojson-difference")

WARNINGS_HEADER = "X-Geojson-Difference-Warnings"
REQUEST_SOURCE = "request body"


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/difference")
async def difference(request: Request):
    """
    Subtract the configured sources from the GeoJSON request body.

    The body is streamed in as it arrives and parsed once complete.
    """
    try:
        options = DifferenceOptions(
            subtrahend_sources=flatten_paths(subtrahend_sources()),
            respect_bbox_filenames=respect_bbox_filenames(),
        )
        assembler = DifferenceAssembler(options, source=REQUEST_SOURCE)
        body = await assemble_async(request.stream(), assembler)
    except MalformedJsonError as e:
        if e.source != REQUEST_SOURCE:
            # Broken configured source, not the request body.
            logger.error("Difference failed: %s", e)
            raise HTTPException(status_code=500, detail=str(e)) from e
        raise HTTPException(status_code=400, detail=str(e)) from e
    except DifferenceError as e:
        logger.error("Difference failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e)) from e

    return Response(
        content=body,
        media_type="application/geo+json",
        headers={WARNINGS_HEADER: str(len(assembler.diagnostics))},
    )
