"""State persistence endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from shared.schemas.state import SaveStateResponse
from shared.schemas.uploads import ErrorResponse

from .. import db

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/state")
async def get_state():
    """Return the stored state blob (a default one on first access)."""
    return db.read_state()


@router.post(
    "/api/state",
    response_model=SaveStateResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def save_state(request: Request):
    """Replace the stored state with the posted object."""
    try:
        payload = await request.json()
    except ValueError:
        payload = None
    if not isinstance(payload, dict):
        return JSONResponse(status_code=400, content={"error": "Expected a JSON object body"})

    state = db.coerce_state(payload)
    try:
        db.write_state(state)
    except OSError:
        logger.exception("Could not write state file")
        return JSONResponse(status_code=500, content={"error": "Could not save state"})
    return SaveStateResponse()
