"""File upload endpoint."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, File, UploadFile
from fastapi.responses import JSONResponse

from core.storage import save_upload
from shared.schemas.uploads import ErrorResponse, UploadResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def upload_file(file: Optional[UploadFile] = File(None)):
    """Store a single uploaded file and return where it can be fetched."""
    if file is None or not file.filename:
        return JSONResponse(status_code=400, content={"error": "No file received."})

    content = await file.read()
    return UploadResponse(**save_upload(file.filename, content))
