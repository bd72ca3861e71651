"""Upload endpoint schemas."""

from __future__ import annotations

from pydantic import BaseModel


class UploadResponse(BaseModel):
    """Where an uploaded file was stored."""

    originalName: str
    storedName: str
    path: str


class ErrorResponse(BaseModel):
    error: str
