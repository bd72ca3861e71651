"""State endpoint schemas for API contracts."""

from __future__ import annotations

from pydantic import BaseModel


class SaveStateResponse(BaseModel):
    """Reply to a successful ``POST /api/state``."""

    success: bool = True
