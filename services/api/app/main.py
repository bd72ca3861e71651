"""FastAPI application for the Timeline Tracker server.

Serves the app bundle, keeps the shared state file and accepts uploads.
No endpoint is authenticated.
"""

from __future__ import annotations

import os
import logging
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from core import storage

from .routers import state, uploads

logger = logging.getLogger(__name__)

APP_VERSION = "0.3.0"

_PROJECT_ROOT = Path(__file__).resolve().parents[3]
PUBLIC_DIR = os.environ.get("PUBLIC_DIR", str(_PROJECT_ROOT / "public"))

GENERIC_ERROR_MESSAGE = "Something went wrong while processing the request."

app = FastAPI(
    title="Timeline Tracker API",
    version=APP_VERSION,
    description="State persistence and file uploads for the timeline tracker",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------
ALLOWED_ORIGINS = os.environ.get(
    "CORS_ORIGINS",
    "http://localhost:3000",
).split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in ALLOWED_ORIGINS],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=3600,
)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------
@app.middleware("http")
async def catch_unhandled(request: Request, call_next):
    """Turn any uncaught handler error into a 500 and keep serving."""
    try:
        return await call_next(request)
    except Exception:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": GENERIC_ERROR_MESSAGE})


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(state.router, tags=["state"])
app.include_router(uploads.router, tags=["uploads"])


# ---------------------------------------------------------------------------
# Health Check
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return {"status": "ok", "version": APP_VERSION}


# ---------------------------------------------------------------------------
# Static files
# ---------------------------------------------------------------------------
@app.get(storage.PUBLIC_PREFIX + "/{stored_name}")
async def get_upload(stored_name: str):
    """Serve a previously uploaded file."""
    target = storage.upload_dir() / stored_name
    if Path(stored_name).name != stored_name or not target.is_file():
        raise HTTPException(status_code=404, detail="Not Found")
    return FileResponse(target)


# Mounted last so the API routes above take precedence.
app.mount("/", StaticFiles(directory=PUBLIC_DIR, html=True, check_dir=False), name="public")
