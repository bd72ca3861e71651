"""Local file storage for uploads.

Files land in ``LOCAL_UPLOAD_DIR`` under a generated, collision-resistant
name and are served back from ``/uploads/<stored name>``.  There is no
deduplication, size/type check or expiry.
"""

from __future__ import annotations

import logging
import os
import random
import re
import time
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

LOCAL_UPLOAD_DIR = os.environ.get("LOCAL_UPLOAD_DIR", "uploads")
PUBLIC_PREFIX = "/uploads"

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


def upload_dir() -> Path:
    """Return the upload directory, creating it if needed."""
    path = Path(LOCAL_UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def sanitize_basename(filename: str) -> str:
    """Replace every character outside ``[A-Za-z0-9_-]`` with ``-``.

    Examples:
        "my report" -> "my-report"
        "año 2024"  -> "a-o-2024"
    """
    return _UNSAFE_CHARS.sub("-", filename)


def stored_name_for(
    original_name: str,
    timestamp_ms: Optional[int] = None,
    rand: Optional[int] = None,
) -> str:
    """Build ``<base>-<ms>-<random><ext>`` from an uploaded file name."""
    name = Path(original_name or "upload").name
    stem, ext = os.path.splitext(name)
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    if rand is None:
        rand = round(random.random() * 1e9)
    return f"{sanitize_basename(stem)}-{timestamp_ms}-{rand}{ext}"


def public_path(stored_name: str) -> str:
    return f"{PUBLIC_PREFIX}/{stored_name}"


def save_upload(original_name: str, content: bytes) -> Dict[str, str]:
    """Write ``content`` under a generated name and describe the result."""
    stored = stored_name_for(original_name)
    target = upload_dir() / stored
    target.write_bytes(content)
    logger.info("Saved upload %r as %s (%d bytes)", original_name, target, len(content))
    return {
        "originalName": original_name,
        "storedName": stored,
        "path": public_path(stored),
    }
