"""Identifier generation for every entity in the state tree."""

from __future__ import annotations

import random
import time
import uuid

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    if value <= 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def new_id() -> str:
    """Return a fresh UUID4 string."""
    return str(uuid.uuid4())


def short_id() -> str:
    """Return a compact ``id-<ms>-<rand>`` identifier.

    Used where a readable token is nicer than a UUID (share slugs).
    """
    stamp = _to_base36(int(time.time() * 1000))
    rand = "".join(random.choice(_BASE36) for _ in range(6))
    return f"id-{stamp}-{rand}"
