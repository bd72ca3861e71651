"""Pydantic v2 schemas shared between the API and its clients."""

from .state import *  # noqa: F401,F403
from .uploads import *  # noqa: F401,F403
