"""
Server configuration.

Values are read from the environment (``neodex.main`` calls
``load_dotenv()`` first, so a local ``.env`` file works too).
"""

from __future__ import annotations

import os

from pydantic import BaseModel, Field


DEFAULT_POKEAPI_BASE_URL = "https://pokeapi.co/api/v2"
DEFAULT_CATEGORY_MEMBER_CAP = 20


class Settings(BaseModel):
    """Settings for the proxy and its aggregation cache."""

    pokeapi_base_url: str = DEFAULT_POKEAPI_BASE_URL
    timeout_seconds: float = Field(default=10.0, gt=0)
    # Upper bound on how many members of a type are hydrated per request.
    category_member_cap: int = Field(default=DEFAULT_CATEGORY_MEMBER_CAP, ge=1)
    log_level: str = "INFO"


def load_settings() -> Settings:
    return Settings(
        pokeapi_base_url=os.getenv("POKEAPI_BASE_URL", DEFAULT_POKEAPI_BASE_URL).rstrip("/"),
        timeout_seconds=float(os.getenv("POKEAPI_TIMEOUT_SECONDS", "10.0")),
        category_member_cap=int(os.getenv("NEODEX_CATEGORY_MEMBER_CAP", str(DEFAULT_CATEGORY_MEMBER_CAP))),
        log_level=os.getenv("NEODEX_LOG_LEVEL", "INFO").upper(),
    )
