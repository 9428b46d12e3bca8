"""
Configuration for the browser-side layer.
"""

from pathlib import Path

from pydantic import BaseModel, Field
from typing_extensions import Literal


RevealMode = Literal["scroll", "pages"]


class ClientConfig(BaseModel):
    api_base_url: str = "http://127.0.0.1:8000"
    # Entries per list request and per revealed slice.
    page_size: int = Field(default=20, ge=1, le=100)
    # The initial load stops here even when the API reports more entries.
    bulk_load_cap: int = Field(default=500, ge=1)
    # Distance from the bottom of the grid, in pixels, that triggers a reveal.
    scroll_threshold_px: int = Field(default=200, ge=0)
    reveal_mode: RevealMode = "scroll"
    storage_dir: Path = Path.home() / ".neodex"
