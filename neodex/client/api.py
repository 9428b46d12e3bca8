"""
Access to the NeoDex API from the browser-side layer.

The initial load walks ``/api/pokemon/list`` one page at a time, waiting
for each page before asking for the next, so a cold proxy is never hit
with dozens of concurrent hydrations.  It stops at ``bulk_load_cap``
entries or when the API reports no next page, whichever comes first.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx

from ..catalog.schemas import Pokemon, PokemonDetail, PokemonType
from .config import ClientConfig


logger = logging.getLogger(__name__)


class ClientLoadError(Exception):
    """A request from the client to the API failed."""


class NeoDexApiClient:
    def __init__(self, config: ClientConfig, http: Optional[httpx.AsyncClient] = None) -> None:
        self.config = config
        self._http = http or httpx.AsyncClient(base_url=config.api_base_url)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _get(self, path: str, **params: Any) -> Any:
        try:
            response = await self._http.get(path, params=params or None)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            detail = _error_detail(exc.response)
            logger.error("GET %s failed with %s: %s", path, exc.response.status_code, detail)
            raise ClientLoadError(detail) from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("GET %s failed: %s", path, exc)
            raise ClientLoadError(f"Request to {path} failed") from exc

    async def load_all(self) -> List[Pokemon]:
        cap = self.config.bulk_load_cap
        page_size = self.config.page_size
        entries: List[Pokemon] = []
        offset = 0
        while offset < cap:
            limit = min(page_size, cap - offset)
            data = await self._get("/api/pokemon/list", limit=limit, offset=offset)
            entries.extend(Pokemon.model_validate(r) for r in data.get("results") or [])
            if not data.get("next"):
                break
            offset += limit
        logger.info("Loaded %d entries", len(entries))
        return entries

    async def load_types(self) -> List[str]:
        data = await self._get("/api/pokemon/types/all")
        return sorted(PokemonType.model_validate(t).name for t in data)

    async def fetch_detail(self, pokemon_id: int) -> PokemonDetail:
        data = await self._get(f"/api/pokemon/{pokemon_id}")
        return PokemonDetail.model_validate(data)


def _error_detail(response: httpx.Response) -> str:
    try:
        detail = response.json().get("detail")
    except (ValueError, AttributeError):
        detail = None
    return str(detail or f"HTTP {response.status_code}")
