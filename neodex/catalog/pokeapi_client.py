"""
PokeAPI integration for the catalogue.  This module is the only place that
talks to the upstream REST source.  It exposes a ``PokeAPIClient`` with one
coroutine per upstream resource:

* ``fetch_pokemon()``: a single entry by id or name, mapped into the
  ``Pokemon`` schema.
* ``fetch_pokemon_page()``: one page of name/url references together with
  ``count``, ``next`` and ``previous``.
* ``fetch_species()``, ``fetch_types()``, ``fetch_type_members()`` and
  ``fetch_evolution_chain()`` for the auxiliary resources.

Nothing here caches; ``cache.AggregationCache`` sits in front of the client.
PokeAPI documents are large and many nested fields are optional (sprites,
artwork, hidden abilities, the species' chain reference), so the ``parse_*``
helpers null-guard every level instead of indexing blindly.
"""

from __future__ import annotations

import logging
import re
import urllib.parse
from typing import Any, Dict, List, Optional

import httpx

from ..config import DEFAULT_POKEAPI_BASE_URL
from .errors import NotFoundError, UpstreamFetchError
from .schemas import Ability, Pokemon, PokemonType, Species, Sprites, Stat


logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    'User-Agent': 'neodex/1.0',
    'Accept': 'application/json',
}

_TRAILING_ID = re.compile(r'/(\d+)/?$')
# PokeAPI resource names are lower-case slugs; ids are plain digits.
_RESOURCE_KEY = re.compile(r'^[a-z0-9-]+$')


def id_from_url(url: Optional[str]) -> Optional[int]:
    """Return the numeric id at the end of a PokeAPI resource url."""
    if not url or not isinstance(url, str):
        return None
    m = _TRAILING_ID.search(url)
    return int(m.group(1)) if m else None


def resource_path(collection: str, key: object) -> str:
    """Build ``collection/key`` for a single resource.

    Keys that cannot name a PokeAPI resource (``"."``, ``".."``, slashes,
    spaces) raise ``NotFoundError`` without a request; otherwise the URL
    would collapse onto the collection index.
    """
    text = str(key)
    if not _RESOURCE_KEY.match(text):
        raise NotFoundError(text)
    return f"{collection}/{urllib.parse.quote(text, safe='')}"


def _dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _str_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def parse_sprites(raw: Any) -> Sprites:
    sprites = _dict(raw)
    artwork = _dict(_dict(sprites.get('other')).get('official-artwork'))
    return Sprites(
        artwork=_str_or_none(artwork.get('front_default')),
        artwork_shiny=_str_or_none(artwork.get('front_shiny')),
        sprite=_str_or_none(sprites.get('front_default')),
        sprite_shiny=_str_or_none(sprites.get('front_shiny')),
    )


def parse_pokemon(data: Dict[str, Any]) -> Pokemon:
    """Map a ``/pokemon/{key}`` document into a ``Pokemon``."""
    types: List[str] = []
    # Upstream lists types with an explicit slot; keep slot order.
    raw_types = sorted(
        (t for t in _list(data.get('types')) if isinstance(t, dict)),
        key=lambda t: t.get('slot') or 0,
    )
    for entry in raw_types:
        name = _dict(entry.get('type')).get('name')
        if isinstance(name, str):
            types.append(name)

    stats: List[Stat] = []
    for entry in _list(data.get('stats')):
        if not isinstance(entry, dict):
            continue
        name = _dict(entry.get('stat')).get('name')
        value = entry.get('base_stat')
        if isinstance(name, str) and isinstance(value, int):
            stats.append(Stat(name=name, base_stat=value))

    abilities: List[Ability] = []
    for entry in _list(data.get('abilities')):
        if not isinstance(entry, dict):
            continue
        name = _dict(entry.get('ability')).get('name')
        if isinstance(name, str):
            abilities.append(Ability(name=name, is_hidden=bool(entry.get('is_hidden'))))

    return Pokemon(
        id=int(data['id']),
        name=str(data['name']),
        types=types,
        stats=stats,
        abilities=abilities,
        sprites=parse_sprites(data.get('sprites')),
        height=int(data.get('height') or 0),
        weight=int(data.get('weight') or 0),
        species_id=id_from_url(_dict(data.get('species')).get('url')),
    )


def parse_species(data: Dict[str, Any]) -> Species:
    genus = None
    for entry in _list(data.get('genera')):
        if not isinstance(entry, dict):
            continue
        if _dict(entry.get('language')).get('name') == 'en':
            genus = _str_or_none(entry.get('genus'))
            break
    return Species(
        id=int(data['id']),
        name=str(data['name']),
        evolution_chain_url=_str_or_none(_dict(data.get('evolution_chain')).get('url')),
        generation=_str_or_none(_dict(data.get('generation')).get('name')),
        genus=genus,
        is_legendary=bool(data.get('is_legendary')),
        is_mythical=bool(data.get('is_mythical')),
    )


class PokeAPIClient:
    """Thin async wrapper around the PokeAPI v2 REST endpoints.

    A single ``httpx.AsyncClient`` is shared for the lifetime of the
    application so connections are pooled.  Pass ``http`` to inject a
    preconfigured client (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str = DEFAULT_POKEAPI_BASE_URL,
        timeout_seconds: float = 10.0,
        http: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip('/')
        self._http = http or httpx.AsyncClient(timeout=timeout_seconds, headers=DEFAULT_HEADERS)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def get_json(self, path: str, key: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """GET ``path`` below the base url and return the decoded document.

        Raises ``NotFoundError`` for a 404 and ``UpstreamFetchError`` for
        network errors, any other error status or a non-JSON body.  ``key``
        is the lookup key reported in the error.
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = await self._http.get(url, params=params)
        except httpx.HTTPError as exc:
            logger.error("PokeAPI request to %s failed: %s", url, exc)
            raise UpstreamFetchError(key, f"Failed to fetch {key}: {exc}") from exc
        if response.status_code == 404:
            logger.info("PokeAPI returned 404 for %s", url)
            raise NotFoundError(key)
        if response.status_code >= 400:
            logger.error("PokeAPI request to %s returned status %s", url, response.status_code)
            raise UpstreamFetchError(
                key,
                f"Failed to fetch {key}: upstream returned {response.status_code}",
                status_code=response.status_code,
            )
        try:
            data = response.json()
        except ValueError as exc:
            logger.error("PokeAPI returned invalid JSON for %s", url)
            raise UpstreamFetchError(key, f"Failed to fetch {key}: invalid JSON") from exc
        if not isinstance(data, dict):
            raise UpstreamFetchError(key, f"Failed to fetch {key}: unexpected document")
        return data

    async def fetch_pokemon(self, key: str) -> Pokemon:
        data = await self.get_json(resource_path("pokemon", key), key)
        try:
            return parse_pokemon(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise UpstreamFetchError(key, f"Failed to fetch {key}: malformed document") from exc

    async def fetch_pokemon_page(self, limit: int, offset: int) -> Dict[str, Any]:
        """Return the raw reference page: ``count``, ``next``, ``previous``, ``results``."""
        data = await self.get_json("pokemon", f"list?limit={limit}&offset={offset}", {'limit': limit, 'offset': offset})
        return {
            'count': int(data.get('count') or 0),
            'next': _str_or_none(data.get('next')),
            'previous': _str_or_none(data.get('previous')),
            'results': [r for r in _list(data.get('results')) if isinstance(r, dict) and r.get('name')],
        }

    async def fetch_species(self, key: str) -> Species:
        data = await self.get_json(resource_path("pokemon-species", key), key)
        try:
            return parse_species(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise UpstreamFetchError(key, f"Failed to fetch species {key}: malformed document") from exc

    async def fetch_types(self) -> List[PokemonType]:
        # PokeAPI pages /type too, but the full set fits in a single page.
        data = await self.get_json("type", "types", {'limit': 100})
        return [
            PokemonType(name=r['name'], url=r.get('url') or '')
            for r in _list(data.get('results'))
            if isinstance(r, dict) and isinstance(r.get('name'), str)
        ]

    async def fetch_type_members(self, name: str) -> List[str]:
        """Return member names of a type in upstream order."""
        data = await self.get_json(resource_path("type", name), name)
        members: List[str] = []
        for entry in _list(data.get('pokemon')):
            member = _dict(_dict(entry).get('pokemon')).get('name')
            if isinstance(member, str):
                members.append(member)
        return members

    async def fetch_evolution_chain(self, chain_id: int) -> Dict[str, Any]:
        return await self.get_json(f"evolution-chain/{chain_id}", f"evolution-chain/{chain_id}")
