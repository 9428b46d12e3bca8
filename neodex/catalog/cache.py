"""
Read-through aggregation cache in front of ``PokeAPIClient``.

One ``AggregationCache`` is built when the application starts and shared by
every request.  Entries are never evicted and never refreshed: PokeAPI data
is effectively static, and the whole catalogue fits comfortably in memory.
Failed fetches are not cached, so a later request tries again.

There is no locking.  Two requests missing on the same key at the same time
may both go upstream; the second write stores an equal object under the same
key.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Dict, List, Optional, Union

from .errors import AuxiliaryDataUnavailable, UpstreamFetchError
from .pokeapi_client import PokeAPIClient, id_from_url
from .schemas import EvolutionChain, EvolutionMember, Pokemon, PokemonType, Species


logger = logging.getLogger(__name__)

_CHAIN_ID = re.compile(r'/evolution-chain/(\d+)/?')

Key = Union[int, str]


def normalize_key(key: Key) -> str:
    """Lookup key for an id or a name: ``25``, ``"025"`` and ``" 25 "`` all give ``"25"``."""
    text = str(key).strip().lower()
    if text.isdigit():
        return str(int(text))
    return text


def chain_id_from_url(url: Optional[str]) -> Optional[int]:
    if not url:
        return None
    m = _CHAIN_ID.search(url)
    return int(m.group(1)) if m else None


class AggregationCache:
    def __init__(self, client: PokeAPIClient) -> None:
        self.client = client
        self._items: Dict[str, Pokemon] = {}
        self._species: Dict[str, Species] = {}
        self._chains: Dict[int, EvolutionChain] = {}
        self._categories: Optional[List[PokemonType]] = None

    async def get_item(self, key: Key) -> Pokemon:
        """Return the entry for an id or name, fetching it on a miss.

        The fetched entry is stored under both its id and its name.
        Raises ``UpstreamFetchError`` (``NotFoundError`` on a 404).
        """
        nkey = normalize_key(key)
        cached = self._items.get(nkey)
        if cached is not None:
            return cached
        logger.debug("Cache miss for item %s", nkey)
        item = await self.client.fetch_pokemon(nkey)
        self._items[str(item.id)] = item
        self._items[item.name.lower()] = item
        self._items.setdefault(nkey, item)
        return item

    async def get_categories(self) -> List[PokemonType]:
        if self._categories is None:
            self._categories = await self.client.fetch_types()
        return list(self._categories)

    async def get_species(self, key: Key) -> Optional[Species]:
        """Species for an id or name, or ``None`` when it cannot be fetched."""
        nkey = normalize_key(key)
        cached = self._species.get(nkey)
        if cached is not None:
            return cached
        try:
            species = await self._fetch_species(nkey)
        except AuxiliaryDataUnavailable as exc:
            logger.warning("%s", exc)
            return None
        self._species[nkey] = species
        self._species[str(species.id)] = species
        self._species[species.name.lower()] = species
        return species

    async def _fetch_species(self, key: str) -> Species:
        try:
            return await self.client.fetch_species(key)
        except UpstreamFetchError as exc:
            raise AuxiliaryDataUnavailable(key, exc) from exc

    async def get_evolution_chain(self, chain_ref: Optional[str]) -> Optional[EvolutionChain]:
        """Resolve the chain a species points at, or ``None``.

        ``chain_ref`` is the species' ``evolution_chain`` url; ``None`` is
        returned when no chain id can be read from it or when any part of
        the chain cannot be fetched.
        """
        chain_id = chain_id_from_url(chain_ref)
        if chain_id is None:
            return None
        cached = self._chains.get(chain_id)
        if cached is not None:
            return cached
        try:
            chain = await self._build_chain(chain_id)
        except AuxiliaryDataUnavailable as exc:
            logger.warning("%s", exc)
            return None
        self._chains[chain_id] = chain
        return chain

    async def _build_chain(self, chain_id: int) -> EvolutionChain:
        key = f"evolution-chain/{chain_id}"
        try:
            data = await self.client.fetch_evolution_chain(chain_id)
        except UpstreamFetchError as exc:
            raise AuxiliaryDataUnavailable(key, exc) from exc

        root = data.get('chain')
        level: List[Dict[str, Any]] = [root] if isinstance(root, dict) else []
        stages: List[List[EvolutionMember]] = []
        while level:
            try:
                items = await asyncio.gather(*(self.get_item(_member_key(node)) for node in level))
            except (UpstreamFetchError, ValueError) as exc:
                raise AuxiliaryDataUnavailable(key, exc) from exc
            stages.append([EvolutionMember(id=i.id, name=i.name, sprites=i.sprites) for i in items])
            level = [
                child
                for node in level
                for child in (node.get('evolves_to') or [])
                if isinstance(child, dict)
            ]
        return EvolutionChain(id=chain_id, stages=stages)

    def stats(self) -> Dict[str, int]:
        return {
            'items': len({i.id for i in self._items.values()}),
            'species': len({s.id for s in self._species.values()}),
            'evolution_chains': len(self._chains),
            'categories': len(self._categories or []),
        }


def _member_key(node: Dict[str, Any]) -> Key:
    # Species names differ from the default entry name for some forms
    # (deoxys vs deoxys-normal); the species id always matches.
    species = node.get('species') or {}
    species_id = id_from_url(species.get('url'))
    if species_id is not None:
        return species_id
    name = species.get('name')
    if not name:
        raise ValueError("evolution node without species")
    return name
