"""
Composite operations served by the API.

Each resolver combines several cached entities into one response.  Pages
and type listings hydrate every referenced entry concurrently; if one of
them fails the whole response fails, there are no partial pages.  Species
and evolution data are optional and never fail a detail lookup.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List

from ..config import DEFAULT_CATEGORY_MEMBER_CAP
from .cache import AggregationCache, Key
from .errors import NotFoundError
from .schemas import Pokemon, PokemonDetail, PokemonPage, PokemonType


logger = logging.getLogger(__name__)


class CatalogResolvers:
    def __init__(self, cache: AggregationCache, category_member_cap: int = DEFAULT_CATEGORY_MEMBER_CAP) -> None:
        self.cache = cache
        self.category_member_cap = category_member_cap

    async def list_page(self, limit: int = 20, offset: int = 0) -> PokemonPage:
        page = await self.cache.client.fetch_pokemon_page(limit, offset)
        results = await asyncio.gather(*(self.cache.get_item(ref['name']) for ref in page['results']))
        return PokemonPage(
            count=page['count'],
            next=page['next'],
            previous=page['previous'],
            has_next=page['next'] is not None,
            results=list(results),
        )

    async def item_detail(self, key: Key) -> PokemonDetail:
        item = await self.cache.get_item(key)
        species = await self.cache.get_species(item.species_id or item.id)
        chain = None
        if species is not None and species.evolution_chain_url:
            chain = await self.cache.get_evolution_chain(species.evolution_chain_url)
        return PokemonDetail(**item.model_dump(), species=species, evolution_chain=chain)

    async def by_category(self, name: str) -> List[Pokemon]:
        members = await self.cache.client.fetch_type_members(name.strip().lower())
        capped = members[: self.category_member_cap]
        if len(members) > len(capped):
            logger.debug("Type %s has %d members, hydrating first %d", name, len(members), len(capped))
        return list(await asyncio.gather(*(self.cache.get_item(m) for m in capped)))

    async def search(self, query: str) -> List[Pokemon]:
        """Exact id-or-name lookup: one entry on a hit, none on a miss."""
        if not query.strip():
            return []
        try:
            return [await self.cache.get_item(query)]
        except NotFoundError:
            return []

    async def categories(self) -> List[PokemonType]:
        return await self.cache.get_categories()
