"""Pytest fixtures: an in-memory PokeAPI served through httpx.MockTransport."""

from typing import Any, Dict, List, Optional, Sequence

import httpx
import pytest

from neodex.catalog.cache import AggregationCache
from neodex.catalog.pokeapi_client import PokeAPIClient
from neodex.catalog.resolvers import CatalogResolvers
from neodex.catalog.schemas import Pokemon, Sprites, Stat


BASE_URL = "https://pokeapi.test/api/v2"
STAT_NAMES = ("hp", "attack", "defense", "special-attack", "special-defense", "speed")


def pokemon_doc(
    pokemon_id: int,
    name: str,
    types: Sequence[str] = ("normal",),
    stats: Sequence[int] = (50, 50, 50, 50, 50, 50),
    hidden_ability: Optional[str] = None,
    species_id: Optional[int] = None,
) -> Dict[str, Any]:
    abilities = [{"ability": {"name": f"{name}-ability"}, "is_hidden": False, "slot": 1}]
    if hidden_ability:
        abilities.append({"ability": {"name": hidden_ability}, "is_hidden": True, "slot": 3})
    return {
        "id": pokemon_id,
        "name": name,
        "height": 7,
        "weight": 69,
        "species": {"name": name, "url": f"{BASE_URL}/pokemon-species/{species_id or pokemon_id}/"},
        "types": [{"slot": i + 1, "type": {"name": t, "url": ""}} for i, t in enumerate(types)],
        "stats": [{"base_stat": v, "effort": 0, "stat": {"name": n}} for n, v in zip(STAT_NAMES, stats)],
        "abilities": abilities,
        "sprites": {
            "front_default": f"https://img.test/{pokemon_id}.png",
            "front_shiny": f"https://img.test/shiny/{pokemon_id}.png",
            "other": {
                "official-artwork": {
                    "front_default": f"https://img.test/art/{pokemon_id}.png",
                    "front_shiny": f"https://img.test/art/shiny/{pokemon_id}.png",
                }
            },
        },
    }


def species_doc(pokemon_id: int, name: str, chain_id: Optional[int] = None) -> Dict[str, Any]:
    return {
        "id": pokemon_id,
        "name": name,
        "is_legendary": False,
        "is_mythical": False,
        "generation": {"name": "generation-i", "url": ""},
        "genera": [{"genus": "Test Pokémon", "language": {"name": "en"}}],
        "evolution_chain": {"url": f"{BASE_URL}/evolution-chain/{chain_id}/"} if chain_id else None,
    }


def chain_node(pokemon_id: int, name: str, evolves_to: Sequence[Dict[str, Any]] = ()) -> Dict[str, Any]:
    return {
        "species": {"name": name, "url": f"{BASE_URL}/pokemon-species/{pokemon_id}/"},
        "evolves_to": list(evolves_to),
        "is_baby": False,
    }


def make_pokemon(pokemon_id: int, name: str, types: Sequence[str] = ("normal",), stats: Sequence[int] = (10,)) -> Pokemon:
    return Pokemon(
        id=pokemon_id,
        name=name,
        types=list(types),
        stats=[Stat(name=n, base_stat=v) for n, v in zip(STAT_NAMES, stats)],
        sprites=Sprites(
            artwork=f"https://img.test/art/{pokemon_id}.png",
            artwork_shiny=f"https://img.test/art/shiny/{pokemon_id}.png",
        ),
    )


class FakePokeAPI:
    """Serves canned documents by path and records every request."""

    def __init__(self) -> None:
        self.routes: Dict[str, Any] = {}
        self.calls: List[str] = []

    def add(self, path: str, doc: Any, status: int = 200) -> None:
        self.routes[path] = (status, doc)

    def add_pokemon(self, pokemon_id: int, name: str, **kwargs: Any) -> Dict[str, Any]:
        doc = pokemon_doc(pokemon_id, name, **kwargs)
        self.add(f"pokemon/{pokemon_id}", doc)
        self.add(f"pokemon/{name}", doc)
        return doc

    def count(self, path: str) -> int:
        return self.calls.count(path)

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.split("/api/v2/", 1)[-1].strip("/")
        self.calls.append(path)
        if path not in self.routes:
            return httpx.Response(404, text="Not Found")
        status, doc = self.routes[path]
        if isinstance(doc, Exception):
            raise doc
        return httpx.Response(status, json=doc)


@pytest.fixture
def fake_api() -> FakePokeAPI:
    return FakePokeAPI()


@pytest.fixture
def pokeapi_client(fake_api) -> PokeAPIClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(fake_api.handler))
    return PokeAPIClient(BASE_URL, http=http)


@pytest.fixture
def cache(pokeapi_client) -> AggregationCache:
    return AggregationCache(pokeapi_client)


@pytest.fixture
def resolvers(cache) -> CatalogResolvers:
    return CatalogResolvers(cache)
