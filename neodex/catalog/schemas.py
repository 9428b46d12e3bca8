"""
Pydantic schema definitions for the catalog module.

``Pokemon`` carries the fields needed to render a catalogue card and the
detail overlay; it is built from the much larger PokeAPI document by
``pokeapi_client``.  Entries are frozen because the aggregation cache hands
out the same instance to every caller.  ``PokemonPage`` bundles a page of
hydrated entries with the upstream pagination metadata, and
``PokemonDetail`` extends an entry with its (optional) species and
evolution chain.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Stat(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    base_stat: int


class Ability(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    is_hidden: bool = False


class Sprites(BaseModel):
    """Image references for one entry.

    Every variant is optional: PokeAPI leaves artwork empty for many
    alternate forms, and some very recent entries have no sprites at all.
    """

    model_config = ConfigDict(frozen=True)

    artwork: Optional[str] = None
    artwork_shiny: Optional[str] = None
    sprite: Optional[str] = None
    sprite_shiny: Optional[str] = None

    def pick(self, shiny: bool = False) -> Optional[str]:
        if shiny:
            return self.artwork_shiny or self.sprite_shiny or self.artwork or self.sprite
        return self.artwork or self.sprite


class Pokemon(BaseModel):
    """A single catalogue entry.

    ``height`` and ``weight`` keep the upstream unit of tenths of a metre
    and tenths of a kilogram.  ``types`` and ``stats`` keep the upstream
    order.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    types: List[str] = Field(default_factory=list)
    stats: List[Stat] = Field(default_factory=list)
    abilities: List[Ability] = Field(default_factory=list)
    sprites: Sprites = Field(default_factory=Sprites)
    height: int = 0
    weight: int = 0
    # Forms (ids above 10000) belong to a species with a different id.
    species_id: Optional[int] = None

    @property
    def total_stats(self) -> int:
        return sum(s.base_stat for s in self.stats)

    def image(self, shiny: bool = False) -> Optional[str]:
        return self.sprites.pick(shiny)


class PokemonType(BaseModel):
    """A category (elemental type) as listed by ``/type``."""

    model_config = ConfigDict(frozen=True)

    name: str
    url: str = ""


class Species(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    evolution_chain_url: Optional[str] = None
    generation: Optional[str] = None
    genus: Optional[str] = None
    is_legendary: bool = False
    is_mythical: bool = False


class EvolutionMember(BaseModel):
    """Summary of one entry inside an evolution stage."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    sprites: Sprites = Field(default_factory=Sprites)


class EvolutionChain(BaseModel):
    """Stages ordered by breadth-first distance from the base form.

    ``stages[0]`` holds the base form alone.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    stages: List[List[EvolutionMember]] = Field(default_factory=list)


class PokemonPage(BaseModel):
    """A wrapper for paginated results returned from the ``/list`` endpoint."""

    count: int
    next: Optional[str] = None
    previous: Optional[str] = None
    has_next: bool = False
    results: List[Pokemon]


class PokemonDetail(Pokemon):
    species: Optional[Species] = None
    evolution_chain: Optional[EvolutionChain] = None
