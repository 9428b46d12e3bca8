"""
HTML fragments for the grid and the detail overlay, and the controller that
wires user interaction to the data store.

The controller keeps the rendered fragments (``cards``, ``overlay``,
``error``) instead of touching a DOM; the page shell swaps them into place.
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..catalog.schemas import EvolutionChain, Pokemon, PokemonDetail, Stat
from .api import ClientLoadError, NeoDexApiClient
from .store import FAVORITES_CHANGED, REVEALED, SHINY_TOGGLED, ClientDataStore


logger = logging.getLogger(__name__)

MAX_STAT = 255
EMPTY_STATE = """
<div class="empty-state" style="grid-column: 1 / -1;">
  <div class="empty-state-icon">🔍</div>
  <div class="empty-state-title">No Pokémon Found</div>
  <p>Try adjusting your search or filters</p>
</div>
"""


def pad_id(pokemon_id: int) -> str:
    return f"#{pokemon_id:04d}"


def _esc(value: Optional[str]) -> str:
    return html.escape(value or "", quote=True)


def render_type_badges(types: Sequence[str]) -> str:
    return "".join(f'<span class="type-badge {_esc(t)}">{_esc(t)}</span>' for t in types)


def render_card(pokemon: Pokemon, favorited: bool = False, shiny: bool = False) -> str:
    glyph = "⭐" if favorited else "☆"
    return (
        f'<div class="pokemon-card" data-id="{pokemon.id}">'
        f'<button class="favorite-btn{" favorited" if favorited else ""}" title="Add to favorites">{glyph}</button>'
        f'<div class="pokemon-id">{pad_id(pokemon.id)}</div>'
        f'<img src="{_esc(pokemon.image(shiny))}" alt="{_esc(pokemon.name)}" class="pokemon-image">'
        f'<h3 class="pokemon-name">{_esc(pokemon.name)}</h3>'
        f'<div class="pokemon-types">{render_type_badges(pokemon.types)}</div>'
        f'<div class="pokemon-stats"><strong>Total Stats:</strong> {pokemon.total_stats}</div>'
        f'</div>'
    )


def render_error(message: str) -> str:
    return (
        '<div class="empty-state" style="grid-column: 1 / -1;">'
        '<div class="empty-state-icon">⚠️</div>'
        '<div class="empty-state-title">Error</div>'
        f'<p>{_esc(message)}</p>'
        '</div>'
    )


def stat_percentage(value: int) -> float:
    return value / MAX_STAT * 100


def render_stat_bars(stats: Sequence[Stat]) -> str:
    bars = []
    for stat in stats:
        label = stat.name.replace("-", " ").upper()
        bars.append(
            '<div class="stat-bar">'
            f'<span class="stat-label">{_esc(label)}</span>'
            f'<span class="stat-value">{stat.base_stat}</span>'
            '<div class="stat-fill">'
            f'<div class="stat-progress" style="width: {stat_percentage(stat.base_stat):.1f}%"></div>'
            '</div></div>'
        )
    return "".join(bars)


def render_evolution(chain: EvolutionChain, shiny: bool = False) -> str:
    stages = []
    for stage in chain.stages:
        members = "".join(
            '<div class="evolution-member">'
            f'<img src="{_esc(m.sprites.pick(shiny))}" alt="{_esc(m.name)}">'
            f'<span class="evolution-name">{_esc(m.name)}</span>'
            f'<span class="pokemon-id">{pad_id(m.id)}</span>'
            '</div>'
            for m in stage
        )
        stages.append(f'<div class="evolution-stage">{members}</div>')
    arrow = '<span class="evolution-arrow">→</span>'
    return f'<div class="evolution-chain">{arrow.join(stages)}</div>'


def render_detail(detail: PokemonDetail, shiny: bool = False) -> str:
    main_ability = next((a for a in detail.abilities if not a.is_hidden), None)
    hidden_ability = next((a for a in detail.abilities if a.is_hidden), None)
    generation = "-"
    if detail.species is not None and detail.species.generation:
        generation = detail.species.generation.replace("generation-", "").upper()

    abilities = ""
    if main_ability:
        abilities += f'<div class="ability-item">{_esc(main_ability.name)}</div>'
    if hidden_ability:
        abilities += (
            f'<div class="ability-item hidden">{_esc(hidden_ability.name)} '
            '<span class="hidden-label">(Hidden)</span></div>'
        )

    evolution = ""
    if detail.evolution_chain is not None and detail.evolution_chain.stages:
        evolution = (
            '<div class="evolution-section"><h3>Evolution</h3>'
            f'{render_evolution(detail.evolution_chain, shiny)}</div>'
        )

    return (
        '<div class="modal-header">'
        f'<img src="{_esc(detail.image(shiny))}" alt="{_esc(detail.name)}" class="modal-image">'
        '<div class="modal-info">'
        f'<h2>{_esc(detail.name)}</h2>'
        f'<div class="pokemon-id">{pad_id(detail.id)}</div>'
        f'<div class="modal-types">{render_type_badges(detail.types)}</div>'
        '</div></div>'
        '<div class="info-section">'
        f'<div class="info-item"><span class="info-label">Height</span><span class="info-value">{detail.height / 10:.1f} m</span></div>'
        f'<div class="info-item"><span class="info-label">Weight</span><span class="info-value">{detail.weight / 10:.1f} kg</span></div>'
        f'<div class="info-item"><span class="info-label">Total Stats</span><span class="info-value">{detail.total_stats}</span></div>'
        f'<div class="info-item"><span class="info-label">Gen</span><span class="info-value">{_esc(generation)}</span></div>'
        '</div>'
        f'<div class="stats-section"><h3>Base Stats</h3>{render_stat_bars(detail.stats)}</div>'
        f'<div class="abilities-section"><h3>Abilities</h3>{abilities}</div>'
        f'{evolution}'
    )


def render_type_options(types: Sequence[str]) -> str:
    options = ['<option value="">All Types</option>']
    for t in sorted(types):
        options.append(f'<option value="{_esc(t)}">{_esc(t[:1].upper() + t[1:])}</option>')
    return "".join(options)


@dataclass
class ClickEvent:
    """A click on a card; ``target`` is ``"card"`` or ``"favorite"``."""

    target: str
    pokemon_id: int
    propagation_stopped: bool = False

    def stop_propagation(self) -> None:
        self.propagation_stopped = True


class RenderController:
    def __init__(self, store: ClientDataStore, api: NeoDexApiClient, scroll_threshold_px: int = 200) -> None:
        self.store = store
        self.api = api
        self.scroll_threshold_px = scroll_threshold_px
        self.cards: List[str] = []
        self.overlay: Optional[str] = None
        self.error: Optional[str] = None
        self.type_options = render_type_options([])
        self.loading = False
        self._revealing = False
        store.subscribe(self._on_change)

    async def start(self) -> None:
        self.loading = True
        try:
            entries = await self.api.load_all()
            try:
                self.type_options = render_type_options(await self.api.load_types())
            except ClientLoadError:
                logger.exception("Error loading types")
            self.store.load(entries)
        except ClientLoadError:
            logger.exception("Error loading initial data")
            self.show_error("Failed to load Pokédex data")
        finally:
            self.loading = False

    def show_error(self, message: str) -> None:
        self.error = render_error(message)
        self.cards = []

    # -- rendering -----------------------------------------------------

    def _render_cards(self, entries: Sequence[Pokemon]) -> List[str]:
        shiny = self.store.state.shiny_mode
        favorites = self.store.favorites
        return [render_card(p, p.id in favorites, shiny) for p in entries]

    def _on_change(self, store: ClientDataStore, change: str) -> None:
        self.error = None
        if change == REVEALED:
            self.cards.extend(self._render_cards(store.last_slice()))
            return
        if change not in (SHINY_TOGGLED, FAVORITES_CHANGED):
            # Search, type, sort or page changed: start from a clean grid.
            self._revealing = False
        self.cards = self._render_cards(store.visible())

    def grid_html(self) -> str:
        if self.error is not None:
            return self.error
        if not self.store.view:
            return EMPTY_STATE
        return "".join(self.cards)

    @property
    def favorite_count(self) -> int:
        return len(self.store.favorites)

    def favorites_label(self) -> str:
        if self.store.state.favorites_only:
            return f"✓ Favorites ({self.favorite_count})"
        return f"Favorites ({self.favorite_count})"

    # -- interaction ---------------------------------------------------

    def on_scroll(self, scroll_top: float, viewport_height: float, content_height: float) -> bool:
        """Reveal the next slice when the viewport nears the end of the grid.

        Only one reveal runs per scroll burst: further events are ignored
        until ``layout_complete()`` reports the new cards are laid out.
        """
        if self._revealing or self.store.reveal_mode != "scroll":
            return False
        if scroll_top + viewport_height < content_height - self.scroll_threshold_px:
            return False
        self._revealing = True
        revealed = self.store.reveal_next()
        if not revealed:
            self._revealing = False
        return revealed

    def layout_complete(self) -> None:
        self._revealing = False

    async def handle_click(self, event: ClickEvent) -> None:
        if event.target == "favorite":
            self.on_favorite_click(event)
        if not event.propagation_stopped:
            await self.on_card_click(event.pokemon_id)

    def on_favorite_click(self, event: ClickEvent) -> None:
        event.stop_propagation()
        self.store.toggle_favorite(event.pokemon_id)

    async def on_card_click(self, pokemon_id: int) -> None:
        try:
            detail = await self.api.fetch_detail(pokemon_id)
        except ClientLoadError:
            logger.exception("Error loading Pokémon detail %s", pokemon_id)
            self.overlay = render_error("Failed to load Pokémon details")
            return
        self.overlay = render_detail(detail, self.store.state.shiny_mode)

    def close_overlay(self) -> None:
        self.overlay = None
