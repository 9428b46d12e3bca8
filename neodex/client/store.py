"""
Browser-side list state.

``compute_view()`` is the pure part: given the full set of loaded entries
and the current search/type/sort it returns the ordered list to show.
``ClientDataStore`` holds that state, applies the user's actions to it and
notifies subscribers (the render controller) after each change.

Favourites view: the active list becomes the favourite entries, ignoring
search and type but still ordered by the current sort.  Changing search or
type leaves favourites view; changing sort re-orders it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, List, Sequence

from typing_extensions import Literal

from ..catalog.schemas import Pokemon
from .config import RevealMode
from .favorites import Favorites


SortKey = Literal["id", "name", "stats"]
SORT_KEYS = ("id", "name", "stats")

# Change kinds passed to listeners.
VIEW_CHANGED = "view"
REVEALED = "reveal"
SHINY_TOGGLED = "shiny"
FAVORITES_CHANGED = "favorites"

Listener = Callable[["ClientDataStore", str], None]


def _matches(pokemon: Pokemon, needle: str, category: str) -> bool:
    if needle and needle not in pokemon.name.lower() and needle not in str(pokemon.id):
        return False
    if category and category not in pokemon.types:
        return False
    return True


def sort_entries(entries: Sequence[Pokemon], sort: str = "id") -> List[Pokemon]:
    """Stable sort; ties keep the order of ``entries``."""
    if sort == "name":
        return sorted(entries, key=lambda p: p.name)
    if sort == "stats":
        return sorted(entries, key=lambda p: p.total_stats, reverse=True)
    return sorted(entries, key=lambda p: p.id)


def compute_view(full_set: Sequence[Pokemon], search: str = "", category: str = "", sort: str = "id") -> List[Pokemon]:
    """Filter ``full_set`` by search text and type, then sort it.

    Search is case-insensitive and matches a substring of the name or of
    the decimal id.  An empty search or type matches everything.
    """
    needle = (search or "").strip().lower()
    cat = (category or "").strip().lower()
    return sort_entries([p for p in full_set if _matches(p, needle, cat)], sort)


@dataclass(frozen=True)
class ViewState:
    search: str = ""
    category: str = ""
    sort: SortKey = "id"
    # Scroll mode: index of the last revealed slice.  Pages mode: current page.
    page: int = 0
    shiny_mode: bool = False
    favorites_only: bool = False


class ClientDataStore:
    def __init__(self, favorites: Favorites, page_size: int = 20, reveal_mode: RevealMode = "scroll") -> None:
        self.favorites = favorites
        self.page_size = page_size
        self.reveal_mode = reveal_mode
        self.state = ViewState()
        self.full_set: List[Pokemon] = []
        self.view: List[Pokemon] = []
        self._listeners: List[Listener] = []

    # -- subscriptions -------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, change: str) -> None:
        for listener in list(self._listeners):
            listener(self, change)

    # -- transitions ---------------------------------------------------

    def _recompute(self) -> None:
        s = self.state
        if s.favorites_only:
            self.view = sort_entries([p for p in self.full_set if p.id in self.favorites], s.sort)
        else:
            self.view = compute_view(self.full_set, s.search, s.category, s.sort)

    def _set(self, **changes) -> None:
        self.state = replace(self.state, **changes)
        self._recompute()
        self._emit(VIEW_CHANGED)

    def load(self, entries: Sequence[Pokemon]) -> None:
        self.full_set = list(entries)
        self._set(page=0)

    def apply_search(self, text: str) -> None:
        self._set(search=(text or "").strip().lower(), page=0, favorites_only=False)

    def apply_category(self, name: str) -> None:
        self._set(category=(name or "").strip().lower(), page=0, favorites_only=False)

    def apply_sort(self, key: SortKey) -> None:
        if key not in SORT_KEYS:
            raise ValueError(f"unknown sort key: {key!r}")
        self._set(sort=key, page=0)

    def show_favorites(self) -> bool:
        """Switch to favourites view; returns False (and stays put) when there are none."""
        if not len(self.favorites):
            return False
        self._set(favorites_only=True, page=0)
        return True

    def show_all(self) -> None:
        self._set(favorites_only=False, page=0)

    def toggle_shiny(self) -> None:
        self.state = replace(self.state, shiny_mode=not self.state.shiny_mode)
        self._emit(SHINY_TOGGLED)

    def toggle_favorite(self, pokemon_id: int) -> bool:
        added = self.favorites.toggle(pokemon_id)
        if self.state.favorites_only and not added:
            self.view = [p for p in self.view if p.id != pokemon_id]
            # Keep the current page inside the shrunken view.
            self.state = replace(self.state, page=min(self.state.page, max(self.page_count() - 1, 0)))
        self._emit(FAVORITES_CHANGED)
        return added

    def reveal_next(self) -> bool:
        if not self.has_more():
            return False
        self.state = replace(self.state, page=self.state.page + 1)
        self._emit(REVEALED)
        return True

    def next_page(self) -> bool:
        if self.state.page >= self.page_count() - 1:
            return False
        self.state = replace(self.state, page=self.state.page + 1)
        self._emit(VIEW_CHANGED)
        return True

    def previous_page(self) -> bool:
        if self.state.page <= 0:
            return False
        self.state = replace(self.state, page=self.state.page - 1)
        self._emit(VIEW_CHANGED)
        return True

    # -- derived -------------------------------------------------------

    def page_count(self) -> int:
        return -(-len(self.view) // self.page_size)

    def has_more(self) -> bool:
        return (self.state.page + 1) * self.page_size < len(self.view)

    def visible(self) -> List[Pokemon]:
        """Entries currently on screen, never more than the view holds."""
        end = (self.state.page + 1) * self.page_size
        if self.reveal_mode == "pages":
            return self.view[self.state.page * self.page_size:end]
        return self.view[:end]

    def last_slice(self) -> List[Pokemon]:
        start = self.state.page * self.page_size
        return self.view[start:start + self.page_size]

    def page_info(self) -> str:
        return f"Page {self.state.page + 1} of {self.page_count() or 1}"
