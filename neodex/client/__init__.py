"""
Browser-side layer: list state, favourites persistence, API access and
HTML rendering for the grid and the detail overlay.
"""

from .api import ClientLoadError, NeoDexApiClient  # noqa: F401
from .config import ClientConfig  # noqa: F401
from .favorites import Favorites, LocalStorage  # noqa: F401
from .render import RenderController  # noqa: F401
from .store import ClientDataStore, compute_view  # noqa: F401
