"""
Catalog package for the Pokémon API.

This package holds everything the server side needs: the PokeAPI client,
the aggregation cache in front of it, the composite resolvers built on the
cache and the FastAPI routes that expose them.  The browser talks only to
these routes, never to PokeAPI directly, so repeated lookups are served
from memory.
"""

from .router import router as catalog_router  # noqa: F401
