# neodex/main.py
from contextlib import asynccontextmanager
import logging
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request

from .catalog import catalog_router
from .catalog.cache import AggregationCache
from .catalog.pokeapi_client import PokeAPIClient
from .catalog.resolvers import CatalogResolvers
from .config import Settings, load_settings

load_dotenv()

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, client: Optional[PokeAPIClient] = None) -> FastAPI:
    """Build the application.

    The cache is created once here and lives on ``app.state`` for the
    lifetime of the process.  ``client`` lets tests plug in a PokeAPI
    client backed by a mock transport.
    """
    settings = settings or load_settings()
    logging.basicConfig(level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        pokeapi = client or PokeAPIClient(settings.pokeapi_base_url, settings.timeout_seconds)
        cache = AggregationCache(pokeapi)
        app.state.cache = cache
        app.state.resolvers = CatalogResolvers(cache, category_member_cap=settings.category_member_cap)
        logger.info("NeoDex proxying %s", pokeapi.base_url)
        try:
            yield
        finally:
            await pokeapi.aclose()

    app = FastAPI(
        title="NeoDex",
        description=(
            "Pokédex backend: proxies PokeAPI, caches every entry it has "
            "seen and assembles list pages, detail views and evolution "
            "chains for the browser."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # 🔹 Quick liveness check, with cache sizes
    @app.get("/")
    def health_check(request: Request):
        return {"status": "ok", "cache": request.app.state.cache.stats()}

    app.include_router(catalog_router)
    return app


app = create_app()
