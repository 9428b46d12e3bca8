"""
Route definitions for the Pokémon API.

Endpoints under /api/pokemon:
- GET  /list?limit&offset  : one page of fully hydrated entries
- GET  /search/{query}     : exact id-or-name lookup (0 or 1 entry)
- GET  /type/{name}        : members of a type (capped)
- GET  /types/all          : every type
- GET  /{id_or_name}       : one entry with species and evolution chain

The fixed paths are declared before ``/{id_or_name}`` so they are not
captured by it.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request

from .errors import NotFoundError, UpstreamFetchError
from .resolvers import CatalogResolvers
from .schemas import Pokemon, PokemonDetail, PokemonPage, PokemonType


router = APIRouter(prefix="/api/pokemon", tags=["pokemon"])


def get_resolvers(request: Request) -> CatalogResolvers:
    return request.app.state.resolvers


def _http_error(exc: UpstreamFetchError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    return HTTPException(status_code=502, detail=str(exc))


@router.get("/list", response_model=PokemonPage)
async def list_pokemon(
    limit: int = Query(default=20, ge=1, le=100, description="Page size"),
    offset: int = Query(default=0, ge=0, description="Index of the first entry"),
    resolvers: CatalogResolvers = Depends(get_resolvers),
) -> PokemonPage:
    try:
        return await resolvers.list_page(limit=limit, offset=offset)
    except UpstreamFetchError as exc:
        raise _http_error(exc)


@router.get("/search/{query}", response_model=List[Pokemon])
async def search_pokemon(query: str, resolvers: CatalogResolvers = Depends(get_resolvers)) -> List[Pokemon]:
    try:
        return await resolvers.search(query)
    except UpstreamFetchError as exc:
        raise _http_error(exc)


@router.get("/type/{name}", response_model=List[Pokemon])
async def pokemon_by_type(name: str, resolvers: CatalogResolvers = Depends(get_resolvers)) -> List[Pokemon]:
    try:
        return await resolvers.by_category(name)
    except UpstreamFetchError as exc:
        raise _http_error(exc)


@router.get("/types/all", response_model=List[PokemonType])
async def all_types(resolvers: CatalogResolvers = Depends(get_resolvers)) -> List[PokemonType]:
    try:
        return await resolvers.categories()
    except UpstreamFetchError as exc:
        raise _http_error(exc)


@router.get("/{id_or_name}", response_model=PokemonDetail)
async def pokemon_detail(
    id_or_name: str = Path(..., description="Numeric id or name"),
    resolvers: CatalogResolvers = Depends(get_resolvers),
) -> PokemonDetail:
    try:
        return await resolvers.item_detail(id_or_name)
    except UpstreamFetchError as exc:
        raise _http_error(exc)
