import httpx
import pytest

from conftest import make_pokemon
from neodex.client.api import ClientLoadError, NeoDexApiClient
from neodex.client.config import ClientConfig


def make_client(handler, **config):
    cfg = ClientConfig(api_base_url="http://neodex.test", **config)
    http = httpx.AsyncClient(base_url=cfg.api_base_url, transport=httpx.MockTransport(handler))
    return NeoDexApiClient(cfg, http=http)


def list_handler(total, requests):
    def handler(request):
        limit = int(request.url.params["limit"])
        offset = int(request.url.params["offset"])
        requests.append((limit, offset))
        end = min(offset + limit, total)
        results = [make_pokemon(i + 1, f"mon{i + 1}").model_dump() for i in range(offset, end)]
        nxt = f"http://pokeapi.test/pokemon?offset={end}" if end < total else None
        return httpx.Response(200, json={"count": total, "next": nxt, "previous": None, "results": results})

    return handler


@pytest.mark.asyncio
async def test_bulk_load_is_sequential_and_capped():
    requests = []
    client = make_client(list_handler(1302, requests), page_size=20, bulk_load_cap=50)
    entries = await client.load_all()
    assert requests == [(20, 0), (20, 20), (10, 40)]
    assert [p.id for p in entries] == list(range(1, 51))


@pytest.mark.asyncio
async def test_bulk_load_stops_when_no_next_page():
    requests = []
    client = make_client(list_handler(30, requests))
    entries = await client.load_all()
    assert len(entries) == 30
    assert requests == [(20, 0), (20, 20)]


@pytest.mark.asyncio
async def test_default_cap_is_500():
    requests = []
    client = make_client(list_handler(1302, requests))
    entries = await client.load_all()
    assert len(entries) == 500
    assert len(requests) == 25


@pytest.mark.asyncio
async def test_error_response_raises_with_detail():
    client = make_client(lambda request: httpx.Response(404, json={"detail": "Not found: missingno"}))
    with pytest.raises(ClientLoadError, match="missingno"):
        await client.fetch_detail(0)


@pytest.mark.asyncio
async def test_types_are_sorted():
    client = make_client(lambda request: httpx.Response(200, json=[{"name": "water"}, {"name": "bug"}]))
    assert await client.load_types() == ["bug", "water"]
