import pytest
from fastapi.testclient import TestClient

from conftest import BASE_URL, species_doc
from neodex.config import Settings
from neodex.main import create_app


@pytest.fixture
def client(fake_api, pokeapi_client):
    app = create_app(Settings(pokeapi_base_url=BASE_URL), client=pokeapi_client)
    with TestClient(app) as c:
        yield c


def test_health_check_reports_cache(client):
    res = client.get("/")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"
    assert res.json()["cache"]["items"] == 0


def test_list_defaults_and_shape(fake_api, client):
    fake_api.add("pokemon", {
        "count": 1302,
        "next": f"{BASE_URL}/pokemon?offset=20&limit=20",
        "previous": None,
        "results": [{"name": "bulbasaur"}],
    })
    fake_api.add_pokemon(1, "bulbasaur", types=("grass", "poison"))
    res = client.get("/api/pokemon/list")
    assert res.status_code == 200
    body = res.json()
    assert body["count"] == 1302
    assert body["next"].endswith("offset=20&limit=20")
    assert body["previous"] is None
    assert body["results"][0]["types"] == ["grass", "poison"]


@pytest.mark.parametrize("query", ["limit=0", "limit=abc", "offset=-1", "limit=1000"])
def test_list_rejects_bad_numbers(client, query):
    assert client.get(f"/api/pokemon/list?{query}").status_code == 422


def test_list_upstream_failure_is_502(fake_api, client):
    fake_api.add("pokemon", {}, status=500)
    res = client.get("/api/pokemon/list?limit=2&offset=0")
    assert res.status_code == 502
    assert "Failed to fetch" in res.json()["detail"]


def test_detail_merges_species(fake_api, client):
    fake_api.add_pokemon(25, "pikachu")
    fake_api.add("pokemon-species/25", species_doc(25, "pikachu"))
    body = client.get("/api/pokemon/25").json()
    assert body["name"] == "pikachu"
    assert body["species"]["generation"] == "generation-i"
    assert body["evolution_chain"] is None


def test_detail_not_found(client):
    res = client.get("/api/pokemon/missingno")
    assert res.status_code == 404
    assert "missingno" in res.json()["detail"]


def test_search_miss_is_empty_list(client):
    res = client.get("/api/pokemon/search/notapokemon")
    assert res.status_code == 200
    assert res.json() == []


def test_type_route_is_capped(fake_api, client):
    fake_api.add("type/grass", {"pokemon": [{"pokemon": {"name": f"g{i}"}} for i in range(25)]})
    for i in range(25):
        fake_api.add_pokemon(500 + i, f"g{i}", types=("grass",))
    body = client.get("/api/pokemon/type/grass").json()
    assert len(body) == 20


def test_all_types(fake_api, client):
    fake_api.add("type", {"results": [{"name": "normal", "url": "u"}]})
    assert client.get("/api/pokemon/types/all").json() == [{"name": "normal", "url": "u"}]
