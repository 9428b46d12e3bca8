import httpx
import pytest

from conftest import BASE_URL, pokemon_doc, species_doc
from neodex.catalog.errors import NotFoundError, UpstreamFetchError
from neodex.catalog.pokeapi_client import PokeAPIClient, id_from_url, parse_pokemon, parse_species


def test_parse_pokemon_maps_nested_fields():
    doc = pokemon_doc(25, "pikachu", types=("electric",), stats=(35, 55, 40, 50, 50, 90), hidden_ability="lightning-rod")
    p = parse_pokemon(doc)
    assert p.id == 25
    assert p.types == ["electric"]
    assert [s.base_stat for s in p.stats] == [35, 55, 40, 50, 50, 90]
    assert p.total_stats == 320
    assert p.sprites.artwork == "https://img.test/art/25.png"
    assert p.sprites.sprite_shiny == "https://img.test/shiny/25.png"
    assert [a.is_hidden for a in p.abilities] == [False, True]


def test_parse_pokemon_tolerates_missing_optional_fields():
    p = parse_pokemon({"id": 10001, "name": "deoxys-attack", "sprites": {"other": None}, "abilities": None})
    assert p.sprites.artwork is None
    assert p.image() is None
    assert p.abilities == []
    assert p.stats == []
    assert p.height == 0
    assert p.species_id is None


def test_parse_pokemon_orders_types_by_slot():
    doc = pokemon_doc(1, "bulbasaur", types=("grass", "poison"))
    doc["types"].reverse()
    assert parse_pokemon(doc).types == ["grass", "poison"]


def test_image_falls_back_to_sprite():
    doc = pokemon_doc(7, "squirtle")
    doc["sprites"]["other"]["official-artwork"] = {"front_default": None, "front_shiny": None}
    p = parse_pokemon(doc)
    assert p.image() == "https://img.test/7.png"
    assert p.image(shiny=True) == "https://img.test/shiny/7.png"


def test_parse_species_without_chain():
    doc = species_doc(132, "ditto")
    s = parse_species(doc)
    assert s.evolution_chain_url is None
    assert s.generation == "generation-i"
    assert s.genus == "Test Pokémon"


def test_id_from_url():
    assert id_from_url(f"{BASE_URL}/pokemon-species/133/") == 133
    assert id_from_url("https://example.test/no-id/") is None
    assert id_from_url(None) is None


@pytest.mark.asyncio
async def test_fetch_pokemon_404_raises_not_found(pokeapi_client):
    with pytest.raises(NotFoundError) as info:
        await pokeapi_client.fetch_pokemon("missingno")
    assert info.value.key == "missingno"
    assert info.value.status_code == 404


@pytest.mark.asyncio
async def test_fetch_pokemon_server_error(fake_api, pokeapi_client):
    fake_api.add("pokemon/1", {"detail": "boom"}, status=503)
    with pytest.raises(UpstreamFetchError) as info:
        await pokeapi_client.fetch_pokemon("1")
    assert not isinstance(info.value, NotFoundError)
    assert info.value.status_code == 503
    assert "1" in str(info.value)


@pytest.mark.asyncio
async def test_network_error_becomes_upstream_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = PokeAPIClient(BASE_URL, http=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    with pytest.raises(UpstreamFetchError):
        await client.fetch_pokemon("pikachu")


@pytest.mark.asyncio
async def test_fetch_pokemon_page(fake_api, pokeapi_client):
    fake_api.add("pokemon", {
        "count": 1302,
        "next": f"{BASE_URL}/pokemon?offset=2&limit=2",
        "previous": None,
        "results": [{"name": "bulbasaur", "url": ""}, {"name": "ivysaur", "url": ""}],
    })
    page = await pokeapi_client.fetch_pokemon_page(2, 0)
    assert page["count"] == 1302
    assert page["previous"] is None
    assert [r["name"] for r in page["results"]] == ["bulbasaur", "ivysaur"]


@pytest.mark.asyncio
async def test_fetch_type_members_in_upstream_order(fake_api, pokeapi_client):
    fake_api.add("type/fire", {"pokemon": [
        {"pokemon": {"name": "charmander"}, "slot": 1},
        {"pokemon": {"name": "vulpix"}, "slot": 1},
        {"pokemon": None},
    ]})
    assert await pokeapi_client.fetch_type_members("fire") == ["charmander", "vulpix"]


def test_parse_pokemon_reads_species_id_of_a_form():
    p = parse_pokemon(pokemon_doc(10033, "venusaur-mega", species_id=3))
    assert p.id == 10033
    assert p.species_id == 3


@pytest.mark.asyncio
@pytest.mark.parametrize("key", [".", "..", "a/b", "mr mime", ""])
async def test_keys_that_are_not_resource_names_never_reach_upstream(fake_api, pokeapi_client, key):
    fake_api.add("pokemon", {"count": 1, "results": [{"name": "bulbasaur"}]})
    fake_api.add("type", {"results": [{"name": "grass"}]})
    with pytest.raises(NotFoundError):
        await pokeapi_client.fetch_pokemon(key)
    with pytest.raises(NotFoundError):
        await pokeapi_client.fetch_type_members(key)
    assert fake_api.calls == []
