import asyncio

import pytest

from config import settings
from services.swapi_client import UpstreamError
from services.transformer import to_detail, to_list_summary

FILM = "https://www.swapi.tech/api/films/{}"


class StubClient:
    """Answers lookups after a per-id delay so completion order differs from input order."""

    def __init__(self, failing: set[str] = frozenset(), delays: dict[str, float] | None = None):
        self.failing = failing
        self.delays = delays or {}
        self.requested: list[tuple[str, str]] = []

    async def _lookup(self, kind: str, resource_id: str, **fields) -> dict:
        self.requested.append((kind, resource_id))
        await asyncio.sleep(self.delays.get(resource_id, 0))
        if f"{kind}:{resource_id}" in self.failing:
            raise UpstreamError("SWAPI Error: 500 - Internal Server Error", status_code=500)
        return {"uid": resource_id, **fields}

    async def get_planet_by_id(self, resource_id: str) -> dict:
        return await self._lookup("planets", resource_id, name="Tatooine", climate="arid")

    async def get_film_by_id(self, resource_id: str) -> dict:
        return await self._lookup("films", resource_id, title=f"Film {resource_id}", episode_id=int(resource_id))

    async def get_species_by_id(self, resource_id: str) -> dict:
        return await self._lookup("species", resource_id, name="Human")

    async def get_vehicle_by_id(self, resource_id: str) -> dict:
        return await self._lookup("vehicles", resource_id, name="Snowspeeder", vehicle_class="airspeeder")

    async def get_starship_by_id(self, resource_id: str) -> dict:
        return await self._lookup("starships", resource_id, name="X-wing", MGLT="100")


def _luke(**overrides) -> dict:
    raw = {
        "uid": "1",
        "name": "Luke Skywalker",
        "height": "172",
        "mass": "77",
        "hair_color": "blond",
        "skin_color": "fair",
        "eye_color": "blue",
        "birth_year": "19BBY",
        "gender": "male",
        "homeworld": "https://www.swapi.tech/api/planets/1",
        "films": [],
        "species": [],
        "vehicles": [],
        "starships": [],
        "created": "2025-01-01T00:00:00.000Z",
        "edited": "2025-01-01T00:00:00.000Z",
    }
    raw.update(overrides)
    return raw


def test_list_summary_derives_image_url():
    summary = to_list_summary({"uid": "4", "name": "Darth Vader", "url": "https://www.swapi.tech/api/people/4"})

    assert summary == {
        "id": "4",
        "name": "Darth Vader",
        "image_url": f"{settings.image_base_url}/4.jpg",
    }


@pytest.mark.asyncio
async def test_detail_copies_scalars_and_resolves_every_reference():
    raw = _luke(
        species=["https://www.swapi.tech/api/species/1"],
        vehicles=["https://www.swapi.tech/api/vehicles/14/"],
        starships=["https://www.swapi.tech/api/starships/12"],
        films=[FILM.format(1)],
    )

    character = await to_detail(raw, StubClient())

    assert character["name"] == "Luke Skywalker"
    assert character["birth_year"] == "19BBY"
    assert character["homeworld"]["name"] == "Tatooine"
    assert [f["title"] for f in character["films"]] == ["Film 1"]
    assert character["species"][0]["name"] == "Human"
    assert character["vehicles"][0]["vehicle_class"] == "airspeeder"
    assert character["starships"][0]["MGLT"] == "100"
    assert character["image_url"].endswith("/1.jpg")


@pytest.mark.asyncio
async def test_failed_film_is_dropped_and_order_kept():
    client = StubClient(failing={"films:2"}, delays={"1": 0.03, "3": 0.0})
    raw = _luke(films=[FILM.format(1), FILM.format(2), FILM.format(3)])

    character = await to_detail(raw, client)

    assert [f["id"] for f in character["films"]] == ["1", "3"]


@pytest.mark.asyncio
async def test_unresolvable_reference_is_skipped_without_a_call():
    client = StubClient()
    raw = _luke(films=["https://www.swapi.tech/api/films/", FILM.format(6)])

    character = await to_detail(raw, client)

    assert [f["id"] for f in character["films"]] == ["6"]
    assert ("films", "6") in client.requested
    assert len([r for r in client.requested if r[0] == "films"]) == 1


@pytest.mark.asyncio
async def test_homeworld_failure_does_not_abort_detail():
    client = StubClient(failing={"planets:1"})
    raw = _luke(films=[FILM.format(1)])

    character = await to_detail(raw, client)

    assert character["homeworld"] is None
    assert len(character["films"]) == 1


@pytest.mark.asyncio
async def test_duplicate_references_are_not_deduped():
    raw = _luke(films=[FILM.format(1), FILM.format(1)], homeworld=None)

    character = await to_detail(raw, StubClient())

    assert [f["id"] for f in character["films"]] == ["1", "1"]
    assert character["homeworld"] is None


def test_list_summary_without_uid_has_no_image_url():
    summary = to_list_summary({"name": "Unknown"})

    assert summary == {"id": None, "name": "Unknown", "image_url": None}
