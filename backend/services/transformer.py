"""Projection of raw SWAPI records into the API's character shapes.

Detail assembly resolves the homeworld and every film, species, vehicle and
starship reference concurrently. Each lookup yields ``Ok`` or ``Skipped``;
skipped references are dropped and the rest keep their original order.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from config import settings
from services.swapi_client import SwapiClient, UpstreamError, extract_id_from_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Ok:
    value: dict


@dataclass(frozen=True)
class Skipped:
    reason: str


def image_url_for(character_id: str | None) -> str | None:
    if not character_id:
        return None
    return f"{settings.image_base_url}/{character_id}.jpg"


def to_list_summary(raw: dict) -> dict:
    return {
        "id": raw.get("uid"),
        "name": raw.get("name"),
        "image_url": image_url_for(raw.get("uid")),
    }


def transform_planet(raw: dict) -> dict:
    return {
        "id": raw.get("uid"),
        "name": raw.get("name"),
        "climate": raw.get("climate"),
        "terrain": raw.get("terrain"),
        "population": raw.get("population"),
        "diameter": raw.get("diameter"),
        "gravity": raw.get("gravity"),
    }


def transform_film(raw: dict) -> dict:
    return {
        "id": raw.get("uid"),
        "title": raw.get("title"),
        "episode_id": raw.get("episode_id"),
        "director": raw.get("director"),
        "producer": raw.get("producer"),
        "release_date": raw.get("release_date"),
    }


def transform_species(raw: dict) -> dict:
    return {
        "id": raw.get("uid"),
        "name": raw.get("name"),
        "classification": raw.get("classification"),
        "designation": raw.get("designation"),
        "average_height": raw.get("average_height"),
        "language": raw.get("language"),
        "homeworld": raw.get("homeworld"),
    }


_CRAFT_FIELDS = (
    "name",
    "model",
    "manufacturer",
    "cost_in_credits",
    "length",
    "crew",
    "passengers",
    "max_atmosphering_speed",
    "cargo_capacity",
    "consumables",
)


def transform_vehicle(raw: dict) -> dict:
    vehicle = {"id": raw.get("uid")}
    vehicle.update({field: raw.get(field) for field in _CRAFT_FIELDS})
    vehicle["vehicle_class"] = raw.get("vehicle_class")
    return vehicle


def transform_starship(raw: dict) -> dict:
    starship = {"id": raw.get("uid")}
    starship.update({field: raw.get(field) for field in _CRAFT_FIELDS})
    starship["starship_class"] = raw.get("starship_class")
    starship["hyperdrive_rating"] = raw.get("hyperdrive_rating")
    starship["MGLT"] = raw.get("MGLT")
    return starship


async def _resolve(
    url: str,
    fetch: Callable[[str], Awaitable[dict]],
    transform: Callable[[dict], dict],
) -> Ok | Skipped:
    """Fetch and transform a single cross-reference."""
    resource_id = extract_id_from_url(url)
    if not resource_id:
        return Skipped(f"no id in {url!r}")
    try:
        raw = await fetch(resource_id)
    except UpstreamError as e:
        logger.warning("Failed to resolve %s: %s", url, e)
        return Skipped(str(e))
    return Ok(transform(raw))


async def _resolve_all(
    urls: list[str] | None,
    fetch: Callable[[str], Awaitable[dict]],
    transform: Callable[[dict], dict],
) -> list[dict]:
    # gather returns results in argument order, not completion order
    results = await asyncio.gather(*[_resolve(url, fetch, transform) for url in urls or []])
    return [r.value for r in results if isinstance(r, Ok)]


async def _resolve_homeworld(url: str | None, client: SwapiClient) -> dict | None:
    if not url:
        return None
    result = await _resolve(url, client.get_planet_by_id, transform_planet)
    return result.value if isinstance(result, Ok) else None


async def to_detail(raw: dict, client: SwapiClient) -> dict[str, Any]:
    """Build the full character, resolving every reference concurrently."""
    character_id = raw.get("uid")
    homeworld, films, species, vehicles, starships = await asyncio.gather(
        _resolve_homeworld(raw.get("homeworld"), client),
        _resolve_all(raw.get("films"), client.get_film_by_id, transform_film),
        _resolve_all(raw.get("species"), client.get_species_by_id, transform_species),
        _resolve_all(raw.get("vehicles"), client.get_vehicle_by_id, transform_vehicle),
        _resolve_all(raw.get("starships"), client.get_starship_by_id, transform_starship),
    )

    return {
        "id": character_id,
        "name": raw.get("name"),
        "height": raw.get("height"),
        "mass": raw.get("mass"),
        "hair_color": raw.get("hair_color"),
        "skin_color": raw.get("skin_color"),
        "eye_color": raw.get("eye_color"),
        "birth_year": raw.get("birth_year"),
        "gender": raw.get("gender"),
        "homeworld": homeworld,
        "films": films,
        "species": species,
        "vehicles": vehicles,
        "starships": starships,
        "image_url": image_url_for(character_id),
        "created": raw.get("created"),
        "edited": raw.get("edited"),
    }
