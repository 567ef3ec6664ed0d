"""Async client for the SWAPI (swapi.tech) REST API.

Detail endpoints wrap the entity in ``{"result": {"properties": {...}}}``;
list endpoints return ``{"total_records", "total_pages", "next", "results"}``.
Cross-references between entities are full URLs ending in a numeric id.
"""

import asyncio
import logging
import re

import httpx

from services.cache import TTLCache

logger = logging.getLogger(__name__)

ALL_CHARACTERS_KEY = "all_characters"
ALL_CHARACTERS_PAGE_SIZE = 100

_TRAILING_ID = re.compile(r"/(\d+)/?$")


class UpstreamError(Exception):
    """Any failed SWAPI call. ``status_code`` is set when the server responded."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def extract_id_from_url(url: str) -> str:
    """Return the trailing numeric path segment of ``url``, or "" if there is none."""
    match = _TRAILING_ID.search(url or "")
    return match.group(1) if match else ""


class SwapiClient:
    def __init__(
        self,
        base_url: str,
        cache: TTLCache,
        timeout: float = 10,
        page_delay: float = 0.1,
        all_characters_ttl: float = 1800,
        related_ttl: float = 7200,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.cache = cache
        self.page_delay = page_delay
        self.all_characters_ttl = all_characters_ttl
        self.related_ttl = related_ttl
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _get_json(self, path: str, params: dict | None = None) -> dict:
        logger.debug("SWAPI request: GET %s %s", path, params or "")
        try:
            resp = await self._client.get(path, params=params)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning("SWAPI response error: %s %s", status, path)
            raise UpstreamError(
                f"SWAPI Error: {status} - {e.response.reason_phrase}", status_code=status
            ) from e
        except httpx.HTTPError as e:
            logger.warning("SWAPI request failed for %s: %s", path, e)
            raise UpstreamError("SWAPI Error: No response received from server") from e
        except ValueError as e:
            raise UpstreamError(f"SWAPI Error: invalid JSON from {path}") from e

        if not isinstance(data, dict):
            raise UpstreamError(f"SWAPI Error: unexpected response shape from {path}")
        logger.debug("SWAPI response: %s %s", resp.status_code, path)
        return data

    async def _get_properties(self, resource: str, resource_id: str) -> dict:
        data = await self._get_json(f"/{resource}/{resource_id}")
        result = data.get("result")
        if not isinstance(result, dict) or not isinstance(result.get("properties"), dict):
            raise UpstreamError(f"SWAPI Error: malformed {resource} envelope")
        properties = dict(result["properties"])
        # swapi.tech keeps the uid beside the properties, not inside them
        properties.setdefault("uid", result.get("uid", resource_id))
        return properties

    async def _get_related(self, resource: str, resource_id: str) -> dict:
        key = f"{resource}:{resource_id}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        properties = await self._get_properties(resource, resource_id)
        self.cache.set(key, properties, ttl_seconds=self.related_ttl)
        return properties

    async def get_character_by_id(self, character_id: str) -> dict:
        return await self._get_properties("people", character_id)

    async def get_planet_by_id(self, planet_id: str) -> dict:
        return await self._get_related("planets", planet_id)

    async def get_film_by_id(self, film_id: str) -> dict:
        return await self._get_related("films", film_id)

    async def get_species_by_id(self, species_id: str) -> dict:
        return await self._get_related("species", species_id)

    async def get_vehicle_by_id(self, vehicle_id: str) -> dict:
        return await self._get_related("vehicles", vehicle_id)

    async def get_starship_by_id(self, starship_id: str) -> dict:
        return await self._get_related("starships", starship_id)

    async def get_page(self, page: int = 1, page_size: int = 10) -> dict:
        """Fetch one page of the /people listing."""
        data = await self._get_json("/people", params={"page": page, "limit": page_size})
        results = data.get("results") or []
        if not isinstance(results, list) or not all(isinstance(r, dict) for r in results):
            raise UpstreamError("SWAPI Error: unexpected response shape from /people")
        return {
            "results": results,
            "has_next": bool(data.get("next")),
            "total_records": data.get("total_records", 0),
            "total_pages": data.get("total_pages", 0),
        }

    async def get_all_characters(self) -> list[dict]:
        """Fetch every page of /people sequentially. Cached under ``all_characters``."""
        cached = self.cache.get(ALL_CHARACTERS_KEY)
        if cached is not None:
            logger.info("Using cached character listing: %d characters", len(cached))
            return cached

        logger.info("Fetching all characters from SWAPI for search")
        characters: list[dict] = []
        page = 1
        while True:
            result = await self.get_page(page, ALL_CHARACTERS_PAGE_SIZE)
            characters.extend(result["results"])
            logger.debug("Fetched page %d: %d characters", page, len(result["results"]))
            if not result["has_next"]:
                break
            page += 1
            await asyncio.sleep(self.page_delay)

        logger.info("Total characters fetched: %d", len(characters))
        self.cache.set(ALL_CHARACTERS_KEY, characters, ttl_seconds=self.all_characters_ttl)
        return characters

    async def ping(self) -> None:
        """Raise UpstreamError if the API root is unreachable."""
        await self._get_json("/")
