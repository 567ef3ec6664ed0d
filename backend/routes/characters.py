"""Character routes: paginated listing, name search, detail, cache reset.

Listing without a query proxies a single upstream page. Listing with a query
filters the full (cached) character listing and paginates locally, so the
pagination metadata describes the filtered set.
"""

import logging
from typing import Awaitable, Callable

from fastapi import APIRouter, Query, Request, Response

from config import settings
from envelope import success
from errors import DependencyError, NotFoundError, ValidationError
from services.cache import TTLCache
from services.search import filter_by_name, paginate
from services.swapi_client import ALL_CHARACTERS_KEY, SwapiClient, UpstreamError
from services.transformer import to_detail, to_list_summary
from validation import SearchParams, parse_search_params, validate_character_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/characters")


def _cache(request: Request) -> TTLCache:
    return request.app.state.cache


def _swapi(request: Request) -> SwapiClient:
    return request.app.state.swapi


async def _cached_response(
    request: Request,
    response: Response,
    ttl_seconds: float,
    build: Callable[[], Awaitable[dict]],
) -> dict:
    """Serve a whole GET response from cache, keyed by path and query string.

    Only successful bodies are stored; errors raised by ``build`` propagate.
    """
    cache = _cache(request)
    key = f"response:{request.url.path}?{request.url.query}"
    body = cache.get(key)
    if body is not None:
        response.headers["X-Cache"] = "HIT"
        return body

    body = await build()
    cache.set(key, body, ttl_seconds=ttl_seconds)
    response.headers["X-Cache"] = "MISS"
    return body


async def _list_characters(client: SwapiClient, params: SearchParams) -> dict:
    try:
        if params.query:
            everyone = await client.get_all_characters()
            matches = filter_by_name([to_list_summary(c) for c in everyone], params.query)
            characters, pagination = paginate(matches, params.page, params.limit)
            logger.info("Search %r matched %d characters", params.query, pagination["total"])
        else:
            upstream = await client.get_page(params.page, params.limit)
            characters = [to_list_summary(c) for c in upstream["results"]]
            pagination = {
                "page": params.page,
                "limit": params.limit,
                "total": upstream["total_records"],
                "totalPages": upstream["total_pages"],
                "hasNext": upstream["has_next"],
                "hasPrev": params.page > 1,
            }
    except UpstreamError as e:
        raise DependencyError(f"Failed to fetch characters: {e}") from e

    return success({"data": characters, "pagination": pagination})


@router.get("")
async def list_characters(
    request: Request,
    response: Response,
    page: str | None = Query(None),
    limit: str | None = Query(None),
    query: str | None = Query(None),
) -> dict:
    """Paginated character summaries, optionally filtered by name."""
    params = parse_search_params(page, limit, query)
    return await _cached_response(
        request, response, settings.list_cache_ttl, lambda: _list_characters(_swapi(request), params)
    )


@router.get("/search")
async def search_characters(
    request: Request,
    response: Response,
    page: str | None = Query(None),
    limit: str | None = Query(None),
    query: str | None = Query(None),
) -> dict:
    """Same as the listing, but a non-blank query is required."""
    params = parse_search_params(page, limit, query)
    if params.query is None:
        raise ValidationError("Search query is required", code="MISSING_QUERY")
    return await _cached_response(
        request, response, settings.list_cache_ttl, lambda: _list_characters(_swapi(request), params)
    )


@router.post("/cache/clear")
async def clear_character_cache(request: Request) -> dict:
    """Evict the cached full character listing used by search."""
    deleted = _cache(request).delete(ALL_CHARACTERS_KEY)
    return success({
        "message": "Character cache cleared successfully" if deleted else "No character cache to clear",
        "cacheCleared": deleted,
    })


@router.get("/{character_id}")
async def get_character(character_id: str, request: Request, response: Response) -> dict:
    """Full character detail with homeworld, films, species, vehicles and starships."""
    validate_character_id(character_id)
    client = _swapi(request)

    async def build() -> dict:
        try:
            raw = await client.get_character_by_id(character_id)
        except UpstreamError as e:
            if e.status_code == 404 or "404" in str(e):
                raise NotFoundError(f"Character with ID {character_id} not found") from e
            raise DependencyError(f"Failed to fetch character: {e}") from e
        return success(await to_detail(raw, client))

    return await _cached_response(request, response, settings.detail_cache_ttl, build)
