import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app import create_app
from services.cache import TTLCache
from services.swapi_client import SwapiClient

SWAPI_BASE = "https://swapi.test/api"


def detail_body(uid: str, **properties) -> dict:
    return {
        "message": "ok",
        "result": {"properties": properties, "uid": uid, "description": "", "_id": uid},
    }


def list_body(results: list[dict], next_url: str | None = None, total_records: int | None = None, total_pages: int = 1) -> dict:
    return {
        "message": "ok",
        "total_records": len(results) if total_records is None else total_records,
        "total_pages": total_pages,
        "previous": None,
        "next": next_url,
        "results": results,
    }


def person(uid: str, name: str) -> dict:
    return {"uid": uid, "name": name, "url": f"{SWAPI_BASE}/people/{uid}"}


class FakeSwapi:
    """Routes MockTransport requests to canned responses and records every call."""

    def __init__(self):
        self.routes: dict[str, tuple[int, dict]] = {}
        self.calls: list[str] = []
        self.broken: set[str] = set()

    def add(self, path: str, body: dict, status: int = 200) -> None:
        self.routes[path] = (status, body)

    def break_connection(self, path: str) -> None:
        self.broken.add(path)

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/api") or "/"
        query = request.url.query.decode()
        key = f"{path}?{query}" if query else path
        self.calls.append(key)
        if key in self.broken or path in self.broken:
            raise httpx.ConnectError("connection refused", request=request)
        status, body = self.routes.get(key) or self.routes.get(path) or (404, {"message": "not found"})
        return httpx.Response(status, json=body)


@pytest.fixture
def fake_swapi() -> FakeSwapi:
    return FakeSwapi()


@pytest.fixture
def cache() -> TTLCache:
    return TTLCache(default_ttl=60, sweep_interval=60)


@pytest_asyncio.fixture
async def swapi_client(fake_swapi: FakeSwapi, cache: TTLCache):
    client = SwapiClient(
        SWAPI_BASE,
        cache,
        page_delay=0,
        transport=httpx.MockTransport(fake_swapi.handler),
    )
    yield client
    await client.close()


@pytest_asyncio.fixture
async def client(cache: TTLCache, swapi_client: SwapiClient):
    app = create_app(cache=cache, swapi=swapi_client)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
