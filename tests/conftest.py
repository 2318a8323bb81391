"""Pytest fixtures for testing."""

import asyncio
import os
from collections.abc import AsyncGenerator, Callable, Generator
from typing import Any

import httpx
import pytest
import pytest_asyncio

os.environ.setdefault("API_USERNAME", "Test")
os.environ.setdefault("API_PASSWORD", "test-password")

from inspectsync.core.config import Settings
from inspectsync.schemas.hierarchy import HierarchyResponse
from inspectsync.services.hierarchy_service import build_hierarchy
from inspectsync.services.inspection_store import InspectionStore
from inspectsync.services.notification_service import StoreEvent
from inspectsync.services.remote_client import RemoteDataClient

TEST_BASE_URL = "http://inspection.test/api"
TEST_TOKEN = "abc"


def simple_hierarchy_payload() -> dict[str, Any]:
    """One section, one subsection, comments 1 and 2."""
    return {
        "success": True,
        "data": [
            {
                "id": 1,
                "name": "Roof",
                "subsections": [
                    {
                        "id": 1,
                        "name": "Covering",
                        "sec_id": 1,
                        "comments": [
                            {"id": 1, "subsec_id": 1, "rank": 1, "comment": "Shingles worn", "active": 1},
                            {"id": 2, "subsec_id": 1, "rank": 2, "comment": "Flashing loose", "active": 0},
                        ],
                    }
                ],
            }
        ],
    }


def house_hierarchy_payload() -> dict[str, Any]:
    """Two sections, three subsections, comments 1-5."""
    return {
        "success": True,
        "data": [
            {
                "id": 1,
                "name": "Exterior",
                "subsections": [
                    {
                        "id": 1,
                        "name": "Roof",
                        "sec_id": 1,
                        "comments": [
                            {"id": 1, "subsec_id": 1, "rank": 1, "comment": "Shingles worn", "active": 1},
                            {"id": 2, "subsec_id": 1, "rank": 2, "comment": "Flashing loose", "active": 1},
                        ],
                    },
                    {
                        "id": 2,
                        "name": "Gutters",
                        "sec_id": 1,
                        "comments": [
                            {"id": 3, "subsec_id": 2, "rank": 1, "comment": "Downspout detached", "active": 1},
                        ],
                    },
                ],
            },
            {
                "id": 2,
                "name": "Interior",
                "subsections": [
                    {
                        "id": 3,
                        "name": "Kitchen",
                        "sec_id": 2,
                        "comments": [
                            {"id": 4, "subsec_id": 3, "rank": 1, "comment": "GFCI missing", "active": 1},
                            {"id": 5, "subsec_id": 3, "rank": 2, "comment": "Sink leaks", "active": 0},
                        ],
                    }
                ],
            },
        ],
    }


def token_payload(token: str = TEST_TOKEN) -> dict[str, Any]:
    return {"success": True, "data": {"token": token}}


Route = httpx.Response | Exception | Callable[[httpx.Request], Any]


class FakeInspectionServer:
    """In-process stand-in for the inspection server.

    Routes are keyed by method and path relative to the API base URL. Every
    request is recorded, including ones without a route (answered with 404).
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Route] = {}
        self.requests: list[httpx.Request] = []

    def on(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        status_code: int = 200,
        content: bytes | None = None,
        raises: Exception | None = None,
        handler: Callable[[httpx.Request], Any] | None = None,
    ) -> None:
        route: Route
        if raises is not None:
            route = raises
        elif handler is not None:
            route = handler
        elif content is not None:
            route = httpx.Response(status_code, content=content)
        else:
            route = httpx.Response(status_code, json=json)
        self.routes[(method, "/api" + path)] = route

    def serve_token(self, token: str = TEST_TOKEN) -> None:
        self.on("POST", "/users/token.json", json=token_payload(token))

    def serve_hierarchy(self, payload: dict[str, Any]) -> None:
        self.on("GET", "/sections.json", json=payload)

    def requests_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == "/api" + path]

    def handle(self, request: httpx.Request):
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"success": False})
        if isinstance(route, Exception):
            raise route
        if isinstance(route, httpx.Response):
            return route
        return route(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        api_base_url=TEST_BASE_URL,
        api_username="Test",
        api_password="test-password",
        request_timeout_seconds=5.0,
        bootstrap_timeout_seconds=2.0,
    )


@pytest.fixture()
def server() -> FakeInspectionServer:
    return FakeInspectionServer()


@pytest_asyncio.fixture()
async def client(
    settings: Settings,
    server: FakeInspectionServer,
) -> AsyncGenerator[RemoteDataClient, None]:
    async with RemoteDataClient(settings, transport=server.transport) as remote:
        yield remote


@pytest.fixture()
def events() -> list[StoreEvent]:
    return []


@pytest_asyncio.fixture()
async def ready_store(
    settings: Settings,
    server: FakeInspectionServer,
    client: RemoteDataClient,
    events: list[StoreEvent],
) -> InspectionStore:
    """Store bootstrapped over the fake server with the house hierarchy."""
    server.serve_token()
    server.serve_hierarchy(house_hierarchy_payload())

    store = InspectionStore(client, settings=settings)
    store.notifier.subscribe(events.append)
    assert await store.bootstrap() is True
    return store


@pytest.fixture()
def store_factory(settings: Settings) -> Generator[Callable[[], InspectionStore], None, None]:
    """Build offline stores whose HTTP clients are closed at teardown."""
    stores: list[InspectionStore] = []

    def build() -> InspectionStore:
        store = InspectionStore(RemoteDataClient(settings), settings=settings)
        stores.append(store)
        return store

    yield build

    # A private loop leaves the pytest-asyncio loop untouched.
    loop = asyncio.new_event_loop()
    try:
        for store in stores:
            loop.run_until_complete(store.close())
    finally:
        loop.close()


@pytest.fixture()
def loaded_store(
    store_factory: Callable[[], InspectionStore],
    events: list[StoreEvent],
) -> InspectionStore:
    """Store with the house hierarchy installed directly, no network."""
    store = store_factory()
    store.notifier.subscribe(events.append)
    store.load_hierarchy(
        build_hierarchy(HierarchyResponse.model_validate(house_hierarchy_payload()))
    )
    return store
