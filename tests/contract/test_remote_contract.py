"""Contract tests for requests sent to the inspection server."""

import json

import pytest

from inspectsync.core.errors import AuthError, ParseError, ServerError
from inspectsync.models.enums import Endpoint
from inspectsync.schemas.auth import AuthToken
from inspectsync.schemas.result import ResultSubmission
from inspectsync.services.remote_client import Credentials, RemoteDataClient
from tests.conftest import TEST_BASE_URL, simple_hierarchy_payload


@pytest.mark.parametrize(
    ("endpoint", "method", "path", "requires_token"),
    [
        (Endpoint.TOKEN, "POST", "/users/token.json", False),
        (Endpoint.HIERARCHY, "GET", "/sections.json", True),
        (Endpoint.RESULTS_READ, "GET", "/results.json", True),
        (Endpoint.RESULTS_WRITE, "POST", "/results/add", True),
    ],
)
def test_endpoint_routes(endpoint: Endpoint, method: str, path: str, requires_token: bool):
    assert endpoint.method == method
    assert endpoint.path == path
    assert endpoint.requires_token is requires_token


@pytest.mark.asyncio
async def test_urls_are_built_from_base(client: RemoteDataClient):
    assert client.url_for(Endpoint.HIERARCHY) == f"{TEST_BASE_URL}/sections.json"


@pytest.mark.asyncio
async def test_token_request_body_and_headers(client: RemoteDataClient, server):
    server.serve_token("abc")

    token = await client.request_token(Credentials(username="Test", password="secret"))

    [request] = server.requests
    assert request.method == "POST"
    assert str(request.url) == f"{TEST_BASE_URL}/users/token.json"
    assert request.headers["Content-Type"] == "application/json"
    assert request.headers["Accept"] == "application/json"
    assert json.loads(request.content) == {"username": "Test", "password": "secret"}
    assert token == AuthToken(value="abc")
    assert token.query_fragment == "?token=abc"
    assert token.query_params == {"token": "abc"}


@pytest.mark.asyncio
async def test_hierarchy_request_carries_token_query(client: RemoteDataClient, server):
    server.serve_hierarchy(simple_hierarchy_payload())

    payload = await client.fetch_hierarchy(AuthToken(value="abc"))

    [request] = server.requests
    assert request.method == "GET"
    assert str(request.url) == f"{TEST_BASE_URL}/sections.json?token=abc"
    assert payload.data[0].subsections[0].comments[1].comment == "Flashing loose"


@pytest.mark.asyncio
async def test_token_endpoint_never_sends_token_query(client: RemoteDataClient, server):
    server.serve_token()

    await client.request_token(Credentials(username="Test", password="secret"))

    assert "token" not in server.requests[0].url.params


@pytest.mark.asyncio
async def test_non_object_json_is_parse_error(client: RemoteDataClient, server):
    server.on("GET", "/results.json", json=[1, 2, 3])

    with pytest.raises(ParseError):
        await client.fetch_results(AuthToken(value="abc"))


@pytest.mark.asyncio
async def test_missing_route_is_server_error(client: RemoteDataClient, server):
    with pytest.raises(ServerError) as exc_info:
        await client.submit_result(
            AuthToken(value="abc"),
            ResultSubmission(id=0, insp_id=-1, com_id=1, severity=1),
        )

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_token_required_for_protected_endpoints(client: RemoteDataClient, server):
    with pytest.raises(AuthError):
        await client._send(Endpoint.HIERARCHY)

    assert server.requests == []


def test_secrets_are_not_in_reprs():
    assert "secret" not in repr(Credentials(username="Test", password="secret"))
    assert "abc" not in repr(AuthToken(value="abc"))
