"""Tests for the Trello HTTP client."""

import json

import httpx
import pytest

from config import Settings
from sync.errors import ConflictFault, NotFoundFault, TransportFault
from trello import TrelloClient


@pytest.fixture
def client_settings():
    return Settings(
        _env_file=None,
        trello_api_key="test-key",
        trello_user_token="test-token",
        trello_base_url="https://trello.test/1",
    )


def make_client(settings, handler):
    return TrelloClient(settings, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_get_json_sends_auth_and_params(client_settings):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"id": "abc", "name": "file.txt"})

    client = make_client(client_settings, handler)

    result = await client.get_json("/cards/c1/attachments/abc", params={"fields": "name"})

    assert result == {"id": "abc", "name": "file.txt"}
    request = seen[0]
    assert request.method == "GET"
    assert request.url.path == "/1/cards/c1/attachments/abc"
    assert request.url.params["key"] == "test-key"
    assert request.url.params["token"] == "test-token"
    assert request.url.params["fields"] == "name"
    await client.close()


@pytest.mark.asyncio
async def test_put_json_sends_body(client_settings):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"id": "abc", **json.loads(request.content)})

    client = make_client(client_settings, handler)

    result = await client.put_json("/actions/abc", {"text": "hello"})

    assert seen[0].method == "PUT"
    assert json.loads(seen[0].content) == {"text": "hello"}
    assert result == {"id": "abc", "text": "hello"}
    await client.close()


@pytest.mark.asyncio
async def test_delete(client_settings):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={})

    client = make_client(client_settings, handler)

    await client.delete("/cards/c1/stickers/s1")

    assert seen[0].method == "DELETE"
    assert seen[0].url.path == "/1/cards/c1/stickers/s1"
    await client.close()


@pytest.mark.asyncio
@pytest.mark.parametrize("status, fault", [
    (404, NotFoundFault),
    (400, ConflictFault),
    (409, ConflictFault),
    (500, TransportFault),
    (503, TransportFault),
])
async def test_status_codes_map_to_faults(client_settings, status, fault):
    client = make_client(client_settings, lambda request: httpx.Response(status, text="nope"))

    with pytest.raises(fault) as exc_info:
        await client.get_json("/members/m1")

    assert exc_info.value.status_code == status
    await client.close()


@pytest.mark.asyncio
async def test_connection_error_is_transport_fault(client_settings):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(client_settings, handler)

    with pytest.raises(TransportFault) as exc_info:
        await client.get_json("/members/m1")

    assert exc_info.value.status_code is None
    await client.close()


@pytest.mark.asyncio
async def test_no_auth_params_without_credentials():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={})

    client = make_client(Settings(_env_file=None), handler)

    await client.get_json("/members/m1")

    assert "key" not in seen[0].url.params
    assert "token" not in seen[0].url.params
    await client.close()


@pytest.mark.asyncio
async def test_close_reopens_lazily(client_settings):
    client = make_client(client_settings, lambda request: httpx.Response(200, json={}))

    await client.get_json("/members/m1")
    await client.close()
    assert await client.get_json("/members/m1") == {}
    await client.close()


@pytest.mark.asyncio
async def test_post_json_sends_body(client_settings):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=[{"id": "m1"}])

    client = make_client(client_settings, handler)

    result = await client.post_json("/cards/c1/idMembers", {"value": "m1"})

    assert seen[0].method == "POST"
    assert json.loads(seen[0].content) == {"value": "m1"}
    assert result == [{"id": "m1"}]
    await client.close()
