import io
import json
from datetime import datetime, UTC

import httpx
import pytest

from swiftfs.connection import SwiftConnection
from swiftfs.error import (
    AuthenticationException,
    ContainerNotEmptyException,
    ContainerNotFoundException,
    ObjectNotFoundException,
    ServerException,
)

STORAGE_URL = "https://swift.example.com/v1/AUTH_test"


def _connection(handler, **kwargs):
    return SwiftConnection(
        storage_url=STORAGE_URL + "/",
        auth_token="tk-123",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_objects_sends_listing_params_and_parses_subdirs():
    requests = []

    def handler(request):
        requests.append(request)
        body = [
            {
                "name": "a/b",
                "bytes": 3,
                "hash": "ABCDEF",
                "content_type": "text/plain",
                "last_modified": "2023-05-06T07:08:09.123456",
            },
            {"subdir": "a/d/"},
        ]
        return httpx.Response(200, json=body)

    async with _connection(handler) as conn:
        page = await conn.objects("box", prefix="a/", delimiter="/", limit=2, marker="a/a")

    request = requests[0]
    assert request.url.path == "/v1/AUTH_test/box"
    assert dict(request.url.params) == {
        "format": "json",
        "prefix": "a/",
        "delimiter": "/",
        "limit": "2",
        "marker": "a/a",
    }
    assert request.headers["X-Auth-Token"] == "tk-123"
    assert page[0].name == "a/b"
    assert page[0].bytes == 3
    assert page[0].hash == "ABCDEF"
    assert page[0].last_modified == datetime(2023, 5, 6, 7, 8, 9, 123456, tzinfo=UTC)
    assert not page[0].pseudo_directory
    assert page[1].name == "a/d/"
    assert page[1].pseudo_directory


@pytest.mark.asyncio
async def test_objects_in_missing_container():
    async with _connection(lambda request: httpx.Response(404)) as conn:
        with pytest.raises(ContainerNotFoundException):
            await conn.objects("nope")


@pytest.mark.asyncio
async def test_empty_listing_returns_no_objects():
    async with _connection(lambda request: httpx.Response(204)) as conn:
        assert await conn.objects("box") == []


@pytest.mark.asyncio
async def test_object_head_parses_metadata():
    def handler(request):
        assert request.method == "HEAD"
        assert request.url.raw_path == b"/v1/AUTH_test/box/dir/a%20b"
        return httpx.Response(
            200,
            headers={
                "Content-Length": "12",
                "Content-Type": "video/mp4",
                "Etag": '"d41d8cd98f00b204e9800998ecf8427e"',
                "Last-Modified": "Sat, 06 May 2023 07:08:09 GMT",
                "X-Object-Manifest": "box_segments/dir/a%20b/1.0/12",
                "X-Object-Meta-Mtime": "1.5",
            },
        )

    async with _connection(handler) as conn:
        info, headers = await conn.object("box", "dir/a b")

    assert info.name == "dir/a b"
    assert info.bytes == 12
    assert info.content_type == "video/mp4"
    assert info.hash == "d41d8cd98f00b204e9800998ecf8427e"
    assert info.last_modified == datetime(2023, 5, 6, 7, 8, 9, tzinfo=UTC)
    assert "x-object-manifest" in headers
    assert headers["X-Object-Meta-Mtime"] == "1.5"


@pytest.mark.asyncio
async def test_object_head_not_found():
    async with _connection(lambda request: httpx.Response(404)) as conn:
        with pytest.raises(ObjectNotFoundException):
            await conn.object("box", "ghost")


@pytest.mark.asyncio
async def test_object_put_streams_with_declared_length():
    seen = {}

    def handler(request):
        seen["body"] = request.content
        seen["headers"] = request.headers
        return httpx.Response(201, headers={"Etag": "abc"})

    async def chunks():
        yield b"hello "
        yield b"world"

    async with _connection(handler) as conn:
        etag = await conn.object_put(
            "box",
            "greeting.txt",
            chunks(),
            11,
            "text/plain",
            {"X-Object-Meta-Mtime": "1.000000000"},
        )

    assert etag == "abc"
    assert seen["body"] == b"hello world"
    assert seen["headers"]["Content-Length"] == "11"
    assert seen["headers"]["Content-Type"] == "text/plain"
    assert seen["headers"]["X-Object-Meta-Mtime"] == "1.000000000"
    assert "transfer-encoding" not in seen["headers"]


@pytest.mark.asyncio
async def test_object_get_update_copy_and_delete():
    requests = []

    def handler(request):
        requests.append(request)
        if request.method == "GET":
            return httpx.Response(206, content=b"234", headers={"Content-Length": "3"})
        if request.method == "POST":
            return httpx.Response(202)
        if request.method == "PUT":
            return httpx.Response(201)
        return httpx.Response(204)

    output = io.BytesIO()
    async with _connection(handler) as conn:
        info = await conn.object_get("box", "f", output, {"Range": "bytes=2-4"})
        await conn.object_update("box", "f", {"X-Object-Meta-Color": "blue"})
        await conn.object_copy("box", "dir/f", "other", "g")
        await conn.object_delete("box", "f")

    assert output.getvalue() == b"234"
    assert info.bytes == 3
    get, post, copy, delete = requests
    assert get.headers["Range"] == "bytes=2-4"
    assert post.headers["X-Object-Meta-Color"] == "blue"
    assert copy.url.path == "/v1/AUTH_test/other/g"
    assert copy.headers["X-Copy-From"] == "/box/dir/f"
    assert delete.method == "DELETE"


@pytest.mark.asyncio
async def test_object_delete_not_found():
    async with _connection(lambda request: httpx.Response(404)) as conn:
        with pytest.raises(ObjectNotFoundException):
            await conn.object_delete("box", "ghost")


@pytest.mark.asyncio
async def test_container_operations():
    responses = {
        ("HEAD", "/v1/AUTH_test/box"): httpx.Response(
            204,
            headers={"X-Container-Object-Count": "4", "X-Container-Bytes-Used": "99"},
        ),
        ("PUT", "/v1/AUTH_test/box"): httpx.Response(202),
        ("DELETE", "/v1/AUTH_test/full"): httpx.Response(409),
        ("DELETE", "/v1/AUTH_test/gone"): httpx.Response(404),
        ("HEAD", "/v1/AUTH_test/gone"): httpx.Response(404),
    }

    def handler(request):
        return responses[(request.method, request.url.path)]

    async with _connection(handler) as conn:
        info, _ = await conn.container("box")
        await conn.container_create("box")
        with pytest.raises(ContainerNotEmptyException):
            await conn.container_delete("full")
        with pytest.raises(ContainerNotFoundException):
            await conn.container_delete("gone")
        with pytest.raises(ContainerNotFoundException):
            await conn.container("gone")

    assert (info.name, info.count, info.bytes) == ("box", 4, 99)


@pytest.mark.asyncio
async def test_containers_all_follows_markers():
    pages = {
        "": [{"name": "a", "count": 1, "bytes": 10}, {"name": "b", "count": 2, "bytes": 20}],
        "b": [{"name": "c", "count": 3, "bytes": 30}],
    }
    markers = []

    def handler(request):
        marker = request.url.params.get("marker", "")
        markers.append(marker)
        return httpx.Response(200, content=json.dumps(pages[marker]))

    async with _connection(handler) as conn:
        containers = await conn.containers_all(limit=2)

    assert [c.name for c in containers] == ["a", "b", "c"]
    assert [c.bytes for c in containers] == [10, 20, 30]
    assert markers == ["", "b"]


@pytest.mark.asyncio
async def test_error_statuses_are_mapped():
    async with _connection(lambda request: httpx.Response(401)) as conn:
        with pytest.raises(AuthenticationException):
            await conn.object("box", "f")

    async with _connection(lambda request: httpx.Response(503)) as conn:
        with pytest.raises(ServerException) as excinfo:
            await conn.object("box", "f")
    assert excinfo.value.status_code == 503


@pytest.mark.asyncio
async def test_transport_errors_are_retried_then_raised(monkeypatch):
    attempts = []

    async def no_sleep(seconds):
        return None

    monkeypatch.setattr("swiftfs._http.asyncio.sleep", no_sleep)

    def handler(request):
        attempts.append(request)
        if len(attempts) < 3:
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(200, json=[])

    async with _connection(handler, max_retries=3) as conn:
        assert await conn.objects("box") == []
    assert len(attempts) == 3

    attempts.clear()

    def always_down(request):
        attempts.append(request)
        raise httpx.ConnectError("refused", request=request)

    async with _connection(always_down, max_retries=2) as conn:
        with pytest.raises(httpx.ConnectError):
            await conn.object("box", "f")
    assert len(attempts) == 2
