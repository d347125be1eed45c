import asyncio
import hashlib
import inspect
from dataclasses import dataclass, field
from datetime import datetime, UTC
from urllib.parse import unquote

import httpx
import pytest

from swiftfs.error import (
    ContainerNotEmptyException,
    ContainerNotFoundException,
    ObjectNotFoundException,
    ServerException,
)
from swiftfs.metadata import MANIFEST_HEADER
from swiftfs.models import ContainerInfo, ObjectInfo

LAST_MODIFIED = datetime(2023, 5, 6, 7, 8, 9, tzinfo=UTC)


@dataclass
class StoredObject:
    data: bytes
    content_type: str = "application/octet-stream"
    headers: dict = field(default_factory=dict)
    last_modified: datetime = LAST_MODIFIED


async def _consume(content):
    if content is None:
        return b""
    if isinstance(content, (bytes, bytearray)):
        return bytes(content)
    chunks = []
    async for chunk in content:
        chunks.append(chunk)
    return b"".join(chunks)


class FakeSwiftConnection:
    """In-memory stand-in for SwiftConnection with Swift listing semantics."""

    def __init__(self):
        self.store = {}
        self.log = []
        self.head_calls = []
        self.list_calls = []
        self.put_calls = []
        self.create_calls = 0
        self.put_hook = None
        self.delete_hook = None
        self.create_hook = None
        self.container_delete_hook = None

    # helpers

    def add(self, container, name, data=b"", content_type="application/octet-stream", headers=None):
        self.store.setdefault(container, {})[name] = StoredObject(
            data=data,
            content_type=content_type,
            headers=dict(headers or {}),
        )

    def names(self, container):
        return sorted(self.store.get(container, {}))

    def _manifest_segments(self, obj):
        manifest = httpx.Headers(obj.headers).get(MANIFEST_HEADER)
        if manifest is None:
            return None
        container, _, prefix = unquote(manifest).partition("/")
        objects = self.store.get(container, {})
        return [objects[name] for name in sorted(objects) if name.startswith(prefix)]

    def _data(self, obj):
        segments = self._manifest_segments(obj)
        if segments is None:
            return obj.data
        return b"".join(segment.data for segment in segments)

    def _info(self, name, obj, data=None):
        data = obj.data if data is None else data
        return ObjectInfo(
            name=name,
            bytes=len(data),
            content_type=obj.content_type,
            hash=hashlib.md5(data).hexdigest(),
            last_modified=obj.last_modified,
        )

    def _get(self, container, name):
        try:
            return self.store[container][name]
        except KeyError:
            raise ObjectNotFoundException(container, name)

    # container operations

    async def containers_all(self, limit=1000):
        return [
            ContainerInfo(
                name=name,
                count=len(objects),
                bytes=sum(len(obj.data) for obj in objects.values()),
            )
            for name, objects in sorted(self.store.items())
        ]

    async def container(self, container):
        if container not in self.store:
            raise ContainerNotFoundException(container)
        objects = self.store[container]
        info = ContainerInfo(
            name=container,
            count=len(objects),
            bytes=sum(len(obj.data) for obj in objects.values()),
        )
        return info, httpx.Headers({"X-Container-Object-Count": str(info.count)})

    async def container_create(self, container, headers=None):
        self.create_calls += 1
        self.log.append(("container_create", container))
        # give concurrent callers a chance to interleave
        await asyncio.sleep(0)
        if self.create_hook:
            self.create_hook(container)
        self.store.setdefault(container, {})

    async def container_delete(self, container):
        self.log.append(("container_delete", container))
        if self.container_delete_hook:
            self.container_delete_hook(container)
        if container not in self.store:
            raise ContainerNotFoundException(container)
        if self.store[container]:
            raise ContainerNotEmptyException(container)
        del self.store[container]

    # object operations

    async def objects(self, container, prefix="", delimiter="", limit=1000, marker=""):
        self.list_calls.append((container, prefix, delimiter, marker))
        if container not in self.store:
            raise ContainerNotFoundException(container)
        result = []
        last_subdir = None
        for name in sorted(self.store[container]):
            if not name.startswith(prefix):
                continue
            rest = name[len(prefix):]
            index = rest.find(delimiter) if delimiter else -1
            if index >= 0:
                subdir = prefix + rest[:index + 1]
                if subdir <= marker or subdir == last_subdir:
                    continue
                last_subdir = subdir
                result.append(ObjectInfo(name=subdir, pseudo_directory=True))
            else:
                if name <= marker:
                    continue
                result.append(self._info(name, self.store[container][name]))
            if len(result) >= limit:
                break
        return result

    async def object(self, container, object_name):
        self.head_calls.append((container, object_name))
        obj = self._get(container, object_name)
        data = self._data(obj)
        info = self._info(object_name, obj, data)
        headers = httpx.Headers(obj.headers)
        headers["Content-Length"] = str(info.bytes)
        headers["Content-Type"] = obj.content_type
        headers["Etag"] = info.hash
        return info, headers

    async def object_put(self, container, object_name, content, content_length, content_type=None, headers=None):
        data = await _consume(content)
        self.log.append(("put", container, object_name))
        if self.put_hook:
            self.put_hook(container, object_name)
        if container not in self.store:
            raise ServerException("Resource not found", 404)
        if len(data) != content_length:
            raise ServerException("Content-Length mismatch", 499)
        self.put_calls.append((container, object_name, content_length))
        self.store[container][object_name] = StoredObject(
            data=data,
            content_type=content_type or "application/octet-stream",
            headers=dict(headers or {}),
            last_modified=datetime.now(UTC),
        )
        return hashlib.md5(data).hexdigest()

    async def object_get(self, container, object_name, output, headers=None):
        obj = self._get(container, object_name)
        data = self._data(obj)
        range_header = (headers or {}).get("Range")
        if range_header:
            start, _, end = range_header.removeprefix("bytes=").partition("-")
            data = data[int(start):int(end) + 1]
        output.write(data)
        return self._info(object_name, obj, data)

    async def object_update(self, container, object_name, headers):
        obj = self._get(container, object_name)
        self.log.append(("update", container, object_name))
        # a POST replaces all of the object metadata
        obj.headers = dict(headers.items())

    async def object_delete(self, container, object_name):
        self.log.append(("delete", container, object_name))
        if self.delete_hook:
            result = self.delete_hook(container, object_name)
            if inspect.isawaitable(result):
                await result
        self._get(container, object_name)
        del self.store[container][object_name]

    async def object_copy(self, source_container, source_object, destination_container, destination_object, headers=None):
        obj = self._get(source_container, source_object)
        self.log.append(("copy", destination_container, destination_object))
        self.store[destination_container][destination_object] = StoredObject(
            data=self._data(obj),
            content_type=obj.content_type,
            headers={k: v for k, v in obj.headers.items() if k.lower() != MANIFEST_HEADER.lower()},
        )


@pytest.fixture
def fake():
    return FakeSwiftConnection()
