"""
SwiftObject - lazily loaded handle on one object of a SwiftFs
"""

import enum
import logging
import mimetypes
from datetime import datetime
from typing import Any, BinaryIO, Optional

import httpx

from .error import FatalException, HashUnsupportedException, ObjectNotFoundException, SwiftFsException
from .metadata import (
    DIRECTORY_MARKER_CONTENT_TYPE,
    MANIFEST_HEADER,
    OBJECT_HEADER_PREFIX,
    STATIC_LARGE_OBJECT_HEADER,
    get_mod_time,
    mod_time_headers,
)
from .models import ObjectInfo


class MetadataState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    LOADED = "loaded"


class SwiftObject:
    """
    A swift object.

    ``info`` is always present, either from a listing or a HEAD request.
    ``headers`` are only known once the metadata has been read, and are
    dropped again after every write so the next access re-reads them.
    A handle must not be mutated from several tasks at once.
    """

    def __init__(self, fs, remote: str, info: Optional[ObjectInfo] = None):
        self.fs = fs
        self.remote = remote
        self.info = info or ObjectInfo(name=fs.root + remote)
        self.headers: Optional[httpx.Headers] = None
        self.state = MetadataState.UNINITIALIZED
        self._logger = logging.getLogger(__name__)

    def __str__(self) -> str:
        return self.remote

    def __repr__(self) -> str:
        return f"<SwiftObject {self.fs.container}/{self.name}>"

    @property
    def name(self) -> str:
        """Name of the object in its container."""
        return self.fs.root + self.remote

    @property
    def segments_root(self) -> str:
        return self.name + "/"

    @property
    def size(self) -> int:
        return self.info.bytes

    def mime_type(self) -> str:
        return self.info.content_type or ""

    def storable(self) -> bool:
        """Directory markers are not storable."""
        return self.info.content_type != DIRECTORY_MARKER_CONTENT_TYPE

    async def read_metadata(self) -> None:
        """
        Read info and headers if they haven't been fetched yet.

        Raises ObjectNotFoundException if the object isn't there.
        """
        if self.state is MetadataState.LOADED:
            return
        info, headers = await self.fs.connection.object(self.fs.container, self.name)
        self.info = info
        self.headers = headers
        self.state = MetadataState.LOADED

    def _invalidate(self) -> None:
        self.headers = None
        self.state = MetadataState.UNINITIALIZED

    async def _has_header(self, header: str) -> bool:
        # a missing object has no headers at all
        try:
            await self.read_metadata()
        except ObjectNotFoundException:
            return False
        return header in self.headers

    async def is_dynamic_large_object(self) -> bool:
        return await self._has_header(MANIFEST_HEADER)

    async def is_static_large_object(self) -> bool:
        return await self._has_header(STATIC_LARGE_OBJECT_HEADER)

    async def is_large_object(self) -> bool:
        if await self.is_dynamic_large_object():
            return True
        return await self.is_static_large_object()

    async def hash(self, hash_type: str = "md5") -> str:
        """
        Return the lowercase md5 of the object.

        Large objects have no whole object checksum, "" is returned for them.
        """
        if hash_type != "md5":
            raise HashUnsupportedException(hash_type)
        if await self.is_large_object():
            self._logger.debug("%s: returning empty md5sum for swift large object", self)
            return ""
        return (self.info.hash or "").lower()

    async def mod_time(self) -> datetime:
        """
        Return the modification time.

        Read from the mtime metadata, falling back to Last-Modified.
        """
        try:
            await self.read_metadata()
        except (SwiftFsException, httpx.HTTPError) as e:
            self._logger.debug("%s: failed to read metadata: %s", self, e)
            return self.info.last_modified
        try:
            return get_mod_time(self.headers)
        except (KeyError, ValueError):
            return self.info.last_modified

    async def set_mod_time(self, when: datetime) -> None:
        """Store ``when`` as the mtime, keeping the other object headers."""
        await self.read_metadata()
        new_headers = httpx.Headers(mod_time_headers(when))
        for key, value in new_headers.items():
            self.headers[key] = value
        prefix = OBJECT_HEADER_PREFIX.lower()
        for key, value in self.headers.items():
            if key.lower().startswith(prefix) and key not in new_headers:
                new_headers[key] = value
        await self.fs.connection.object_update(self.fs.container, self.name, new_headers)

    async def open(self, output: BinaryIO, range: Optional[str] = None) -> ObjectInfo:
        """Download the object, or the part given by ``range``, into ``output``."""
        headers = {"Range": range} if range else None
        return await self.fs.connection.object_get(self.fs.container, self.name, output, headers)

    async def update(
        self,
        stream: Any,
        size: int,
        mod_time: datetime,
        content_type: Optional[str] = None,
    ) -> None:
        """
        Replace the object with ``size`` bytes read from ``stream``.

        The object may have been created even if an error is raised.
        """
        if self.fs.container == "":
            raise FatalException("Container name needed in remote.")
        await self.fs.mkdir("")

        # decided before any new segments exist
        was_large_object = await self.is_large_object()

        if content_type is None:
            content_type = mimetypes.guess_type(self.remote)[0] or "application/octet-stream"
        unique_prefix = await self.fs.uploader.upload(
            stream,
            self.name,
            size,
            content_type,
            mod_time_headers(mod_time),
        )

        if was_large_object:
            try:
                await self.fs.reaper.reap_stale(self.segments_root, unique_prefix)
            except (SwiftFsException, httpx.HTTPError) as e:
                self._logger.warning("%s: failed to remove old segments - carrying on with upload: %s", self, e)

        self._invalidate()
        await self.read_metadata()

    async def remove(self) -> None:
        """Remove the object, manifest first and then its segments."""
        was_large_object = await self.is_large_object()
        await self.fs.connection.object_delete(self.fs.container, self.name)
        self._invalidate()
        if was_large_object:
            try:
                await self.fs.reaper.reap_all(self.segments_root)
            except (SwiftFsException, httpx.HTTPError) as e:
                self._logger.warning("%s: failed to remove segments: %s", self, e)
