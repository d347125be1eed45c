"""
Single shot and segmented uploads
"""

import inspect
import logging
from datetime import datetime, UTC
from typing import Any, AsyncIterator, Mapping, Optional

from .error import SwiftFsException
from .metadata import MANIFEST_HEADER, time_to_float_string, url_encode

BLOCK_SIZE = 64 * 1024


async def iter_limited(stream: Any, length: int, block_size: int = BLOCK_SIZE) -> AsyncIterator[bytes]:
    """
    Yield exactly ``length`` bytes read from ``stream``.

    ``stream.read`` may be a plain or a coroutine method. A stream ending
    early is an error since the length has already been declared.
    """
    left = length
    while left > 0:
        data = stream.read(min(left, block_size))
        if inspect.isawaitable(data):
            data = await data
        if not data:
            raise SwiftFsException(f"Unexpected end of stream: {left} of {length} bytes missing.")
        left -= len(data)
        yield data


class ChunkedUploader:
    """
    Writes objects either directly or as segments plus a manifest.

    Segments of ``container/name`` live in the segments container at
    ``name/<timestamp>/<size>/<index>``, the index zero padded to 8 digits.
    """

    def __init__(self, connection, container: str, segments_container: str, chunk_size: int):
        self._connection = connection
        self.container = container
        self.segments_container = segments_container
        self.chunk_size = chunk_size
        self._logger = logging.getLogger(__name__)

    async def upload(
        self,
        stream: Any,
        name: str,
        size: int,
        content_type: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> str:
        """
        Upload ``size`` bytes from ``stream`` to ``name``.

        Returns the unique prefix of the new segments, or "" when the
        object was small enough to upload in one go.
        """
        headers = dict(headers or {})
        if size > self.chunk_size:
            return await self.upload_chunks(stream, name, size, content_type, headers)
        await self._connection.object_put(
            self.container,
            name,
            iter_limited(stream, size),
            size,
            content_type,
            headers,
        )
        return ""

    async def upload_chunks(
        self,
        stream: Any,
        name: str,
        size: int,
        content_type: Optional[str],
        headers: Mapping[str, str],
    ) -> str:
        """
        Upload the segments then the manifest pointing at them.

        If a segment fails the segments already written stay behind. A
        new attempt writes under a fresh unique prefix.
        """
        await self._connection.container_create(self.segments_container)

        unique_prefix = f"{time_to_float_string(datetime.now(UTC))}/{size}"
        segments_path = f"{name}/{unique_prefix}"
        left = size
        index = 0
        while left > 0:
            n = min(left, self.chunk_size)
            segment_path = f"{segments_path}/{index:08d}"
            self._logger.debug("Uploading segment file %r into %r", segment_path, self.segments_container)
            await self._connection.object_put(
                self.segments_container,
                segment_path,
                iter_limited(stream, n),
                n,
                None,
                headers,
            )
            left -= n
            index += 1

        manifest_headers = dict(headers)
        manifest_headers[MANIFEST_HEADER] = url_encode(f"{self.segments_container}/{segments_path}")
        await self._connection.object_put(self.container, name, b"", 0, content_type, manifest_headers)
        return unique_prefix + "/"
