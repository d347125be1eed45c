"""
Removal of large object segments that no manifest points at any more
"""

import logging
import re
from contextlib import aclosing

import httpx

from .error import SwiftFsException

# <timestamp>/<size>/<index> as written by ChunkedUploader
SEGMENT_PATTERN = re.compile(r"^[^/]+/\d+/\d{8}$")


class SegmentReaper:
    """Deletes the segments of one object from the segments container."""

    def __init__(self, connection, lister, segments_container: str):
        self._connection = connection
        self._lister = lister
        self.segments_container = segments_container
        self._logger = logging.getLogger(__name__)

    async def reap_stale(self, segments_root: str, except_prefix: str = "") -> int:
        """
        Delete the segments under ``segments_root`` and return how many went.

        Segments whose path relative to the root starts with
        ``except_prefix`` belong to the upload in progress and are kept.
        Afterwards the segments container is removed if it ended up empty.
        """
        removed = 0
        walk = self._lister.walk(self.segments_container, segments_root, "", recurse=True)
        async with aclosing(walk) as segments:
            async for remote, _info, _is_directory in segments:
                if not SEGMENT_PATTERN.match(remote):
                    # segments of an object nested below this one
                    continue
                if except_prefix and remote.startswith(except_prefix):
                    continue
                segment_path = segments_root + remote
                self._logger.debug("Removing segment file %r in container %r", segment_path, self.segments_container)
                await self._connection.object_delete(self.segments_container, segment_path)
                removed += 1

        try:
            await self._connection.container_delete(self.segments_container)
        except (SwiftFsException, httpx.HTTPError) as e:
            self._logger.debug("Kept container %r: %s", self.segments_container, e)
        else:
            self._logger.debug("Removed empty container %r", self.segments_container)
        return removed

    async def reap_all(self, segments_root: str) -> int:
        """Delete every segment under ``segments_root``."""
        return await self.reap_stale(segments_root, "")
