"""
SwiftFs - a hierarchical file system view of a Swift container
"""

import logging
import posixpath
from datetime import datetime, timedelta
from typing import Any, List, Optional, Set

from .entries import Entry, File
from .error import CantCopyException, IsFileException, ObjectNotFoundException
from .lifecycle import ContainerLifecycle
from .listing import DirectoryLister, Visitor
from .metadata import DIRECTORY_MARKER_CONTENT_TYPE
from .models import ObjectInfo, SwiftFsOptions
from .object import SwiftObject
from .paths import parse_path
from .purge import delete_objects
from .reaper import SegmentReaper
from .uploader import ChunkedUploader


class SwiftFs:
    """
    A remote swift container, optionally scoped to a directory inside it.

    Example:
        async with SwiftConnection(storage_url=url, auth_token=token) as conn:
            fs = await SwiftFs.create("backup", "photos/2024", conn)
            with open("cat.jpg", "rb") as f:
                await fs.put(f, "cat.jpg", size=os.path.getsize("cat.jpg"),
                             mod_time=datetime.now(UTC))
            entries = await fs.list("")
    """

    precision = timedelta(microseconds=1)

    def __init__(self, name: str, root: str, connection, options: Optional[SwiftFsOptions] = None):
        container, directory = parse_path(root)
        self.name = name
        self.connection = connection
        self.options = options or SwiftFsOptions()
        self.container = container
        self.segments_container = container + self.options.segments_suffix
        self.root = directory + "/" if directory else ""
        self.lifecycle = ContainerLifecycle(
            connection,
            container,
            root=self.root,
            no_check_container=self.options.no_check_container,
        )
        self.lister = DirectoryLister(self)
        self.uploader = ChunkedUploader(connection, container, self.segments_container, self.options.chunk_size)
        self.reaper = SegmentReaper(connection, self.lister, self.segments_container)
        self._logger = logging.getLogger(__name__)

    @classmethod
    async def create(cls, name: str, root: str, connection, options: Optional[SwiftFsOptions] = None) -> "SwiftFs":
        """
        Construct a SwiftFs for ``container/path``.

        Raises IsFileException when the path names an existing object; the
        exception carries a SwiftFs rooted at its parent directory.
        """
        fs = cls(name, root, connection, options)
        if fs.root == "":
            return fs
        directory = fs.root.rstrip("/")
        try:
            info, _ = await connection.object(fs.container, directory)
        except ObjectNotFoundException:
            return fs
        if info.content_type == DIRECTORY_MARKER_CONTENT_TYPE:
            return fs
        parent = posixpath.dirname(directory)
        parent_root = f"{fs.container}/{parent}" if parent else fs.container
        raise IsFileException(cls(name, parent_root, connection, options))

    @property
    def root_path(self) -> str:
        if self.root == "":
            return self.container
        return self.container + "/" + self.root

    def __str__(self) -> str:
        if self.root == "":
            return f"Swift container {self.container}"
        return f"Swift container {self.container} path {self.root}"

    def hashes(self) -> Set[str]:
        return {"md5"}

    async def new_object_with_info(self, remote: str, info: Optional[ObjectInfo] = None) -> SwiftObject:
        """
        Return a handle for ``remote``, reading metadata unless ``info`` has it.

        Dynamic large objects are listed with 0 bytes, so any zero length
        listing entry other than a directory marker has its metadata read.
        """
        obj = SwiftObject(self, remote)
        if info is not None and info.bytes == 0 and info.content_type != DIRECTORY_MARKER_CONTENT_TYPE:
            info = None
        if info is not None:
            obj.info = info
        else:
            await obj.read_metadata()
        return obj

    async def new_object(self, remote: str) -> SwiftObject:
        """Find the object at ``remote``; raises ObjectNotFoundException."""
        return await self.new_object_with_info(remote)

    async def list(self, directory: str = "") -> List[Entry]:
        """
        List the objects and directories in ``directory``.

        At the store root this lists the containers instead.
        """
        if self.container == "":
            return await self.lister.list_containers(directory)
        return await self.lister.list_dir(directory)

    async def list_r(self, directory: str, callback: Visitor) -> None:
        """Call ``callback`` for everything below ``directory``."""
        await self.lister.list_recursive(directory, callback)

    async def put(
        self,
        stream: Any,
        remote: str,
        size: int,
        mod_time: datetime,
        content_type: Optional[str] = None,
    ) -> SwiftObject:
        """Upload ``size`` bytes from ``stream`` to ``remote``."""
        obj = SwiftObject(self, remote)
        await obj.update(stream, size, mod_time, content_type)
        return obj

    async def mkdir(self, directory: str = "") -> None:
        """Create the container if it doesn't exist."""
        await self.lifecycle.ensure()

    async def rmdir(self, directory: str = "") -> None:
        """Delete the container if this fs is at its root; it must be empty."""
        await self.lifecycle.destroy(directory)

    async def purge(self) -> None:
        """Delete every object, directory markers included, then the container."""

        async def produce(put):
            async def visit(entry: Entry) -> None:
                if isinstance(entry, File):
                    await put(entry.handle)

            await self.lister.list_recursive("", visit, include_markers=True)

        async def delete(obj: SwiftObject) -> None:
            await obj.remove()

        await delete_objects(produce, delete, self.options.transfers)
        await self.rmdir("")

    async def copy(self, src: Any, remote: str) -> SwiftObject:
        """Copy ``src`` to ``remote`` server side."""
        await self.mkdir("")
        if not isinstance(src, SwiftObject):
            self._logger.debug("%s: can't copy - not same remote type", src)
            raise CantCopyException()
        await self.connection.object_copy(src.fs.container, src.name, self.container, self.root + remote)
        return await self.new_object(remote)
