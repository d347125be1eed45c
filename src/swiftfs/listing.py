"""
Directory emulation over prefix/delimiter listings
"""

import inspect
import logging
from contextlib import aclosing
from typing import AsyncIterator, Awaitable, Callable, List, Tuple, Union

from .entries import Directory, Entry, File
from .error import ContainerNotFoundException, ContainerRequiredException, DirectoryNotFoundException
from .models import ObjectInfo

Visitor = Callable[[Entry], Union[None, Awaitable[None]]]


class DirectoryLister:
    """
    Rebuilds a directory hierarchy from the flat names of a container.

    Entries come back in whatever order the store lists them, page by page.
    """

    def __init__(self, fs):
        self._fs = fs
        self._logger = logging.getLogger(__name__)

    async def walk(
        self,
        container: str,
        root: str,
        directory: str = "",
        recurse: bool = False,
    ) -> AsyncIterator[Tuple[str, ObjectInfo, bool]]:
        """
        Yield ``(remote, info, is_directory)`` for the names under
        ``root + directory``, where ``remote`` is relative to ``root``.

        Without ``recurse`` a delimiter is used so only one level is read.
        """
        prefix = root
        if directory:
            prefix += directory + "/"
        delimiter = "" if recurse else "/"
        limit = self._fs.options.list_chunk
        marker = ""
        while True:
            try:
                page = await self._fs.connection.objects(
                    container,
                    prefix=prefix,
                    delimiter=delimiter,
                    limit=limit,
                    marker=marker,
                )
            except ContainerNotFoundException:
                raise DirectoryNotFoundException(directory)
            for info in page:
                if not info.name.startswith(prefix):
                    self._logger.warning("%s: odd name received %r", self._fs, info.name)
                    continue
                if info.name == prefix:
                    # zero length directory markers ending in / are listed
                    # inside themselves
                    continue
                is_directory = not recurse and info.name.endswith("/")
                yield info.name[len(root):], info, is_directory
            if len(page) < limit:
                return
            marker = page[-1].name

    async def entries(
        self,
        directory: str = "",
        recurse: bool = False,
        include_markers: bool = False,
    ) -> AsyncIterator[Entry]:
        """Yield the entries of ``directory`` in the filesystem's container."""
        seen_directories = set()
        async with aclosing(self.walk(self._fs.container, self._fs.root, directory, recurse)) as names:
            async for remote, info, is_directory in names:
                if is_directory:
                    name = remote.rstrip("/")
                    if name in seen_directories:
                        continue
                    seen_directories.add(name)
                    yield Directory(name=name, size=info.bytes)
                    continue
                handle = await self._fs.new_object_with_info(remote, info)
                if handle.storable() or include_markers:
                    yield File(handle)
                elif not recurse and remote not in seen_directories:
                    seen_directories.add(remote)
                    yield Directory(name=remote)

    async def list_dir(self, directory: str = "") -> List[Entry]:
        """List a single directory."""
        if self._fs.container == "":
            raise ContainerRequiredException()
        async with aclosing(self.entries(directory)) as entries:
            return [entry async for entry in entries]

    async def list_recursive(self, directory: str, visit: Visitor, include_markers: bool = False) -> None:
        """
        Call ``visit`` with every entry below ``directory``.

        ``visit`` may be a plain function or a coroutine function. An
        exception raised by it stops the walk and propagates.
        """
        if self._fs.container == "":
            raise ContainerRequiredException("Container needed for recursive list.")
        async with aclosing(self.entries(directory, recurse=True, include_markers=include_markers)) as entries:
            async for entry in entries:
                result = visit(entry)
                if inspect.isawaitable(result):
                    await result

    async def list_containers(self, directory: str = "") -> List[Entry]:
        """List the containers of the account as directories."""
        if directory != "":
            raise ContainerRequiredException()
        containers = await self._fs.connection.containers_all(limit=self._fs.options.list_chunk)
        return [
            Directory(name=container.name, size=container.bytes, items=container.count)
            for container in containers
        ]
