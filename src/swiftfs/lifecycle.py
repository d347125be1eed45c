"""
Lazy creation and deletion of the working container
"""

import asyncio
import enum
import logging

from .error import ContainerNotFoundException


class ContainerState(enum.Enum):
    UNKNOWN = "unknown"
    EXISTS = "exists"
    DELETED = "deleted"


class ContainerLifecycle:
    """
    Tracks whether the container is known to exist.

    All transitions happen under one lock, so concurrent writers trigger
    at most one probe/create round trip.
    """

    def __init__(self, connection, container: str, root: str = "", no_check_container: bool = False):
        self._connection = connection
        self.container = container
        self.root = root
        self.no_check_container = no_check_container
        self.state = ContainerState.UNKNOWN
        self._lock = asyncio.Lock()
        self._logger = logging.getLogger(__name__)

    async def ensure(self) -> None:
        """Create the container if it isn't already known to exist."""
        if self.state is ContainerState.EXISTS:
            return
        async with self._lock:
            if self.state is ContainerState.EXISTS:
                return
            # nothing to create at the store root
            if self.container == "":
                return
            exists = False
            if not self.no_check_container and self.state is not ContainerState.DELETED:
                try:
                    await self._connection.container(self.container)
                    exists = True
                except ContainerNotFoundException:
                    exists = False
            if not exists:
                self._logger.debug("Creating container %r", self.container)
                await self._connection.container_create(self.container)
            self.state = ContainerState.EXISTS

    async def destroy(self, directory: str = "") -> None:
        """
        Delete the container.

        Does nothing when scoped below the container root, as only whole
        containers can be removed.
        """
        async with self._lock:
            if self.root != "" or directory != "":
                return
            await self._connection.container_delete(self.container)
            self.state = ContainerState.DELETED
