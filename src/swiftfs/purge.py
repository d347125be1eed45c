"""
Bounded producer/consumer deletion used by purge
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable

from .error import PurgeException

logger = logging.getLogger(__name__)

_DONE = object()

Producer = Callable[[Callable[[Any], Awaitable[None]]], Awaitable[None]]


async def delete_objects(produce: Producer, delete: Callable[[Any], Awaitable[None]], transfers: int) -> None:
    """
    Delete everything ``produce`` hands over using ``transfers`` workers.

    ``produce`` is awaited with a ``put`` coroutine function and blocks
    while the queue holds ``transfers`` items. When it finishes or fails
    the workers drain the queue and stop. A producer error is re-raised;
    otherwise failed deletes are reported together as a PurgeException.
    """
    queue: asyncio.Queue = asyncio.Queue(maxsize=transfers)
    errors = []

    async def worker():
        while True:
            item = await queue.get()
            try:
                if item is _DONE:
                    return
                try:
                    await delete(item)
                except Exception as e:
                    logger.error("Couldn't delete %s: %s", item, e)
                    errors.append(e)
            finally:
                queue.task_done()

    workers = [asyncio.create_task(worker()) for _ in range(transfers)]
    try:
        await produce(queue.put)
    finally:
        for _ in workers:
            await queue.put(_DONE)
        await asyncio.gather(*workers)

    if errors:
        raise PurgeException(errors)
