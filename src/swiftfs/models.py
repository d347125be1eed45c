"""
Data models for swiftfs
"""

import re
from dataclasses import dataclass
from datetime import datetime, UTC
from typing import Optional, Union

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

_SIZE_SUFFIXES = {
    "b": 1,
    "k": 1 << 10,
    "m": 1 << 20,
    "g": 1 << 30,
    "t": 1 << 40,
    "p": 1 << 50,
}
_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([bkmgtp]?)\s*$", re.IGNORECASE)


def parse_size_suffix(value: Union[int, str]) -> int:
    """
    Parse a size such as ``"5G"`` or ``"512k"`` into bytes.

    A bare number is taken as KiB, a ``b`` suffix as bytes and the
    remaining suffixes as binary multiples.
    """
    if isinstance(value, int):
        return value
    match = _SIZE_PATTERN.match(value)
    if not match:
        raise ValueError(f"Invalid size '{value}'.")
    number, suffix = match.groups()
    multiplier = _SIZE_SUFFIXES[suffix.lower()] if suffix else _SIZE_SUFFIXES["k"]
    return int(float(number) * multiplier)


@dataclass
class ObjectInfo:
    """Represents an object as reported by a listing or a HEAD request."""
    name: str
    bytes: int = 0
    content_type: Optional[str] = None
    hash: Optional[str] = None
    last_modified: datetime = EPOCH
    pseudo_directory: bool = False


@dataclass
class ContainerInfo:
    """Represents a container with its rollup counters."""
    name: str
    count: int = 0
    bytes: int = 0


@dataclass
class SwiftFsOptions:
    """
    Settings for a :class:`~swiftfs.fs.SwiftFs`.

    Args:
        chunk_size: Above this size files are chunked into the segments
            container. Accepts bytes or a size suffix string ("5G").
        no_check_container: Don't probe the container before creating it.
        transfers: Number of parallel deletes during a purge.
        segments_suffix: Appended to the container name to form the
            segments container.
        list_chunk: Number of names fetched per listing request. Swift
            pages listings by 1000 names, which is the value to use
            against a real store; smaller values only exercise paging
            in tests.
    """
    chunk_size: Union[int, str] = 5 * 1024 * 1024 * 1024
    no_check_container: bool = False
    transfers: int = 4
    segments_suffix: str = "_segments"
    list_chunk: int = 1000

    def __post_init__(self):
        self.chunk_size = parse_size_suffix(self.chunk_size)
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be greater than zero")
        if self.transfers < 1:
            raise ValueError("transfers must be at least 1")
        if self.list_chunk < 1:
            raise ValueError("list_chunk must be at least 1")
        if not self.segments_suffix:
            raise ValueError("segments_suffix must not be empty")
