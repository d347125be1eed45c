"""
Directory entries produced by swiftfs listings.

An entry is either a :class:`File` wrapping an object handle or a synthetic
:class:`Directory` inferred from key prefixes.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from .object import SwiftObject


@dataclass(frozen=True)
class File:
    """An object in the store."""
    handle: "SwiftObject"

    @property
    def remote(self) -> str:
        return self.handle.remote


@dataclass(frozen=True)
class Directory:
    """A directory emulated from a common prefix, a marker or a container."""
    name: str
    size: int = 0
    items: int = -1

    @property
    def remote(self) -> str:
        return self.name


Entry = Union[File, Directory]
