"""
swiftfs - file system semantics on top of OpenStack Swift object storage
"""

__version__ = "1.0.0"

from .connection import SwiftConnection
from .entries import Directory, Entry, File
from .fs import SwiftFs
from .lifecycle import ContainerLifecycle, ContainerState
from .models import ContainerInfo, ObjectInfo, SwiftFsOptions, parse_size_suffix
from .object import MetadataState, SwiftObject
from .error import (
    SwiftFsException,
    ObjectNotFoundException,
    ContainerNotFoundException,
    ContainerNotEmptyException,
    DirectoryNotFoundException,
    ContainerRequiredException,
    HashUnsupportedException,
    CantCopyException,
    FatalException,
    IsFileException,
    PurgeException,
    AuthenticationException,
    ServerException,
    AccessDeniedException,
)

__all__ = [
    "SwiftConnection",
    "SwiftFs",
    "SwiftFsOptions",
    "SwiftObject",
    "MetadataState",
    "ContainerLifecycle",
    "ContainerState",
    "ContainerInfo",
    "ObjectInfo",
    "Directory",
    "Entry",
    "File",
    "parse_size_suffix",
    "SwiftFsException",
    "ObjectNotFoundException",
    "ContainerNotFoundException",
    "ContainerNotEmptyException",
    "DirectoryNotFoundException",
    "ContainerRequiredException",
    "HashUnsupportedException",
    "CantCopyException",
    "FatalException",
    "IsFileException",
    "PurgeException",
    "AuthenticationException",
    "ServerException",
    "AccessDeniedException",
]
