"""
Path helpers for swiftfs
"""

import re
from typing import Tuple

from .error import FatalException

_PATH_PATTERN = re.compile(r"^([^/]*)(.*)$", re.DOTALL)


def parse_path(path: str) -> Tuple[str, str]:
    """
    Split ``container/some/dir`` into ``("container", "some/dir")``.

    Leading and trailing slashes are trimmed from the directory. An empty
    result is legal: an empty container means the whole store.
    """
    if not isinstance(path, str):
        raise FatalException(f"Couldn't find container in swift path {path!r}.")
    match = _PATH_PATTERN.match(path)
    if match is None:
        raise FatalException(f"Couldn't find container in swift path {path!r}.")
    container, directory = match.groups()
    return container, directory.strip("/")
