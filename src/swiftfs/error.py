"""
Exception classes for swiftfs
"""


class SwiftFsException(Exception):
    """
    Base exception for all swiftfs errors.
    """

    def __init__(self, message: str, status_code: int = None, error_code: str = None):
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code


class ObjectNotFoundException(SwiftFsException):
    """Thrown when an object is not found."""

    def __init__(self, container: str, object_name: str):
        super().__init__(
            f"Object '{object_name}' not found in container '{container}'.",
            status_code=404,
            error_code="ObjectNotFound"
        )
        self.container = container
        self.object_name = object_name


class ContainerNotFoundException(SwiftFsException):
    """Thrown when a container is not found."""

    def __init__(self, container: str):
        super().__init__(
            f"Container '{container}' not found.",
            status_code=404,
            error_code="ContainerNotFound"
        )
        self.container = container


class ContainerNotEmptyException(SwiftFsException):
    """Thrown when deleting a container that still holds objects."""

    def __init__(self, container: str):
        super().__init__(
            f"Container '{container}' is not empty.",
            status_code=409,
            error_code="ContainerNotEmpty"
        )
        self.container = container


class DirectoryNotFoundException(SwiftFsException):
    """Thrown when listing a directory whose container does not exist."""

    def __init__(self, directory: str):
        super().__init__(f"Directory '{directory}' not found.", error_code="DirectoryNotFound")
        self.directory = directory


class ContainerRequiredException(SwiftFsException):
    """Thrown when an operation needing a container runs at the store root."""

    def __init__(self, message: str = "Container name required."):
        super().__init__(message, error_code="ContainerRequired")


class HashUnsupportedException(SwiftFsException):
    """Thrown when a hash type the store cannot provide is requested."""

    def __init__(self, hash_type: str):
        super().__init__(f"Hash type '{hash_type}' is not supported.", error_code="HashUnsupported")


class CantCopyException(SwiftFsException):
    """Thrown when a server side copy is impossible."""

    def __init__(self, message: str = "Can't copy object - not the same remote type."):
        super().__init__(message, error_code="CantCopy")


class FatalException(SwiftFsException):
    """Thrown for errors which must not be retried."""

    def __init__(self, message: str):
        super().__init__(message, error_code="Fatal")


class IsFileException(SwiftFsException):
    """
    Thrown when the root of a filesystem points at an existing object.

    ``fs`` holds a filesystem rooted at the parent directory.
    """

    def __init__(self, fs):
        super().__init__(f"Root of {fs} is a file.", error_code="IsFile")
        self.fs = fs


class PurgeException(SwiftFsException):
    """Thrown when one or more deletes failed during a purge."""

    def __init__(self, errors: list):
        super().__init__(f"Failed to delete {len(errors)} files.", error_code="PurgeFailed")
        self.errors = errors


class AuthenticationException(SwiftFsException):
    """Thrown when the auth token is rejected."""

    def __init__(self, message: str):
        super().__init__(
            message,
            status_code=401,
            error_code="Unauthorized"
        )


class ServerException(SwiftFsException):
    """Thrown when the server returns an error."""

    def __init__(self, message: str, status_code: int, error_code: str = None):
        super().__init__(message, status_code, error_code)


class AccessDeniedException(SwiftFsException):
    """Thrown when access is denied."""

    def __init__(self, message: str):
        super().__init__(
            message,
            status_code=403,
            error_code="AccessDenied"
        )
