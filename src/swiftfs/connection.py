"""
SwiftConnection - minimal client for the OpenStack Swift v1 API
"""

import logging
from datetime import datetime, UTC
from email.utils import parsedate_to_datetime
from typing import Any, BinaryIO, Dict, List, Mapping, Optional, Tuple
from urllib.parse import quote

import httpx

from ._http import HttpClient
from .models import EPOCH, ContainerInfo, ObjectInfo
from .error import (
    AccessDeniedException,
    AuthenticationException,
    ContainerNotEmptyException,
    ContainerNotFoundException,
    ObjectNotFoundException,
    ServerException,
)


class SwiftConnection:
    """
    Client for a Swift storage account.

    Authentication is not negotiated here: the connection is given the
    storage URL and token an identity service already issued.

    Example:
        conn = SwiftConnection(
            storage_url="https://swift.example.com/v1/AUTH_demo",
            auth_token="gAAAAAB...",
        )

        info, headers = await conn.object("photos", "2024/cat.jpg")
    """

    def __init__(
        self,
        storage_url: str,
        auth_token: str,
        request_timeout: int = 30,
        max_retries: int = 3,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize SwiftConnection.

        Args:
            storage_url: Account URL (e.g., "https://host/v1/AUTH_tenant")
            auth_token: Token sent as X-Auth-Token
            request_timeout: Request timeout in seconds
            max_retries: Maximum number of attempts for failed requests
            transport: Optional httpx transport, mainly for tests
        """
        self.storage_url = storage_url.rstrip("/")
        self.auth_token = auth_token
        self._http = HttpClient(timeout=request_timeout, max_retries=max_retries, transport=transport)
        self._logger = logging.getLogger(__name__)

    def _url(self, container: Optional[str] = None, object_name: Optional[str] = None) -> str:
        url = self.storage_url
        if container is not None:
            url += "/" + quote(container, safe="")
            if object_name is not None:
                url += "/" + quote(object_name, safe="/")
        return url

    async def _make_request(
        self,
        method: str,
        container: Optional[str] = None,
        object_name: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        content: Optional[Any] = None,
        params: Optional[Dict[str, str]] = None,
        retry: bool = True,
    ) -> httpx.Response:
        """Make authenticated HTTP request."""
        request_headers = {"X-Auth-Token": self.auth_token}
        if headers:
            request_headers.update(headers)

        url = self._url(container, object_name)
        self._logger.debug("[Swift] %s %s", method, url)

        if method == "GET":
            response = await self._http.get(url, headers=request_headers, params=params)
        elif method == "HEAD":
            response = await self._http.head(url, headers=request_headers)
        elif method == "PUT":
            response = await self._http.put(url, content=content, headers=request_headers, retry=retry)
        elif method == "POST":
            response = await self._http.post(url, content=content, headers=request_headers)
        elif method == "DELETE":
            response = await self._http.delete(url, headers=request_headers)
        else:
            raise ValueError(f"Unsupported HTTP method: {method}")

        if response.status_code >= 400:
            if response.status_code == 401:
                raise AuthenticationException("Auth token rejected by the server.")
            if response.status_code == 403:
                raise AccessDeniedException(f"Access denied for {method} {url}.")
            error_msg = f"Request failed with status {response.status_code}"
            if response.status_code == 404:
                error_msg = "Resource not found"
            raise ServerException(error_msg, response.status_code)

        return response

    @staticmethod
    def _parse_listing_time(value: Optional[str]) -> datetime:
        if not value:
            return EPOCH
        parsed = datetime.fromisoformat(value)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=UTC)
        return parsed

    def _parse_object(self, data: Dict[str, Any]) -> ObjectInfo:
        if "subdir" in data:
            return ObjectInfo(name=data["subdir"], pseudo_directory=True)
        return ObjectInfo(
            name=data["name"],
            bytes=int(data.get("bytes", 0)),
            content_type=data.get("content_type"),
            hash=data.get("hash"),
            last_modified=self._parse_listing_time(data.get("last_modified")),
        )

    @staticmethod
    def _object_info_from_headers(object_name: str, headers: httpx.Headers) -> ObjectInfo:
        last_modified = EPOCH
        if "Last-Modified" in headers:
            try:
                last_modified = parsedate_to_datetime(headers["Last-Modified"])
            except (TypeError, ValueError):
                last_modified = EPOCH
        return ObjectInfo(
            name=object_name,
            bytes=int(headers.get("Content-Length", 0)),
            content_type=headers.get("Content-Type"),
            hash=headers.get("Etag", "").strip('"'),
            last_modified=last_modified,
        )

    # Container operations

    async def containers(self, limit: int = 1000, marker: str = "") -> List[ContainerInfo]:
        """Return one page of containers after ``marker``."""
        params = {"format": "json", "limit": str(limit)}
        if marker:
            params["marker"] = marker
        response = await self._make_request("GET", params=params)
        if response.status_code == 204 or not response.content:
            return []
        return [
            ContainerInfo(
                name=item["name"],
                count=int(item.get("count", 0)),
                bytes=int(item.get("bytes", 0)),
            )
            for item in response.json()
        ]

    async def containers_all(self, limit: int = 1000) -> List[ContainerInfo]:
        """List every container in the account."""
        result: List[ContainerInfo] = []
        marker = ""
        while True:
            page = await self.containers(limit=limit, marker=marker)
            result.extend(page)
            if len(page) < limit:
                return result
            marker = page[-1].name

    async def container(self, container: str) -> Tuple[ContainerInfo, httpx.Headers]:
        """Get container counters and headers."""
        try:
            response = await self._make_request("HEAD", container)
        except ServerException as e:
            if e.status_code == 404:
                raise ContainerNotFoundException(container)
            raise
        info = ContainerInfo(
            name=container,
            count=int(response.headers.get("X-Container-Object-Count", 0)),
            bytes=int(response.headers.get("X-Container-Bytes-Used", 0)),
        )
        return info, response.headers

    async def container_create(self, container: str, headers: Optional[Mapping[str, str]] = None) -> None:
        """Create a container; succeeds if it already exists."""
        await self._make_request("PUT", container, headers=headers, content=b"")

    async def container_delete(self, container: str) -> None:
        """Delete an empty container."""
        try:
            await self._make_request("DELETE", container)
        except ServerException as e:
            if e.status_code == 404:
                raise ContainerNotFoundException(container)
            if e.status_code == 409:
                raise ContainerNotEmptyException(container)
            raise

    # Object operations

    async def objects(
        self,
        container: str,
        prefix: str = "",
        delimiter: str = "",
        limit: int = 1000,
        marker: str = "",
    ) -> List[ObjectInfo]:
        """
        Return one page of the objects in a container.

        With a delimiter, names sharing a prefix up to the next delimiter
        come back as a single ``pseudo_directory`` entry.
        """
        params = {"format": "json", "limit": str(limit)}
        if prefix:
            params["prefix"] = prefix
        if delimiter:
            params["delimiter"] = delimiter
        if marker:
            params["marker"] = marker

        try:
            response = await self._make_request("GET", container, params=params)
        except ServerException as e:
            if e.status_code == 404:
                raise ContainerNotFoundException(container)
            raise

        if response.status_code == 204 or not response.content:
            return []
        return [self._parse_object(item) for item in response.json()]

    async def object(self, container: str, object_name: str) -> Tuple[ObjectInfo, httpx.Headers]:
        """Get object metadata without downloading."""
        try:
            response = await self._make_request("HEAD", container, object_name)
        except ServerException as e:
            if e.status_code == 404:
                raise ObjectNotFoundException(container, object_name)
            raise
        return self._object_info_from_headers(object_name, response.headers), response.headers

    async def object_put(
        self,
        container: str,
        object_name: str,
        content: Any,
        content_length: int,
        content_type: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> str:
        """
        Upload an object and return its etag.

        ``content`` is bytes or an async iterator of bytes. Iterators are
        streamed once and never retried.
        """
        request_headers = dict(headers or {})
        request_headers["Content-Length"] = str(content_length)
        if content_type:
            request_headers["Content-Type"] = content_type
        retry = content is None or isinstance(content, (bytes, bytearray))
        response = await self._make_request(
            "PUT",
            container,
            object_name,
            headers=request_headers,
            content=content,
            retry=retry,
        )
        return response.headers.get("Etag", "").strip('"')

    async def object_get(
        self,
        container: str,
        object_name: str,
        output: BinaryIO,
        headers: Optional[Mapping[str, str]] = None,
    ) -> ObjectInfo:
        """Download an object into ``output``."""
        try:
            response = await self._make_request("GET", container, object_name, headers=headers)
        except ServerException as e:
            if e.status_code == 404:
                raise ObjectNotFoundException(container, object_name)
            raise

        output.write(response.content)
        return self._object_info_from_headers(object_name, response.headers)

    async def object_update(self, container: str, object_name: str, headers: Mapping[str, str]) -> None:
        """Replace the object's metadata headers."""
        try:
            await self._make_request("POST", container, object_name, headers=headers)
        except ServerException as e:
            if e.status_code == 404:
                raise ObjectNotFoundException(container, object_name)
            raise

    async def object_delete(self, container: str, object_name: str) -> None:
        """Remove an object from the container."""
        try:
            await self._make_request("DELETE", container, object_name)
        except ServerException as e:
            if e.status_code == 404:
                raise ObjectNotFoundException(container, object_name)
            raise

    async def object_copy(
        self,
        source_container: str,
        source_object: str,
        destination_container: str,
        destination_object: str,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        """Copy an object server side."""
        request_headers = dict(headers or {})
        request_headers["X-Copy-From"] = "/" + quote(source_container, safe="") + "/" + quote(source_object, safe="/")
        request_headers["Content-Length"] = "0"
        try:
            await self._make_request(
                "PUT",
                destination_container,
                destination_object,
                headers=request_headers,
                content=b"",
            )
        except ServerException as e:
            if e.status_code == 404:
                raise ObjectNotFoundException(source_container, source_object)
            raise

    async def close(self) -> None:
        """Close the connection and cleanup resources."""
        await self._http.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
