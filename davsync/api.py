"""WebDAV client used as the transport session.

The protocol work is done by ``webdav4``. Its client is synchronous, so every
call runs in a worker thread and is exposed here as a coroutine.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, TypeVar, cast
from urllib.parse import quote

import httpx
from webdav4.client import Client as DavClient
from webdav4.client import ClientError, HTTPError, ResourceNotFound

from .config import config
from .exceptions import (
    DavAuthenticationError,
    DavConfigError,
    DavDownloadError,
    DavInvalidResponseError,
    DavNetworkError,
    DavNotFoundError,
    DavPermissionError,
    DavSyncError,
    DavUploadError,
)
from .models import RemoteResource
from .utils import DEFAULT_TIMEOUT, normalize_remote_path

logger = logging.getLogger(__name__)

T = TypeVar("T")


class WebDAVClient:
    """Client for a single WebDAV endpoint.

    One instance owns one ``webdav4`` client and is meant to be used by a
    single sync run. It exposes listing, whole-file get/put and directory
    creation, nothing more.
    """

    def __init__(
        self,
        host: str | None = None,
        login: str | None = None,
        password: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize WebDAV client.

        Args:
            host: Endpoint base URL (uses config if not provided)
            login: Login for HTTP basic auth (uses config if not provided)
            password: Password for HTTP basic auth (uses config if not provided)
            timeout: Request timeout in seconds (default: 30.0)
            transport: Optional httpx transport, mainly for tests

        Raises:
            DavConfigError: If the host is missing or not an http(s) URL
        """
        self.host = (host or config.host or "").rstrip("/")
        self.login = login if login is not None else config.login
        self.password = password if password is not None else config.password
        self.timeout = timeout
        self._transport = transport

        if not self.host:
            raise DavConfigError(
                "WebDAV host not configured. Please set DAVSYNC_HOST "
                "environment variable or run 'davsync init'."
            )

        try:
            url = httpx.URL(self.host)
        except (httpx.InvalidURL, TypeError) as e:
            raise DavConfigError(f"Invalid WebDAV host: {self.host}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise DavConfigError(f"Invalid WebDAV host: {self.host}")

        self._http: httpx.Client | None = None
        self._dav: DavClient | None = None

    def _get_client(self) -> DavClient:
        """Get or create the webdav4 client and its httpx session."""
        if self._dav is None or self._http is None or self._http.is_closed:
            auth = None
            if self.login:
                auth = httpx.BasicAuth(self.login, self.password or "")
            self._http = httpx.Client(
                auth=auth,
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                transport=self._transport,
            )
            self._dav = DavClient(self.host, http_client=self._http, retry=False)
        return self._dav

    async def close(self) -> None:
        """Close the client and release connections."""
        if self._http is not None and not self._http.is_closed:
            self._http.close()
        self._http = None
        self._dav = None

    async def __aenter__(self) -> WebDAVClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _in_thread(self, func: Callable[..., T], *args: Any) -> T:
        return await asyncio.to_thread(func, *args)

    def url_for(self, path: str) -> str:
        """Build the absolute URL of a remote path.

        A trailing slash on ``path`` is preserved, since collections are
        addressed with one.
        """
        normalized = normalize_remote_path(path)
        if path.endswith("/") and normalized != "/":
            normalized += "/"
        return f"{self.host}{quote(normalized)}"

    def _error_for_status(self, status_code: int, target: str) -> DavSyncError:
        """Translate an HTTP error status into a davsync exception.

        Args:
            status_code: Status of the failed response
            target: Remote path the request was made for

        Returns:
            DavAuthenticationError on 401, DavPermissionError on 403,
            DavNotFoundError on 404 and DavSyncError otherwise
        """
        if status_code == 401:
            return DavAuthenticationError("Invalid login or password")
        elif status_code == 403:
            return DavPermissionError("Access forbidden - check your permissions")
        elif status_code == 404:
            return DavNotFoundError(f"Resource not found: {target}")
        return DavSyncError(f"Request for {target} failed with status {status_code}")

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send a request through the shared session without checking its status.

        Raises:
            DavNetworkError: If the request could not be sent
        """
        self._get_client()
        session = cast(httpx.Client, self._http)
        url = self.url_for(path)
        logger.debug("%s %s", method, url)
        try:
            return session.request(method, url, **kwargs)
        except httpx.RequestError as e:
            raise DavNetworkError(f"Network error: {e}") from e

    def _propfind(self, path: str) -> list[RemoteResource]:
        dav = self._get_client()
        target = normalize_remote_path(path)
        logger.debug("PROPFIND %s", target)
        try:
            multistatus = dav.propfind(target.lstrip("/"), headers={"Depth": "0"})
        except ResourceNotFound as e:
            raise DavNotFoundError(f"Resource not found: {target}") from e
        except HTTPError as e:
            raise self._error_for_status(e.status_code, target) from e
        except ClientError as e:
            raise DavInvalidResponseError(
                f"Invalid PROPFIND response for {target}: {e}"
            ) from e
        except httpx.RequestError as e:
            raise DavNetworkError(f"Network error: {e}") from e

        return [
            RemoteResource.from_response(response)
            for response in multistatus.responses.values()
        ]

    # =========================
    # Listing Operations
    # =========================

    async def list_status(self, path: str, depth: int = 0) -> int:
        """Send a PROPFIND and return only the status code.

        Args:
            path: Remote path
            depth: Depth header value (0 or 1)

        Returns:
            HTTP status code of the PROPFIND response
        """
        response = await self._in_thread(
            lambda: self._send("PROPFIND", path, headers={"Depth": str(depth)})
        )
        return response.status_code

    async def list(self, path: str) -> list[RemoteResource]:
        """List the properties of a remote path.

        Args:
            path: Remote path

        Returns:
            Resources reported by the server for a depth-0 PROPFIND

        Raises:
            DavNotFoundError: If the path does not exist
            DavInvalidResponseError: If the response is not a multistatus body
        """
        return await self._in_thread(self._propfind, path)

    async def probe(self) -> bool:
        """Check that the endpoint is reachable and accepts our credentials.

        Returns:
            True if listing the root succeeds, False otherwise
        """
        try:
            await self.list("/")
        except DavSyncError as e:
            logger.debug("Connection probe failed: %s", e)
            return False
        return True

    # =========================
    # Transfer Operations
    # =========================

    async def get(self, path: str) -> bytes:
        """Download the full content of a remote file.

        Args:
            path: Remote path

        Returns:
            File content as bytes

        Raises:
            DavDownloadError: If the server does not answer with a success status
            DavNetworkError: If the request could not be sent
        """
        response = await self._in_thread(self._send, "GET", path)
        if not response.is_success:
            raise DavDownloadError(
                f"Download of {path} failed with status {response.status_code}"
            )
        return response.content

    async def put(self, path: str, content: bytes) -> None:
        """Store content at a remote path, overwriting any existing file.

        Args:
            path: Remote path
            content: Full file content

        Raises:
            DavUploadError: If the server does not answer with a success status
            DavNetworkError: If the request could not be sent
        """
        response = await self._in_thread(
            lambda: self._send("PUT", path, content=content)
        )
        if not response.is_success:
            raise DavUploadError(
                f"Upload to {path} failed with status {response.status_code}"
            )

    async def mkcol(self, path: str) -> int:
        """Create a remote collection.

        Args:
            path: Remote directory path (a trailing slash is added)

        Returns:
            HTTP status code of the MKCOL response
        """
        if not path.endswith("/"):
            path = path + "/"
        response = await self._in_thread(self._send, "MKCOL", path)
        return response.status_code
