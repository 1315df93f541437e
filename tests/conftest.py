"""Shared fixtures: an in-memory WebDAV server behind httpx.MockTransport."""

import posixpath
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from typing import Optional
from urllib.parse import unquote
from xml.sax.saxutils import escape

import httpx
import pytest
import pytest_asyncio

from davsync.api import WebDAVClient

HOST = "https://dav.example.com"


class FakeDavServer:
    """Minimal WebDAV server keeping files and collections in memory."""

    def __init__(self) -> None:
        self.files: dict[str, tuple[bytes, datetime]] = {}
        self.dirs: set[str] = {"/"}
        self.requests: list[tuple[str, str]] = []
        self.failures: dict[tuple[str, str], int] = {}
        self.offline = False
        self.clock: Optional[datetime] = None

    # Helpers for tests

    def now(self) -> datetime:
        if self.clock is not None:
            return self.clock
        return datetime.now(timezone.utc).replace(microsecond=0)

    def add_file(
        self, path: str, content: bytes, modified: Optional[datetime] = None
    ) -> None:
        parent = posixpath.dirname(path)
        while parent not in self.dirs:
            self.dirs.add(parent)
            parent = posixpath.dirname(parent)
        self.files[path] = (content, modified or self.now())

    def content(self, path: str) -> Optional[bytes]:
        entry = self.files.get(path)
        return entry[0] if entry else None

    def fail(self, method: str, path: str, status: int) -> None:
        self.failures[(method, path)] = status

    def calls(self, method: str) -> list[str]:
        return [path for m, path in self.requests if m == method]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    # Request handling

    def handle(self, request: httpx.Request) -> httpx.Response:
        if self.offline:
            raise httpx.ConnectError("Connection refused", request=request)

        path = unquote(request.url.path)
        if path != "/":
            path = path.rstrip("/")
        method = request.method
        self.requests.append((method, path))

        status = self.failures.get((method, path))
        if status is not None:
            return httpx.Response(status)

        if method == "PROPFIND":
            return self._propfind(path)
        if method == "GET":
            if path in self.files:
                return httpx.Response(200, content=self.files[path][0])
            return httpx.Response(404)
        if method == "PUT":
            if posixpath.dirname(path) not in self.dirs:
                return httpx.Response(409)
            created = path not in self.files
            self.files[path] = (request.content, self.now())
            return httpx.Response(201 if created else 204)
        if method == "MKCOL":
            if path in self.dirs or path in self.files:
                return httpx.Response(405)
            if posixpath.dirname(path) not in self.dirs:
                return httpx.Response(409)
            self.dirs.add(path)
            return httpx.Response(201)
        return httpx.Response(405)

    def _propfind(self, path: str) -> httpx.Response:
        if path in self.files:
            content, modified = self.files[path]
            props = (
                "<d:resourcetype/>"
                f"<d:getlastmodified>{format_datetime(modified, usegmt=True)}</d:getlastmodified>"
                f"<d:getcontentlength>{len(content)}</d:getcontentlength>"
                '<d:getetag>"etag"</d:getetag>'
            )
        elif path in self.dirs:
            props = "<d:resourcetype><d:collection/></d:resourcetype>"
        else:
            return httpx.Response(404)

        body = (
            '<?xml version="1.0" encoding="utf-8"?>'
            '<d:multistatus xmlns:d="DAV:"><d:response>'
            f"<d:href>{escape(path)}</d:href>"
            f"<d:propstat><d:prop>{props}</d:prop>"
            "<d:status>HTTP/1.1 200 OK</d:status></d:propstat>"
            "</d:response></d:multistatus>"
        )
        return httpx.Response(
            207,
            content=body.encode("utf-8"),
            headers={"Content-Type": "application/xml; charset=utf-8"},
        )


@pytest.fixture
def server():
    """Provide an empty in-memory WebDAV server."""
    return FakeDavServer()


@pytest_asyncio.fixture
async def client(server):
    """Provide a WebDAV client talking to the in-memory server."""
    dav = WebDAVClient(
        host=HOST, login="user", password="secret", transport=server.transport
    )
    yield dav
    await dav.close()


@pytest.fixture
def old_time():
    """A remote timestamp well in the past."""
    return datetime(2020, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def future_time():
    """A remote timestamp well in the future."""
    return datetime.now(timezone.utc).replace(microsecond=0) + timedelta(days=365)
