"""Unit tests for the WebDAV client."""

from unittest.mock import patch

import httpx
import pytest

from davsync.api import WebDAVClient
from davsync.exceptions import (
    DavAuthenticationError,
    DavConfigError,
    DavDownloadError,
    DavNetworkError,
    DavNotFoundError,
    DavPermissionError,
    DavUploadError,
)

HOST = "https://dav.example.com"


class TestWebDAVClientInit:
    """Tests for WebDAVClient initialization."""

    def test_init_with_host(self):
        client = WebDAVClient(host="https://dav.example.com/", login="u", password="p")
        assert client.host == "https://dav.example.com"
        assert client.login == "u"
        assert client.password == "p"

    def test_init_without_host_raises_error(self):
        with patch("davsync.api.config") as mock_config:
            mock_config.host = None
            with pytest.raises(DavConfigError, match="host not configured"):
                WebDAVClient(host=None)

    def test_init_uses_config(self):
        with patch("davsync.api.config") as mock_config:
            mock_config.host = "http://nas.local:8080/dav"
            mock_config.login = "me"
            mock_config.password = "pw"
            client = WebDAVClient()
        assert client.host == "http://nas.local:8080/dav"
        assert client.login == "me"

    @pytest.mark.parametrize("host", ["ftp://example.com", "example.com", "http://"])
    def test_init_with_invalid_host_raises_error(self, host):
        with pytest.raises(DavConfigError, match="Invalid WebDAV host"):
            WebDAVClient(host=host)

    def test_url_for_quotes_path(self):
        client = WebDAVClient(host="https://dav.example.com/files")
        assert client.url_for("my docs/a.txt") == (
            "https://dav.example.com/files/my%20docs/a.txt"
        )

    def test_url_for_keeps_collection_slash(self):
        client = WebDAVClient(host=HOST)
        assert client.url_for("/a/b/") == f"{HOST}/a/b/"
        assert client.url_for("/") == f"{HOST}/"


class TestListing:
    """Tests for PROPFIND based operations."""

    @pytest.mark.asyncio
    async def test_list_file(self, server, client, old_time):
        server.add_file("/docs/a.txt", b"hello", old_time)

        resources = await client.list("/docs/a.txt")

        assert len(resources) == 1
        assert resources[0].is_file
        assert resources[0].last_modified == old_time
        assert resources[0].content_length == 5
        assert server.requests[-1] == ("PROPFIND", "/docs/a.txt")

    @pytest.mark.asyncio
    async def test_list_missing_raises_not_found(self, client):
        with pytest.raises(DavNotFoundError):
            await client.list("/missing.txt")

    @pytest.mark.asyncio
    async def test_list_status(self, server, client):
        server.add_file("/a.txt", b"x")
        assert await client.list_status("/a.txt") == 207
        assert await client.list_status("/b.txt") == 404

    @pytest.mark.asyncio
    async def test_probe_success(self, client):
        assert await client.probe() is True

    @pytest.mark.asyncio
    async def test_probe_unauthorized(self, server, client):
        server.fail("PROPFIND", "/", 401)
        assert await client.probe() is False

    @pytest.mark.asyncio
    async def test_probe_offline(self, server, client):
        server.offline = True
        assert await client.probe() is False

    @pytest.mark.asyncio
    async def test_unauthorized_listing_raises(self, server, client):
        server.fail("PROPFIND", "/a.txt", 401)
        with pytest.raises(DavAuthenticationError):
            await client.list("/a.txt")

    @pytest.mark.asyncio
    async def test_forbidden_listing_raises(self, server, client):
        server.fail("PROPFIND", "/a.txt", 403)
        with pytest.raises(DavPermissionError):
            await client.list("/a.txt")

    @pytest.mark.asyncio
    async def test_listing_offline_raises_network_error(self, server, client):
        server.offline = True
        with pytest.raises(DavNetworkError, match="Network error"):
            await client.list("/a.txt")

    @pytest.mark.asyncio
    async def test_basic_auth_header_sent(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("Authorization")
            seen["depth"] = request.headers.get("Depth")
            return httpx.Response(404)

        async with WebDAVClient(
            host=HOST,
            login="user",
            password="secret",
            transport=httpx.MockTransport(handler),
        ) as client:
            await client.list_status("/x")

        assert seen["auth"].startswith("Basic ")
        assert seen["depth"] == "0"


class TestTransfers:
    """Tests for GET, PUT and MKCOL."""

    @pytest.mark.asyncio
    async def test_get_returns_content(self, server, client):
        server.add_file("/a.txt", b"content")
        assert await client.get("/a.txt") == b"content"

    @pytest.mark.asyncio
    async def test_get_missing_raises_download_error(self, client):
        with pytest.raises(DavDownloadError, match="status 404"):
            await client.get("/missing.txt")

    @pytest.mark.asyncio
    async def test_get_network_error(self, server, client):
        server.offline = True
        with pytest.raises(DavNetworkError, match="Network error"):
            await client.get("/a.txt")

    @pytest.mark.asyncio
    async def test_put_stores_content(self, server, client):
        await client.put("/new.txt", b"data")
        assert server.content("/new.txt") == b"data"

    @pytest.mark.asyncio
    async def test_put_failure_raises_upload_error(self, server, client):
        server.fail("PUT", "/new.txt", 507)
        with pytest.raises(DavUploadError, match="status 507"):
            await client.put("/new.txt", b"data")

    @pytest.mark.asyncio
    async def test_mkcol_returns_status(self, server, client):
        assert await client.mkcol("/folder") == 201
        assert await client.mkcol("/folder/") == 405
        assert "/folder" in server.dirs
        assert server.calls("MKCOL") == ["/folder", "/folder"]

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, client):
        await client.probe()
        await client.close()
        await client.close()
