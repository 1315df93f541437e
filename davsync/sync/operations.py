"""Transfer primitives used by the sync engine."""

import asyncio
import logging
import os
import uuid
from datetime import datetime
from pathlib import Path

from ..api import WebDAVClient
from ..exceptions import DavFileNotFoundError, DavSyncError, DavUploadError
from ..utils import remote_parent_segments, timestamp_to_utc

logger = logging.getLogger(__name__)

# MKCOL answers 405 Method Not Allowed when the collection already exists
MKCOL_CREATED = 201
MKCOL_ALREADY_EXISTS = 405


def _replace_file(path: Path, content: bytes) -> None:
    """Write ``content`` to a sibling file, then rename it over ``path``.

    The target keeps its old content until the rename, so an interrupted
    write never leaves it truncated.
    """
    temp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.part")
    try:
        # "x" mode honours the umask like a plain write would
        with open(temp_path, "xb") as f:
            f.write(content)
        os.replace(temp_path, path)
    except Exception:
        temp_path.unlink(missing_ok=True)
        raise


class SyncOperations:
    """Existence checks and whole-file transfers between local and remote.

    Local filesystem calls run in a worker thread so the event loop is not
    blocked while they execute.
    """

    def __init__(self, client: WebDAVClient):
        """Initialize sync operations.

        Args:
            client: WebDAV client of the current run
        """
        self.client = client

    async def exists_locally(self, local_path: str) -> bool:
        return await asyncio.to_thread(Path(local_path).exists)

    async def exists_remotely(self, remote_path: str) -> bool:
        """Check whether a remote path exists.

        Any PROPFIND answer other than 404 counts as existing.
        """
        status = await self.client.list_status(remote_path, depth=0)
        return status != 404

    async def local_mtime(self, local_path: str) -> datetime:
        """Get the modification time of a local file in UTC."""
        stat = await asyncio.to_thread(Path(local_path).stat)
        return timestamp_to_utc(stat.st_mtime)

    async def remote_mtime(self, remote_path: str) -> datetime:
        """Get the live last-modified time of a remote file.

        Raises:
            DavSyncError: If the path is a collection or has no timestamp
        """
        resources = await self.client.list(remote_path)
        if not resources or resources[0].is_collection:
            raise DavSyncError(f"Remote path is not a file: {remote_path}")
        last_modified = resources[0].last_modified
        if last_modified is None:
            raise DavSyncError(f"Remote file has no modification time: {remote_path}")
        return last_modified

    async def can_download(self, local_path: str) -> bool:
        """Check that the local parent directory already exists.

        Local directories are never created by a download.
        """
        parent = Path(local_path).parent
        return await asyncio.to_thread(parent.is_dir)

    async def download(self, remote_path: str, local_path: str) -> None:
        """Fetch a remote file and overwrite or create the local file.

        Args:
            remote_path: Remote file to fetch
            local_path: Local file to write

        Raises:
            DavDownloadError: If the server answers with a non-success status
            OSError: If the local file cannot be written
        """
        content = await self.client.get(remote_path)
        await asyncio.to_thread(_replace_file, Path(local_path), content)
        logger.info(f"Downloaded {remote_path} -> {local_path} ({len(content)} bytes)")

    async def ensure_remote_directories(self, remote_path: str) -> None:
        """Create every missing parent collection of a remote path.

        Segments are created from the root downward. A segment that already
        exists is fine, any other failure aborts.

        Raises:
            DavUploadError: If a segment cannot be created
        """
        for segment in remote_parent_segments(remote_path):
            status = await self.client.mkcol(segment)
            if status not in (MKCOL_CREATED, MKCOL_ALREADY_EXISTS):
                raise DavUploadError(
                    f"Failed to create remote directory {segment} (status {status})"
                )
            if status == MKCOL_CREATED:
                logger.debug(f"Created remote directory {segment}")

    async def upload(self, local_path: str, remote_path: str) -> None:
        """Upload a local file, creating remote parent directories first.

        Args:
            local_path: Local file to read
            remote_path: Remote file to overwrite or create

        Raises:
            DavFileNotFoundError: If the local file does not exist
            DavUploadError: If directory creation or the upload fails
        """
        await self.ensure_remote_directories(remote_path)

        try:
            content = await asyncio.to_thread(Path(local_path).read_bytes)
        except FileNotFoundError as e:
            raise DavFileNotFoundError(local_path) from e

        await self.client.put(remote_path, content)
        logger.info(f"Uploaded {local_path} -> {remote_path} ({len(content)} bytes)")
