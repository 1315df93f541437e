"""Sync metadata tracking last-known-synchronized timestamps.

The metadata lives on the remote side as a single blob at a fixed path. It
maps each remote path to the local modification time recorded the last time
a mutating run confirmed the pair synchronized, so later runs can tell a real
local change from a remote clock that simply runs ahead.
"""

import json
import logging
from datetime import datetime
from typing import Iterator, Optional

from ..api import WebDAVClient
from ..exceptions import DavInvalidResponseError, DavSyncError
from ..utils import DEFAULT_METADATA_PATH, parse_iso_timestamp

logger = logging.getLogger(__name__)

METADATA_FORMAT_VERSION = 1


class SyncMetadataRecord:
    """Mapping of remote path to last-synchronized UTC timestamp."""

    def __init__(self, entries: Optional[dict[str, datetime]] = None):
        self._entries: dict[str, datetime] = dict(entries or {})

    def get(self, remote_path: str) -> Optional[datetime]:
        return self._entries.get(remote_path)

    def record(self, remote_path: str, timestamp: datetime) -> None:
        """Store the synchronized timestamp for a remote path."""
        self._entries[remote_path] = timestamp

    def __contains__(self, remote_path: object) -> bool:
        return remote_path in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SyncMetadataRecord):
            return NotImplemented
        return self._entries == other._entries

    def to_dict(self) -> dict:
        """Convert the record to a dictionary for JSON serialization."""
        return {
            "version": METADATA_FORMAT_VERSION,
            "entries": {
                path: ts.isoformat() for path, ts in sorted(self._entries.items())
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SyncMetadataRecord":
        """Create a record from a dictionary.

        Raises:
            DavInvalidResponseError: If the data does not describe a record
        """
        if not isinstance(data, dict) or not isinstance(data.get("entries"), dict):
            raise DavInvalidResponseError("Sync metadata has no entries mapping")

        entries: dict[str, datetime] = {}
        for path, value in data["entries"].items():
            timestamp = parse_iso_timestamp(value) if isinstance(value, str) else None
            if timestamp is None:
                raise DavInvalidResponseError(
                    f"Invalid timestamp for {path!r} in sync metadata"
                )
            entries[path] = timestamp
        return cls(entries)

    def to_bytes(self) -> bytes:
        return json.dumps(self.to_dict(), separators=(",", ":")).encode("utf-8")

    @classmethod
    def from_bytes(cls, blob: bytes) -> "SyncMetadataRecord":
        try:
            data = json.loads(blob.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DavInvalidResponseError(f"Malformed sync metadata: {e}") from e
        return cls.from_dict(data)


class SyncMetadataStore:
    """Reads and writes the sync metadata blob on the remote endpoint."""

    def __init__(self, client: WebDAVClient, path: str = DEFAULT_METADATA_PATH):
        """Initialize metadata store.

        Args:
            client: WebDAV client of the current run
            path: Remote location of the metadata blob
        """
        self.client = client
        self.path = path

    async def load(self) -> SyncMetadataRecord:
        """Load the metadata recorded by the previous mutating run.

        A missing or unreadable blob means there is no history, so every
        failure here results in an empty record.

        Returns:
            The stored record, or an empty one
        """
        try:
            blob = await self.client.get(self.path)
            record = SyncMetadataRecord.from_bytes(blob)
        except DavSyncError as e:
            logger.debug(f"No usable sync metadata at {self.path}: {e}")
            return SyncMetadataRecord()

        logger.debug(f"Loaded sync metadata with {len(record)} entries")
        return record

    async def save(self, record: SyncMetadataRecord) -> None:
        """Serialize the whole record and upload it.

        Raises:
            DavSyncError: If the upload fails
        """
        await self.client.put(self.path, record.to_bytes())
        logger.debug(f"Saved sync metadata with {len(record)} entries to {self.path}")
