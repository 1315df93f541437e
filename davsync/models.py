"""Data models for WebDAV responses."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional
from urllib.parse import unquote, urlsplit


@dataclass
class RemoteResource:
    """A single resource from a PROPFIND multistatus response."""

    href: str
    """Decoded path of the resource as reported by the server"""

    is_collection: bool = False
    """True for directories (collections)"""

    last_modified: Optional[datetime] = None
    """Value of DAV:getlastmodified in UTC"""

    content_length: Optional[int] = None
    """Value of DAV:getcontentlength"""

    etag: Optional[str] = None
    """Value of DAV:getetag"""

    @property
    def is_file(self) -> bool:
        return not self.is_collection

    @classmethod
    def from_response(cls, response: Any) -> RemoteResource:
        """Create a RemoteResource from a parsed ``webdav4`` response.

        Args:
            response: One entry of ``MultiStatusResponse.responses``
        """
        props = response.properties

        last_modified = props.modified
        if last_modified is not None:
            if last_modified.tzinfo is None:
                last_modified = last_modified.replace(tzinfo=timezone.utc)
            else:
                last_modified = last_modified.astimezone(timezone.utc)

        return cls(
            href=unquote(urlsplit(str(response.href)).path),
            is_collection=bool(props.collection),
            last_modified=last_modified,
            content_length=props.content_length,
            etag=props.etag,
        )
