"""davsync - keep local files in sync with files on a WebDAV server."""

from .api import WebDAVClient
from .exceptions import (
    DavAuthenticationError,
    DavConfigError,
    DavDownloadError,
    DavFileNotFoundError,
    DavInvalidResponseError,
    DavNetworkError,
    DavNotFoundError,
    DavPermissionError,
    DavSyncError,
    DavUploadError,
)
from .models import RemoteResource

__version__ = "0.1.0"

__all__ = [
    "WebDAVClient",
    "RemoteResource",
    "DavSyncError",
    "DavAuthenticationError",
    "DavConfigError",
    "DavDownloadError",
    "DavFileNotFoundError",
    "DavInvalidResponseError",
    "DavNetworkError",
    "DavNotFoundError",
    "DavPermissionError",
    "DavUploadError",
]
