"""Exceptions raised by the davsync client and sync engine."""


class DavSyncError(Exception):
    """Base exception for all davsync errors."""

    pass


class DavConfigError(DavSyncError):
    """Raised when the connection configuration is missing or invalid."""

    pass


class DavNetworkError(DavSyncError):
    """Raised when the WebDAV endpoint cannot be reached."""

    pass


class DavAuthenticationError(DavSyncError):
    """Raised when the endpoint rejects the login or password."""

    pass


class DavPermissionError(DavSyncError):
    """Raised when the endpoint forbids access to a resource."""

    pass


class DavNotFoundError(DavSyncError):
    """Raised when a remote resource does not exist."""

    pass


class DavInvalidResponseError(DavSyncError):
    """Raised when the endpoint returns a response that cannot be parsed."""

    pass


class DavDownloadError(DavSyncError):
    """Raised when fetching remote content fails."""

    pass


class DavUploadError(DavSyncError):
    """Raised when storing content or creating a remote directory fails."""

    pass


class DavFileNotFoundError(DavSyncError):
    """Raised when a local file does not exist."""

    def __init__(self, file_path: str):
        self.file_path = file_path
        super().__init__(f"Local file not found: {file_path}")
