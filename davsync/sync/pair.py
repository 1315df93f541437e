"""Sync pair definition."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SyncPair:
    """One local file kept in step with one remote file.

    Examples:
        >>> pair = SyncPair("/home/user/notes.txt", "/docs/notes.txt")
        >>> pair.remote_path
        '/docs/notes.txt'
    """

    local_path: str
    """Path of the file on the local filesystem"""

    remote_path: str
    """Absolute path of the file on the WebDAV endpoint"""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SyncPair":
        """Create a sync pair from a dictionary.

        Accepts both ``local``/``remote`` and ``localPath``/``remotePath``
        keys.

        Raises:
            ValueError: If either path is missing
        """
        local = data.get("localPath", data.get("local"))
        remote = data.get("remotePath", data.get("remote"))
        if not local or not remote:
            raise ValueError("Sync pair requires both a local and a remote path")
        return cls(local_path=str(local), remote_path=str(remote))

    def to_dict(self) -> dict[str, str]:
        return {"local": self.local_path, "remote": self.remote_path}

    def __str__(self) -> str:
        return f"{self.local_path} <=> {self.remote_path}"
