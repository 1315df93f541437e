"""Persistence and validation of sync pair definitions."""

import json
import logging
import os
from pathlib import Path
from typing import Optional, Union

from ..config import config
from ..utils import is_valid_remote_path, normalize_remote_path
from .pair import SyncPair

logger = logging.getLogger(__name__)

PAIRS_FILE_NAME = "pairs.json"


class SyncConfigError(Exception):
    """Raised when a pair definition is invalid or cannot be stored."""

    pass


def load_sync_pairs_from_json(path: Union[str, Path]) -> list[SyncPair]:
    """Load an ordered list of pairs from a JSON file.

    The file holds a list of objects with ``local`` and ``remote`` keys.

    Args:
        path: JSON file to read

    Returns:
        Pairs in file order

    Paths are normalized the same way as stored pairs. The local path is not
    required to exist, so a file can be fetched from the server on first run.

    Raises:
        SyncConfigError: If the file is missing or malformed, or if two
            entries share a local or a remote path
    """
    path = Path(path)
    if not path.exists():
        raise SyncConfigError(f"Sync pairs file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise SyncConfigError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, list):
        raise SyncConfigError(f"Expected a list of sync pairs in {path}")

    pairs: list[SyncPair] = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise SyncConfigError(f"Sync pair #{index + 1} must be an object")
        try:
            loaded = SyncPair.from_dict(item)
            loaded = normalize_pair(loaded.local_path, loaded.remote_path)
            check_paths_unused(loaded, pairs)
        except (ValueError, SyncConfigError) as e:
            raise SyncConfigError(f"Sync pair #{index + 1}: {e}") from e
        pairs.append(loaded)
    return pairs


class PairStore:
    """Key-value store of pairs, keyed by local path.

    Pairs are kept in a JSON object in insertion order, so listing them gives
    the order in which they were added.
    """

    def __init__(self, path: Optional[Path] = None):
        """Initialize pair store.

        Args:
            path: JSON file to use. Defaults to ``pairs.json`` in the
                davsync config directory.
        """
        self.path = path or (config.config_dir / PAIRS_FILE_NAME)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise SyncConfigError(f"Invalid pair store {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise SyncConfigError(f"Invalid pair store {self.path}")
        return {str(k): str(v) for k, v in data.items()}

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def list(self) -> list[SyncPair]:
        return [SyncPair(local, remote) for local, remote in self._read().items()]

    def get(self, local_path: str) -> Optional[SyncPair]:
        remote = self._read().get(local_path)
        if remote is None:
            return None
        return SyncPair(local_path, remote)

    def put(self, pair: SyncPair) -> None:
        data = self._read()
        data[pair.local_path] = pair.remote_path
        self._write(data)
        logger.debug(f"Stored pair {pair}")

    def delete(self, local_path: str) -> bool:
        """Remove the pair for a local path.

        Returns:
            True if a pair was removed, False if none existed
        """
        data = self._read()
        if local_path not in data:
            return False
        del data[local_path]
        self._write(data)
        logger.debug(f"Removed pair for {local_path}")
        return True

    def add(self, local_path: str, remote_path: str) -> SyncPair:
        """Validate, normalize and store a new pair.

        Args:
            local_path: Existing local path
            remote_path: Remote path, relative paths are taken from the root

        Returns:
            The stored pair with an absolute local path and a normalized
            remote path

        Raises:
            SyncConfigError: If the pair is invalid or either path is in use
        """
        pair = validate_pair(local_path, remote_path, self.list())
        self.put(pair)
        return pair

    def edit(self, old_local_path: str, local_path: str, remote_path: str) -> SyncPair:
        """Replace the pair for ``old_local_path`` with a new definition.

        The new pair is checked against every other pair and takes the
        position of the old one. The store is written once, so a rejected
        edit leaves the old pair in place.

        Args:
            old_local_path: Local path of the pair to replace
            local_path: New local path
            remote_path: New remote path

        Returns:
            The stored pair

        Raises:
            SyncConfigError: If no pair exists for ``old_local_path`` or the
                new pair is invalid
        """
        data = self._read()
        if old_local_path not in data:
            raise SyncConfigError(f"No pair for {old_local_path}")

        others = [
            SyncPair(local, remote)
            for local, remote in data.items()
            if local != old_local_path
        ]
        pair = validate_pair(local_path, remote_path, others)

        updated = {}
        for local, remote in data.items():
            if local == old_local_path:
                updated[pair.local_path] = pair.remote_path
            else:
                updated[local] = remote
        self._write(updated)
        logger.debug(f"Replaced pair for {old_local_path} with {pair}")
        return pair


def validate_pair(
    local_path: str, remote_path: str, existing: list[SyncPair]
) -> SyncPair:
    """Check a new pair against the existing ones.

    Args:
        local_path: Local path as entered
        remote_path: Remote path as entered
        existing: Pairs already defined

    Returns:
        Normalized pair

    Raises:
        SyncConfigError: With a user-facing message when the pair is rejected
    """
    if not local_path or not remote_path:
        raise SyncConfigError("Empty path")

    if not Path(local_path).exists():
        raise SyncConfigError("System path not found")

    pair = normalize_pair(local_path, remote_path)
    check_paths_unused(pair, existing)
    return pair


def normalize_pair(local_path: str, remote_path: str) -> SyncPair:
    """Make the local path absolute and the remote path root-based.

    Raises:
        SyncConfigError: If the remote path is invalid
    """
    if not is_valid_remote_path(remote_path):
        raise SyncConfigError("Server path is invalid")
    return SyncPair(os.path.abspath(local_path), normalize_remote_path(remote_path))


def check_paths_unused(pair: SyncPair, existing: list[SyncPair]) -> None:
    """Reject a normalized pair whose paths are already taken.

    Raises:
        SyncConfigError: If another pair uses the same local or remote path
    """
    if any(other.local_path == pair.local_path for other in existing):
        raise SyncConfigError("This system path already in use")

    if any(other.remote_path == pair.remote_path for other in existing):
        raise SyncConfigError("This server path already in use")
