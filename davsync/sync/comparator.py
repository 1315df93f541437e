"""Pair comparison logic for sync operations."""

import logging
from dataclasses import dataclass
from enum import Enum

from .events import SyncOutcome
from .modes import SyncMode
from .operations import SyncOperations
from .pair import SyncPair
from .state import SyncMetadataRecord

logger = logging.getLogger(__name__)


class Classification(str, Enum):
    """Synchronization requirement of a pair."""

    LOCAL_NEWER = "localNewer"
    """Both exist and local changed after the reference time"""

    REMOTE_NEWER = "remoteNewer"
    """Both exist and local is older than the reference time"""

    IN_SYNC = "inSync"
    """Both exist and local matches the reference time"""

    LOCAL_ONLY = "localOnly"
    """Only the local file exists"""

    REMOTE_ONLY = "remoteOnly"
    """Only the remote file exists"""

    NEITHER = "neither"
    """Neither side exists"""


class PairComparator:
    """Classifies sync pairs without changing anything on either side."""

    def __init__(self, operations: SyncOperations):
        """Initialize pair comparator.

        Args:
            operations: Transfer primitives used for existence and time lookups
        """
        self.operations = operations

    async def classify(
        self, pair: SyncPair, metadata: SyncMetadataRecord
    ) -> Classification:
        """Determine what a pair needs.

        When both sides exist, the local modification time is compared with
        the timestamp recorded for the remote path by the last mutating run.
        Only without such a record is the remote's live last-modified time
        used instead.

        Args:
            pair: Pair to classify
            metadata: History loaded at the start of the run

        Returns:
            Classification of the pair

        Raises:
            DavSyncError: If a remote lookup fails
            OSError: If the local file cannot be inspected
        """
        local_exists = await self.operations.exists_locally(pair.local_path)
        remote_exists = await self.operations.exists_remotely(pair.remote_path)

        if local_exists and remote_exists:
            return await self._compare_existing(pair, metadata)
        if local_exists:
            return Classification.LOCAL_ONLY
        if remote_exists:
            return Classification.REMOTE_ONLY
        return Classification.NEITHER

    async def _compare_existing(
        self, pair: SyncPair, metadata: SyncMetadataRecord
    ) -> Classification:
        local_time = await self.operations.local_mtime(pair.local_path)

        reference = metadata.get(pair.remote_path)
        if reference is None:
            reference = await self.operations.remote_mtime(pair.remote_path)
            source = "remote"
        else:
            source = "recorded"

        logger.debug(
            "Comparing %s: local=%s %s=%s",
            pair.local_path,
            local_time.isoformat(),
            source,
            reference.isoformat(),
        )

        if local_time > reference:
            return Classification.LOCAL_NEWER
        if local_time < reference:
            return Classification.REMOTE_NEWER
        return Classification.IN_SYNC


class SyncAction(str, Enum):
    """Actions that can be taken for a pair."""

    UPLOAD = "upload"
    """Upload local file to remote"""

    DOWNLOAD = "download"
    """Download remote file to local"""

    SKIP = "skip"
    """No transfer"""


@dataclass
class SyncDecision:
    """Action for a pair plus the outcome reported once it is done."""

    action: SyncAction
    """Action to take"""

    outcome: SyncOutcome
    """Outcome if the action succeeds (or immediately, for SKIP)"""

    reason: str
    """Human-readable reason for this decision"""


def decide(
    classification: Classification, mode: SyncMode, can_download: bool
) -> SyncDecision:
    """Map a classification and a mode to an action.

    Args:
        classification: Result of PairComparator.classify
        mode: Mode of the current run
        can_download: Whether the local parent directory exists, only
            consulted for remote-only pairs

    Returns:
        The decision for the pair

    Raises:
        ValueError: If the classification is not handled
    """
    transfer = mode.performs_transfers

    if classification == Classification.LOCAL_NEWER:
        if transfer:
            return SyncDecision(
                SyncAction.UPLOAD, SyncOutcome.SYNCHRONIZED, "Local file is newer"
            )
        return SyncDecision(
            SyncAction.SKIP, SyncOutcome.LOCAL_HAS_CHANGES, "Local file is newer"
        )

    if classification == Classification.REMOTE_NEWER:
        if transfer:
            return SyncDecision(
                SyncAction.DOWNLOAD, SyncOutcome.SYNCHRONIZED, "Remote file is newer"
            )
        return SyncDecision(
            SyncAction.SKIP, SyncOutcome.REMOTE_HAS_CHANGES, "Remote file is newer"
        )

    if classification == Classification.IN_SYNC:
        return SyncDecision(
            SyncAction.SKIP, SyncOutcome.SYNCHRONIZED, "Files are in sync"
        )

    if classification == Classification.LOCAL_ONLY:
        if transfer:
            return SyncDecision(
                SyncAction.UPLOAD, SyncOutcome.SYNCHRONIZED, "New local file"
            )
        return SyncDecision(
            SyncAction.SKIP, SyncOutcome.LOCAL_HAS_CHANGES, "New local file"
        )

    if classification == Classification.REMOTE_ONLY:
        if not can_download:
            return SyncDecision(
                SyncAction.SKIP,
                SyncOutcome.UNSYNCHRONIZABLE,
                "Local parent directory does not exist",
            )
        if transfer:
            return SyncDecision(
                SyncAction.DOWNLOAD, SyncOutcome.SYNCHRONIZED, "New remote file"
            )
        return SyncDecision(
            SyncAction.SKIP, SyncOutcome.REMOTE_HAS_CHANGES, "New remote file"
        )

    if classification == Classification.NEITHER:
        return SyncDecision(
            SyncAction.SKIP,
            SyncOutcome.UNSYNCHRONIZABLE,
            "Neither local nor remote file exists",
        )

    raise ValueError(f"Unhandled classification: {classification}")
