"""Events emitted by the sync engine.

A run produces one ``PairOutcome`` per pair in the order the pairs were
supplied, any number of ``Diagnostic`` messages, and exactly one
``RunFinished`` as its last event.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from .modes import SyncMode


class SyncOutcome(str, Enum):
    """Result of a run for a single pair."""

    SYNCHRONIZED = "synchronized"
    """Both sides hold the same content"""

    REMOTE_HAS_CHANGES = "remoteHasChanges"
    """Remote is newer than local, a download would resolve it"""

    LOCAL_HAS_CHANGES = "localHasChanges"
    """Local is newer than remote, an upload would resolve it"""

    UNSYNCHRONIZABLE = "unsynchronizable"
    """The pair cannot be synchronized"""

    @property
    def symbol(self) -> str:
        """Short symbol shown next to the pair in status listings."""
        return _SYMBOLS[self]


_SYMBOLS = {
    SyncOutcome.SYNCHRONIZED: "✅",
    SyncOutcome.REMOTE_HAS_CHANGES: "☁️➡️💻",
    SyncOutcome.LOCAL_HAS_CHANGES: "💻➡️☁️",
    SyncOutcome.UNSYNCHRONIZABLE: "❌",
}


@dataclass(frozen=True)
class PairOutcome:
    """Outcome for one pair, keyed by its local path."""

    local_path: str
    outcome: SyncOutcome


@dataclass(frozen=True)
class Diagnostic:
    """Free-form message intended for display to the user."""

    message: str


@dataclass(frozen=True)
class RunFinished:
    """Signals that the run for ``mode`` is over."""

    mode: SyncMode


SyncEvent = Union[PairOutcome, Diagnostic, RunFinished]
