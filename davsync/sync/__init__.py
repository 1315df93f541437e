"""Sync engine for davsync - keeps local files and WebDAV files in step."""

from .comparator import Classification, PairComparator, SyncAction, SyncDecision, decide
from .config import PairStore, SyncConfigError, load_sync_pairs_from_json, validate_pair
from .engine import SyncEngine, iter_sync_events, run_sync
from .events import Diagnostic, PairOutcome, RunFinished, SyncEvent, SyncOutcome
from .modes import SyncMode
from .operations import SyncOperations
from .pair import SyncPair
from .state import SyncMetadataRecord, SyncMetadataStore

__all__ = [
    "SyncEngine",
    "SyncMode",
    "SyncPair",
    "SyncOperations",
    "SyncConfigError",
    "PairStore",
    "load_sync_pairs_from_json",
    "validate_pair",
    "run_sync",
    "iter_sync_events",
    "Classification",
    "PairComparator",
    "SyncAction",
    "SyncDecision",
    "decide",
    "SyncOutcome",
    "SyncEvent",
    "PairOutcome",
    "Diagnostic",
    "RunFinished",
    "SyncMetadataRecord",
    "SyncMetadataStore",
]
