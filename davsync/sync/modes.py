"""Sync modes."""

from enum import Enum


class SyncMode(str, Enum):
    """How a sync run treats the pairs it classifies."""

    MUTATE = "mutate"
    """Perform transfers to resolve differences"""

    REPORT_ONLY = "reportOnly"
    """Classify every pair but never transfer anything"""

    @property
    def performs_transfers(self) -> bool:
        """Whether this mode uploads and downloads files."""
        return self == SyncMode.MUTATE

    @property
    def updates_metadata(self) -> bool:
        """Whether the remote sync metadata is rewritten at the end of a run."""
        return self == SyncMode.MUTATE

    @classmethod
    def from_string(cls, value: str) -> "SyncMode":
        """Parse a mode name or one of its aliases.

        Args:
            value: "mutate"/"sync" or "reportOnly"/"report-only"/"check"

        Returns:
            The matching SyncMode

        Raises:
            ValueError: If the value is not a known mode
        """
        aliases = {
            "mutate": cls.MUTATE,
            "sync": cls.MUTATE,
            "reportonly": cls.REPORT_ONLY,
            "report-only": cls.REPORT_ONLY,
            "report_only": cls.REPORT_ONLY,
            "check": cls.REPORT_ONLY,
        }
        mode = aliases.get(value.strip().lower())
        if mode is None:
            raise ValueError(f"Unknown sync mode: {value}")
        return mode
