"""CLI status display for sync runs.

Consumes the event stream of a run and renders it with Rich: a spinner
while the run is in progress, one line per pair as outcomes arrive, and
diagnostics as they are reported.
"""

from typing import Optional

from rich.progress import Progress, SpinnerColumn, TaskID, TextColumn

from .output import OutputFormatter
from .sync.events import Diagnostic, PairOutcome, RunFinished, SyncEvent, SyncOutcome
from .sync.modes import SyncMode


class SyncStatusDisplay:
    """Rich-based status display for a sync or check run."""

    def __init__(self, out: OutputFormatter, mode: SyncMode, total: int):
        """Initialize the status display.

        Args:
            out: Output formatter of the CLI invocation
            mode: Mode of the run being displayed
            total: Number of pairs in the run
        """
        self.out = out
        self.mode = mode
        self.total = total
        # Outcomes arrive in pair order, one per pair
        self.outcomes: list[PairOutcome] = []
        self.diagnostics: list[str] = []
        self.finished = False
        self._progress: Optional[Progress] = None
        self._task: Optional[TaskID] = None

    @property
    def _label(self) -> str:
        return "Synchronizing" if self.mode.performs_transfers else "Checking"

    def handle(self, event: SyncEvent) -> None:
        """Record an event and update the display."""
        if isinstance(event, PairOutcome):
            self.outcomes.append(event)
            if self._progress is not None and self._task is not None:
                self._progress.update(
                    self._task,
                    advance=1,
                    description=f"{self._label} ({len(self.outcomes)}/{self.total})",
                )
            self.out.print(f"({event.outcome.symbol}) {event.local_path}")
        elif isinstance(event, Diagnostic):
            self.diagnostics.append(event.message)
            self.out.warning(event.message)
        elif isinstance(event, RunFinished):
            self.finished = True

    def counts(self) -> dict[str, int]:
        """Number of pairs per outcome."""
        counts = {outcome.value: 0 for outcome in SyncOutcome}
        for event in self.outcomes:
            counts[event.outcome.value] += 1
        return counts

    def __enter__(self) -> "SyncStatusDisplay":
        if not self.out.quiet and not self.out.json_output:
            self._progress = Progress(
                SpinnerColumn(),
                TextColumn("[bold blue]{task.description}"),
                console=self.out.console,
                transient=True,
            )
            self._progress.__enter__()
            self._task = self._progress.add_task(
                f"{self._label} (0/{self.total})", total=self.total
            )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._progress is not None:
            self._progress.__exit__(exc_type, exc_val, exc_tb)
            self._progress = None
            self._task = None
