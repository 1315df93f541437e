"""Core sync engine for executing sync runs."""

import asyncio
import logging
from collections.abc import AsyncIterator, Sequence
from typing import Optional

import httpx

from ..api import WebDAVClient
from ..exceptions import DavSyncError
from ..utils import DEFAULT_CHANNEL_CAPACITY, DEFAULT_METADATA_PATH
from .comparator import Classification, PairComparator, SyncAction, decide
from .events import Diagnostic, PairOutcome, RunFinished, SyncEvent, SyncOutcome
from .modes import SyncMode
from .operations import SyncOperations
from .pair import SyncPair
from .state import SyncMetadataRecord, SyncMetadataStore

logger = logging.getLogger(__name__)

CONNECTION_ERROR_MESSAGE = "Can't open connection"


class SyncEngine:
    """Core sync engine that drives a list of pairs through one run.

    Pairs are processed one after another. Every outcome, diagnostic and the
    final ``RunFinished`` are put on the ``output`` queue handed to ``run``.
    """

    def __init__(
        self,
        client: WebDAVClient,
        metadata_path: str = DEFAULT_METADATA_PATH,
    ):
        """Initialize sync engine.

        Args:
            client: WebDAV client owned by this run
            metadata_path: Remote location of the sync metadata blob
        """
        self.client = client
        self.operations = SyncOperations(client)
        self.comparator = PairComparator(self.operations)
        self.metadata_store = SyncMetadataStore(client, metadata_path)

    async def run(
        self,
        mode: SyncMode,
        pairs: Sequence[SyncPair],
        output: "asyncio.Queue[SyncEvent]",
    ) -> None:
        """Run one sync or check over the given pairs.

        Args:
            mode: MUTATE to transfer files, REPORT_ONLY to only classify
            pairs: Pairs in the order their outcomes should be emitted
            output: Channel receiving the run's events

        Examples:
            >>> queue = asyncio.Queue(maxsize=100)
            >>> await SyncEngine(client).run(SyncMode.REPORT_ONLY, pairs, queue)
        """
        try:
            if not await self.client.probe():
                logger.error("Connection probe to %s failed", self.client.host)
                await output.put(Diagnostic(CONNECTION_ERROR_MESSAGE))
                return

            metadata = await self.metadata_store.load()
            synchronized: list[SyncPair] = []

            for pair in pairs:
                outcome = await self._process_pair(pair, mode, metadata, output)
                await output.put(PairOutcome(pair.local_path, outcome))
                if outcome == SyncOutcome.SYNCHRONIZED:
                    synchronized.append(pair)

            if mode.updates_metadata:
                await self._update_metadata(metadata, synchronized, output)
        finally:
            await output.put(RunFinished(mode))

    async def _process_pair(
        self,
        pair: SyncPair,
        mode: SyncMode,
        metadata: SyncMetadataRecord,
        output: "asyncio.Queue[SyncEvent]",
    ) -> SyncOutcome:
        """Classify a pair, act on it and return its outcome.

        Failures only affect this pair: they are reported as a diagnostic and
        the pair becomes unsynchronizable.
        """
        try:
            classification = await self.comparator.classify(pair, metadata)
            can_download = False
            if classification == Classification.REMOTE_ONLY:
                can_download = await self.operations.can_download(pair.local_path)
            decision = decide(classification, mode, can_download)
            logger.debug(
                "%s: %s -> %s (%s)",
                pair,
                classification.value,
                decision.action.value,
                decision.reason,
            )

            if decision.action == SyncAction.UPLOAD:
                await self.operations.upload(pair.local_path, pair.remote_path)
            elif decision.action == SyncAction.DOWNLOAD:
                await self.operations.download(pair.remote_path, pair.local_path)

            return decision.outcome
        except (DavSyncError, OSError) as e:
            logger.warning("Failed to process %s: %s", pair, e)
            await output.put(Diagnostic(f"{pair.local_path}: {e}"))
            return SyncOutcome.UNSYNCHRONIZABLE

    async def _update_metadata(
        self,
        metadata: SyncMetadataRecord,
        synchronized: list[SyncPair],
        output: "asyncio.Queue[SyncEvent]",
    ) -> None:
        """Record current local times of synchronized pairs and upload them.

        A failure is reported but does not change outcomes already emitted.
        Entries for remote paths outside this run are left as they are, since
        a run over a pairs file covers only some of the stored pairs.
        """
        try:
            for pair in synchronized:
                local_time = await self.operations.local_mtime(pair.local_path)
                metadata.record(pair.remote_path, local_time)
            await self.metadata_store.save(metadata)
        except (DavSyncError, OSError) as e:
            logger.warning("Failed to update sync metadata: %s", e)
            await output.put(Diagnostic(f"Failed to update sync metadata: {e}"))


async def run_sync(
    host: Optional[str],
    login: Optional[str],
    password: Optional[str],
    mode: SyncMode,
    pairs: Sequence[SyncPair],
    output: "asyncio.Queue[SyncEvent]",
    metadata_path: str = DEFAULT_METADATA_PATH,
    transport: Optional[httpx.BaseTransport] = None,
) -> None:
    """Open a session, run the engine and close the session.

    If the session cannot be constructed, a single diagnostic is emitted
    followed by ``RunFinished``.

    Args:
        host: Endpoint base URL
        login: Login for HTTP basic auth
        password: Password for HTTP basic auth
        mode: Run mode
        pairs: Pairs to process
        output: Channel receiving the run's events
        metadata_path: Remote location of the sync metadata blob
        transport: Optional httpx transport, mainly for tests
    """
    try:
        client = WebDAVClient(host, login, password, transport=transport)
    except DavSyncError as e:
        logger.error("Cannot create WebDAV session: %s", e)
        await output.put(Diagnostic(f"{CONNECTION_ERROR_MESSAGE}: {e}"))
        await output.put(RunFinished(mode))
        return

    async with client:
        engine = SyncEngine(client, metadata_path=metadata_path)
        await engine.run(mode, pairs, output)


async def iter_sync_events(
    host: Optional[str],
    login: Optional[str],
    password: Optional[str],
    mode: SyncMode,
    pairs: Sequence[SyncPair],
    capacity: int = DEFAULT_CHANNEL_CAPACITY,
    metadata_path: str = DEFAULT_METADATA_PATH,
    transport: Optional[httpx.BaseTransport] = None,
) -> AsyncIterator[SyncEvent]:
    """Run a sync in a background task and yield its events.

    The final event is always ``RunFinished``. The channel is bounded by
    ``capacity``, so a slow consumer suspends the run between events.

    Examples:
        >>> async for event in iter_sync_events(host, login, pw, mode, pairs):
        ...     print(event)
    """
    queue: asyncio.Queue[SyncEvent] = asyncio.Queue(maxsize=capacity)
    task = asyncio.create_task(
        run_sync(
            host,
            login,
            password,
            mode,
            pairs,
            queue,
            metadata_path=metadata_path,
            transport=transport,
        )
    )

    finished = False
    try:
        while not finished:
            event = await queue.get()
            finished = isinstance(event, RunFinished)
            yield event
    finally:
        # Nobody is left to drain the queue once the consumer stops early
        if not finished:
            task.cancel()

    await task
