"""Snapshot poller: keeps the latest server snapshot and a debounced health signal."""

import asyncio
import contextlib
from collections.abc import Callable
from config import OFFLINE_AFTER_FAILURES, POLL_INTERVAL
from eliot import start_action
from enum import Enum
from remote_yt.api import RemoteYtClient, RemoteYtError
from remote_yt.logging import log_error, log_poll_result
from remote_yt.models import Snapshot

SnapshotListener = Callable[[int, Snapshot], None]


class PollState(Enum):
    """Health of the read path.

    IDLE: no failure since the last success (or nothing fetched yet)
    STALE: recent failures, still treated as noise; last good snapshot shown
    FAILED: failures persisted long enough to show "server offline"
    """

    IDLE = "idle"
    STALE = "stale"
    FAILED = "failed"


class SnapshotPoller:
    """Polls /api/inspect on a fixed cadence.

    Each poll gets a sequence number when it is issued. A poll that completes
    after a newer one has already been applied is discarded, so an overtaken
    response can never roll the display back.
    """

    def __init__(
        self,
        client: RemoteYtClient,
        interval: float = POLL_INTERVAL,
        offline_after: int = OFFLINE_AFTER_FAILURES,
    ):
        self.client = client
        self.interval = interval
        self.offline_after = max(1, offline_after)

        self.state = PollState.IDLE
        self.snapshot: Snapshot | None = None
        self.consecutive_failures = 0
        self.last_error: Exception | None = None

        self.issued_seq = 0  # Sequence of the most recently issued poll
        self.applied_seq = 0  # Sequence of the snapshot currently published

        self._listeners: list[SnapshotListener] = []
        self._wakeup = asyncio.Event()
        self._task: asyncio.Task | None = None

    @property
    def offline(self) -> bool:
        return self.state == PollState.FAILED

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def add_listener(self, listener: SnapshotListener) -> None:
        """Register a callback invoked with (sequence, snapshot) on every applied snapshot."""
        self._listeners.append(listener)

    def _set_state(self, new_state: PollState) -> None:
        if new_state != self.state:
            log_poll_result("state_changed", old_state=self.state.value, new_state=new_state.value)
            self.state = new_state

    async def poll_once(self) -> Snapshot | None:
        """Issue one read and apply it if it is still the newest.

        Returns:
            The snapshot if it was applied, otherwise None
        """
        self.issued_seq += 1
        seq = self.issued_seq

        with start_action(action_type="poll", seq=seq):
            try:
                snapshot = await self.client.inspect()
            except RemoteYtError as e:
                self._record_failure(seq, e)
                return None

            if seq < self.applied_seq:
                log_poll_result("discarded", seq=seq, applied_seq=self.applied_seq)
                return None

            self._apply(seq, snapshot)
            return snapshot

    def _record_failure(self, seq: int, error: Exception) -> None:
        if seq < self.applied_seq:
            # A newer poll already succeeded; this failure says nothing about the link now
            log_poll_result("discarded", seq=seq, applied_seq=self.applied_seq, error=str(error))
            return

        self.consecutive_failures += 1
        self.last_error = error
        log_poll_result("failed", seq=seq, consecutive_failures=self.consecutive_failures, error=str(error))

        if self.consecutive_failures >= self.offline_after:
            self._set_state(PollState.FAILED)
        else:
            self._set_state(PollState.STALE)

    def _apply(self, seq: int, snapshot: Snapshot) -> None:
        self.applied_seq = seq
        self.snapshot = snapshot
        self.consecutive_failures = 0
        self.last_error = None
        self._set_state(PollState.IDLE)
        log_poll_result("succeeded", seq=seq, queue_length=len(snapshot.queue))

        for listener in list(self._listeners):
            try:
                listener(seq, snapshot)
            except Exception as e:
                log_error(e, context="snapshot_listener", seq=seq)

    async def refresh(self) -> Snapshot | None:
        """Poll right now, outside the cadence."""
        return await self.poll_once()

    def request_refresh(self) -> None:
        """Wake the periodic loop early without waiting for the result."""
        self._wakeup.set()

    async def run(self) -> None:
        """Poll forever on the configured cadence."""
        while True:
            self._wakeup.clear()
            try:
                await self.poll_once()
            except Exception as e:
                # Counted like any failed poll so the loop never dies silently
                log_error(e, context="poll_loop", seq=self.issued_seq)
                self._record_failure(self.issued_seq, e)
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(self._wakeup.wait(), timeout=self.interval)

    def start(self) -> asyncio.Task:
        """Start the periodic loop on the running event loop."""
        if not self.running:
            self._task = asyncio.create_task(self.run(), name="snapshot-poller")
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
