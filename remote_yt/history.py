"""History synchronizer.

The server appends to the history log only once an entry stops playing, so
the log is refetched whenever the identity of the now-playing entry changes,
including the change to nothing playing.
"""

import asyncio
from remote_yt.api import RemoteYtClient, RemoteYtError
from remote_yt.logging import log_error, log_history_operation
from remote_yt.models import HistoryEntry, Snapshot

_UNSET = object()


class HistorySynchronizer:
    """Keeps a copy of the history log in step with what is playing."""

    def __init__(self, client: RemoteYtClient):
        self.client = client
        self.entries: list[HistoryEntry] = []
        self.issued_seq = 0  # Sequence of the most recently started refetch
        self.applied_seq = 0  # Sequence of the refetch that produced `entries`
        self._identity = _UNSET
        self._tasks: set[asyncio.Task] = set()

    @property
    def fetch_count(self) -> int:
        return self.issued_seq

    @property
    def identity(self) -> str | None:
        return None if self._identity is _UNSET else self._identity

    def observe(self, seq: int, snapshot: Snapshot) -> asyncio.Task | None:
        """Schedule a refetch if the now-playing identity changed.

        Returns:
            The refetch task, or None if the identity is unchanged
        """
        identity = snapshot.now_playing_identity
        if identity == self._identity:
            return None

        log_history_operation("identity_changed", old=self.identity, new=identity, seq=seq)
        self._identity = identity
        task = asyncio.create_task(self.refresh())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def refresh(self) -> list[HistoryEntry] | None:
        """Refetch the log; on failure the previous copy is kept.

        Refetches can overlap (two quick track changes, a change racing a
        removal). A response older than the one already applied is dropped.

        Returns:
            The entries if they were applied, otherwise None
        """
        self.issued_seq += 1
        seq = self.issued_seq
        try:
            entries = await self.client.history()
        except RemoteYtError as e:
            log_error(e, context="history_refresh", seq=seq)
            return None

        if seq < self.applied_seq:
            log_history_operation("refetch_discarded", seq=seq, applied_seq=self.applied_seq)
            return None

        self.applied_seq = seq
        self.entries = entries
        log_history_operation("refetch", count=len(entries), seq=seq)
        return entries

    async def remove(self, webpage_url: str) -> bool:
        """Delete one history record and refetch the log on success."""
        try:
            await self.client.remove_history(webpage_url)
        except RemoteYtError as e:
            log_error(e, context="history_remove", webpage_url=webpage_url)
            return False

        log_history_operation("remove", webpage_url=webpage_url)
        await self.refresh()
        return True

    def find(self, webpage_url: str) -> HistoryEntry | None:
        return next((entry for entry in self.entries if entry.webpage_url == webpage_url), None)

    async def drain(self) -> None:
        """Wait for scheduled refetches to finish."""
        if self._tasks:
            await asyncio.gather(*self._tasks)
