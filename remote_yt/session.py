"""Remote queue session - composes all components and derives the render state.

Reads flow one way (poller -> reconcilers -> view) and writes the other
(gesture -> dispatcher/tracker -> server -> next poll). Only the poller, on
success, and the two pending trackers, on user action, change what the view
shows.
"""

import asyncio
from config import DEFAULT_QUALITY, OFFLINE_AFTER_FAILURES, POLL_INTERVAL
from dataclasses import dataclass, field
from enum import Enum
from remote_yt.api import RemoteYtClient
from remote_yt.commands import CommandDispatcher
from remote_yt.enqueue import EnqueueTracker, PendingAdd
from remote_yt.history import HistorySynchronizer
from remote_yt.models import HistoryEntry, PlayerState, QueueEntry
from remote_yt.poller import SnapshotPoller
from remote_yt.reorder import ReorderReconciler


class ViewStatus(Enum):
    CONNECTING = "connecting"
    ONLINE = "online"
    OFFLINE = "offline"


@dataclass(frozen=True)
class QueueRow:
    """One up-next row: a real entry or a placeholder for a pending add."""

    entry: QueueEntry | None = None
    pending: PendingAdd | None = None

    @property
    def is_placeholder(self) -> bool:
        return self.entry is None


@dataclass
class QueueView:
    status: ViewStatus
    now_playing: QueueEntry | None = None
    player: PlayerState | None = None
    up_next: list[QueueRow] = field(default_factory=list)
    history: list[HistoryEntry] = field(default_factory=list)
    notifications: list[str] = field(default_factory=list)

    @property
    def offline(self) -> bool:
        return self.status == ViewStatus.OFFLINE

    @property
    def placeholder_count(self) -> int:
        return sum(1 for row in self.up_next if row.is_placeholder)

    @property
    def job_ids(self) -> list[str]:
        return [row.entry.job_id for row in self.up_next if row.entry is not None]

    @property
    def can_skip(self) -> bool:
        return self.now_playing is not None

    @property
    def can_control_transport(self) -> bool:
        return self.now_playing is not None and self.player is not None

    @property
    def show_clear_all(self) -> bool:
        return self.now_playing is not None or bool(self.job_ids)


class RemoteQueueSession:
    """A client's view of one remote-yt server."""

    def __init__(
        self,
        client: RemoteYtClient | None = None,
        interval: float = POLL_INTERVAL,
        offline_after: int = OFFLINE_AFTER_FAILURES,
    ):
        self.client = client or RemoteYtClient()
        self.poller = SnapshotPoller(self.client, interval=interval, offline_after=offline_after)
        self.dispatcher = CommandDispatcher(self.client, self.poller)
        self.reorder = ReorderReconciler(self.dispatcher)
        self.enqueue_tracker = EnqueueTracker(self.client, self.poller, notify=self._notify)
        self.history = HistorySynchronizer(self.client)
        self._notifications: list[str] = []

        self.poller.add_listener(self.reorder.accept)
        self.poller.add_listener(self.enqueue_tracker.reconcile)
        self.poller.add_listener(self.history.observe)

    def _notify(self, message: str) -> None:
        self._notifications.append(message)

    def drain_notifications(self) -> list[str]:
        """Return and forget pending notifications (each is shown once)."""
        notifications, self._notifications = self._notifications, []
        return notifications

    # === Lifecycle ===

    async def start(self) -> None:
        self.poller.start()

    async def close(self) -> None:
        await self.poller.stop()
        await self.dispatcher.drain()
        await self.history.drain()
        await self.client.close()

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # === Render state ===

    def view(self) -> QueueView:
        """Derive what to draw right now."""
        snapshot = self.poller.snapshot
        if self.poller.offline:
            status = ViewStatus.OFFLINE
        elif snapshot is None:
            status = ViewStatus.CONNECTING
        else:
            status = ViewStatus.ONLINE

        rows = [QueueRow(entry=entry) for entry in self.reorder.order]
        rows.extend(QueueRow(pending=pending) for pending in self.enqueue_tracker.pending)

        return QueueView(
            status=status,
            now_playing=snapshot.now_playing if snapshot else None,
            player=snapshot.player if snapshot else None,
            up_next=rows,
            history=list(self.history.entries),
            notifications=list(self._notifications),
        )

    # === Gestures ===

    async def enqueue(self, url: str, quality: str = DEFAULT_QUALITY) -> str | None:
        return await self.enqueue_tracker.submit(url, quality)

    async def requeue_history(self, webpage_url: str) -> str | None:
        """Queue a history entry again; unknown URLs are queued at the default height."""
        entry = self.history.find(webpage_url)
        if entry is None:
            entry = HistoryEntry(webpage_url=webpage_url, title=webpage_url, inserted_at=0)
        return await self.enqueue_tracker.requeue(entry)

    async def move(self, job_id: str, new_index: int) -> bool:
        return await self.reorder.move(job_id, new_index)

    async def cancel(self, job_id: str) -> bool:
        return await self.dispatcher.cancel(job_id)

    async def skip(self) -> bool:
        """Cancel the now-playing entry; the server advances or stops."""
        snapshot = self.poller.snapshot
        if snapshot is not None and snapshot.now_playing is not None:
            return await self.dispatcher.cancel(snapshot.now_playing.job_id)
        return await self.dispatcher.cancel_current()

    async def promote(self, job_id: str) -> bool:
        return await self.dispatcher.promote(job_id)

    async def clear_all(self, confirmed: bool = False) -> bool:
        return await self.dispatcher.clear_all(confirmed=confirmed)

    async def toggle_mute(self) -> bool:
        snapshot = self.poller.snapshot
        if snapshot is not None and snapshot.player is not None and snapshot.player.is_muted:
            return await self.dispatcher.full_volume()
        return await self.dispatcher.mute()

    async def remove_history(self, webpage_url: str) -> bool:
        return await self.history.remove(webpage_url)

    async def wait_until_synced(self, timeout: float = 5.0) -> bool:
        """Poll until the first snapshot arrives or the timeout passes."""
        try:
            async with asyncio.timeout(timeout):
                while self.poller.snapshot is None:
                    if await self.poller.refresh() is None:
                        await asyncio.sleep(self.poller.interval)
        except TimeoutError:
            return False
        return True
