"""Client for a remote-yt server: polled queue view with optimistic edits."""

from remote_yt.api import (
    RemoteYtClient,
    RemoteYtError,
    RequestRejectedError,
    ServerUnreachableError,
    SnapshotDecodeError,
)
from remote_yt.commands import (
    Cancel,
    CancelCurrent,
    ClearAll,
    CommandDispatcher,
    ConfirmationRequiredError,
    Move,
    PlayerCommand,
    Promote,
    SeekTo,
)
from remote_yt.enqueue import EnqueueTracker, PendingAdd, QualitySelection, resolve_quality
from remote_yt.history import HistorySynchronizer
from remote_yt.models import (
    EnqueueRequest,
    HistoryEntry,
    PlaybackStatus,
    PlayerState,
    QueueEntry,
    Snapshot,
    TrackInfo,
    TrackType,
)
from remote_yt.poller import PollState, SnapshotPoller
from remote_yt.reorder import PendingReorder, ReorderReconciler, ReorderState
from remote_yt.session import QueueRow, QueueView, RemoteQueueSession, ViewStatus

__all__ = [
    # Client and errors
    "RemoteYtClient",
    "RemoteYtError",
    "RequestRejectedError",
    "ServerUnreachableError",
    "SnapshotDecodeError",
    # Commands
    "Cancel",
    "CancelCurrent",
    "ClearAll",
    "CommandDispatcher",
    "ConfirmationRequiredError",
    "Move",
    "PlayerCommand",
    "Promote",
    "SeekTo",
    # Components
    "EnqueueTracker",
    "HistorySynchronizer",
    "ReorderReconciler",
    "SnapshotPoller",
    "RemoteQueueSession",
    # State
    "PendingAdd",
    "PendingReorder",
    "PollState",
    "QualitySelection",
    "QueueRow",
    "QueueView",
    "ReorderState",
    "ViewStatus",
    "resolve_quality",
    # Models
    "EnqueueRequest",
    "HistoryEntry",
    "PlaybackStatus",
    "PlayerState",
    "QueueEntry",
    "Snapshot",
    "TrackInfo",
    "TrackType",
]
