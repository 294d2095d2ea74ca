"""Reorder reconciler: instant drag-and-drop over a server-owned queue order.

The reconciler keeps a local mirror of the "up next" order. A drag applies the
move to the mirror right away and sends Move(job_id, new_index); the next
accepted snapshot overwrites the mirror unconditionally. If a poll lands
between the request and the server applying it, the old order shows for at
most one poll interval before snapping to the new one.

Positions are 0-based indices into the up-next list; the now-playing entry is
never part of that index space. Entries are always located by job_id.
"""

from dataclasses import dataclass
from enum import Enum
from remote_yt.commands import CommandDispatcher, Move
from remote_yt.logging import log_queue_operation
from remote_yt.models import QueueEntry, Snapshot


class ReorderState(Enum):
    SYNCED = "synced"
    PENDING_MOVE = "pending_move"


@dataclass(frozen=True)
class PendingReorder:
    moved_job_id: str
    target_index: int


def index_of(entries: list[QueueEntry], job_id: str) -> int | None:
    """Position of job_id in entries, or None if it is not there."""
    for index, entry in enumerate(entries):
        if entry.job_id == job_id:
            return index
    return None


def apply_move(entries: list[QueueEntry], old_index: int, new_index: int) -> list[QueueEntry]:
    """Return a copy of entries with the item at old_index moved to new_index."""
    moved = list(entries)
    moved.insert(new_index, moved.pop(old_index))
    return moved


class ReorderReconciler:
    """Owns the rendered up-next order."""

    def __init__(self, dispatcher: CommandDispatcher):
        self.dispatcher = dispatcher
        self.pending: PendingReorder | None = None
        self._mirror: list[QueueEntry] = []

    @property
    def state(self) -> ReorderState:
        return ReorderState.SYNCED if self.pending is None else ReorderState.PENDING_MOVE

    @property
    def order(self) -> list[QueueEntry]:
        """Up-next entries in the order they should be rendered."""
        return list(self._mirror)

    @property
    def job_ids(self) -> list[str]:
        return [entry.job_id for entry in self._mirror]

    def accept(self, seq: int, snapshot: Snapshot) -> None:
        """Overwrite the mirror with an authoritative snapshot."""
        if self.pending is not None:
            log_queue_operation("reorder_reconciled", job_id=self.pending.moved_job_id, seq=seq)
        self._mirror = list(snapshot.queue)
        self.pending = None

    def plan_move(self, job_id: str, new_index: int) -> tuple[int, int] | None:
        """Work out where a drag takes an entry in the current rendered order.

        Args:
            job_id: Dragged entry
            new_index: Requested position, clamped into the list

        Returns:
            (old_index, new_index), or None if nothing would change

        Raises:
            KeyError: If job_id is not in the rendered order
        """
        old_index = index_of(self._mirror, job_id)
        if old_index is None:
            raise KeyError(job_id)

        new_index = min(max(new_index, 0), len(self._mirror) - 1)
        if old_index == new_index:
            return None
        return old_index, new_index

    def apply_local(self, job_id: str, new_index: int) -> Move | None:
        """Permute the mirror for a drag and record it as pending.

        Returns:
            The Move command to send, or None for a drop in place
        """
        plan = self.plan_move(job_id, new_index)
        if plan is None:
            return None

        old_index, new_index = plan
        self._mirror = apply_move(self._mirror, old_index, new_index)
        # A second drag before the confirming poll replaces the first
        self.pending = PendingReorder(job_id, new_index)
        log_queue_operation("reorder", job_id=job_id, from_index=old_index, to_index=new_index)
        return Move(job_id, new_index)

    async def move(self, job_id: str, new_index: int) -> bool:
        """Handle a completed drag.

        The local order changes before the request is sent, so the drop renders
        without waiting for the network.

        Returns:
            True if a Move command was sent and accepted at transport level
        """
        command = self.apply_local(job_id, new_index)
        if command is None:
            return False
        return await self.dispatcher.dispatch(command)
