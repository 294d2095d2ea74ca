"""Player-transport and queue-edit commands, and the dispatcher that sends them.

Commands are fire-and-forget: one request each, no queueing, no retry. A
command lost to a flaky link is simply never applied and the user repeats the
gesture. Every dispatch, successful or not, is followed by an immediate
re-poll so the effect (or the lack of one) shows up without waiting a tick.
"""

import asyncio
from dataclasses import dataclass
from eliot import start_action
from enum import Enum
from remote_yt.api import RemoteYtClient, RemoteYtError
from remote_yt.logging import log_command
from remote_yt.poller import SnapshotPoller


class ConfirmationRequiredError(ValueError):
    """Raised when a destructive command is dispatched without confirmation."""


class PlayerCommand(str, Enum):
    """Argument-less transport commands, sent as bare JSON strings."""

    SEEK_FORWARD = "SeekForward"
    SEEK_REWIND = "SeekRewind"
    TOGGLE_PAUSE = "TogglePause"
    MUTE = "Mute"
    FULL_VOLUME = "FullVolume"

    def payload(self) -> str:
        return self.value


@dataclass(frozen=True)
class SeekTo:
    time: float

    def payload(self) -> dict[str, int]:
        # The player only seeks to whole seconds
        return {"SeekTo": max(0, round(self.time))}


@dataclass(frozen=True)
class Move:
    job_id: str
    new_position: int

    def __post_init__(self):
        if self.new_position < 0:
            raise ValueError(f"new_position must be non-negative, got {self.new_position}")


@dataclass(frozen=True)
class Cancel:
    job_id: str


@dataclass(frozen=True)
class CancelCurrent:
    """Cancel whatever is playing without naming its job."""


@dataclass(frozen=True)
class Promote:
    job_id: str


@dataclass(frozen=True)
class ClearAll:
    """Remove every entry and stop the player. Irreversible."""

    confirmed: bool = False


TransportCommand = PlayerCommand | SeekTo
QueueEdit = Move | Cancel | CancelCurrent | Promote | ClearAll
Command = TransportCommand | QueueEdit


def command_name(command: Command) -> str:
    if isinstance(command, PlayerCommand):
        return command.value
    return type(command).__name__


class CommandDispatcher:
    """Sends commands to the server and refreshes the poller afterwards."""

    def __init__(self, client: RemoteYtClient, poller: SnapshotPoller):
        self.client = client
        self.poller = poller
        self._inflight: set[asyncio.Task] = set()

    async def _send(self, command: Command) -> None:
        match command:
            case PlayerCommand() | SeekTo():
                await self.client.execute_command(command.payload())
            case Move(job_id=job_id, new_position=new_position):
                await self.client.move(job_id, new_position)
            case Cancel(job_id=job_id):
                await self.client.cancel(job_id)
            case CancelCurrent():
                await self.client.cancel_current()
            case Promote(job_id=job_id):
                await self.client.swap(job_id)
            case ClearAll():
                await self.client.clear()
            case _:
                raise TypeError(f"Unknown command: {command!r}")

    async def dispatch(self, command: Command) -> bool:
        """Send one command and re-poll.

        Args:
            command: Any command from the vocabulary

        Returns:
            True if the server accepted the request at transport level

        Raises:
            ConfirmationRequiredError: If ClearAll was not confirmed
        """
        if isinstance(command, ClearAll) and not command.confirmed:
            raise ConfirmationRequiredError("ClearAll stops the player and empties the queue; confirm it first")

        ok = False
        with start_action(action_type="dispatch_command", command=command_name(command)):
            try:
                await self._send(command)
                ok = True
            except RemoteYtError as e:
                log_command(command_name(command), ok=False, error=str(e))
            else:
                log_command(command_name(command), ok=True)
            finally:
                await self.poller.refresh()
        return ok

    def submit(self, command: Command) -> asyncio.Task:
        """Dispatch without waiting; the task is kept alive until it finishes."""
        if isinstance(command, ClearAll) and not command.confirmed:
            raise ConfirmationRequiredError("ClearAll stops the player and empties the queue; confirm it first")
        task = asyncio.create_task(self.dispatch(command))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    async def drain(self) -> None:
        """Wait for every submitted command to finish."""
        if self._inflight:
            await asyncio.gather(*self._inflight)

    # === Player transport ===

    async def seek_forward(self) -> bool:
        return await self.dispatch(PlayerCommand.SEEK_FORWARD)

    async def seek_rewind(self) -> bool:
        return await self.dispatch(PlayerCommand.SEEK_REWIND)

    async def seek_to(self, time: float) -> bool:
        return await self.dispatch(SeekTo(time))

    async def toggle_pause(self) -> bool:
        return await self.dispatch(PlayerCommand.TOGGLE_PAUSE)

    async def mute(self) -> bool:
        return await self.dispatch(PlayerCommand.MUTE)

    async def full_volume(self) -> bool:
        return await self.dispatch(PlayerCommand.FULL_VOLUME)

    # === Queue edits ===

    async def move(self, job_id: str, new_position: int) -> bool:
        return await self.dispatch(Move(job_id, new_position))

    async def cancel(self, job_id: str) -> bool:
        return await self.dispatch(Cancel(job_id))

    async def cancel_current(self) -> bool:
        return await self.dispatch(CancelCurrent())

    async def promote(self, job_id: str) -> bool:
        return await self.dispatch(Promote(job_id))

    async def clear_all(self, confirmed: bool = False) -> bool:
        return await self.dispatch(ClearAll(confirmed=confirmed))
