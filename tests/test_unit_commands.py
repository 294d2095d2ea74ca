"""Unit tests for command payloads and the CommandDispatcher."""

import asyncio
import pytest
from remote_yt.api import RequestRejectedError
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
    command_name,
)
from remote_yt.poller import SnapshotPoller
from tests.mocks import unreachable


@pytest.fixture
def dispatcher(scripted_client):
    poller = SnapshotPoller(scripted_client, interval=0.01)
    return CommandDispatcher(scripted_client, poller)


class TestPayloads:
    """Test the wire form of transport commands."""

    @pytest.mark.parametrize(
        "command,expected",
        [
            (PlayerCommand.SEEK_FORWARD, "SeekForward"),
            (PlayerCommand.SEEK_REWIND, "SeekRewind"),
            (PlayerCommand.TOGGLE_PAUSE, "TogglePause"),
            (PlayerCommand.MUTE, "Mute"),
            (PlayerCommand.FULL_VOLUME, "FullVolume"),
        ],
    )
    def test_string_commands(self, command, expected):
        """Test that argument-less commands are bare strings."""
        assert command.payload() == expected

    def test_seek_to_is_tagged_object(self):
        """Test the SeekTo body."""
        assert SeekTo(42).payload() == {"SeekTo": 42}

    def test_seek_to_rounds_and_clamps(self):
        """Test that fractional and negative positions become whole non-negative seconds."""
        assert SeekTo(41.6).payload() == {"SeekTo": 42}
        assert SeekTo(-3).payload() == {"SeekTo": 0}

    def test_move_rejects_negative_position(self):
        """Test that Move positions are non-negative."""
        with pytest.raises(ValueError):
            Move("j1", -1)

    def test_command_names(self):
        """Test the names used in log messages."""
        assert command_name(PlayerCommand.MUTE) == "Mute"
        assert command_name(Move("j1", 0)) == "Move"
        assert command_name(ClearAll(confirmed=True)) == "ClearAll"


class TestDispatch:
    """Test routing of commands to endpoints."""

    @pytest.mark.parametrize(
        "command,expected_call",
        [
            (PlayerCommand.TOGGLE_PAUSE, ("execute_command", "TogglePause")),
            (SeekTo(10), ("execute_command", {"SeekTo": 10})),
            (Move("j3", 0), ("move", "j3", 0)),
            (Cancel("j2"), ("cancel", "j2")),
            (CancelCurrent(), ("cancel_current",)),
            (Promote("j4"), ("swap", "j4")),
            (ClearAll(confirmed=True), ("clear",)),
        ],
    )
    def test_command_reaches_endpoint(self, scripted_client, dispatcher, command, expected_call):
        """Test that each command sends exactly one matching request."""
        ok = asyncio.run(dispatcher.dispatch(command))

        assert ok
        non_poll = [call for call in scripted_client.calls if call[0] != "inspect"]
        assert non_poll == [expected_call]

    def test_success_triggers_refresh(self, scripted_client, dispatcher):
        """Test that a dispatched command is followed by a re-poll."""
        asyncio.run(dispatcher.toggle_pause())

        assert scripted_client.calls == [("execute_command", "TogglePause"), ("inspect",)]

    def test_failure_still_refreshes(self, scripted_client, dispatcher):
        """Test that a failed command re-polls and reports failure without raising."""
        scripted_client.failures["move"] = unreachable()

        ok = asyncio.run(dispatcher.move("j1", 2))

        assert not ok
        assert scripted_client.calls[-1] == ("inspect",)

    def test_rejected_command_is_not_retried(self, scripted_client, dispatcher):
        """Test that a rejected command is sent once."""
        scripted_client.failures["execute_command"] = RequestRejectedError(409, "nothing playing")

        asyncio.run(dispatcher.seek_forward())

        assert len(scripted_client.calls_to("execute_command")) == 1

    def test_unconfirmed_clear_all_is_refused(self, scripted_client, dispatcher):
        """Test that ClearAll needs explicit confirmation."""
        with pytest.raises(ConfirmationRequiredError):
            asyncio.run(dispatcher.clear_all())

        assert scripted_client.calls == []

    def test_confirmed_clear_all(self, scripted_client, dispatcher):
        """Test that a confirmed ClearAll is sent."""
        assert asyncio.run(dispatcher.clear_all(confirmed=True))
        assert scripted_client.calls_to("clear") == [("clear",)]

    def test_unknown_command_type(self, dispatcher):
        """Test that unknown objects are a programming error."""
        with pytest.raises(TypeError):
            asyncio.run(dispatcher.dispatch("TogglePause"))


class TestSubmit:
    """Test fire-and-forget submission."""

    def test_submit_and_drain(self, scripted_client, dispatcher):
        """Test that submitted commands complete and are forgotten."""

        async def scenario():
            dispatcher.submit(PlayerCommand.MUTE)
            dispatcher.submit(SeekTo(5))
            await dispatcher.drain()

        asyncio.run(scenario())

        assert len(scripted_client.calls_to("execute_command")) == 2
        assert dispatcher._inflight == set()

    def test_submit_refuses_unconfirmed_clear(self, dispatcher):
        """Test that confirmation is checked before a task is created."""

        async def scenario():
            dispatcher.submit(ClearAll())

        with pytest.raises(ConfirmationRequiredError):
            asyncio.run(scenario())
