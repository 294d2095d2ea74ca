"""
Logging configuration for the remote-yt client using eliot.

Every component logs structured messages through eliot so that a poll, a
command and the refresh it triggers can be correlated in the JSON log, while
the terminal gets a short human-readable line per interesting event.
"""

import eliot
import logging
import sys
from eliot import write_traceback
from eliot.stdlib import EliotHandler
from pathlib import Path

# Emitted on every healthy poll tick; only useful in the JSON log
QUIET_MESSAGES = {
    "poll_succeeded",
    "poll_discarded",
}

# Messages more severe than INFO; everything else is INFO
MESSAGE_LEVELS = {
    "poll_failed": logging.WARNING,
    "poll_state_changed": logging.WARNING,
    "error_occurred": logging.ERROR,
}


def message_level(message: dict) -> int:
    """Severity of an eliot message as a stdlib logging level.

    Examples:
        >>> message_level({"message_type": "error_occurred"})
        40
        >>> message_level({"message_type": "eliot:stdlib", "log_level": "WARNING"})
        30
    """
    # Records bridged from stdlib logging carry their own level name
    if "log_level" in message:
        level = logging.getLevelName(message["log_level"])
        if isinstance(level, int):
            return level
    return MESSAGE_LEVELS.get(message.get("message_type", ""), logging.INFO)


class HumanReadableDestination:
    """Destination that formats logs in a human-readable format."""

    def __init__(self, file, level: int = logging.INFO):
        self.file = file
        self.level = level

    def __call__(self, message):
        """Format and write log message."""
        # Skip eliot's own action start/finish messages
        if message.get("action_type") and not message.get("message_type"):
            return

        msg_type = message.get("message_type", "")
        if msg_type in QUIET_MESSAGES or message_level(message) < self.level:
            return

        description = message.get("description", "")

        if msg_type == "command_dispatched":
            outcome = "ok" if message.get("ok") else "failed"
            output = f"[COMMAND] {message.get('command', '')} ({outcome})"
        elif msg_type == "queue_operation":
            output = f"[QUEUE] {message.get('operation', '')}"
            if message.get("job_id"):
                output += f": {message['job_id']}"
        elif msg_type == "history_operation":
            output = f"[HISTORY] {message.get('operation', '')}"
        elif msg_type == "poll_failed":
            output = f"[POLL] failure {message.get('consecutive_failures', '?')}: {message.get('error', '')}"
        elif msg_type == "poll_state_changed":
            output = f"[POLL] {message.get('old_state', '')} → {message.get('new_state', '')}"
        elif msg_type == "error_occurred":
            output = f"[ERROR] {message.get('error_type', '')}: {message.get('error_message', '')}"
        elif description:
            output = description
        elif "message" in message:
            output = message["message"]
        else:
            return

        if output and output.strip():
            self.file.write(output + "\n")
            self.file.flush()


def setup_logging(log_level: str = "INFO", log_file: str | None = None, stream=None) -> None:
    """
    Set up eliot logging for the client.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path to write JSON logs to
        stream: Where readable logs go (default: stdout); the level applies here too
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    eliot.add_destination(HumanReadableDestination(stream or sys.stdout, level=level))

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        eliot.to_file(open(log_path, "a"))

    # Route stdlib logging (httpx, asyncio) through eliot
    logger = logging.getLogger()
    logger.setLevel(level)
    logger.addHandler(EliotHandler())

    eliot.log_message(
        message_type="logging_setup", level=log_level, log_file=log_file or "stdout", message="Eliot logging configured"
    )


def log_poll_result(outcome: str, **context):
    """
    Log the terminal outcome of one snapshot poll.

    Args:
        outcome: succeeded, failed or discarded
        **context: Sequence number, failure count, error text
    """
    eliot.log_message(message_type=f"poll_{outcome}", **context)


def log_command(command: str, ok: bool, **context):
    """
    Log a dispatched command and whether the transport accepted it.

    Args:
        command: Command name (TogglePause, Move, Cancel, ...)
        ok: Transport-level success
        **context: Additional context data
    """
    eliot.log_message(message_type="command_dispatched", command=command, ok=ok, **context)


def log_queue_operation(operation: str, **context):
    """
    Log local queue operations (placeholders, optimistic moves).

    Args:
        operation: Queue operation (enqueue, move, reconcile, etc.)
        **context: Additional context data
    """
    eliot.log_message(message_type="queue_operation", operation=operation, **context)


def log_history_operation(operation: str, **context):
    """
    Log history refetches and removals.

    Args:
        operation: History operation (refetch, remove)
        **context: Additional context data
    """
    eliot.log_message(message_type="history_operation", operation=operation, **context)


def log_error(error: Exception, **context):
    """
    Log errors with full context and traceback.

    Args:
        error: Exception that occurred
        **context: Additional context data
    """
    write_traceback(exc_info=(type(error), error, error.__traceback__))
    eliot.log_message(
        message_type="error_occurred", error_message=str(error), error_type=type(error).__name__, **context
    )
