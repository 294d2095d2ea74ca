#!/usr/bin/env python

import argparse
import asyncio
import sys
from config import DEFAULT_QUALITY, LOG_FILE, LOG_LEVEL, SERVER_URL, __version__
from eliot import log_message, start_action, write_traceback
from remote_yt.api import RemoteYtClient
from remote_yt.commands import ConfirmationRequiredError
from remote_yt.logging import setup_logging
from remote_yt.render import render_history, render_view
from remote_yt.session import RemoteQueueSession


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="remote-yt", description="Control a remote-yt player from the terminal")
    parser.add_argument('--server', default=SERVER_URL, help=f"Server URL (default: {SERVER_URL})")
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest='command', required=True)

    sub.add_parser('watch', help="Show the queue and keep it updated")

    add = sub.add_parser('add', help="Add a URL to the queue")
    add.add_argument('url')
    add.add_argument('--quality', '-q', default=DEFAULT_QUALITY, help="sd, hd, fhd; _s suffix for split (e.g. hd_s, 720p)")

    sub.add_parser('pause', help="Toggle pause")
    sub.add_parser('forward', help="Seek forward")
    sub.add_parser('rewind', help="Seek backward")
    seek = sub.add_parser('seek', help="Seek to a position")
    seek.add_argument('seconds', type=float)
    sub.add_parser('mute', help="Mute")
    sub.add_parser('unmute', help="Full volume")
    sub.add_parser('skip', help="Cancel what is playing")

    cancel = sub.add_parser('cancel', help="Remove a job from the queue")
    cancel.add_argument('job_id')
    promote = sub.add_parser('promote', help="Play a queued job now")
    promote.add_argument('job_id')
    move = sub.add_parser('move', help="Move a queued job to a position in up next")
    move.add_argument('job_id')
    move.add_argument('position', type=int)

    clear = sub.add_parser('clear', help="Clear everything and stop the player")
    clear.add_argument('--yes', '-y', action='store_true', help="Do not ask for confirmation")

    sub.add_parser('history', help="Show recently played")
    forget = sub.add_parser('forget', help="Remove a history entry")
    forget.add_argument('url')
    requeue = sub.add_parser('requeue', help="Queue a history entry again")
    requeue.add_argument('url')
    return parser


def confirm_clear() -> bool:
    answer = input("Clear everything and stop player? This cannot be undone. [y/N] ")
    return answer.strip().lower() in ('y', 'yes')


async def watch(session: RemoteQueueSession) -> None:
    await session.start()
    while True:
        view = session.view()
        session.drain_notifications()
        sys.stdout.write("\x1b[2J\x1b[H" + render_view(view, show_history=True) + "\n")
        sys.stdout.flush()
        await asyncio.sleep(session.poller.interval)


async def run(args: argparse.Namespace) -> int:
    session = RemoteQueueSession(RemoteYtClient(base_url=args.server))
    try:
        if args.command == 'watch':
            await watch(session)
            return 0

        if args.command == 'clear':
            confirmed = args.yes or confirm_clear()
            if not confirmed:
                print("Nothing cleared")
                return 0
            ok = await session.clear_all(confirmed=True)
        elif args.command in ('history', 'forget', 'requeue'):
            await session.history.refresh()
            if args.command == 'forget':
                ok = await session.remove_history(args.url)
            elif args.command == 'requeue':
                ok = await session.requeue_history(args.url) is not None
            else:
                print("\n".join(render_history(session.history.entries)) or "No history")
                return 0
        else:
            await session.wait_until_synced()
            ok = await dispatch(session, args)

        for message in session.drain_notifications():
            print(message, file=sys.stderr)
        print(render_view(session.view()))
        return 0 if ok else 1
    except ConfirmationRequiredError as e:
        print(e, file=sys.stderr)
        return 2
    finally:
        await session.close()


async def dispatch(session: RemoteQueueSession, args: argparse.Namespace) -> bool:
    match args.command:
        case 'add':
            return await session.enqueue(args.url, args.quality) is not None
        case 'pause':
            return await session.dispatcher.toggle_pause()
        case 'forward':
            return await session.dispatcher.seek_forward()
        case 'rewind':
            return await session.dispatcher.seek_rewind()
        case 'seek':
            return await session.dispatcher.seek_to(args.seconds)
        case 'mute':
            return await session.dispatcher.mute()
        case 'unmute':
            return await session.dispatcher.full_volume()
        case 'skip':
            return await session.skip()
        case 'cancel':
            return await session.cancel(args.job_id)
        case 'promote':
            return await session.promote(args.job_id)
        case 'move':
            try:
                return await session.move(args.job_id, args.position)
            except KeyError:
                print(f"No queued job {args.job_id}", file=sys.stderr)
                return False
    raise ValueError(f"Unknown command: {args.command}")


def log_stream(command: str):
    """Readable logs go to stderr while watch owns the screen."""
    return sys.stderr if command == 'watch' else sys.stdout


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(LOG_LEVEL, LOG_FILE, stream=log_stream(args.command))

    with start_action(action_type="cli_command", command=args.command, server=args.server):
        try:
            return asyncio.run(run(args))
        except KeyboardInterrupt:
            return 0
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 2
        except Exception as e:
            write_traceback()
            log_message(
                message_type="error_occurred",
                error_message=str(e),
                error_type=type(e).__name__,
                context="cli_command",
            )
            print(f"Error in main: {e}", file=sys.stderr)
            return 1


if __name__ == "__main__":
    sys.exit(main())
