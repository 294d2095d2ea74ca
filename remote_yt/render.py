"""Plain-text rendering of a QueueView for the terminal client."""

import time
from remote_yt.models import HistoryEntry, PlayerState, QueueEntry, TrackInfo, TrackType
from remote_yt.session import QueueView

_RELATIVE_UNITS = [
    ('year', 365 * 24 * 3600),
    ('month', 30 * 24 * 3600),
    ('week', 7 * 24 * 3600),
    ('day', 24 * 3600),
    ('hour', 3600),
    ('minute', 60),
]


def format_time(seconds: float | None) -> str:
    """Format seconds as m:ss, or h:mm:ss past an hour.

    Examples:
        >>> format_time(75)
        '1:15'
        >>> format_time(3725)
        '1:02:05'
    """
    seconds = int(seconds or 0)
    hrs, rem = divmod(seconds, 3600)
    mins, secs = divmod(rem, 60)
    if hrs > 0:
        return f"{hrs}:{mins:02d}:{secs:02d}"
    return f"{mins}:{secs:02d}"


def relative_time(timestamp: int, now: float | None = None) -> str:
    """Describe a unix timestamp relative to now ("3 minutes ago")."""
    now = time.time() if now is None else now
    delta = int(now - timestamp)
    if delta < 60:
        return "just now"
    for unit, size in _RELATIVE_UNITS:
        if delta >= size:
            count = delta // size
            return f"{count} {unit}{'s' if count != 1 else ''} ago"
    return "just now"


def trim_codec(codec: str | None) -> str:
    """Drop the profile part of a codec string ("avc1.64001F" -> "avc1")."""
    if not codec:
        return "?"
    return codec.split('.')[0]


def codec_badges(info: TrackInfo) -> list[str]:
    badges = []
    if info.width and info.height:
        badges.append(f"{info.width}×{info.height}")
    if info.track_type == TrackType.MERGED:
        badges.append(f"{trim_codec(info.vcodec)}+{trim_codec(info.acodec)}")
    elif info.track_type == TrackType.SPLIT:
        badges.extend([trim_codec(info.vcodec), trim_codec(info.acodec)])
    return badges


def _describe(entry: QueueEntry) -> str:
    info = entry.track_info
    if info is None:
        return f"Resolving... [{entry.job_id}]"
    line = info.title
    if info.channel:
        line += f" - {info.channel}"
    badges = codec_badges(info)
    if badges:
        line += "  " + " ".join(f"[{badge}]" for badge in badges)
    return line


def _progress(player: PlayerState | None) -> str:
    if player is None:
        return "(loading)"
    state = "❚❚" if player.is_paused else "▶"
    muted = "  (muted)" if player.is_muted else ""
    return f"{state} {format_time(player.time)} / {format_time(player.length)}{muted}"


def render_history(entries: list[HistoryEntry], now: float | None = None) -> list[str]:
    """Most recently played first."""
    lines = []
    for entry in reversed(entries):
        played = relative_time(entry.inserted_at, now)
        lines.append(f"  {entry.title} ({format_time(entry.duration)}) - played {played}")
        lines.append(f"    {entry.webpage_url}")
    return lines


def render_view(view: QueueView, show_history: bool = False) -> str:
    """Render the whole view as a block of text."""
    if view.offline:
        return "Server offline"

    lines = []
    for message in view.notifications:
        lines.append(f"! {message}")

    lines.append("Now Playing")
    if view.now_playing is None:
        lines.append("  Nothing playing")
        lines.append("  Add something to the queue")
    else:
        lines.append(f"  {_describe(view.now_playing)}")
        lines.append(f"  {_progress(view.player)}")

    if view.up_next:
        lines.append("")
        lines.append("Up Next")
        for index, row in enumerate(view.up_next):
            if row.is_placeholder:
                lines.append("   …  Adding to queue...")
            else:
                lines.append(f"  {index:>2}. {_describe(row.entry)}")

    if show_history and view.history:
        lines.append("")
        lines.append("History")
        lines.extend(render_history(view.history))

    return "\n".join(lines)
