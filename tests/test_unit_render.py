"""Unit tests for plain-text rendering."""

import pytest
from remote_yt.enqueue import PendingAdd, QualitySelection
from remote_yt.models import PlayerState, TrackInfo, TrackType
from remote_yt.render import codec_badges, format_time, relative_time, render_history, render_view, trim_codec
from remote_yt.session import QueueRow, QueueView, ViewStatus
from tests.helpers.snapshots import make_entry, make_history_entry


class TestFormatting:
    """Test small formatting helpers."""

    @pytest.mark.parametrize(
        "seconds,expected",
        [(0, "0:00"), (None, "0:00"), (9, "0:09"), (75, "1:15"), (3600, "1:00:00"), (3725, "1:02:05")],
    )
    def test_format_time(self, seconds, expected):
        assert format_time(seconds) == expected

    @pytest.mark.parametrize(
        "delta,expected",
        [
            (5, "just now"),
            (60, "1 minute ago"),
            (150, "2 minutes ago"),
            (3 * 3600, "3 hours ago"),
            (86400, "1 day ago"),
            (14 * 86400, "2 weeks ago"),
        ],
    )
    def test_relative_time(self, delta, expected):
        assert relative_time(1_000_000, now=1_000_000 + delta) == expected

    def test_trim_codec(self):
        assert trim_codec("avc1.64001F") == "avc1"
        assert trim_codec("opus") == "opus"
        assert trim_codec(None) == "?"

    def test_codec_badges_merged(self):
        info = TrackInfo(title="t", vcodec="avc1.4d", acodec="mp4a.40.2", width=640, height=360, track_type=TrackType.MERGED)

        assert codec_badges(info) == ["640×360", "avc1+mp4a"]

    def test_codec_badges_split(self):
        info = TrackInfo(title="t", vcodec="vp9", acodec="opus", track_type=TrackType.SPLIT)

        assert codec_badges(info) == ["vp9", "opus"]


class TestRenderView:
    """Test whole-view rendering."""

    def test_offline(self):
        assert render_view(QueueView(status=ViewStatus.OFFLINE)) == "Server offline"

    def test_nothing_playing(self):
        text = render_view(QueueView(status=ViewStatus.ONLINE))

        assert "Nothing playing" in text
        assert "Up Next" not in text

    def test_now_playing_and_up_next(self):
        view = QueueView(
            status=ViewStatus.ONLINE,
            now_playing=make_entry("np", title="Current Song"),
            player=PlayerState(state="paused", time=65, length=200, volume=0),
            up_next=[
                QueueRow(entry=make_entry("a", title="Next Song")),
                QueueRow(entry=make_entry("b", resolving=True)),
                QueueRow(pending=PendingAdd(id=1, url="u", selection=QualitySelection(TrackType.SPLIT, 720))),
            ],
        )

        text = render_view(view)

        assert "Current Song - Channel" in text
        assert "❚❚ 1:05 / 3:20  (muted)" in text
        assert "Next Song" in text
        assert "Resolving... [b]" in text
        assert text.rstrip().endswith("Adding to queue...")

    def test_notifications_first(self):
        view = QueueView(status=ViewStatus.ONLINE, notifications=["Could not add x: bad"])

        assert render_view(view).splitlines()[0] == "! Could not add x: bad"

    def test_history_section(self):
        view = QueueView(status=ViewStatus.ONLINE, history=[make_history_entry("a")])

        assert "History" in render_view(view, show_history=True)
        assert "History a" not in render_view(view)


class TestRenderHistory:
    """Test history listing."""

    def test_most_recent_first(self):
        entries = [make_history_entry("old", inserted_at=100), make_history_entry("new", inserted_at=200)]

        lines = render_history(entries, now=200)

        assert lines[0].startswith("  History new")
        assert "played just now" in lines[0]
        assert lines[1] == "    https://example.com/watch?v=new"
