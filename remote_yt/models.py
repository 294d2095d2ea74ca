"""Wire models for the remote-yt server API."""

from datetime import UTC, datetime
from enum import Enum
from pydantic import BaseModel, Field, model_validator


class TrackType(str, Enum):
    """How the server delivers a track to the player."""

    MERGED = "merged"
    SPLIT = "split"


class PlaybackStatus(str, Enum):
    PLAYING = "playing"
    PAUSED = "paused"


class TrackInfo(BaseModel):
    """Metadata resolved by the server for a queued source."""

    title: str
    channel: str | None = None
    uploader_id: str | None = None
    acodec: str | None = None
    vcodec: str | None = None
    width: int | None = None
    height: int | None = None
    thumbnail: str | None = None
    duration: float | None = None
    track_type: TrackType | None = None
    webpage_url: str | None = None


class QueueEntry(BaseModel):
    """One job tracked by the server; track_info is absent while resolving."""

    job_id: str
    current: bool = False
    track_info: TrackInfo | None = None

    @property
    def is_resolving(self) -> bool:
        return self.track_info is None


class PlayerState(BaseModel):
    """Transport state of the player; absent when nothing is loaded."""

    state: PlaybackStatus
    time: float = Field(ge=0, description="Elapsed seconds")
    length: float = Field(ge=0, description="Total seconds")
    volume: int = Field(ge=0, description="0 = muted")

    @model_validator(mode="after")
    def _clamp_time(self):
        # The player can report a position slightly past the end while finishing
        if self.length and self.time > self.length:
            self.time = self.length
        return self

    @property
    def is_muted(self) -> bool:
        return self.volume == 0

    @property
    def is_paused(self) -> bool:
        return self.state == PlaybackStatus.PAUSED


class Snapshot(BaseModel):
    """Authoritative read-model of queue and player as of one poll."""

    now_playing: QueueEntry | None = None
    queue: list[QueueEntry] = Field(default_factory=list, description="Up next, in play order")
    player: PlayerState | None = None

    @model_validator(mode="after")
    def _normalize(self):
        # Older servers list the playing job first, flagged current, with no now_playing key
        if self.now_playing is None and self.queue and self.queue[0].current:
            self.now_playing = self.queue.pop(0)

        if self.now_playing is not None:
            self.queue = [entry for entry in self.queue if entry.job_id != self.now_playing.job_id]

        job_ids = [entry.job_id for entry in self.queue]
        if len(job_ids) != len(set(job_ids)):
            raise ValueError("duplicate job_id in queue")
        return self

    @property
    def job_ids(self) -> list[str]:
        return [entry.job_id for entry in self.queue]

    @property
    def now_playing_identity(self) -> str | None:
        """Stable identity of what is playing, used to detect track changes."""
        if self.now_playing is None or self.now_playing.track_info is None:
            return None
        return self.now_playing.track_info.webpage_url

    @property
    def is_empty(self) -> bool:
        return self.now_playing is None and not self.queue


class HistoryEntry(BaseModel):
    """A finished or skipped track recorded by the server."""

    webpage_url: str
    title: str
    channel: str | None = None
    thumbnail: str | None = None
    duration: float | None = None
    height: int | None = None
    inserted_at: int = Field(description="Unix seconds")

    @property
    def played_at(self) -> datetime:
        return datetime.fromtimestamp(self.inserted_at, tz=UTC)


class EnqueueRequest(BaseModel):
    """Body of POST /api/queue_merged and /api/queue_split."""

    url: str = Field(min_length=1)
    height: int = Field(gt=0, description="Minimum video height")
