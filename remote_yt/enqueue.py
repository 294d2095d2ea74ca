"""Quality tiers and the optimistic enqueue tracker.

While an enqueue request is in flight, and until the first poll issued after
it completes, the queue shows a trailing "resolving" placeholder for it.
Placeholders are never matched to the job the server created; disappearing
on the next qualifying poll is the only correlation.
"""

import itertools
import re
from collections.abc import Callable
from config import DEFAULT_QUALITY, HISTORY_DEFAULT_HEIGHT
from dataclasses import dataclass
from eliot import start_action
from remote_yt.api import RemoteYtClient, RemoteYtError, RequestRejectedError
from remote_yt.logging import log_error, log_queue_operation
from remote_yt.models import EnqueueRequest, HistoryEntry, Snapshot, TrackType
from remote_yt.poller import SnapshotPoller

SPLIT_SUFFIX = '_s'

# Tier code -> minimum height; the _s suffix selects split delivery
QUALITY_TO_MIN_HEIGHT = {
    'sd': 480,
    'hd': 720,
    'fhd': 1080,
    'sd_s': 480,
    'hd_s': 720,
    'fhd_s': 1080,
}

# Labels shown in the quality picker
QUALITY_LABELS = {
    '480p': 'sd_s',
    '720p': 'hd_s',
    '1080p': 'fhd_s',
    '480m': 'sd',
    '720m': 'hd',
    '1080m': 'fhd',
}

_PHRASE = re.compile(r'^(?P<height>\d+)p?\s+(?P<kind>split|merged)$')


@dataclass(frozen=True)
class QualitySelection:
    track_type: TrackType
    height: int


def resolve_quality(tier: str) -> QualitySelection:
    """Turn a tier code, picker label or phrase into a track type and height.

    Args:
        tier: e.g. "hd_s", "720p", "480m" or "720p split"

    Returns:
        The selection to enqueue with

    Raises:
        ValueError: If the tier is unknown

    Examples:
        >>> resolve_quality("hd_s")
        QualitySelection(track_type=<TrackType.SPLIT: 'split'>, height=720)
        >>> resolve_quality("480m").track_type.value
        'merged'
    """
    key = tier.strip().lower()
    key = QUALITY_LABELS.get(key, key)

    match = _PHRASE.match(key)
    if match:
        height = int(match.group('height'))
        if height not in QUALITY_TO_MIN_HEIGHT.values():
            raise ValueError(f"Unknown quality tier: {tier!r}")
        kind = TrackType(match.group('kind'))
        return QualitySelection(kind, height)

    if key not in QUALITY_TO_MIN_HEIGHT:
        raise ValueError(f"Unknown quality tier: {tier!r}")

    track_type = TrackType.SPLIT if key.endswith(SPLIT_SUFFIX) else TrackType.MERGED
    return QualitySelection(track_type, QUALITY_TO_MIN_HEIGHT[key])


@dataclass
class PendingAdd:
    """Local placeholder for a submitted, not yet confirmed enqueue."""

    id: int
    url: str
    selection: QualitySelection
    # Sequence of the last poll issued when the request completed; None while in flight
    resolved_after_seq: int | None = None
    rejected: bool = False

    @property
    def in_flight(self) -> bool:
        return self.resolved_after_seq is None


class EnqueueTracker:
    """Submits enqueue requests and tracks their placeholders."""

    def __init__(
        self,
        client: RemoteYtClient,
        poller: SnapshotPoller,
        notify: Callable[[str], None] | None = None,
    ):
        self.client = client
        self.poller = poller
        self.notify = notify or (lambda message: None)
        self._pending: list[PendingAdd] = []
        self._ids = itertools.count(1)

    @property
    def pending(self) -> list[PendingAdd]:
        return list(self._pending)

    @property
    def placeholder_count(self) -> int:
        return len(self._pending)

    async def submit(self, url: str, quality: str = DEFAULT_QUALITY) -> str | None:
        """Enqueue a URL, showing a placeholder until the server has it.

        Args:
            url: Source URL
            quality: Tier code or label (see resolve_quality)

        Returns:
            The server's answer (job id) on success, otherwise None

        Raises:
            ValueError: If the quality tier is unknown
        """
        selection = resolve_quality(quality)
        return await self._submit(url, selection)

    async def requeue(self, entry: HistoryEntry) -> str | None:
        """Queue a history entry again, split, at the height it was played at."""
        selection = QualitySelection(TrackType.SPLIT, entry.height or HISTORY_DEFAULT_HEIGHT)
        return await self._submit(entry.webpage_url, selection)

    async def _submit(self, url: str, selection: QualitySelection) -> str | None:
        url = url.strip()
        if not url:
            self.notify("Enter a URL to add to the queue")
            return None

        request = EnqueueRequest(url=url, height=selection.height)
        pending = PendingAdd(id=next(self._ids), url=url, selection=selection)
        self._pending.append(pending)
        log_queue_operation("enqueue", url=url, track_type=selection.track_type.value, height=selection.height)

        job_id = None
        with start_action(action_type="enqueue", url=url):
            try:
                job_id = await self.client.enqueue(request, selection.track_type)
            except RequestRejectedError as e:
                pending.rejected = True
                log_error(e, context="enqueue", url=url)
                self.notify(f"Could not add {url}: {e.detail or e}")
            except RemoteYtError as e:
                log_error(e, context="enqueue", url=url)
            finally:
                pending.resolved_after_seq = self.poller.issued_seq
                await self.poller.refresh()
        return job_id

    def reconcile(self, seq: int, snapshot: Snapshot) -> None:
        """Drop placeholders subsumed by a snapshot polled after their request completed."""
        before = len(self._pending)
        self._pending = [
            pending
            for pending in self._pending
            if pending.resolved_after_seq is None or seq <= pending.resolved_after_seq
        ]
        if len(self._pending) != before:
            log_queue_operation("placeholders_resolved", count=before - len(self._pending), seq=seq)
