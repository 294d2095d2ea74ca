"""Async HTTP client for the remote-yt server.

One method per endpoint. Transport problems and server answers are folded
into a small exception hierarchy so callers can tell a flaky link from a
rejected request:

    RemoteYtError
    ├── ServerUnreachableError   connection refused, timeouts, dropped links
    ├── RequestRejectedError     any non-2xx answer (bad URL, unknown job, ...)
    └── SnapshotDecodeError      the answer was not the JSON we expect
"""

import httpx
from config import REQUEST_TIMEOUT, SERVER_URL
from pydantic import TypeAdapter, ValidationError
from remote_yt.models import EnqueueRequest, HistoryEntry, Snapshot, TrackType
from typing import Any
from urllib.parse import quote

_history_adapter = TypeAdapter(list[HistoryEntry])


class RemoteYtError(Exception):
    """Base class for every failure talking to the server."""


class ServerUnreachableError(RemoteYtError):
    """The request never got an answer."""


class RequestRejectedError(RemoteYtError):
    """The server answered with an error status."""

    def __init__(self, status_code: int, detail: str):
        super().__init__(f"HTTP {status_code}: {detail}" if detail else f"HTTP {status_code}")
        self.status_code = status_code
        self.detail = detail


class SnapshotDecodeError(RemoteYtError):
    """The server answered 2xx with a body that does not decode."""


def _segment(value: str) -> str:
    return quote(str(value), safe='')


class RemoteYtClient:
    """Client for the remote-yt queue and player API."""

    def __init__(
        self,
        base_url: str = SERVER_URL,
        timeout: float = REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Server origin (default: REMOTE_YT_URL)
            timeout: Per-request timeout in seconds
            transport: Optional transport override (used by tests)
        """
        self.base_url = base_url
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            headers={'Content-Type': 'application/json'},
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _request(self, method: str, path: str, json: Any = None) -> httpx.Response:
        """Send one request and classify the outcome.

        Raises:
            ServerUnreachableError: If the transport failed
            RequestRejectedError: If the server answered with a non-2xx status
            SnapshotDecodeError: If the body could not be decoded (e.g. bad Content-Encoding)
        """
        try:
            if json is None:
                response = await self._client.request(method, path)
            else:
                response = await self._client.request(method, path, json=json)
        except httpx.TransportError as e:
            raise ServerUnreachableError(f"{method} {path}: {e!r}") from e
        except httpx.DecodingError as e:
            raise SnapshotDecodeError(f"{method} {path}: undecodable body: {e}") from e
        except httpx.RequestError as e:
            raise ServerUnreachableError(f"{method} {path}: {e!r}") from e

        if response.is_error:
            raise RequestRejectedError(response.status_code, response.text.strip())
        return response

    @staticmethod
    def _decode_json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise SnapshotDecodeError(f"Invalid JSON from {response.request.url.path}: {e}") from e

    # === Reads ===

    async def inspect(self) -> Snapshot:
        """Fetch the current queue and player snapshot."""
        response = await self._request('GET', '/api/inspect')
        try:
            return Snapshot.model_validate(self._decode_json(response))
        except ValidationError as e:
            raise SnapshotDecodeError(f"Unexpected snapshot shape: {e}") from e

    async def history(self) -> list[HistoryEntry]:
        """Fetch the playback history log, oldest first."""
        response = await self._request('GET', '/api/history')
        try:
            return _history_adapter.validate_python(self._decode_json(response))
        except ValidationError as e:
            raise SnapshotDecodeError(f"Unexpected history shape: {e}") from e

    # === Enqueue ===

    async def enqueue(self, request: EnqueueRequest, track_type: TrackType) -> str:
        """Queue a URL for resolution and playback.

        Returns:
            Whatever the server answered with (the new job id on current servers)
        """
        response = await self._request('POST', f'/api/queue_{track_type.value}', json=request.model_dump())
        return response.text.strip()

    # === Player transport ===

    async def execute_command(self, payload: str | dict[str, int]) -> None:
        """Send a player command (string literal or tagged object)."""
        await self._request('POST', '/api/execute_command', json=payload)

    # === Queue edits ===

    async def move(self, job_id: str, new_position: int) -> None:
        await self._request('POST', f'/api/move/{_segment(job_id)}/{new_position}')

    async def cancel(self, job_id: str) -> None:
        await self._request('POST', f'/api/cancel/{_segment(job_id)}')

    async def cancel_current(self) -> None:
        await self._request('POST', '/api/cancel')

    async def swap(self, job_id: str) -> None:
        """Promote a queued job into the now-playing slot."""
        await self._request('POST', f'/api/swap/{_segment(job_id)}')

    async def clear(self) -> None:
        await self._request('POST', '/api/clear')

    # === History ===

    async def remove_history(self, webpage_url: str) -> None:
        await self._request('POST', f'/api/remove_history/{_segment(webpage_url)}')
