"""Protocol definitions for the transport layer beneath NetworkClient."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Protocol

from ..models.config import SessionConfiguration
from ..models.request import WireRequest

# Called with (bytes transferred so far, expected total or None if unknown)
ProgressCallback = Callable[[int, Optional[int]], None]


@dataclass(frozen=True)
class TransportResponse:
    """
    Immutable HTTP response returned by a TransportSession.

    Attributes:
        status_code: HTTP status code (200, 404, etc.)
        content: Raw response body (empty for downloads)
        headers: All response headers
        url: Final URL after any redirects
    """

    status_code: int
    content: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)
    url: str = ""


@dataclass(frozen=True)
class DownloadedFile:
    """
    Result of a streamed download.

    The body lives in a temporary file at `location`; the caller owns it
    from here on and must move or delete it. `size` is the number of body
    bytes written there.
    """

    response: TransportResponse
    location: Path
    size: int = 0


class TransportSession(Protocol):
    """
    One live, reusable transport session.

    Implementations raise their own exceptions for transport failures;
    NetworkClient classifies them. They may raise InvalidResponseError
    when the peer does not speak well-formed HTTP.
    """

    async def send(self, request: WireRequest) -> TransportResponse:
        """Perform a simple request and read the whole body."""
        ...

    async def download(self, request: WireRequest, on_progress: ProgressCallback) -> DownloadedFile:
        """
        Stream the response body to a temporary file.

        The temporary file must be removed if the download fails or is
        cancelled before returning.
        """
        ...

    async def upload(
        self,
        request: WireRequest,
        source: Path,
        on_progress: ProgressCallback,
    ) -> TransportResponse:
        """Send the file at `source` as the request body; `request.body` is ignored."""
        ...

    async def close(self) -> None:
        ...


class Transport(Protocol):
    """
    Factory for transport sessions.

    This abstraction allows for:
    - Fake transports in tests
    - Different backends (aiohttp, httpx, etc.)
    """

    def open_session(self, configuration: SessionConfiguration) -> TransportSession:
        """Create a session; called at most once per session identifier."""
        ...
