"""Shared fakes for netkit tests."""

import asyncio
import itertools
from pathlib import Path
from typing import Optional

import pytest
from netkit import ClientConfiguration, NetworkClient, SilentNetworkLogger, TransportResponse
from netkit.http import DownloadedFile


class FakeSession:
    """TransportSession that replays whatever its FakeTransport is set up with."""

    def __init__(self, transport: "FakeTransport", configuration) -> None:
        self.transport = transport
        self.configuration = configuration
        self.closed = False

    async def _replay_progress(self, on_progress) -> None:
        for transferred, expected in self.transport.progress_steps:
            on_progress(transferred, expected)
            await asyncio.sleep(0)

    async def send(self, request):
        self.transport.sent.append(request)
        if self.transport.error is not None:
            raise self.transport.error
        return self.transport.response

    async def download(self, request, on_progress):
        self.transport.sent.append(request)
        try:
            await self._replay_progress(on_progress)
            if self.transport.hang is not None:
                await self.transport.hang.wait()
        except asyncio.CancelledError:
            self.transport.cancelled = True
            raise
        if self.transport.error is not None:
            raise self.transport.error
        location = self.transport.temp_dir / f"fake-{next(self.transport.counter)}.download"
        location.write_bytes(self.transport.download_body)
        self.transport.temp_files.append(location)
        return DownloadedFile(
            response=self.transport.response,
            location=location,
            size=len(self.transport.download_body),
        )

    async def upload(self, request, source, on_progress):
        self.transport.sent.append(request)
        self.transport.uploaded = Path(source).read_bytes()
        await self._replay_progress(on_progress)
        if self.transport.error is not None:
            raise self.transport.error
        return self.transport.response

    async def close(self) -> None:
        self.closed = True


class FakeTransport:
    """Transport whose sessions record requests and return canned results."""

    def __init__(self, temp_dir: Path) -> None:
        self.temp_dir = temp_dir
        self.sessions: list[FakeSession] = []
        self.sent: list = []
        self.response = TransportResponse(status_code=200, content=b"{}", url="https://api.example.com")
        self.error: Optional[BaseException] = None
        self.progress_steps: list[tuple[int, Optional[int]]] = []
        self.download_body = b""
        self.uploaded: Optional[bytes] = None
        self.hang: Optional[asyncio.Event] = None
        self.cancelled = False
        self.temp_files: list[Path] = []
        self.counter = itertools.count()

    def open_session(self, configuration) -> FakeSession:
        session = FakeSession(self, configuration)
        self.sessions.append(session)
        return session

    def respond(self, status_code: int, content: bytes = b"") -> None:
        self.response = TransportResponse(status_code=status_code, content=content, url="https://api.example.com")


@pytest.fixture
def transport(tmp_path):
    """Create a fake transport writing downloads under tmp_path."""
    temp_dir = tmp_path / "transport"
    temp_dir.mkdir()
    return FakeTransport(temp_dir)


@pytest.fixture
def config():
    """Create a client configuration for a fake API."""
    return ClientConfiguration(base_url="https://api.example.com")


@pytest.fixture
def client(config, transport):
    """Create a client on the fake transport with logging silenced."""
    return NetworkClient(config, transport=transport, logger=SilentNetworkLogger())
