"""Tests for NetworkClient.download()/upload() and TransferStream."""

import asyncio
from typing import Any
from unittest.mock import MagicMock

import pytest
from netkit import (
    Completed,
    HTTPMethod,
    NetworkClient,
    NotFoundError,
    Progress,
    Request,
    ServerError,
    TransferStream,
    TransportError,
)
from pydantic import BaseModel


class User(BaseModel):
    id: int
    name: str


class GetFile(Request[Any]):
    path = "/files/report.pdf"
    method = HTTPMethod.GET


class UploadAvatar(Request[User]):
    path = "/users/1/avatar"
    method = HTTPMethod.PUT


async def collect(stream):
    """Drain a stream into a list."""
    return [event async for event in stream]


async def wait_until_sent(transport):
    """Yield to the loop until the transport has seen a request."""
    while not transport.sent:
        await asyncio.sleep(0)


class TestDownload:
    """Tests for downloads."""

    @pytest.mark.asyncio
    async def test_progress_then_completed(self, client, transport, tmp_path):
        """Test a successful download emits progress and ends in Completed."""
        transport.progress_steps = [(0, 100), (50, 100), (100, 100)]
        transport.download_body = b"%PDF-1.7"
        destination = tmp_path / "report.pdf"

        events = await collect(client.download(GetFile(), destination))

        assert events == [Progress(0.0), Progress(0.5), Progress(1.0), Completed(destination)]
        assert destination.read_bytes() == b"%PDF-1.7"
        assert not any(path.exists() for path in transport.temp_files)

    @pytest.mark.asyncio
    async def test_progress_is_monotonic_and_bounded(self, client, transport, tmp_path):
        """Test fractions stay in [0, 1] and never decrease."""
        transport.progress_steps = [(i * 128, 1024) for i in range(9)] + [(2048, 1024)]

        events = await collect(client.download(GetFile(), tmp_path / "out.bin"))

        fractions = [event.fraction for event in events if isinstance(event, Progress)]
        assert fractions == sorted(fractions)
        assert all(0.0 <= fraction <= 1.0 for fraction in fractions)
        assert fractions[-1] == 1.0
        assert isinstance(events[-1], Completed)

    @pytest.mark.asyncio
    async def test_unknown_total_suppresses_progress(self, client, transport, tmp_path):
        """Test that transfers without a known size only report completion."""
        transport.progress_steps = [(10, None), (20, 0), (30, -1)]
        destination = tmp_path / "out.bin"

        events = await collect(client.download(GetFile(), destination))

        assert events == [Completed(destination)]

    @pytest.mark.asyncio
    async def test_replaces_existing_destination(self, client, transport, tmp_path):
        """Test that a finished download overwrites the destination."""
        destination = tmp_path / "out.bin"
        destination.write_bytes(b"old contents")
        transport.download_body = b"new contents"

        await collect(client.download(GetFile(), destination))

        assert destination.read_bytes() == b"new contents"

    @pytest.mark.asyncio
    async def test_creates_parent_directories(self, client, transport, tmp_path):
        """Test downloading into a directory that does not exist yet."""
        destination = tmp_path / "nested" / "dir" / "out.bin"
        transport.download_body = b"x"

        events = await collect(client.download(GetFile(), str(destination)))

        assert events[-1] == Completed(destination)
        assert destination.read_bytes() == b"x"

    @pytest.mark.asyncio
    async def test_failed_status_leaves_destination_untouched(self, client, transport, tmp_path):
        """Test that a non-2xx download raises and writes nothing."""
        destination = tmp_path / "out.bin"
        destination.write_bytes(b"keep me")
        transport.respond(404, b"missing")
        transport.download_body = b"<html>Not Found</html>"
        transport.progress_steps = [(5, 10)]

        events = []
        with pytest.raises(NotFoundError):
            async for event in client.download(GetFile(), destination):
                events.append(event)

        assert events == [Progress(0.5)]
        assert destination.read_bytes() == b"keep me"
        assert not any(path.exists() for path in transport.temp_files)

    @pytest.mark.asyncio
    async def test_transport_failure(self, client, transport, tmp_path):
        """Test that transport errors end the stream with TransportError."""
        transport.error = ConnectionResetError("reset")
        destination = tmp_path / "out.bin"

        with pytest.raises(TransportError) as exc_info:
            await collect(client.download(GetFile(), destination))

        assert isinstance(exc_info.value.cause, ConnectionResetError)
        assert not destination.exists()

    @pytest.mark.asyncio
    async def test_relocation_failure_propagates(self, client, transport, tmp_path):
        """Test that filesystem errors moving the file are raised as-is."""
        destination = tmp_path / "taken"
        destination.mkdir()
        transport.download_body = b"data"

        with pytest.raises(OSError):
            await collect(client.download(GetFile(), destination))

        assert destination.is_dir()
        assert not any(path.exists() for path in transport.temp_files)

    @pytest.mark.asyncio
    async def test_lazy_start(self, client, transport, tmp_path):
        """Test that nothing is sent until the stream is iterated."""
        stream = client.download(GetFile(), tmp_path / "out.bin")
        await asyncio.sleep(0)

        assert transport.sent == []
        assert transport.sessions == []

        await collect(stream)
        assert len(transport.sent) == 1

    @pytest.mark.asyncio
    async def test_single_pass(self, client, transport, tmp_path):
        """Test that a finished stream yields nothing on re-iteration."""
        stream = client.download(GetFile(), tmp_path / "out.bin")

        first = await collect(stream)
        second = await collect(stream)

        assert len(first) == 1
        assert second == []
        assert stream.closed is True
        assert len(transport.sent) == 1

    @pytest.mark.asyncio
    async def test_new_call_transfers_again(self, client, transport, tmp_path):
        """Test that each download() call is an independent transfer."""
        destination = tmp_path / "out.bin"

        await collect(client.download(GetFile(), destination))
        await collect(client.download(GetFile(), destination))

        assert len(transport.sent) == 2

    @pytest.mark.asyncio
    async def test_logs_downloaded_size(self, config, transport, tmp_path):
        """Test that the logged body size is the number of bytes written."""
        logger = MagicMock()
        client = NetworkClient(config, transport=transport, logger=logger)
        transport.download_body = bytes(1024)

        await collect(client.download(GetFile(), tmp_path / "out.bin"))

        status_code, _, body_size, _ = logger.log_response.call_args.args
        assert status_code == 200
        assert body_size == 1024


class TestDownloadCancellation:
    """Tests for cancelling in-flight downloads."""

    @pytest.mark.asyncio
    async def test_cancel_consumer(self, client, transport, tmp_path):
        """Test that cancelling the consuming task cancels the transfer."""
        transport.hang = asyncio.Event()
        destination = tmp_path / "out.bin"
        stream = client.download(GetFile(), destination)

        consumer = asyncio.create_task(collect(stream))
        await wait_until_sent(transport)
        consumer.cancel()

        with pytest.raises(asyncio.CancelledError):
            await consumer

        assert transport.cancelled is True
        assert stream.closed is True
        assert not destination.exists()
        assert transport.temp_files == []

    @pytest.mark.asyncio
    async def test_leaving_context_cancels(self, client, transport, tmp_path):
        """Test that breaking out of `async with` stops the transfer."""
        transport.progress_steps = [(1, 10)]
        transport.hang = asyncio.Event()
        destination = tmp_path / "out.bin"

        async with client.download(GetFile(), destination) as events:
            async for event in events:
                first = event
                break

        assert first == Progress(0.1)
        assert transport.cancelled is True
        assert not destination.exists()

    @pytest.mark.asyncio
    async def test_aclose_then_iterate(self, client, transport, tmp_path):
        """Test that a closed stream yields nothing further."""
        transport.progress_steps = [(1, 2)]
        transport.hang = asyncio.Event()
        stream = client.download(GetFile(), tmp_path / "out.bin")

        assert await stream.__anext__() == Progress(0.5)
        await stream.aclose()

        with pytest.raises(StopAsyncIteration):
            await stream.__anext__()
        assert transport.cancelled is True

    @pytest.mark.asyncio
    async def test_close_while_reporting_progress(self, client, transport, tmp_path):
        """Test closing the stream while the transfer is still emitting progress."""
        transport.progress_steps = [(i, 100) for i in range(1, 101)]
        destination = tmp_path / "out.bin"
        stream = client.download(GetFile(), destination)

        assert await stream.__anext__() == Progress(0.01)
        await stream.aclose()

        assert transport.cancelled is True
        assert transport.temp_files == []
        assert not destination.exists()

    @pytest.mark.asyncio
    async def test_aclose_before_start(self, client, transport, tmp_path):
        """Test closing a stream that never started."""
        stream = client.download(GetFile(), tmp_path / "out.bin")
        await stream.aclose()

        assert await collect(stream) == []
        assert transport.sent == []

    @pytest.mark.asyncio
    async def test_timeout_cancels_transfer(self, client, transport, tmp_path):
        """Test that asyncio.wait_for cancellation reaches the transport."""
        transport.hang = asyncio.Event()

        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(collect(client.download(GetFile(), tmp_path / "out.bin")), timeout=0.05)

        assert transport.cancelled is True


class TestUpload:
    """Tests for uploads."""

    @pytest.mark.asyncio
    async def test_upload_success(self, client, transport, tmp_path):
        """Test that an upload reports progress and decodes the response."""
        source = tmp_path / "avatar.png"
        source.write_bytes(b"\x89PNG....")
        transport.progress_steps = [(4, 8), (8, 8)]
        transport.respond(200, b'{"id": 1, "name": "a"}')

        events = await collect(client.upload(UploadAvatar(), source))

        assert events == [Progress(0.5), Progress(1.0), Completed(User(id=1, name="a"))]
        assert transport.uploaded == b"\x89PNG...."
        assert transport.sent[0].method == "PUT"
        assert transport.sent[0].url == "https://api.example.com/users/1/avatar"

    @pytest.mark.asyncio
    async def test_upload_status_error(self, client, transport, tmp_path):
        """Test that a failed upload raises without a Completed event."""
        source = tmp_path / "avatar.png"
        source.write_bytes(b"data")
        transport.respond(500, b"")

        events = []
        with pytest.raises(ServerError):
            async for event in client.upload(UploadAvatar(), str(source)):
                events.append(event)

        assert not any(isinstance(event, Completed) for event in events)

    @pytest.mark.asyncio
    async def test_upload_transport_error(self, client, transport, tmp_path):
        """Test that transport failures surface as TransportError."""
        source = tmp_path / "avatar.png"
        source.write_bytes(b"data")
        transport.error = ConnectionAbortedError()

        with pytest.raises(TransportError):
            await collect(client.upload(UploadAvatar(), source))

    @pytest.mark.asyncio
    async def test_missing_source(self, client, transport, tmp_path):
        """Test uploading a file that does not exist."""
        with pytest.raises(TransportError) as exc_info:
            await collect(client.upload(UploadAvatar(), tmp_path / "missing.png"))

        assert isinstance(exc_info.value.cause, FileNotFoundError)


class TestTransferStream:
    """Tests for TransferStream on its own."""

    @pytest.mark.asyncio
    async def test_emits_progress_then_value(self):
        """Test a producer that reports progress and returns a value."""

        async def producer(emit):
            emit(Progress(0.25))
            await asyncio.sleep(0)
            emit(Progress(1.0))
            return "done"

        events = await collect(TransferStream(producer))

        assert events == [Progress(0.25), Progress(1.0), Completed("done")]

    @pytest.mark.asyncio
    async def test_error_replaces_completed(self):
        """Test that a failing producer raises after its progress events."""

        async def producer(emit):
            emit(Progress(0.5))
            raise ValueError("boom")

        stream = TransferStream(producer)
        events = []
        with pytest.raises(ValueError, match="boom"):
            async for event in stream:
                events.append(event)

        assert events == [Progress(0.5)]
        assert await collect(stream) == []

    @pytest.mark.asyncio
    async def test_producer_not_started_until_iterated(self):
        """Test laziness of the producer."""
        started = []

        async def producer(emit):
            started.append(True)
            return None

        stream = TransferStream(producer)
        await asyncio.sleep(0)
        assert started == []

        assert await collect(stream) == [Completed(None)]
        assert started == [True]
