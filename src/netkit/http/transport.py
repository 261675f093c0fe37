"""aiohttp-backed transport sessions."""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Optional

import aiohttp

from ..errors import InvalidResponseError
from ..models.config import SessionConfiguration
from ..models.request import WireRequest
from .protocols import DownloadedFile, ProgressCallback, TransportResponse

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


def _to_response(response: aiohttp.ClientResponse, content: bytes = b"") -> TransportResponse:
    return TransportResponse(
        status_code=response.status,
        content=content,
        headers=dict(response.headers),
        url=str(response.url),
    )


class AiohttpSession:
    """
    TransportSession wrapping one aiohttp.ClientSession.

    Must be created while an event loop is running; SessionCache does
    this lazily on first use.
    """

    def __init__(
        self,
        configuration: SessionConfiguration,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        temp_dir: Optional[Path] = None,
    ) -> None:
        self.configuration = configuration
        self._chunk_size = chunk_size
        self._temp_dir = temp_dir
        self._proxy = configuration.proxy

        connector = aiohttp.TCPConnector(
            limit=configuration.max_connections,
            limit_per_host=configuration.max_connections_per_host,
            ttl_dns_cache=300,
        )
        cookie_jar: aiohttp.abc.AbstractCookieJar = (
            aiohttp.CookieJar() if configuration.persist_cookies else aiohttp.DummyCookieJar()
        )
        self._session = aiohttp.ClientSession(
            connector=connector,
            cookie_jar=cookie_jar,
            headers=configuration.headers,
            timeout=aiohttp.ClientTimeout(
                total=configuration.resource_timeout,
                connect=configuration.connect_timeout,
                sock_read=configuration.request_timeout,
            ),
        )

    @property
    def closed(self) -> bool:
        return self._session.closed

    async def send(self, request: WireRequest) -> TransportResponse:
        try:
            async with self._session.request(
                request.method,
                request.url,
                headers=request.headers,
                data=request.body,
                proxy=self._proxy,
            ) as response:
                content = await response.read()
                return _to_response(response, content)
        except aiohttp.ClientResponseError as e:
            # Raised by aiohttp when the status line or headers cannot be parsed
            raise InvalidResponseError(f"Invalid response from server: {e.message}") from e

    async def download(self, request: WireRequest, on_progress: ProgressCallback) -> DownloadedFile:
        fd, temp_name = tempfile.mkstemp(prefix="netkit-", suffix=".download", dir=self._temp_dir)
        os.close(fd)
        location = Path(temp_name)

        try:
            async with self._session.request(
                request.method,
                request.url,
                headers=request.headers,
                data=request.body,
                proxy=self._proxy,
            ) as response:
                expected = response.content_length
                received = 0
                with open(location, "wb") as f:
                    async for chunk in response.content.iter_chunked(self._chunk_size):
                        await asyncio.to_thread(f.write, chunk)
                        received += len(chunk)
                        on_progress(received, expected)
                logger.debug(f"Downloaded {received} bytes from {request.url} to {location}")
                return DownloadedFile(response=_to_response(response), location=location, size=received)
        except aiohttp.ClientResponseError as e:
            location.unlink(missing_ok=True)
            raise InvalidResponseError(f"Invalid response from server: {e.message}") from e
        except BaseException:
            # Includes cancellation: never leave a partial temporary file behind
            location.unlink(missing_ok=True)
            raise

    async def upload(
        self,
        request: WireRequest,
        source: Path,
        on_progress: ProgressCallback,
    ) -> TransportResponse:
        total = source.stat().st_size
        chunk_size = self._chunk_size

        async def file_chunks() -> AsyncIterator[bytes]:
            sent = 0
            with open(source, "rb") as f:
                while True:
                    chunk = await asyncio.to_thread(f.read, chunk_size)
                    if not chunk:
                        break
                    yield chunk
                    sent += len(chunk)
                    on_progress(sent, total)

        try:
            async with self._session.request(
                request.method,
                request.url,
                headers=request.headers,
                data=file_chunks(),
                proxy=self._proxy,
            ) as response:
                content = await response.read()
                return _to_response(response, content)
        except aiohttp.ClientResponseError as e:
            raise InvalidResponseError(f"Invalid response from server: {e.message}") from e

    async def close(self) -> None:
        if not self._session.closed:
            await self._session.close()


class AiohttpTransport:
    """
    Transport that opens aiohttp sessions.

    Example:
        transport = AiohttpTransport(chunk_size=256 * 1024)
        client = NetworkClient(config, transport=transport)
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE, temp_dir: Optional[Path] = None) -> None:
        """
        Initialize the transport.

        Args:
            chunk_size: Bytes read per chunk for streamed transfers
            temp_dir: Directory for in-flight downloads (default: system temp dir)
        """
        self.chunk_size = chunk_size
        self.temp_dir = temp_dir

    def open_session(self, configuration: SessionConfiguration) -> AiohttpSession:
        logger.debug(f"Opening aiohttp session ({configuration.kind.value})")
        return AiohttpSession(configuration, chunk_size=self.chunk_size, temp_dir=self.temp_dir)
