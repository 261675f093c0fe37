"""NetworkClient: resolves typed requests and executes them over cached sessions."""

from __future__ import annotations

import asyncio
import errno
import logging
import os
import shutil
from collections.abc import Awaitable
from pathlib import Path
from types import TracebackType
from typing import Any, Optional, TypeVar
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from ..codec import JSONDecoder, JSONEncoder, encode_query_items
from ..errors import (
    DecodingError,
    EncodingError,
    InvalidResponseError,
    InvalidURLError,
    NetworkError,
    TransportError,
    classify_status,
)
from ..http.protocols import ProgressCallback, Transport, TransportResponse, TransportSession
from ..http.session_cache import SessionCache
from ..http.transport import AiohttpTransport
from ..models.config import ClientConfiguration
from ..models.progress import Progress
from ..models.request import EmptyBody, EmptyQuery, HTTPMethod, Request, WireRequest
from ..network_logger import NetworkLogger, NetworkLogging, preview_body
from .stream import EventEmitter, TransferStream

logger = logging.getLogger(__name__)

ResponseT = TypeVar("ResponseT")
R = TypeVar("R")

BASE_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


def _progress_reporter(emit: EventEmitter) -> ProgressCallback:
    """Translate byte counts into Progress events, skipping unknown totals."""

    def report(transferred: int, expected: Optional[int]) -> None:
        if expected is None or expected <= 0:
            return
        emit(Progress(min(max(transferred / expected, 0.0), 1.0)))

    return report


def _relocate(source: Path, destination: Path) -> None:
    """Move a finished download into place, replacing any existing file."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    try:
        os.replace(source, destination)
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise
        # Temporary file lives on another filesystem: copy across instead
        if destination.exists() or destination.is_symlink():
            destination.unlink()
        shutil.move(str(source), str(destination))


class NetworkClient:
    """
    Executes typed Requests against an HTTP API.

    One client holds the immutable configuration, the encoder/decoder
    pair, the logger and a cache of transport sessions (one per session
    identifier). Construct it once and pass it to whoever needs it; it is
    safe to use from many concurrent tasks.

    Example:
        config = ClientConfiguration(base_url="https://api.example.com/v1")

        async with NetworkClient(config) as client:
            user = await client.execute(GetUser(user_id=1))

            async for event in client.download(GetAvatar(user_id=1), "avatar.png"):
                if isinstance(event, Progress):
                    print(f"{event.percent:.0f}%")
    """

    def __init__(
        self,
        configuration: ClientConfiguration,
        *,
        encoder: Optional[JSONEncoder] = None,
        decoder: Optional[JSONDecoder] = None,
        logger: Optional[NetworkLogging] = None,
        transport: Optional[Transport] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            configuration: Base URL, default headers and coding strategies
            encoder: Body/query encoder (default: built from configuration)
            decoder: Response decoder (default: built from configuration)
            logger: Request/response logger (default: NetworkLogger)
            transport: Session factory (default: AiohttpTransport)
        """
        self.configuration = configuration
        self.encoder = encoder or JSONEncoder(
            date_format=configuration.date_format,
            key_case=configuration.key_case,
        )
        self.decoder = decoder or JSONDecoder(
            date_format=configuration.date_format,
            key_case=configuration.key_case,
        )
        self.logger: NetworkLogging = logger or NetworkLogger()
        self.sessions = SessionCache(transport or AiohttpTransport())

    async def __aenter__(self) -> NetworkClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Close every transport session this client opened."""
        await self.sessions.close()

    # ---------------------------------------------------------------- building

    def _build_url(self, request: Request[Any]) -> str:
        base_url = request.base_url if request.base_url is not None else self.configuration.base_url
        raw_url = base_url + request.path

        query_items: list[tuple[str, str]] = []
        if request.query is not None and not isinstance(request.query, EmptyQuery):
            try:
                query_items = encode_query_items(request.query, self.encoder)
            except Exception as e:
                error = EncodingError(e)
                self.logger.log_error(error)
                raise error from e

        if any(c.isspace() for c in raw_url):
            raise InvalidURLError(raw_url)
        try:
            parts = urlsplit(raw_url)
            # Raises ValueError for a non-numeric or out-of-range port
            parts.port
        except ValueError as e:
            raise InvalidURLError(raw_url) from e
        if parts.scheme not in ("http", "https") or not parts.hostname:
            raise InvalidURLError(raw_url)

        if not query_items:
            return raw_url
        existing = parse_qsl(parts.query, keep_blank_values=True)
        return urlunsplit(parts._replace(query=urlencode(existing + query_items)))

    def build_request(self, request: Request[Any]) -> WireRequest:
        """
        Resolve a Request into a wire request. Performs no I/O.

        Header precedence, lowest first: built-in JSON headers, client
        default headers, request headers. Keys are compared exactly.

        Raises:
            EncodingError: If the query or body cannot be encoded
            InvalidURLError: If base URL and path do not form a valid URL
        """
        url = self._build_url(request)

        headers = dict(BASE_HEADERS)
        headers.update(self.configuration.default_headers)
        if request.headers:
            headers.update(request.headers)

        body: Optional[bytes] = None
        if request.body is not None and not isinstance(request.body, EmptyBody):
            try:
                body = self.encoder.encode(request.body)
            except Exception as e:
                error = EncodingError(e)
                self.logger.log_error(error)
                raise error from e

        return WireRequest(method=HTTPMethod(request.method).value, url=url, headers=headers, body=body)

    # --------------------------------------------------------------- execution

    async def _prepare(self, request: Request[Any]) -> tuple[WireRequest, TransportSession]:
        wire = self.build_request(request)
        session = await self.sessions.acquire(request.session)
        self.logger.log_request(wire.method, wire.url, wire.headers, wire.body)
        return wire, session

    async def _perform(self, wire: WireRequest, call: Awaitable[R]) -> R:
        """Await a transport call, classifying and logging its failures."""
        try:
            return await call
        except NetworkError as e:
            self.logger.log_error(e)
            raise
        except asyncio.CancelledError:
            self.logger.log_error(TransportError(asyncio.CancelledError(f"{wire.method} {wire.url} cancelled")))
            raise
        except Exception as e:
            error = TransportError(e)
            self.logger.log_error(error)
            raise error from e

    def _validate(self, wire: WireRequest, response: TransportResponse, body_size: Optional[int] = None) -> None:
        status_code = getattr(response, "status_code", None)
        if not isinstance(status_code, int) or isinstance(status_code, bool):
            error: NetworkError = InvalidResponseError()
            self.logger.log_error(error)
            raise error

        content = response.content or b""
        self.logger.log_response(
            status_code,
            response.url or wire.url,
            len(content) if body_size is None else body_size,
            preview_body(content, self.configuration.body_preview_limit),
        )

        status_error = classify_status(status_code, wire.url)
        if status_error is not None:
            self.logger.log_error(status_error)
            raise status_error

    def _decode(self, content: bytes, response_type: Any) -> Any:
        try:
            return self.decoder.decode(content, response_type)
        except Exception as e:
            error = DecodingError(e)
            self.logger.log_error(error)
            raise error from e

    async def execute(self, request: Request[ResponseT]) -> ResponseT:
        """
        Execute a request and decode its response.

        Args:
            request: The typed request descriptor

        Returns:
            The response decoded into the request's response type

        Raises:
            NetworkError: The classified failure (no retries are attempted)
        """
        wire, session = await self._prepare(request)
        response = await self._perform(wire, session.send(wire))
        self._validate(wire, response)
        return self._decode(response.content, request.response_type)

    def download(self, request: Request[Any], destination: Path | str) -> TransferStream[Path]:
        """
        Download a resource to `destination`, reporting progress.

        The body is streamed to a temporary file and moved into place only
        after a 2xx response has been fully received; an existing file at
        `destination` is replaced at that point. A failed or cancelled
        download leaves `destination` untouched and no temporary file.

        Returns:
            A TransferStream ending in Completed(destination)
        """
        destination = Path(destination)

        async def produce(emit: EventEmitter) -> Path:
            wire, session = await self._prepare(request)
            downloaded = await self._perform(wire, session.download(wire, _progress_reporter(emit)))
            try:
                self._validate(wire, downloaded.response, downloaded.size)
                _relocate(downloaded.location, destination)
            finally:
                downloaded.location.unlink(missing_ok=True)
            logger.debug(f"Saved download to {destination}")
            return destination

        return TransferStream(produce)

    def upload(self, request: Request[ResponseT], source: Path | str) -> TransferStream[ResponseT]:
        """
        Upload the file at `source` as the request body, reporting progress.

        Returns:
            A TransferStream ending in Completed(decoded response)
        """
        source = Path(source)

        async def produce(emit: EventEmitter) -> ResponseT:
            wire, session = await self._prepare(request)
            response = await self._perform(wire, session.upload(wire, source, _progress_reporter(emit)))
            self._validate(wire, response)
            return self._decode(response.content, request.response_type)

        return TransferStream(produce)
