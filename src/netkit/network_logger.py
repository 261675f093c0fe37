"""Request/response logging for NetworkClient."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Optional, Protocol, runtime_checkable

from .errors import NetworkError


def preview_body(content: Optional[bytes], limit: int) -> str:
    """Decode up to `limit` bytes of a body for display."""
    if not content or limit <= 0:
        return ""
    text = content[:limit].decode("utf-8", errors="replace")
    if len(content) > limit:
        text += f"... ({len(content) - limit} more bytes)"
    return text


@runtime_checkable
class NetworkLogging(Protocol):
    """
    Receives notifications from NetworkClient.

    All methods are fire-and-forget: their return values are ignored
    and nothing the client decides depends on them.
    """

    def log_request(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: Optional[bytes],
    ) -> None:
        ...

    def log_response(self, status_code: int, url: str, body_size: int, body_preview: str) -> None:
        ...

    def log_error(self, error: NetworkError) -> None:
        ...


class NetworkLogger:
    """
    NetworkLogging implementation backed by the standard logging module.

    Request and response lines go out at INFO (ERROR for non-2xx);
    headers, sizes and bodies at DEBUG.

    Example:
        client = NetworkClient(config, logger=NetworkLogger(max_body_preview=256))
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        is_enabled: bool = True,
        max_body_preview: int = 1024,
    ) -> None:
        """
        Initialize the network logger.

        Args:
            logger: Logger to write to (default: "netkit.network")
            is_enabled: If False, every call is a no-op
            max_body_preview: Bytes of request body included in DEBUG output
        """
        self._logger = logger or logging.getLogger("netkit.network")
        self.is_enabled = is_enabled
        self.max_body_preview = max_body_preview

    def log_request(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: Optional[bytes],
    ) -> None:
        if not self.is_enabled:
            return

        self._logger.info(f"REQUEST {method} {url}")
        if headers:
            self._logger.debug(f"Headers: {dict(headers)}")
        if body:
            self._logger.debug(f"Body: {preview_body(body, self.max_body_preview)}")

    def log_response(self, status_code: int, url: str, body_size: int, body_preview: str) -> None:
        if not self.is_enabled:
            return

        level = logging.INFO if 200 <= status_code < 300 else logging.ERROR
        self._logger.log(level, f"RESPONSE {status_code} {url}")
        self._logger.debug(f"Data Size: {body_size} bytes")
        if body_preview:
            self._logger.debug(f"Body: {body_preview}")

    def log_error(self, error: NetworkError) -> None:
        if not self.is_enabled:
            return
        self._logger.error(f"Network Error: {error.description}")


class SilentNetworkLogger:
    """NetworkLogging implementation that discards everything."""

    def log_request(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: Optional[bytes],
    ) -> None:
        pass

    def log_response(self, status_code: int, url: str, body_size: int, body_preview: str) -> None:
        pass

    def log_error(self, error: NetworkError) -> None:
        pass
