"""Transport layer and session cache for netkit."""

from .protocols import DownloadedFile, ProgressCallback, Transport, TransportResponse, TransportSession
from .session_cache import SessionCache
from .transport import AiohttpSession, AiohttpTransport

__all__ = [
    "AiohttpSession",
    "AiohttpTransport",
    "DownloadedFile",
    "ProgressCallback",
    "SessionCache",
    "Transport",
    "TransportResponse",
    "TransportSession",
]
