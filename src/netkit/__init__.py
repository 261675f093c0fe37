"""
netkit - Typed HTTP requests for asyncio.

Every endpoint is a Request subclass that fixes its path, method, body,
query, headers, session and response type. A NetworkClient turns it into
an HTTP call, reuses transport sessions and decodes the response.

Usage:
    from dataclasses import dataclass

    from netkit import ClientConfiguration, HTTPMethod, NetworkClient, Request

    @dataclass(frozen=True)
    class GetUser(Request[User]):
        user_id: int
        method = HTTPMethod.GET

        @property
        def path(self) -> str:
            return f"/users/{self.user_id}"

    async with NetworkClient(ClientConfiguration(base_url="https://api.example.com")) as client:
        user = await GetUser(user_id=1).execute(client)
"""

__version__ = "1.0.0"

from .codec import JSONDecoder, JSONEncoder, encode_query_items
from .core.client import NetworkClient
from .core.stream import TransferStream
from .errors import (
    ClientError,
    DecodingError,
    EncodingError,
    ForbiddenError,
    HTTPStatusError,
    InvalidResponseError,
    InvalidURLError,
    NetworkError,
    NotFoundError,
    ServerError,
    TransportError,
    UnauthorizedError,
    UnknownNetworkError,
    classify_status,
    raise_for_status,
)
from .http import AiohttpTransport, SessionCache, Transport, TransportResponse, TransportSession
from .logging_config import setup_logging
from .models import (
    BackgroundSession,
    ClientConfiguration,
    Completed,
    CustomSession,
    DateFormat,
    DefaultSession,
    EmptyBody,
    EmptyQuery,
    EphemeralSession,
    HTTPMethod,
    KeyCase,
    Progress,
    ProgressEvent,
    Request,
    SessionConfiguration,
    SessionKind,
    SessionProvider,
    WireRequest,
)
from .network_logger import NetworkLogger, NetworkLogging, SilentNetworkLogger

__all__ = [
    "__version__",
    # Core
    "NetworkClient",
    "TransferStream",
    # Requests
    "EmptyBody",
    "EmptyQuery",
    "HTTPMethod",
    "Request",
    "WireRequest",
    # Sessions
    "BackgroundSession",
    "CustomSession",
    "DefaultSession",
    "EphemeralSession",
    "SessionCache",
    "SessionProvider",
    # Config
    "ClientConfiguration",
    "DateFormat",
    "KeyCase",
    "SessionConfiguration",
    "SessionKind",
    # Progress
    "Completed",
    "Progress",
    "ProgressEvent",
    # Coding
    "JSONDecoder",
    "JSONEncoder",
    "encode_query_items",
    # Transport
    "AiohttpTransport",
    "Transport",
    "TransportResponse",
    "TransportSession",
    # Errors
    "ClientError",
    "DecodingError",
    "EncodingError",
    "ForbiddenError",
    "HTTPStatusError",
    "InvalidResponseError",
    "InvalidURLError",
    "NetworkError",
    "NotFoundError",
    "ServerError",
    "TransportError",
    "UnauthorizedError",
    "UnknownNetworkError",
    "classify_status",
    "raise_for_status",
    # Logging
    "NetworkLogger",
    "NetworkLogging",
    "SilentNetworkLogger",
    "setup_logging",
]
