"""Netkit request, session, progress and configuration models."""

from .config import (
    ClientConfiguration,
    DateFormat,
    KeyCase,
    SessionConfiguration,
    SessionKind,
)
from .progress import Completed, Progress, ProgressEvent
from .request import EmptyBody, EmptyQuery, HTTPMethod, Request, WireRequest
from .sessions import (
    DEFAULT_SESSION,
    EPHEMERAL_SESSION,
    BackgroundSession,
    CustomSession,
    DefaultSession,
    EphemeralSession,
    SessionProvider,
)

__all__ = [
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
    # Requests
    "EmptyBody",
    "EmptyQuery",
    "HTTPMethod",
    "Request",
    "WireRequest",
    # Sessions
    "DEFAULT_SESSION",
    "EPHEMERAL_SESSION",
    "BackgroundSession",
    "CustomSession",
    "DefaultSession",
    "EphemeralSession",
    "SessionProvider",
]
