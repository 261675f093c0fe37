"""Typed request descriptors and the wire request they resolve to."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar, Generic, Optional, TypeVar, get_args, get_origin

from .sessions import DEFAULT_SESSION, SessionProvider

if TYPE_CHECKING:
    from ..core.client import NetworkClient
    from ..core.stream import TransferStream

ResponseT = TypeVar("ResponseT")


class HTTPMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class EmptyBody:
    """Marker body: present but empty, never serialized."""

    def __eq__(self, other: object) -> bool:
        return isinstance(other, EmptyBody)

    def __hash__(self) -> int:
        return hash(EmptyBody)

    def __repr__(self) -> str:
        return "EmptyBody()"


class EmptyQuery:
    """Marker query: present but empty, adds nothing to the URL."""

    def __eq__(self, other: object) -> bool:
        return isinstance(other, EmptyQuery)

    def __hash__(self) -> int:
        return hash(EmptyQuery)

    def __repr__(self) -> str:
        return "EmptyQuery()"


class Request(ABC, Generic[ResponseT]):
    """
    Declarative description of one endpoint call.

    Subclasses fix the path, method and response type; everything else
    has a default. The response type is taken from the generic parameter
    unless `response_type` is set explicitly:

    - a pydantic model, dataclass or typing construct: decoded from JSON
    - `bytes`: the raw response body
    - `None`: no content, decoding is skipped

    Example:
        @dataclass(frozen=True)
        class GetUser(Request[User]):
            user_id: int
            method = HTTPMethod.GET

            @property
            def path(self) -> str:
                return f"/users/{self.user_id}"

        user = await GetUser(user_id=1).execute(client)
    """

    response_type: ClassVar[Any] = Any

    body: Any = None
    query: Any = None
    headers: Optional[Mapping[str, str]] = None
    base_url: Optional[str] = None
    session: SessionProvider = DEFAULT_SESSION

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "response_type" in cls.__dict__:
            return
        for base in cls.__dict__.get("__orig_bases__", ()):
            origin = get_origin(base)
            if isinstance(origin, type) and issubclass(origin, Request):
                args = get_args(base)
                if args and not isinstance(args[0], TypeVar):
                    cls.response_type = args[0]
                return

    @property
    @abstractmethod
    def path(self) -> str:
        """Path appended to the base URL."""
        ...

    @property
    @abstractmethod
    def method(self) -> HTTPMethod:
        ...

    async def execute(self, client: NetworkClient) -> ResponseT:
        """Run this request on `client` and return the decoded response."""
        return await client.execute(self)

    def download(self, client: NetworkClient, destination: Path | str) -> TransferStream[Path]:
        """Stream a download of this request's resource to `destination`."""
        return client.download(self, destination)

    def upload(self, client: NetworkClient, source: Path | str) -> TransferStream[ResponseT]:
        """Stream an upload of the file at `source` with this request."""
        return client.upload(self, source)


@dataclass(frozen=True)
class WireRequest:
    """
    Fully resolved request ready for the transport.

    Attributes:
        method: HTTP method name
        url: Absolute URL including the encoded query string
        headers: Final merged headers
        body: Encoded payload, or None when there is none
    """

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
