"""Session providers: which transport session a request runs on."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .config import SessionConfiguration


class SessionProvider(ABC):
    """
    Produces a transport session configuration plus a stable identity.

    Two providers with the same identifier are interchangeable: they compare
    equal, hash alike and share one cached transport session.

    Example implementation:
        class LowPrioritySession(SessionProvider):
            identifier = "com.app.low-priority"

            def make_configuration(self) -> SessionConfiguration:
                return SessionConfiguration(max_connections=2, request_timeout=120)
    """

    @property
    @abstractmethod
    def identifier(self) -> str:
        """Key used for session reuse and equality."""
        ...

    @abstractmethod
    def make_configuration(self) -> SessionConfiguration:
        """Build the configuration for a new transport session."""
        ...

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SessionProvider):
            return NotImplemented
        return self.identifier == other.identifier

    def __hash__(self) -> int:
        return hash(self.identifier)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(identifier={self.identifier!r})"


class DefaultSession(SessionProvider):
    """Shared session with cookie persistence."""

    identifier = "com.netkit.default"

    def make_configuration(self) -> SessionConfiguration:
        return SessionConfiguration.default()


class EphemeralSession(SessionProvider):
    """Session that keeps no cookies between requests."""

    identifier = "com.netkit.ephemeral"

    def make_configuration(self) -> SessionConfiguration:
        return SessionConfiguration.ephemeral()


class BackgroundSession(SessionProvider):
    """Session for long-running transfers, keyed by a caller-supplied identifier."""

    def __init__(self, identifier: str) -> None:
        if not identifier:
            raise ValueError("BackgroundSession requires a non-empty identifier")
        self._identifier = identifier

    @property
    def identifier(self) -> str:
        return self._identifier

    def make_configuration(self) -> SessionConfiguration:
        return SessionConfiguration.background(self._identifier)


class CustomSession(SessionProvider):
    """Arbitrary identifier paired with a ready-made configuration."""

    def __init__(self, identifier: str, configuration: SessionConfiguration) -> None:
        if not identifier:
            raise ValueError("CustomSession requires a non-empty identifier")
        self._identifier = identifier
        self._configuration = configuration

    @property
    def identifier(self) -> str:
        return self._identifier

    def make_configuration(self) -> SessionConfiguration:
        return self._configuration


DEFAULT_SESSION = DefaultSession()
EPHEMERAL_SESSION = EphemeralSession()
