"""Lazily created transport sessions, one per session-provider identifier."""

from __future__ import annotations

import asyncio
import logging

from ..models.sessions import SessionProvider
from .protocols import Transport, TransportSession

logger = logging.getLogger(__name__)


class SessionCache:
    """
    Maps session-provider identifiers to live transport sessions.

    Sessions are created on first use and live until invalidated or
    the cache is closed. Creation is serialized by a single lock, so
    concurrent callers never create two sessions for one identifier;
    lookups of existing sessions do not take the lock.

    Example:
        cache = SessionCache(AiohttpTransport())

        session = await cache.acquire(DefaultSession())
        same = await cache.acquire(DefaultSession())
        assert session is same
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport
        self._sessions: dict[str, TransportSession] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, provider: object) -> bool:
        return isinstance(provider, SessionProvider) and provider.identifier in self._sessions

    async def acquire(self, provider: SessionProvider) -> TransportSession:
        """
        Get the session for `provider`, creating it if needed.

        Args:
            provider: Session provider whose identifier keys the cache

        Returns:
            The one session associated with the provider's identifier
        """
        session = self._sessions.get(provider.identifier)
        if session is not None:
            return session

        async with self._lock:
            # Another caller may have created it while we waited
            session = self._sessions.get(provider.identifier)
            if session is None:
                session = self._transport.open_session(provider.make_configuration())
                self._sessions[provider.identifier] = session
                logger.debug(f"Created transport session for {provider.identifier}")
            return session

    async def invalidate(self, provider: SessionProvider) -> bool:
        """
        Close and forget the session for `provider`.

        The next acquire() for the same identifier creates a fresh session.

        Returns:
            True if a session was removed
        """
        async with self._lock:
            session = self._sessions.pop(provider.identifier, None)
        if session is None:
            return False
        await session.close()
        logger.debug(f"Invalidated transport session for {provider.identifier}")
        return True

    async def close(self) -> None:
        """Close every cached session."""
        async with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            await session.close()

    def get_stats(self) -> dict:
        """Get session cache statistics."""
        return {"sessions": len(self._sessions), "identifiers": sorted(self._sessions)}
