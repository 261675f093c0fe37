"""Lazy, single-pass async sequence of transfer progress events."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from dataclasses import dataclass
from types import TracebackType
from typing import Any, Callable, Generic, Optional, TypeVar, Union

from ..models.progress import Completed, Progress

T = TypeVar("T")

# Receives Progress events from the running transfer
EventEmitter = Callable[[Progress], None]
Producer = Callable[[EventEmitter], Awaitable[T]]


@dataclass(frozen=True)
class _Failure:
    error: BaseException


async def _produce(producer: Producer[Any], queue: asyncio.Queue) -> None:
    # Must not reference the stream: __del__ cancels this task
    try:
        value = await producer(queue.put_nowait)
    except asyncio.CancelledError:
        raise
    except Exception as e:
        queue.put_nowait(_Failure(e))
    else:
        queue.put_nowait(Completed(value))


class TransferStream(Generic[T]):
    """
    Async iterator over the events of one upload or download.

    Yields zero or more Progress events followed by exactly one
    Completed event, or raises the transfer's error instead of
    yielding Completed. The transfer starts on the first iteration and
    runs as its own task; closing the stream (aclose(), leaving an
    `async with` block, or cancelling the consumer) cancels it.

    The stream is single-pass: once finished it stays finished. Issue
    a new download()/upload() call to transfer again.

    Example:
        async with client.download(GetFile(), "out.bin") as events:
            async for event in events:
                if isinstance(event, Progress):
                    print(f"{event.percent:.0f}%")
                else:
                    print(f"Saved: {event.value}")
    """

    def __init__(self, producer: Producer[T]) -> None:
        self._producer = producer
        self._queue: asyncio.Queue[Union[Progress, Completed[T], _Failure]] = asyncio.Queue()
        self._task: Optional[asyncio.Task[None]] = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> TransferStream[T]:
        return self

    async def __anext__(self) -> Union[Progress, Completed[T]]:
        if self._closed:
            raise StopAsyncIteration
        if self._task is None:
            self._task = asyncio.create_task(_produce(self._producer, self._queue))

        try:
            item = await self._queue.get()
        except asyncio.CancelledError:
            await self.aclose()
            raise

        if isinstance(item, _Failure):
            self._closed = True
            raise item.error
        if isinstance(item, Completed):
            self._closed = True
        return item

    async def aclose(self) -> None:
        """Stop the stream and cancel the transfer if it is still running."""
        self._closed = True
        task = self._task
        if task is not None and not task.done():
            task.cancel()
            # wait() does not re-raise the task's CancelledError
            await asyncio.wait([task])

    async def __aenter__(self) -> TransferStream[T]:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    def __del__(self) -> None:
        task = self._task
        if task is not None and not task.done() and not task.get_loop().is_closed():
            task.cancel()
