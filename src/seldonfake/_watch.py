"""Watch streams delivered by the fake."""

from __future__ import annotations

import asyncio
import threading
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from types import TracebackType
from typing import Any, Self

import structlog
from structlog.stdlib import BoundLogger

from ._config import WatchOverflowPolicy

__all__ = [
    "EventType",
    "FakeWatcher",
    "WatchEvent",
]


class EventType(StrEnum):
    """Type of a watch event."""

    added = "ADDED"
    modified = "MODIFIED"
    deleted = "DELETED"
    bookmark = "BOOKMARK"
    error = "ERROR"


@dataclass(frozen=True)
class WatchEvent:
    """One event delivered to a watcher."""

    type: EventType
    """What happened to the object."""

    object: Any
    """The object after the change, or the last state of a deleted object."""


class FakeWatcher:
    """A watch stream fed by the object tracker or by hand.

    Consume it with ``async for``. Iteration suspends until the next event
    arrives and ends once the watcher is stopped. Stopping discards any
    undelivered events, so nothing is delivered after `stop` returns.

    Events are held in a bounded buffer so that producers never wait for
    consumers. When the buffer is full, the overflow policy decides whether
    the oldest event is dropped or the watcher is stopped.

    Events may be pushed from any thread. If a consumer is waiting on an
    event loop in another thread, it is woken through that loop.

    Parameters
    ----------
    buffer_size
        Maximum number of undelivered events.
    overflow
        What to do when the buffer is full.
    on_stop
        Called once, with the watcher, when it is stopped. The tracker uses
        this to unregister the watcher.
    logger
        Logger to use. The ``seldonfake`` logger is used if none is given.
    """

    def __init__(
        self,
        *,
        buffer_size: int = 100,
        overflow: WatchOverflowPolicy = WatchOverflowPolicy.drop_oldest,
        on_stop: Callable[[FakeWatcher], None] | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self._buffer_size = buffer_size
        self._overflow = overflow
        self._on_stop = on_stop
        self._logger = logger or structlog.get_logger("seldonfake")
        self._buffer: deque[WatchEvent] = deque()
        self._lock = threading.Lock()
        self._trigger = asyncio.Event()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._stopped = False

    @property
    def stopped(self) -> bool:
        """Whether `stop` has been called."""
        return self._stopped

    def __aiter__(self) -> Self:
        return self

    async def __anext__(self) -> WatchEvent:
        self._loop = asyncio.get_running_loop()
        while True:
            with self._lock:
                if self._stopped:
                    raise StopAsyncIteration
                if self._buffer:
                    return self._buffer.popleft()
                self._trigger.clear()
            await self._trigger.wait()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.stop()

    def action(self, event_type: EventType, obj: Any) -> None:
        """Push an event of any type.

        Parameters
        ----------
        event_type
            Type of the event.
        obj
            Object carried by the event.
        """
        overflowed = False
        with self._lock:
            if self._stopped:
                return
            if len(self._buffer) >= self._buffer_size:
                if self._overflow == WatchOverflowPolicy.unsubscribe:
                    overflowed = True
                else:
                    dropped = self._buffer.popleft()
                    self._logger.warning(
                        "Watch buffer full, dropped oldest event",
                        event_type=dropped.type.value,
                        buffer_size=self._buffer_size,
                    )
            if not overflowed:
                self._buffer.append(WatchEvent(type=event_type, object=obj))
        if overflowed:
            self._logger.warning(
                "Watch buffer full, stopping watcher",
                buffer_size=self._buffer_size,
            )
            self.stop()
        else:
            self._wake()

    def add(self, obj: Any) -> None:
        """Push an ``ADDED`` event."""
        self.action(EventType.added, obj)

    def modify(self, obj: Any) -> None:
        """Push a ``MODIFIED`` event."""
        self.action(EventType.modified, obj)

    def delete(self, obj: Any) -> None:
        """Push a ``DELETED`` event."""
        self.action(EventType.deleted, obj)

    def error(self, obj: Any) -> None:
        """Push an ``ERROR`` event."""
        self.action(EventType.error, obj)

    def stop(self) -> None:
        """Stop the watcher.

        Undelivered events are discarded, consumers waiting for an event see
        the end of iteration, and the watcher is unregistered from whatever
        fed it. Calling this more than once has no further effect.
        """
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            self._buffer.clear()
        if self._on_stop:
            self._on_stop(self)
        self._logger.debug("Stopped watcher")
        self._wake()

    def _wake(self) -> None:
        """Wake up a consumer waiting for an event, possibly cross-thread."""
        loop = self._loop
        if loop is None or loop.is_closed():
            self._trigger.set()
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            self._trigger.set()
        else:
            loop.call_soon_threadsafe(self._trigger.set)
