"""Process-wide publish/subscribe channel for activity records.

Lifecycle: create one channel at startup, register subscribers before the
first operation runs, pass the channel into every resource handler. No
teardown is needed mid-process; call :meth:`EventChannel.drain` at
shutdown to let in-flight deliveries finish.
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, List, Set, Tuple, Union

from .events import ActivityRecord

logger = logging.getLogger(__name__)

Subscriber = Callable[[str, ActivityRecord], Union[None, Awaitable[None]]]


class EventChannel:
    """Fire-and-forget broadcast of ``(type, record)`` to subscribers.

    Emission never waits on subscribers. Inside a running event loop each
    delivery is scheduled as its own task; outside one, deliveries run
    inline. A failing subscriber is logged and never affects the emitter
    or the other subscribers.
    """

    def __init__(self, name: str = "activity"):
        self.name = name
        self._subscribers: List[Subscriber] = []
        self._pending: Set[asyncio.Task] = set()

    @property
    def subscribers(self) -> Tuple[Subscriber, ...]:
        return tuple(self._subscribers)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a sync or async subscriber. Returns an unsubscribe function."""
        self._subscribers.append(callback)
        return lambda: self.unsubscribe(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def emit(self, event_type: Any, record: ActivityRecord) -> None:
        """Publish ``record`` to every subscriber without awaiting them."""
        event_type = getattr(event_type, "value", event_type)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        for callback in tuple(self._subscribers):
            if loop is None:
                self._deliver_inline(callback, event_type, record)
                continue
            task = loop.create_task(self._deliver(callback, event_type, record))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait until every scheduled delivery has finished."""
        while self._pending:
            await asyncio.gather(*tuple(self._pending), return_exceptions=True)

    async def _deliver(self, callback: Subscriber, event_type: str, record: ActivityRecord) -> None:
        try:
            result = callback(event_type, record)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception(f"Subscriber {_name(callback)} failed on {self.name} {event_type} event")

    def _deliver_inline(self, callback: Subscriber, event_type: str, record: ActivityRecord) -> None:
        try:
            result = callback(event_type, record)
            if inspect.isawaitable(result):
                asyncio.run(_await(result))
        except Exception:
            logger.exception(f"Subscriber {_name(callback)} failed on {self.name} {event_type} event")


async def _await(awaitable: Awaitable) -> Any:
    return await awaitable


def _name(callback: Any) -> str:
    return getattr(callback, "__qualname__", None) or type(callback).__name__
