"""
Hunter EventBus: async in-process publish/subscribe.

Purpose
-------
Decouple the progression engine from anything that reacts to its results
(notifications, analytics, achievement checks). Services publish events only
after their transaction has committed, so listeners never observe state that
may still roll back.

Responsibilities
----------------
- Register/unregister listeners with priorities
- Publish events to every matching listener (exact name + ``prefix.*``)
- Run listeners in priority order (lower value first), sync or async
- Isolate listener failures: one failing listener never blocks the others

Design Decisions
----------------
- **Instance-based**: tests create their own bus.
- **Sequential execution**: listeners run one after another in priority
  order so their side effects are deterministic.
- **Wildcards**: ``"progression.*"`` matches every event whose name starts
  with ``"progression."``.

Examples
--------
>>> bus = EventBus()
>>> bus.subscribe("progression.level_up", on_level_up, priority=ListenerPriority.HIGH)
>>> await bus.publish("progression.level_up", {"user_id": 7, "new_level": 3})
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from hunter.core.logging.logger import get_logger

logger = get_logger(__name__)

EventPayload = Dict[str, Any]

CallbackType = Union[
    Callable[[EventPayload], Any],
    Callable[[EventPayload], Awaitable[Any]],
]


class ListenerPriority(Enum):
    """Execution order for listeners; lower values run first."""

    CRITICAL = 0
    HIGH = 10
    NORMAL = 50
    LOW = 100


@dataclass(frozen=True)
class EventListener:
    callback: CallbackType
    priority: ListenerPriority
    identifier: str
    once: bool = False

    @classmethod
    def from_callback(
        cls,
        event_name: str,
        callback: CallbackType,
        priority: ListenerPriority,
        identifier: Optional[str],
        once: bool,
    ) -> "EventListener":
        if identifier is None:
            module = getattr(callback, "__module__", "unknown")
            name = getattr(callback, "__qualname__", None) or repr(callback)
            identifier = f"{module}.{name}@{event_name}"
        return cls(callback=callback, priority=priority, identifier=identifier, once=once)


@dataclass
class EventBusMetrics:
    events_published: Dict[str, int] = field(default_factory=dict)
    listener_errors: Dict[str, int] = field(default_factory=dict)

    def record_publish(self, event_name: str) -> None:
        self.events_published[event_name] = self.events_published.get(event_name, 0) + 1

    def record_error(self, event_name: str) -> None:
        self.listener_errors[event_name] = self.listener_errors.get(event_name, 0) + 1


class EventBus:
    """
    Async pub/sub with priority-ordered, error-isolated listeners.

    Designed for single-threaded asyncio usage; all methods must be called
    from the same event loop.
    """

    def __init__(self) -> None:
        self._listeners: Dict[str, List[EventListener]] = {}
        self._metrics = EventBusMetrics()

    # ------------------------------------------------------------------ #
    # Subscription API
    # ------------------------------------------------------------------ #

    @staticmethod
    def _validate_callback_signature(callback: CallbackType) -> None:
        """Reject callbacks that cannot take exactly one payload argument."""
        try:
            sig = inspect.signature(callback)
        except (TypeError, ValueError):
            return

        params = list(sig.parameters.values())
        if len(params) != 1:
            callback_name = getattr(callback, "__qualname__", repr(callback))
            raise ValueError(
                f"Event listener must accept exactly 1 parameter (EventPayload), "
                f"got {len(params)} parameters for '{callback_name}'"
            )

    def subscribe(
        self,
        event_name: str,
        callback: CallbackType,
        *,
        priority: ListenerPriority = ListenerPriority.NORMAL,
        identifier: Optional[str] = None,
        once: bool = False,
    ) -> str:
        """
        Subscribe a callback to an event name or ``prefix.*`` pattern.

        Returns
        -------
        str
            The listener identifier, for ``unsubscribe``.

        Raises
        ------
        ValueError
            If the callback does not take exactly one parameter, or a listener
            with the same identifier is already registered for ``event_name``.
        """
        self._validate_callback_signature(callback)

        listener = EventListener.from_callback(
            event_name=event_name,
            callback=callback,
            priority=priority,
            identifier=identifier,
            once=once,
        )

        bucket = self._listeners.setdefault(event_name, [])
        if any(existing.identifier == listener.identifier for existing in bucket):
            raise ValueError(
                f"Listener '{listener.identifier}' already subscribed to '{event_name}'"
            )

        bucket.append(listener)
        bucket.sort(key=lambda item: item.priority.value)

        logger.debug(
            "EventBus: subscribed listener",
            extra={
                "event_name": event_name,
                "listener_id": listener.identifier,
                "priority": listener.priority.name,
                "once": once,
            },
        )
        return listener.identifier

    def unsubscribe(self, event_name: str, identifier: str) -> bool:
        bucket = self._listeners.get(event_name, [])
        remaining = [item for item in bucket if item.identifier != identifier]
        removed = len(remaining) != len(bucket)

        if remaining:
            self._listeners[event_name] = remaining
        else:
            self._listeners.pop(event_name, None)

        if removed:
            logger.debug(
                "EventBus: unsubscribed listener",
                extra={"event_name": event_name, "listener_id": identifier},
            )
        return removed

    def clear(self) -> None:
        total = self.get_listener_count()
        self._listeners.clear()
        logger.info(
            "EventBus: cleared all listeners",
            extra={"previous_listener_count": total},
        )

    # ------------------------------------------------------------------ #
    # Publish API
    # ------------------------------------------------------------------ #

    @staticmethod
    def _matches(pattern: str, event_name: str) -> bool:
        if pattern == event_name:
            return True
        if pattern.endswith(".*"):
            return event_name.startswith(pattern[:-1])
        return pattern == "*"

    def _collect(self, event_name: str) -> List[EventListener]:
        matched: List[EventListener] = []
        for pattern, bucket in list(self._listeners.items()):
            if not self._matches(pattern, event_name):
                continue
            matched.extend(bucket)
            # One-shot listeners are removed before they run
            for listener in bucket:
                if listener.once:
                    self.unsubscribe(pattern, listener.identifier)

        matched.sort(key=lambda item: item.priority.value)
        return matched

    async def publish(self, event_name: str, data: EventPayload) -> List[Any]:
        """
        Deliver ``data`` to every matching listener in priority order.

        Returns
        -------
        list[Any]
            Results of listeners that completed without raising.
        """
        self._metrics.record_publish(event_name)

        listeners = self._collect(event_name)
        if not listeners:
            logger.debug("EventBus: no listeners for event", extra={"event_name": event_name})
            return []

        results: List[Any] = []
        for listener in listeners:
            try:
                result = listener.callback(data)
                if inspect.isawaitable(result):
                    result = await result
                results.append(result)
            except Exception as exc:
                self._metrics.record_error(event_name)
                logger.error(
                    "EventBus: listener failed",
                    extra={
                        "event_name": event_name,
                        "listener_id": listener.identifier,
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                    },
                    exc_info=True,
                )

        return results

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    def get_listener_count(self, event_name: Optional[str] = None) -> int:
        if event_name is None:
            return sum(len(bucket) for bucket in self._listeners.values())
        return sum(
            len(bucket)
            for pattern, bucket in self._listeners.items()
            if self._matches(pattern, event_name)
        )

    def get_metrics_summary(self) -> Dict[str, Any]:
        return {
            "total_events_published": sum(self._metrics.events_published.values()),
            "events_by_type": dict(self._metrics.events_published),
            "total_errors": sum(self._metrics.listener_errors.values()),
            "errors_by_event": dict(self._metrics.listener_errors),
            "total_listeners": self.get_listener_count(),
        }
