"""
beacon_os/engine/event_bus.py

In-process event bus - asyncio publish/subscribe.
Decouples the business modules; handler failures are isolated per handler.
"""
from typing import Any, Awaitable, Callable, Deque, Dict, List, Optional, Tuple, Union
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from collections import deque
import asyncio
import inspect
import logging
import uuid

from beacon_os.errors import EventTimeoutError, HandlerExecutionError, ValidationError
from beacon_os.models.events import EventType, BaseEventPayload, payload_class_for

logger = logging.getLogger(__name__)

# Type aliases
EventId = str
CorrelationId = str


def _generate_event_id() -> EventId:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Event:
    """
    Domain event. Immutable once emitted.

    Attributes:
        event_type: Event type (e.g. "reservation.created")
        payload: Typed payload matching the event type
        timestamp: Emission time
        source: Emitting module
        event_id: Unique event ID
        correlation_id: Parent event ID (event chain tracing)
    """

    event_type: EventType
    payload: BaseEventPayload
    timestamp: datetime = field(default_factory=_utcnow)
    source: str = ""
    event_id: EventId = field(default_factory=_generate_event_id)
    correlation_id: Optional[CorrelationId] = None

    def with_correlation(self, parent_id: EventId) -> "Event":
        """
        Copy of this event linked to a parent event.

        Args:
            parent_id: Parent event ID

        Returns:
            New event with correlation_id set to parent_id
        """
        return replace(self, correlation_id=parent_id)


def make_event(
    event_type: EventType,
    payload: BaseEventPayload,
    source: str = "",
    correlation_id: Optional[CorrelationId] = None,
) -> Event:
    """
    Build an event, checking the payload shape against the event type.

    Raises:
        ValidationError: payload class does not match the event type
    """
    event_type = EventType(event_type)
    expected = payload_class_for(event_type)
    if not isinstance(payload, expected):
        raise ValidationError(
            f"{event_type.value} expects {expected.__name__}, got {type(payload).__name__}"
        )
    return Event(
        event_type=event_type,
        payload=payload,
        source=source,
        correlation_id=correlation_id,
    )


EventHandler = Callable[[Event], Union[None, Awaitable[None]]]
Unsubscribe = Callable[[], None]


class _Subscription:
    """One registration; the same callable registered twice gives two of these."""

    __slots__ = ("handler", "event_type")

    def __init__(self, handler: EventHandler, event_type: Optional[EventType]):
        self.handler = handler
        self.event_type = event_type

    @property
    def name(self) -> str:
        return getattr(self.handler, "__name__", repr(self.handler))


@dataclass
class PublishResult:
    """
    Outcome of one emission.

    Attributes:
        event_type: Event type
        subscriber_count: Handlers invoked (type-specific + wildcard)
        success_count: Handlers that completed
        failure_count: Handlers that raised
        errors: HandlerExecutionError per failed handler
    """

    event_type: str
    subscriber_count: int
    success_count: int = 0
    failure_count: int = 0
    errors: List[HandlerExecutionError] = field(default_factory=list)


@dataclass
class EventBusStatistics:
    """
    Event bus statistics.

    Attributes:
        total_published: Events emitted
        total_processed: Handler invocations that completed
        total_failed: Handler invocations that raised
        subscriber_count: Type-specific subscribers per event type
        wildcard_count: Wildcard subscribers
    """

    total_published: int = 0
    total_processed: int = 0
    total_failed: int = 0
    subscriber_count: Dict[str, int] = field(default_factory=dict)
    wildcard_count: int = 0


class EventBus:
    """
    In-process event bus.

    Features:
    - Type-specific and wildcard subscriptions, each with a disposer
    - once() and wait_for() helpers
    - Concurrent dispatch of async handlers, joined without propagating failures
    - Re-entrant emit (a handler may emit)
    - Bounded event history and statistics for debugging

    Example:
        >>> bus = EventBus()
        >>> async def handler(event):
        ...     print(event.payload)
        >>> unsubscribe = bus.on(EventType.RESERVATION_CREATED, handler)
        >>> await bus.emit(EventType.RESERVATION_CREATED, event)
        >>> unsubscribe()
    """

    def __init__(self, history_size: int = 100):
        """
        Args:
            history_size: Maximum number of events kept in history
        """
        self._handlers: Dict[EventType, List[_Subscription]] = {}
        self._all_handlers: List[_Subscription] = []
        self._event_history: Deque[Event] = deque(maxlen=history_size)
        self._stats = EventBusStatistics()
        logger.info("EventBus initialized")

    # ==================== Subscription ====================

    def on(self, event_type: EventType, handler: EventHandler) -> Unsubscribe:
        """
        Subscribe to one event type.

        Args:
            event_type: Event type
            handler: Callable receiving the Event; may be sync or async

        Returns:
            Idempotent unsubscribe function
        """
        event_type = EventType(event_type)
        subscription = _Subscription(handler, event_type)
        self._handlers.setdefault(event_type, []).append(subscription)
        logger.debug(f"Handler {subscription.name} subscribed to {event_type.value}")
        return lambda: self._remove(subscription)

    def on_all(self, handler: EventHandler) -> Unsubscribe:
        """
        Subscribe to every event.

        Args:
            handler: Callable receiving the Event

        Returns:
            Idempotent unsubscribe function
        """
        subscription = _Subscription(handler, None)
        self._all_handlers.append(subscription)
        logger.debug(f"Handler {subscription.name} subscribed to all events")
        return lambda: self._remove(subscription)

    def once(self, event_type: EventType, handler: EventHandler) -> Unsubscribe:
        """
        Subscribe for a single delivery.

        The subscription is removed before the handler runs, so it is gone
        even when the handler raises.
        """
        unsubscribe: Optional[Unsubscribe] = None

        def once_wrapper(event: Event):
            unsubscribe()
            return handler(event)

        once_wrapper.__name__ = f"once({getattr(handler, '__name__', 'handler')})"
        unsubscribe = self.on(event_type, once_wrapper)
        return unsubscribe

    def _remove(self, subscription: _Subscription) -> None:
        if subscription.event_type is None:
            bucket = self._all_handlers
        else:
            bucket = self._handlers.get(subscription.event_type, [])
        # identity check: equal callables registered twice are distinct subscriptions
        for index, existing in enumerate(bucket):
            if existing is subscription:
                del bucket[index]
                logger.debug(f"Handler {subscription.name} unsubscribed")
                return

    # ==================== Emission ====================

    async def emit(self, event_type: EventType, event: Event) -> PublishResult:
        """
        Deliver an event to every matching handler.

        Type-specific handlers are started first, then wildcard handlers.
        Async handlers run concurrently and are all awaited; a failing
        handler is logged and counted, never raised to the caller.

        Args:
            event_type: Event type used for routing
            event: The event

        Returns:
            PublishResult with per-handler outcome counts
        """
        event_type = EventType(event_type)
        self._event_history.append(event)
        self._stats.total_published += 1

        # Snapshot so handlers may (un)subscribe during dispatch
        subscriptions = list(self._handlers.get(event_type, [])) + list(self._all_handlers)

        result = PublishResult(
            event_type=event_type.value,
            subscriber_count=len(subscriptions),
        )

        if subscriptions:
            logger.info(f"Publishing {event_type.value} to {len(subscriptions)} handlers")

        pending: List[Tuple[_Subscription, "asyncio.Future[Any]"]] = []

        for subscription in subscriptions:
            try:
                outcome = subscription.handler(event)
            except Exception as e:
                self._record_failure(result, event_type, subscription, e)
                continue

            if inspect.isawaitable(outcome):
                pending.append((subscription, asyncio.ensure_future(outcome)))
            else:
                self._record_success(result)

        if pending:
            # Only cancellation of the emitting task escapes gather(); a handler
            # ending in CancelledError comes back as an outcome like any error.
            outcomes = await asyncio.gather(*(f for _, f in pending), return_exceptions=True)
            for (subscription, _), outcome in zip(pending, outcomes):
                if isinstance(outcome, BaseException):
                    self._record_failure(result, event_type, subscription, outcome)
                else:
                    self._record_success(result)

        return result

    def _record_success(self, result: PublishResult) -> None:
        result.success_count += 1
        self._stats.total_processed += 1

    def _record_failure(
        self,
        result: PublishResult,
        event_type: EventType,
        subscription: _Subscription,
        error: BaseException,
    ) -> None:
        wrapped = HandlerExecutionError(event_type.value, subscription.name, error)
        result.failure_count += 1
        result.errors.append(wrapped)
        self._stats.total_failed += 1
        logger.error(
            f"Event handler {subscription.name} error for {event_type.value}: {error}",
            exc_info=(type(error), error, error.__traceback__),
        )

    async def wait_for(
        self,
        event_type: EventType,
        predicate: Optional[Callable[[Event], bool]] = None,
        timeout: float = 30.0,
    ) -> Event:
        """
        Wait for the first event of a type matching a predicate.

        Args:
            event_type: Event type to wait for
            predicate: Optional filter; defaults to accepting any event
            timeout: Seconds before giving up

        Returns:
            The matching event

        Raises:
            EventTimeoutError: No matching event arrived in time
        """
        loop = asyncio.get_running_loop()
        future: "asyncio.Future[Event]" = loop.create_future()

        def waiter(event: Event) -> None:
            if future.done():
                return
            if predicate is None or predicate(event):
                future.set_result(event)

        waiter.__name__ = f"wait_for({EventType(event_type).value})"
        unsubscribe = self.on(event_type, waiter)
        try:
            return await asyncio.wait_for(future, timeout)
        except asyncio.TimeoutError:
            raise EventTimeoutError(EventType(event_type).value, timeout) from None
        finally:
            unsubscribe()

    # ==================== Introspection ====================

    def listener_count(self, event_type: EventType) -> int:
        """Handlers that would receive an event of this type (type-specific + wildcard)"""
        return len(self._handlers.get(EventType(event_type), [])) + len(self._all_handlers)

    def remove_all_listeners(self, event_type: Optional[EventType] = None) -> None:
        """
        Remove handlers.

        Args:
            event_type: Only drop this type's handlers; None drops everything
                including wildcard handlers
        """
        if event_type is not None:
            self._handlers.pop(EventType(event_type), None)
        else:
            self._handlers.clear()
            self._all_handlers.clear()
            logger.info("All subscribers cleared")

    def get_history(self, event_type: Optional[EventType] = None, limit: int = 50) -> List[Event]:
        """
        Recent events, newest first (debugging aid).

        Args:
            event_type: Optional filter
            limit: Maximum number of events returned
        """
        history = list(self._event_history)
        if event_type is not None:
            history = [e for e in history if e.event_type == EventType(event_type)]
        return list(reversed(history))[:limit]

    def get_subscribers(self, event_type: Optional[EventType] = None) -> Dict[str, List[str]]:
        """Event type -> handler names"""
        if event_type is not None:
            event_type = EventType(event_type)
            return {event_type.value: [s.name for s in self._handlers.get(event_type, [])]}
        return {
            et.value: [s.name for s in subs]
            for et, subs in self._handlers.items()
        }

    def get_statistics(self) -> EventBusStatistics:
        """Snapshot of the statistics"""
        return EventBusStatistics(
            total_published=self._stats.total_published,
            total_processed=self._stats.total_processed,
            total_failed=self._stats.total_failed,
            subscriber_count={et.value: len(subs) for et, subs in self._handlers.items()},
            wildcard_count=len(self._all_handlers),
        )

    def clear(self) -> None:
        """
        Reset subscribers, history and statistics (tests only).
        """
        self.remove_all_listeners()
        self._event_history.clear()
        self._stats = EventBusStatistics()


__all__ = [
    "EventId",
    "CorrelationId",
    "Event",
    "EventHandler",
    "Unsubscribe",
    "PublishResult",
    "EventBusStatistics",
    "EventBus",
    "make_event",
]
