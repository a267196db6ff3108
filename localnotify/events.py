"""Publish/subscribe bus for notification events.

Each NotificationService owns one EventBus; backend callbacks reach it only
through the EventRelay, so subscribers never see backend-specific types.
"""
from typing import Callable, Dict, Any, Optional
import inspect
import logging
import threading
import uuid
import weakref

from localnotify.config import NotificationEvent

logger = logging.getLogger(__name__)


class Subscription:
    """Represents an event subscription that can be unsubscribed.

    When using strong=True in subscribe(), the Subscription object holds
    a strong reference to the callback. You MUST store the Subscription
    object to keep the callback alive, and call unsubscribe() when done.
    """

    def __init__(
        self,
        event_bus: "EventBus",
        event: NotificationEvent,
        subscription_id: str,
        strong_ref: Optional[Callable[[Any], None]] = None,
    ):
        self._event_bus = event_bus
        self._event = event
        self._subscription_id = subscription_id
        self._active = True
        self._strong_ref = strong_ref

    @property
    def id(self) -> str:
        return self._subscription_id

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        """Unsubscribe this subscription."""
        if self._active:
            self._event_bus._unsubscribe_by_id(self._event, self._subscription_id)
            self._active = False
            self._strong_ref = None


class _CallbackRef:
    """Weak reference to a callback (bound method or function).

    Built-ins that cannot be weakly referenced are held strongly.
    """

    def __init__(
        self,
        callback: Callable[[Any], None],
        on_dead: Optional[Callable[[], None]] = None,
        event_name: str = "unknown",
    ):
        self._on_dead = on_dead
        self._event_name = event_name
        self._callback_repr = repr(callback)

        if inspect.ismethod(callback):
            self._ref = weakref.WeakMethod(callback, self._invoke_on_dead)
        else:
            try:
                self._ref = weakref.ref(callback, self._invoke_on_dead)
            except TypeError:
                self._ref = lambda: callback

    def _invoke_on_dead(self, _ref) -> None:
        logger.debug(
            f"EventBus: Subscription to {self._event_name} was garbage collected. "
            f"Callback was: {self._callback_repr}."
        )
        if self._on_dead:
            self._on_dead()

    def __call__(self) -> Optional[Callable[[Any], None]]:
        """Get the callback, or None if it was garbage collected."""
        return self._ref()


class EventBus:
    """Event bus for decoupled delivery of notification events.

    Uses weak references for bound-method callbacks so a destroyed UI
    component does not keep receiving events.
    """

    def __init__(self) -> None:
        # Dict[event -> Dict[subscription_id -> weak callback ref]]
        self._listeners: Dict[NotificationEvent, Dict[str, _CallbackRef]] = {}
        self._lock = threading.RLock()

    def subscribe(
        self,
        event: NotificationEvent,
        callback: Callable[[Any], None],
        strong: bool = False,
    ) -> Subscription:
        """Subscribe a callback to an event. Returns a Subscription for cleanup.

        Args:
            event: The event to subscribe to
            callback: Function called with the event data
            strong: If True, the returned Subscription holds a strong
                    reference to the callback. Lambdas and closures are
                    always held strongly.

        Example:
            sub = bus.subscribe(NotificationEvent.READY, lambda _: print("ready"))
            # Later: sub.unsubscribe()
        """
        subscription_id = str(uuid.uuid4())

        is_lambda = getattr(callback, '__name__', '') == '<lambda>'
        is_closure = not inspect.ismethod(callback) and getattr(callback, '__closure__', None) is not None
        if (is_lambda or is_closure) and not strong:
            logger.debug(
                f"EventBus: Auto-enabling strong reference for {'lambda' if is_lambda else 'closure'} "
                f"subscribed to {event.name}."
            )
            strong = True

        def on_dead():
            self._unsubscribe_by_id(event, subscription_id)

        with self._lock:
            self._listeners.setdefault(event, {})[subscription_id] = _CallbackRef(callback, on_dead, event.name)

        return Subscription(
            self, event, subscription_id,
            strong_ref=callback if strong else None
        )

    def _unsubscribe_by_id(self, event: NotificationEvent, subscription_id: str) -> None:
        with self._lock:
            if event in self._listeners:
                self._listeners[event].pop(subscription_id, None)

    def emit(self, event: NotificationEvent, data: Any = None) -> None:
        """Emit an event to all subscribers.

        A subscriber that raises is logged and skipped. Dead weak
        references are cleaned up during emission.
        """
        with self._lock:
            items = list(self._listeners.get(event, {}).items())

        dead_refs = []
        for sub_id, cb_ref in items:
            callback = cb_ref()
            if callback is None:
                dead_refs.append(sub_id)
                continue
            try:
                callback(data)
            except Exception as e:
                logger.error(f"Error in event handler for {event.name}: {e}")

        for sub_id in dead_refs:
            self._unsubscribe_by_id(event, sub_id)

    def subscriber_count(self, event: NotificationEvent) -> int:
        with self._lock:
            return len(self._listeners.get(event, {}))

    def clear(self) -> None:
        """Clear all event subscriptions."""
        with self._lock:
            self._listeners.clear()
