"""Forwards backend-originated events to facade subscribers.

All backend callbacks are funnelled through this one point. The backend may
invoke them from a platform callback thread, so each one is marshalled back
onto the owner's event loop before anything is mutated or emitted.
"""
import asyncio
import logging
from typing import Any, Callable, Optional

from localnotify.config import NotificationEvent, PermissionKind
from localnotify.events import EventBus

logger = logging.getLogger(__name__)

_HANDLER_ATTRIBUTES = (
    "on_initialized",
    "on_notification_opened",
    "on_notification_dismissed",
    "on_permission_granted",
    "on_permission_denied",
)


def _event_data(e: Any) -> Any:
    """Unwrap the payload of a backend event (Flet events carry it in .data)."""
    return e.data if hasattr(e, "data") else e


class EventRelay:
    """Bridges a backend's event handler attributes to an EventBus.

    Args:
        event_bus: Bus owned by the facade
        on_initialized: Called once the backend reports initialization complete
        on_permission_result: Called with (kind, granted) before the
            permission event is forwarded
    """

    def __init__(
        self,
        event_bus: EventBus,
        on_initialized: Optional[Callable[[], None]] = None,
        on_permission_result: Optional[Callable[[PermissionKind, bool], None]] = None,
    ) -> None:
        self._event_bus = event_bus
        self._on_initialized = on_initialized
        self._on_permission_result = on_permission_result
        self._backend: Any = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def attach(self, backend: Any) -> None:
        """Install relay handlers on the backend and capture the owner loop."""
        try:
            self._loop = asyncio.get_running_loop()
        except RuntimeError:
            self._loop = None

        self._backend = backend
        backend.on_initialized = self._handle_initialized
        backend.on_notification_opened = self._handle_opened
        backend.on_notification_dismissed = self._handle_dismissed
        backend.on_permission_granted = self._handle_permission_granted
        backend.on_permission_denied = self._handle_permission_denied

    def detach(self) -> None:
        if self._backend is None:
            return
        for attribute in _HANDLER_ATTRIBUTES:
            setattr(self._backend, attribute, None)
        self._backend = None

    @property
    def attached(self) -> bool:
        return self._backend is not None

    def _on_owner(self, fn: Callable[..., None], *args: Any) -> None:
        """Run fn on the owner loop, directly if already there."""
        if self._loop is None or self._loop.is_closed():
            fn(*args)
            return
        try:
            current = asyncio.get_running_loop()
        except RuntimeError:
            current = None
        if current is self._loop:
            fn(*args)
        else:
            self._loop.call_soon_threadsafe(fn, *args)

    def _handle_initialized(self, e: Any = None) -> None:
        logger.warning("[NOTIF] Backend initialization completed")
        if self._on_initialized is not None:
            self._on_owner(self._on_initialized)

    def _handle_opened(self, e: Any) -> None:
        self._on_owner(self._event_bus.emit, NotificationEvent.NOTIFICATION_OPENED, _event_data(e))

    def _handle_dismissed(self, e: Any) -> None:
        self._on_owner(self._event_bus.emit, NotificationEvent.NOTIFICATION_DISMISSED, _event_data(e))

    def _handle_permission_granted(self, e: Any) -> None:
        self._on_owner(self._forward_permission, _event_data(e), True)

    def _handle_permission_denied(self, e: Any) -> None:
        self._on_owner(self._forward_permission, _event_data(e), False)

    def _forward_permission(self, raw_kind: Any, granted: bool) -> None:
        try:
            kind = PermissionKind.parse(raw_kind)
        except ValueError:
            logger.error(f"[NOTIF] Ignoring permission event for unknown permission {raw_kind!r}")
            return

        if self._on_permission_result is not None:
            self._on_permission_result(kind, granted)

        event = NotificationEvent.PERMISSION_GRANTED if granted else NotificationEvent.PERMISSION_DENIED
        self._event_bus.emit(event, kind)
