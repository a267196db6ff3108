"""Brings the notification backend to a ready state.

States: UNINITIALIZED -> INITIALIZING -> READY (terminal, reached once).

With a backend present, start() asks the backend to initialize and waits
for its initialization-completed event. On that event the default channel
is created, the post-notifications permission is checked and, if it is not
granted, a permission request is deferred by a fixed delay so the system
dialog does not appear before the first frame is rendered. READY is emitted
right away and never waits for the permission outcome.

Without a backend, start() goes straight to READY.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from localnotify.config import (
    AvailabilityState,
    NotificationEvent,
    Outcome,
    PermissionKind,
    PermissionState,
    ReadinessState,
)
from localnotify.events import EventBus
from localnotify.models import NotificationChannel
from localnotify.services.backend import BACKEND_ERRORS

logger = logging.getLogger(__name__)

AsyncScheduler = Callable[..., Any]


def run_task(handler: Callable[..., Awaitable[Any]], *args: Any) -> asyncio.Task:
    """Default scheduler: same contract as Flet's page.run_task."""
    return asyncio.get_running_loop().create_task(handler(*args))


class InitializationSequencer:
    """Asynchronous state machine emitting NotificationEvent.READY exactly once."""

    def __init__(
        self,
        availability: AvailabilityState,
        event_bus: EventBus,
        backend: Any = None,
        async_scheduler: Optional[AsyncScheduler] = None,
        permission_delay: float = 0.0,
        default_channel: Optional[NotificationChannel] = None,
        create_channel: Optional[Callable[[NotificationChannel], Awaitable[Outcome]]] = None,
        has_permission: Optional[Callable[[], Awaitable[bool]]] = None,
        request_permission: Optional[Callable[[], Awaitable[Outcome]]] = None,
    ) -> None:
        self._availability = availability
        self._event_bus = event_bus
        self._backend = backend
        self._schedule_async = async_scheduler or run_task
        self._permission_delay = permission_delay
        self._default_channel = default_channel
        self._create_channel = create_channel
        self._has_permission = has_permission
        self._request_permission = request_permission

        self._state = ReadinessState.UNINITIALIZED
        self._completing = False
        self._ready_event = asyncio.Event()
        self._permissions: Dict[PermissionKind, PermissionState] = {
            kind: PermissionState.UNKNOWN for kind in PermissionKind
        }
        self._deferred_task: Any = None
        self.permission_requests_issued = 0

    @property
    def state(self) -> ReadinessState:
        return self._state

    @property
    def backend_present(self) -> bool:
        return self._availability == AvailabilityState.BACKEND_PRESENT

    def start(self) -> None:
        """Begin initialization. Later calls are ignored."""
        if self._state != ReadinessState.UNINITIALIZED:
            return

        if not self.backend_present:
            logger.info(f"No notification backend ({self._availability.value}), ready immediately")
            self._mark_ready()
            return

        self._state = ReadinessState.INITIALIZING
        logger.info("Notification backend initializing")
        self._schedule_async(self._initialize_backend)

    async def _initialize_backend(self) -> None:
        try:
            result = await self._backend.initialize()
        except BACKEND_ERRORS as e:
            logger.error(f"[NOTIF] Backend initialize failed: {e}")
            return
        if Outcome.from_result(result).ok:
            logger.warning(f"[NOTIF] initialize raw result: {result!r}")
        else:
            logger.error(f"[NOTIF] Backend initialize rejected: {result!r}")

    def on_backend_initialized(self) -> None:
        """Handle the backend's initialization-completed event.

        Only the first event while INITIALIZING starts the completion step.
        """
        if self._state != ReadinessState.INITIALIZING or self._completing:
            logger.debug(f"Ignoring initialization-completed event in state {self._state.value}")
            return
        self._completing = True
        self._schedule_async(self._complete_initialization)

    async def _complete_initialization(self) -> None:
        if self._default_channel is not None and self._create_channel is not None:
            outcome = await self._create_channel(self._default_channel)
            if not outcome.ok:
                logger.error(f"[NOTIF] Default channel '{self._default_channel.id}' was not created")

        if self._has_permission is not None and await self._has_permission():
            self._permissions[PermissionKind.POST_NOTIFICATIONS] = PermissionState.GRANTED

        if self._permissions[PermissionKind.POST_NOTIFICATIONS] != PermissionState.GRANTED:
            logger.warning(
                f"[NOTIF] Notification permission not granted, requesting in {self._permission_delay}s"
            )
            self._deferred_task = self._schedule_async(self._deferred_permission_request)

        self._mark_ready()

    async def _deferred_permission_request(self) -> None:
        await asyncio.sleep(self._permission_delay)
        if self._request_permission is None:
            return
        self.permission_requests_issued += 1
        outcome = await self._request_permission()
        logger.info(f"Deferred permission request submitted: {outcome.value}")

    def _mark_ready(self) -> None:
        if self._state == ReadinessState.READY:
            return
        self._state = ReadinessState.READY
        self._ready_event.set()
        logger.info("Notifications ready")
        self._event_bus.emit(NotificationEvent.READY)

    async def wait_until_ready(self) -> None:
        await self._ready_event.wait()

    def permission_state(self, kind: PermissionKind) -> PermissionState:
        return self._permissions[kind]

    def on_permission_result(self, kind: PermissionKind, granted: bool) -> None:
        """Record a permission grant/deny event from the backend."""
        self._permissions[kind] = PermissionState.GRANTED if granted else PermissionState.DENIED
        logger.info(f"Permission {kind.value}: {self._permissions[kind].value}")

    def cancel_pending(self) -> None:
        """Cancel the deferred permission request if it has not run yet."""
        task = self._deferred_task
        self._deferred_task = None
        if task is not None and hasattr(task, "done") and not task.done():
            task.cancel()
