"""
Notification service for localnotify.

A single API for scheduling local notifications that works the same on
every platform:
- On Android/iOS with the Flet local notifications extension loaded, every
  call is delegated to the native backend.
- Anywhere else (desktop, web, or a debug run without the plugin) calls are
  logged and succeed trivially, and permission checks report granted, so
  calling code never has to branch on the platform.

Architecture:
- Backend availability is probed once at construction and used as the
  routing input of every operation afterwards
- IdAllocator hands out notification ids in both modes
- InitializationSequencer brings the backend to READY and defers the
  runtime permission request
- EventRelay forwards backend events (opened, dismissed, permission
  granted/denied) to subscribers of the service's EventBus
"""
import logging
from datetime import timedelta
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from localnotify.config import (
    AvailabilityState,
    DEFAULT_CHANNEL_DESCRIPTION,
    DEFAULT_CHANNEL_ID,
    DEFAULT_CHANNEL_NAME,
    DEFAULT_TITLE,
    FAILED_ID,
    FORCE_FALLBACK,
    Importance,
    NotificationEvent,
    Outcome,
    PERMISSION_REQUEST_DELAY_SECONDS,
    PermissionKind,
    PermissionState,
    ReadinessState,
)
from localnotify.events import EventBus, Subscription
from localnotify.models import NotificationChannel, NotificationRequest
from localnotify.registry import ServiceRegistry, Services, registry as default_registry
from localnotify.services.availability import probe
from localnotify.services.backend import BACKEND_ERRORS, NotificationBackend
from localnotify.services.event_relay import EventRelay
from localnotify.services.id_allocator import IdAllocator
from localnotify.services.sequencer import AsyncScheduler, InitializationSequencer

logger = logging.getLogger(__name__)

Duration = Union[int, float, timedelta]


def _to_seconds(value: Optional[Duration]) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


class NotificationService:
    """Availability-aware facade over the native notification backend.

    Args:
        platform: Platform name; defaults to the detected one
        service_registry: Registry holding the backend singleton
        async_scheduler: Function to schedule async work (page.run_task);
            defaults to create_task on the running loop
        permission_delay: Seconds to wait after initialization before the
            runtime permission request
        force_fallback: Ignore any backend and run in fallback mode
        default_channel: Channel created during initialization
        on_ready: Callback fired with the READY event

    With a backend present and no async_scheduler, construct inside a
    running event loop: initialization is started from the constructor.
    """

    def __init__(
        self,
        platform: Optional[str] = None,
        service_registry: Optional[ServiceRegistry] = None,
        async_scheduler: Optional[AsyncScheduler] = None,
        permission_delay: float = PERMISSION_REQUEST_DELAY_SECONDS,
        force_fallback: bool = FORCE_FALLBACK,
        default_channel: Optional[NotificationChannel] = None,
        on_ready: Optional[Callable[[Any], None]] = None,
    ) -> None:
        service_registry = service_registry or default_registry

        self._availability = probe(platform, service_registry, force_fallback)
        self._backend: Optional[NotificationBackend] = None
        if self._availability == AvailabilityState.BACKEND_PRESENT:
            self._backend = service_registry.get(Services.NOTIFICATION_BACKEND)

        self._ids = IdAllocator()
        self._event_bus = EventBus()
        self._fallback_requests: Dict[int, NotificationRequest] = {}
        self._default_channel = default_channel or NotificationChannel(
            id=DEFAULT_CHANNEL_ID,
            name=DEFAULT_CHANNEL_NAME,
            description=DEFAULT_CHANNEL_DESCRIPTION,
            importance=Importance.DEFAULT,
            show_badge=True,
        )

        self._sequencer = InitializationSequencer(
            availability=self._availability,
            event_bus=self._event_bus,
            backend=self._backend,
            async_scheduler=async_scheduler,
            permission_delay=permission_delay,
            default_channel=self._default_channel,
            create_channel=self.create_channel,
            has_permission=self.has_permission,
            request_permission=self.request_permission,
        )
        self._relay = EventRelay(
            self._event_bus,
            on_initialized=self._sequencer.on_backend_initialized,
            on_permission_result=self._sequencer.on_permission_result,
        )
        if self._backend is not None:
            self._relay.attach(self._backend)

        self._ready_subscription: Optional[Subscription] = None
        if on_ready is not None:
            self._ready_subscription = self._event_bus.subscribe(NotificationEvent.READY, on_ready, strong=True)

        self._sequencer.start()

    # ── Routing helpers ────────────────────────────────────────────────

    @property
    def _fallback(self) -> bool:
        return self._availability != AvailabilityState.BACKEND_PRESENT

    async def _submit(self, operation: str, call: Callable[..., Awaitable[Any]], *args: Any) -> Outcome:
        """Send one request to the backend and map its result to an Outcome."""
        try:
            result = await call(*args)
        except BACKEND_ERRORS as e:
            logger.error(f"[NOTIF] {operation} failed: {e}")
            return Outcome.FAILED

        outcome = Outcome.from_result(result)
        if outcome.ok:
            logger.debug(f"[NOTIF] {operation} raw result: {result!r}")
        else:
            logger.error(f"[NOTIF] {operation} rejected by backend: {result!r}")
        return outcome

    async def _query(self, operation: str, call: Callable[[], Awaitable[Any]]) -> bool:
        """Ask the backend a yes/no permission question."""
        try:
            result = await call()
        except BACKEND_ERRORS as e:
            logger.error(f"[NOTIF] {operation} failed: {e}")
            return False
        return str(result).lower() == "true"

    # ── Scheduling ─────────────────────────────────────────────────────

    async def notify(self, message: str, title: str = DEFAULT_TITLE) -> int:
        """Show a notification immediately. Returns its id."""
        return await self.schedule(title, message, 0)

    async def schedule(
        self,
        title: str,
        content: str,
        delay: Duration = 0,
        interval: Optional[Duration] = None,
        channel_id: str = DEFAULT_CHANNEL_ID,
    ) -> int:
        """Schedule a notification after delay, optionally repeating every interval.

        Returns:
            The allocated notification id, or FAILED_ID if the backend
            rejected the request. A failed id is not reused.
        """
        notification_id = self._ids.next_id()
        request = NotificationRequest(
            id=notification_id,
            title=title,
            content=content,
            delay_seconds=_to_seconds(delay),
            interval_seconds=_to_seconds(interval),
            channel_id=channel_id,
        )

        if self._fallback:
            self._fallback_requests[notification_id] = request
            logger.info(
                f"Notification {notification_id} not delivered (no backend): "
                f"'{title}' - '{content}' in {request.delay_seconds}s"
                + (f", every {request.interval_seconds}s" if request.is_repeating else "")
            )
            return notification_id

        outcome = await self._submit(f"schedule #{notification_id}", self._backend.schedule, request.to_dict())
        return notification_id if outcome.ok else FAILED_ID

    async def cancel(self, notification_id: int) -> Outcome:
        """Cancel a scheduled or displayed notification."""
        if self._fallback:
            self._fallback_requests.pop(notification_id, None)
            logger.info(f"Notification {notification_id} cancelled (no backend)")
            return Outcome.OK
        return await self._submit(f"cancel #{notification_id}", self._backend.cancel, notification_id)

    async def create_channel(self, channel: NotificationChannel) -> Outcome:
        """Create or update a notification channel.

        Re-creating an existing id updates its metadata where the platform allows it.
        """
        if self._fallback:
            logger.debug(f"Channel '{channel.id}' ignored (no backend)")
            return Outcome.OK
        return await self._submit(f"create_channel '{channel.id}'", self._backend.create_channel, channel.to_dict())

    async def set_badge_count(self, count: int) -> Outcome:
        """Set the app icon badge. Invalid counts are left to backend validation."""
        if self._fallback:
            return Outcome.OK
        return await self._submit("set_badge_count", self._backend.set_badge_count, count)

    # ── Permissions ────────────────────────────────────────────────────

    async def has_permission(self) -> bool:
        """Whether notifications may be posted. Always True without a backend."""
        if self._fallback:
            return True
        return await self._query("has_post_notifications_permission", self._backend.has_post_notifications_permission)

    async def request_permission(self) -> Outcome:
        """Ask the user for notification permission.

        The decision arrives later as PERMISSION_GRANTED / PERMISSION_DENIED.
        """
        if self._fallback:
            return Outcome.OK
        return await self._submit(
            "request_post_notifications_permission", self._backend.request_post_notifications_permission
        )

    async def is_ignoring_battery_optimizations(self) -> bool:
        if self._fallback:
            return True
        return await self._query("is_ignoring_battery_optimizations", self._backend.is_ignoring_battery_optimizations)

    async def request_ignore_battery_optimizations(self) -> Outcome:
        if self._fallback:
            return Outcome.OK
        return await self._submit(
            "request_ignore_battery_optimizations", self._backend.request_ignore_battery_optimizations
        )

    async def has_exact_alarm_permission(self) -> bool:
        """Whether exact-time alarms may be scheduled (Android 12+)."""
        if self._fallback:
            return True
        return await self._query("has_exact_alarm_permission", self._backend.has_exact_alarm_permission)

    async def request_exact_alarm_permission(self) -> Outcome:
        if self._fallback:
            return Outcome.OK
        return await self._submit("request_exact_alarm_permission", self._backend.request_exact_alarm_permission)

    async def open_settings(self) -> Outcome:
        """Open the app's system notification settings."""
        if self._fallback:
            return Outcome.OK
        return await self._submit("open_settings", self._backend.open_settings)

    def permission_state(self, kind: PermissionKind) -> PermissionState:
        """Last known state of a permission, from backend events."""
        if self._fallback:
            return PermissionState.GRANTED
        return self._sequencer.permission_state(kind)

    # ── Events and readiness ───────────────────────────────────────────

    def subscribe(
        self,
        event: NotificationEvent,
        callback: Callable[[Any], None],
        strong: bool = False,
    ) -> Subscription:
        """Subscribe to a notification event. See EventBus.subscribe."""
        return self._event_bus.subscribe(event, callback, strong=strong)

    def is_ready(self) -> bool:
        return self._sequencer.state == ReadinessState.READY

    async def wait_until_ready(self) -> None:
        await self._sequencer.wait_until_ready()

    @property
    def readiness(self) -> ReadinessState:
        return self._sequencer.state

    @property
    def availability(self) -> AvailabilityState:
        return self._availability

    @property
    def is_available(self) -> bool:
        """Check if a real backend delivers notifications."""
        return not self._fallback

    @property
    def fallback_requests(self) -> Dict[int, NotificationRequest]:
        """Requests recorded instead of delivered while in fallback mode."""
        return dict(self._fallback_requests)

    async def send_test_notification(self, title: str, body: str) -> bool:
        """Send a notification right away and report whether it was accepted.

        With a backend, permission is requested first if it is missing; the
        call then returns False since the user has not answered yet.
        """
        logger.warning(f"[NOTIF] send_test_notification: availability={self._availability.value}")

        if not self._fallback and not await self.has_permission():
            outcome = await self.request_permission()
            logger.warning(f"[NOTIF] send_test_notification: permission request {outcome.value}")
            return False

        return await self.notify(body, title=title) != FAILED_ID

    def cleanup(self) -> None:
        """Release handlers and cancel the pending permission request.

        Scheduled notifications are left with the backend so they still fire
        after the app closes.
        """
        logger.info("Cleaning up notification service")
        self._sequencer.cancel_pending()
        self._relay.detach()
        if self._ready_subscription is not None:
            self._ready_subscription.unsubscribe()
            self._ready_subscription = None
        self._event_bus.clear()
