"""Shared fixtures for localnotify tests."""
import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import pytest

from localnotify.config import NotificationEvent
from localnotify.registry import registry, Services
from localnotify.services.notification_service import NotificationService

TEST_PERMISSION_DELAY = 0.05


@dataclass
class FakeEvent:
    """Stand-in for a Flet control event: payload in .data."""
    data: Any = None


class FakeBackend:
    """Scripted backend implementing the native notification interface.

    Every call is recorded in self.calls as (method_name, *args).
    """

    def __init__(
        self,
        result: str = "ok",
        schedule_result: Optional[str] = None,
        post_permission: str = "false",
        battery_exempt: str = "false",
        exact_alarm: str = "false",
    ) -> None:
        self.result = result
        self.schedule_result = schedule_result or result
        self.post_permission = post_permission
        self.battery_exempt = battery_exempt
        self.exact_alarm = exact_alarm
        self.raise_on: Dict[str, Exception] = {}
        self.initialize_result = "ok"

        self.calls: List[tuple] = []
        self.channels: Dict[str, Dict[str, Any]] = {}
        self.scheduled: Dict[int, Dict[str, Any]] = {}

        self.on_initialized = None
        self.on_notification_opened = None
        self.on_notification_dismissed = None
        self.on_permission_granted = None
        self.on_permission_denied = None

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, *args))
        if name in self.raise_on:
            raise self.raise_on[name]

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)

    # Backend-originated events

    def complete_initialization(self) -> None:
        self.on_initialized(FakeEvent())

    def open_notification(self, data: Any) -> None:
        self.on_notification_opened(FakeEvent(data))

    def dismiss_notification(self, data: Any) -> None:
        self.on_notification_dismissed(FakeEvent(data))

    def grant(self, kind: str) -> None:
        self.on_permission_granted(FakeEvent(kind))

    def deny(self, kind: str) -> None:
        self.on_permission_denied(FakeEvent(kind))

    # Requests

    async def initialize(self) -> str:
        self._record("initialize")
        return self.initialize_result

    async def schedule(self, request: Dict[str, Any]) -> str:
        self._record("schedule", request)
        if self.schedule_result == "ok":
            self.scheduled[request["id"]] = request
        return self.schedule_result

    async def cancel(self, notification_id: int) -> str:
        self._record("cancel", notification_id)
        self.scheduled.pop(notification_id, None)
        return self.result

    async def create_channel(self, channel: Dict[str, Any]) -> str:
        self._record("create_channel", channel)
        self.channels[channel["id"]] = channel
        return self.result

    async def set_badge_count(self, count: int) -> str:
        self._record("set_badge_count", count)
        return self.result

    async def has_post_notifications_permission(self) -> str:
        self._record("has_post_notifications_permission")
        return self.post_permission

    async def request_post_notifications_permission(self) -> str:
        self._record("request_post_notifications_permission")
        return self.result

    async def is_ignoring_battery_optimizations(self) -> str:
        self._record("is_ignoring_battery_optimizations")
        return self.battery_exempt

    async def request_ignore_battery_optimizations(self) -> str:
        self._record("request_ignore_battery_optimizations")
        return self.result

    async def has_exact_alarm_permission(self) -> str:
        self._record("has_exact_alarm_permission")
        return self.exact_alarm

    async def request_exact_alarm_permission(self) -> str:
        self._record("request_exact_alarm_permission")
        return self.result

    async def open_settings(self) -> str:
        self._record("open_settings")
        return self.result


class EventCollector:
    """Subscribe to service events and record them for assertions."""

    def __init__(self, service: NotificationService, *events: NotificationEvent):
        self.received: List[tuple] = []
        self._subs = []
        for ev in events:
            sub = service.subscribe(ev, lambda data, _ev=ev: self.received.append((_ev, data)))
            self._subs.append(sub)

    def count(self, event: NotificationEvent) -> int:
        return sum(1 for ev, _ in self.received if ev == event)

    def data(self, event: NotificationEvent) -> List[Any]:
        return [data for ev, data in self.received if ev == event]

    def cleanup(self):
        for sub in self._subs:
            sub.unsubscribe()


async def settle(rounds: int = 10) -> None:
    """Let already-scheduled tasks run to their next real suspension."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture(autouse=True)
def clean_registry():
    registry.clear()
    yield
    registry.clear()


@pytest.fixture
def backend() -> FakeBackend:
    fake = FakeBackend()
    registry.register(Services.NOTIFICATION_BACKEND, fake)
    return fake


@pytest.fixture
def fallback_service() -> NotificationService:
    service = NotificationService(platform="linux")
    yield service
    service.cleanup()


@pytest.fixture
async def native_service(backend: FakeBackend) -> NotificationService:
    """Service on a target platform with the fake backend, already READY."""
    service = NotificationService(platform="android", permission_delay=TEST_PERMISSION_DELAY)
    backend.complete_initialization()
    await settle()
    yield service
    service.cleanup()
