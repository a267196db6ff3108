import flet as ft
import logging
from typing import List, Optional

from localnotify.config import NotificationEvent, PLATFORM, PermissionKind
from localnotify.events import Subscription
from localnotify.models import NotificationChannel
from localnotify.registry import registry, Services
from localnotify.services.backend import register_flet_backend
from localnotify.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

REMINDER_CHANNEL = NotificationChannel(
    id="reminders",
    name="Reminders",
    description="Reminders you scheduled",
)


class NotificationApp:
    """Small Flet app exercising the notification service."""

    def __init__(self, page: ft.Page) -> None:
        self.page = page
        self._subscriptions: List[Subscription] = []

        platform = page.platform.value if page.platform else PLATFORM
        register_flet_backend(platform)

        self.status = ft.Text("Initializing notifications...")
        self.last_event = ft.Text("")

        self.notifications = NotificationService(
            platform=platform,
            async_scheduler=page.run_task,
            on_ready=self._on_ready,
        )
        registry.register(Services.NOTIFICATIONS, self.notifications)

        self._subscribe_to_events()
        self._build_layout()
        self.page.on_close = self._on_page_close

    def _subscribe_to_events(self) -> None:
        events = [
            NotificationEvent.NOTIFICATION_OPENED,
            NotificationEvent.NOTIFICATION_DISMISSED,
            NotificationEvent.PERMISSION_GRANTED,
            NotificationEvent.PERMISSION_DENIED,
        ]
        for event in events:
            self._subscriptions.append(self.notifications.subscribe(event, self._on_notification_event))

    def _build_layout(self) -> None:
        self.page.add(
            ft.Column([
                self.status,
                ft.Button("Notify now", on_click=self._on_notify_click),
                ft.Button("Remind me in 1 minute", on_click=self._on_remind_click),
                ft.TextButton("Notification settings", on_click=self._on_settings_click),
                self.last_event,
            ])
        )

    def _on_ready(self, _data: Optional[object]) -> None:
        mode = "native" if self.notifications.is_available else "fallback"
        self.status.value = f"Notifications ready ({mode})"
        self.page.update()

    def _on_notification_event(self, data: object) -> None:
        if isinstance(data, PermissionKind):
            state = self.notifications.permission_state(data)
            self.last_event.value = f"Permission {data.value}: {state.value}"
        else:
            self.last_event.value = f"Notification event: {data}"
        self.page.update()

    async def _on_notify_click(self, e: ft.ControlEvent) -> None:
        await self.notifications.notify("Hello from localnotify")

    async def _on_remind_click(self, e: ft.ControlEvent) -> None:
        await self.notifications.create_channel(REMINDER_CHANNEL)
        notification_id = await self.notifications.schedule(
            "Reminder", "One minute has passed", delay=60, channel_id=REMINDER_CHANNEL.id,
        )
        logger.info(f"Scheduled reminder {notification_id}")

    async def _on_settings_click(self, e: ft.ControlEvent) -> None:
        await self.notifications.open_settings()

    def _on_page_close(self, e: ft.ControlEvent) -> None:
        for sub in self._subscriptions:
            sub.unsubscribe()
        self._subscriptions.clear()
        self.notifications.cleanup()


def main(page: ft.Page) -> None:
    NotificationApp(page)


if __name__ == "__main__":
    ft.run(main)
