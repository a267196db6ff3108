import flet as ft
from typing import Any, Dict, Optional


@ft.control("flet_local_notifications")
class FletLocalNotifications(ft.Service):
    """Native local notifications, driven over Flet's method channel.

    Every request resolves to a plain string: "ok" or "error:<reason>",
    and "true"/"false" for permission queries.
    """
    on_initialized: Optional[ft.ControlEventHandler["FletLocalNotifications"]] = None
    on_notification_opened: Optional[ft.ControlEventHandler["FletLocalNotifications"]] = None
    on_notification_dismissed: Optional[ft.ControlEventHandler["FletLocalNotifications"]] = None
    on_permission_granted: Optional[ft.ControlEventHandler["FletLocalNotifications"]] = None
    on_permission_denied: Optional[ft.ControlEventHandler["FletLocalNotifications"]] = None

    def before_update(self):
        super().before_update()

    async def _call(self, method_name: str, arguments: Optional[Dict[str, Any]] = None) -> str:
        try:
            result = await self._invoke_method(method_name=method_name, arguments=arguments)
        except (RuntimeError, TimeoutError) as e:
            return f"error:{e}"
        return str(result) if result is not None else "error:no_response"

    async def initialize(self) -> str:
        return await self._call("initialize")

    async def schedule(self, request: Dict[str, Any]) -> str:
        return await self._call("schedule", request)

    async def cancel(self, notification_id: int) -> str:
        return await self._call("cancel", {"id": notification_id})

    async def create_channel(self, channel: Dict[str, Any]) -> str:
        return await self._call("create_channel", channel)

    async def set_badge_count(self, count: int) -> str:
        return await self._call("set_badge_count", {"count": count})

    async def has_post_notifications_permission(self) -> str:
        return await self._call("has_post_notifications_permission")

    async def request_post_notifications_permission(self) -> str:
        return await self._call("request_post_notifications_permission")

    async def is_ignoring_battery_optimizations(self) -> str:
        return await self._call("is_ignoring_battery_optimizations")

    async def request_ignore_battery_optimizations(self) -> str:
        return await self._call("request_ignore_battery_optimizations")

    async def has_exact_alarm_permission(self) -> str:
        return await self._call("has_exact_alarm_permission")

    async def request_exact_alarm_permission(self) -> str:
        return await self._call("request_exact_alarm_permission")

    async def open_settings(self) -> str:
        return await self._call("open_settings")
