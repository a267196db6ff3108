"""Interface of the native delivery backend.

The backend is an external collaborator: anything registered under
Services.NOTIFICATION_BACKEND that provides these coroutines and event
handler attributes can drive the facade. Results cross the boundary as
plain values: "ok" / "error:<reason>" strings for requests and
"true" / "false" for permission queries.
"""
import logging
from typing import Any, Callable, Dict, Optional, Protocol

from localnotify.config import PLATFORM, TARGET_PLATFORMS
from localnotify.registry import ServiceRegistry, Services, registry as default_registry

logger = logging.getLogger(__name__)

BackendEventHandler = Optional[Callable[[Any], None]]

# Transport errors a backend call may raise; anything else propagates
BACKEND_ERRORS = (RuntimeError, TimeoutError, OSError, ValueError)


class NotificationBackend(Protocol):
    on_initialized: BackendEventHandler
    on_notification_opened: BackendEventHandler
    on_notification_dismissed: BackendEventHandler
    on_permission_granted: BackendEventHandler
    on_permission_denied: BackendEventHandler

    async def initialize(self) -> str: ...

    async def schedule(self, request: Dict[str, Any]) -> str: ...

    async def cancel(self, notification_id: int) -> str: ...

    async def create_channel(self, channel: Dict[str, Any]) -> str: ...

    async def set_badge_count(self, count: int) -> str: ...

    async def has_post_notifications_permission(self) -> str: ...

    async def request_post_notifications_permission(self) -> str: ...

    async def is_ignoring_battery_optimizations(self) -> str: ...

    async def request_ignore_battery_optimizations(self) -> str: ...

    async def has_exact_alarm_permission(self) -> str: ...

    async def request_exact_alarm_permission(self) -> str: ...

    async def open_settings(self) -> str: ...


def register_flet_backend(
    platform: Optional[str] = None,
    service_registry: Optional[ServiceRegistry] = None,
) -> Optional[Any]:
    """Create the Flet extension and publish it as the backend singleton.

    Only done on target platforms. The extension may be left out of a
    build (or fail to load in a debug run), in which case nothing is
    registered and the facade runs in fallback mode.

    Returns:
        The registered backend, or None.
    """
    platform = (platform or PLATFORM).lower()
    service_registry = service_registry or default_registry

    if platform not in TARGET_PLATFORMS:
        return None

    try:
        from flet_local_notifications import FletLocalNotifications
    except ImportError:
        logger.info("flet_local_notifications not available")
        return None

    # Service auto-registers with the page via Service.init(); do not add to page.overlay
    backend = FletLocalNotifications()
    service_registry.register(Services.NOTIFICATION_BACKEND, backend)
    logger.warning(f"[NOTIF] FletLocalNotifications registered for platform={platform}")
    return backend
