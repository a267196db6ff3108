"""Cross-platform local notifications with a no-op fallback."""
from localnotify.config import (
    AvailabilityState,
    Importance,
    NotificationEvent,
    Outcome,
    PermissionKind,
    PermissionState,
    ReadinessState,
)
from localnotify.models import NotificationChannel, NotificationRequest
from localnotify.services.notification_service import NotificationService

__all__ = [
    "AvailabilityState",
    "Importance",
    "NotificationChannel",
    "NotificationEvent",
    "NotificationRequest",
    "NotificationService",
    "Outcome",
    "PermissionKind",
    "PermissionState",
    "ReadinessState",
]
