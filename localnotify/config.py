"""Notification configuration - single source of truth for enums and constants.

Contains the availability/readiness/permission state enums, outcome codes,
event names and the tunable values (default channel, permission delay).
Import from here instead of hardcoding values elsewhere.
"""
import os
import sys
from enum import Enum, auto
from pathlib import Path

# Load .env if available (desktop only - not bundled in mobile builds)
try:
    from dotenv import load_dotenv
    load_dotenv(Path(__file__).parent / ".env")
except ImportError:
    pass  # dotenv not available on mobile, skip loading .env


class AvailabilityState(Enum):
    """Whether a real delivery backend can be used. Derived once at startup."""
    NO_BACKEND = "no_backend"  # Not a target platform
    BACKEND_MISSING = "backend_missing"  # Target platform, plugin not loaded
    BACKEND_PRESENT = "backend_present"


class ReadinessState(Enum):
    """Initialization progress. READY is terminal."""
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"


class PermissionState(Enum):
    UNKNOWN = "unknown"
    GRANTED = "granted"
    DENIED = "denied"


class PermissionKind(Enum):
    """Runtime permissions the backend can query and request."""
    POST_NOTIFICATIONS = "post_notifications"
    BATTERY_OPTIMIZATION = "battery_optimization"
    EXACT_ALARM = "exact_alarm"

    @classmethod
    def parse(cls, value: str) -> "PermissionKind":
        """Map a backend permission name to a kind.

        Accepts the enum value or the Android manifest permission name.
        """
        normalized = str(value).strip().lower()
        aliases = {
            "android.permission.post_notifications": cls.POST_NOTIFICATIONS,
            "android.permission.request_ignore_battery_optimizations": cls.BATTERY_OPTIMIZATION,
            "android.permission.schedule_exact_alarm": cls.EXACT_ALARM,
        }
        if normalized in aliases:
            return aliases[normalized]
        return cls(normalized)


class Importance(Enum):
    """Channel importance, ordered low to high."""
    LOW = 2
    DEFAULT = 3
    HIGH = 4


class Outcome(Enum):
    """Result code of a one-shot backend request."""
    OK = "ok"
    FAILED = "failed"

    @classmethod
    def from_result(cls, result: object) -> "Outcome":
        return cls.OK if str(result).lower() == "ok" else cls.FAILED

    @property
    def ok(self) -> bool:
        return self is Outcome.OK


class NotificationEvent(Enum):
    """Events published to facade subscribers."""
    NOTIFICATION_OPENED = auto()
    NOTIFICATION_DISMISSED = auto()
    PERMISSION_GRANTED = auto()
    PERMISSION_DENIED = auto()
    READY = auto()


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


# Platforms where a native backend is expected to exist
TARGET_PLATFORMS = ("android", "ios")

# Flet sets FLET_PLATFORM inside packaged mobile apps
PLATFORM = os.getenv("LOCALNOTIFY_PLATFORM", "") or os.getenv("FLET_PLATFORM", "") or sys.platform
FORCE_FALLBACK = _env_flag("LOCALNOTIFY_FORCE_FALLBACK")

DEFAULT_CHANNEL_ID = os.getenv("LOCALNOTIFY_DEFAULT_CHANNEL_ID", "") or "default"
DEFAULT_CHANNEL_NAME = os.getenv("LOCALNOTIFY_DEFAULT_CHANNEL_NAME", "") or "Notifications"
DEFAULT_CHANNEL_DESCRIPTION = "General notifications"
DEFAULT_TITLE = "Notification"

# Wait for the first frame before showing the permission dialog
PERMISSION_REQUEST_DELAY_SECONDS = float(os.getenv("LOCALNOTIFY_PERMISSION_DELAY", "") or 2.0)

FAILED_ID = -1
FIRST_ID = 1
