"""
Central service registry for the notification layer.

The native backend is published here under a well-known name by whoever
loads the platform plugin; the availability probe looks it up instead of
importing the plugin directly. The facade itself can be registered too so
that any module can reach it without circular imports.

Usage:
    from localnotify.registry import registry, Services

    registry.register(Services.NOTIFICATION_BACKEND, FletLocalNotifications())

    backend = registry.get(Services.NOTIFICATION_BACKEND)
"""
import threading
from typing import Optional, Dict, Any


class ServiceRegistry:
    """Thread-safe registry for shared services."""
    _instance: Optional["ServiceRegistry"] = None
    _instance_lock = threading.Lock()

    def __new__(cls) -> "ServiceRegistry":
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._services: Dict[str, Any] = {}
                    cls._instance._lock = threading.Lock()
        return cls._instance

    def register(self, name: str, service: Any) -> None:
        """Register a service by name, replacing any previous one."""
        with self._lock:
            self._services[name] = service

    def get(self, name: str) -> Optional[Any]:
        """Get a registered service by name, or None if not registered."""
        with self._lock:
            return self._services.get(name)

    def is_registered(self, name: str) -> bool:
        with self._lock:
            return name in self._services

    def clear(self) -> None:
        """Clear all registered services. Used primarily for testing."""
        with self._lock:
            self._services.clear()


# Module-level singleton
registry = ServiceRegistry()


class Services:
    """Service name constants for registry access."""
    NOTIFICATION_BACKEND = "notification_backend"
    NOTIFICATIONS = "notifications"
