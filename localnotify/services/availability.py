import logging
from typing import Optional

from localnotify.config import AvailabilityState, FORCE_FALLBACK, PLATFORM, TARGET_PLATFORMS
from localnotify.registry import ServiceRegistry, Services, registry as default_registry

logger = logging.getLogger(__name__)


def probe(
    platform: Optional[str] = None,
    service_registry: Optional[ServiceRegistry] = None,
    force_fallback: bool = FORCE_FALLBACK,
) -> AvailabilityState:
    """Detect whether a real notification backend can be used.

    Order:
    1. Forced fallback, or a platform that has no native notifications -> NO_BACKEND
    2. Target platform without a registered backend singleton -> BACKEND_MISSING
    3. Otherwise -> BACKEND_PRESENT

    Absence of a backend is an expected state, never an error.
    """
    platform = (platform or PLATFORM).lower()
    service_registry = service_registry or default_registry

    if force_fallback or platform not in TARGET_PLATFORMS:
        state = AvailabilityState.NO_BACKEND
    elif service_registry.get(Services.NOTIFICATION_BACKEND) is None:
        state = AvailabilityState.BACKEND_MISSING
    else:
        state = AvailabilityState.BACKEND_PRESENT

    logger.warning(f"[NOTIF] Backend availability on '{platform}': {state.value}")
    return state
