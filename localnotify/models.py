from dataclasses import dataclass
from typing import Any, Dict, Optional

from localnotify.config import DEFAULT_CHANNEL_ID, Importance


@dataclass(frozen=True)
class NotificationChannel:
    """Named category of notifications sharing presentation metadata."""
    id: str
    name: str
    description: str = ""
    importance: Importance = Importance.DEFAULT
    show_badge: bool = True

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Channel id must not be empty")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the plain dictionary sent to the backend."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "importance": self.importance.name.lower(),
            "show_badge": self.show_badge,
        }


@dataclass(frozen=True)
class NotificationRequest:
    """A notification to post now or later, optionally repeating.

    delay_seconds == 0 means immediate. interval_seconds None means one-shot.
    """
    id: int
    title: str
    content: str
    delay_seconds: float = 0
    interval_seconds: Optional[float] = None
    channel_id: str = DEFAULT_CHANNEL_ID

    def __post_init__(self) -> None:
        if self.delay_seconds < 0:
            raise ValueError(f"Notification delay must be >= 0, got {self.delay_seconds}")
        if self.interval_seconds is not None and self.interval_seconds <= 0:
            raise ValueError(f"Repeat interval must be > 0, got {self.interval_seconds}")
        if not self.channel_id:
            raise ValueError("Channel id must not be empty")

    @property
    def is_repeating(self) -> bool:
        return self.interval_seconds is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the plain dictionary sent to the backend."""
        return {
            "id": self.id,
            "channel_id": self.channel_id,
            "title": self.title,
            "content": self.content,
            "delay": self.delay_seconds,
            "interval": self.interval_seconds,
        }
