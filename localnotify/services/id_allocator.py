import threading

from localnotify.config import FIRST_ID


class IdAllocator:
    """Issues strictly increasing notification ids, starting at 1.

    Ids are never reset or reused, even when the request they were issued
    for is cancelled or fails to schedule.
    """

    def __init__(self, start: int = FIRST_ID) -> None:
        self._next = start
        self._lock = threading.Lock()

    def next_id(self) -> int:
        with self._lock:
            issued = self._next
            self._next += 1
            return issued

    @property
    def last_id(self) -> int:
        """The most recently issued id, or start - 1 if none yet."""
        with self._lock:
            return self._next - 1
