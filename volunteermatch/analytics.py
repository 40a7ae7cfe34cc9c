"""
In-memory role click log.

A fixed-capacity ring buffer for lightweight operational visibility. Events
are not persisted; the oldest entries are dropped once capacity is reached.
"""

import threading
from collections import deque
from datetime import datetime, timezone
from typing import List, Optional

from .logger import get_logger
from .models import RoleClickEvent

MAX_EVENTS = 200
DEFAULT_RECENT_LIMIT = 25


class ClickLog:
    """Bounded, thread-safe log of role clicks."""

    def __init__(self, capacity: int = MAX_EVENTS):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._events = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def record(
        self,
        role_id: str,
        path: str,
        country: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> RoleClickEvent:
        event = RoleClickEvent(
            role_id=role_id,
            path=path,
            country=country,
            user_agent=user_agent,
            timestamp=datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
        )
        with self._lock:
            self._events.append(event)
        get_logger().record_click()
        return event

    def recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> List[RoleClickEvent]:
        """Most recent events first."""
        if limit <= 0:
            return []
        with self._lock:
            events = list(self._events)
        return events[-limit:][::-1]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()

    def __len__(self):
        with self._lock:
            return len(self._events)


_click_log = ClickLog()


def record_role_click(
    role_id: str,
    path: str,
    country: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> RoleClickEvent:
    return _click_log.record(role_id, path, country=country, user_agent=user_agent)


def get_recent_role_clicks(limit: int = DEFAULT_RECENT_LIMIT) -> List[RoleClickEvent]:
    return _click_log.recent(limit)


def clear_role_clicks() -> None:
    """Empty the process-wide click log (useful for testing)."""
    _click_log.clear()
