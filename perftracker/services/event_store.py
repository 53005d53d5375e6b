"""
Append-only in-memory store for revenue events
"""

import threading
from typing import List, Tuple

from ..event_models import RevenueEvent


class EventStore:
    """
    Thread-safe append-only store for revenue events.

    Events are kept in arrival order for the lifetime of the process.
    There is no update, delete or eviction.
    """

    def __init__(self):
        self._events: List[RevenueEvent] = []
        self._lock = threading.Lock()

    def append(self, event: RevenueEvent) -> None:
        """
        Add an event to the tail of the store

        Args:
            event: Decoded event, stored as-is without value validation
        """
        with self._lock:
            self._events.append(event)

    def snapshot(self) -> Tuple[RevenueEvent, ...]:
        """
        Point-in-time copy of all stored events

        Returns:
            Immutable tuple of events in arrival order
        """
        with self._lock:
            return tuple(self._events)

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
