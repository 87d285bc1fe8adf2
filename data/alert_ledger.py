"""
Bounded newest-first history of alerts.

``AlertLedger`` is immutable: ``push`` returns a new ledger and leaves the
old one untouched, which makes it safe to keep in Streamlit session state
and trivial to test. Capacity differs per consumer (alert feed vs. log
view), so it is a constructor argument rather than a constant.
"""

from typing import Generic, Iterable, Iterator, Tuple, TypeVar

from config import ALERT_FEED_CAPACITY

T = TypeVar("T")


class AlertLedger(Generic[T]):
    """Fixed-capacity, newest-first sequence of alerts."""

    __slots__ = ("_capacity", "_items")

    def __init__(self, capacity: int = ALERT_FEED_CAPACITY, alerts: Iterable[T] = ()):
        """
        Initialize the ledger.

        Args:
            capacity: Maximum number of alerts retained (must be positive)
            alerts: Initial alerts, newest first. Entries beyond
                capacity are dropped from the tail.
        """
        if capacity <= 0:
            raise ValueError(f"Ledger capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._items: Tuple[T, ...] = tuple(alerts)[:capacity]

    @property
    def capacity(self) -> int:
        return self._capacity

    def push(self, alert: T) -> "AlertLedger[T]":
        """
        Return a new ledger with ``alert`` at the front.

        The oldest entries are dropped once capacity is exceeded.
        """
        return AlertLedger(self._capacity, (alert,) + self._items)

    def all(self) -> Tuple[T, ...]:
        """All retained alerts, newest first."""
        return self._items

    def latest(self):
        return self._items[0] if self._items else None

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __repr__(self) -> str:
        return f"AlertLedger(capacity={self._capacity}, size={len(self._items)})"
