"""
In-memory log history for the dashboard's log view.

``LogBuffer`` is an ordinary ``logging.Handler``: attach it to a logger and
every record is kept (newest first, capped) and pushed to subscribers.
Create one per app and pass it where it is needed instead of sharing a
module-level instance.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional, Tuple
import itertools
import logging
import threading

from config import LOG_HISTORY_CAPACITY
from data.alert_ledger import AlertLedger


@dataclass(frozen=True)
class LogEntry:
    id: int
    timestamp: datetime
    level: str
    module: str
    message: str
    raw_data: Any = None


Listener = Callable[[Tuple[LogEntry, ...]], None]


class LogBuffer(logging.Handler):
    """Logging handler that keeps a bounded, observable history."""

    def __init__(self, capacity: int = LOG_HISTORY_CAPACITY, level: int = logging.NOTSET):
        super().__init__(level)
        self._ledger: AlertLedger[LogEntry] = AlertLedger(capacity)
        self._listeners: List[Listener] = []
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._ledger.capacity

    def emit(self, record: logging.LogRecord):
        entry = LogEntry(
            id=next(self._ids),
            timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc),
            level=record.levelname,
            module=record.name,
            message=record.getMessage(),
            raw_data=getattr(record, "raw_data", None),
        )
        with self._lock:
            self._ledger = self._ledger.push(entry)
            entries = self._ledger.all()
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(entries)
            except Exception:
                self.handleError(record)

    def entries(self, level: Optional[str] = None) -> Tuple[LogEntry, ...]:
        """
        Get buffered entries, newest first.

        Args:
            level: Optional level name to filter on (e.g. "ERROR")
        """
        entries = self._ledger.all()
        if level:
            return tuple(e for e in entries if e.level == level)
        return entries

    def subscribe(self, callback: Listener) -> Callable[[], None]:
        """
        Register a listener for log updates.

        The callback is called right away with the current entries and
        after every new record.

        Returns:
            Function that removes the listener
        """
        with self._lock:
            self._listeners.append(callback)
            entries = self._ledger.all()
        callback(entries)

        def unsubscribe():
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe
