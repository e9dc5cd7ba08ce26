"""Log handlers for StakeGov."""

import sys
from collections import deque
from typing import Any, Deque, Dict, List

from .core import LogEntry, LogHandler, LogLevel


class ConsoleHandler(LogHandler):
    """Console log handler."""

    def __init__(self, stream: Any = None, level: LogLevel = LogLevel.DEBUG):
        super().__init__(level=level)
        self.stream = stream or sys.stderr

    def emit(self, entry: LogEntry) -> None:
        """Emit log entry to console."""
        with self._lock:
            if self.formatter:
                formatted = self.formatter.format(entry)
            else:
                formatted = f"{entry.timestamp} [{entry.level.value.upper()}] {entry.logger_name}: {entry.message}"

            self.stream.write(formatted + "\n")
            self.stream.flush()


class MemoryHandler(LogHandler):
    """Bounded in-memory log handler."""

    def __init__(self, max_size: int = 1000, level: LogLevel = LogLevel.DEBUG):
        super().__init__(level=level)
        self.max_size = max_size
        self.buffer: Deque[Dict[str, Any]] = deque(maxlen=max_size)

    def emit(self, entry: LogEntry) -> None:
        """Emit log entry to memory."""
        with self._lock:
            record = entry.to_dict()
            if self.formatter:
                record["formatted"] = self.formatter.format(entry)
            self.buffer.append(record)

    def get_logs(self) -> List[Dict[str, Any]]:
        """Get all logs from memory."""
        with self._lock:
            return list(self.buffer)

    def find(self, **extra: Any) -> List[Dict[str, Any]]:
        """Return records whose ``extra`` contains all the given items."""
        with self._lock:
            return [
                record
                for record in self.buffer
                if all(record["extra"].get(key) == value for key, value in extra.items())
            ]

    def clear_logs(self) -> None:
        """Clear all logs from memory."""
        with self._lock:
            self.buffer.clear()

    def close(self) -> None:
        """Close handler."""
        self.clear_logs()
