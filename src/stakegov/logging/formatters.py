"""Log formatters for StakeGov."""

import json
import time
import traceback
from typing import Optional

from .core import LogEntry, LogFormatter


def _iso_timestamp(timestamp: float) -> str:
    return (
        time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(timestamp))
        + f".{int((timestamp % 1) * 1000000):06d}Z"
    )


class JSONFormatter(LogFormatter):
    """JSON log formatter."""

    def __init__(
        self,
        include_context: bool = True,
        include_extra: bool = True,
        include_thread: bool = False,
        indent: Optional[int] = None,
    ):
        self.include_context = include_context
        self.include_extra = include_extra
        self.include_thread = include_thread
        self.indent = indent

    def format(self, entry: LogEntry) -> str:
        """Format log entry as JSON."""
        data = {
            "timestamp": _iso_timestamp(entry.timestamp),
            "level": entry.level.value,
            "logger": entry.logger_name,
        }

        if self.include_context:
            data["context"] = entry.context.to_dict()

        if entry.exception:
            data["exception"] = {
                "type": type(entry.exception).__name__,
                "message": str(entry.exception),
                "traceback": "".join(
                    traceback.format_exception(
                        type(entry.exception),
                        entry.exception,
                        entry.exception.__traceback__,
                    )
                ),
            }

        if self.include_extra and entry.extra:
            data["extra"] = entry.extra

        if self.include_thread:
            data["thread_id"] = entry.thread_id
            data["process_id"] = entry.process_id

        data["message"] = entry.message

        return json.dumps(data, indent=self.indent, default=str)


class TextFormatter(LogFormatter):
    """Text log formatter."""

    def __init__(self, timestamp_format: str = "%Y-%m-%d %H:%M:%S"):
        self.timestamp_format = timestamp_format

    def format(self, entry: LogEntry) -> str:
        """Format log entry."""
        stamp = time.strftime(self.timestamp_format, time.localtime(entry.timestamp))
        line = f"{stamp} [{entry.level.value.upper()}] {entry.logger_name}: {entry.message}"
        if entry.context.component:
            line += f" component={entry.context.component}"
        if entry.context.proposal_id is not None:
            line += f" proposal={entry.context.proposal_id}"
        if entry.extra:
            pairs = " ".join(f"{key}={value}" for key, value in entry.extra.items())
            line += f" {pairs}"
        return line
