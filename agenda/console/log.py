"""
Visible event log of the client application.

Entries are kept newest first and bounded, so the panel never grows without
limit. Each entry is also forwarded to the standard ``logging`` tree.
"""
import json
import logging
import re
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)

MAX_LOGS = 50
CANCELLATION_MARKER = "cancelled by user"
QUOTED_ELEMENT = re.compile(r"'([^']*)'")


class LogLevel(str, Enum):
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    API = "API"


_PY_LEVELS = {
    LogLevel.INFO: logging.INFO,
    LogLevel.API: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class LogEntry:
    timestamp: str
    level: LogLevel
    message: str
    details: Optional[str] = None


def format_details(details: Any) -> Optional[str]:
    if details is None:
        return None
    if isinstance(details, str):
        return details
    return json.dumps(details, indent=2, default=str, ensure_ascii=False)


class EventLog:
    def __init__(self, max_entries: int = MAX_LOGS, clock: Callable[[], datetime] = datetime.now):
        self._entries = deque(maxlen=max_entries)
        self._clock = clock

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> List[LogEntry]:
        return list(self._entries)

    @property
    def last(self) -> Optional[LogEntry]:
        return self._entries[0] if self._entries else None

    def add(self, level: LogLevel, message: str, details: Any = None) -> LogEntry:
        entry = LogEntry(
            timestamp=self._clock().strftime("%H:%M:%S"),
            level=level,
            message=message,
            details=format_details(details),
        )
        self._entries.appendleft(entry)
        logger.log(_PY_LEVELS[level], "[%s] %s", level.value, message)
        return entry

    def clear(self) -> None:
        self._entries.clear()
        self.add(LogLevel.INFO, "Action 'Clear log' executed.")

    @property
    def last_is_cancellation(self) -> bool:
        return self.last is not None and CANCELLATION_MARKER in self.last.message

    def problem_report(self) -> Optional[str]:
        """Text for reporting the latest entry, or None if there is nothing to report."""
        entry = self.last
        if entry is None or self.last_is_cancellation:
            return None
        match = QUOTED_ELEMENT.search(entry.message)
        element = match.group(1) if match else "the last action"
        return (
            f"Problem detected: the element '{element}' is not working as expected.\n\n"
            f"Log details for analysis:\n[{entry.timestamp}][{entry.level.value}] {entry.message}"
        )
