"""In-memory audit trail shown by the shell ``debug`` command.

Every entry is also forwarded to structlog, so the same record reaches the
structured log stream.  The in-memory list is bounded; the oldest entry is
evicted first.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum

import structlog

from kubesim.cluster.bus import EventBus, Unsubscribe
from kubesim.models.events import ClusterEvent

_log = structlog.get_logger(component="audit")


class AuditLevel(StrEnum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class AuditCategory(StrEnum):
    COMMAND = "COMMAND"
    EXECUTOR = "EXECUTOR"
    FILESYSTEM = "FILESYSTEM"
    CLUSTER = "CLUSTER"


@dataclass(frozen=True)
class AuditEntry:
    timestamp: datetime
    level: AuditLevel
    category: AuditCategory
    message: str

    def format(self) -> str:
        ts = self.timestamp.strftime("%H:%M:%S")
        return f"[{ts}] [{self.level}] [{self.category}] {self.message}"


class AuditLog:
    """Bounded audit trail.  ``attach`` subscribes it to every bus event."""

    def __init__(self, max_entries: int = 500) -> None:
        self._entries: deque[AuditEntry] = deque(maxlen=max_entries)
        self._unsubscribe: Unsubscribe | None = None

    def attach(self, bus: EventBus) -> None:
        self._unsubscribe = bus.subscribe_all(self._on_event)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_event(self, event: ClusterEvent) -> None:
        self.info(AuditCategory.CLUSTER, f"{event.type}: {event.kind.singular}/{event.name} in {event.namespace}")

    def record(self, level: AuditLevel, category: AuditCategory, message: str) -> AuditEntry:
        entry = AuditEntry(timestamp=datetime.now(UTC), level=level, category=category, message=message)
        self._entries.append(entry)
        match level:
            case AuditLevel.DEBUG:
                _log.debug("audit_entry", category=str(category), message=message)
            case AuditLevel.INFO:
                _log.info("audit_entry", category=str(category), message=message)
            case AuditLevel.WARN:
                _log.warning("audit_entry", category=str(category), message=message)
            case AuditLevel.ERROR:
                _log.error("audit_entry", category=str(category), message=message)
        return entry

    def debug(self, category: AuditCategory, message: str) -> AuditEntry:
        return self.record(AuditLevel.DEBUG, category, message)

    def info(self, category: AuditCategory, message: str) -> AuditEntry:
        return self.record(AuditLevel.INFO, category, message)

    def warn(self, category: AuditCategory, message: str) -> AuditEntry:
        return self.record(AuditLevel.WARN, category, message)

    def error(self, category: AuditCategory, message: str) -> AuditEntry:
        return self.record(AuditLevel.ERROR, category, message)

    def entries(self, category: AuditCategory | None = None) -> list[AuditEntry]:
        return [e for e in self._entries if category is None or e.category is category]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
