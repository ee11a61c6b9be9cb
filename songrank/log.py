"""Sync log: an explicit sink for per-subject status entries.

Components receive a ``SyncLog`` and append to it; the orchestrator flushes it
to the store once at the end of a pass. Every entry is also forwarded to the
standard ``songrank`` logger so command-line runs show progress.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from songrank.store import TableStore

logger = logging.getLogger("songrank")


class LogStatus(str, Enum):
    SUCCESS = "Success"
    SKIP = "Skip"
    ERROR = "Error"
    CLEANUP = "Cleanup"
    INFO = "Info"
    WARNING = "Warning"


_LEVELS = {
    LogStatus.ERROR: logging.ERROR,
    LogStatus.WARNING: logging.WARNING,
    LogStatus.SKIP: logging.INFO,
}

LOG_HEADERS = ["Time", "User", "Status", "Details"]


@dataclass
class LogEntry:
    timestamp: datetime
    subject: str
    status: LogStatus
    detail: str

    def to_row(self) -> list[Any]:
        return [
            self.timestamp.strftime("%H:%M:%S"),
            self.subject,
            self.status.value,
            self.detail,
        ]


@dataclass
class SyncLog:
    entries: list[LogEntry] = field(default_factory=list)

    def add(self, subject: str, status: LogStatus, detail: str = "") -> LogEntry:
        entry = LogEntry(datetime.now(), subject, LogStatus(status), detail)
        self.entries.append(entry)
        logger.log(
            _LEVELS.get(entry.status, logging.DEBUG),
            "%s [%s] %s", subject, entry.status.value, detail,
        )
        return entry

    def with_status(self, status: LogStatus) -> list[LogEntry]:
        return [e for e in self.entries if e.status == status]

    def to_table(self) -> list[list[Any]]:
        return [list(LOG_HEADERS), *[e.to_row() for e in self.entries]]

    def flush(self, store: TableStore, table_name: str) -> None:
        """Replace the log table with this pass's entries."""
        store.write_table(table_name, self.to_table())


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    """Attach a stream handler to the ``songrank`` logger (idempotent)."""
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(handler)
    return logger
