from __future__ import annotations

import json
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol, runtime_checkable

from ..models.batch_result import LogEntry
from ..models.error_record import ErrorRecord

"""Error log buffering and the audit sink interface.

- JSON Lines, fixed ErrorRecord schema (no extra keys)
- one ``errors-YYYYMMDD-HHMMSS.log`` (UTC) per buffer, created on first flush
- appends are guarded by a lock so parallel batches can share one buffer
"""

__all__ = [
    "AuditSink",
    "ErrorLogBuffer",
    "LOGS_DIR",
    "TIMESTAMP_FMT",
    "read_error_log",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


@runtime_checkable
class AuditSink(Protocol):
    """Append-only receiver for batch log entries."""

    def write(self, entry: LogEntry) -> None: ...


class ErrorLogBuffer:
    """In-memory buffer for error records. Flush writes JSON Lines.

    Also usable as an AuditSink: ``write`` keeps WARN / ERROR entries that
    carry an ``error_type`` in their data as ErrorRecords.
    """

    def __init__(self, log_dir: Path | str | None = None, *, source: str = "") -> None:
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None
        self._log_dir = Path(log_dir) if log_dir is not None else LOGS_DIR
        self._lock = threading.Lock()
        self.source = source

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._log_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._log_dir / f"errors-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        with self._lock:
            self._records.append(record)

    def write(self, entry: LogEntry) -> None:
        data = entry.data or {}
        error_type = data.get("error_type")
        if entry.level == "INFO" or not error_type:
            return
        self.append(
            ErrorRecord(
                timestamp=entry.timestamp,
                source=str(data.get("source", self.source)),
                row=int(data.get("row", -1)),
                error_type=str(error_type),
                message=entry.message,
                invoice_no=str(data.get("invoice_no", "")),
            )
        )

    @property
    def records(self) -> list[ErrorRecord]:
        with self._lock:
            return list(self._records)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records; returns the file path, None when nothing was written."""
        with self._lock:
            if not self._records:
                return None
            fp = self.file_path
            with fp.open("a", encoding="utf-8") as f:
                for r in self._records:
                    f.write(r.to_json_line() + "\n")
            self._records.clear()
            return fp


def read_error_log(path: Path) -> list[dict[str, object]]:
    """Parse a JSON Lines error log back into dicts."""
    with path.open(encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]
