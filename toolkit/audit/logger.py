"""Append-only JSONL audit logger for the tool pipeline."""

from __future__ import annotations

import threading
from pathlib import Path

from contracts.audit import AuditEntry, AuditEvent, AuditLogger
from toolkit.audit import query


class JsonlAuditLogger(AuditLogger):
    """Thread-safe, append-only JSONL audit logger.

    Reads go through ``toolkit.audit.query`` so the CLI and a live logger
    see the same view of the file.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    def log(self, entry: AuditEntry) -> None:
        line = entry.model_dump_json() + "\n"
        with self._lock:
            with self._path.open("a", encoding="utf-8") as f:
                f.write(line)

    def query_by_invocation(self, invocation_id: str) -> list[AuditEntry]:
        return query.query_by_invocation(self._path, invocation_id)

    def query_by_event(self, event: AuditEvent, limit: int = 100) -> list[AuditEntry]:
        return query.query_by_event(self._path, event, limit=limit)

    def query_by_tool(self, tool_name: str, limit: int = 100) -> list[AuditEntry]:
        return query.query_by_tool(self._path, tool_name, limit=limit)

    def outcome_counts(self) -> dict[str, dict[str, int]]:
        """Per-tool ``{"result", "error", "reject"}`` totals."""
        return query.outcome_counts(self._path)

    def tail(self, n: int = 20) -> list[AuditEntry]:
        return query.tail(self._path, n=n)
