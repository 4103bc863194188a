"""Audit query helpers.

Standalone functions over a log path, for read-only callers (the CLI)
that have no logger instance.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

from contracts.audit import AuditEntry, AuditEvent


def query_by_invocation(log_path: str | Path, invocation_id: str) -> list[AuditEntry]:
    """Return all audit entries for a given invocation."""
    return [e for e in read_entries(log_path) if e.invocation_id == invocation_id]


def query_by_event(
    log_path: str | Path, event: AuditEvent, limit: int = 100
) -> list[AuditEntry]:
    """Return recent entries of a given event type."""
    matches = [e for e in read_entries(log_path) if e.event == event]
    return matches[-limit:]


def tail(log_path: str | Path, n: int = 20) -> list[AuditEntry]:
    """Return the last N entries from the audit log."""
    return read_entries(log_path)[-n:]


def query_by_tool(
    log_path: str | Path, tool_name: str, limit: int = 100
) -> list[AuditEntry]:
    """Return recent entries for one tool, oldest first."""
    matches = [e for e in read_entries(log_path) if e.tool_name == tool_name]
    return matches[-limit:]


def outcome_counts(log_path: str | Path) -> dict[str, dict[str, int]]:
    """Per-tool totals of results, errors and rejected inputs.

    Only tools with at least one such outcome appear.
    """
    kinds = {
        AuditEvent.TOOL_RESULT: "result",
        AuditEvent.TOOL_ERROR: "error",
        AuditEvent.TOOL_REJECT: "reject",
    }
    counts: dict[str, dict[str, int]] = {}
    for entry in read_entries(log_path):
        kind = kinds.get(entry.event)
        if kind is None:
            continue
        per_tool = counts.setdefault(entry.tool_name, dict.fromkeys(kinds.values(), 0))
        per_tool[kind] += 1
    return counts


def query_filtered(
    log_path: str | Path,
    *,
    event: AuditEvent | None = None,
    tool_name: str | None = None,
    invocation_id: str | None = None,
    since: datetime | None = None,
    until: datetime | None = None,
    limit: int = 100,
    offset: int = 0,
) -> tuple[list[AuditEntry], int]:
    """Return paginated, filtered audit entries, most recent first.

    Returns (entries, total_matching_count).
    """
    filtered = read_entries(log_path)

    if event is not None:
        filtered = [e for e in filtered if e.event == event]
    if tool_name is not None:
        filtered = [e for e in filtered if e.tool_name == tool_name]
    if invocation_id is not None:
        filtered = [e for e in filtered if e.invocation_id == invocation_id]
    if since is not None:
        filtered = [e for e in filtered if e.ts >= since]
    if until is not None:
        filtered = [e for e in filtered if e.ts <= until]

    total = len(filtered)
    filtered.sort(key=lambda e: e.ts, reverse=True)
    return filtered[offset : offset + limit], total


def read_entries(log_path: str | Path) -> list[AuditEntry]:
    p = Path(log_path)
    if not p.exists():
        return []
    entries: list[AuditEntry] = []
    with p.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            entries.append(AuditEntry(**json.loads(line)))
    return entries
