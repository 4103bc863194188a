"""Audit logging contracts.

Append-only JSONL, one record per tool pipeline event. Every record is
keyed by the invocation's ``tool_use_id``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class AuditEvent(str, Enum):
    TOOL_VALIDATE = "tool.validate"
    TOOL_REJECT = "tool.reject"
    TOOL_CALL = "tool.call"
    TOOL_RESULT = "tool.result"
    TOOL_ERROR = "tool.error"
    TOOL_FINALIZE = "tool.finalize"


class AuditEntry(BaseModel):
    """A single audit log record."""

    ts: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    invocation_id: str
    event: AuditEvent
    tool_name: str = ""
    project_id: str = ""
    detail: dict[str, Any] = {}  # validation messages, error text, message id, etc.


class AuditLogger(ABC):
    """Interface for the append-only audit logger."""

    @abstractmethod
    def log(self, entry: AuditEntry) -> None:
        """Append an entry to the audit log."""
        ...

    @abstractmethod
    def query_by_invocation(self, invocation_id: str) -> list[AuditEntry]:
        """Return all entries for a given invocation."""
        ...

    @abstractmethod
    def query_by_event(self, event: AuditEvent, limit: int = 100) -> list[AuditEntry]:
        """Return recent entries of a given event type."""
        ...

    @abstractmethod
    def query_by_tool(self, tool_name: str, limit: int = 100) -> list[AuditEntry]:
        """Return recent entries for one tool."""
        ...

    @abstractmethod
    def tail(self, n: int = 20) -> list[AuditEntry]:
        """Return the last N entries."""
        ...
