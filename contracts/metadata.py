"""Token usage, file metadata, and tool usage statistics.

Plain data shapes owned by the host's collaborators. Tools read them;
only the owning collaborator mutates them.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


ImageMediaType = Literal["image/jpeg", "image/png", "image/gif", "image/webp"]


class TokenUsage(BaseModel):
    """Token counters for a conversation or a single operation."""

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    cache_creation_input_tokens: int | None = None
    cache_read_input_tokens: int | None = None


class FileType(str, Enum):
    TEXT = "text"
    IMAGE = "image"


class FileMetadataWithoutPath(BaseModel):
    """File metadata as returned before a path/URI is attached."""

    type: FileType
    mime_type: ImageMediaType | None = None
    size: int
    last_modified: datetime
    message_id: str | None = None
    tool_use_id: str | None = None
    error: str | None = None


class FileMetadata(FileMetadataWithoutPath):
    """Metadata about a file in the project."""

    path: str

    @classmethod
    def with_path(cls, path: str, metadata: FileMetadataWithoutPath) -> FileMetadata:
        return cls(path=path, **metadata.model_dump())


class LastToolUse(BaseModel):
    success: bool
    timestamp: str


class ToolStats(BaseModel):
    """Per-tool statistics with timing of the last use."""

    count: int = 0
    success: int = 0
    failure: int = 0
    last_use: LastToolUse | None = None


class ToolOutcomeCounts(BaseModel):
    success: int = 0
    failure: int = 0


class ToolUsageStats(BaseModel):
    """Aggregated statistics across all tools in a session."""

    tool_counts: dict[str, int] = Field(default_factory=dict)
    tool_results: dict[str, ToolOutcomeCounts] = Field(default_factory=dict)
    last_tool_use: str = ""
    last_tool_success: bool = False

    def record(self, tool_name: str, success: bool) -> None:
        """Record one outcome for *tool_name*.

        Callers that share an instance across threads must serialise calls.
        """
        self.tool_counts[tool_name] = self.tool_counts.get(tool_name, 0) + 1
        counts = self.tool_results.setdefault(tool_name, ToolOutcomeCounts())
        if success:
            counts.success += 1
        else:
            counts.failure += 1
        self.last_tool_use = tool_name
        self.last_tool_success = success


class ConversationStats(BaseModel):
    """Counts that describe a conversation's progress."""

    statement_count: int = 0
    statement_turn_count: int = 0
    conversation_turn_count: int = 0
