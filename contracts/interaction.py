"""Conversation interaction contract.

What a tool can ask of the conversation it runs in: resource revisions,
resource bookkeeping for messages, and usage statistics. Statistics are
owned by the interaction; tools report one outcome at a time through
``update_tool_stats`` and never mutate a snapshot.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from pydantic import BaseModel

from contracts.message import ContentParts
from contracts.metadata import FileMetadata, FileMetadataWithoutPath, TokenUsage, ToolUsageStats

if TYPE_CHECKING:
    from contracts.project import ProjectEditor


class ResourceToAdd(BaseModel):
    resource_uri: str
    metadata: FileMetadataWithoutPath
    resource_name: str | None = None


class AddedResource(BaseModel):
    resource_uri: str
    resource_metadata: FileMetadata


class ConversationInteraction(ABC):
    """Interface the host's conversation interaction must implement."""

    project_editor: ProjectEditor
    token_usage_conversation: TokenUsage

    @abstractmethod
    def get_file_metadata(self, resource_uri: str, revision_id: str) -> FileMetadata | None:
        """Return metadata for a resource revision, or None if unknown."""
        ...

    @abstractmethod
    async def read_resource_content(
        self,
        resource_uri: str,
        revision_id: str,
        metadata: FileMetadata | None = None,
    ) -> str | bytes:
        """Read the content of a resource revision."""
        ...

    @abstractmethod
    async def store_resource_revision(
        self,
        resource_uri: str,
        revision_id: str,
        content: str | bytes,
        metadata: FileMetadata | None = None,
    ) -> None:
        """Store a new revision of a resource."""
        ...

    @abstractmethod
    async def get_resource_revision(
        self,
        resource_uri: str,
        revision_id: str,
        metadata: FileMetadata | None = None,
    ) -> str | bytes | None:
        """Return a historical revision, or None if not found."""
        ...

    @abstractmethod
    def get_tool_usage_stats(self) -> ToolUsageStats:
        """Return a snapshot of tool usage statistics."""
        ...

    @abstractmethod
    def update_tool_stats(self, tool_name: str, success: bool) -> None:
        """Record a single outcome for *tool_name*."""
        ...

    @abstractmethod
    def add_resource_for_message(
        self,
        resource_uri: str,
        metadata: FileMetadataWithoutPath,
        message_id: str,
        tool_use_id: str | None = None,
    ) -> AddedResource:
        """Associate one resource with a message."""
        ...

    @abstractmethod
    def add_resources_for_message(
        self,
        resources: list[ResourceToAdd],
        message_id: str,
        tool_use_id: str | None = None,
    ) -> list[AddedResource]:
        """Associate several resources with a message."""
        ...

    @abstractmethod
    async def create_resource_content_blocks(
        self,
        resource_uri: str,
        revision_id: str,
        turn_index: int,
    ) -> ContentParts | None:
        """Build content blocks for a revision; None if it cannot be processed."""
        ...
