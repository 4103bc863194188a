"""Project editor contract.

The narrow capability a tool gets over the host's project files. Tools
never receive raw handles: every caller-supplied path goes through
``is_path_within_project`` before it is read, written, or opened.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from pydantic import BaseModel

from contracts.data_source import DataSourceConnection
from contracts.metadata import FileMetadataWithoutPath

if TYPE_CHECKING:
    from contracts.interaction import ConversationInteraction


class PreparedFile(BaseModel):
    file_name: str
    metadata: FileMetadataWithoutPath


class ProjectEditor(ABC):
    """Interface the host's project editor must implement."""

    changed_files: set[str]
    change_contents: dict[str, str]

    @property
    @abstractmethod
    def project_id(self) -> str:
        """Unique identifier for the project."""
        ...

    @property
    @abstractmethod
    def project_root(self) -> str:
        """Absolute root directory of the project."""
        ...

    @property
    def ds_connections(self) -> list[DataSourceConnection]:
        """Data sources attached to the project. Empty unless overridden."""
        return []

    @abstractmethod
    async def log_and_commit_changes(
        self,
        interaction: ConversationInteraction,
        files: list[str],
        contents: list[str],
    ) -> None:
        """Record changes to *files* and commit them to project history."""
        ...

    @abstractmethod
    async def prepare_files_for_conversation(
        self, file_names: list[str]
    ) -> list[PreparedFile]:
        """Collect metadata for files about to be added to a conversation."""
        ...

    @abstractmethod
    async def resolve_project_file_path(self, path: str) -> str:
        """Return the normalized absolute path of a project-relative *path*."""
        ...

    @abstractmethod
    async def is_path_within_project(self, path: str) -> bool:
        """Is *path* inside the project root once resolved?"""
        ...
