"""In-process collaborators for exercising tools without a host.

``FilesystemProjectEditor`` works on a real directory with a real
containment check; ``InMemoryInteraction`` keeps revisions, metadata
and statistics in memory. ``with_test_project`` wires a temporary
project for a test.
"""

from __future__ import annotations

import base64
import tempfile
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from contracts.data_source import (
    DataSourceAccessMethod,
    DataSourceCapability,
    DataSourceConfig,
    DataSourceConnection,
    DataSourceProviderType,
)
from contracts.errors import PathOutsideProjectError, ResourceNotFoundError
from contracts.interaction import AddedResource, ConversationInteraction, ResourceToAdd
from contracts.message import ContentParts, ImagePart, ImageSource, TextPart
from contracts.metadata import (
    FileMetadata,
    FileMetadataWithoutPath,
    FileType,
    LastToolUse,
    TokenUsage,
    ToolStats,
    ToolUsageStats,
)
from contracts.project import PreparedFile, ProjectEditor

_IMAGE_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


# ── Project editor ───────────────────────────────────────────────────


class FilesystemProjectEditor(ProjectEditor):
    """Project editor rooted at a local directory.

    ``log_and_commit_changes`` records changes in memory; it does not
    write files.
    """

    def __init__(self, root: str | Path, project_id: str = "test-project") -> None:
        self._root = Path(root).resolve()
        self._project_id = project_id
        self.changed_files: set[str] = set()
        self.change_contents: dict[str, str] = {}
        self.commits: list[list[str]] = []
        self._connections = [
            DataSourceConnection(
                id="ds-local",
                name="Local filesystem",
                provider_type=DataSourceProviderType.FILESYSTEM,
                access_method=DataSourceAccessMethod.BB,
                capabilities=list(DataSourceCapability),
                config=DataSourceConfig(data_source_root=str(self._root)),
                is_primary=True,
                uri_prefix="file://",
            )
        ]

    @property
    def project_id(self) -> str:
        return self._project_id

    @property
    def project_root(self) -> str:
        return str(self._root)

    @property
    def ds_connections(self) -> list[DataSourceConnection]:
        return self._connections

    async def is_path_within_project(self, path: str) -> bool:
        try:
            (self._root / path).resolve().relative_to(self._root)
        except ValueError:
            return False
        return True

    async def resolve_project_file_path(self, path: str) -> str:
        if not await self.is_path_within_project(path):
            raise PathOutsideProjectError(path)
        return str((self._root / path).resolve())

    async def log_and_commit_changes(
        self,
        interaction: ConversationInteraction,
        files: list[str],
        contents: list[str],
    ) -> None:
        if len(files) != len(contents):
            raise ValueError("files and contents must have the same length")
        for name, content in zip(files, contents):
            self.changed_files.add(name)
            self.change_contents[name] = content
        self.commits.append(list(files))

    async def prepare_files_for_conversation(self, file_names: list[str]) -> list[PreparedFile]:
        prepared: list[PreparedFile] = []
        for name in file_names:
            path = Path(await self.resolve_project_file_path(name))
            if not path.is_file():
                raise ResourceNotFoundError(name)
            st = path.stat()
            mime_type = _IMAGE_TYPES.get(path.suffix.lower())
            prepared.append(
                PreparedFile(
                    file_name=name,
                    metadata=FileMetadataWithoutPath(
                        type=FileType.IMAGE if mime_type else FileType.TEXT,
                        mime_type=mime_type,
                        size=st.st_size,
                        last_modified=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
                    ),
                )
            )
        return prepared


# ── Interaction ──────────────────────────────────────────────────────


class InMemoryInteraction(ConversationInteraction):
    """Conversation interaction backed by dictionaries."""

    def __init__(
        self,
        project_editor: ProjectEditor,
        token_usage: TokenUsage | None = None,
    ) -> None:
        self.project_editor = project_editor
        self.token_usage_conversation = token_usage or TokenUsage()
        self.tool_stats: dict[str, ToolStats] = {}
        self.message_resources: dict[str, list[AddedResource]] = {}
        self._revisions: dict[tuple[str, str], str | bytes] = {}
        self._metadata: dict[tuple[str, str], FileMetadata] = {}
        self._usage = ToolUsageStats()
        self._lock = threading.Lock()

    def get_file_metadata(self, resource_uri: str, revision_id: str) -> FileMetadata | None:
        return self._metadata.get((resource_uri, revision_id))

    async def read_resource_content(
        self,
        resource_uri: str,
        revision_id: str,
        metadata: FileMetadata | None = None,
    ) -> str | bytes:
        try:
            return self._revisions[(resource_uri, revision_id)]
        except KeyError:
            raise ResourceNotFoundError(resource_uri) from None

    async def store_resource_revision(
        self,
        resource_uri: str,
        revision_id: str,
        content: str | bytes,
        metadata: FileMetadata | None = None,
    ) -> None:
        self._revisions[(resource_uri, revision_id)] = content
        if metadata is not None:
            self._metadata[(resource_uri, revision_id)] = metadata

    async def get_resource_revision(
        self,
        resource_uri: str,
        revision_id: str,
        metadata: FileMetadata | None = None,
    ) -> str | bytes | None:
        return self._revisions.get((resource_uri, revision_id))

    def get_tool_usage_stats(self) -> ToolUsageStats:
        with self._lock:
            return self._usage.model_copy(deep=True)

    def update_tool_stats(self, tool_name: str, success: bool) -> None:
        with self._lock:
            self._usage.record(tool_name, success)
            stats = self.tool_stats.setdefault(tool_name, ToolStats())
            stats.count += 1
            if success:
                stats.success += 1
            else:
                stats.failure += 1
            stats.last_use = LastToolUse(
                success=success,
                timestamp=datetime.now(timezone.utc).isoformat(),
            )

    def add_resource_for_message(
        self,
        resource_uri: str,
        metadata: FileMetadataWithoutPath,
        message_id: str,
        tool_use_id: str | None = None,
    ) -> AddedResource:
        # The message id doubles as the revision id of the added resource.
        resource_metadata = FileMetadata.with_path(
            resource_uri,
            metadata.model_copy(update={"message_id": message_id, "tool_use_id": tool_use_id}),
        )
        self._metadata[(resource_uri, message_id)] = resource_metadata
        added = AddedResource(resource_uri=resource_uri, resource_metadata=resource_metadata)
        self.message_resources.setdefault(message_id, []).append(added)
        return added

    def add_resources_for_message(
        self,
        resources: list[ResourceToAdd],
        message_id: str,
        tool_use_id: str | None = None,
    ) -> list[AddedResource]:
        return [
            self.add_resource_for_message(r.resource_uri, r.metadata, message_id, tool_use_id)
            for r in resources
        ]

    async def create_resource_content_blocks(
        self,
        resource_uri: str,
        revision_id: str,
        turn_index: int,
    ) -> ContentParts | None:
        metadata = self.get_file_metadata(resource_uri, revision_id)
        content = self._revisions.get((resource_uri, revision_id))
        if metadata is None or content is None:
            return None

        if metadata.type == FileType.IMAGE:
            if metadata.mime_type is None:
                return None
            raw = content.encode("utf-8") if isinstance(content, str) else content
            return [
                ImagePart(
                    source=ImageSource(
                        media_type=metadata.mime_type,
                        data=base64.b64encode(raw).decode("ascii"),
                    )
                )
            ]

        text = content.decode("utf-8", errors="replace") if isinstance(content, bytes) else content
        return [
            TextPart(
                text=(
                    f"File: {metadata.path} (revision {revision_id}, turn {turn_index})\n"
                    f"{text}"
                )
            )
        ]


# ── Harness ──────────────────────────────────────────────────────────


@contextmanager
def with_test_project(project_id: str = "test-project") -> Iterator[FilesystemProjectEditor]:
    """Yield a project editor on a fresh temporary directory."""
    with tempfile.TemporaryDirectory(prefix="toolsmith-") as tmp:
        yield FilesystemProjectEditor(tmp, project_id)
