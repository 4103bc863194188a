"""Unit tests for the in-process project editor and interaction."""

from __future__ import annotations

import base64
from datetime import datetime, timezone
from pathlib import Path

import pytest

from contracts.errors import PathOutsideProjectError, ResourceNotFoundError
from contracts.interaction import ResourceToAdd
from contracts.message import ImagePart, TextPart
from contracts.metadata import FileMetadata, FileMetadataWithoutPath, FileType
from toolkit.testing import FilesystemProjectEditor, InMemoryInteraction, with_test_project


def _meta(file_type: FileType = FileType.TEXT, mime_type: str | None = None) -> FileMetadataWithoutPath:
    return FileMetadataWithoutPath(
        type=file_type,
        mime_type=mime_type,
        size=5,
        last_modified=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture()
def editor(tmp_path: Path) -> FilesystemProjectEditor:
    root = tmp_path / "project"
    root.mkdir()
    (root / "notes.md").write_text("hello")
    (root / "logo.png").write_bytes(b"\x89PNG")
    return FilesystemProjectEditor(root, "proj-1")


# ── FilesystemProjectEditor ─────────────────────────────────────────


class TestFilesystemProjectEditor:
    def test_identity(self, editor: FilesystemProjectEditor) -> None:
        assert editor.project_id == "proj-1"
        assert Path(editor.project_root).is_absolute()
        assert editor.ds_connections[0].is_primary

    @pytest.mark.asyncio
    async def test_containment(self, editor: FilesystemProjectEditor) -> None:
        assert await editor.is_path_within_project("notes.md")
        assert await editor.is_path_within_project("sub/dir/new.txt")
        assert not await editor.is_path_within_project("../outside.txt")
        assert not await editor.is_path_within_project("sub/../../outside.txt")

    @pytest.mark.asyncio
    async def test_resolve(self, editor: FilesystemProjectEditor) -> None:
        resolved = await editor.resolve_project_file_path("notes.md")
        assert resolved == str(Path(editor.project_root) / "notes.md")
        with pytest.raises(PathOutsideProjectError):
            await editor.resolve_project_file_path("../etc/passwd")

    @pytest.mark.asyncio
    async def test_prepare_files(self, editor: FilesystemProjectEditor) -> None:
        prepared = await editor.prepare_files_for_conversation(["notes.md", "logo.png"])
        assert [p.file_name for p in prepared] == ["notes.md", "logo.png"]
        assert prepared[0].metadata.type == FileType.TEXT
        assert prepared[0].metadata.size == 5
        assert prepared[1].metadata.type == FileType.IMAGE
        assert prepared[1].metadata.mime_type == "image/png"

    @pytest.mark.asyncio
    async def test_prepare_missing_file(self, editor: FilesystemProjectEditor) -> None:
        with pytest.raises(ResourceNotFoundError, match="File gone.md does not exist"):
            await editor.prepare_files_for_conversation(["gone.md"])

    @pytest.mark.asyncio
    async def test_log_and_commit_records_only(self, editor: FilesystemProjectEditor) -> None:
        interaction = InMemoryInteraction(editor)
        await editor.log_and_commit_changes(interaction, ["a.txt"], ["new"])
        assert editor.changed_files == {"a.txt"}
        assert editor.change_contents == {"a.txt": "new"}
        assert editor.commits == [["a.txt"]]
        assert not (Path(editor.project_root) / "a.txt").exists()

    @pytest.mark.asyncio
    async def test_log_and_commit_length_mismatch(self, editor: FilesystemProjectEditor) -> None:
        with pytest.raises(ValueError):
            await editor.log_and_commit_changes(InMemoryInteraction(editor), ["a", "b"], ["x"])


# ── InMemoryInteraction ─────────────────────────────────────────────


class TestInMemoryInteraction:
    def test_tool_stats(self, editor: FilesystemProjectEditor) -> None:
        interaction = InMemoryInteraction(editor)
        interaction.update_tool_stats("search_project", True)
        interaction.update_tool_stats("search_project", False)

        stats = interaction.tool_stats["search_project"]
        assert (stats.count, stats.success, stats.failure) == (2, 1, 1)
        assert stats.last_use is not None and stats.last_use.success is False

        usage = interaction.get_tool_usage_stats()
        assert usage.tool_counts == {"search_project": 2}
        assert usage.last_tool_use == "search_project"
        assert usage.last_tool_success is False

    def test_usage_stats_are_a_snapshot(self, editor: FilesystemProjectEditor) -> None:
        interaction = InMemoryInteraction(editor)
        interaction.update_tool_stats("t", True)
        snapshot = interaction.get_tool_usage_stats()
        interaction.update_tool_stats("t", True)
        assert snapshot.tool_counts["t"] == 1
        assert interaction.get_tool_usage_stats().tool_counts["t"] == 2

    @pytest.mark.asyncio
    async def test_revisions(self, editor: FilesystemProjectEditor) -> None:
        interaction = InMemoryInteraction(editor)
        await interaction.store_resource_revision("file:./a.txt", "r1", "one")
        assert await interaction.read_resource_content("file:./a.txt", "r1") == "one"
        assert await interaction.get_resource_revision("file:./a.txt", "r2") is None
        with pytest.raises(ResourceNotFoundError):
            await interaction.read_resource_content("file:./a.txt", "r2")

    def test_add_resources_for_message(self, editor: FilesystemProjectEditor) -> None:
        interaction = InMemoryInteraction(editor)
        added = interaction.add_resources_for_message(
            [ResourceToAdd(resource_uri="file:./a.txt", metadata=_meta())],
            message_id="msg-1",
            tool_use_id="use-1",
        )
        assert added[0].resource_metadata.path == "file:./a.txt"
        assert added[0].resource_metadata.message_id == "msg-1"
        assert added[0].resource_metadata.tool_use_id == "use-1"
        assert interaction.message_resources["msg-1"] == added
        assert interaction.get_file_metadata("file:./a.txt", "msg-1") == added[0].resource_metadata

    @pytest.mark.asyncio
    async def test_text_content_blocks(self, editor: FilesystemProjectEditor) -> None:
        interaction = InMemoryInteraction(editor)
        meta = FileMetadata.with_path("a.txt", _meta())
        await interaction.store_resource_revision("file:./a.txt", "r1", "hello", meta)

        blocks = await interaction.create_resource_content_blocks("file:./a.txt", "r1", 3)
        assert blocks == [TextPart(text="File: a.txt (revision r1, turn 3)\nhello")]

    @pytest.mark.asyncio
    async def test_image_content_blocks(self, editor: FilesystemProjectEditor) -> None:
        interaction = InMemoryInteraction(editor)
        meta = FileMetadata.with_path("logo.png", _meta(FileType.IMAGE, "image/png"))
        await interaction.store_resource_revision("file:./logo.png", "r1", b"\x89PNG", meta)

        blocks = await interaction.create_resource_content_blocks("file:./logo.png", "r1", 0)
        assert isinstance(blocks[0], ImagePart)
        assert blocks[0].source.media_type == "image/png"
        assert base64.b64decode(blocks[0].source.data) == b"\x89PNG"

    @pytest.mark.asyncio
    async def test_content_blocks_unknown_revision(self, editor: FilesystemProjectEditor) -> None:
        interaction = InMemoryInteraction(editor)
        assert await interaction.create_resource_content_blocks("file:./x", "r9", 0) is None


class TestWithTestProject:
    def test_temporary_root_is_removed(self) -> None:
        with with_test_project("tmp-proj") as project:
            root = Path(project.project_root)
            assert root.is_dir()
            assert root.name.startswith("toolsmith-")
            assert project.project_id == "tmp-proj"
        assert not root.exists()
