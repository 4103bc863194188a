"""Integration tests: registry, runner, audit log and formatting together."""

from __future__ import annotations

from pathlib import Path

import pytest

from contracts.audit import AuditEvent
from contracts.message import ToolInvocation
from contracts.settings import ToolsmithSettings
from contracts.tool_sdk import Destination
from toolkit.audit.logger import JsonlAuditLogger
from toolkit.audit.query import query_filtered
from toolkit.formatting import node_to_html
from toolkit.registry import create_default_registry
from toolkit.runner import ToolRunner
from toolkit.testing import FilesystemProjectEditor, InMemoryInteraction
from toolkit.tools.open_in_browser import OpenInBrowserTool


@pytest.fixture()
def project(tmp_path: Path) -> FilesystemProjectEditor:
    root = tmp_path / "project"
    (root / "src").mkdir(parents=True)
    (root / "src" / "main.py").write_text("def search_files():\n    return []\n")
    (root / "src" / "other.py").write_text("print('nothing here')\n")
    (root / "index.html").write_text("<html></html>")
    return FilesystemProjectEditor(root, "pipeline")


@pytest.fixture()
def audit_path(tmp_path: Path) -> Path:
    return tmp_path / "audit.jsonl"


def _pipeline(audit_path: Path, opened: list[str]):
    async def opener(url: str, browser: str) -> str:
        opened.append(url)
        return f"Successfully sent command to open {url} in default browser"

    registry = create_default_registry()
    registry.register(OpenInBrowserTool(opener=opener))
    return registry, ToolRunner(registry, audit_logger=JsonlAuditLogger(audit_path))


class TestToolPipeline:
    @pytest.mark.asyncio
    async def test_search_then_open(self, project: FilesystemProjectEditor, audit_path: Path) -> None:
        opened: list[str] = []
        registry, runner = _pipeline(audit_path, opened)
        interaction = InMemoryInteraction(project)

        search = await runner.run(
            interaction,
            ToolInvocation(
                tool_use_id="use-search",
                tool_name="search_project",
                tool_input={"contentPattern": "def search", "filePattern": "*.py"},
            ),
            project,
        )
        assert search.ok
        files = search.result.host_response.data["files"]
        assert files == ["src/main.py"]

        browse = await runner.run(
            interaction,
            ToolInvocation(
                tool_use_id="use-open",
                tool_name="open_in_browser",
                tool_input={"urls": ["index.html", "https://example.com"]},
            ),
            project,
        )
        assert browse.ok
        assert opened == [(Path(project.project_root) / "index.html").as_uri(), "https://example.com"]

        stats = interaction.get_tool_usage_stats()
        assert stats.tool_counts == {"search_project": 1, "open_in_browser": 1}

        events = [e.event for e in JsonlAuditLogger(audit_path).query_by_invocation("use-search")]
        assert events == [AuditEvent.TOOL_VALIDATE, AuditEvent.TOOL_CALL, AuditEvent.TOOL_RESULT]

    @pytest.mark.asyncio
    async def test_rejection_and_failure_are_audited(
        self, project: FilesystemProjectEditor, audit_path: Path
    ) -> None:
        registry, runner = _pipeline(audit_path, [])
        interaction = InMemoryInteraction(project)

        rejected = await runner.run(
            interaction,
            ToolInvocation(tool_use_id="bad-date", tool_name="search_project", tool_input={"dateAfter": "01/02/2024"}),
            project,
        )
        assert not rejected.validation.validated

        failed = await runner.run(
            interaction,
            ToolInvocation(tool_use_id="escape", tool_name="open_in_browser", tool_input={"urls": ["../x.html"]}),
            project,
        )
        assert failed.error == "Path ../x.html is outside project root"
        assert interaction.tool_stats["open_in_browser"].failure == 1

        rejects, total = query_filtered(audit_path, event=AuditEvent.TOOL_REJECT)
        assert total == 1 and rejects[0].invocation_id == "bad-date"
        errors, _ = query_filtered(audit_path, event=AuditEvent.TOOL_ERROR, tool_name="open_in_browser")
        assert errors[0].detail["error_type"] == "PathOutsideProjectError"

    @pytest.mark.asyncio
    async def test_result_renders_for_both_destinations(
        self, project: FilesystemProjectEditor, audit_path: Path
    ) -> None:
        registry, runner = _pipeline(audit_path, [])
        tool = registry.get("search_project")
        outcome = await runner.run(
            InMemoryInteraction(project),
            ToolInvocation(tool_use_id="u1", tool_name="search_project", tool_input={"filePattern": "src/**/*.py"}),
            project,
        )

        console = tool.format_tool_result(outcome.result, Destination.CONSOLE)
        rich = tool.format_tool_result(outcome.result, Destination.RICH)
        assert console.preview == rich.preview
        assert console.preview == 'Found 2 files matching file pattern "src/**/*.py"'
        assert "src/main.py" in console.content
        html = node_to_html(rich.content)
        assert "src/main.py" in html and "src/other.py" in html

    def test_disabled_tool_is_not_registered(self) -> None:
        settings = ToolsmithSettings.model_validate({"tools": {"open_in_browser": {"enabled": False}}})
        registry = create_default_registry(settings)
        assert registry.list_tools() == ["search_project"]
        assert [d["function"]["name"] for d in registry.get_openai_definitions()] == ["search_project"]
