"""Unit tests for the tool runner and finalization table."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pytest

from contracts.audit import AuditEvent
from contracts.errors import ToolExecutionError, ToolNotFoundError
from contracts.message import ToolInvocation
from contracts.tool_sdk import HostResponse, PendingFinalization, ToolRunResult
from toolkit.audit.logger import JsonlAuditLogger
from toolkit.base import BaseTool
from toolkit.formatting import fragments as f
from toolkit.formatting.entry import LogEntryFragments
from toolkit.registry import ToolRegistry
from toolkit.runner import FinalizationTable, ToolRunner
from toolkit.testing import FilesystemProjectEditor, InMemoryInteraction


# ── helpers ─────────────────────────────────────────────────────────


class CountingTool(BaseTool):
    """Counts runs; fails when asked to; defers a callback when asked to."""

    def __init__(self) -> None:
        super().__init__("counter", "Counts invocations.")
        self.runs = 0
        self.finalized: list[str] = []

    @property
    def input_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {"fail": {"type": "boolean"}, "defer": {"type": "boolean"}},
            "required": ["fail"],
        }

    async def run(self, interaction, invocation, project_editor) -> ToolRunResult:
        self.runs += 1
        if invocation.tool_input["fail"]:
            raise ToolExecutionError("counter exploded", tool_name=self.name)
        finalization = None
        if invocation.tool_input.get("defer"):
            finalization = PendingFinalization(
                invocation_id=invocation.tool_use_id,
                callback=self.finalized.append,
            )
        return ToolRunResult(
            result_content=f"run {self.runs}",
            tool_response="counted",
            host_response=HostResponse(data={"runs": self.runs}),
            finalization=finalization,
        )

    def describe_tool_use(self, tool_input: dict[str, Any]) -> LogEntryFragments:
        return LogEntryFragments(title=f.title("Tool Use", self.name), content=f.text("count"), preview="count")

    def describe_tool_result(self, result_content: Any) -> LogEntryFragments:
        return LogEntryFragments(title=f.title("Tool Result", self.name), content=f.text("done"), preview="done")


def _setup(tmp_path: Path) -> tuple[ToolRunner, CountingTool, InMemoryInteraction, FilesystemProjectEditor, JsonlAuditLogger]:
    tool = CountingTool()
    registry = ToolRegistry()
    registry.register(tool)
    audit = JsonlAuditLogger(tmp_path / "audit.jsonl")
    editor = FilesystemProjectEditor(tmp_path, "proj-1")
    return ToolRunner(registry, audit_logger=audit), tool, InMemoryInteraction(editor), editor, audit


def _inv(tool_input: dict, tool_use_id: str = "use-1", tool_name: str = "counter") -> ToolInvocation:
    return ToolInvocation(tool_use_id=tool_use_id, tool_name=tool_name, tool_input=tool_input)


# ── runner tests ────────────────────────────────────────────────────


class TestToolRunner:
    @pytest.mark.asyncio
    async def test_success(self, tmp_path: Path) -> None:
        runner, tool, interaction, editor, audit = _setup(tmp_path)
        outcome = await runner.run(interaction, _inv({"fail": False}), editor)

        assert outcome.ok
        assert outcome.result.tool_response == "counted"
        assert outcome.invocation.tool_validation.validated
        assert interaction.get_tool_usage_stats().tool_results["counter"].success == 1
        events = [e.event for e in audit.query_by_invocation("use-1")]
        assert events == [AuditEvent.TOOL_VALIDATE, AuditEvent.TOOL_CALL, AuditEvent.TOOL_RESULT]
        assert all(e.project_id == "proj-1" for e in audit.tail())

    @pytest.mark.asyncio
    async def test_rejected_input_is_not_executed(self, tmp_path: Path) -> None:
        runner, tool, interaction, editor, audit = _setup(tmp_path)
        outcome = await runner.run(interaction, _inv({"fail": "nope"}), editor)

        assert not outcome.ok
        assert outcome.validation.validated is False
        assert "fail" in outcome.validation.results
        assert tool.runs == 0
        assert interaction.get_tool_usage_stats().tool_counts == {}
        entries = audit.query_by_invocation("use-1")
        assert [e.event for e in entries] == [AuditEvent.TOOL_REJECT]
        assert entries[0].detail["errors"]

    @pytest.mark.asyncio
    async def test_execution_failure(self, tmp_path: Path) -> None:
        runner, tool, interaction, editor, audit = _setup(tmp_path)
        outcome = await runner.run(interaction, _inv({"fail": True}), editor)

        assert not outcome.ok
        assert outcome.error == "counter exploded"
        assert outcome.result is None
        stats = interaction.get_tool_usage_stats()
        assert stats.tool_results["counter"].failure == 1
        assert stats.last_tool_success is False
        error = audit.query_by_event(AuditEvent.TOOL_ERROR)[0]
        assert error.detail["error_type"] == "ToolExecutionError"

    @pytest.mark.asyncio
    async def test_unknown_tool(self, tmp_path: Path) -> None:
        runner, _, interaction, editor, _ = _setup(tmp_path)
        with pytest.raises(ToolNotFoundError):
            await runner.run(interaction, _inv({}, tool_name="missing"), editor)

    @pytest.mark.asyncio
    async def test_finalize_fires_once(self, tmp_path: Path) -> None:
        runner, tool, interaction, editor, audit = _setup(tmp_path)
        await runner.run(interaction, _inv({"fail": False, "defer": True}), editor)

        assert runner.finalizations.pending_ids() == ["use-1"]
        assert runner.finalize("use-1", "msg-9") is True
        assert runner.finalize("use-1", "msg-9") is False
        assert tool.finalized == ["msg-9"]
        finalize_entries = audit.query_by_event(AuditEvent.TOOL_FINALIZE)
        assert len(finalize_entries) == 1
        assert finalize_entries[0].detail == {"message_id": "msg-9"}

    @pytest.mark.asyncio
    async def test_without_audit_logger(self, tmp_path: Path) -> None:
        registry = ToolRegistry()
        registry.register(CountingTool())
        editor = FilesystemProjectEditor(tmp_path)
        outcome = await ToolRunner(registry).run(InMemoryInteraction(editor), _inv({"fail": False}), editor)
        assert outcome.ok


class TestFinalizationTable:
    def test_unknown_id(self) -> None:
        assert FinalizationTable().finalize("nope", "m") is False

    def test_failing_callback_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        def boom(message_id: str) -> None:
            raise RuntimeError("callback failed")

        table = FinalizationTable()
        table.register(PendingFinalization(invocation_id="i1", callback=boom))
        with caplog.at_level(logging.ERROR, logger="toolkit.runner"):
            assert table.finalize("i1", "m1") is True
        assert "Finalize callback failed" in caplog.text
        assert len(table) == 0
