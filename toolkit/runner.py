"""Tool runner: the host-side validate, execute, record pipeline.

Also owns the finalization table, which holds each successful run's
deferred callback until the host knows the id of the message that
carries the result.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

import jsonschema
from pydantic import BaseModel

from contracts.audit import AuditEntry, AuditEvent, AuditLogger
from contracts.interaction import ConversationInteraction
from contracts.message import ToolInvocation, ToolValidation
from contracts.project import ProjectEditor
from contracts.tool_sdk import InputSchema, PendingFinalization, ToolRunResult
from toolkit.registry import ToolRegistry
from toolkit.validation import SchemaValidator

logger = logging.getLogger(__name__)


# ── Finalization ─────────────────────────────────────────────────────


class FinalizationTable:
    """Pending finalize callbacks keyed by invocation id. Each fires at most once."""

    def __init__(self) -> None:
        self._pending: dict[str, PendingFinalization] = {}
        self._lock = threading.Lock()

    def register(self, pending: PendingFinalization) -> None:
        with self._lock:
            self._pending[pending.invocation_id] = pending

    def finalize(self, invocation_id: str, message_id: str) -> bool:
        """Invoke the callback for *invocation_id* with *message_id*.

        Returns False when nothing is pending (never registered, or already
        finalized). A failing callback is logged; it still counts as fired.
        """
        with self._lock:
            pending = self._pending.pop(invocation_id, None)
        if pending is None:
            return False
        try:
            pending.callback(message_id)
        except Exception:
            logger.exception("Finalize callback failed for invocation %s", invocation_id)
        return True

    def pending_ids(self) -> list[str]:
        with self._lock:
            return list(self._pending)

    def __len__(self) -> int:
        return len(self._pending)


# ── Outcome ──────────────────────────────────────────────────────────


class ToolRunOutcome(BaseModel):
    invocation: ToolInvocation
    validation: ToolValidation
    result: ToolRunResult | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.validation.validated and self.error is None and self.result is not None


# ── Runner ───────────────────────────────────────────────────────────


class ToolRunner:
    """Runs one tool invocation: validate, execute, audit, record stats."""

    def __init__(
        self,
        registry: ToolRegistry,
        audit_logger: AuditLogger | None = None,
        finalizations: FinalizationTable | None = None,
    ) -> None:
        self._registry = registry
        self._audit = audit_logger
        self.finalizations = finalizations if finalizations is not None else FinalizationTable()

    async def run(
        self,
        interaction: ConversationInteraction,
        invocation: ToolInvocation,
        project_editor: ProjectEditor,
    ) -> ToolRunOutcome:
        """Run *invocation*.

        Raises ``ToolNotFoundError`` for an unregistered tool. Rejected input
        and execution failures are reported in the outcome instead.
        """
        tool = self._registry.get(invocation.tool_name)
        project_id = project_editor.project_id

        if not tool.validate_input(invocation.tool_input):
            messages = _input_errors(tool.input_schema, invocation.tool_input)
            validation = ToolValidation(
                validated=False,
                results="; ".join(messages) or "Tool input failed validation",
            )
            self._log(AuditEvent.TOOL_REJECT, invocation, project_id, errors=messages)
            logger.debug("Rejected input for %s: %s", tool.name, validation.results)
            return ToolRunOutcome(
                invocation=invocation.model_copy(update={"tool_validation": validation}),
                validation=validation,
            )

        validation = ToolValidation(validated=True, results="Tool input validated")
        invocation = invocation.model_copy(update={"tool_validation": validation})
        self._log(AuditEvent.TOOL_VALIDATE, invocation, project_id)

        self._log(AuditEvent.TOOL_CALL, invocation, project_id, input=invocation.tool_input)
        try:
            result = await tool.run(interaction, invocation, project_editor)
        except Exception as exc:
            logger.debug("Tool %s failed", tool.name, exc_info=True)
            self._log(
                AuditEvent.TOOL_ERROR,
                invocation,
                project_id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            interaction.update_tool_stats(tool.name, False)
            return ToolRunOutcome(invocation=invocation, validation=validation, error=str(exc))

        self._log(AuditEvent.TOOL_RESULT, invocation, project_id, tool_response=result.tool_response)
        interaction.update_tool_stats(tool.name, True)
        if result.finalization is not None:
            self.finalizations.register(result.finalization)
        return ToolRunOutcome(invocation=invocation, validation=validation, result=result)

    def finalize(self, invocation_id: str, message_id: str) -> bool:
        """Fire the pending finalize callback for *invocation_id*, at most once."""
        fired = self.finalizations.finalize(invocation_id, message_id)
        if fired and self._audit is not None:
            self._audit.log(
                AuditEntry(
                    invocation_id=invocation_id,
                    event=AuditEvent.TOOL_FINALIZE,
                    detail={"message_id": message_id},
                )
            )
        return fired

    # ── internal ────────────────────────────────────────────────────

    def _log(
        self,
        event: AuditEvent,
        invocation: ToolInvocation,
        project_id: str,
        **detail: Any,
    ) -> None:
        if self._audit is None:
            return
        self._audit.log(
            AuditEntry(
                invocation_id=invocation.tool_use_id,
                event=event,
                tool_name=invocation.tool_name,
                project_id=project_id,
                detail=detail,
            )
        )


def _input_errors(schema: InputSchema, value: Any) -> list[str]:
    try:
        return SchemaValidator.compile(schema).errors(value)
    except jsonschema.SchemaError as exc:
        return [f"Invalid input schema: {exc.message}"]
