"""BaseTool: the reusable implementation of the ``Tool`` protocol.

Subclasses supply an input schema, a ``run`` coroutine and two
``describe_*`` methods that build destination-neutral log entries. The
base class turns those into formatted entries for any destination and
guarantees that formatting never raises.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import jsonschema

from contracts.message import ToolInvocation
from contracts.tool_sdk import (
    Destination,
    FormattedLogEntry,
    HostResponse,
    InputSchema,
    ToolConfig,
    ToolDefinition,
    ToolDescriptor,
    ToolFeatures,
    ToolRunResult,
)
from toolkit.formatting import fragments as f
from toolkit.formatting.entry import LogEntryFragments
from toolkit.validation import CompiledValidator, SchemaValidator

if TYPE_CHECKING:
    from contracts.interaction import ConversationInteraction
    from contracts.project import ProjectEditor

logger = logging.getLogger(__name__)


class BaseTool(ABC):
    """Abstract base class for Toolsmith tools."""

    #: Shown in place of the result entry when it cannot be described.
    result_error_message = "Error formatting tool result"

    def __init__(
        self,
        name: str,
        description: str,
        config: ToolConfig | None = None,
        features: ToolFeatures | None = None,
    ) -> None:
        self._name = name
        self._description = description
        self.config: ToolConfig = dict(config or {})
        self._features = features or ToolFeatures()
        self._validator: CompiledValidator | None = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def features(self) -> ToolFeatures:
        return self._features

    @property
    def descriptor(self) -> ToolDescriptor:
        return ToolDescriptor(
            name=self._name,
            description=self._description,
            config=self.config,
            features=self._features,
        )

    async def init(self) -> BaseTool:
        """Optional asynchronous set-up. Returns the tool itself."""
        return self

    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self._name,
            description=self._description,
            input_schema=self.input_schema,
        )

    # ── Validation ───────────────────────────────────────────────────

    @property
    @abstractmethod
    def input_schema(self) -> InputSchema:
        """JSON Schema for the tool's input."""
        ...

    def validate_input(self, candidate: Any) -> bool:
        if self._validator is None:
            try:
                self._validator = SchemaValidator.compile(self.input_schema)
            except jsonschema.SchemaError as exc:
                logger.error("Invalid input schema for tool %s: %s", self._name, exc.message)
                return False
        return self._validator.check(candidate)

    # ── Execution ────────────────────────────────────────────────────

    @abstractmethod
    async def run(
        self,
        interaction: ConversationInteraction,
        invocation: ToolInvocation,
        project_editor: ProjectEditor,
    ) -> ToolRunResult:
        """Execute the tool against already-validated input."""
        ...

    # ── Formatting ───────────────────────────────────────────────────

    @abstractmethod
    def describe_tool_use(self, tool_input: dict[str, Any]) -> LogEntryFragments:
        ...

    @abstractmethod
    def describe_tool_result(self, result_content: Any) -> LogEntryFragments:
        ...

    def format_tool_use(
        self, tool_input: dict[str, Any], destination: Destination | str
    ) -> FormattedLogEntry:
        """Render the input log entry.

        Raises ``ValueError`` only for an unknown destination.
        """
        destination = Destination(destination)
        try:
            return self.describe_tool_use(tool_input).render(destination)
        except Exception:
            logger.warning("Could not format tool input for %s", self._name, exc_info=True)
            return self._fallback("Tool Use", "Error formatting tool input", destination)

    def format_tool_result(
        self, result_content: Any, destination: Destination | str
    ) -> FormattedLogEntry:
        """Render the result log entry.

        Raises ``ValueError`` only for an unknown destination.
        """
        destination = Destination(destination)
        try:
            return self.describe_tool_result(result_content).render(destination)
        except Exception:
            logger.warning("Could not format tool result for %s", self._name, exc_info=True)
            return self._fallback("Tool Result", self.result_error_message, destination)

    def _fallback(self, role: str, message: str, destination: Destination) -> FormattedLogEntry:
        return LogEntryFragments(
            title=f.title(role, self._name),
            content=f.error(message),
            preview=message,
        ).render(destination)


def host_response_data(result_content: Any) -> Any:
    """Pull ``host_response.data`` out of a run result or its serialised form.

    Raises ``TypeError`` when *result_content* carries no structured data.
    """
    if isinstance(result_content, ToolRunResult):
        host_response: Any = result_content.host_response
    elif isinstance(result_content, Mapping):
        host_response = result_content.get("host_response", result_content.get("hostResponse"))
    else:
        raise TypeError(f"Unexpected tool result type: {type(result_content).__name__}")

    if isinstance(host_response, HostResponse):
        return host_response.data
    if isinstance(host_response, Mapping) and "data" in host_response:
        return host_response["data"]
    raise TypeError("Tool result has no structured host response")
