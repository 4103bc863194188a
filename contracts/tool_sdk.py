"""Tool SDK contracts.

Every Toolsmith tool satisfies the ``Tool`` protocol. A host asks a tool
for its input schema, validates caller input against it, runs the tool,
and separately asks for formatted log entries of the input or result.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, Union, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from contracts.message import ContentPart, ToolInvocation

if TYPE_CHECKING:
    from contracts.interaction import ConversationInteraction
    from contracts.project import ProjectEditor


InputSchema = dict[str, Any]   # JSON Schema (draft 7)
ToolConfig = dict[str, Any]

# A structured UI node: {"tag": str, "props": {...}, "children": [Node | str]}
RichNode = dict[str, Any]


# ── Descriptor ───────────────────────────────────────────────────────


class ToolFeatures(BaseModel):
    """Declarative hints about a tool. Not enforced by the SDK."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    mutates: bool = False
    stateful: bool = False
    async_: bool = Field(default=False, alias="async")
    idempotent: bool = False
    resource_intensive: bool = False
    requires_network: bool = False


class ToolDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    config: ToolConfig = {}
    features: ToolFeatures = ToolFeatures()


class ToolDefinition(BaseModel):
    """Function-calling compatible export of a tool."""

    name: str
    description: str
    input_schema: InputSchema

    def to_openai(self) -> dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.input_schema,
            },
        }


# ── Results ──────────────────────────────────────────────────────────


ResultContent = Union[str, ContentPart, list[ContentPart]]


class HostResponse(BaseModel):
    """Structured data handed back to the host alongside the model-facing text."""

    data: Any = None


class PendingFinalization(BaseModel):
    """Deferred callback the host invokes once, when the message id is known."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    invocation_id: str
    callback: Callable[[str], Any]


class ToolRunResult(BaseModel):
    result_content: ResultContent
    tool_response: str
    host_response: HostResponse | str
    finalization: PendingFinalization | None = None


# ── Formatting ───────────────────────────────────────────────────────


class Destination(str, Enum):
    CONSOLE = "console"
    RICH = "rich"

    @classmethod
    def _missing_(cls, value: object) -> Destination | None:
        if value == "browser":
            return cls.RICH
        return None


class FormattedLogEntry(BaseModel):
    """A log entry rendered for one destination.

    Console entries hold ANSI strings; rich entries hold ``RichNode`` trees.
    ``preview`` is always plain text.
    """

    title: str | RichNode
    subtitle: str | RichNode | None = None
    content: str | RichNode
    preview: str


# ── Tool capability set ──────────────────────────────────────────────


@runtime_checkable
class Tool(Protocol):
    """Protocol that every tool a host can register must satisfy."""

    @property
    def name(self) -> str:
        ...

    @property
    def description(self) -> str:
        ...

    @property
    def features(self) -> ToolFeatures:
        ...

    @property
    def input_schema(self) -> InputSchema:
        """JSON Schema for the tool's input. Stable for the tool's lifetime."""
        ...

    def validate_input(self, candidate: Any) -> bool:
        """Does *candidate* conform to ``input_schema``? Never raises."""
        ...

    async def run(
        self,
        interaction: ConversationInteraction,
        invocation: ToolInvocation,
        project_editor: ProjectEditor,
    ) -> ToolRunResult:
        """Execute the tool.

        Raises:
            ToolExecutionError: When the operation as a whole is meaningless.
        """
        ...

    def format_tool_use(
        self, tool_input: dict[str, Any], destination: Destination | str
    ) -> FormattedLogEntry:
        ...

    def format_tool_result(
        self, result_content: Any, destination: Destination | str
    ) -> FormattedLogEntry:
        ...
