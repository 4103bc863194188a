"""Message content parts and tool invocations.

Content parts are a closed set discriminated by ``type``. The same shapes
are used for conversation messages and for tool results.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from contracts.metadata import ImageMediaType


class _Part(BaseModel):
    model_config = ConfigDict(extra="forbid")

    message_id: str | None = None


class TextPart(_Part):
    type: Literal["text"] = "text"
    text: str


class ThinkingPart(_Part):
    type: Literal["thinking"] = "thinking"
    thinking: str
    signature: str | None = None


class RedactedThinkingPart(_Part):
    type: Literal["redacted_thinking"] = "redacted_thinking"
    data: str


class ImageSource(BaseModel):
    type: Literal["base64"] = "base64"
    media_type: ImageMediaType
    data: str


class ImagePart(_Part):
    type: Literal["image"] = "image"
    source: ImageSource


class AudioPart(_Part):
    """Reference to a previous audio response from the model."""

    type: Literal["audio"] = "audio"
    id: str


class ToolUsePart(_Part):
    type: Literal["tool_use"] = "tool_use"
    id: str
    name: str
    input: dict[str, Any] = Field(default_factory=dict)


class ToolResultPart(_Part):
    type: Literal["tool_result"] = "tool_result"
    tool_use_id: str | None = None
    content: list[Annotated[Union[TextPart, ImagePart], Field(discriminator="type")]] | None = None
    is_error: bool | None = None


ContentPart = Annotated[
    Union[
        TextPart,
        ThinkingPart,
        RedactedThinkingPart,
        ImagePart,
        AudioPart,
        ToolUsePart,
        ToolResultPart,
    ],
    Field(discriminator="type"),
]
ContentParts = list[ContentPart]

_content_part_adapter: TypeAdapter[ContentPart] = TypeAdapter(ContentPart)
_content_parts_adapter: TypeAdapter[ContentParts] = TypeAdapter(ContentParts)


def parse_content_part(data: Any) -> ContentPart:
    """Validate a raw mapping into the matching content part variant."""
    return _content_part_adapter.validate_python(data)


def parse_content_parts(data: Any) -> ContentParts:
    return _content_parts_adapter.validate_python(data)


class ToolValidation(BaseModel):
    validated: bool
    results: str = ""


class ToolInvocation(BaseModel):
    """One request from the host to run a tool. Read-only for tools."""

    model_config = ConfigDict(frozen=True)

    tool_use_id: str
    tool_name: str
    tool_input: dict[str, Any] = Field(default_factory=dict)
    tool_thinking: str | None = None
    tool_validation: ToolValidation | None = None
