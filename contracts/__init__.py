"""Shared contracts: source of truth for all Toolsmith interfaces."""

from contracts.audit import AuditEntry, AuditEvent, AuditLogger
from contracts.errors import (
    PathOutsideProjectError,
    ResourceNotFoundError,
    SettingsError,
    ToolExecutionError,
    ToolInputError,
    ToolNotFoundError,
    TooManyItemsError,
    ToolsmithError,
)
from contracts.interaction import AddedResource, ConversationInteraction, ResourceToAdd
from contracts.message import (
    ContentPart,
    ContentParts,
    TextPart,
    ToolInvocation,
    ToolValidation,
    parse_content_part,
)
from contracts.metadata import FileMetadata, FileMetadataWithoutPath, TokenUsage, ToolUsageStats
from contracts.project import PreparedFile, ProjectEditor
from contracts.settings import ToolSettings, ToolsmithSettings
from contracts.tool_sdk import (
    Destination,
    FormattedLogEntry,
    HostResponse,
    PendingFinalization,
    Tool,
    ToolDefinition,
    ToolDescriptor,
    ToolFeatures,
    ToolRunResult,
)

__all__ = [
    # audit
    "AuditEntry",
    "AuditEvent",
    "AuditLogger",
    # errors
    "ToolsmithError",
    "ToolExecutionError",
    "ToolInputError",
    "ToolNotFoundError",
    "PathOutsideProjectError",
    "ResourceNotFoundError",
    "TooManyItemsError",
    "SettingsError",
    # collaborators
    "ProjectEditor",
    "PreparedFile",
    "ConversationInteraction",
    "ResourceToAdd",
    "AddedResource",
    # messages and metadata
    "ContentPart",
    "ContentParts",
    "TextPart",
    "ToolInvocation",
    "ToolValidation",
    "parse_content_part",
    "FileMetadata",
    "FileMetadataWithoutPath",
    "TokenUsage",
    "ToolUsageStats",
    # settings
    "ToolSettings",
    "ToolsmithSettings",
    # tool sdk
    "Tool",
    "ToolDescriptor",
    "ToolDefinition",
    "ToolFeatures",
    "ToolRunResult",
    "HostResponse",
    "PendingFinalization",
    "Destination",
    "FormattedLogEntry",
]
