"""Data source connections as seen by tools."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class DataSourceProviderType(str, Enum):
    FILESYSTEM = "filesystem"
    GOOGLE = "google"
    NOTION = "notion"
    SUPABASE = "supabase"
    MCP = "mcp"
    UNKNOWN = "unknown"


class DataSourceAccessMethod(str, Enum):
    BB = "bb"
    MCP = "mcp"


class DataSourceCapability(str, Enum):
    READ = "read"
    WRITE = "write"
    LIST = "list"
    SEARCH = "search"
    MOVE = "move"
    DELETE = "delete"


class DataSourceConfig(BaseModel):
    """Provider-specific settings; ``data_source_root`` for filesystems."""

    model_config = ConfigDict(extra="allow")

    data_source_root: str | None = None


class DataSourceConnection(BaseModel):
    id: str
    name: str
    provider_type: DataSourceProviderType = DataSourceProviderType.UNKNOWN
    access_method: DataSourceAccessMethod = DataSourceAccessMethod.BB
    capabilities: list[DataSourceCapability] = []
    config: DataSourceConfig = DataSourceConfig()
    enabled: bool = True
    readonly: bool = False
    is_primary: bool = False
    uri_prefix: str | None = None
    uri_template: str | None = None

    def can(self, capability: DataSourceCapability | str) -> bool:
        """True when the connection is enabled and supports *capability*."""
        if not self.enabled:
            return False
        cap = DataSourceCapability(capability)
        if self.readonly and cap in _WRITE_CAPABILITIES:
            return False
        return cap in self.capabilities

    def resource_uri(self, path: str) -> str:
        """Build a resource URI for *path* from the template or prefix."""
        if self.uri_template:
            return self.uri_template.replace("{path}", path)
        return f"{self.uri_prefix or ''}{path}"


_WRITE_CAPABILITIES: frozenset[DataSourceCapability] = frozenset(
    {DataSourceCapability.WRITE, DataSourceCapability.MOVE, DataSourceCapability.DELETE}
)
