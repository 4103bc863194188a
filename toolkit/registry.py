"""Tool registry: register, look up, and export Toolsmith tools."""

from __future__ import annotations

from contracts.errors import ToolNotFoundError
from contracts.settings import ToolSettings, ToolsmithSettings
from contracts.tool_sdk import Tool, ToolDefinition


class ToolRegistry:
    """In-memory registry of available tools."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        """Register a tool instance.  Overwrites if name already exists."""
        if not isinstance(tool, Tool):
            raise TypeError(f"{type(tool).__name__} does not implement the Tool protocol")
        self._tools[tool.name] = tool

    def get(self, name: str) -> Tool:
        """Return a registered tool by name, or raise ``ToolNotFoundError``."""
        try:
            return self._tools[name]
        except KeyError:
            raise ToolNotFoundError(name) from None

    def list_tools(self) -> list[str]:
        """Return sorted list of registered tool names."""
        return sorted(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def definitions(self) -> list[ToolDefinition]:
        return [
            ToolDefinition(
                name=tool.name,
                description=tool.description,
                input_schema=tool.input_schema,
            )
            for tool in (self._tools[name] for name in sorted(self._tools))
        ]

    def get_openai_definitions(self) -> list[dict]:
        """Export all tools in OpenAI function-calling format."""
        return [defn.to_openai() for defn in self.definitions()]


def create_default_registry(settings: ToolsmithSettings | None = None) -> ToolRegistry:
    """Create a registry pre-loaded with the built-in tools.

    Per-tool ``enabled``, ``config`` and ``features`` come from *settings*.
    """
    from toolkit.tools.open_in_browser import OpenInBrowserTool
    from toolkit.tools.search_project import SearchProjectTool

    registry = ToolRegistry()
    for tool_cls in (SearchProjectTool, OpenInBrowserTool):
        tool_settings = settings.tool(tool_cls.TOOL_NAME) if settings else ToolSettings()
        if not tool_settings.enabled:
            continue
        registry.register(
            tool_cls(
                config=tool_settings.config,
                features=tool_settings.apply_features(tool_cls.FEATURES),
            )
        )
    return registry
