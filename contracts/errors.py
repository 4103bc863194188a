"""Exception hierarchy for Toolsmith tools and hosts.

    ToolsmithError
    ├── ToolExecutionError(tool_name)
    │   ├── PathOutsideProjectError(path)
    │   ├── ResourceNotFoundError(path)
    │   └── TooManyItemsError(limit, count)
    ├── ToolInputError(messages)
    └── SettingsError
    ToolNotFoundError (also a KeyError)

Messages are part of the contract: hosts that only see ``str(exc)`` can
still tell the cases apart.
"""

from __future__ import annotations


class ToolsmithError(Exception):
    """Base exception for all Toolsmith errors."""


class ToolExecutionError(ToolsmithError):
    """A tool run failed as a whole."""

    def __init__(self, message: str, *, tool_name: str = "") -> None:
        self.tool_name = tool_name
        super().__init__(message)


class PathOutsideProjectError(ToolExecutionError):
    """A caller-supplied path resolves outside the project root."""

    def __init__(self, path: str, *, tool_name: str = "") -> None:
        self.path = path
        super().__init__(f"Path {path} is outside project root", tool_name=tool_name)


class ResourceNotFoundError(ToolExecutionError):
    """A referenced local file does not exist."""

    def __init__(self, path: str, *, tool_name: str = "") -> None:
        self.path = path
        super().__init__(f"File {path} does not exist", tool_name=tool_name)


class TooManyItemsError(ToolExecutionError):
    """A batch input exceeds the tool's declared maximum."""

    def __init__(self, noun: str, limit: int, count: int, *, tool_name: str = "") -> None:
        self.limit = limit
        self.count = count
        super().__init__(
            f"Too many {noun} provided. Maximum allowed is {limit}",
            tool_name=tool_name,
        )


class ToolInputError(ToolsmithError):
    """Input did not conform to the tool's input schema."""

    def __init__(self, messages: list[str]) -> None:
        self.messages = messages
        super().__init__("; ".join(messages) or "Invalid tool input")


class ToolNotFoundError(ToolsmithError, KeyError):
    """No tool is registered under the requested name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool not found: {name}")

    def __str__(self) -> str:
        return self.args[0]


class SettingsError(ToolsmithError):
    """Invalid settings file."""
