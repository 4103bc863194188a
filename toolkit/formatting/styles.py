"""Style tables for the two destinations.

Passed explicitly to the renderers. Keys are a fragment kind, optionally
qualified by variant (``"status.failed"``); the qualified key wins.
"""

from __future__ import annotations

from pydantic import BaseModel


_CONSOLE_DEFAULTS: dict[str, str] = {
    "label": "bold",
    "title": "bold",
    "title.tool_name": "blue",
    "subtitle": "dim",
    "error": "red",
    "success": "green",
    "warning": "yellow",
    "status.running": "blue",
    "status.completed": "green",
    "status.failed": "red",
    "status.pending": "yellow",
    "status.success": "green",
    "status.error": "red",
    "status.warning": "yellow",
    "priority.high": "bold red",
    "priority.medium": "bold yellow",
    "priority.low": "bold green",
    "badge": "bright_black",
    "badge.primary": "blue",
    "badge.success": "green",
    "badge.warning": "yellow",
    "badge.error": "red",
    "diff.add": "green",
    "diff.remove": "red",
    "link": "underline blue",
    "url": "blue",
    "filename": "cyan",
    "directory": "cyan",
    "tool_name": "blue",
    "regex": "yellow",
    "boolean": "magenta",
    "counts": "magenta",
    "token_usage": "magenta",
    "number": "blue",
    "bytes": "blue",
    "speed": "blue",
    "progress": "blue",
    "percentage": "green",
    "size": "bright_black",
    "date": "bright_black",
    "timestamp": "bright_black",
    "time_ago": "bright_black",
    "version": "bright_black",
    "duration": "magenta",
    "time_range": "magenta",
}


class ConsoleStyles(BaseModel):
    """``rich`` style strings per fragment kind."""

    styles: dict[str, str] = dict(_CONSOLE_DEFAULTS)

    def style_for(self, kind: str, variant: str = "") -> str:
        if variant and f"{kind}.{variant}" in self.styles:
            return self.styles[f"{kind}.{variant}"]
        return self.styles.get(kind, "")

    def with_overrides(self, overrides: dict[str, str]) -> ConsoleStyles:
        return ConsoleStyles(styles={**self.styles, **overrides})


class BrowserStyles(BaseModel):
    """CSS class names per fragment kind.

    Without an override, a kind maps to ``<prefix>-<kind>`` plus
    ``<prefix>-<kind>-<variant>`` when a variant is set.
    """

    prefix: str = "ts"
    classes: dict[str, str] = {}

    def class_for(self, kind: str, variant: str = "") -> str:
        if variant and f"{kind}.{variant}" in self.classes:
            return self.classes[f"{kind}.{variant}"]
        if kind in self.classes:
            return self.classes[kind]
        name = f"{self.prefix}-{kind.replace('_', '-')}"
        return f"{name} {name}-{variant}" if variant else name


DEFAULT_CONSOLE_STYLES = ConsoleStyles()
DEFAULT_BROWSER_STYLES = BrowserStyles()
