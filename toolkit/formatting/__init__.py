"""Formatting helpers: value formatters, fragment builders and renderers."""

from toolkit.formatting.entry import LogEntryFragments
from toolkit.formatting.fragments import Fragment, Renderable
from toolkit.formatting.render import node_to_html, render, render_console, render_rich
from toolkit.formatting.styles import (
    DEFAULT_BROWSER_STYLES,
    DEFAULT_CONSOLE_STYLES,
    BrowserStyles,
    ConsoleStyles,
)

__all__ = [
    "LogEntryFragments",
    "Fragment",
    "Renderable",
    "render",
    "render_console",
    "render_rich",
    "node_to_html",
    "ConsoleStyles",
    "BrowserStyles",
    "DEFAULT_CONSOLE_STYLES",
    "DEFAULT_BROWSER_STYLES",
]
