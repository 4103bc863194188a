"""Destination-neutral log entries."""

from __future__ import annotations

from dataclasses import dataclass

from contracts.tool_sdk import Destination, FormattedLogEntry
from toolkit.formatting.fragments import Fragment
from toolkit.formatting.render import render
from toolkit.formatting.styles import BrowserStyles, ConsoleStyles


@dataclass(frozen=True)
class LogEntryFragments:
    """A log entry described once, rendered per destination."""

    title: Fragment
    content: Fragment
    preview: str
    subtitle: Fragment | None = None

    def render(
        self,
        destination: Destination | str,
        *,
        console_styles: ConsoleStyles | None = None,
        browser_styles: BrowserStyles | None = None,
    ) -> FormattedLogEntry:
        styles = {"console_styles": console_styles, "browser_styles": browser_styles}
        return FormattedLogEntry(
            title=render(self.title, destination, **styles),
            subtitle=render(self.subtitle, destination, **styles) if self.subtitle else None,
            content=render(self.content, destination, **styles),
            preview=self.preview,
        )
