"""Built-in open_in_browser tool: open URLs or project files in a web browser."""

from __future__ import annotations

import asyncio
import logging
import webbrowser
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit

from pydantic import BaseModel

from contracts.errors import (
    PathOutsideProjectError,
    ResourceNotFoundError,
    ToolExecutionError,
    TooManyItemsError,
)
from contracts.message import TextPart, ToolInvocation
from contracts.tool_sdk import HostResponse, InputSchema, ToolConfig, ToolFeatures, ToolRunResult
from toolkit.base import BaseTool, host_response_data
from toolkit.formatting import fragments as f
from toolkit.formatting.entry import LogEntryFragments

if TYPE_CHECKING:
    from contracts.interaction import ConversationInteraction
    from contracts.project import ProjectEditor

logger = logging.getLogger(__name__)

MAX_URLS = 6

# Predefined browser names and the ``webbrowser`` controller each maps to.
PREDEFINED_BROWSERS = {
    "chrome": "google-chrome",
    "brave": "brave-browser",
    "firefox": "firefox",
    "edge": "microsoft-edge",
    "safari": "safari",
}

BrowserOpener = Callable[[str, str], Awaitable[str]]


def browser_label(browser: str) -> str:
    return "default browser" if browser == "default" else browser


async def open_with_webbrowser(url: str, browser: str) -> str:
    """Open *url* through the stdlib ``webbrowser`` module in a worker thread."""

    def _open() -> None:
        try:
            if browser == "default":
                controller = webbrowser.get()
            else:
                controller = webbrowser.get(PREDEFINED_BROWSERS.get(browser, browser))
        except webbrowser.Error as exc:
            raise ToolExecutionError(f"Failed to open URL {url}: {exc}") from exc
        if not controller.open(url):
            raise ToolExecutionError(f"Failed to open URL {url}: browser reported failure")

    await asyncio.to_thread(_open)
    return f"Successfully sent command to open {url} in {browser_label(browser)}"


class OpenInBrowserInput(BaseModel):
    urls: list[str]
    browser: str = "default"


class OpenResult(BaseModel):
    url: str
    resolved_url: str
    success: bool
    message: str


class OpenInBrowserTool(BaseTool):
    """Open up to six URLs or project files in the default or a named browser."""

    TOOL_NAME = "open_in_browser"
    FEATURES = ToolFeatures(requires_network=True, async_=True)

    result_error_message = "Error opening URLs"

    def __init__(
        self,
        config: ToolConfig | None = None,
        features: ToolFeatures | None = None,
        opener: BrowserOpener | None = None,
    ) -> None:
        super().__init__(
            self.TOOL_NAME,
            "Open one or more URLs or project files in a web browser.",
            config=config,
            features=features or self.FEATURES,
        )
        self._opener = opener or open_with_webbrowser

    @property
    def input_schema(self) -> InputSchema:
        return {
            "type": "object",
            "properties": {
                "urls": {
                    "type": "array",
                    "items": {"type": "string"},
                    "maxItems": MAX_URLS,
                    "description": (
                        "URLs or project file paths to open. Local paths are converted "
                        f"to file:// URLs. At most {MAX_URLS} entries."
                    ),
                },
                "browser": {
                    "type": "string",
                    "default": "default",
                    "description": (
                        "Browser to use: one of "
                        f"{', '.join(PREDEFINED_BROWSERS)} or any other browser name. "
                        'Omit or use "default" for the system default browser.'
                    ),
                },
            },
            "required": ["urls"],
        }

    async def run(
        self,
        interaction: ConversationInteraction,
        invocation: ToolInvocation,
        project_editor: ProjectEditor,
    ) -> ToolRunResult:
        params = OpenInBrowserInput.model_validate(invocation.tool_input)
        if len(params.urls) > MAX_URLS:
            raise TooManyItemsError("URLs", MAX_URLS, len(params.urls), tool_name=self.name)

        # Every entry is resolved before anything is opened.
        resolved = [await self._resolve(project_editor, entry) for entry in params.urls]
        results = await asyncio.gather(
            *(self._open(url, target, params.browser) for url, target in zip(params.urls, resolved))
        )

        opens_success = [r.message for r in results if r.success]
        opens_error = [f"{r.url} could not be opened - {r.message}" for r in results if not r.success]
        logger.debug("open_in_browser opened %d, failed %d", len(opens_success), len(opens_error))

        if opens_error:
            tool_response = (
                f"Encountered {len(opens_error)} error(s) while opening URLs. "
                "Check tool results for details."
            )
        else:
            tool_response = (
                f"Successfully opened {len(params.urls)} URL(s) in {browser_label(params.browser)}"
            )

        return ToolRunResult(
            result_content=[
                TextPart(
                    text=r.message if r.success else f"Error opening URL {r.url} - {r.message}"
                )
                for r in results
            ],
            tool_response=tool_response,
            host_response=HostResponse(
                data={
                    "opens_success": opens_success,
                    "opens_error": opens_error,
                    "results": [r.model_dump() for r in results],
                }
            ),
        )

    async def _resolve(self, project_editor: ProjectEditor, entry: str) -> str:
        if _is_absolute_url(entry):
            return entry
        if not await project_editor.is_path_within_project(entry):
            raise PathOutsideProjectError(entry, tool_name=self.name)
        absolute = Path(await project_editor.resolve_project_file_path(entry))
        if not absolute.exists():
            raise ResourceNotFoundError(entry, tool_name=self.name)
        return absolute.as_uri()

    async def _open(self, url: str, target: str, browser: str) -> OpenResult:
        try:
            message = await self._opener(target, browser)
        except Exception as exc:
            logger.info("Could not open %s: %s", target, exc)
            return OpenResult(url=url, resolved_url=target, success=False, message=str(exc))
        return OpenResult(url=url, resolved_url=target, success=True, message=message)

    # ── Formatting ───────────────────────────────────────────────────

    def describe_tool_use(self, tool_input: dict[str, Any]) -> LogEntryFragments:
        params = OpenInBrowserInput.model_validate(tool_input)
        return LogEntryFragments(
            title=f.title("Tool Use", self.name),
            subtitle=f.subtitle("Opening URLs in browser..."),
            content=f.block(
                f.label("URLs to Open"),
                f.list_(f.url(u) for u in params.urls),
                f.group("Using Browser: ", params.browser),
            ),
            preview=f"Opening {len(params.urls)} URL(s) in {browser_label(params.browser)}",
        )

    def describe_tool_result(self, result_content: Any) -> LogEntryFragments:
        data = host_response_data(result_content)
        opened = list(data.get("opens_success", data.get("opensSuccess")))
        failed = list(data.get("opens_error", data.get("opensError")))

        sections: list[f.Fragment] = []
        if opened:
            sections.append(f.status("completed", "URLs Opened:"))
            sections.append(f.list_(opened))
        if failed:
            sections.append(f.status("failed", "Failed to Open:"))
            sections.append(f.list_(f.error(e) for e in failed))

        subtitle = f"{len(opened)} opened"
        if failed:
            subtitle += f", {len(failed)} failed"
        return LogEntryFragments(
            title=f.title("Tool Result", self.name),
            subtitle=f.subtitle(subtitle),
            content=f.block(*sections),
            preview=(
                f"Opened {len(opened)} URL{'' if len(opened) == 1 else 's'}"
                if opened
                else "No URLs opened"
            ),
        )


def _is_absolute_url(value: str) -> bool:
    # A single-letter scheme is a Windows drive, not a URL.
    return len(urlsplit(value).scheme) >= 2
