"""Built-in search_project tool: find project files by name, date, size and content."""

from __future__ import annotations

import asyncio
import logging
import os
import re
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from contracts.errors import ToolExecutionError
from contracts.message import ToolInvocation
from contracts.tool_sdk import HostResponse, InputSchema, ToolConfig, ToolFeatures, ToolRunResult
from toolkit.base import BaseTool, host_response_data
from toolkit.formatting import fragments as f
from toolkit.formatting.entry import LogEntryFragments

if TYPE_CHECKING:
    from contracts.interaction import ConversationInteraction
    from contracts.project import ProjectEditor

logger = logging.getLogger(__name__)

_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
_SNIFF_BYTES = 8192
_HEADER = re.compile(r"^(\d+) files match the search criteria: ?(.*)$")


class SearchProjectInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content_pattern: str | None = Field(default=None, alias="contentPattern")
    case_sensitive: bool = Field(default=False, alias="caseSensitive")
    file_pattern: str | None = Field(default=None, alias="filePattern")
    date_after: str | None = Field(default=None, alias="dateAfter")
    date_before: str | None = Field(default=None, alias="dateBefore")
    size_min: float | None = Field(default=None, alias="sizeMin")
    size_max: float | None = Field(default=None, alias="sizeMax")

    def criteria(self) -> str:
        """Human-readable summary of the active criteria."""
        parts = []
        if self.content_pattern:
            parts.append(f'content pattern "{self.content_pattern}"')
            parts.append("case-sensitive" if self.case_sensitive else "case-insensitive")
        if self.file_pattern:
            parts.append(f'file pattern "{self.file_pattern}"')
        if self.date_after:
            parts.append(f"modified after {self.date_after}")
        if self.date_before:
            parts.append(f"modified before {self.date_before}")
        if self.size_min is not None:
            parts.append(f"minimum size {_plain_number(self.size_min)} bytes")
        if self.size_max is not None:
            parts.append(f"maximum size {_plain_number(self.size_max)} bytes")
        return ", ".join(parts)


class SearchProjectTool(BaseTool):
    """Search project files by glob, modification date, size and content regex."""

    TOOL_NAME = "search_project"
    FEATURES = ToolFeatures(idempotent=True, resource_intensive=True)

    result_error_message = "Error searching project"

    def __init__(
        self,
        config: ToolConfig | None = None,
        features: ToolFeatures | None = None,
    ) -> None:
        super().__init__(
            self.TOOL_NAME,
            "Search project files by content regex, file name glob, modification date and size.",
            config=config,
            features=features or self.FEATURES,
        )

    @property
    def input_schema(self) -> InputSchema:
        return {
            "type": "object",
            "properties": {
                "contentPattern": {
                    "type": "string",
                    "description": (
                        "A grep-compatible regular expression to search file contents, "
                        'e.g. "function.*search" or "\\bclass\\b". Escape special '
                        "characters with a backslash. Leave empty to search only by "
                        "file name, date, or size."
                    ),
                },
                "caseSensitive": {
                    "type": "boolean",
                    "description": "Case sensitivity of contentPattern. Default is false.",
                    "default": False,
                },
                "filePattern": {
                    "type": "string",
                    "description": (
                        "Glob pattern(s) to filter files by name. `*` matches within a "
                        "name, `**/` spans directories, `|` separates patterns. A "
                        "pattern without `/` matches the file name at any depth, e.g. "
                        "`*.ts|*.js` or `src/**/*.py`."
                    ),
                },
                "dateAfter": {
                    "type": "string",
                    "pattern": _DATE_PATTERN,
                    "format": "date",
                    "description": "Only files modified after this date (YYYY-MM-DD).",
                },
                "dateBefore": {
                    "type": "string",
                    "pattern": _DATE_PATTERN,
                    "format": "date",
                    "description": "Only files modified before this date (YYYY-MM-DD).",
                },
                "sizeMin": {
                    "type": "number",
                    "description": "Only files larger than this many bytes.",
                },
                "sizeMax": {
                    "type": "number",
                    "description": "Only files smaller than this many bytes.",
                },
            },
        }

    async def run(
        self,
        interaction: ConversationInteraction,
        invocation: ToolInvocation,
        project_editor: ProjectEditor,
    ) -> ToolRunResult:
        try:
            params = SearchProjectInput.model_validate(invocation.tool_input)
            search = _Search(
                params,
                exclude_dirs=self.config.get("exclude_dirs", [".git"]),
            )
            files, unreadable = await asyncio.to_thread(
                search.run, Path(project_editor.project_root)
            )
        except (re.error, ValidationError, ValueError) as exc:
            raise ToolExecutionError(
                f"Error searching project: {exc}", tool_name=self.name
            ) from exc

        criteria = params.criteria()

        error_message = None
        if unreadable:
            error_message = f"Could not read {len(unreadable)} file(s): {', '.join(unreadable)}"
        logger.debug("search_project matched %d files (%s)", len(files), criteria)

        lines = [f"Error: {error_message}"] if error_message else []
        lines.append(f"{len(files)} files match the search criteria: {criteria}")
        lines.extend(files)

        return ToolRunResult(
            result_content="\n".join(lines),
            tool_response=f"Found {len(files)} files matching the search criteria: {criteria}",
            host_response=HostResponse(
                data={"files": files, "criteria": criteria, "error_message": error_message}
            ),
        )

    # ── Formatting ───────────────────────────────────────────────────

    def describe_tool_use(self, tool_input: dict[str, Any]) -> LogEntryFragments:
        params = SearchProjectInput.model_validate(tool_input)
        criteria: list[f.Fragment] = []
        if params.content_pattern:
            pattern = f.group(f.label("Content Pattern:"), " ", f.regex(params.content_pattern))
            if "case_sensitive" in params.model_fields_set:
                pattern = f.group(
                    pattern,
                    " (case ",
                    f.boolean(params.case_sensitive, "sensitive/insensitive"),
                    ")",
                )
            criteria.append(pattern)
        if params.file_pattern:
            criteria.append(f.group(f.label("File Pattern:"), " ", f.filename(params.file_pattern)))
        if params.date_after:
            criteria.append(f.group(f.label("Modified After:"), " ", f.date(params.date_after)))
        if params.date_before:
            criteria.append(f.group(f.label("Modified Before:"), " ", f.date(params.date_before)))
        if params.size_min is not None:
            criteria.append(f.group(f.label("Minimum Size:"), " ", f.size(params.size_min)))
        if params.size_max is not None:
            criteria.append(f.group(f.label("Maximum Size:"), " ", f.size(params.size_max)))

        return LogEntryFragments(
            title=f.title("Tool Use", self.name),
            content=f.block(f.text("Searching project with criteria:"), f.list_(criteria)),
            preview=(
                f"Searching for {params.content_pattern}"
                if params.content_pattern
                else "Searching project files"
            ),
        )

    def describe_tool_result(self, result_content: Any) -> LogEntryFragments:
        if isinstance(result_content, str):
            files, criteria, error_message = _parse_result_text(result_content)
        else:
            data = host_response_data(result_content)
            files = list(data["files"])
            criteria = data["criteria"]
            error_message = data.get("error_message")

        count = len(files)
        return LogEntryFragments(
            title=f.title("Tool Result", self.name),
            subtitle=f.subtitle(f"Found {count} files"),
            content=f.block(
                f.error(f"Error: {error_message}") if error_message else None,
                f.text(f"{count} files match the search criteria: {criteria}"),
                f.list_(f.filename(p) for p in files) if files else None,
            ),
            preview=f"Found {count} files matching {criteria}" if criteria else f"Found {count} files",
        )


# ── Search ───────────────────────────────────────────────────────────


class _Search:
    """One search pass: glob filters, then stat filters, then content."""

    def __init__(self, params: SearchProjectInput, exclude_dirs: Iterable[str] = (".git",)) -> None:
        self.params = params
        self.exclude_dirs = set(exclude_dirs)
        self.globs = (
            [_glob_regex(p.strip()) for p in params.file_pattern.split("|") if p.strip()]
            if params.file_pattern
            else []
        )
        self.after = _start_of_day(params.date_after) if params.date_after else None
        self.before = _start_of_day(params.date_before) if params.date_before else None
        self.content = (
            re.compile(
                params.content_pattern,
                0 if params.case_sensitive else re.IGNORECASE,
            )
            if params.content_pattern
            else None
        )

    def run(self, root: Path) -> tuple[list[str], list[str]]:
        """Return (matching files, unreadable files), both sorted project-relative paths."""
        root = Path(os.path.realpath(root))
        matches: list[str] = []
        unreadable: list[str] = []
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if d not in self.exclude_dirs)
            for name in filenames:
                path = Path(dirpath) / name
                rel = path.relative_to(root).as_posix()
                if not self._matches_glob(rel):
                    continue
                # Symlinked files count only when their target is inside the root.
                if not Path(os.path.realpath(path)).is_relative_to(root):
                    logger.debug("Skipping %s: resolves outside the project", rel)
                    continue
                try:
                    if not self._matches_stat(path):
                        continue
                    if self.content is not None and not self._matches_content(path):
                        continue
                except OSError:
                    unreadable.append(rel)
                    continue
                matches.append(rel)
        return sorted(matches), sorted(unreadable)

    def _matches_glob(self, rel: str) -> bool:
        if not self.globs:
            return True
        basename = rel.rsplit("/", 1)[-1]
        return any(
            regex.fullmatch(rel if anchored else basename) for regex, anchored in self.globs
        )

    def _matches_stat(self, path: Path) -> bool:
        st = path.stat()
        if self.after is not None and st.st_mtime <= self.after:
            return False
        if self.before is not None and st.st_mtime >= self.before:
            return False
        if self.params.size_min is not None and st.st_size <= self.params.size_min:
            return False
        if self.params.size_max is not None and st.st_size >= self.params.size_max:
            return False
        return True

    def _matches_content(self, path: Path) -> bool:
        with path.open("rb") as fh:
            if b"\x00" in fh.read(_SNIFF_BYTES):
                return False
        with path.open("r", encoding="utf-8", errors="replace") as fh:
            return any(self.content.search(line) for line in fh)


def _glob_regex(pattern: str) -> tuple[re.Pattern[str], bool]:
    """Translate a glob into (regex, anchored). Unanchored globs match basenames."""
    out: list[str] = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            out.append("(?:[^/]+/)*")
            i += 3
        elif pattern.startswith("**", i):
            out.append(".*")
            i += 2
        elif pattern[i] == "*":
            out.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            out.append("[^/]")
            i += 1
        else:
            out.append(re.escape(pattern[i]))
            i += 1
    return re.compile("".join(out)), "/" in pattern


def _start_of_day(value: str) -> float:
    """Local start-of-day timestamp of a YYYY-MM-DD date. Raises ValueError."""
    return datetime.strptime(value, "%Y-%m-%d").timestamp()


def _plain_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _parse_result_text(text: str) -> tuple[list[str], str, str | None]:
    error_message = None
    files: list[str] = []
    criteria = ""
    header_seen = False
    for line in text.splitlines():
        if not header_seen:
            if line.startswith("Error: "):
                error_message = line[len("Error: "):]
                continue
            match = _HEADER.match(line)
            if match:
                criteria = match.group(2)
                header_seen = True
            continue
        if line.strip():
            files.append(line.strip())
    if not header_seen:
        raise ValueError("Unrecognised search_project result text")
    return files, criteria, error_message
