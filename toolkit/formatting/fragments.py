"""Destination-neutral fragment tree.

Tools compose log entries from these builders once; the renderers in
``toolkit.formatting.render`` turn the same tree into ANSI text for the
console or structured nodes for a rich UI. Value-bearing builders format
their text at build time, so renderers only apply styling and layout.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Union

from toolkit.formatting import values


@dataclass(frozen=True)
class Fragment:
    kind: str
    text: str = ""
    children: tuple[Fragment, ...] = ()
    variant: str = ""
    attrs: Mapping[str, Any] = field(default_factory=dict)

    def plain(self) -> str:
        """Text content with styling and markup stripped."""
        from toolkit.formatting.render import render_console

        return render_console(self, color=False)


Renderable = Union[Fragment, str]

TITLE_ROLES = {"Tool Use": "Tool Input", "Tool Result": "Tool Output"}
STATUS_STATES = ("running", "completed", "failed", "pending", "success", "error", "warning")


def _frag(value: Renderable) -> Fragment:
    return value if isinstance(value, Fragment) else Fragment("text", str(value))


def _frags(items: Iterable[Renderable]) -> tuple[Fragment, ...]:
    return tuple(_frag(i) for i in items)


# ── Base ─────────────────────────────────────────────────────────────


def text(value: str) -> Fragment:
    return Fragment("text", value)


def group(*children: Renderable) -> Fragment:
    """Inline sequence."""
    return Fragment("group", children=_frags(children))


def block(*children: Renderable | None) -> Fragment:
    """One child per line; ``None`` children are skipped."""
    return Fragment("block", children=_frags(c for c in children if c is not None))


def label(value: str) -> Fragment:
    return Fragment("label", value)


def list_(items: Iterable[Renderable]) -> Fragment:
    return Fragment("list", children=_frags(items))


def container(content: Renderable) -> Fragment:
    return Fragment("container", children=(_frag(content),))


def box(content: Renderable) -> Fragment:
    return Fragment("box", children=(_frag(content),))


def pre(value: str) -> Fragment:
    return Fragment("pre", value)


def code(value: str) -> Fragment:
    return Fragment("code", value)


# ── Headers ──────────────────────────────────────────────────────────


def title(role: str, tool_name: str) -> Fragment:
    """``Tool Use`` reads as "Tool Input", ``Tool Result`` as "Tool Output"."""
    return Fragment("title", TITLE_ROLES.get(role, "Tool"), attrs={"tool_name": tool_name})


def subtitle(value: Renderable) -> Fragment:
    return Fragment("subtitle", children=(_frag(value),))


# ── Status ───────────────────────────────────────────────────────────


def status(state: str, value: str | None = None) -> Fragment:
    if state not in STATUS_STATES:
        raise ValueError(f"Unknown status state: {state}")
    return Fragment("status", value if value is not None else state, variant=state)


def error(value: str) -> Fragment:
    return Fragment("error", value)


def success(value: str) -> Fragment:
    return Fragment("success", value)


def warning(value: str) -> Fragment:
    return Fragment("warning", value)


def priority(level: str, value: str | None = None) -> Fragment:
    return Fragment("priority", value if value is not None else level, variant=level)


def badge(value: str, variant: str = "default") -> Fragment:
    return Fragment("badge", value, variant=variant)


# ── Content ──────────────────────────────────────────────────────────


def filename(path: str) -> Fragment:
    return Fragment("filename", path)


def directory(path: str) -> Fragment:
    return Fragment("directory", path)


def url(value: str) -> Fragment:
    return Fragment("url", value)


def link(value: str, href: str) -> Fragment:
    return Fragment("link", value, attrs={"href": href})


def image(src: str, alt: str) -> Fragment:
    return Fragment("image", alt, attrs={"src": src, "alt": alt})


def tool_name(name: str) -> Fragment:
    return Fragment("tool_name", name)


def regex(pattern: str) -> Fragment:
    return Fragment("regex", pattern)


def version(value: str) -> Fragment:
    return Fragment("version", value)


def icon(value: str) -> Fragment:
    return Fragment("icon", value)


def diff(value: str, kind: str) -> Fragment:
    return Fragment("diff", f"{'+' if kind == 'add' else '-'}{value}", variant=kind)


def truncated(value: str, max_length: int) -> Fragment:
    return Fragment("truncated", values.truncate(value, max_length))


def boolean(value: bool, fmt: str = "yes/no") -> Fragment:
    return Fragment("boolean", values.format_boolean(value, fmt))


# ── Numbers and sizes ────────────────────────────────────────────────


def number(value: float, min_fraction_digits: int | None = None, max_fraction_digits: int | None = None) -> Fragment:
    return Fragment("number", values.format_number(value, min_fraction_digits, max_fraction_digits))


def counts(value: int) -> Fragment:
    return Fragment("counts", values.format_number(value))


def token_usage(value: int) -> Fragment:
    return Fragment("token_usage", values.format_number(value))


def percentage(value: float, decimals: int = 1) -> Fragment:
    return Fragment("percentage", values.format_percentage(value, decimals))


def size(num_bytes: float) -> Fragment:
    return Fragment("size", values.format_size(num_bytes))


def bytes_(num_bytes: float, decimals: int = 1) -> Fragment:
    return Fragment("bytes", values.format_bytes(num_bytes, decimals))


def speed(value: float, unit: str, decimals: int = 1) -> Fragment:
    return Fragment("speed", values.format_speed(value, unit, decimals))


def progress(current: float, total: float) -> Fragment:
    return Fragment("progress", values.format_progress(current, total))


# ── Time ─────────────────────────────────────────────────────────────


def date(value: datetime | str) -> Fragment:
    return Fragment("date", values.format_date(value))


def timestamp(value: datetime | str) -> Fragment:
    return Fragment("timestamp", values.format_timestamp(value))


def duration(ms: float) -> Fragment:
    return Fragment("duration", values.format_duration(ms))


def time_ago(value: datetime | str, now: datetime | None = None) -> Fragment:
    return Fragment("time_ago", values.format_time_ago(value, now))


def time_range(start: datetime | str, end: datetime | str) -> Fragment:
    return Fragment("time_range", values.format_time_range(start, end))
