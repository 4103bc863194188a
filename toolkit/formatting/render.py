"""Renderers that walk a fragment tree for one destination.

Console output is built as a ``rich.text.Text`` and exported with ANSI
escapes (or as plain text). Rich output is a tree of JSON-serialisable
``{"tag", "props", "children"}`` nodes that a UI can map onto its own
components, or that ``node_to_html`` serialises directly.
"""

from __future__ import annotations

import html
import io

from rich.console import Console
from rich.text import Text

from contracts.tool_sdk import Destination, RichNode
from toolkit.formatting.fragments import Fragment
from toolkit.formatting.styles import (
    DEFAULT_BROWSER_STYLES,
    DEFAULT_CONSOLE_STYLES,
    BrowserStyles,
    ConsoleStyles,
)

_CONSOLE_WIDTH = 10_000
_LIST_INDENT = "  "

_TAGS = {
    "label": "strong",
    "list": "ul",
    "container": "div",
    "box": "div",
    "block": "div",
    "title": "div",
    "pre": "pre",
    "code": "code",
    "link": "a",
    "image": "img",
}
_VOID_TAGS = frozenset({"img", "br"})


# ── Console ──────────────────────────────────────────────────────────


def render_console(
    fragment: Fragment,
    styles: ConsoleStyles | None = None,
    *,
    color: bool = True,
) -> str:
    """Render *fragment* as terminal text, ANSI-styled unless ``color=False``."""
    text = _to_text(fragment, styles or DEFAULT_CONSOLE_STYLES)
    if not color:
        return text.plain

    console = Console(
        file=io.StringIO(),
        force_terminal=True,
        color_system="standard",
        no_color=False,
        width=_CONSOLE_WIDTH,
        highlight=False,
        markup=False,
        emoji=False,
    )
    with console.capture() as capture:
        console.print(text, end="", soft_wrap=True)
    return capture.get()


def _to_text(fragment: Fragment, styles: ConsoleStyles) -> Text:
    kind = fragment.kind
    style = styles.style_for(kind, fragment.variant)

    if kind == "block":
        return Text("\n").join(_to_text(c, styles) for c in fragment.children)
    if kind == "list":
        return Text("\n").join(
            Text(_LIST_INDENT).append_text(_to_text(c, styles)) for c in fragment.children
        )
    if kind == "title":
        return Text.assemble(
            (fragment.text, style),
            " ",
            (f"({fragment.attrs['tool_name']})", styles.style_for("title", "tool_name")),
        )
    if kind == "image":
        return Text(f"[image: {fragment.text}]", style=style)

    out = Text(fragment.text, style=style)
    for child in fragment.children:
        out.append_text(_to_text(child, styles))
    return out


# ── Rich nodes ───────────────────────────────────────────────────────


def render_rich(fragment: Fragment, styles: BrowserStyles | None = None) -> RichNode:
    """Render *fragment* as a structured node tree."""
    node = _to_node(fragment, styles or DEFAULT_BROWSER_STYLES)
    if isinstance(node, str):
        return {"tag": "span", "props": {}, "children": [node]}
    return node


def _to_node(fragment: Fragment, styles: BrowserStyles) -> RichNode | str:
    kind = fragment.kind
    if kind == "text":
        return fragment.text

    children: list[RichNode | str]
    if kind == "group":
        return {
            "tag": "span",
            "props": {},
            "children": [_to_node(c, styles) for c in fragment.children],
        }

    props: dict[str, str] = {"className": styles.class_for(kind, fragment.variant)}
    if kind == "title":
        children = [
            fragment.text,
            " ",
            {
                "tag": "span",
                "props": {"className": styles.class_for("tool_name")},
                "children": [f"({fragment.attrs['tool_name']})"],
            },
        ]
    elif kind == "list":
        children = [
            {
                "tag": "li",
                "props": {"className": styles.class_for("list_item")},
                "children": [_to_node(c, styles)],
            }
            for c in fragment.children
        ]
    elif kind == "block":
        children = [
            {"tag": "div", "props": {}, "children": [_to_node(c, styles)]}
            for c in fragment.children
        ]
    elif kind == "image":
        props.update(src=fragment.attrs["src"], alt=fragment.attrs["alt"])
        children = []
    else:
        if kind == "link":
            props.update(href=fragment.attrs["href"], target="_blank", rel="noopener noreferrer")
        children = [fragment.text] if fragment.text else []
        children.extend(_to_node(c, styles) for c in fragment.children)

    return {"tag": _TAGS.get(kind, "span"), "props": props, "children": children}


def node_to_html(node: RichNode | str) -> str:
    """Serialise a rich node tree to escaped HTML."""
    if isinstance(node, str):
        return html.escape(node)
    attrs = "".join(
        f' {"class" if key == "className" else key}="{html.escape(str(value), quote=True)}"'
        for key, value in node["props"].items()
        if value
    )
    tag = node["tag"]
    if tag in _VOID_TAGS:
        return f"<{tag}{attrs}>"
    inner = "".join(node_to_html(child) for child in node["children"])
    return f"<{tag}{attrs}>{inner}</{tag}>"


def render(
    fragment: Fragment,
    destination: Destination | str,
    *,
    console_styles: ConsoleStyles | None = None,
    browser_styles: BrowserStyles | None = None,
) -> str | RichNode:
    if Destination(destination) is Destination.CONSOLE:
        return render_console(fragment, console_styles)
    return render_rich(fragment, browser_styles)
