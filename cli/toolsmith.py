"""Toolsmith CLI: inspect tools, validate and run inputs, and query audit logs."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
import uuid
from pathlib import Path

from rich.console import Console
from rich.text import Text


def _load_settings(args: argparse.Namespace):
    from contracts.settings import ToolsmithSettings
    from toolkit.settings import configure_logging, load_settings

    if not getattr(args, "settings", None):
        return ToolsmithSettings()
    try:
        settings = load_settings(args.settings)
    except FileNotFoundError:
        print(f"Error: settings not found: {args.settings}", file=sys.stderr)
        sys.exit(1)
    except Exception as exc:
        print(f"Error: invalid settings: {exc}", file=sys.stderr)
        sys.exit(1)
    configure_logging(settings)
    return settings


def _get_tool(registry, name: str):
    from contracts.errors import ToolNotFoundError

    try:
        return registry.get(name)
    except ToolNotFoundError:
        print(f"Unknown tool: {name}", file=sys.stderr)
        print(f"Available tools: {', '.join(registry.list_tools())}", file=sys.stderr)
        sys.exit(1)


def _parse_input(raw: str) -> dict:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        print(f"Error: tool input is not valid JSON: {exc}", file=sys.stderr)
        sys.exit(2)
    if not isinstance(data, dict):
        print("Error: tool input must be a JSON object", file=sys.stderr)
        sys.exit(2)
    return data


def _print_entry(console: Console, entry) -> None:
    heading = Text.from_ansi(entry.title)
    if entry.subtitle:
        heading.append("  ").append_text(Text.from_ansi(entry.subtitle))
    console.print(heading, soft_wrap=True)
    console.print(Text.from_ansi(entry.content), soft_wrap=True)


def cmd_tools(args: argparse.Namespace) -> None:
    """List registered tools and their feature flags."""
    from toolkit.registry import create_default_registry

    registry = create_default_registry(_load_settings(args))
    if not len(registry):
        print("No tools enabled.")
        return
    for name in registry.list_tools():
        tool = registry.get(name)
        flags = [k for k, v in tool.features.model_dump(by_alias=True).items() if v]
        print(f"{name:20s} {tool.description}")
        print(f"{'':20s} features: {', '.join(flags) or '(none)'}")


def cmd_schema(args: argparse.Namespace) -> None:
    """Print a tool's input schema."""
    from toolkit.registry import create_default_registry

    tool = _get_tool(create_default_registry(_load_settings(args)), args.tool)
    print(json.dumps(tool.input_schema, indent=2))


def cmd_validate(args: argparse.Namespace) -> None:
    """Validate a JSON input against a tool's schema."""
    from toolkit.registry import create_default_registry
    from toolkit.validation import SchemaValidator

    tool = _get_tool(create_default_registry(_load_settings(args)), args.tool)
    tool_input = _parse_input(args.input)
    if tool.validate_input(tool_input):
        print(f"Input OK for {tool.name}")
        return
    print(f"Input rejected for {tool.name}:", file=sys.stderr)
    for message in SchemaValidator.compile(tool.input_schema).errors(tool_input):
        print(f"  {message}", file=sys.stderr)
    sys.exit(1)


def cmd_run(args: argparse.Namespace) -> None:
    """Run a tool against a local project and print its log entries."""
    from contracts.message import ToolInvocation
    from contracts.tool_sdk import Destination
    from toolkit.audit.logger import JsonlAuditLogger
    from toolkit.registry import create_default_registry
    from toolkit.runner import ToolRunner
    from toolkit.testing import FilesystemProjectEditor, InMemoryInteraction

    settings = _load_settings(args)
    registry = create_default_registry(settings)
    tool = _get_tool(registry, args.tool)
    tool_input = _parse_input(args.input)

    root = args.project or settings.project.root
    if not Path(root).is_dir():
        print(f"Error: project directory not found: {root}", file=sys.stderr)
        sys.exit(1)
    editor = FilesystemProjectEditor(root, settings.project.id)
    interaction = InMemoryInteraction(editor)
    audit = JsonlAuditLogger(settings.audit.path) if settings.audit.enabled else None
    runner = ToolRunner(registry, audit_logger=audit)
    console = Console(highlight=False, no_color=args.no_color or None)

    invocation = ToolInvocation(
        tool_use_id=str(uuid.uuid4()),
        tool_name=tool.name,
        tool_input=tool_input,
    )
    _print_entry(console, tool.format_tool_use(tool_input, Destination.CONSOLE))

    outcome = asyncio.run(runner.run(interaction, invocation, editor))
    if not outcome.validation.validated:
        print(f"Input rejected: {outcome.validation.results}", file=sys.stderr)
        sys.exit(1)
    if outcome.error is not None:
        print(f"Error: {outcome.error}", file=sys.stderr)
        sys.exit(1)

    console.print()
    _print_entry(console, tool.format_tool_result(outcome.result, Destination.CONSOLE))
    console.print()
    console.print(outcome.result.tool_response, markup=False, soft_wrap=True)
    runner.finalize(invocation.tool_use_id, str(uuid.uuid4()))


def cmd_logs(args: argparse.Namespace) -> None:
    """Query audit logs."""
    from contracts.audit import AuditEvent
    from toolkit.audit.query import (
        outcome_counts,
        query_by_event,
        query_by_invocation,
        query_filtered,
        tail,
    )

    log_path = args.log_path

    if not Path(log_path).exists():
        print(f"No audit log found at {log_path}", file=sys.stderr)
        sys.exit(1)

    event = None
    if args.event:
        try:
            event = AuditEvent(args.event)
        except ValueError:
            valid = ", ".join(e.value for e in AuditEvent)
            print(f"Unknown event type: {args.event}", file=sys.stderr)
            print(f"Valid events: {valid}", file=sys.stderr)
            sys.exit(1)

    if args.summary:
        counts = outcome_counts(log_path)
        if not counts:
            print("No tool outcomes recorded.")
        for name in sorted(counts):
            c = counts[name]
            print(f"{name:20s} result={c['result']}  error={c['error']}  reject={c['reject']}")
        return

    if args.invocation_id:
        entries = query_by_invocation(log_path, args.invocation_id)
    elif args.tool:
        entries, _ = query_filtered(log_path, event=event, tool_name=args.tool, limit=args.limit)
        entries.reverse()
    elif event is not None:
        entries = query_by_event(log_path, event, limit=args.limit)
    else:
        entries = tail(log_path, n=args.limit)

    if not entries:
        print("No matching audit entries.")
        return

    for entry in entries:
        record = json.loads(entry.model_dump_json())
        if args.json:
            print(json.dumps(record))
        else:
            ts = record["ts"][:19]
            iid = record["invocation_id"][:8]
            detail = json.dumps(record.get("detail", {}))
            print(f"{ts}  [{record['event']:13s}]  {iid}  {record['tool_name']}  {detail}")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="toolsmith",
        description="Toolsmith: inspect, validate and run LLM tools",
    )
    sub = parser.add_subparsers(dest="command")

    # tools
    p_tools = sub.add_parser("tools", help="List registered tools")
    p_tools.add_argument("--settings", "-s", help="Path to toolsmith.yaml")
    p_tools.set_defaults(func=cmd_tools)

    # schema
    p_schema = sub.add_parser("schema", help="Print a tool's input schema")
    p_schema.add_argument("tool", help="Tool name")
    p_schema.add_argument("--settings", "-s", help="Path to toolsmith.yaml")
    p_schema.set_defaults(func=cmd_schema)

    # validate
    p_val = sub.add_parser("validate", help="Validate JSON input for a tool")
    p_val.add_argument("tool", help="Tool name")
    p_val.add_argument("input", help="Tool input as a JSON object")
    p_val.add_argument("--settings", "-s", help="Path to toolsmith.yaml")
    p_val.set_defaults(func=cmd_validate)

    # run
    p_run = sub.add_parser("run", help="Run a tool against a local project")
    p_run.add_argument("tool", help="Tool name")
    p_run.add_argument("input", help="Tool input as a JSON object")
    p_run.add_argument("--project", "-p", help="Project root (default: from settings, else .)")
    p_run.add_argument("--settings", "-s", help="Path to toolsmith.yaml")
    p_run.add_argument("--no-color", action="store_true", help="Disable ANSI styling")
    p_run.set_defaults(func=cmd_run)

    # logs
    p_logs = sub.add_parser("logs", help="Query audit logs")
    p_logs.add_argument("log_path", help="Path to audit JSONL file")
    p_logs.add_argument("--invocation-id", "-i", help="Filter by invocation (tool use) ID")
    p_logs.add_argument("--event", "-e", help="Filter by event type")
    p_logs.add_argument("--tool", "-t", help="Filter by tool name")
    p_logs.add_argument("--limit", "-n", type=int, default=20, help="Max entries")
    p_logs.add_argument("--json", action="store_true", help="Output raw JSON")
    p_logs.add_argument("--summary", action="store_true", help="Per-tool outcome totals")
    p_logs.set_defaults(func=cmd_logs)

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
