# CLI interface for cfgsync
import argparse
import logging
import sys
import threading

from cfgsync import __version__
from cfgsync.config import scope_from
from cfgsync.models import ConfigChangeEvent, ToolType
from cfgsync.sync import ConfigService
from cfgsync.utils.validation import ConfigError
from cfgsync.watcher import FileWatcher

# ABOUTME: Exit codes
# 0 = success, 1 = partial success / skipped, 2 = config error, 3 = fatal
EXIT_SUCCESS = 0
EXIT_PARTIAL = 1
EXIT_CONFIG_ERROR = 2
EXIT_FATAL = 3


def _tool(value: str) -> ToolType:
    try:
        return ToolType.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def cmd_servers(args: argparse.Namespace) -> int:
    """List MCP servers for a tool.

    ABOUTME: Shows command line for local servers, url for remote ones
    """
    service = ConfigService()
    scope = scope_from(args.project)
    servers = service.get_mcp_servers(args.tool, scope)

    print(f"MCP servers for {args.tool.display_name} ({scope.label}):")
    print()
    for server in servers:
        print(f"  {server.name}")
        if server.is_remote:
            print(f"    url: {server.url}")
        else:
            print(f"    command: {' '.join([server.command, *server.args]).strip()}")
        if server.env:
            print(f"    env: {', '.join(f'{k}={v}' for k, v in sorted(server.env.items()))}")
        if not server.enabled:
            print("    disabled")
    print()
    print(f"Total: {len(servers)} server(s)")
    return EXIT_SUCCESS


def cmd_skills(args: argparse.Namespace) -> int:
    service = ConfigService()
    scope = scope_from(args.project)
    skills = service.get_skills(args.tool, scope)

    print(f"Skills for {args.tool.display_name} ({scope.label}):")
    print()
    for skill in skills:
        suffix = f" - {skill.description}" if skill.description else ""
        print(f"  {skill.name}{suffix}")
    print()
    print(f"Total: {len(skills)} skill(s)")
    return EXIT_SUCCESS


def cmd_rules(args: argparse.Namespace) -> int:
    service = ConfigService()
    content = service.get_rules(args.tool, scope_from(args.project))
    if content:
        sys.stdout.write(content if content.endswith("\n") else content + "\n")
    return EXIT_SUCCESS


def cmd_copy_mcp(args: argparse.Namespace) -> int:
    """Copy an MCP server between tools.

    ABOUTME: Prints conversion warnings; returns EXIT_PARTIAL when skipped
    """
    service = ConfigService()
    scope = scope_from(args.project)
    result = service.copy_mcp_to_tool(args.from_tool, args.to_tool, args.name, scope)

    if result.skipped:
        print(f"'{args.name}' already exists in {args.to_tool.display_name}, skipped.")
        return EXIT_PARTIAL

    print(f"Copied '{args.name}' from {args.from_tool.display_name} to {args.to_tool.display_name}.")
    for warning in result.warnings:
        print(f"  Warning: {warning}")
    return EXIT_SUCCESS


def cmd_copy_skill(args: argparse.Namespace) -> int:
    service = ConfigService()
    scope = scope_from(args.project)
    result = service.copy_skill_to_tool(args.from_tool, args.to_tool, args.name, scope)

    if result.skipped:
        print(f"Skill '{args.name}' already exists in {args.to_tool.display_name}, skipped.")
        return EXIT_PARTIAL

    print(f"Copied skill '{args.name}' from {args.from_tool.display_name} to {args.to_tool.display_name}.")
    return EXIT_SUCCESS


def cmd_detect(args: argparse.Namespace) -> int:
    tools = ConfigService().detect_project_tools(args.path)
    for tool in tools:
        print(tool.display_name)
    return EXIT_SUCCESS


def cmd_summary(args: argparse.Namespace) -> int:
    summaries = ConfigService().get_project_config_summary(args.path)

    print(f"Config summary for {args.path}:")
    print()
    for summary in summaries:
        rules = "yes" if summary.has_rules else "no"
        print(
            f"  {summary.tool.display_name}: {summary.mcp_count} server(s), "
            f"{summary.skills_count} skill(s), rules: {rules}"
        )
    return EXIT_SUCCESS


def cmd_watch(args: argparse.Namespace) -> int:
    """Print config change events until interrupted.

    ABOUTME: Watches every tool's global config dir plus any --project dirs
    """
    def on_change(event: ConfigChangeEvent) -> None:
        print(f"[{event.scope}] {event.tool.display_name}: {event.path}", flush=True)

    with FileWatcher(on_change) as watcher:
        watcher.start_global_watch()
        for project in args.project or []:
            watcher.watch_project(project)

        roots = watcher.watched_roots()
        print(f"Watching {len(roots)} director(ies). Press Ctrl+C to stop.", flush=True)
        try:
            threading.Event().wait()
        except KeyboardInterrupt:
            print()
    return EXIT_SUCCESS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cfgsync",
        description="Inspect and sync MCP servers, skills and rules across AI coding tools",
    )
    parser.add_argument("--version", "-V", action="version", version=f"cfgsync v{__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    for name, func, help_text in (
        ("servers", cmd_servers, "List MCP servers for a tool"),
        ("skills", cmd_skills, "List skills for a tool"),
        ("rules", cmd_rules, "Print the rules file for a tool"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("tool", type=_tool, help="claude, codex, gemini or opencode")
        sub.add_argument("--project", help="Project directory (default: global scope)")
        sub.set_defaults(func=func)

    for name, func, help_text in (
        ("copy-mcp", cmd_copy_mcp, "Copy an MCP server to another tool"),
        ("copy-skill", cmd_copy_skill, "Copy a skill to another tool"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("from_tool", type=_tool, help="Source tool")
        sub.add_argument("to_tool", type=_tool, help="Destination tool")
        sub.add_argument("name", help="Server or skill name")
        sub.add_argument("--project", help="Project directory (default: global scope)")
        sub.set_defaults(func=func)

    detect_parser = subparsers.add_parser("detect", help="List tools configured in a project")
    detect_parser.add_argument("path", help="Project directory")
    detect_parser.set_defaults(func=cmd_detect)

    summary_parser = subparsers.add_parser("summary", help="Summarize a project's tool configs")
    summary_parser.add_argument("path", help="Project directory")
    summary_parser.set_defaults(func=cmd_summary)

    watch_parser = subparsers.add_parser("watch", help="Report external config changes")
    watch_parser.add_argument(
        "--project", action="append", help="Also watch a project directory (repeatable)"
    )
    watch_parser.set_defaults(func=cmd_watch)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    ABOUTME: Parses args and dispatches to appropriate command
    ABOUTME: Returns exit code for sys.exit()
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    if not getattr(args, "func", None):
        parser.print_help()
        return EXIT_SUCCESS

    try:
        return int(args.func(args))
    except (ConfigError, ValueError, LookupError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except OSError as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())
