"""Command-line interface for aura."""

import argparse
import sys
from typing import Sequence

from aura import commands, profile, storage
from aura.errors import AppError
from aura.logging_utils import log_event, setup_logging
from aura.models import GroupBy, Layout, SortBy, TaskStore
from aura.session import Session
from aura.view_pipeline import ALL_VIEW_ID


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="aura",
        description="aura - quick task capture and views",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create a new profile
  aura new -p ~/aura/profile.json

  # Capture tasks (';' or ' / ' separates items)
  aura -p ~/aura/profile.json add "llamar a mamá el viernes; comprar pan"

  # Show today's tasks, or the whole board
  aura -p ~/aura/profile.json list --view hoy
  aura -p ~/aura/profile.json view todas --layout kanban
  aura -p ~/aura/profile.json move 3fa1 in_progress
        """
    )
    parser.add_argument("--profile", "-p", help="Path to profile JSON file")
    parser.add_argument("--log-file", help="Write structured logs to this file")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    parser_new = subparsers.add_parser("new", help="Create a new profile")
    parser_new.add_argument(
        "--profile", "-p",
        dest="new_profile",
        required=True,
        help="Path where to save the profile"
    )

    parser_add = subparsers.add_parser("add", help="Capture tasks from free text")
    parser_add.add_argument("text", nargs="+", help="Task text, e.g. 'pagar factura el lunes'")

    parser_list = subparsers.add_parser("list", help="Show a view")
    parser_list.add_argument("--view", default=ALL_VIEW_ID, help="View id (default: todas)")
    parser_list.add_argument("--search", help="Case-insensitive title filter")

    parser_move = subparsers.add_parser("move", help="Move a task to another group")
    parser_move.add_argument("task_id")
    parser_move.add_argument("group_key", help="Status id, priority or project id")
    parser_move.add_argument("--view", default=ALL_VIEW_ID, help="View whose grouping applies")

    parser_done = subparsers.add_parser("done", help="Toggle a task's completion")
    parser_done.add_argument("task_id")

    parser_view = subparsers.add_parser("view", help="Show or change a view configuration")
    parser_view.add_argument("view_id")
    parser_view.add_argument("--layout", choices=[m.value for m in Layout])
    parser_view.add_argument("--group-by", choices=[m.value for m in GroupBy])
    parser_view.add_argument("--sort-by", choices=[m.value for m in SortBy])
    parser_view.add_argument(
        "--filter",
        nargs=2,
        metavar=("DIMENSION", "VALUE"),
        help="Toggle a filter value (project, priority, status, tag)",
    )
    parser_view.add_argument("--reset", action="store_true", help="Restore the default config")

    return parser


def _create_profile(path: str) -> None:
    prof = profile.create_profile(path)
    storage.save_tasks(prof.data_path, TaskStore())
    storage.save_views(prof.views_path, {})
    log_event("profile_created", profile_file=path)

    print(f"Profile created: {path}")
    print(f"Data file: {prof.data_path}")
    print(f"Views file: {prof.views_path}")
    print(f"Timezone: {prof.timezone}")
    print(f"Capture day starts at: {prof.capture_day_start}")
    print()
    print(f"Start the app with: aura --profile {path} list")


def load_session(profile_path: str) -> Session:
    """Load profile, tasks and views into a session."""
    prof = profile.load_profile(profile_path)
    return Session(
        profile_path=profile_path,
        profile=prof,
        tasks=storage.load_tasks(prof.data_path),
        views=storage.load_views(prof.views_path),
    )


def run_command(args: argparse.Namespace, session: Session) -> str:
    """Dispatch a parsed command against a loaded session."""
    if args.command == "add":
        return commands.cmd_add(session, " ".join(args.text))
    if args.command == "list":
        return commands.cmd_list(session, args.view, args.search)
    if args.command == "move":
        return commands.cmd_move(session, args.task_id, args.group_key, args.view)
    if args.command == "done":
        return commands.cmd_done(session, args.task_id)
    if args.command == "view":
        return commands.cmd_view(
            session,
            args.view_id,
            layout=args.layout,
            group_by=args.group_by,
            sort_by=args.sort_by,
            filter_toggle=tuple(args.filter) if args.filter else None,
            reset=args.reset,
        )
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for aura CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "new":
        setup_logging(args.log_file)
        try:
            _create_profile(args.new_profile)
        except (AppError, OSError) as e:
            print(f"Error creating profile: {e}", file=sys.stderr)
            return 1
        return 0

    if not args.profile:
        parser.error("--profile is required for this command")

    try:
        session = load_session(args.profile)
        setup_logging(args.log_file or session.require_profile().log_path)
        print(run_command(args, session))
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except AppError as e:
        log_event("command_failed", command=args.command, error_type=type(e).__name__, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
