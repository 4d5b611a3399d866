"""`how history` command implementation."""

import argparse
import sys

from how.cli.shared import add_common_arguments, configure_logging
from how.config import load_config
from how.errors import HowError
from how.history import clear_history, history_path, read_history


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="how history",
        description="Show or clear the conversation history",
    )
    add_common_arguments(parser)
    parser.add_argument(
        "-n",
        "--limit",
        type=int,
        default=10,
        help="Number of recent conversations to show (default: 10)",
    )
    parser.add_argument("action", nargs="?", choices=["show", "clear"], default="show")
    return parser


def run(argv: list[str]) -> int:
    """Execute the history command."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.debug)

    try:
        config = load_config(args.config)
        path = history_path(config.history)
        if args.action == "clear":
            clear_history(path)
            print("Conversation history cleared.")
            return 0
        entries = read_history(path)
    except HowError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not entries:
        print("No conversation history found.")
        return 0

    print("Recent conversations:\n")
    for entry in entries[-args.limit :] if args.limit > 0 else entries:
        stamp = entry.timestamp.strftime("%Y-%m-%d %H:%M") if entry.timestamp else "unknown"
        print(f"[{stamp}] {entry.prompt}")
        for line in entry.response.strip().splitlines():
            print(f"  {line}")
        print("")
    return 0
