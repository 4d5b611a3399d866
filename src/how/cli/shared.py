"""Shared CLI presentation helpers."""

import logging
import os
import sys
from typing import TextIO

from how.constants import BOLD, BRIGHT_BLACK, CYAN, RESET, YELLOW
from how.models import Command, ExtractedCommands

WARNING_SIGN = "⚠"


def supports_color(stream: TextIO | None = None) -> bool:
    """Return whether ANSI color output should be used."""
    if os.getenv("NO_COLOR") is not None:
        return False
    if os.getenv("TERM", "").lower() == "dumb":
        return False
    stream = stream if stream is not None else sys.stdout
    return hasattr(stream, "isatty") and stream.isatty()


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(name)s %(levelname)s: %(message)s",
    )


def add_common_arguments(parser) -> None:
    """Flags every subcommand accepts."""
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Config file (default: ~/.config/how/config.yaml)",
    )


def format_suggested_command(command: Command, color: bool) -> str:
    """Return a shell-like prompt line, flagged when the command is unsafe."""
    warning = "" if command.safe else f"{WARNING_SIGN} "
    if color:
        if warning:
            warning = f"{YELLOW}{warning}{RESET}"
        return f"  {warning}{BOLD}{CYAN}${RESET} {command.command}"
    return f"  {warning}$ {command.command}"


def format_description(description: str, color: bool) -> str:
    if color:
        return f"    {BRIGHT_BLACK}{description}{RESET}"
    return f"    {description}"


def print_commands(commands: ExtractedCommands, color: bool, out: TextIO | None = None) -> None:
    """Print suggested commands, then any workflows with their ordered steps."""
    out = out if out is not None else sys.stdout
    if not commands.has_commands():
        return

    if commands.commands:
        print("\nSuggested commands:", file=out)
        for command in sorted(commands.commands, key=lambda c: c.order):
            print(format_suggested_command(command, color), file=out)
            if command.description:
                print(format_description(command.description, color), file=out)

    for workflow in commands.workflows:
        title = f"{BOLD}{workflow.name}{RESET}" if color else workflow.name
        print(f"\nWorkflow: {title}", file=out)
        if workflow.description:
            print(format_description(workflow.description, color), file=out)
        for step in sorted(workflow.steps, key=lambda c: c.order):
            print(format_suggested_command(step, color), file=out)
            if step.description:
                print(format_description(step.description, color), file=out)
