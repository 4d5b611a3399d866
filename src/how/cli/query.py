"""One-shot prompt CLI implementation."""

import argparse
import sys
from typing import TextIO

from how import __version__
from how.cli.shared import add_common_arguments, configure_logging, print_commands, supports_color
from how.config import load_config, needs_setup
from how.context import gather_context
from how.how import build_formatter_config, run_query
from how.models import PRESETS, Context, Response
from how.wait_indicator import WaitIndicator

STRUCTURED_MARKER = "<structured_commands>"


def build_parser() -> argparse.ArgumentParser:
    """Build parser for one-shot prompt mode."""
    parser = argparse.ArgumentParser(
        prog="how",
        description="AI-powered shell assistant",
        epilog="Subcommands: setup, history, providers, install",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    add_common_arguments(parser)
    parser.add_argument("-v", "--verbose", action="store_true", help="Show context and metadata")
    parser.add_argument("-s", "--stream", action="store_true", help="Stream the response")
    parser.add_argument("-p", "--provider", help="Provider to use instead of the current one")
    parser.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        help="Formatter preset (default from config)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the extracted commands as JSON instead of the formatted answer",
    )
    parser.add_argument("prompt", nargs="+", help="What you want to do")
    return parser


class StreamEcho:
    """Write streamed text through, hiding everything from the structured block on.

    The tail of the buffer is held back until it can no longer be the start
    of the marker, since the marker may be split across chunks.
    """

    def __init__(self, out: TextIO) -> None:
        self._out = out
        self._pending = ""
        self._hidden = False

    def __call__(self, text: str) -> None:
        if self._hidden:
            return
        self._pending += text
        index = self._pending.find(STRUCTURED_MARKER)
        if index >= 0:
            self._write(self._pending[:index])
            self._pending = ""
            self._hidden = True
            return
        flush_upto = len(self._pending) - (len(STRUCTURED_MARKER) - 1)
        if flush_upto > 0:
            self._write(self._pending[:flush_upto])
            self._pending = self._pending[flush_upto:]

    def finish(self) -> None:
        if not self._hidden:
            self._write(self._pending)
        self._pending = ""
        self._out.write("\n")
        self._out.flush()

    def _write(self, text: str) -> None:
        if text:
            self._out.write(text)
            self._out.flush()


def show_context(context: Context) -> None:
    print("Context:")
    if context.working_directory:
        print(f"  Directory: {context.working_directory}")
    if context.recent_commands:
        print(f"  Recent commands: {len(context.recent_commands)}")
    if context.files:
        print(f"  Files: {len(context.files)}")
    if context.git is not None:
        print(f"  Git: {context.git.repository} ({context.git.branch})")
    if context.project is not None:
        print(f"  Project: {context.project.type}")
    print("")


def format_metadata(response: Response) -> str:
    return (
        f"Provider: {response.provider} | Model: {response.model} | "
        f"Tokens: {response.tokens_used} | Time: {response.response_time:.2f}s"
    )


def run(argv: list[str]) -> int:
    """Execute one-shot prompt mode."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.debug)

    try:
        if needs_setup(args.config):
            print("No provider configured. Run `how setup` first.", file=sys.stderr)
            return 1
        config = load_config(args.config)

        color = config.display.color and supports_color()
        formatter_config = build_formatter_config(args.preset or config.display.preset, color)
        prompt = " ".join(args.prompt)

        context = None
        if args.verbose:
            context = gather_context(config.context)
            show_context(context)

        if args.stream and not args.json:
            echo = StreamEcho(sys.stdout)
            try:
                result = run_query(
                    prompt,
                    config,
                    formatter_config,
                    provider_name=args.provider,
                    on_chunk=echo,
                    context=context,
                )
            finally:
                echo.finish()
        else:
            message = "🤔 Thinking..." if config.display.emoji else "Thinking..."
            with WaitIndicator(message):
                result = run_query(
                    prompt,
                    config,
                    formatter_config,
                    provider_name=args.provider,
                    context=context,
                )
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(result.commands.to_json())
        return 0

    if not args.stream:
        print("")
        sys.stdout.write(result.rendered)
    print_commands(result.commands, color)

    if args.verbose:
        print(f"\n{format_metadata(result.response)}")
    return 0
