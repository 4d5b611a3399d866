"""`how install` command implementation."""

import argparse
import shutil

from how.cli.shared import configure_logging
from how.context import detect_shell

SHELL_CONFIG_FILES = {
    "bash": "~/.bashrc",
    "zsh": "~/.zshrc",
    "fish": "~/.config/fish/config.fish",
}

POSIX_SNIPPET = """\
# how: ask the shell assistant
alias h='{binary}'
# how: explain or fix the last command
how-last() {{
    {binary} "explain and fix if needed: $(fc -ln -1)"
}}
"""

FISH_SNIPPET = """\
# how: ask the shell assistant
alias h '{binary}'
# how: explain or fix the last command
function how-last
    {binary} "explain and fix if needed: $history[1]"
end
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="how install",
        description="Print the shell integration snippet for your shell",
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--shell",
        choices=sorted(SHELL_CONFIG_FILES),
        help="Shell to generate the snippet for (default: detected from $SHELL)",
    )
    return parser


def integration_snippet(shell: str, binary: str) -> str:
    template = FISH_SNIPPET if shell == "fish" else POSIX_SNIPPET
    return template.format(binary=binary)


def shell_config_file(shell: str) -> str:
    return SHELL_CONFIG_FILES.get(shell, "~/.profile")


def run(argv: list[str]) -> int:
    """Execute the install command."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.debug)

    shell = args.shell or detect_shell()
    binary = shutil.which("how") or "how"
    rc_file = shell_config_file(shell)

    print("Shell Integration Setup\n")
    print(f"Detected shell: {shell}\n")
    print(f"Add the following to {rc_file}:\n")
    print(integration_snippet(shell, binary))
    print("After adding the integration, reload your shell:")
    print(f"  source {rc_file}")
    if shell not in SHELL_CONFIG_FILES:
        print("\nUnrecognised shell; the POSIX snippet above works in most sh-compatible shells.")
    return 0
