"""ANSI styling constants shared by the renderer and the CLI."""

import re

RESET = "\033[0m"
BOLD = "\033[1m"
ITALIC = "\033[3m"
UNDERLINE = "\033[4m"

RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
CYAN = "\033[36m"
WHITE = "\033[37m"
BRIGHT_BLACK = "\033[90m"

ANSI_RE = re.compile(r"\033\[[0-9;]*m")


def style(text: str, *codes: str) -> str:
    """Wrap text in the given SGR codes followed by a reset."""
    if not codes:
        return text
    return f"{''.join(codes)}{text}{RESET}"


def strip_ansi(text: str) -> str:
    """Remove SGR escape sequences from text."""
    return ANSI_RE.sub("", text)


def visible_len(text: str) -> int:
    """Return the printable width of text, ignoring SGR sequences."""
    return len(strip_ansi(text))
