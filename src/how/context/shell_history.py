"""Read recent commands from the user's shell history file."""

import logging
from datetime import datetime
from pathlib import Path

from how.models import CommandHistory

log = logging.getLogger(__name__)

HISTORY_FILES = {
    "bash": Path(".bash_history"),
    "zsh": Path(".zsh_history"),
    "fish": Path(".local") / "share" / "fish" / "fish_history",
}


def _timestamp(value: str) -> datetime | None:
    try:
        return datetime.fromtimestamp(int(value.strip()))
    except (ValueError, OverflowError, OSError):
        return None


def parse_plain_history(text: str) -> list[CommandHistory]:
    """Bash format: one command per line; ``#`` lines are timestamps or comments."""
    commands = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if line and not line.startswith("#"):
            commands.append(CommandHistory(command=line))
    return commands


def parse_zsh_history(text: str) -> list[CommandHistory]:
    """Zsh extended format: ``: <timestamp>:<duration>;<command>``."""
    commands = []
    for line in text.splitlines():
        if not line.startswith(": "):
            continue
        meta, sep, command = line[2:].partition(";")
        if not sep or not command.strip():
            continue
        timestamp = _timestamp(meta.split(":", 1)[0])
        if timestamp is None:
            continue
        commands.append(CommandHistory(command=command.strip(), timestamp=timestamp))
    return commands


def parse_fish_history(text: str) -> list[CommandHistory]:
    """Fish format: YAML-like ``- cmd: ...`` entries with an optional ``when:``."""
    commands: list[CommandHistory] = []
    current: CommandHistory | None = None
    for line in text.splitlines():
        if line.startswith("- cmd: "):
            if current is not None and current.command:
                commands.append(current)
            current = CommandHistory(command=line[len("- cmd: "):].strip())
        elif line.startswith("  when: ") and current is not None:
            current.timestamp = _timestamp(line[len("  when: "):])
    if current is not None and current.command:
        commands.append(current)
    return commands


PARSERS = {
    "bash": parse_plain_history,
    "zsh": parse_zsh_history,
    "fish": parse_fish_history,
}


def get_recent_commands(
    shell: str, count: int, home: Path | None = None
) -> list[CommandHistory]:
    """Return the last ``count`` commands; unknown shells are read as bash."""
    if count <= 0:
        return []
    kind = shell if shell in PARSERS else "bash"
    history_file = (home or Path.home()) / HISTORY_FILES[kind]
    try:
        text = history_file.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        log.debug("cannot read %s history %s: %s", kind, history_file, e)
        return []
    commands = PARSERS[kind](text)
    log.debug("read %d %s history entries from %s", len(commands), kind, history_file)
    return commands[-count:]
