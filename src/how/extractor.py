"""Extract suggested shell commands from an LLM response."""

import logging
import re

from pydantic import ValidationError

from how.fences import iter_fences
from how.models import (
    COMMAND_CATEGORIES,
    UNSAFE_COMMANDS,
    Command,
    CommandCategory,
    ExtractedCommands,
    categorize_command,
    is_command_safe,
    strip_prompt_prefix,
)

log = logging.getLogger(__name__)

SHELL_LANGUAGES = frozenset({"bash", "shell", "sh", ""})

__all__ = [
    "COMMAND_CATEGORIES",
    "CommandCategory",
    "CommandExtractor",
    "SHELL_LANGUAGES",
    "UNSAFE_COMMANDS",
    "categorize_command",
    "extract_commands",
    "is_command_safe",
]


class CommandExtractor:
    """Pull a typed command list out of response text.

    A ``<structured_commands>`` JSON block wins when it decodes; otherwise
    every line of the shell-fenced code blocks becomes a command.
    """

    def __init__(self) -> None:
        self._structured_re = re.compile(
            r"<structured_commands>(.*?)</structured_commands>", re.DOTALL
        )

    def extract(self, text: str) -> ExtractedCommands:
        text = text.replace("\r\n", "\n")
        structured = self.extract_structured(text)
        if structured is not None:
            return structured
        return self.extract_from_code_blocks(text)

    def extract_structured(self, text: str) -> ExtractedCommands | None:
        """Decode the first structured-commands block, or None if absent or invalid."""
        match = self._structured_re.search(text)
        if match is None:
            return None

        payload = match.group(1).strip()
        try:
            result = ExtractedCommands.model_validate_json(payload)
        except ValidationError as e:
            log.debug("structured commands block rejected (%d errors)", e.error_count())
            return None
        log.debug(
            "structured block: %d commands, %d workflows",
            len(result.commands),
            len(result.workflows),
        )
        return result

    def extract_from_code_blocks(self, text: str) -> ExtractedCommands:
        commands: list[Command] = []
        for fence in iter_fences(text):
            if fence.language.lower() not in SHELL_LANGUAGES:
                continue
            for raw_line in fence.body.split("\n"):
                line = raw_line.strip()
                if not line or line.startswith("#"):
                    continue
                line = strip_prompt_prefix(line)
                if not line:
                    continue
                commands.append(
                    Command(
                        command=line,
                        description="",
                        order=len(commands) + 1,
                        safe=is_command_safe(line),
                        category=categorize_command(line),
                    )
                )
        log.debug("extracted %d commands from code blocks", len(commands))
        return ExtractedCommands(commands=commands, workflows=[])


def extract_commands(text: str) -> ExtractedCommands:
    """Extract commands with a one-off extractor."""
    return CommandExtractor().extract(text)
