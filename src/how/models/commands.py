"""Command list models and the safety/category tables used to classify them."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

PROMPT_PREFIXES = ("$ ", "# ", "> ")
PROMPT_SIGILS = frozenset(prefix.strip() for prefix in PROMPT_PREFIXES)

UNSAFE_COMMANDS = frozenset({"rm", "sudo", "chmod", "mv", "dd", "mkfs", "fdisk"})


class CommandCategory(str, Enum):
    FILE = "file"
    NETWORK = "network"
    SYSTEM = "system"
    GIT = "git"
    PACKAGE = "package"
    BUILD = "build"
    GENERAL = "general"


COMMAND_CATEGORIES: dict[str, CommandCategory] = {
    "ls": CommandCategory.FILE,
    "cat": CommandCategory.FILE,
    "grep": CommandCategory.FILE,
    "find": CommandCategory.FILE,
    "curl": CommandCategory.NETWORK,
    "wget": CommandCategory.NETWORK,
    "ping": CommandCategory.NETWORK,
    "ps": CommandCategory.SYSTEM,
    "top": CommandCategory.SYSTEM,
    "df": CommandCategory.SYSTEM,
    "free": CommandCategory.SYSTEM,
    "git": CommandCategory.GIT,
    "npm": CommandCategory.PACKAGE,
    "pip": CommandCategory.PACKAGE,
    "go": CommandCategory.BUILD,
}


def _first_token(command: str) -> str:
    parts = command.split(maxsplit=1)
    return parts[0] if parts else ""


def is_command_safe(command: str) -> bool:
    """Return False when the command starts with a known-destructive program."""
    token = _first_token(command)
    return bool(token) and token not in UNSAFE_COMMANDS


def categorize_command(command: str) -> CommandCategory:
    """Map a command's first token to its category, defaulting to general."""
    return COMMAND_CATEGORIES.get(_first_token(command), CommandCategory.GENERAL)


def strip_prompt_prefix(line: str) -> str:
    """Remove shell prompt sigils (``$ ``, ``# ``, ``> ``) from the start of a line."""
    line = line.strip()
    while line.startswith(PROMPT_PREFIXES):
        line = line[2:].strip()
    # A sigil with nothing after it is an empty prompt.
    if line in PROMPT_SIGILS:
        return ""
    return line


class Command(BaseModel):
    """A single suggested shell command."""

    command: str
    description: str = ""
    order: int = Field(default=1, ge=1)
    safe: bool = False
    # Not part of the structured-commands wire schema.
    category: CommandCategory | None = Field(default=None, exclude=True)

    @field_validator("command")
    @classmethod
    def _clean_command(cls, value: str) -> str:
        value = strip_prompt_prefix(value)
        if not value:
            raise ValueError("command must not be empty")
        return value

    @field_validator("description", mode="before")
    @classmethod
    def _none_description(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("category", mode="before")
    @classmethod
    def _known_category(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return CommandCategory(value.strip().lower())
            except ValueError:
                return None
        return value

    @model_validator(mode="after")
    def _classify(self) -> "Command":
        if self.category is None:
            self.category = categorize_command(self.command)
        if self.safe and not is_command_safe(self.command):
            self.safe = False
        return self


def _fill_orders(items: Any) -> Any:
    """Default each missing or non-positive ``order`` to its 1-based position."""
    if items is None:
        return []
    if not isinstance(items, list):
        return items
    filled = []
    for position, item in enumerate(items, start=1):
        if isinstance(item, dict):
            order = item.get("order")
            if not isinstance(order, int) or isinstance(order, bool) or order < 1:
                item = {**item, "order": position}
        filled.append(item)
    return filled


class Workflow(BaseModel):
    """A named, ordered sequence of commands."""

    name: str
    description: str = ""
    steps: list[Command] = Field(default_factory=list)

    @field_validator("description", mode="before")
    @classmethod
    def _none_description(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("steps", mode="before")
    @classmethod
    def _default_step_orders(cls, value: Any) -> Any:
        return _fill_orders(value)


class ExtractedCommands(BaseModel):
    """Everything the extractor found in one response."""

    commands: list[Command] = Field(default_factory=list)
    workflows: list[Workflow] = Field(default_factory=list)

    @field_validator("commands", mode="before")
    @classmethod
    def _default_command_orders(cls, value: Any) -> Any:
        return _fill_orders(value)

    @field_validator("workflows", mode="before")
    @classmethod
    def _none_workflows(cls, value: Any) -> Any:
        return [] if value is None else value

    def all_commands(self) -> list[Command]:
        """Return standalone commands followed by every workflow step."""
        steps = [step for workflow in self.workflows for step in workflow.steps]
        return [*self.commands, *steps]

    def count(self) -> int:
        return len(self.commands) + sum(len(workflow.steps) for workflow in self.workflows)

    def has_commands(self) -> bool:
        return self.count() > 0

    def to_json(self) -> str:
        """Serialise to indented JSON in the structured-commands schema."""
        return self.model_dump_json(indent=2)

    def to_json_compact(self) -> str:
        """Serialise to single-line JSON in the structured-commands schema."""
        return self.model_dump_json()
