"""Model package for how."""

from how.models.commands import (
    COMMAND_CATEGORIES,
    UNSAFE_COMMANDS,
    Command,
    CommandCategory,
    ExtractedCommands,
    Workflow,
    categorize_command,
    is_command_safe,
    strip_prompt_prefix,
)
from how.models.content_block import CodeBlock, ContentBlock, TextBlock
from how.models.context import (
    CommandHistory,
    Context,
    FileContext,
    GitContext,
    HistoryEntry,
    ProjectContext,
)
from how.models.formatter_config import PRESETS, FormatterConfig, get_preset
from how.models.how_config import (
    ContextConfig,
    DisplayConfig,
    HistoryConfig,
    HowConfig,
    ProviderConfig,
)
from how.models.provider import (
    Capabilities,
    ProviderInfo,
    ProviderSpec,
    Response,
    StreamChunk,
)

__all__ = [
    "COMMAND_CATEGORIES",
    "Capabilities",
    "CodeBlock",
    "Command",
    "CommandCategory",
    "CommandHistory",
    "ContentBlock",
    "Context",
    "ContextConfig",
    "DisplayConfig",
    "ExtractedCommands",
    "FileContext",
    "FormatterConfig",
    "GitContext",
    "HistoryConfig",
    "HistoryEntry",
    "HowConfig",
    "PRESETS",
    "ProjectContext",
    "ProviderConfig",
    "ProviderInfo",
    "ProviderSpec",
    "Response",
    "StreamChunk",
    "TextBlock",
    "UNSAFE_COMMANDS",
    "Workflow",
    "categorize_command",
    "get_preset",
    "is_command_safe",
    "strip_prompt_prefix",
]
