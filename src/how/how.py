"""Core logic for how: context, provider round-trip, rendering and extraction."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from how.context import gather_context
from how.errors import ConfigError, HowError, ProviderNotFoundError
from how.extractor import CommandExtractor
from how.formatter import TerminalFormatter
from how.history import append_entry, history_path
from how.models import (
    Context,
    ExtractedCommands,
    FormatterConfig,
    HowConfig,
    Response,
    get_preset,
)
from how.providers import LiteLLMProvider, ProviderManager

log = logging.getLogger("how")
MAX_PROMPT_LENGTH = 4000


@dataclass
class QueryResult:
    """Everything produced for one prompt."""

    response: Response
    rendered: str
    commands: ExtractedCommands


def validate_prompt_length(prompt: str) -> None:
    """Raise when the prompt exceeds the supported maximum length."""
    if not prompt.strip():
        raise ValueError("Please describe what you want to do.")
    if len(prompt) > MAX_PROMPT_LENGTH:
        raise ValueError(
            f"Prompt is too long ({len(prompt)} characters). "
            f"Please keep prompts under {MAX_PROMPT_LENGTH} characters."
        )


def build_formatter_config(preset: str, use_colors: bool) -> FormatterConfig:
    """Resolve a preset, switching colours off when the terminal can't show them."""
    config = get_preset(preset)
    if not use_colors:
        config = config.model_copy(update={"use_colors": False})
    return config


def build_provider(config: HowConfig, provider_name: str | None = None) -> LiteLLMProvider:
    """Create and validate the requested (or current) provider."""
    name = provider_name or config.current_provider
    if not name:
        raise ConfigError("No provider configured. Run `how setup` first.")
    provider_config = config.providers.get(name)
    if provider_config is None:
        raise ProviderNotFoundError(name)
    provider = ProviderManager().create_provider(name, provider_config)
    provider.max_context_size = config.context.max_context_size
    return provider


def render_response(text: str, formatter_config: FormatterConfig) -> tuple[str, ExtractedCommands]:
    """Render the answer for the terminal and pull out its suggested commands."""
    rendered = TerminalFormatter(formatter_config).format(text)
    commands = CommandExtractor().extract(text)
    return rendered, commands


def _collect_stream(
    provider: LiteLLMProvider,
    prompt: str,
    context: Context,
    on_chunk: Callable[[str], None],
) -> Response:
    parts: list[str] = []
    start = time.monotonic()
    for chunk in provider.send_prompt_stream(prompt, context):
        if chunk.error is not None:
            raise chunk.error
        if chunk.text:
            parts.append(chunk.text)
            on_chunk(chunk.text)
        if chunk.done:
            break
    return Response(
        text="".join(parts),
        model=provider.model,
        provider=provider.type,
        response_time=time.monotonic() - start,
    )


def run_query(
    prompt: str,
    config: HowConfig,
    formatter_config: FormatterConfig,
    provider_name: str | None = None,
    on_chunk: Callable[[str], None] | None = None,
    context: Context | None = None,
) -> QueryResult:
    """Run the core pipeline for one prompt.

    With ``on_chunk`` the answer is streamed and each piece is passed to the
    callback as it arrives. The callback has already shown the text, so a
    streamed answer is not rendered and ``rendered`` is empty; commands are
    still extracted from the whole accumulated answer.
    """
    validate_prompt_length(prompt)
    provider = build_provider(config, provider_name)
    if context is None:
        context = gather_context(config.context)

    if on_chunk is None:
        response = provider.send_prompt(prompt, context)
        rendered, commands = render_response(response.text, formatter_config)
    else:
        response = _collect_stream(provider, prompt, context, on_chunk)
        rendered, commands = "", CommandExtractor().extract(response.text)
    log.debug("%s answered in %.2fs", response.provider, response.response_time)

    if config.history.enabled:
        try:
            append_entry(
                prompt,
                response.text,
                path=history_path(config.history),
                max_size=config.history.max_size,
            )
        except HowError as e:
            log.warning("%s", e)

    return QueryResult(response=response, rendered=rendered, commands=commands)
