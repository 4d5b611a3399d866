"""Rendering policy for the terminal formatter."""

from pydantic import BaseModel, field_validator

DEFAULT_COMMENT_PREFIX = "# "
DEFAULT_LINE_WIDTH = 80
DEFAULT_INDENT_SIZE = 2


class FormatterConfig(BaseModel):
    """Controls how an LLM response is laid out for the terminal.

    ``comment_prefix`` is applied verbatim to every emitted line; an explicit
    empty string disables it. Non-positive widths and indents fall back to
    their defaults instead of failing.
    """

    use_colors: bool = False
    highlight_code: bool = False
    highlight_quotes: bool = False
    parse_markdown: bool = True
    comment_prefix: str = DEFAULT_COMMENT_PREFIX
    line_width: int = DEFAULT_LINE_WIDTH
    indent_size: int = DEFAULT_INDENT_SIZE
    use_boxes: bool = False
    use_bullets: bool = True
    wrap_long_lines: bool = True
    render_tables: bool = True
    show_line_numbers: bool = False
    compact_mode: bool = False

    @field_validator("line_width", mode="before")
    @classmethod
    def _default_line_width(cls, value: object) -> object:
        if value is None or (isinstance(value, int) and value <= 0):
            return DEFAULT_LINE_WIDTH
        return value

    @field_validator("indent_size", mode="before")
    @classmethod
    def _default_indent_size(cls, value: object) -> object:
        if value is None or (isinstance(value, int) and value <= 0):
            return DEFAULT_INDENT_SIZE
        return value

    @field_validator("comment_prefix", mode="before")
    @classmethod
    def _default_comment_prefix(cls, value: object) -> object:
        if value is None:
            return DEFAULT_COMMENT_PREFIX
        return value

    @classmethod
    def default(cls) -> "FormatterConfig":
        """Plain output: no colour, comment-prefixed, wrapped at 80 columns."""
        return cls()

    @classmethod
    def colored(cls) -> "FormatterConfig":
        """Coloured output inside a titled box with code and quote highlighting."""
        return cls(
            use_colors=True,
            use_boxes=True,
            highlight_code=True,
            highlight_quotes=True,
        )

    @classmethod
    def compact(cls) -> "FormatterConfig":
        """Coloured, unprefixed, unwrapped output without blank separator lines."""
        return cls(
            use_colors=True,
            comment_prefix="",
            line_width=120,
            wrap_long_lines=False,
            compact_mode=True,
            highlight_code=True,
            highlight_quotes=True,
        )


PRESETS = {
    "default": FormatterConfig.default,
    "colored": FormatterConfig.colored,
    "compact": FormatterConfig.compact,
}


def get_preset(name: str) -> FormatterConfig:
    """Return a fresh copy of the named preset."""
    factory = PRESETS.get(name.strip().lower())
    if factory is None:
        raise ValueError(
            f"Unknown formatter preset {name!r}. Choose one of: {', '.join(PRESETS)}"
        )
    return factory()
