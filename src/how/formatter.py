"""Render Markdown-ish LLM responses for display in a terminal."""

import logging
import re

from how.constants import (
    ANSI_RE,
    BLUE,
    BOLD,
    BRIGHT_BLACK,
    CYAN,
    GREEN,
    ITALIC,
    RESET,
    UNDERLINE,
    WHITE,
    YELLOW,
    strip_ansi,
    style,
    visible_len,
)
from how.fences import iter_fences
from how.models import CodeBlock, ContentBlock, FormatterConfig, TextBlock

log = logging.getLogger(__name__)

HEADER_TITLE = "AI Assistant Response"

HEADING_STYLES: dict[int, tuple[str, ...]] = {
    1: (BOLD, UNDERLINE, YELLOW),
    2: (BOLD, YELLOW),
    3: (YELLOW,),
}
CODE_STYLE = (GREEN,)
INLINE_CODE_STYLE = (BOLD, GREEN)
QUOTE_STYLE = (ITALIC, BLUE)
BULLET_STYLE = (BOLD, CYAN)
TEXT_STYLE = (WHITE,)
COMMENT_STYLE = (BRIGHT_BLACK,)
BORDER_STYLE = (BOLD, CYAN)
LINK_STYLE = (UNDERLINE, BLUE)


def _trim_blank_lines(lines: list[str]) -> list[str]:
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return lines[start:end]


def _carry_styles(rows: list[tuple[str, str]]) -> list[tuple[str, str]]:
    active: list[str] = []
    balanced = []
    for row_lead, body in rows:
        reopened = "".join(active)
        for code in ANSI_RE.findall(body):
            if code == RESET:
                active = []
            else:
                active.append(code)
        if active:
            body += RESET
        balanced.append((row_lead, reopened + body))
    return balanced


class TerminalFormatter:
    """Format LLM response text according to a ``FormatterConfig``.

    Regular expressions are compiled once per instance and never mutated, so a
    formatter can be reused for any number of ``format`` calls.
    """

    def __init__(self, config: FormatterConfig | None = None) -> None:
        self.config = config if config is not None else FormatterConfig.default()

        self._structured_re = re.compile(
            r"<structured_commands>.*?</structured_commands>", re.DOTALL
        )
        self._blank_lines_re = re.compile(r"\n{3,}")
        self._inline_code_re = re.compile(r"`([^`\n]+)`")
        self._heading_re = re.compile(r"^(#{1,3}) (.+)$")
        self._bold_re = re.compile(r"\*\*([^*\n]+)\*\*")
        self._italic_re = re.compile(r"\*([^*\n]+)\*")
        self._link_re = re.compile(r"\[([^\[\]\n]+)\]\(([^()\s]+)\)")
        self._block_quote_re = re.compile(r"^> (.+)$")
        self._table_row_re = re.compile(r"^\|.+\|$")
        self._table_separator_re = re.compile(r"^:?-+:?$")
        self._list_item_re = re.compile(r"^(\s*)([-*+]|\d+\.)\s+(.+)$")

    def format(self, text: str | bytes) -> str:
        """Return the terminal rendering of a raw LLM response."""
        if isinstance(text, bytes):
            text = text.decode("utf-8", errors="replace")

        # Escape sequences in model output are never passed through to the terminal.
        text = strip_ansi(text).replace("\033", "")
        cleaned = self._structured_re.sub("", text)
        cleaned = self.clean_whitespace(cleaned)
        blocks = self.parse_blocks(cleaned)
        log.debug("rendering %d blocks from %d chars", len(blocks), len(cleaned))

        out: list[str] = []
        if self.config.use_boxes:
            self._write_header(out)
        for block in blocks:
            if isinstance(block, CodeBlock):
                self._write_code_block(out, block)
            else:
                self._write_text_block(out, block)
        return "".join(out)

    def clean_whitespace(self, text: str) -> str:
        """Normalise line endings, collapse 3+ newlines to 2, and trim."""
        text = text.replace("\r\n", "\n")
        return self._blank_lines_re.sub("\n\n", text).strip()

    def parse_blocks(self, text: str) -> list[ContentBlock]:
        """Slice text into prose and fenced code blocks, in source order."""
        blocks: list[ContentBlock] = []
        position = 0
        for fence in iter_fences(text):
            self._append_text(blocks, text[position : fence.start], after_fence=position > 0)
            blocks.append(CodeBlock(content=fence.body, language=fence.language))
            position = fence.end
        tail = text[position:]
        if position > 0 and tail.startswith("\n"):
            tail = tail[1:]
        if tail.strip():
            blocks.append(TextBlock(content=tail))
        return blocks

    @staticmethod
    def _append_text(blocks: list[ContentBlock], segment: str, after_fence: bool) -> None:
        # The newlines on either side belong to the fence lines themselves.
        if after_fence and segment.startswith("\n"):
            segment = segment[1:]
        if segment.endswith("\n"):
            segment = segment[:-1]
        if segment.strip():
            blocks.append(TextBlock(content=segment))

    # ------------------------------------------------------------------
    # Block writers
    # ------------------------------------------------------------------

    def _paint(self, text: str, *codes: str) -> str:
        if not self.config.use_colors or not text:
            return text
        return style(text, *codes)

    def _write_header(self, out: list[str]) -> None:
        prefix = self.config.comment_prefix
        width = max(0, self.config.line_width - len(prefix))
        padding = " " * max(0, (width - len(HEADER_TITLE)) // 2)

        if self.config.use_colors:
            border = self._paint("═" * width, *BORDER_STYLE)
            title = self._paint(HEADER_TITLE, *HEADING_STYLES[1])
        else:
            border = "=" * width
            title = HEADER_TITLE.upper()

        out.append(f"{prefix}{border}\n")
        out.append(f"{prefix}{padding}{title}\n")
        out.append(f"{prefix}{border}\n\n")

    def _write_code_block(self, out: list[str], block: CodeBlock) -> None:
        cfg = self.config
        prefix = cfg.comment_prefix
        indent = " " * cfg.indent_size

        if block.language:
            out.append(f"{prefix}{self._paint('```' + block.language, *COMMENT_STYLE)}\n")

        for number, line in enumerate(_trim_blank_lines(block.content.split("\n")), start=1):
            line = line.rstrip()
            gutter = ""
            if cfg.show_line_numbers:
                gutter = self._paint(f"{number:3d}: ", *COMMENT_STYLE)
            out.append(f"{prefix}{indent}{gutter}{self._paint(line, *CODE_STYLE)}\n")

        if block.language:
            out.append(f"{prefix}{self._paint('```', *COMMENT_STYLE)}\n")

        if not cfg.compact_mode:
            out.append("\n")

    def _write_text_block(self, out: list[str], block: TextBlock) -> None:
        lines = block.content.split("\n")
        index = 0
        while index < len(lines):
            line = lines[index].rstrip()
            if not line:
                if not self.config.compact_mode:
                    out.append("\n")
                index += 1
                continue

            if self.config.render_tables and self.is_table_row(line):
                table_lines = self._collect_table(lines, index)
                self._write_table(out, table_lines)
                index += len(table_lines)
                continue

            out.append(self.format_line(line) + "\n")
            index += 1

    # ------------------------------------------------------------------
    # Line formatting
    # ------------------------------------------------------------------

    def format_line(self, line: str) -> str:
        """Format one non-empty prose line; the result may span several lines."""
        cfg = self.config
        prefix = cfg.comment_prefix
        indent = " " * cfg.indent_size

        if cfg.parse_markdown:
            match = self._heading_re.match(line)
            if match:
                return self.format_heading(match.group(2), len(match.group(1)))

        if cfg.highlight_quotes:
            match = self._block_quote_re.match(line)
            if match:
                return self.format_block_quote(match.group(1))

        if cfg.use_bullets:
            match = self._list_item_re.match(line)
            if match:
                return self.format_list_item(*match.groups())

        return self._emit(prefix, self._inline(line), prefix + indent)

    def format_heading(self, text: str, level: int) -> str:
        prefix = self.config.comment_prefix
        continuation = prefix + " " * self.config.indent_size
        if not self.config.use_colors:
            return self._emit(prefix, text.upper(), continuation)
        codes = HEADING_STYLES.get(level, HEADING_STYLES[3])
        return self._emit(prefix, text, continuation, codes)

    def format_block_quote(self, text: str) -> str:
        prefix = self.config.comment_prefix
        indent = " " * self.config.indent_size
        if self.config.use_colors:
            lead = prefix + indent + self._paint("│ ", *QUOTE_STYLE)
            return self._emit(lead, text, lead, QUOTE_STYLE)
        lead = prefix + indent + "> "
        return self._emit(lead, text, lead)

    def format_list_item(self, leading: str, marker: str, text: str) -> str:
        """Render a list item, keeping numeric markers and nesting depth."""
        base = self.config.comment_prefix + " " * self.config.indent_size + leading
        bullet = marker if marker.endswith(".") else "•"
        lead = base + self._paint(bullet, *BULLET_STYLE) + " "
        continuation = base + " " * (len(bullet) + 1)
        return self._emit(lead, self._inline(text), continuation, TEXT_STYLE)

    def _inline(self, text: str) -> str:
        if self.config.parse_markdown and self.config.use_colors:
            text = self.apply_inline_formatting(text)
        if self.config.highlight_code:
            text = self.highlight_inline_code(text)
        return text

    def apply_inline_formatting(self, line: str) -> str:
        """Rewrite links, then bold, then italic spans."""
        colors = self.config.use_colors

        def link(match: re.Match[str]) -> str:
            label, url = match.group(1), match.group(2)
            if colors:
                return self._paint(label, *LINK_STYLE) + self._paint(f" ({url})", *COMMENT_STYLE)
            return f"{label} ({url})"

        def bold(match: re.Match[str]) -> str:
            return self._paint(match.group(1), BOLD) if colors else match.group(1).upper()

        def italic(match: re.Match[str]) -> str:
            return self._paint(match.group(1), ITALIC) if colors else f"_{match.group(1)}_"

        line = self._link_re.sub(link, line)
        line = self._bold_re.sub(bold, line)
        return self._italic_re.sub(italic, line)

    def highlight_inline_code(self, line: str) -> str:
        """Colour `code` spans, keeping their backtick delimiters."""
        if not self.config.use_colors:
            return line
        return self._inline_code_re.sub(
            lambda match: self._paint(f"`{match.group(1)}`", *INLINE_CODE_STYLE), line
        )

    def _emit(
        self, lead: str, text: str, continuation: str, codes: tuple[str, ...] = ()
    ) -> str:
        if not self.config.wrap_long_lines or visible_len(lead + text) <= self.config.line_width:
            return lead + self._paint(text, *codes)
        rows = self.wrap_text(text, lead, continuation)
        return "\n".join(row_lead + self._paint(body, *codes) for row_lead, body in rows)

    def wrap_text(self, text: str, lead: str, continuation: str) -> list[tuple[str, str]]:
        """Greedy word wrap; returns (lead, body) pairs, one per output line.

        A word that does not fit even on an empty continuation line is placed
        on a line of its own rather than split. Styles still open at the end of
        a row are reset there and reopened on the next row's body.
        """
        words = text.split()
        if not words:
            return [(lead, text)]

        width = self.config.line_width
        rows: list[tuple[str, str]] = []
        row_lead, body = lead, words[0]
        for word in words[1:]:
            if visible_len(row_lead) + visible_len(body) + 1 + visible_len(word) <= width:
                body += " " + word
            else:
                rows.append((row_lead, body))
                row_lead, body = continuation, word
        rows.append((row_lead, body))
        return _carry_styles(rows)

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def is_table_row(self, line: str) -> bool:
        return self._table_row_re.match(line.strip()) is not None

    def _collect_table(self, lines: list[str], start: int) -> list[str]:
        table: list[str] = []
        for line in lines[start:]:
            line = line.strip()
            if not line or not self.is_table_row(line):
                break
            table.append(line)
        return table

    def _is_separator_row(self, cells: list[str]) -> bool:
        return all(self._table_separator_re.match(cell) for cell in cells)

    def _write_table(self, out: list[str], table_lines: list[str]) -> None:
        if not table_lines:
            return

        parsed = [[cell.strip() for cell in line[1:-1].split("|")] for line in table_lines]
        rows = [cells for cells in parsed if not self._is_separator_row(cells)]
        if not rows:
            rows = parsed

        columns = max(len(cells) for cells in rows)
        rows = [cells + [""] * (columns - len(cells)) for cells in rows]
        widths = [max(len(cells[col]) for cells in rows) for col in range(columns)]

        prefix = self.config.comment_prefix
        for index, cells in enumerate(rows):
            body = "│" + "".join(
                f" {cell.ljust(width)} │" for cell, width in zip(cells, widths)
            )
            out.append(f"{prefix}{self._paint(body, *TEXT_STYLE)}\n")
            if index == 0:
                separator = "├" + "┼".join("─" * (width + 2) for width in widths) + "┤"
                out.append(f"{prefix}{self._paint(separator, *BORDER_STYLE)}\n")

        out.append("\n")


def format_response(text: str, config: FormatterConfig | None = None) -> str:
    """Format text with a one-off formatter."""
    return TerminalFormatter(config).format(text)
