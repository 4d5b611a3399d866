"""Slices of a response produced by the renderer's block parser."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TextBlock:
    """Prose that may contain inline Markdown."""

    content: str


@dataclass(frozen=True)
class CodeBlock:
    """Body of a fenced code block and its (possibly empty) language tag."""

    content: str
    language: str = ""


ContentBlock = TextBlock | CodeBlock
