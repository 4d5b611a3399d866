"""Locate fenced code blocks in response text."""

import re
from collections.abc import Iterator
from typing import NamedTuple

OPEN_FENCE_RE = re.compile(r"^```([A-Za-z0-9+\-]*)[ \t]*\n", re.MULTILINE)
CLOSE_FENCE_RE = re.compile(r"^```[ \t]*$", re.MULTILINE)


class Fence(NamedTuple):
    """One fenced block: its span in the source text, language tag and body."""

    start: int
    end: int
    language: str
    body: str


def iter_fences(text: str) -> Iterator[Fence]:
    """Yield closed fences in source order.

    The body runs from the line after the opening fence up to the start of the
    closing fence line, so a non-empty body keeps its final newline. A fence
    with no closer ends the scan and everything from it onward stays prose.
    """
    position = 0
    while True:
        opening = OPEN_FENCE_RE.search(text, position)
        if opening is None:
            return
        closing = CLOSE_FENCE_RE.search(text, opening.end())
        if closing is None:
            return
        yield Fence(
            start=opening.start(),
            end=closing.end(),
            language=opening.group(1),
            body=text[opening.end() : closing.start()],
        )
        position = closing.end()
