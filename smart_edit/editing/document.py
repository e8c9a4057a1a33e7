"""
Document view — line-indexed view of file text.

Splitting and joining always use ``"\\n"`` so that
``serialize(load(text)) == text`` holds for every input, trailing empty
lines included.
"""

from __future__ import annotations

import re

_INDENT = re.compile(r"^[ \t]*")


def load(text: str) -> list[str]:
    """Split *text* into lines without discarding empty trailing segments."""
    return text.split("\n")


def serialize(lines: list[str]) -> str:
    return "\n".join(lines)


def indent_of(line: str) -> str:
    """Return the longest leading run of spaces and tabs in *line*."""
    return _INDENT.match(line).group(0)


class DocumentView:
    """Immutable text + lines pair. Mutators return new text."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.lines = load(text)

    def __len__(self) -> int:
        return len(self.lines)

    def line_of_offset(self, offset: int) -> int:
        """Return the 0-indexed line containing character *offset*."""
        return self.text.count("\n", 0, offset)

    def offset_of_line(self, index: int) -> int:
        """Return the character offset where 0-indexed line *index* starts.

        Indexes past the end clamp to ``len(text)``.
        """
        if index <= 0:
            return 0
        if index >= len(self.lines):
            return len(self.text)
        return sum(len(line) + 1 for line in self.lines[:index])

    def replace_span(self, start: int, end: int, replacement: str) -> str:
        return self.text[:start] + replacement + self.text[end:]

    def replace_lines(self, start: int, count: int, new_lines: list[str]) -> str:
        lines = list(self.lines)
        lines[start:start + count] = new_lines
        return serialize(lines)
