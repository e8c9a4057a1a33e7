"""
Match strategies — independent matchers tried in priority order.

Each strategy answers two questions: where is ``old_text`` in the document
(:meth:`MatchStrategy.attempt_match`) and what does the document look like
once that match is replaced (:meth:`MatchStrategy.apply_match`).  Every
strategy picks the first (topmost) occurrence it finds; there is no scoring
between candidates.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from .document import DocumentView, indent_of

logger = logging.getLogger(__name__)

MATCH_MODES = ("exact", "fuzzy", "smart")

DEFAULT_OVERLAP_THRESHOLD = 0.8
DEFAULT_MIN_TOKENS = 3


@dataclass
class MatchResult:
    """Where a strategy found the target."""
    strategy: str
    start_line: int            # 1-indexed
    line_count: int
    captured_indent: str = ""
    span: Optional[tuple[int, int]] = None   # character offsets, substring strategies only


class MatchStrategy(ABC):
    """Base class for a single matcher in the chain."""

    name: str = ""

    @abstractmethod
    def attempt_match(self, document: DocumentView, old_text: str) -> MatchResult | None:
        """Return the first match of *old_text*, or None."""

    @abstractmethod
    def apply_match(self, document: DocumentView, match: MatchResult, new_text: str) -> str:
        """Return the full document text with *match* replaced by *new_text*."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


def _span_match(name: str, document: DocumentView, start: int, end: int) -> MatchResult:
    first_line = document.line_of_offset(start)
    # a span ending in its line terminator does not touch the next line
    last = end - 1 if end > start and document.text[end - 1] == "\n" else end
    return MatchResult(
        strategy=name,
        start_line=first_line + 1,
        line_count=document.text.count("\n", start, last) + 1,
        captured_indent=indent_of(document.lines[first_line]),
        span=(start, end),
    )


# ---------------------------------------------------------------------------
# Substring strategies
# ---------------------------------------------------------------------------

class ExactSubstringStrategy(MatchStrategy):
    """Verbatim substring; only the first occurrence is replaced."""

    name = "exact"

    def attempt_match(self, document, old_text):
        idx = document.text.find(old_text)
        if idx == -1:
            return None
        return _span_match(self.name, document, idx, idx + len(old_text))

    def apply_match(self, document, match, new_text):
        start, end = match.span
        return document.replace_span(start, end, new_text)


def collapse_whitespace(text: str) -> tuple[str, list[int]]:
    """Collapse every whitespace run in *text* to a single space.

    Returns the collapsed text and, for each collapsed character, the
    offset in *text* it came from (a run maps to its first character).
    """
    chars: list[str] = []
    positions: list[int] = []
    in_run = False
    for i, ch in enumerate(text):
        if ch.isspace():
            if not in_run:
                chars.append(" ")
                positions.append(i)
            in_run = True
        else:
            chars.append(ch)
            positions.append(i)
            in_run = False
    return "".join(chars), positions


class WhitespaceNormalizedStrategy(MatchStrategy):
    """Substring match after collapsing whitespace runs on both sides.

    Leading and trailing whitespace of the old text is kept as a single
    space, and the mapped span then covers the whole original run at that
    end.  The replacement is inserted verbatim over the mapped span.
    """

    name = "whitespace"

    def attempt_match(self, document, old_text):
        needle, _ = collapse_whitespace(old_text)
        if not needle.strip():
            return None
        haystack, positions = collapse_whitespace(document.text)
        idx = haystack.find(needle)
        if idx == -1:
            return None
        start = positions[idx]
        last = idx + len(needle) - 1
        if haystack[last] == " ":
            # run ends where the next collapsed character starts
            end = positions[last + 1] if last + 1 < len(positions) else len(document.text)
        else:
            end = positions[last] + 1
        return _span_match(self.name, document, start, end)

    def apply_match(self, document, match, new_text):
        start, end = match.span
        return document.replace_span(start, end, new_text)


# ---------------------------------------------------------------------------
# Line strategies
# ---------------------------------------------------------------------------

class TrimmedLineStrategy(MatchStrategy):
    """A single line whose trimmed content equals the trimmed old text."""

    name = "trimmed_line"

    def attempt_match(self, document, old_text):
        target = old_text.strip()
        if not target:
            return None
        for i, line in enumerate(document.lines):
            if line.strip() == target:
                return MatchResult(self.name, i + 1, 1, indent_of(line))
        return None

    def apply_match(self, document, match, new_text):
        return document.replace_lines(
            match.start_line - 1, 1, [match.captured_indent + new_text.strip()]
        )


class BlockStrategy(MatchStrategy):
    """A window of lines matching the old text line by line after trimming.

    Every replacement line gets the indentation of the window's first line;
    the replacement's own per-line indentation is dropped.
    """

    name = "block"

    def attempt_match(self, document, old_text):
        stripped = old_text.strip()
        if not stripped:
            return None
        wanted = [line.strip() for line in stripped.split("\n")]
        lines = document.lines
        for i in range(len(lines) - len(wanted) + 1):
            if all(lines[i + j].strip() == w for j, w in enumerate(wanted)):
                return MatchResult(self.name, i + 1, len(wanted), indent_of(lines[i]))
        return None

    def apply_match(self, document, match, new_text):
        indented = [match.captured_indent + line.lstrip() for line in new_text.split("\n")]
        return document.replace_lines(match.start_line - 1, match.line_count, indented)


class TokenOverlapStrategy(MatchStrategy):
    """First line sharing enough of the old text's tokens.

    Only used when the old text has more than ``min_tokens`` tokens.  The
    whole line is replaced, keeping its indentation.
    """

    name = "token_overlap"

    def __init__(
        self,
        threshold: float = DEFAULT_OVERLAP_THRESHOLD,
        min_tokens: int = DEFAULT_MIN_TOKENS,
    ) -> None:
        self.threshold = threshold
        self.min_tokens = min_tokens

    def attempt_match(self, document, old_text):
        tokens = old_text.split()
        if len(tokens) <= self.min_tokens:
            return None
        for i, line in enumerate(document.lines):
            line_tokens = set(line.split())
            if not line_tokens:
                continue
            present = sum(1 for tok in tokens if tok in line_tokens)
            if present / len(tokens) >= self.threshold:
                logger.debug(
                    "[SmartEdit] Token overlap %.2f on line %d", present / len(tokens), i + 1,
                )
                return MatchResult(self.name, i + 1, 1, indent_of(line))
        return None

    def apply_match(self, document, match, new_text):
        return document.replace_lines(
            match.start_line - 1, 1, [match.captured_indent + new_text.strip()]
        )


def strategies_for_mode(
    mode: str,
    overlap_threshold: float = DEFAULT_OVERLAP_THRESHOLD,
    min_tokens: int = DEFAULT_MIN_TOKENS,
) -> list[MatchStrategy]:
    """Return the ordered strategy chain gated by *mode*.

    Raises ValueError for an unknown mode.
    """
    if mode == "exact":
        return [ExactSubstringStrategy()]
    if mode == "fuzzy":
        return [ExactSubstringStrategy(), WhitespaceNormalizedStrategy()]
    if mode == "smart":
        return [
            ExactSubstringStrategy(),
            TrimmedLineStrategy(),
            BlockStrategy(),
            TokenOverlapStrategy(overlap_threshold, min_tokens),
        ]
    raise ValueError(f"Unknown match mode: {mode!r}")
