"""
Replacement engine — runs the mode-gated strategy chain and applies the
first success.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..errors import InvalidRequestError, NoMatchError
from .document import DocumentView
from .strategies import (
    DEFAULT_MIN_TOKENS,
    DEFAULT_OVERLAP_THRESHOLD,
    MATCH_MODES,
    MatchResult,
    strategies_for_mode,
)

logger = logging.getLogger(__name__)


@dataclass
class ReplacementOutcome:
    """New document text plus the match that produced it."""
    text: str
    match: MatchResult


class ReplacementEngine:
    """Apply an old/new snippet pair to a document."""

    def __init__(
        self,
        overlap_threshold: float = DEFAULT_OVERLAP_THRESHOLD,
        min_tokens: int = DEFAULT_MIN_TOKENS,
    ) -> None:
        self._overlap_threshold = overlap_threshold
        self._min_tokens = min_tokens

    def apply(
        self,
        document: DocumentView | str,
        old_text: str,
        new_text: str,
        mode: str = "smart",
    ) -> ReplacementOutcome:
        """Replace *old_text* with *new_text* using the strategies for *mode*.

        Strategies run in priority order and the chain stops at the first
        one that matches.

        Raises
        ------
        InvalidRequestError
            Unknown mode or empty *old_text*.
        NoMatchError
            No strategy located *old_text*.
        """
        if mode not in MATCH_MODES:
            raise InvalidRequestError(
                f"Invalid match_mode {mode!r}; expected one of {', '.join(MATCH_MODES)}"
            )
        if not old_text:
            raise InvalidRequestError("old_code must not be empty")

        if isinstance(document, str):
            document = DocumentView(document)

        for strategy in strategies_for_mode(mode, self._overlap_threshold, self._min_tokens):
            match = strategy.attempt_match(document, old_text)
            if match is None:
                continue
            logger.debug(
                "[SmartEdit] %s matched at line %d (%d lines)",
                strategy.name, match.start_line, match.line_count,
            )
            return ReplacementOutcome(
                text=strategy.apply_match(document, match, new_text),
                match=match,
            )

        raise NoMatchError(
            "Could not find the specified code to replace. "
            "The old_code was not found in the file."
        )
