"""
Patch applier — two-state pipeline that applies a free-form patch to a
document.

State A (structured) parses the repaired patch into hunks and applies them
line by line, tolerating line-number drift within a search window.  If any
hunk fails, state B (fallback) ignores hunk structure: it collects every
removal and addition line of the *unrepaired* patch and performs one
verbatim substring replace.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..errors import PatchParseError
from .document import load, serialize
from .patch_parser import Hunk, PatchParser, split_patch_lines

logger = logging.getLogger(__name__)

METHOD_STRUCTURED = "structured"
METHOD_FALLBACK = "fallback"

DEFAULT_SEARCH_WINDOW = 40


@dataclass
class StructuredOutcome:
    """Result of state A."""
    text: str
    hunks_total: int = 0
    hunks_failed: int = 0
    failed_hunks: list[Hunk] = field(default_factory=list)
    parse_error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return (
            self.parse_error is None
            and self.hunks_total > 0
            and self.hunks_failed == 0
        )


@dataclass
class PatchOutcome:
    """Terminal result of the pipeline."""
    success: bool
    text: str
    method: str = ""               # "structured" | "fallback" | "" on failure
    hunks_applied: int = 0
    hunks_failed: int = 0
    message: str = ""


def extract_change_blocks(patch_text: str) -> tuple[str, str]:
    """Collect removal and addition lines of *patch_text* into two blocks.

    Markers and leading whitespace are stripped; ``---``/``+++`` file
    headers are skipped.  Returns ``(old_block, new_block)``.
    """
    removed: list[str] = []
    added: list[str] = []
    for line in split_patch_lines(patch_text):
        if line.startswith(("--- ", "+++ ")) or line in ("---", "+++"):
            continue
        if line.startswith("-"):
            removed.append(line[1:].lstrip())
        elif line.startswith("+"):
            added.append(line[1:].lstrip())
    return "\n".join(removed), "\n".join(added)


class PatchApplier:
    """Apply a single-file patch to document text (in memory)."""

    def __init__(
        self,
        search_window: int = DEFAULT_SEARCH_WINDOW,
        parser: PatchParser | None = None,
    ) -> None:
        self._window = search_window
        self._parser = parser or PatchParser()

    def apply(self, text: str, patch_text: str) -> PatchOutcome:
        """Run state A, falling back to state B when any hunk fails."""
        structured = self.apply_structured(text, patch_text)
        if structured.succeeded:
            return PatchOutcome(
                success=True,
                text=structured.text,
                method=METHOD_STRUCTURED,
                hunks_applied=structured.hunks_total,
                message=f"Patch applied successfully ({structured.hunks_total} hunks).",
            )

        if structured.parse_error:
            logger.info("[Patch] Structured parse failed: %s", structured.parse_error)
        else:
            logger.info(
                "[Patch] %d of %d hunks failed, trying fallback",
                structured.hunks_failed, structured.hunks_total,
            )

        replaced = self.apply_fallback(text, patch_text)
        if replaced is not None:
            return PatchOutcome(
                success=True,
                text=replaced,
                method=METHOD_FALLBACK,
                hunks_applied=1,
                hunks_failed=structured.hunks_failed,
                message="Patch applied using fallback block replacement.",
            )

        if structured.hunks_total:
            message = (
                f"{structured.hunks_failed} of {structured.hunks_total} hunks failed "
                "and the removed lines were not found verbatim in the file."
            )
        else:
            message = (
                f"Patch could not be parsed ({structured.parse_error}) and the "
                "removed lines were not found verbatim in the file."
            )
        return PatchOutcome(
            success=False,
            text=text,
            hunks_failed=structured.hunks_failed,
            message=message,
        )

    # ------------------------------------------------------------------
    # State A: structured hunks
    # ------------------------------------------------------------------

    def apply_structured(self, text: str, patch_text: str) -> StructuredOutcome:
        """Apply every hunk in order; report how many failed.

        Works on LF-normalised lines; CRLF documents get CRLF back.
        """
        try:
            patch = self._parser.parse_repaired(patch_text)
        except PatchParseError as exc:
            return StructuredOutcome(text=text, parse_error=str(exc))

        crlf = "\r\n" in text
        lines = load(text.replace("\r\n", "\n") if crlf else text)

        delta = 0
        failed: list[Hunk] = []
        for hunk in patch.hunks:
            if self._apply_hunk(lines, hunk, delta):
                delta += hunk.added - hunk.removed
            else:
                failed.append(hunk)
                logger.warning(
                    "[Patch] Hunk at line %d did not match (window ±%d)",
                    hunk.old_start, self._window,
                )

        result = serialize(lines)
        if crlf:
            result = result.replace("\n", "\r\n")
        return StructuredOutcome(
            text=result,
            hunks_total=len(patch.hunks),
            hunks_failed=len(failed),
            failed_hunks=failed,
        )

    def _apply_hunk(self, lines: list[str], hunk: Hunk, delta: int) -> bool:
        """Apply one hunk to *lines* in place.

        Tries the header position first (shifted by earlier hunks), then
        searches outward up to the window size.
        """
        old = hunk.old_lines
        new = hunk.new_lines

        if not old:
            # Pure insertion: "@@ -N,0" inserts after line N
            insert_pos = max(0, min(hunk.old_start + delta, len(lines)))
            lines[insert_pos:insert_pos] = new
            return True

        start = hunk.old_start - 1 + delta
        if self._lines_match(lines, start, old):
            lines[start:start + len(old)] = new
            return True

        for offset in range(1, self._window + 1):
            for try_start in (start - offset, start + offset):
                if self._lines_match(lines, try_start, old):
                    logger.debug(
                        "[Patch] Hunk line %d matched at %d (offset %+d)",
                        hunk.old_start, try_start + 1, try_start - start,
                    )
                    lines[try_start:try_start + len(old)] = new
                    return True
        return False

    @staticmethod
    def _lines_match(lines: list[str], start: int, expected: list[str]) -> bool:
        """Compare ignoring trailing whitespace."""
        if start < 0 or start + len(expected) > len(lines):
            return False
        return all(
            lines[start + i].rstrip() == line.rstrip()
            for i, line in enumerate(expected)
        )

    # ------------------------------------------------------------------
    # State B: extract and replace
    # ------------------------------------------------------------------

    def apply_fallback(self, text: str, patch_text: str) -> str | None:
        """Replace the removal block with the addition block verbatim.

        Returns the new text, or None when either block is empty or the
        removal block is not in *text*.
        """
        old_block, new_block = extract_change_blocks(patch_text)
        if not old_block or not new_block:
            return None
        if old_block not in text:
            return None
        return text.replace(old_block, new_block, 1)
