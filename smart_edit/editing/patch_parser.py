"""
Patch parser — repairs loosely formatted unified-diff text and parses it
into hunks.

Patches written by an agent are often slightly off: hunk headers without
counts, context lines that lost their leading space, removal lines with
the marker indented.  :meth:`PatchParser.repair` normalises those before
:meth:`PatchParser.parse` applies the usual unified-diff rules.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from ..errors import PatchParseError

logger = logging.getLogger(__name__)

# Line kinds
CONTEXT = "context"
REMOVE = "remove"
ADD = "add"

_MARKER_KINDS = {" ": CONTEXT, "-": REMOVE, "+": ADD}

# "\ No newline at end of file" notes are recognised but carry no content
_NOTE_MARKER = "\\"

# Patterns
_BARE_HEADER = re.compile(r"^@@ -(\d+) \+(\d+) @@(.*)$", re.MULTILINE)
_HUNK_HEADER = re.compile(r"^@@ -(\d+),(\d+) \+(\d+),(\d+) @@(.*)$")
_FILE_HEADER_PREFIXES = ("--- ", "+++ ", "diff ", "index ")


@dataclass
class HunkLine:
    """One line of a hunk body."""
    kind: str      # "context" | "remove" | "add"
    text: str


@dataclass
class Hunk:
    """A contiguous group of context/removal/addition lines."""
    old_start: int = 0         # 1-indexed, from the header
    old_count: int = 0
    new_start: int = 0
    new_count: int = 0
    lines: list[HunkLine] = field(default_factory=list)
    section: str = ""          # trailing text after the closing @@

    @property
    def old_lines(self) -> list[str]:
        return [l.text for l in self.lines if l.kind in (CONTEXT, REMOVE)]

    @property
    def new_lines(self) -> list[str]:
        return [l.text for l in self.lines if l.kind in (CONTEXT, ADD)]

    @property
    def removed(self) -> int:
        return sum(1 for l in self.lines if l.kind == REMOVE)

    @property
    def added(self) -> int:
        return sum(1 for l in self.lines if l.kind == ADD)


@dataclass
class Patch:
    """Ordered hunks of a single-file patch."""
    hunks: list[Hunk] = field(default_factory=list)


def split_patch_lines(patch_text: str) -> list[str]:
    """Split patch text into lines; a final newline does not add a line."""
    text = patch_text.replace("\r\n", "\n")
    if text.endswith("\n"):
        text = text[:-1]
    if not text:
        return []
    return text.split("\n")


class PatchParser:
    """Repair and parse free-form patch text."""

    def repair(self, patch_text: str) -> str:
        """Return *patch_text* with malformed headers and prefixes fixed.

        Header repair rewrites ``@@ -X +Y @@`` to ``@@ -X,1 +X,1 @@``; both
        sides take the old position.  Prefix repair reclassifies hunk lines
        that lack a ``' '``, ``'-'`` or ``'+'`` marker.
        """
        lines = split_patch_lines(patch_text)
        repaired: list[str] = []
        in_hunk = False

        for line in lines:
            header = _BARE_HEADER.match(line)
            if header:
                old = header.group(1)
                line = f"@@ -{old},1 +{old},1 @@{header.group(3)}"
                logger.debug("[Patch] Repaired hunk header -> %s", line)

            if line.startswith("@@"):
                in_hunk = True
                repaired.append(line)
                continue

            if not in_hunk or line[:1] in _MARKER_KINDS or line.startswith(_NOTE_MARKER):
                repaired.append(line)
                continue

            repaired.append(self._reclassify(line))

        return "\n".join(repaired)

    def parse(self, patch_text: str) -> Patch:
        """Parse (already repaired) patch text into hunks.

        Raises
        ------
        PatchParseError
            A malformed ``@@`` header, an unrecognised line inside a hunk,
            or no hunks at all.
        """
        patch = Patch()
        current: Optional[Hunk] = None

        for lineno, line in enumerate(split_patch_lines(patch_text), 1):
            if line.startswith("@@"):
                current = self._parse_header(line, lineno)
                patch.hunks.append(current)
                continue

            if current is None:
                if not line.startswith(_FILE_HEADER_PREFIXES) and line.strip():
                    logger.debug("[Patch] Ignoring line %d before first hunk", lineno)
                continue

            if line.startswith(_NOTE_MARKER):
                continue
            if not line:
                current.lines.append(HunkLine(CONTEXT, ""))
                continue

            kind = _MARKER_KINDS.get(line[0])
            if kind is None:
                raise PatchParseError(
                    f"Line {lineno}: unrecognised hunk line {line!r}"
                )
            current.lines.append(HunkLine(kind, line[1:]))

        if not patch.hunks:
            raise PatchParseError("No hunks found in patch")

        for hunk in patch.hunks:
            if len(hunk.old_lines) != hunk.old_count or len(hunk.new_lines) != hunk.new_count:
                logger.debug(
                    "[Patch] Hunk at line %d declares %d/%d lines, body has %d/%d",
                    hunk.old_start, hunk.old_count, hunk.new_count,
                    len(hunk.old_lines), len(hunk.new_lines),
                )
        return patch

    def parse_repaired(self, patch_text: str) -> Patch:
        """Repair then parse *patch_text*."""
        return self.parse(self.repair(patch_text))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_header(line: str, lineno: int) -> Hunk:
        m = _HUNK_HEADER.match(line)
        if not m:
            raise PatchParseError(f"Line {lineno}: malformed hunk header {line!r}")
        return Hunk(
            old_start=int(m.group(1)),
            old_count=int(m.group(2)),
            new_start=int(m.group(3)),
            new_count=int(m.group(4)),
            section=m.group(5).strip(),
        )

    @staticmethod
    def _reclassify(line: str) -> str:
        """Give a marker-less hunk line a marker based on its content."""
        stripped = line.strip()
        if "- " in line:
            return "-" + _drop_marker(stripped, "-")
        if "+ " in line:
            return "+" + _drop_marker(stripped, "+")
        return " " + line


def _drop_marker(text: str, marker: str) -> str:
    if text.startswith(marker + " "):
        return text[2:]
    if text.startswith(marker):
        return text[1:]
    return text
