"""Fuzzy code location and patch reconciliation."""

from .document import DocumentView, load, serialize, indent_of
from .strategies import (
    MatchResult, MatchStrategy, ExactSubstringStrategy,
    WhitespaceNormalizedStrategy, TrimmedLineStrategy, BlockStrategy,
    TokenOverlapStrategy, strategies_for_mode, MATCH_MODES,
)
from .replacement import ReplacementEngine, ReplacementOutcome
from .patch_parser import PatchParser, Patch, Hunk, HunkLine
from .patch_applier import PatchApplier, PatchOutcome, StructuredOutcome
from .syntax_check import check_syntax, SyntaxReport
from .metrics import log_edit_metric, read_edit_stats

__all__ = [
    "DocumentView", "load", "serialize", "indent_of",
    "MatchResult", "MatchStrategy", "ExactSubstringStrategy",
    "WhitespaceNormalizedStrategy", "TrimmedLineStrategy", "BlockStrategy",
    "TokenOverlapStrategy", "strategies_for_mode", "MATCH_MODES",
    "ReplacementEngine", "ReplacementOutcome",
    "PatchParser", "Patch", "Hunk", "HunkLine",
    "PatchApplier", "PatchOutcome", "StructuredOutcome",
    "check_syntax", "SyntaxReport",
    "log_edit_metric", "read_edit_stats",
]
