"""
Post-edit syntax check using tree-sitter.

Matching is purely textual, so an edit can leave a file that no longer
parses.  This module only reports that; callers decide whether to reject.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

EXTENSION_TO_LANGUAGE: dict[str, str] = {
    ".py": "python",
    ".pyi": "python",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
}

_PARSER_CACHE: dict[str, object] = {}


@dataclass
class SyntaxReport:
    """Outcome of a syntax check."""
    language: Optional[str]
    checked: bool = False
    valid: bool = True
    error_line: Optional[int] = None    # 1-indexed line of the first error node


def detect_language(file_path: str) -> Optional[str]:
    """Return the tree-sitter language for *file_path*, or None if unsupported."""
    ext = os.path.splitext(file_path)[1].lower()
    return EXTENSION_TO_LANGUAGE.get(ext)


def _get_lang_func(language: str):
    """Return the grammar's language() function, or None if not installed."""
    try:
        if language == "python":
            import tree_sitter_python as m  # type: ignore
            return m.language
        elif language == "javascript":
            import tree_sitter_javascript as m  # type: ignore
            return m.language
    except ImportError:
        logger.debug("tree-sitter grammar for %s is not installed", language)
    return None


def _get_parser(language: str):
    """Return a cached tree-sitter Parser for *language*, or None."""
    if language in _PARSER_CACHE:
        return _PARSER_CACHE[language]
    func = _get_lang_func(language)
    if func is None:
        return None
    import tree_sitter as ts  # type: ignore

    parser = ts.Parser(ts.Language(func()))
    _PARSER_CACHE[language] = parser
    return parser


def _first_error_line(node) -> Optional[int]:
    """Depth-first search for the first ERROR or MISSING node."""
    if node.is_error or node.is_missing:
        return node.start_point[0] + 1
    if not node.has_error:
        return None
    for child in node.children:
        line = _first_error_line(child)
        if line is not None:
            return line
    return node.start_point[0] + 1


def check_syntax(file_path: str, text: str) -> SyntaxReport:
    """Parse *text* as the language implied by *file_path*.

    Unsupported extensions and missing grammars yield an unchecked report
    that counts as valid.
    """
    language = detect_language(file_path)
    if language is None:
        return SyntaxReport(language=None)

    parser = _get_parser(language)
    if parser is None:
        return SyntaxReport(language=language)

    tree = parser.parse(text.encode("utf-8"))
    root = tree.root_node
    if not root.has_error:
        return SyntaxReport(language=language, checked=True)

    line = _first_error_line(root)
    logger.debug("[SmartEdit] Syntax error in %s near line %s", file_path, line)
    return SyntaxReport(language=language, checked=True, valid=False, error_line=line)
