"""
Edit tools — the public entry points.

Each tool resolves the path through the sandbox, reads the current file,
runs the engine, writes only on success, and returns a plain dict.  Every
failure is converted to ``{error, tool_name, message, hint}`` here; nothing
propagates past this layer.  Tools keep no state between calls: every
invocation re-reads the file.
"""

from __future__ import annotations

import functools
import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional

from .config import Config
from .editing.document import load, serialize
from .editing.metrics import log_edit_metric
from .editing.patch_applier import METHOD_FALLBACK, PatchApplier
from .editing.replacement import ReplacementEngine
from .editing.syntax_check import check_syntax
from .errors import (
    EditError,
    InvalidRangeError,
    InvalidRequestError,
    NoMatchError,
    PatchFailureError,
    SyntaxCheckError,
    to_error_payload,
)
from .file_store import LocalFileStore
from .sandbox import SandboxResolver

logger = logging.getLogger(__name__)


@dataclass
class DirectEdit:
    """Replace an old snippet with a new one."""
    old_text: str
    new_text: str
    match_mode: str = "smart"


@dataclass
class PatchEdit:
    """Apply a free-form diff-like patch."""
    patch_text: str


def tool_boundary(tool_name: str):
    """Convert any exception raised by the wrapped tool into an error payload."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except EditError as exc:
                logger.info("[SmartEdit] %s failed: %s", tool_name, exc)
                return to_error_payload(tool_name, exc)
            except Exception as exc:
                logger.exception("[SmartEdit] Unexpected error in %s", tool_name)
                return to_error_payload(tool_name, exc)
        return wrapper

    return decorator


class EditTools:
    """Orchestrates read → match/patch → write for one sandbox.

    Parameters
    ----------
    config:
        Engine and sandbox settings.
    resolver:
        ``ResolvePath``: maps a raw path to an absolute one or raises
        :class:`~smart_edit.errors.SecurityViolation`.  Defaults to a
        :class:`SandboxResolver` rooted at ``config.SANDBOX_ROOT``.
    store:
        Object with ``read(path) -> str`` and ``write(path, text)``.
    """

    def __init__(
        self,
        config: Config | None = None,
        resolver: Optional[Callable[[str], str]] = None,
        store=None,
    ) -> None:
        self.config = config or Config()
        self._resolve = resolver or SandboxResolver(self.config.SANDBOX_ROOT)
        self._store = store or LocalFileStore()
        self._engine = ReplacementEngine(
            overlap_threshold=self.config.TOKEN_OVERLAP_THRESHOLD,
            min_tokens=self.config.TOKEN_OVERLAP_MIN_TOKENS,
        )
        self._patcher = PatchApplier(search_window=self.config.PATCH_SEARCH_WINDOW)

    # ------------------------------------------------------------------
    # Core entry points
    # ------------------------------------------------------------------

    @tool_boundary("smart_replace")
    def apply_direct_edit(
        self,
        file_path: str,
        old_code: str,
        new_code: str,
        match_mode: str | None = None,
    ) -> dict:
        """Replace *old_code* with *new_code* in *file_path*."""
        request = DirectEdit(old_code, new_code, match_mode or self.config.DEFAULT_MATCH_MODE)
        safe_path = self._resolve(file_path)
        content = self._store.read(safe_path)

        try:
            outcome = self._engine.apply(
                content, request.old_text, request.new_text, request.match_mode,
            )
        except NoMatchError:
            self._record("smart_replace", file_path, success=False,
                         match_mode=request.match_mode)
            raise

        match = outcome.match
        try:
            syntax = self._check_syntax(safe_path, content, outcome.text)
        except SyntaxCheckError:
            self._record("smart_replace", file_path, success=False,
                         match_mode=request.match_mode, strategy=match.strategy,
                         syntax_rejected=True)
            raise
        self._store.write(safe_path, outcome.text)

        self._record("smart_replace", file_path, success=True,
                     match_mode=request.match_mode, strategy=match.strategy,
                     line=match.start_line)
        logger.info(
            "[SmartEdit] Replaced %d line(s) at %s:%d using %s",
            match.line_count, file_path, match.start_line, match.strategy,
        )

        result = {
            "success": True,
            "file_path": file_path,
            "message": f"Code replaced successfully using {match.strategy} matching.",
            "match_mode": request.match_mode,
            "strategy": match.strategy,
            "line": match.start_line,
        }
        result.update(syntax)
        return result

    @tool_boundary("apply_patch")
    def apply_patch(self, file_path: str, patch_content: str) -> dict:
        """Apply *patch_content* to *file_path* (structured, then fallback)."""
        request = PatchEdit(patch_content)
        safe_path = self._resolve(file_path)
        content = self._store.read(safe_path)

        outcome = self._patcher.apply(content, request.patch_text)
        fields = dict(method=outcome.method, hunks_applied=outcome.hunks_applied,
                      hunks_failed=outcome.hunks_failed,
                      fallback_used=outcome.method == METHOD_FALLBACK)
        if not outcome.success:
            self._record("apply_patch", file_path, success=False, **fields)
            raise PatchFailureError(outcome.message)

        try:
            syntax = self._check_syntax(safe_path, content, outcome.text)
        except SyntaxCheckError:
            self._record("apply_patch", file_path, success=False,
                         syntax_rejected=True, **fields)
            raise
        self._store.write(safe_path, outcome.text)
        self._record("apply_patch", file_path, success=True, **fields)
        logger.info("[SmartEdit] Patched %s via %s", file_path, outcome.method)

        result = {
            "success": True,
            "file_path": file_path,
            "message": outcome.message,
            "hunks_applied": outcome.hunks_applied,
            "method": outcome.method,
        }
        result.update(syntax)
        return result

    # ------------------------------------------------------------------
    # Line-oriented tools
    # ------------------------------------------------------------------

    @tool_boundary("search_in_file")
    def search_in_file(
        self,
        file_path: str,
        search_text: str,
        case_sensitive: bool = True,
    ) -> dict:
        """Literal per-line search; returns 1-indexed matching lines."""
        if not search_text:
            raise InvalidRequestError(
                "search_text must not be empty",
                hint="Pass the literal text to look for, such as a function or variable name.",
            )
        safe_path = self._resolve(file_path)
        content = self._store.read(safe_path)

        flags = 0 if case_sensitive else re.IGNORECASE
        pattern = re.compile(re.escape(search_text), flags)
        matches = [
            {"line_number": i, "content": line}
            for i, line in enumerate(load(content), 1)
            if pattern.search(line)
        ]
        return {
            "success": True,
            "file_path": file_path,
            "search_text": search_text,
            "matches": matches,
            "total_matches": len(matches),
        }

    @tool_boundary("get_code_context")
    def get_code_context(
        self,
        file_path: str,
        line_number: int,
        context_lines: int | None = None,
    ) -> dict:
        """Return the lines around *line_number*, each prefixed ``"N: "``."""
        if context_lines is None:
            context_lines = self.config.CONTEXT_LINES
        safe_path = self._resolve(file_path)
        lines = load(self._store.read(safe_path))

        if line_number < 1 or line_number > len(lines):
            raise InvalidRangeError(
                f"Line number {line_number} is out of range "
                f"(file has {len(lines)} lines)"
            )

        first = max(1, line_number - context_lines)
        last = min(len(lines), line_number + context_lines)
        snippet = [f"{i}: {lines[i - 1]}" for i in range(first, last + 1)]
        return {
            "success": True,
            "file_path": file_path,
            "center_line": line_number,
            "context": "\n".join(snippet),
            "total_lines": len(lines),
        }

    @tool_boundary("delete_lines")
    def delete_lines(self, file_path: str, start_line: int, end_line: int) -> dict:
        """Delete the inclusive 1-indexed range *start_line*..*end_line*."""
        safe_path = self._resolve(file_path)
        content = self._store.read(safe_path)
        lines = load(content)

        if start_line < 1 or end_line > len(lines) or start_line > end_line:
            raise InvalidRangeError(
                f"Invalid line range: {start_line}-{end_line} "
                f"(file has {len(lines)} lines)"
            )

        deleted = end_line - start_line + 1
        del lines[start_line - 1:end_line]
        new_content = serialize(lines)

        syntax = self._check_syntax(safe_path, content, new_content)
        self._store.write(safe_path, new_content)

        result = {
            "success": True,
            "file_path": file_path,
            "lines_deleted": deleted,
            "message": f"Deleted lines {start_line}-{end_line} ({deleted} lines).",
        }
        result.update(syntax)
        return result

    @tool_boundary("read_file_content")
    def read_file_content(self, file_path: str) -> dict:
        safe_path = self._resolve(file_path)
        content = self._store.read(safe_path)
        return {
            "success": True,
            "file_path": file_path,
            "content": content,
            "size_bytes": len(content.encode("utf-8")),
            "lines": len(load(content)),
        }

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _check_syntax(self, path: str, before: str, after: str) -> dict:
        """Return extra result fields from the optional syntax check.

        Raises SyntaxCheckError only when rejection is enabled and the
        original text parsed cleanly.
        """
        if not self.config.VALIDATE_SYNTAX:
            return {}
        try:
            report = check_syntax(path, after)
            if not report.checked:
                return {}
            if report.valid:
                return {"syntax_valid": True}
            was_valid = check_syntax(path, before).valid
        except Exception as exc:
            logger.warning("[SmartEdit] Syntax check failed for %s: %s", path, exc)
            return {}

        warning = f"Edited file has a syntax error near line {report.error_line}."
        if self.config.REJECT_SYNTAX_ERRORS and was_valid:
            raise SyntaxCheckError(f"{warning} The file was not modified.")
        logger.warning("[SmartEdit] %s %s", path, warning)
        return {"syntax_valid": False, "warning": warning}

    def _record(self, tool: str, file_path: str, **fields) -> None:
        if not self.config.METRICS_ENABLED:
            return
        entry = {"tool": tool, "file": file_path}
        entry.update(fields)
        log_edit_metric(
            entry,
            project_root=self.config.SANDBOX_ROOT,
            metrics_dir=self.config.METRICS_DIR,
        )
