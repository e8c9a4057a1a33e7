"""
Error taxonomy — typed failures raised by the edit engine and converted to
structured payloads at the tool boundary.
"""

from __future__ import annotations

_DEFAULT_HINT = "Check inputs and try again."

# Per-tool hints used when the error itself carries no specific advice.
_TOOL_HINTS = {
    "smart_replace": (
        "Could not find the specified code. Try using search_in_file to "
        "find the exact text, or use less context in old_code."
    ),
    "apply_patch": (
        "Patch could not be applied. Re-read the file and regenerate the "
        "patch, or use smart_replace for small edits."
    ),
    "delete_lines": (
        "Invalid line range. Ensure start_line <= end_line and both are "
        "within file bounds."
    ),
    "get_code_context": (
        "Line number out of range. Use read_file_content to check the "
        "file length."
    ),
}


class EditError(Exception):
    """Base class for every failure the edit tools report.

    *hint*, when given, replaces the class-level hint for this instance.
    """

    hint: str = ""

    def __init__(self, message: str = "", hint: str | None = None) -> None:
        super().__init__(message)
        if hint:
            self.hint = hint


class NotFoundError(EditError):
    """The target file does not exist."""

    hint = "Ensure the file path is correct and the file exists."


class NoMatchError(EditError):
    """No matching strategy located the requested code."""

    hint = _TOOL_HINTS["smart_replace"]


class InvalidRangeError(EditError):
    """Line bounds outside the file or in the wrong order."""

    hint = _TOOL_HINTS["delete_lines"]


class PatchFailureError(EditError):
    """Both structured and fallback patch application failed."""

    hint = _TOOL_HINTS["apply_patch"]


class SecurityViolation(EditError):
    """A path resolved outside the sandbox root."""

    hint = "Use a path relative to the project directory."


class InvalidRequestError(EditError):
    """Request arguments the engine cannot act on."""

    hint = "Valid match modes are exact, fuzzy and smart; old_code must not be empty."


class SyntaxCheckError(EditError):
    """The edited file no longer parses and rejection is enabled."""

    hint = "The edit would introduce a syntax error. Check brackets and indentation in new_code."


class PatchParseError(ValueError):
    """Raised when repaired patch text still cannot be parsed into hunks."""


def get_error_hint(tool_name: str, error: BaseException) -> str:
    """Return a short recovery suggestion for *error* raised by *tool_name*."""
    hint = getattr(error, "hint", "")
    if hint:
        return hint
    return _TOOL_HINTS.get(tool_name, _DEFAULT_HINT)


def to_error_payload(tool_name: str, error: BaseException) -> dict:
    """Build the structured error returned to the caller."""
    return {
        "error": True,
        "tool_name": tool_name,
        "message": str(error),
        "hint": get_error_hint(tool_name, error),
    }
