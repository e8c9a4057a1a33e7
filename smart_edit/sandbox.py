"""
Sandbox resolver — maps caller-supplied paths into the sandbox root.
"""

from __future__ import annotations

import logging
import os

from .errors import SecurityViolation

logger = logging.getLogger(__name__)


class SandboxResolver:
    """Resolve relative or absolute paths, refusing anything outside *root*."""

    def __init__(self, root: str) -> None:
        self.root = os.path.realpath(root)

    def resolve(self, raw_path: str) -> str:
        """Return the absolute path for *raw_path*.

        Raises
        ------
        SecurityViolation
            The resolved path (symlinks followed) is outside the root.
        """
        resolved = os.path.realpath(os.path.join(self.root, os.path.expanduser(raw_path)))
        if os.path.commonpath([self.root, resolved]) != self.root:
            logger.warning("[SmartEdit] Blocked path outside sandbox: %s", raw_path)
            raise SecurityViolation(
                f"Security Violation: Path traversal attempt blocked for path: {raw_path}"
            )
        return resolved

    __call__ = resolve
