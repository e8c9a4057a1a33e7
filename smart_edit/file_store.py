"""
Local file store — whole-file text read and replace.

Reads and writes keep line terminators untouched (``newline=""``) so CRLF
files round-trip byte for byte.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile

from .errors import NotFoundError

logger = logging.getLogger(__name__)


class LocalFileStore:
    """UTF-8 text files on the local filesystem."""

    def read(self, path: str) -> str:
        try:
            with open(path, "r", encoding="utf-8", newline="") as f:
                return f.read()
        except FileNotFoundError:
            raise NotFoundError(f"File not found: {path}") from None
        except IsADirectoryError:
            raise NotFoundError(f"Path is a directory, not a file: {path}") from None

    def write(self, path: str, text: str) -> None:
        """Replace *path* with *text* via a temp file + rename.

        Each call uses its own temp file, so concurrent writers to the same
        path never interleave; the last rename wins.
        """
        directory = os.path.dirname(os.path.abspath(path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".smart_edit_", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(text)
            if os.path.exists(path):
                shutil.copymode(path, tmp_path)
            os.replace(tmp_path, path)
        except Exception:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

