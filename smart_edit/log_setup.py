"""
Logging setup — file logger for the ``smart_edit`` package.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logger(
    log_dir: str | None = ".smart_edit/logs",
    level: str = "INFO",
    stderr: bool = False,
) -> logging.Logger:
    """Configure the package logger, replacing handlers from earlier calls.

    Parameters
    ----------
    log_dir:
        Directory for a timestamped log file; None disables the file handler.
    level:
        Level name for the package logger.
    stderr:
        Also log to stderr.  The MCP server uses this since stdout carries
        the protocol.
    """
    logger = logging.getLogger("smart_edit")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Reconfiguring replaces the handlers from an earlier call
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(_FORMAT, datefmt="%H:%M:%S")

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = os.path.join(log_dir, f"smart_edit_{timestamp}.log")
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    if stderr:
        sh = logging.StreamHandler(sys.stderr)
        sh.setFormatter(formatter)
        logger.addHandler(sh)

    return logger
