"""
Edit metrics — records every edit attempt in a JSONL log file.
"""

from __future__ import annotations

import json
import logging
import os
from collections import Counter
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

DEFAULT_METRICS_DIR = ".smart_edit/metrics"
_METRICS_FILE = "edit_metrics.jsonl"


def _metrics_path(project_root: str | None = None, metrics_dir: str | None = None) -> str:
    """Return the absolute path to the metrics file."""
    base = project_root or os.getcwd()
    return os.path.join(base, metrics_dir or DEFAULT_METRICS_DIR, _METRICS_FILE)


def log_edit_metric(
    data: dict,
    project_root: str | None = None,
    metrics_dir: str | None = None,
) -> None:
    """Append a single edit metric entry to the JSONL log.

    Parameters
    ----------
    data:
        Metric fields to log (tool, file, strategy, method, success, etc.).
    project_root:
        Optional project root directory. Defaults to CWD.
    metrics_dir:
        Directory relative to *project_root* holding the log.
    """
    path = _metrics_path(project_root, metrics_dir)

    entry = {"timestamp": datetime.now(timezone.utc).isoformat()}
    entry.update(data)

    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")
    except OSError as exc:
        logger.warning("[SmartEdit] Failed to write metrics: %s", exc)


def read_edit_stats(
    last_n: int = 50,
    project_root: str | None = None,
    metrics_dir: str | None = None,
) -> dict:
    """Compute rolling statistics from the metrics log.

    Returns
    -------
    dict
        total_edits, success_rate, fallback_rate (patch edits only),
        strategies (share of each strategy/method among successes).
    """
    path = _metrics_path(project_root, metrics_dir)

    entries: list[dict] = []
    if os.path.isfile(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if line:
                        try:
                            entries.append(json.loads(line))
                        except json.JSONDecodeError:
                            continue
        except OSError as exc:
            logger.warning("[SmartEdit] Failed to read metrics: %s", exc)

    entries = entries[-last_n:]

    if not entries:
        return {
            "total_edits": 0,
            "success_rate": 0.0,
            "fallback_rate": 0.0,
            "strategies": {},
        }

    total = len(entries)
    successes = [e for e in entries if e.get("success", False)]
    patches = [e for e in entries if e.get("tool") == "apply_patch"]
    fallbacks = sum(1 for e in patches if e.get("fallback_used", False))

    strategies = Counter(
        e.get("strategy") or e.get("method") or "unknown" for e in successes
    )

    return {
        "total_edits": total,
        "success_rate": len(successes) / total * 100,
        "fallback_rate": fallbacks / len(patches) * 100 if patches else 0.0,
        "strategies": {
            name: count / len(successes) * 100
            for name, count in strategies.most_common()
        },
    }
