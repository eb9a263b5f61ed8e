"""
Feedback log — records every review decision in a JSONL file.
"""

from __future__ import annotations

import json
import logging
import os
from collections import Counter
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

DEFAULT_FEEDBACK_LOG = ".hunk_review/feedback.jsonl"


def log_feedback(data: dict, path: str = DEFAULT_FEEDBACK_LOG) -> None:
    """Append a single feedback entry to the JSONL log.

    Parameters
    ----------
    data:
        Entry fields (suggestion_id, hunk_id, action, file, original_diff,
        modified_diff, applied, comment).
    path:
        Log file path; parent directories are created as needed.
    """
    entry = {"timestamp": datetime.now(timezone.utc).isoformat()}
    entry.update(data)

    try:
        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")
    except OSError as exc:
        logger.warning("[HunkReview] Failed to write feedback log: %s", exc)


def read_feedback(path: str = DEFAULT_FEEDBACK_LOG) -> list[dict]:
    """Return all parseable entries; corrupt lines are skipped."""
    entries: list[dict] = []
    if not os.path.isfile(path):
        return entries

    try:
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(json.loads(line))
                except json.JSONDecodeError:
                    continue
    except OSError as exc:
        logger.warning("[HunkReview] Failed to read feedback log: %s", exc)
    return entries


def read_feedback_stats(path: str = DEFAULT_FEEDBACK_LOG, last_n: int = 100) -> dict:
    """Compute statistics over the most recent *last_n* decisions.

    Returns
    -------
    dict
        ``total``, ``actions`` (count per action), ``action_rates``
        (percent per action) and ``applied_rate`` (percent).
    """
    entries = read_feedback(path)[-last_n:]
    if not entries:
        return {
            "total": 0,
            "actions": {},
            "action_rates": {},
            "applied_rate": 0.0,
        }

    total = len(entries)
    actions = Counter(e.get("action", "unknown") for e in entries)
    applied = sum(1 for e in entries if e.get("applied", False))

    return {
        "total": total,
        "actions": dict(actions.most_common()),
        "action_rates": {
            action: count / total * 100
            for action, count in actions.most_common()
        },
        "applied_rate": applied / total * 100,
    }
