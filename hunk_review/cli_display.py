"""
Logging setup and small console helpers for the ``hunkreview`` CLI.
"""

import logging
import os
import sys
from datetime import datetime

_LOGGER_NAME = "hunk_review"


def setup_logger(log_dir: str = ".hunk_review/logs") -> logging.Logger:
    """Creates a file logger. All verbose output goes here."""
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    # Already configured in this process
    if any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        return logger

    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"review_{timestamp}.log")

    # File handler: captures everything
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s", datefmt="%H:%M:%S"
    ))
    logger.addHandler(fh)

    # Console handler: warnings only
    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(logging.WARNING)
    ch.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(ch)

    return logger


def print_error(message: str) -> None:
    print(f"error: {message}", file=sys.stderr)


def print_rule(title: str = "", width: int = 60) -> None:
    if title:
        print(f"\n{'─' * 4} {title} {'─' * max(width - len(title) - 6, 0)}")
    else:
        print(f"\n{'─' * width}")
