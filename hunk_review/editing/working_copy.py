"""
Working copy — reads and writes project files as line buffers.

This is the file content provider the review session works against. An
absent file reads as ``None``; callers treat it as an empty buffer that
only new-file hunks may target.
"""

from __future__ import annotations

import logging
import os
import shutil
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

_TMP_SUFFIX = ".hunk_review_tmp"


class WorkingCopyError(Exception):
    """Raised for paths outside the working copy or failed writes."""


class FileContentProvider(Protocol):
    def read_lines(self, path: str) -> Optional[list[str]]:
        ...

    def write_lines(self, path: str, lines: list[str]) -> None:
        ...

    def remove(self, path: str) -> None:
        ...


class WorkingCopy:
    """Line-oriented access to files under *root*."""

    def __init__(self, root: str = ".") -> None:
        self.root = os.path.abspath(root)
        # whether each file ended with a newline when last read
        self._trailing_newline: dict[str, bool] = {}

    def resolve(self, path: str) -> str:
        full = os.path.abspath(os.path.join(self.root, path))
        if full != self.root and not full.startswith(self.root + os.sep):
            raise WorkingCopyError(f"Path escapes working copy: {path}")
        return full

    def exists(self, path: str) -> bool:
        return os.path.isfile(self.resolve(path))

    def read_lines(self, path: str) -> Optional[list[str]]:
        full = self.resolve(path)
        if not os.path.isfile(full):
            return None

        with open(full, "r", encoding="utf-8", errors="replace") as f:
            content = f.read()

        if content == "":
            self._trailing_newline[path] = True
            return []

        lines = content.split("\n")
        ends_with_newline = content.endswith("\n")
        if ends_with_newline:
            lines.pop()
        self._trailing_newline[path] = ends_with_newline
        return lines

    def write_lines(self, path: str, lines: list[str]) -> None:
        content = "\n".join(lines)
        if lines and self._trailing_newline.get(path, True):
            content += "\n"
        self._safe_write(self.resolve(path), content)
        logger.debug("[HunkReview] Wrote %d lines to %s", len(lines), path)

    def remove(self, path: str) -> None:
        full = self.resolve(path)
        if not os.path.isfile(full):
            return
        try:
            os.remove(full)
        except OSError as exc:
            raise WorkingCopyError(f"Failed to remove {full}: {exc}") from exc
        self._trailing_newline.pop(path, None)
        logger.debug("[HunkReview] Removed %s", path)

    @staticmethod
    def _safe_write(abs_path: str, content: str) -> None:
        """Write atomically via temp file + rename."""
        os.makedirs(os.path.dirname(abs_path), exist_ok=True)
        tmp_path = abs_path + _TMP_SUFFIX

        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(content)

            # On Windows, os.rename fails if destination exists
            if os.path.exists(abs_path):
                shutil.move(tmp_path, abs_path)
            else:
                os.rename(tmp_path, abs_path)
        except OSError as exc:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise WorkingCopyError(f"Failed to write {abs_path}: {exc}") from exc
