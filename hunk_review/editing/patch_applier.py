"""
Patch applier — applies hunks to files in a working copy.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..engine import ApplyFailure, ApplyOutcome, FailureKind, Hunk, apply_hunk
from .diff_parser import FilePatch, ParsedDiff
from .working_copy import FileContentProvider, WorkingCopyError

logger = logging.getLogger(__name__)


@dataclass
class ApplyResult:
    """Result of applying a whole parsed diff."""
    success: bool = False
    files_modified: list[str] = field(default_factory=list)
    hunks_applied: int = 0
    hunks_failed: int = 0
    failed_hunks: list[Hunk] = field(default_factory=list)
    error: str = ""


def missing_file_failure(path: str) -> ApplyFailure:
    return ApplyFailure(
        kind=FailureKind.FILE_NOT_FOUND, line_number=0, expected="", actual=path,
    )


class PatchApplier:
    """Apply hunks to files provided by a :class:`FileContentProvider`."""

    def __init__(self, working_copy: FileContentProvider) -> None:
        self._working_copy = working_copy

    # ------------------------------------------------------------------
    # Single hunk
    # ------------------------------------------------------------------

    def preview(self, path: str, hunk: Hunk) -> ApplyOutcome:
        """File content with *hunk* applied, without writing it."""
        lines = self._working_copy.read_lines(path)
        if lines is None:
            if not hunk.header.is_new_file:
                return ApplyOutcome.failed(missing_file_failure(path))
            lines = []
        return apply_hunk(lines, hunk)

    def apply_to_file(self, path: str, hunk: Hunk) -> ApplyOutcome:
        """Apply *hunk* to *path* and write the result on success."""
        outcome = self.preview(path, hunk)
        if not outcome.ok:
            logger.warning(
                "[HunkReview] Hunk %s failed for %s: %s",
                hunk.id, path, outcome.failure,
            )
            return outcome

        self._working_copy.write_lines(path, outcome.lines)
        logger.info("[HunkReview] Applied hunk %s to %s", hunk.id, path)
        return outcome

    # ------------------------------------------------------------------
    # Whole diff
    # ------------------------------------------------------------------

    def apply(self, parsed_diff: ParsedDiff) -> ApplyResult:
        """Apply every hunk of a parsed diff.

        All files are patched in memory first; nothing is written unless
        every hunk applies. If a write fails, files already written are
        restored and files the diff created are removed.
        """
        result = ApplyResult()

        if not parsed_diff.file_patches:
            result.error = "No patches to apply"
            return result

        # Phase 1: compute all patched contents without writing
        patched: dict[str, tuple[list[str], Optional[list[str]]]] = {}
        try:
            for patch in parsed_diff.file_patches:
                old_lines, new_lines, failed = self._apply_file_patch(patch)
                result.hunks_applied += len(patch.hunks) - len(failed)
                result.hunks_failed += len(failed)
                result.failed_hunks.extend(failed)
                patched[patch.path] = (new_lines, old_lines)
        except WorkingCopyError as exc:
            logger.error("[HunkReview] Could not read patch target: %s", exc)
            result.error = str(exc)
            return result

        if result.failed_hunks:
            result.error = f"{result.hunks_failed} hunk(s) did not apply"
            return result

        # Phase 2: write, rolling back on failure
        written: list[str] = []
        try:
            for path, (new_lines, _) in patched.items():
                self._working_copy.write_lines(path, new_lines)
                written.append(path)
        except WorkingCopyError as exc:
            logger.error(
                "[HunkReview] Write failed, rolling back %d files: %s",
                len(written), exc,
            )
            for path in written:
                _, old = patched[path]
                try:
                    if old is None:
                        self._working_copy.remove(path)
                    else:
                        self._working_copy.write_lines(path, old)
                except WorkingCopyError as rb_exc:
                    logger.error("[HunkReview] Rollback failed for %s: %s", path, rb_exc)
            result.error = f"Write failed: {exc}"
            return result

        result.success = True
        result.files_modified = written
        return result

    def _apply_file_patch(
        self,
        patch: FilePatch,
    ) -> tuple[Optional[list[str]], list[str], list[Hunk]]:
        """Apply all hunks for one file in memory.

        Returns ``(old_lines, new_lines, failed_hunks)``.
        """
        old_lines = self._working_copy.read_lines(patch.path)
        new_lines = list(old_lines or [])
        failed: list[Hunk] = []

        # Bottom-up so earlier hunks keep their original line numbers
        for hunk in sorted(patch.hunks, key=lambda h: h.header.old_start, reverse=True):
            if old_lines is None and not hunk.header.is_new_file:
                failed.append(hunk)
                continue
            outcome = apply_hunk(new_lines, hunk)
            if outcome.ok:
                new_lines = outcome.lines
            else:
                failed.append(hunk)
                logger.warning(
                    "[HunkReview] Hunk %s failed for %s: %s",
                    hunk.id, patch.path, outcome.failure,
                )

        return old_lines, new_lines, failed
