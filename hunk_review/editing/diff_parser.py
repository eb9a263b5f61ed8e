"""
Diff parser — splits ``git diff`` / ``jj diff`` output into per-file
patches of reviewable hunks.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from ..engine import Hunk, MalformedHeader, apply_hunk, decode_changes, make_hunk_id, parse_header
from ..engine.header import HunkHeader

logger = logging.getLogger(__name__)

DEV_NULL = "/dev/null"

# Patterns
_GIT_DIFF_PATTERN = re.compile(r"^diff --git a/(.+) b/(.+)$")
_JJ_DIFF_PATTERN = re.compile(r"^diff -r [0-9a-f]+ [0-9a-f]+ (.+)$")


@dataclass
class FilePatch:
    """All hunks for a single file."""
    old_path: str
    new_path: str
    hunks: list[Hunk] = field(default_factory=list)

    @property
    def path(self) -> str:
        """Canonical path: the new side unless the file was deleted."""
        if self.new_path and self.new_path != DEV_NULL:
            return self.new_path
        return self.old_path

    @property
    def is_new_file(self) -> bool:
        return self.old_path == DEV_NULL

    @property
    def is_deleted_file(self) -> bool:
        return self.new_path == DEV_NULL


@dataclass
class ParsedDiff:
    """A complete parsed diff."""
    file_patches: list[FilePatch] = field(default_factory=list)
    parse_successful: bool = True
    parse_errors: list[str] = field(default_factory=list)

    @property
    def files(self) -> list[str]:
        return [patch.path for patch in self.file_patches]

    def to_hunks(self) -> list[Hunk]:
        """All hunks of all files, in parse order."""
        return [hunk for patch in self.file_patches for hunk in patch.hunks]


def _strip_side_prefix(path: str, prefix: str) -> str:
    path = path.split("\t", 1)[0].strip()
    if path.startswith(prefix):
        return path[len(prefix):]
    return path


def _extract_paths(line: str) -> tuple[str, str]:
    match = _GIT_DIFF_PATTERN.match(line)
    if match:
        return match.group(1), match.group(2)
    match = _JJ_DIFF_PATTERN.match(line)
    if match:
        return match.group(1), match.group(1)
    last = line.split(" ")[-1]
    return last, last


class DiffParser:
    """Parse unified diffs into :class:`ParsedDiff` objects."""

    def parse(
        self,
        diff_text: str,
        suggestion_id: str = "",
        default_path: str = "",
    ) -> ParsedDiff:
        """Parse *diff_text*.

        Parameters
        ----------
        diff_text:
            Output of ``git diff``, ``jj diff`` or bare ``@@`` hunks.
        suggestion_id:
            Prefix of every hunk id (``<suggestion>:<file>:<index>``).
        default_path:
            File path used for hunks that appear before any file header.

        Returns
        -------
        ParsedDiff
            Malformed ``@@`` lines are reported in ``parse_errors`` and
            their bodies skipped.
        """
        return _DiffReader(suggestion_id, default_path).read(diff_text)

    def validate(
        self,
        parsed: ParsedDiff,
        file_contents: dict[str, list[str]],
        max_invalid_ratio: float = 0.5,
    ) -> Optional[ParsedDiff]:
        """Keep only the hunks that apply to the given file contents.

        Parameters
        ----------
        parsed:
            The parsed diff to validate.
        file_contents:
            Mapping of file path to its current lines; a missing path is
            an empty (absent) file.
        max_invalid_ratio:
            Give up and return ``None`` when more than this share of the
            hunks fail.

        Returns
        -------
        ParsedDiff | None
            A new diff holding the hunks that apply cleanly.
        """
        total_hunks = 0
        invalid_hunks = 0
        result = ParsedDiff(parse_errors=list(parsed.parse_errors))

        for patch in parsed.file_patches:
            lines = file_contents.get(patch.path, [])
            valid: list[Hunk] = []

            for hunk in patch.hunks:
                total_hunks += 1
                outcome = apply_hunk(lines, hunk)
                if outcome.ok:
                    valid.append(hunk)
                    continue
                invalid_hunks += 1
                result.parse_errors.append(f"Hunk {hunk.id}: {outcome.failure}")
                logger.warning(
                    "[HunkReview] Hunk %s does not apply to %s: %s",
                    hunk.id, patch.path, outcome.failure,
                )

            if valid:
                result.file_patches.append(FilePatch(
                    old_path=patch.old_path,
                    new_path=patch.new_path,
                    hunks=valid,
                ))

        if total_hunks > 0 and invalid_hunks / total_hunks > max_invalid_ratio:
            logger.warning(
                "[HunkReview] %d/%d hunks invalid, rejecting diff",
                invalid_hunks, total_hunks,
            )
            return None

        result.parse_successful = len(result.file_patches) > 0
        return result


class _DiffReader:
    """Line-by-line state machine behind :meth:`DiffParser.parse`."""

    def __init__(self, suggestion_id: str, default_path: str) -> None:
        self._suggestion_id = suggestion_id
        self._default_path = default_path
        self._result = ParsedDiff()
        self._patch: Optional[FilePatch] = None
        self._header: Optional[HunkHeader] = None
        self._body: list[str] = []
        self._old_left = 0
        self._new_left = 0

    def read(self, diff_text: str) -> ParsedDiff:
        for line in diff_text.split("\n"):
            line = line.rstrip("\r")
            if self._header is not None and self._consume_body(line):
                continue
            self._flush_hunk()
            self._read_structure(line)

        self._flush_file()
        self._result.parse_successful = len(self._result.file_patches) > 0
        return self._result

    # ------------------------------------------------------------------
    # Hunk bodies
    # ------------------------------------------------------------------

    def _consume_body(self, line: str) -> bool:
        """Add *line* to the current hunk; ``False`` once the hunk ended."""
        if line.startswith("\\"):
            self._body.append(line)
            return True

        if self._old_left > 0 or self._new_left > 0:
            prefix = line[:1]
            if prefix in ("", " "):
                self._old_left -= 1
                self._new_left -= 1
            elif prefix == "+":
                self._new_left -= 1
            elif prefix == "-":
                self._old_left -= 1
            else:
                return False
            self._body.append(line)
            return True

        # Declared counts are used up; tolerate extra change lines that
        # cannot be mistaken for the next file's header.
        if line[:1] in (" ", "+", "-") and not line.startswith(("--- ", "+++ ")):
            self._body.append(line)
            return True
        return False

    def _flush_hunk(self) -> None:
        if self._header is None or self._patch is None:
            self._header = None
            return

        changes = decode_changes(self._body)
        old_total = sum(1 for c in changes if not c.is_add)
        new_total = sum(1 for c in changes if not c.is_remove)
        if (old_total, new_total) != (self._header.old_count, self._header.new_count):
            logger.debug(
                "[HunkReview] Hunk %s in %s declares -%d/+%d lines but has -%d/+%d",
                len(self._patch.hunks), self._patch.path,
                self._header.old_count, self._header.new_count,
                old_total, new_total,
            )

        index = len(self._patch.hunks)
        path = self._patch.path
        self._patch.hunks.append(Hunk(
            id=make_hunk_id(self._suggestion_id, path, index),
            file=path,
            header=self._header,
            changes=tuple(changes),
            index=index,
        ))
        self._header = None
        self._body = []

    # ------------------------------------------------------------------
    # File structure
    # ------------------------------------------------------------------

    def _read_structure(self, line: str) -> None:
        if line.startswith(("diff --git ", "diff -r ")):
            self._flush_file()
            old_path, new_path = _extract_paths(line)
            self._patch = FilePatch(old_path=old_path, new_path=new_path)
            return

        if line.startswith("--- "):
            # a second "---" without a "diff" line starts the next file
            if self._patch is None or self._patch.hunks:
                self._flush_file()
                self._patch = FilePatch(old_path="", new_path="")
            self._patch.old_path = _strip_side_prefix(line[4:], "a/")
            return

        if line.startswith("+++ "):
            if self._patch is None:
                self._patch = FilePatch(old_path="", new_path="")
            self._patch.new_path = _strip_side_prefix(line[4:], "b/")
            return

        if line.startswith("@@"):
            self._start_hunk(line)

    def _start_hunk(self, line: str) -> None:
        try:
            header = parse_header(line)
        except MalformedHeader as exc:
            self._result.parse_errors.append(str(exc))
            logger.warning("[HunkReview] Skipping hunk: %s", exc)
            return

        if self._patch is None:
            self._patch = FilePatch(
                old_path=self._default_path, new_path=self._default_path,
            )
        self._header = header
        self._body = []
        self._old_left = header.old_count
        self._new_left = header.new_count

    def _flush_file(self) -> None:
        self._flush_hunk()
        if self._patch is not None and self._patch.hunks:
            self._result.file_patches.append(self._patch)
        self._patch = None


# ----------------------------------------------------------------------
# Selection helpers
# ----------------------------------------------------------------------

def _glob_to_regex(pattern: str) -> re.Pattern:
    """``*`` stays within one path segment, ``**`` crosses segments."""
    out = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**", i):
            out.append(".*")
            i += 2
        elif pattern[i] == "*":
            out.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            out.append(".")
            i += 1
        else:
            out.append(re.escape(pattern[i]))
            i += 1
    return re.compile("^" + "".join(out) + "$")


def matches_pattern(file_path: str, patterns: list[str]) -> bool:
    return any(
        file_path == pattern or _glob_to_regex(pattern).match(file_path)
        for pattern in patterns
    )


@dataclass(frozen=True)
class LineRange:
    file: str
    start_line: int
    end_line: int


def filter_file_patches(
    patches: list[FilePatch],
    include_files: Optional[list[str]] = None,
    exclude_files: Optional[list[str]] = None,
    line_ranges: Optional[list[LineRange]] = None,
) -> list[FilePatch]:
    """Select the patches (and hunks) a suggestion should publish.

    A file matches a pattern through either its old or its new path. Line
    ranges apply to the new-side span of each hunk; files without a range
    keep every hunk and files left with no hunks are dropped.
    """
    filtered = list(patches)

    if include_files:
        filtered = [
            p for p in filtered
            if matches_pattern(p.new_path, include_files)
            or matches_pattern(p.old_path, include_files)
        ]

    if exclude_files:
        filtered = [
            p for p in filtered
            if not matches_pattern(p.new_path, exclude_files)
            and not matches_pattern(p.old_path, exclude_files)
        ]

    if line_ranges:
        selected: list[FilePatch] = []
        for patch in filtered:
            ranges = [
                r for r in line_ranges
                if r.file in (patch.new_path, patch.old_path)
            ]
            if not ranges:
                selected.append(patch)
                continue
            hunks = [
                h for h in patch.hunks
                if any(
                    h.header.new_start <= r.end_line
                    and h.header.new_start + h.header.new_count - 1 >= r.start_line
                    for r in ranges
                )
            ]
            if hunks:
                selected.append(FilePatch(patch.old_path, patch.new_path, hunks))
        filtered = selected

    return filtered


def files_in_diff(diff_text: str) -> list[str]:
    """Unique file paths touched by *diff_text*, in first-seen order."""
    seen: dict[str, None] = {}
    for patch in DiffParser().parse(diff_text).file_patches:
        if patch.new_path and patch.new_path != DEV_NULL:
            seen.setdefault(patch.new_path, None)
        elif patch.old_path and patch.old_path != DEV_NULL:
            seen.setdefault(patch.old_path, None)
    return list(seen)
