"""
Hunk applier — replays a hunk's changes against an in-memory line buffer.

Application never raises for a hunk that does not fit the buffer; the
outcome carries either the new lines or a precise description of the
first line that did not match.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from .hunk import Hunk

END_OF_FILE = "<end of file>"


class FailureKind(str, Enum):
    CONTEXT_MISMATCH = "context_mismatch"
    OUT_OF_RANGE = "out_of_range"
    FILE_NOT_FOUND = "file_not_found"


@dataclass(frozen=True)
class ApplyFailure:
    kind: FailureKind
    line_number: int
    expected: str
    actual: str

    def __str__(self) -> str:
        if self.kind is FailureKind.FILE_NOT_FOUND:
            return f"File not found: {self.actual}"
        return (
            f"Context mismatch at line {self.line_number}: "
            f"expected {self.expected!r}, got {self.actual!r}"
        )


class HunkApplyError(Exception):
    """Raised by :meth:`ApplyOutcome.raise_for_failure`."""

    def __init__(self, failure: ApplyFailure) -> None:
        super().__init__(str(failure))
        self.failure = failure


@dataclass(frozen=True)
class ApplyOutcome:
    """Either the patched lines or the reason the hunk did not apply."""
    lines: Optional[list[str]] = None
    failure: Optional[ApplyFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, lines: list[str]) -> "ApplyOutcome":
        return cls(lines=lines)

    @classmethod
    def failed(cls, failure: ApplyFailure) -> "ApplyOutcome":
        return cls(failure=failure)

    def raise_for_failure(self) -> list[str]:
        """Return the patched lines, or raise :class:`HunkApplyError`."""
        if self.failure is not None:
            raise HunkApplyError(self.failure)
        return self.lines


def lines_match(actual: str, expected: str) -> bool:
    """Whitespace-insensitive line comparison (trailing whitespace only)."""
    return actual.rstrip() == expected.rstrip()


def start_cursor(hunk: Hunk) -> int:
    """0-indexed position of the first original line the hunk touches.

    An empty old side (``-N,0``) inserts before line ``N``, so
    ``-(len + 1),0`` appends to the buffer.
    """
    return max(hunk.header.old_start - 1, 0)


def apply_hunk(original_lines: Sequence[str], hunk: Hunk) -> ApplyOutcome:
    """Apply *hunk* to *original_lines*.

    Parameters
    ----------
    original_lines:
        The current buffer, one entry per line without terminators. It is
        never modified.
    hunk:
        The hunk to replay.

    Returns
    -------
    ApplyOutcome
        ``lines`` holds the new buffer on success. On failure ``failure``
        names the 1-indexed line, the text the hunk expected there and the
        text actually found (``"<end of file>"`` past the last line).
    """
    cursor = start_cursor(hunk)
    total = len(original_lines)

    if cursor > total:
        expected = next((c.text for c in hunk.changes if not c.is_add), "")
        return ApplyOutcome.failed(ApplyFailure(
            kind=FailureKind.OUT_OF_RANGE,
            line_number=cursor + 1,
            expected=expected,
            actual=END_OF_FILE,
        ))

    result = list(original_lines[:cursor])

    for change in hunk.changes:
        if change.is_add:
            result.append(change.text)
            continue

        if cursor >= total:
            return ApplyOutcome.failed(ApplyFailure(
                kind=FailureKind.OUT_OF_RANGE,
                line_number=cursor + 1,
                expected=change.text,
                actual=END_OF_FILE,
            ))

        actual = original_lines[cursor]
        if not lines_match(actual, change.text):
            return ApplyOutcome.failed(ApplyFailure(
                kind=FailureKind.CONTEXT_MISMATCH,
                line_number=cursor + 1,
                expected=change.text,
                actual=actual,
            ))

        if change.is_context:
            # keep the file's own whitespace, not the hunk's
            result.append(actual)
        cursor += 1

    result.extend(original_lines[cursor:])
    return ApplyOutcome.success(result)
