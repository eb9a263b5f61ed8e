"""
Hunk header parsing — turns one ``@@ -O,C +N,M @@ label`` line into
structured coordinates and back.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

_HEADER_PATTERN = re.compile(
    r"^@@\s*-(\d+)(?:,(\d+))?\s+\+(\d+)(?:,(\d+))?\s*@@(.*)$"
)


class MalformedHeader(ValueError):
    """Raised when a line does not match the hunk header grammar."""

    def __init__(self, line: str) -> None:
        super().__init__(f"Malformed hunk header: {line!r}")
        self.line = line


@dataclass(frozen=True)
class HunkHeader:
    """Coordinates of one hunk.

    ``old_start == 0 and old_count == 0`` means the file did not exist (or
    was empty) before the change.
    """
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    context: Optional[str] = None

    @property
    def drift(self) -> int:
        """Net line-count change once this hunk is applied."""
        return self.new_count - self.old_count

    @property
    def is_new_file(self) -> bool:
        return self.old_start == 0 and self.old_count == 0

    def swapped(self) -> "HunkHeader":
        return HunkHeader(
            old_start=self.new_start,
            old_count=self.new_count,
            new_start=self.old_start,
            new_count=self.old_count,
            context=self.context,
        )

    def __str__(self) -> str:
        return format_header(self)


def parse_header(line: str) -> HunkHeader:
    """Parse a single hunk header line.

    Omitted counts default to ``1``. Anything after the closing ``@@`` is
    kept as the context label (usually the enclosing function).

    Raises
    ------
    MalformedHeader
        If the line does not start with ``@@`` or lacks either the ``-`` or
        the ``+`` range.
    """
    line = line.rstrip("\r\n")
    match = _HEADER_PATTERN.match(line)
    if match is None:
        raise MalformedHeader(line)

    old_start, old_count, new_start, new_count, label = match.groups()
    label = label.strip()
    return HunkHeader(
        old_start=int(old_start),
        old_count=int(old_count) if old_count is not None else 1,
        new_start=int(new_start),
        new_count=int(new_count) if new_count is not None else 1,
        context=label or None,
    )


def is_header_line(line: str) -> bool:
    return line.startswith("@@")


def _format_range(start: int, count: int) -> str:
    # ",1" is implied by the grammar
    if count == 1:
        return str(start)
    return f"{start},{count}"


def format_header(header: HunkHeader) -> str:
    """Render *header* back into the ``@@`` grammar."""
    text = (
        f"@@ -{_format_range(header.old_start, header.old_count)} "
        f"+{_format_range(header.new_start, header.new_count)} @@"
    )
    if header.context:
        text += f" {header.context}"
    return text
