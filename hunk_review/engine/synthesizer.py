"""
Diff synthesizer — produces a unified diff from two line buffers.

The line-matching algorithm itself comes from :mod:`difflib`; this module
only pins down the output contract the rest of the engine relies on.
"""

from __future__ import annotations

import difflib
from typing import Optional, Sequence

from .header import HunkHeader, format_header, is_header_line, parse_header
from .hunk import Hunk, parse_hunk


def synthesize(
    old_lines: Sequence[str],
    new_lines: Sequence[str],
    context_width: int = 3,
    fromfile: Optional[str] = None,
    tofile: Optional[str] = None,
) -> str:
    """Return a unified diff turning *old_lines* into *new_lines*.

    The result is ``""`` exactly when the two buffers are equal. Each
    changed region carries *context_width* lines of unchanged context and
    regions whose context overlaps share one hunk. ``---``/``+++`` lines
    are only written when file names are given.

    An empty range names the line it sits before (``-3,0`` inserts ahead of
    line 3), which is how :func:`~.applier.apply_hunk` reads it. Only an
    empty range at the very top of a file keeps ``0,0``.
    """
    if context_width < 0:
        raise ValueError("context_width must be >= 0")

    old_lines = list(old_lines)
    new_lines = list(new_lines)
    if old_lines == new_lines:
        return ""

    diff = list(difflib.unified_diff(
        old_lines, new_lines,
        fromfile=fromfile or "",
        tofile=tofile or fromfile or "",
        n=context_width,
        lineterm="",
    ))
    if fromfile is None and tofile is None:
        diff = diff[2:]
    diff = [_anchor_empty_ranges(line) if is_header_line(line) else line for line in diff]
    return "\n".join(diff) + "\n"


def split_hunk_texts(diff_text: str) -> list[str]:
    """Split the ``@@`` sections of a single-file diff into hunk texts."""
    sections: list[list[str]] = []
    for line in diff_text.split("\n"):
        if line.startswith("@@"):
            sections.append([line])
        elif sections:
            sections[-1].append(line)
    return ["\n".join(section).rstrip("\n") for section in sections]


def synthesize_hunks(
    old_lines: Sequence[str],
    new_lines: Sequence[str],
    context_width: int = 3,
    suggestion_id: str = "",
    file: str = "",
) -> list[Hunk]:
    """Synthesize a diff and parse it into hunks with stable ids."""
    text = synthesize(old_lines, new_lines, context_width)
    return [
        parse_hunk(section, suggestion_id=suggestion_id, file=file, index=i)
        for i, section in enumerate(split_hunk_texts(text))
    ]


def _anchor_empty_ranges(line: str) -> str:
    # difflib anchors an empty range on the line before it
    header = parse_header(line)
    old_start, new_start = header.old_start, header.new_start
    if header.old_count == 0 and old_start > 0:
        old_start += 1
    if header.new_count == 0 and new_start > 0:
        new_start += 1
    return format_header(HunkHeader(
        old_start, header.old_count, new_start, header.new_count, header.context,
    ))
