"""
Multi-hunk offset tracker.

Every hunk of a file is generated against one snapshot, but hunks are
reviewed and applied independently and out of order. A pending hunk's
position is only right once every hunk before it has landed in the
working copy, so its position is recomputed from the set of hunks that
actually have.

All functions here are pure. ``applied_ids`` must be a snapshot that does
not change while a computation runs.
"""

from __future__ import annotations

from typing import AbstractSet, Iterable, Sequence

from .header import HunkHeader
from .hunk import Hunk


def order_hunks(file_hunks: Iterable[Hunk]) -> list[Hunk]:
    """Sort by original start line, ties broken by parse order."""
    return sorted(file_hunks, key=lambda h: (h.header.old_start, h.index))


def _find(hunks: Sequence[Hunk], target_id: str) -> Hunk:
    for hunk in hunks:
        if hunk.id == target_id:
            return hunk
    raise ValueError(f"Hunk {target_id!r} is not one of the file's hunks")


def compute_offset(
    file_hunks: Iterable[Hunk],
    applied_ids: AbstractSet[str],
    target_id: str,
) -> int:
    """Return how far *target_id* has drifted in the working copy.

    Parameters
    ----------
    file_hunks:
        Every hunk of one file within one suggestion, in any order.
    applied_ids:
        Ids of the hunks currently reflected in the working copy.
    target_id:
        The hunk whose position is wanted.

    Returns
    -------
    int
        The summed drift of the applied hunks that start before the
        target in the original file. Pending and rejected hunks never
        contribute, and neither does any hunk starting on or after the
        target's first line.

    Raises
    ------
    ValueError
        If *target_id* is not among *file_hunks*.
    """
    ordered = order_hunks(file_hunks)
    target = _find(ordered, target_id)

    offset = 0
    for hunk in ordered:
        if hunk.id == target_id:
            break
        if hunk.header.old_start >= target.header.old_start:
            continue
        if hunk.id in applied_ids:
            offset += hunk.drift
    return offset


def _working_copy_start(header: HunkHeader, offset: int) -> int:
    return max(header.old_start + offset, 0)


def adjust_header_new_start(hunk: Hunk, offset: int) -> Hunk:
    """Return a copy of *hunk* whose ``new_start`` matches the working copy.

    ``new_start`` becomes ``old_start + offset``; the old range and both
    counts are unchanged. An empty range names the line it sits before,
    on either side, so pure insertions and deletions need no correction.
    """
    header = hunk.header
    adjusted = HunkHeader(
        old_start=header.old_start,
        old_count=header.old_count,
        new_start=_working_copy_start(header, offset),
        new_count=header.new_count,
        context=header.context,
    )
    return hunk.with_header(adjusted)


def rebase_onto_working_copy(hunk: Hunk, offset: int) -> Hunk:
    """Return a copy of *hunk* with both ranges in working-copy coordinates.

    Used to forward-apply a pending hunk after earlier hunks of the same
    file have landed.
    """
    header = hunk.header
    rebased = HunkHeader(
        old_start=_working_copy_start(header, offset),
        old_count=header.old_count,
        new_start=_working_copy_start(header, offset),
        new_count=header.new_count,
        context=header.context,
    )
    return hunk.with_header(rebased)


def adjust_pending(
    file_hunks: Iterable[Hunk],
    applied_ids: AbstractSet[str],
    target_id: str,
) -> Hunk:
    """Compute the target's offset and return its adjusted copy."""
    hunks = list(file_hunks)
    offset = compute_offset(hunks, applied_ids, target_id)
    return adjust_header_new_start(_find(hunks, target_id), offset)
