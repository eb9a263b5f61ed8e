"""
Redundancy classifier — decides whether a hunk's effect is already present
in the current content.
"""

from __future__ import annotations

from enum import Enum
from typing import Sequence

from .applier import apply_hunk
from .hunk import Hunk


class Redundancy(str, Enum):
    IDENTICAL = "identical"
    DUPLICATE_ADDITIONS = "duplicate_additions"
    NOT_REDUNDANT = "not_redundant"

    @property
    def is_redundant(self) -> bool:
        return self is not Redundancy.NOT_REDUNDANT


def classify(hunk: Hunk, current_lines: Sequence[str]) -> Redundancy:
    """Classify *hunk* against *current_lines*.

    ``IDENTICAL``: the hunk applies and changes nothing.
    ``DUPLICATE_ADDITIONS``: the hunk applies, removes nothing, and every
    line it adds already appears somewhere in the file.
    ``NOT_REDUNDANT``: everything else, including hunks that do not apply.

    The duplicate-additions check only looks for the text anywhere in the
    file. It ignores position and multiplicity, so an unrelated identical
    line elsewhere is enough to call a hunk redundant.
    """
    outcome = apply_hunk(current_lines, hunk)
    if not outcome.ok:
        return Redundancy.NOT_REDUNDANT

    if outcome.lines == list(current_lines):
        return Redundancy.IDENTICAL

    if any(c.is_remove for c in hunk.changes):
        return Redundancy.NOT_REDUNDANT

    present = set(current_lines)
    if all(c.text in present for c in hunk.changes if c.is_add):
        return Redundancy.DUPLICATE_ADDITIONS
    return Redundancy.NOT_REDUNDANT
