"""
Change decoder — classifies hunk body lines into an ordered list of
context / add / remove operations.

The order of the returned changes is the exact replay order used by the
applier.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Sequence

NO_NEWLINE_MARKER = "\\"


class ChangeKind(str, Enum):
    CONTEXT = " "
    ADD = "+"
    REMOVE = "-"


@dataclass(frozen=True)
class Change:
    """One body line of a hunk."""
    kind: ChangeKind
    text: str

    @classmethod
    def context(cls, text: str) -> "Change":
        return cls(ChangeKind.CONTEXT, text)

    @classmethod
    def add(cls, text: str) -> "Change":
        return cls(ChangeKind.ADD, text)

    @classmethod
    def remove(cls, text: str) -> "Change":
        return cls(ChangeKind.REMOVE, text)

    @property
    def is_context(self) -> bool:
        return self.kind is ChangeKind.CONTEXT

    @property
    def is_add(self) -> bool:
        return self.kind is ChangeKind.ADD

    @property
    def is_remove(self) -> bool:
        return self.kind is ChangeKind.REMOVE

    def render(self) -> str:
        return self.kind.value + self.text


def decode_changes(body_lines: Iterable[str]) -> list[Change]:
    """Decode hunk body lines into changes.

    Parameters
    ----------
    body_lines:
        The lines following a ``@@`` header, without line terminators.

    Returns
    -------
    list[Change]
        Changes in body order. Decoding stops at the first line whose
        prefix is not part of the hunk body grammar (including the next
        ``@@`` header). ``\\ No newline at end of file`` markers are
        skipped and a completely empty line is an empty context line.
    """
    changes: list[Change] = []
    for line in body_lines:
        line = line.rstrip("\r\n")
        if line == "":
            changes.append(Change.context(""))
            continue

        prefix, rest = line[0], line[1:]
        if prefix == " ":
            changes.append(Change.context(rest))
        elif prefix == "+":
            changes.append(Change.add(rest))
        elif prefix == "-":
            changes.append(Change.remove(rest))
        elif prefix == NO_NEWLINE_MARKER:
            continue
        else:
            break
    return changes


def encode_changes(changes: Iterable[Change]) -> list[str]:
    """Render changes back into prefixed body lines."""
    return [change.render() for change in changes]


# ------------------------------------------------------------------
# Projections
# ------------------------------------------------------------------

def old_side(changes: Iterable[Change]) -> list[str]:
    """Lines the hunk expects to find (context + removed)."""
    return [c.text for c in changes if not c.is_add]


def new_side(changes: Iterable[Change]) -> list[str]:
    """Lines the hunk leaves behind (context + added)."""
    return [c.text for c in changes if not c.is_remove]


def added_lines(changes: Iterable[Change]) -> list[str]:
    return [c.text for c in changes if c.is_add]


def removed_lines(changes: Iterable[Change]) -> list[str]:
    return [c.text for c in changes if c.is_remove]


def split_context(changes: Sequence[Change]) -> tuple[list[str], list[str]]:
    """Return the ``(before, after)`` context surrounding the changed lines.

    ``after`` only holds the context that closes the hunk; context between
    two change runs is not trailing context. A hunk without any add or
    remove reports all of its context as ``before``.
    """
    before: list[str] = []
    after: list[str] = []
    seen_change = False
    for change in changes:
        if change.is_context:
            if seen_change:
                after.append(change.text)
            else:
                before.append(change.text)
        else:
            seen_change = True
            after = []
    return before, after
