"""
Hunk value — a parsed header plus its decoded body, identified by a
stable ``<suggestion>:<file>:<index>`` id.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Iterable

from .changes import Change, decode_changes, encode_changes
from .header import HunkHeader, format_header, parse_header


def make_hunk_id(suggestion_id: str, file: str, index: int) -> str:
    return f"{suggestion_id}:{file}:{index}"


@dataclass(frozen=True)
class Hunk:
    """One reviewable change block.

    Hunks are immutable: the offset tracker and the reverser return
    adjusted copies instead of editing a hunk in place. ``index`` is the
    position of the hunk within its file in parse order and breaks ties
    between hunks that start on the same original line.
    """
    id: str
    file: str
    header: HunkHeader
    changes: tuple[Change, ...]
    index: int = 0

    @property
    def drift(self) -> int:
        return self.header.drift

    def with_header(self, header: HunkHeader) -> "Hunk":
        return dataclasses.replace(self, header=header)

    def with_changes(self, changes: Iterable[Change]) -> "Hunk":
        return dataclasses.replace(self, changes=tuple(changes))

    def render_lines(self) -> list[str]:
        return [format_header(self.header)] + encode_changes(self.changes)

    def render(self) -> str:
        """Hunk text: header line followed by prefixed body lines."""
        return "\n".join(self.render_lines())


def parse_hunk(
    text: str,
    suggestion_id: str = "",
    file: str = "",
    index: int = 0,
) -> Hunk:
    """Parse a single hunk (``@@`` header line followed by its body).

    Raises
    ------
    MalformedHeader
        If the first line is not a valid hunk header.
    """
    lines = text.split("\n")
    if len(lines) > 1 and lines[-1] == "":
        lines.pop()

    header = parse_header(lines[0])
    changes = decode_changes(lines[1:])
    return Hunk(
        id=make_hunk_id(suggestion_id, file, index),
        file=file,
        header=header,
        changes=tuple(changes),
        index=index,
    )
