"""
Hunk reverser — inverts a hunk so that applying it to the patched buffer
restores the original one.
"""

from __future__ import annotations

from .changes import Change, ChangeKind
from .header import format_header, parse_header
from .hunk import Hunk

_SWAPPED_KIND = {
    ChangeKind.ADD: ChangeKind.REMOVE,
    ChangeKind.REMOVE: ChangeKind.ADD,
    ChangeKind.CONTEXT: ChangeKind.CONTEXT,
}


def reverse_hunk(hunk: Hunk) -> Hunk:
    """Return the inverse of *hunk*.

    The header's old and new ranges trade places (the context label is
    kept), adds become removes and removes become adds. Body order is
    preserved, and the id, file and index of the hunk are unchanged.
    """
    changes = tuple(Change(_SWAPPED_KIND[c.kind], c.text) for c in hunk.changes)
    return hunk.with_header(hunk.header.swapped()).with_changes(changes)


def reverse_hunk_text(text: str) -> str:
    """Reverse raw hunk text line by line.

    Unlike :func:`reverse_hunk` this keeps lines the decoder would drop,
    such as ``\\ No newline at end of file`` markers, exactly where they
    were.

    Raises
    ------
    MalformedHeader
        If a ``@@`` line in *text* does not parse.
    """
    out: list[str] = []
    for line in text.split("\n"):
        if line.startswith("@@"):
            out.append(format_header(parse_header(line).swapped()))
        elif line.startswith("+"):
            out.append("-" + line[1:])
        elif line.startswith("-"):
            out.append("+" + line[1:])
        else:
            out.append(line)
    return "\n".join(out)

