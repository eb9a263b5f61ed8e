"""Hunk engine — parse, apply, reverse, classify and renumber diff hunks."""

from .header import HunkHeader, MalformedHeader, parse_header, format_header
from .changes import (
    Change, ChangeKind, decode_changes, encode_changes,
    old_side, new_side, added_lines, removed_lines, split_context,
)
from .hunk import Hunk, make_hunk_id, parse_hunk
from .applier import (
    ApplyOutcome, ApplyFailure, FailureKind, HunkApplyError, apply_hunk,
)
from .reverser import reverse_hunk, reverse_hunk_text
from .redundancy import Redundancy, classify
from .offsets import (
    compute_offset, adjust_header_new_start, rebase_onto_working_copy,
    adjust_pending, order_hunks,
)
from .synthesizer import synthesize, synthesize_hunks

__all__ = [
    "HunkHeader", "MalformedHeader", "parse_header", "format_header",
    "Change", "ChangeKind", "decode_changes", "encode_changes",
    "old_side", "new_side", "added_lines", "removed_lines", "split_context",
    "Hunk", "make_hunk_id", "parse_hunk",
    "ApplyOutcome", "ApplyFailure", "FailureKind", "HunkApplyError", "apply_hunk",
    "reverse_hunk", "reverse_hunk_text",
    "Redundancy", "classify",
    "compute_offset", "adjust_header_new_start", "rebase_onto_working_copy",
    "adjust_pending", "order_hunks",
    "synthesize", "synthesize_hunks",
]
