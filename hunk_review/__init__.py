"""
hunk_review — review AI-proposed edits one unified-diff hunk at a time.

Public API for library usage::

    from hunk_review import DiffParser, ReviewState, ReviewSession, WorkingCopy

    parsed = DiffParser().parse(diff_text, suggestion_id="s1")
    state = ReviewState()
    state.add_suggestion("s1", parsed.to_hunks())
    session = ReviewSession(state, WorkingCopy("."))
    session.accept("s1", "s1:src/app.py:0")
"""

from .editing import DiffParser, ParsedDiff, FilePatch, WorkingCopy, PatchApplier
from .review import ReviewState, ReviewSession, FeedbackResult, HunkStatus

__all__ = [
    "DiffParser", "ParsedDiff", "FilePatch", "WorkingCopy", "PatchApplier",
    "ReviewState", "ReviewSession", "FeedbackResult", "HunkStatus",
]
