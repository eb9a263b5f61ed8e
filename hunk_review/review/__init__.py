"""Review state, feedback logging and the accept/reject/modify workflow."""

from .state import (
    ReviewState, ReviewStateError, Suggestion, SuggestionSummary,
    HunkState, HunkStatus, SuggestionStatus,
)
from .feedback import log_feedback, read_feedback, read_feedback_stats
from .session import ReviewSession, FeedbackResult

__all__ = [
    "ReviewState", "ReviewStateError", "Suggestion", "SuggestionSummary",
    "HunkState", "HunkStatus", "SuggestionStatus",
    "log_feedback", "read_feedback", "read_feedback_stats",
    "ReviewSession", "FeedbackResult",
]
