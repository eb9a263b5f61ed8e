"""
Review state — which hunks of which suggestion are pending, accepted,
rejected or modified, and which of them are currently in the working copy.

The engine never reads this store directly; callers take an
:meth:`ReviewState.applied_ids` snapshot and pass it in.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from ..engine import Hunk

logger = logging.getLogger(__name__)


class ReviewStateError(KeyError):
    """Unknown suggestion or hunk id."""


class HunkStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    MODIFIED = "modified"


class SuggestionStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    COMPLETE = "complete"
    DISCARDED = "discarded"


@dataclass
class HunkState:
    status: HunkStatus = HunkStatus.PENDING
    applied: bool = False
    modified: Optional[Hunk] = None
    comment: str = ""
    reviewed_at: Optional[float] = None

    @property
    def reviewed(self) -> bool:
        return self.status is not HunkStatus.PENDING


@dataclass
class Suggestion:
    """A batch of hunks proposed together for review."""
    id: str
    description: str
    hunks: list[Hunk]
    landed: bool = False
    status: SuggestionStatus = SuggestionStatus.PENDING
    created_at: float = field(default_factory=time.time)
    hunk_states: dict[str, HunkState] = field(default_factory=dict)

    @property
    def files(self) -> list[str]:
        return list(dict.fromkeys(h.file for h in self.hunks))

    @property
    def pending_hunks(self) -> list[Hunk]:
        return [h for h in self.hunks if not self.hunk_states[h.id].reviewed]


@dataclass(frozen=True)
class SuggestionSummary:
    id: str
    description: str
    files: list[str]
    hunk_count: int
    pending_count: int
    status: SuggestionStatus


class ReviewState:
    """Thread-safe in-memory review store.

    Reads hand out copies, so a caller can hold on to a result while other
    threads keep reviewing.
    """

    def __init__(self) -> None:
        self._suggestions: dict[str, Suggestion] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Suggestions
    # ------------------------------------------------------------------

    def add_suggestion(
        self,
        suggestion_id: str,
        hunks: Iterable[Hunk],
        description: str = "",
        landed: bool = False,
    ) -> Suggestion:
        """Register a suggestion.

        With ``landed=True`` the agent has already written every hunk to
        the working copy, so all hunks start out applied.
        """
        hunks = list(hunks)
        suggestion = Suggestion(
            id=suggestion_id,
            description=description,
            hunks=hunks,
            landed=landed,
            hunk_states={h.id: HunkState(applied=landed) for h in hunks},
        )
        with self._lock:
            self._suggestions[suggestion_id] = suggestion
        logger.info(
            "[HunkReview] Suggestion %s registered with %d hunk(s) in %d file(s)",
            suggestion_id, len(hunks), len(suggestion.files),
        )
        return self._snapshot(suggestion)

    def get_suggestion(self, suggestion_id: str) -> Suggestion:
        with self._lock:
            return self._snapshot(self._require(suggestion_id))

    def discard(self, suggestion_id: str) -> None:
        with self._lock:
            self._require(suggestion_id).status = SuggestionStatus.DISCARDED

    def remove(self, suggestion_id: str) -> None:
        with self._lock:
            self._require(suggestion_id)
            del self._suggestions[suggestion_id]

    def list_suggestions(self) -> list[SuggestionSummary]:
        """Suggestions that still have pending hunks, newest first."""
        with self._lock:
            suggestions = sorted(
                self._suggestions.values(),
                key=lambda s: s.created_at,
                reverse=True,
            )
            return [
                SuggestionSummary(
                    id=s.id,
                    description=s.description,
                    files=s.files,
                    hunk_count=len(s.hunks),
                    pending_count=len(s.pending_hunks),
                    status=s.status,
                )
                for s in suggestions
                if s.pending_hunks and s.status is not SuggestionStatus.DISCARDED
            ]

    # ------------------------------------------------------------------
    # Hunks
    # ------------------------------------------------------------------

    def get_hunk(self, suggestion_id: str, hunk_id: str) -> Hunk:
        with self._lock:
            suggestion = self._require(suggestion_id)
            for hunk in suggestion.hunks:
                if hunk.id == hunk_id:
                    return hunk
        raise ReviewStateError(f"Unknown hunk: {hunk_id}")

    def hunk_state(self, suggestion_id: str, hunk_id: str) -> HunkState:
        with self._lock:
            return dataclasses.replace(self._require_state(suggestion_id, hunk_id))

    def mark(
        self,
        suggestion_id: str,
        hunk_id: str,
        status: HunkStatus,
        applied: bool,
        modified: Optional[Hunk] = None,
        comment: str = "",
    ) -> HunkState:
        """Record a review decision and whether the hunk is now applied."""
        with self._lock:
            suggestion = self._require(suggestion_id)
            state = self._require_state(suggestion_id, hunk_id)
            state.status = status
            state.applied = applied
            state.modified = modified
            state.comment = comment
            state.reviewed_at = None if status is HunkStatus.PENDING else time.time()
            self._refresh_status(suggestion)
            return dataclasses.replace(state)

    def pending_hunks(self, suggestion_id: str) -> list[Hunk]:
        with self._lock:
            return self._require(suggestion_id).pending_hunks

    def remaining_count(self, suggestion_id: str) -> int:
        return len(self.pending_hunks(suggestion_id))

    def file_hunks(self, suggestion_id: str, file: str) -> list[Hunk]:
        with self._lock:
            return [h for h in self._require(suggestion_id).hunks if h.file == file]

    def effective_hunks(self, suggestion_id: str, file: str) -> list[Hunk]:
        """File hunks with user-modified versions in place of the originals.

        A modified hunk keeps the id, index and old range of the hunk it
        replaces, so it drifts the rest of the file by its own counts.
        """
        with self._lock:
            suggestion = self._require(suggestion_id)
            result = []
            for hunk in suggestion.hunks:
                if hunk.file != file:
                    continue
                state = suggestion.hunk_states[hunk.id]
                result.append(state.modified if state.modified is not None else hunk)
            return result

    def applied_ids(self, suggestion_id: str, file: Optional[str] = None) -> frozenset:
        """Snapshot of the hunk ids currently reflected in the working copy."""
        with self._lock:
            suggestion = self._require(suggestion_id)
            return frozenset(
                h.id for h in suggestion.hunks
                if suggestion.hunk_states[h.id].applied
                and (file is None or h.file == file)
            )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _require(self, suggestion_id: str) -> Suggestion:
        try:
            return self._suggestions[suggestion_id]
        except KeyError:
            raise ReviewStateError(f"Unknown suggestion: {suggestion_id}") from None

    def _require_state(self, suggestion_id: str, hunk_id: str) -> HunkState:
        suggestion = self._require(suggestion_id)
        try:
            return suggestion.hunk_states[hunk_id]
        except KeyError:
            raise ReviewStateError(f"Unknown hunk: {hunk_id}") from None

    @staticmethod
    def _refresh_status(suggestion: Suggestion) -> None:
        if suggestion.status is SuggestionStatus.DISCARDED:
            return
        states = suggestion.hunk_states.values()
        if all(s.reviewed for s in states):
            suggestion.status = SuggestionStatus.COMPLETE
        elif any(s.reviewed for s in states):
            suggestion.status = SuggestionStatus.PARTIAL
        else:
            suggestion.status = SuggestionStatus.PENDING

    @staticmethod
    def _snapshot(suggestion: Suggestion) -> Suggestion:
        return dataclasses.replace(
            suggestion,
            hunks=list(suggestion.hunks),
            hunk_states={
                k: dataclasses.replace(v) for k, v in suggestion.hunk_states.items()
            },
        )
