"""
Review session — applies review decisions to the working copy.

Two working-copy models are supported, chosen per suggestion:

* editor model (``landed=False``): the working copy starts at the original
  content and a hunk is written when it is accepted.
* landed model (``landed=True``): the agent already wrote every hunk, so
  accepting leaves the file alone and rejecting reverts the hunk.

In both models the position of a hunk is recomputed from the hunks that
are actually in the working copy at that moment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..editing.patch_applier import missing_file_failure
from ..editing.working_copy import FileContentProvider
from ..engine import (
    ApplyOutcome, Change, Hunk, HunkHeader, Redundancy,
    adjust_header_new_start, apply_hunk, classify, compute_offset,
    new_side, old_side, parse_hunk, rebase_onto_working_copy, reverse_hunk,
)
from .feedback import log_feedback
from .state import HunkState, HunkStatus, ReviewState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedbackResult:
    success: bool
    applied: bool = False
    reverted: bool = False
    remaining_hunks: int = 0
    redundancy: Optional[Redundancy] = None
    error: str = ""


class ReviewSession:
    """Drive accept / reject / modify / undo for the hunks in *state*."""

    def __init__(
        self,
        state: ReviewState,
        working_copy: FileContentProvider,
        feedback_log: Optional[str] = None,
    ) -> None:
        self.state = state
        self._working_copy = working_copy
        self._feedback_log = feedback_log

    # ------------------------------------------------------------------
    # Positioning
    # ------------------------------------------------------------------

    def effective_hunk(self, suggestion_id: str, hunk_id: str) -> Hunk:
        """The user-modified version of a hunk if there is one."""
        state = self.state.hunk_state(suggestion_id, hunk_id)
        if state.modified is not None:
            return state.modified
        return self.state.get_hunk(suggestion_id, hunk_id)

    def offset_for(self, suggestion_id: str, hunk: Hunk) -> int:
        file_hunks = self.state.effective_hunks(suggestion_id, hunk.file)
        applied = self.state.applied_ids(suggestion_id, hunk.file)
        return compute_offset(file_hunks, applied, hunk.id)

    def positioned_hunk(self, suggestion_id: str, hunk_id: str) -> Hunk:
        """The hunk with ``new_start`` matching the current working copy."""
        hunk = self.effective_hunk(suggestion_id, hunk_id)
        return adjust_header_new_start(hunk, self.offset_for(suggestion_id, hunk))

    def preview(self, suggestion_id: str, hunk_id: str) -> ApplyOutcome:
        """File content as it would look with the hunk applied."""
        hunk = self.effective_hunk(suggestion_id, hunk_id)
        lines = self._working_copy.read_lines(hunk.file)
        if self.state.hunk_state(suggestion_id, hunk_id).applied:
            if lines is None:
                return ApplyOutcome.failed(missing_file_failure(hunk.file))
            return ApplyOutcome.success(lines)
        return self._forward(suggestion_id, hunk, lines)

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    def accept(self, suggestion_id: str, hunk_id: str, comment: str = "") -> FeedbackResult:
        state = self.state.hunk_state(suggestion_id, hunk_id)
        if state.reviewed:
            return self._already_reviewed(suggestion_id, hunk_id, state)

        hunk = self.state.get_hunk(suggestion_id, hunk_id)
        if state.applied:
            return self._record(
                suggestion_id, hunk, "accept", HunkStatus.ACCEPTED,
                applied=True, comment=comment,
            )

        lines = self._working_copy.read_lines(hunk.file)
        verdict = None
        if lines is not None:
            offset = self.offset_for(suggestion_id, hunk)
            verdict = classify(rebase_onto_working_copy(hunk, offset), lines)
            if verdict is Redundancy.IDENTICAL:
                logger.info(
                    "[HunkReview] Hunk %s changes nothing in %s, not applying",
                    hunk_id, hunk.file,
                )
                return self._record(
                    suggestion_id, hunk, "accept", HunkStatus.ACCEPTED,
                    applied=False, comment=comment, redundancy=verdict,
                )
            if verdict is Redundancy.DUPLICATE_ADDITIONS:
                # text match anywhere in the file, so still applied
                logger.info(
                    "[HunkReview] Hunk %s adds lines already found in %s",
                    hunk_id, hunk.file,
                )
            else:
                verdict = None

        outcome = self._forward(suggestion_id, hunk, lines)
        if not outcome.ok:
            return self._failed(suggestion_id, hunk, outcome)

        self._working_copy.write_lines(hunk.file, outcome.lines)
        return self._record(
            suggestion_id, hunk, "accept", HunkStatus.ACCEPTED,
            applied=True, comment=comment, redundancy=verdict,
        )

    def reject(self, suggestion_id: str, hunk_id: str, comment: str = "") -> FeedbackResult:
        state = self.state.hunk_state(suggestion_id, hunk_id)
        if state.reviewed:
            return self._already_reviewed(suggestion_id, hunk_id, state)

        hunk = self.state.get_hunk(suggestion_id, hunk_id)
        reverted = False
        if state.applied:
            lines = self._working_copy.read_lines(hunk.file)
            outcome = self._backward(suggestion_id, hunk, lines)
            if not outcome.ok:
                return self._failed(suggestion_id, hunk, outcome)
            self._working_copy.write_lines(hunk.file, outcome.lines)
            reverted = True

        return self._record(
            suggestion_id, hunk, "reject", HunkStatus.REJECTED,
            applied=False, reverted=reverted, comment=comment,
        )

    def modify(
        self,
        suggestion_id: str,
        hunk_id: str,
        modified_diff: str,
        comment: str = "",
    ) -> FeedbackResult:
        """Replace a hunk with a user-edited version of its text.

        The edited hunk stays anchored where the original was; its counts
        are taken from the edited body.
        """
        original = self.state.get_hunk(suggestion_id, hunk_id)
        edited = parse_hunk(modified_diff, file=original.file)
        return self._modify(suggestion_id, original, edited.changes, comment)

    def modify_lines(
        self,
        suggestion_id: str,
        hunk_id: str,
        new_lines: list[str],
        comment: str = "",
    ) -> FeedbackResult:
        """Replace the region a hunk covers with *new_lines*."""
        original = self.state.get_hunk(suggestion_id, hunk_id)
        changes = [Change.remove(t) for t in old_side(original.changes)]
        changes += [Change.add(t) for t in new_lines]
        return self._modify(suggestion_id, original, changes, comment)

    def undo(self, suggestion_id: str, hunk_id: str) -> FeedbackResult:
        """Return a reviewed hunk to pending, restoring the file to match."""
        state = self.state.hunk_state(suggestion_id, hunk_id)
        hunk = self.state.get_hunk(suggestion_id, hunk_id)
        if not state.reviewed:
            return FeedbackResult(
                success=False,
                applied=state.applied,
                remaining_hunks=self.state.remaining_count(suggestion_id),
                error=f"Hunk {hunk_id} is still pending",
            )

        landed = self.state.get_suggestion(suggestion_id).landed
        lines = self._working_copy.read_lines(hunk.file)
        original_lines = lines

        if state.applied:
            outcome = self._backward(suggestion_id, self.effective_hunk(suggestion_id, hunk_id), lines)
            if not outcome.ok:
                return self._failed(suggestion_id, hunk, outcome)
            lines = outcome.lines

        if landed:
            outcome = self._forward(suggestion_id, hunk, lines)
            if not outcome.ok:
                return self._failed(suggestion_id, hunk, outcome)
            lines = outcome.lines

        if lines is not None and lines != original_lines:
            self._working_copy.write_lines(hunk.file, lines)

        return self._record(
            suggestion_id, hunk, "undo", HunkStatus.PENDING,
            applied=landed, reverted=state.applied and not landed,
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _modify(
        self,
        suggestion_id: str,
        original: Hunk,
        changes: list[Change],
        comment: str,
    ) -> FeedbackResult:
        state = self.state.hunk_state(suggestion_id, original.id)
        if state.reviewed:
            return self._already_reviewed(suggestion_id, original.id, state)

        changes = tuple(changes)
        old_count = len(old_side(changes))
        new_count = len(new_side(changes))
        modified = original.with_changes(changes).with_header(HunkHeader(
            old_start=original.header.old_start,
            old_count=old_count,
            new_start=original.header.new_start,
            new_count=new_count,
            context=original.header.context,
        ))

        lines = self._working_copy.read_lines(original.file)
        reverted = False
        if state.applied:
            outcome = self._backward(suggestion_id, original, lines)
            if not outcome.ok:
                return self._failed(suggestion_id, original, outcome)
            lines = outcome.lines
            reverted = True

        outcome = self._forward(suggestion_id, modified, lines)
        if not outcome.ok:
            return self._failed(suggestion_id, original, outcome)

        self._working_copy.write_lines(original.file, outcome.lines)
        return self._record(
            suggestion_id, original, "modify", HunkStatus.MODIFIED,
            applied=True, reverted=reverted, modified=modified, comment=comment,
        )

    def _forward(
        self,
        suggestion_id: str,
        hunk: Hunk,
        lines: Optional[list[str]],
    ) -> ApplyOutcome:
        if lines is None:
            if not hunk.header.is_new_file:
                return ApplyOutcome.failed(missing_file_failure(hunk.file))
            lines = []
        offset = self.offset_for(suggestion_id, hunk)
        return apply_hunk(lines, rebase_onto_working_copy(hunk, offset))

    def _backward(
        self,
        suggestion_id: str,
        hunk: Hunk,
        lines: Optional[list[str]],
    ) -> ApplyOutcome:
        if lines is None:
            return ApplyOutcome.failed(missing_file_failure(hunk.file))
        offset = self.offset_for(suggestion_id, hunk)
        return apply_hunk(lines, reverse_hunk(adjust_header_new_start(hunk, offset)))

    def _record(
        self,
        suggestion_id: str,
        hunk: Hunk,
        action: str,
        status: HunkStatus,
        applied: bool,
        reverted: bool = False,
        modified: Optional[Hunk] = None,
        comment: str = "",
        redundancy: Optional[Redundancy] = None,
    ) -> FeedbackResult:
        self.state.mark(
            suggestion_id, hunk.id, status,
            applied=applied, modified=modified, comment=comment,
        )
        if self._feedback_log:
            log_feedback({
                "suggestion_id": suggestion_id,
                "hunk_id": hunk.id,
                "action": action,
                "file": hunk.file,
                "original_diff": hunk.render(),
                "modified_diff": modified.render() if modified is not None else None,
                "applied": applied or reverted,
                "comment": comment,
            }, self._feedback_log)

        remaining = self.state.remaining_count(suggestion_id)
        logger.info(
            "[HunkReview] %s %s (%d pending)", action, hunk.id, remaining,
        )
        return FeedbackResult(
            success=True,
            applied=applied,
            reverted=reverted,
            remaining_hunks=remaining,
            redundancy=redundancy,
        )

    def _failed(self, suggestion_id: str, hunk: Hunk, outcome: ApplyOutcome) -> FeedbackResult:
        logger.warning(
            "[HunkReview] Hunk %s no longer applies to %s: %s",
            hunk.id, hunk.file, outcome.failure,
        )
        return FeedbackResult(
            success=False,
            applied=self.state.hunk_state(suggestion_id, hunk.id).applied,
            remaining_hunks=self.state.remaining_count(suggestion_id),
            error=str(outcome.failure),
        )

    def _already_reviewed(
        self,
        suggestion_id: str,
        hunk_id: str,
        state: HunkState,
    ) -> FeedbackResult:
        return FeedbackResult(
            success=False,
            applied=state.applied,
            remaining_hunks=self.state.remaining_count(suggestion_id),
            error=f"Hunk {hunk_id} was already {state.status.value}",
        )
