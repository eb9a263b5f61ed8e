"""Tests for the multi-hunk offset tracker."""

import pytest

from hunk_review.engine import (
    Change, Hunk, HunkHeader, adjust_header_new_start, adjust_pending,
    apply_hunk, compute_offset, format_header, order_hunks,
    rebase_onto_working_copy, reverse_hunk, synthesize_hunks,
)


def _hunk(index: int, old_start: int, old_count: int = 1, new_count: int = 3) -> Hunk:
    changes = [Change.remove(f"old{i}") for i in range(old_count)]
    changes += [Change.add(f"new{i}") for i in range(new_count)]
    return Hunk(
        id=f"s:f.py:{index}",
        file="f.py",
        header=HunkHeader(old_start, old_count, old_start, new_count),
        changes=tuple(changes),
        index=index,
    )


class TestComputeOffset:
    def setup_method(self):
        self.a = _hunk(0, 10)
        self.b = _hunk(1, 50)
        self.c = _hunk(2, 100)
        self.hunks = [self.a, self.b, self.c]

    def test_nothing_applied(self):
        assert compute_offset(self.hunks, set(), self.b.id) == 0

    def test_one_earlier_hunk_applied(self):
        assert compute_offset(self.hunks, {self.a.id}, self.b.id) == 2

    def test_cumulative(self):
        applied = {self.a.id, self.b.id}
        assert compute_offset(self.hunks, applied, self.c.id) == 4

    def test_later_hunks_never_contribute(self):
        assert compute_offset(self.hunks, {self.c.id}, self.b.id) == 0
        assert compute_offset(self.hunks, {self.b.id, self.c.id}, self.a.id) == 0

    def test_pending_hunks_never_contribute(self):
        assert compute_offset(self.hunks, {self.b.id}, self.c.id) == 2

    def test_input_order_irrelevant(self):
        applied = {self.a.id, self.b.id}
        shuffled = [self.c, self.a, self.b]
        assert compute_offset(shuffled, applied, self.c.id) == 4

    def test_negative_drift(self):
        shrink = _hunk(0, 5, old_count=4, new_count=1)
        target = _hunk(1, 40)
        assert compute_offset([shrink, target], {shrink.id}, target.id) == -3

    def test_same_start_does_not_contribute(self):
        first = _hunk(0, 20)
        second = _hunk(1, 20)
        applied = {first.id}
        assert compute_offset([second, first], applied, second.id) == 0

    def test_applying_target_does_not_move_it(self):
        assert compute_offset(self.hunks, {self.b.id}, self.b.id) == 0

    def test_unknown_target(self):
        with pytest.raises(ValueError):
            compute_offset(self.hunks, set(), "s:f.py:9")

    def test_monotonic_in_earlier_hunks(self):
        before = compute_offset(self.hunks, set(), self.c.id)
        after = compute_offset(self.hunks, {self.a.id}, self.c.id)
        assert after - before == self.a.drift


class TestOrderHunks:
    def test_ties_broken_by_index(self):
        first = _hunk(0, 20)
        second = _hunk(1, 20)
        early = _hunk(2, 5)
        assert order_hunks([second, early, first]) == [early, first, second]


class TestAdjustHeader:
    def test_new_start_follows_offset(self):
        adjusted = adjust_header_new_start(_hunk(0, 50), 4)
        assert adjusted.header.new_start == 54
        assert adjusted.header.old_start == 50
        assert (adjusted.header.old_count, adjusted.header.new_count) == (1, 3)

    def test_rendered_header(self):
        adjusted = adjust_header_new_start(_hunk(0, 50), 4)
        assert format_header(adjusted.header) == "@@ -50 +54,3 @@"

    def test_original_untouched(self):
        hunk = _hunk(0, 50)
        adjust_header_new_start(hunk, 7)
        assert hunk.header.new_start == 50

    def test_pure_insertion_uses_old_start(self):
        hunk = Hunk(id="s:f:0", file="f", header=HunkHeader(3, 0, 3, 1),
                    changes=(Change.add("x"),))
        assert adjust_header_new_start(hunk, 2).header.new_start == 5

    def test_pure_deletion_uses_old_start(self):
        hunk = Hunk(id="s:f:0", file="f", header=HunkHeader(3, 1, 3, 0),
                    changes=(Change.remove("x"),))
        assert adjust_header_new_start(hunk, 0).header.new_start == 3

    def test_adjust_pending(self):
        hunks = [_hunk(0, 10), _hunk(1, 50)]
        adjusted = adjust_pending(hunks, {hunks[0].id}, hunks[1].id)
        assert adjusted.header.new_start == 52


class TestOutOfOrderReview:
    OLD = [f"line{i}" for i in range(1, 21)]
    NEW = (
        ["line1", "added-a1", "added-a2"]
        + [f"line{i}" for i in range(2, 12)]
        + ["changed12"]
        + [f"line{i}" for i in range(13, 21)]
    )

    def _hunks(self):
        hunks = synthesize_hunks(self.OLD, self.NEW, 1, suggestion_id="s", file="f")
        assert len(hunks) == 2
        return hunks

    def test_second_hunk_first(self):
        first, second = self._hunks()
        lines = self.OLD
        applied = set()

        for hunk in (second, first):
            offset = compute_offset([first, second], applied, hunk.id)
            lines = apply_hunk(lines, rebase_onto_working_copy(hunk, offset)).raise_for_failure()
            applied.add(hunk.id)

        assert lines == self.NEW

    def test_first_hunk_first(self):
        first, second = self._hunks()
        lines = apply_hunk(self.OLD, first).raise_for_failure()
        offset = compute_offset([first, second], {first.id}, second.id)
        assert offset == 2
        lines = apply_hunk(lines, rebase_onto_working_copy(second, offset)).raise_for_failure()
        assert lines == self.NEW

    def test_revert_after_earlier_hunk_applied(self):
        first, second = self._hunks()
        lines = self.NEW
        offset = compute_offset([first, second], {first.id, second.id}, second.id)
        reverse = reverse_hunk(adjust_header_new_start(second, offset))
        lines = apply_hunk(lines, reverse).raise_for_failure()
        assert "changed12" not in lines
        assert "line12" in lines
        assert lines[1:3] == ["added-a1", "added-a2"]
