"""Tests for the diff synthesizer."""

import pytest

from hunk_review.engine import apply_hunk, parse_header, synthesize, synthesize_hunks
from hunk_review.engine.synthesizer import split_hunk_texts

OLD = [f"line{i}" for i in range(1, 31)]


def _replace(lines, index, text):
    lines = list(lines)
    lines[index] = text
    return lines


class TestSynthesize:
    def test_equal_inputs_give_empty_diff(self):
        assert synthesize(OLD, list(OLD)) == ""
        assert synthesize([], []) == ""

    def test_different_inputs_give_non_empty_diff(self):
        assert synthesize(["a"], ["b"]) != ""

    def test_without_file_names_starts_with_hunk(self):
        text = synthesize(["a", "b"], ["a", "c"])
        assert text.startswith("@@ ")
        assert text.endswith("\n")

    def test_file_names(self):
        text = synthesize(["a"], ["b"], fromfile="a/x.py", tofile="b/x.py")
        lines = text.splitlines()
        assert lines[0] == "--- a/x.py"
        assert lines[1] == "+++ b/x.py"

    def test_context_width(self):
        new = _replace(OLD, 14, "changed")
        for width in (0, 1, 3, 5):
            text = synthesize(OLD, new, width)
            body = text.splitlines()[1:]
            context = [line for line in body if line.startswith(" ")]
            assert len(context) == 2 * width
            header = parse_header(text.splitlines()[0])
            assert header.old_start == 15 - width

    def test_overlapping_context_is_merged(self):
        new = _replace(_replace(OLD, 10, "x"), 13, "y")
        assert len(split_hunk_texts(synthesize(OLD, new, 3))) == 1
        assert len(split_hunk_texts(synthesize(OLD, new, 0))) == 2

    @pytest.mark.parametrize("old,new,expected", [
        (["a", "b", "c"], ["a", "x", "b", "c"], "@@ -2,0 +2 @@\n+x\n"),
        (["a", "b", "c"], ["a", "c"], "@@ -2 +2,0 @@\n-b\n"),
        (["a", "b", "c"], ["a", "b", "c", "d"], "@@ -4,0 +4 @@\n+d\n"),
        (["a"], ["x", "a"], "@@ -0,0 +1 @@\n+x\n"),
    ])
    def test_empty_range_names_following_line(self, old, new, expected):
        assert synthesize(old, new, 0) == expected

    def test_zero_context_hunk_applies(self):
        hunk = synthesize_hunks(["a", "b", "c"], ["a", "b", "c", "d"], 0)[0]
        assert apply_hunk(["a", "b", "c"], hunk).lines == ["a", "b", "c", "d"]

    def test_negative_width(self):
        with pytest.raises(ValueError):
            synthesize(["a"], ["b"], -1)


class TestSynthesizeHunks:
    def test_ids_and_indexes(self):
        new = _replace(_replace(OLD, 2, "x"), 25, "y")
        hunks = synthesize_hunks(OLD, new, 3, suggestion_id="s9", file="src/m.py")
        assert [h.id for h in hunks] == ["s9:src/m.py:0", "s9:src/m.py:1"]
        assert [h.index for h in hunks] == [0, 1]
        assert all(h.file == "src/m.py" for h in hunks)

    def test_new_file(self):
        hunks = synthesize_hunks([], ["a", "b"])
        assert len(hunks) == 1
        assert hunks[0].header.is_new_file
        assert [c.text for c in hunks[0].changes] == ["a", "b"]

    def test_equal_inputs_give_no_hunks(self):
        assert synthesize_hunks(OLD, OLD) == []
