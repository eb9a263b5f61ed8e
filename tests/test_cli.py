"""Tests for the hunkreview command line."""

import json

import pytest

from hunk_review.cli import main

OLD = "a\nb\nc\n"
DIFF = """\
--- a/f.txt
+++ b/f.txt
@@ -1,2 +1,3 @@
 a
+x
 b
"""


@pytest.fixture
def project(tmp_path, monkeypatch):
    for key in ("HUNK_REVIEW_LANDED", "HUNK_REVIEW_FEEDBACK_LOG", "HUNK_REVIEW_COLOR"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("HUNK_REVIEW_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.chdir(tmp_path)
    (tmp_path / "f.txt").write_text(OLD, encoding="utf-8")
    (tmp_path / "change.diff").write_text(DIFF, encoding="utf-8")
    return tmp_path


def _run(*args):
    return main(["--no-color", *args])


class TestHunks:
    def test_lists_hunks(self, project, capsys):
        assert _run("hunks", "change.diff", "--suggestion", "s1") == 0
        out = capsys.readouterr().out
        assert "s1:f.txt:0\t@@ -1,2 +1,3 @@\tdrift=+1" in out

    def test_empty_diff_fails(self, project, capsys):
        (project / "empty.diff").write_text("", encoding="utf-8")
        assert _run("hunks", "empty.diff") == 1


class TestApply:
    def test_apply_by_position(self, project, capsys):
        assert _run("apply", "change.diff", "--hunk", "0") == 0
        assert (project / "f.txt").read_text(encoding="utf-8") == "a\nx\nb\nc\n"
        assert "+x" in capsys.readouterr().out

    def test_apply_by_id(self, project):
        assert _run("apply", "change.diff", "--hunk", "suggestion:f.txt:0") == 0
        assert (project / "f.txt").read_text(encoding="utf-8") == "a\nx\nb\nc\n"

    def test_dry_run(self, project):
        assert _run("apply", "change.diff", "--hunk", "0", "--dry-run") == 0
        assert (project / "f.txt").read_text(encoding="utf-8") == OLD

    def test_unknown_hunk(self, project, capsys):
        assert _run("apply", "change.diff", "--hunk", "7") == 1
        assert "No hunk" in capsys.readouterr().err

    def test_mismatch(self, project, capsys):
        (project / "f.txt").write_text("q\n", encoding="utf-8")
        assert _run("apply", "change.diff", "--hunk", "0") == 1
        assert "line 1" in capsys.readouterr().err


class TestRevert:
    def test_revert(self, project):
        (project / "f.txt").write_text("a\nx\nb\nc\n", encoding="utf-8")
        assert _run("revert", "change.diff", "--hunk", "0") == 0
        assert (project / "f.txt").read_text(encoding="utf-8") == OLD


class TestClassify:
    def test_not_redundant(self, project, capsys):
        assert _run("classify", "change.diff", "--hunk", "0") == 0
        assert capsys.readouterr().out.strip() == "not_redundant"

    def test_duplicate(self, project, capsys):
        (project / "f.txt").write_text("a\nb\nx\n", encoding="utf-8")
        _run("classify", "change.diff", "--hunk", "0")
        assert capsys.readouterr().out.strip() == "duplicate_additions"


class TestDiff:
    def test_diff(self, project, capsys):
        (project / "g.txt").write_text("a\nB\nc\n", encoding="utf-8")
        assert _run("diff", "f.txt", "g.txt", "-U", "0") == 0
        out = capsys.readouterr().out
        assert "--- f.txt" in out
        assert "@@ -2 +2 @@" in out
        assert "-b" in out
        assert "+B" in out

    def test_identical_files(self, project, capsys):
        assert _run("diff", "f.txt", "f.txt") == 0
        assert capsys.readouterr().out == ""

    def test_negative_context_rejected(self, project, capsys):
        with pytest.raises(SystemExit) as exc_info:
            _run("diff", "f.txt", "f.txt", "-U", "-1")
        assert exc_info.value.code == 2
        assert "must be 0 or more" in capsys.readouterr().err


class TestReview:
    def test_auto_accept(self, project, capsys):
        assert _run("review", "change.diff", "--auto", "accept") == 0
        assert (project / "f.txt").read_text(encoding="utf-8") == "a\nx\nb\nc\n"
        out = capsys.readouterr().out
        assert "accepted suggestion:f.txt:0" in out
        assert "status: complete" in out

    def test_landed_auto_reject(self, project):
        (project / "f.txt").write_text("a\nx\nb\nc\n", encoding="utf-8")
        assert _run("review", "change.diff", "--landed", "--auto", "reject") == 0
        assert (project / "f.txt").read_text(encoding="utf-8") == OLD

    def test_console_prompt(self, project, monkeypatch):
        answers = iter(["huh", "a"])
        monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))
        assert _run("review", "change.diff", "--console") == 0
        assert (project / "f.txt").read_text(encoding="utf-8") == "a\nx\nb\nc\n"

    def test_console_quit(self, project, monkeypatch):
        monkeypatch.setattr("builtins.input", lambda prompt="": "q")
        assert _run("review", "change.diff", "--console") == 0
        assert (project / "f.txt").read_text(encoding="utf-8") == OLD

    def test_feedback_written(self, project):
        _run("review", "change.diff", "--auto", "reject")
        log = project / ".hunk_review" / "feedback.jsonl"
        entry = json.loads(log.read_text(encoding="utf-8").splitlines()[0])
        assert entry["action"] == "reject"

    def test_failure_exit_code(self, project):
        (project / "f.txt").write_text("q\n", encoding="utf-8")
        assert _run("review", "change.diff", "--auto", "accept") == 1


class TestStats:
    def test_stats(self, project, capsys):
        _run("review", "change.diff", "--auto", "accept")
        capsys.readouterr()
        assert _run("stats") == 0
        out = capsys.readouterr().out
        assert "Decisions: 1" in out
        assert "accept" in out


class TestUsage:
    def test_missing_command(self, project):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2
