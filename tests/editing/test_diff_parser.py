"""Tests for the DiffParser."""

import pytest

from hunk_review.editing import (
    DiffParser, FilePatch, LineRange, ParsedDiff,
    filter_file_patches, files_in_diff, matches_pattern,
)
from hunk_review.engine import ChangeKind


GIT_DIFF = """\
diff --git a/src/auth.py b/src/auth.py
index 3b18e51..a9c2f4d 100644
--- a/src/auth.py
+++ b/src/auth.py
@@ -1,3 +1,4 @@
 import os
+import hmac
 
 def login(user):
@@ -10,2 +11,2 @@ def login(user):
-    return hash(user)
+    return hmac.new(user)
     # done
diff --git a/README.md b/README.md
--- a/README.md
+++ b/README.md
@@ -1 +1 @@
-Old title
+New title
"""

NEW_FILE_DIFF = """\
diff --git a/docs/new.md b/docs/new.md
new file mode 100644
--- /dev/null
+++ b/docs/new.md
@@ -0,0 +1,2 @@
+# New
+text
"""

DELETED_FILE_DIFF = """\
--- a/old.txt
+++ /dev/null
@@ -1,2 +0,0 @@
-one
-two
"""

JJ_DIFF = """\
diff -r 1a2b3c 4d5e6f lib/init.lua
--- lib/init.lua
+++ lib/init.lua
@@ -2 +2 @@
-local x = 1
+local x = 2
"""


class TestParse:
    def test_git_diff(self):
        result = DiffParser().parse(GIT_DIFF, suggestion_id="s1")

        assert result.parse_successful is True
        assert result.files == ["src/auth.py", "README.md"]
        auth = result.file_patches[0]
        assert len(auth.hunks) == 2
        assert auth.hunks[0].id == "s1:src/auth.py:0"
        assert auth.hunks[1].id == "s1:src/auth.py:1"
        assert auth.hunks[1].header.context == "def login(user):"

    def test_blank_context_line_in_body(self):
        result = DiffParser().parse(GIT_DIFF)
        changes = result.file_patches[0].hunks[0].changes
        assert [c.kind for c in changes] == [
            ChangeKind.CONTEXT, ChangeKind.ADD, ChangeKind.CONTEXT, ChangeKind.CONTEXT,
        ]
        assert changes[2].text == ""

    def test_to_hunks_in_parse_order(self):
        hunks = DiffParser().parse(GIT_DIFF, suggestion_id="s").to_hunks()
        assert [h.id for h in hunks] == [
            "s:src/auth.py:0", "s:src/auth.py:1", "s:README.md:0",
        ]

    def test_new_file(self):
        patch = DiffParser().parse(NEW_FILE_DIFF).file_patches[0]
        assert patch.is_new_file
        assert patch.path == "docs/new.md"
        assert patch.hunks[0].header.is_new_file

    def test_deleted_file(self):
        patch = DiffParser().parse(DELETED_FILE_DIFF).file_patches[0]
        assert patch.is_deleted_file
        assert patch.path == "old.txt"
        assert patch.hunks[0].header.new_count == 0

    def test_jj_diff(self):
        result = DiffParser().parse(JJ_DIFF, suggestion_id="c")
        assert result.files == ["lib/init.lua"]
        assert result.to_hunks()[0].id == "c:lib/init.lua:0"

    def test_bare_hunks_use_default_path(self):
        result = DiffParser().parse("@@ -1 +1 @@\n-a\n+b\n", default_path="x.py")
        assert result.files == ["x.py"]
        assert result.to_hunks()[0].file == "x.py"

    def test_no_newline_marker(self):
        diff = "--- a/f\n+++ b/f\n@@ -1 +1 @@\n-a\n\\ No newline at end of file\n+b\n"
        hunk = DiffParser().parse(diff).to_hunks()[0]
        assert [c.text for c in hunk.changes] == ["a", "b"]

    def test_extra_lines_after_declared_counts(self):
        diff = "--- a/f\n+++ b/f\n@@ -1 +1 @@\n-a\n+b\n+c\n"
        hunk = DiffParser().parse(diff).to_hunks()[0]
        assert [c.text for c in hunk.changes] == ["a", "b", "c"]

    def test_malformed_header_reported(self):
        diff = "--- a/f\n+++ b/f\n@@ nonsense @@\n+a\n@@ -1 +1 @@\n-a\n+b\n"
        result = DiffParser().parse(diff)
        assert len(result.parse_errors) == 1
        assert "nonsense" in result.parse_errors[0]
        assert len(result.to_hunks()) == 1

    def test_empty_input(self):
        result = DiffParser().parse("")
        assert result.parse_successful is False
        assert result.file_patches == []

    def test_prose_is_ignored(self):
        result = DiffParser().parse("Here is the change:\n\n" + GIT_DIFF)
        assert result.files == ["src/auth.py", "README.md"]


class TestValidate:
    def test_keeps_applicable_hunks(self):
        parsed = DiffParser().parse(GIT_DIFF)
        contents = {
            "src/auth.py": ["import os", "", "def login(user):"] + [""] * 6
            + ["    return hash(user)", "    # done"],
            "README.md": ["Something else"],
        }
        result = DiffParser().validate(parsed, contents)

        assert result is not None
        assert result.files == ["src/auth.py"]
        assert len(result.to_hunks()) == 2
        assert len(result.parse_errors) == 1

    def test_too_many_invalid(self):
        parsed = DiffParser().parse(GIT_DIFF)
        assert DiffParser().validate(parsed, {}) is None

    def test_new_file_against_missing_content(self):
        parsed = DiffParser().parse(NEW_FILE_DIFF)
        result = DiffParser().validate(parsed, {})
        assert result.parse_successful


class TestFilters:
    def _patches(self):
        return [
            FilePatch("src/a.py", "src/a.py", DiffParser().parse(
                "@@ -1 +1 @@\n-a\n+b\n@@ -20 +20 @@\n-c\n+d\n", default_path="src/a.py",
            ).to_hunks()),
            FilePatch("src/pkg/b.py", "src/pkg/b.py"),
            FilePatch("docs/readme.md", "docs/readme.md"),
        ]

    @pytest.mark.parametrize("path,pattern,expected", [
        ("src/a.py", "src/*.py", True),
        ("src/pkg/b.py", "src/*.py", False),
        ("src/pkg/b.py", "src/**.py", True),
        ("src/a.py", "src/?.py", True),
        ("src/ab.py", "src/?.py", False),
        ("docs/readme.md", "docs/readme.md", True),
    ])
    def test_matches_pattern(self, path, pattern, expected):
        assert matches_pattern(path, [pattern]) is expected

    def test_include(self):
        result = filter_file_patches(self._patches(), include_files=["src/**"])
        assert [p.path for p in result] == ["src/a.py", "src/pkg/b.py"]

    def test_exclude(self):
        result = filter_file_patches(self._patches(), exclude_files=["*.md", "docs/*"])
        assert [p.path for p in result] == ["src/a.py", "src/pkg/b.py"]

    def test_line_ranges(self):
        result = filter_file_patches(
            self._patches(), line_ranges=[LineRange("src/a.py", 15, 25)],
        )
        a = result[0]
        assert [h.header.old_start for h in a.hunks] == [20]
        assert len(result) == 3

    def test_line_ranges_drop_empty_files(self):
        result = filter_file_patches(
            self._patches(), line_ranges=[LineRange("src/a.py", 100, 200)],
        )
        assert "src/a.py" not in [p.path for p in result]


class TestFilesInDiff:
    def test_files(self):
        assert files_in_diff(GIT_DIFF + NEW_FILE_DIFF + DELETED_FILE_DIFF) == [
            "src/auth.py", "README.md", "docs/new.md", "old.txt",
        ]

    def test_parsed_diff_files_empty(self):
        assert ParsedDiff().files == []
