"""Diff parsing and file-level patch application."""

from .diff_parser import (
    DiffParser, ParsedDiff, FilePatch, LineRange,
    filter_file_patches, files_in_diff, matches_pattern,
)
from .working_copy import WorkingCopy, WorkingCopyError, FileContentProvider
from .patch_applier import PatchApplier, ApplyResult

__all__ = [
    "DiffParser", "ParsedDiff", "FilePatch", "LineRange",
    "filter_file_patches", "files_in_diff", "matches_pattern",
    "WorkingCopy", "WorkingCopyError", "FileContentProvider",
    "PatchApplier", "ApplyResult",
]
