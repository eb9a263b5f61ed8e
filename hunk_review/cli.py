"""
`hunkreview` CLI — inspect, apply and review unified-diff hunks.

Commands
--------
hunkreview hunks    DIFF                               -- list hunk ids and headers
hunkreview apply    DIFF --hunk ID [--applied ID ...]  -- apply one hunk to the working copy
hunkreview revert   DIFF --hunk ID [--applied ID ...]  -- undo one applied hunk
hunkreview classify DIFF --hunk ID                     -- redundancy verdict
hunkreview diff     OLD NEW [-U N]                     -- synthesize a unified diff
hunkreview review   DIFF [--landed] [--console] [--auto accept|reject]
hunkreview stats                                       -- feedback log statistics

DIFF may be ``-`` to read from stdin.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional

from .cli_display import print_error, print_rule, setup_logger
from .config import Config
from .diff_display import (
    ACCEPT, QUIT, REJECT, SKIP,
    console_hunk_decision, format_colored_diff, format_hunk, textual_hunk_decision,
)
from .editing import DiffParser, ParsedDiff, PatchApplier, WorkingCopy, WorkingCopyError
from .engine import (
    Hunk, adjust_header_new_start, classify, compute_offset,
    format_header, rebase_onto_working_copy, reverse_hunk, synthesize,
)
from .review import ReviewSession, ReviewState, read_feedback_stats

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return f.read()


def _parse(args: argparse.Namespace) -> ParsedDiff:
    parsed = DiffParser().parse(
        _read_text(args.diff),
        suggestion_id=args.suggestion,
        default_path=args.file or "",
    )
    for error in parsed.parse_errors:
        print_error(error)
    return parsed


def _find_hunk(parsed: ParsedDiff, ref: str) -> Optional[Hunk]:
    """Look a hunk up by full id, or by its position in the diff."""
    hunks = parsed.to_hunks()
    for hunk in hunks:
        if hunk.id == ref:
            return hunk
    if ref.isdigit() and int(ref) < len(hunks):
        return hunks[int(ref)]
    print_error(f"No hunk {ref!r} in diff")
    return None


def _positioned(parsed: ParsedDiff, hunk: Hunk, applied: list[str]) -> int:
    file_hunks = [h for h in parsed.to_hunks() if h.file == hunk.file]
    return compute_offset(file_hunks, frozenset(applied), hunk.id)


def _print_change(path: str, old: list[str], new: list[str], color: bool) -> None:
    text = synthesize(old, new, fromfile=f"a/{path}", tofile=f"b/{path}")
    print(format_colored_diff(text) if color else text, end="")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _cmd_hunks(args: argparse.Namespace, cfg: Config) -> int:
    parsed = _parse(args)
    for hunk in parsed.to_hunks():
        print(f"{hunk.id}\t{format_header(hunk.header)}\tdrift={hunk.drift:+d}")
    return EXIT_OK if parsed.parse_successful else EXIT_FAILURE


def _cmd_apply(args: argparse.Namespace, cfg: Config) -> int:
    parsed = _parse(args)
    hunk = _find_hunk(parsed, args.hunk)
    if hunk is None:
        return EXIT_FAILURE

    offset = _positioned(parsed, hunk, args.applied)
    rebased = rebase_onto_working_copy(hunk, offset)
    return _write_hunk(args, cfg, rebased)


def _cmd_revert(args: argparse.Namespace, cfg: Config) -> int:
    parsed = _parse(args)
    hunk = _find_hunk(parsed, args.hunk)
    if hunk is None:
        return EXIT_FAILURE

    offset = _positioned(parsed, hunk, args.applied)
    reverse = reverse_hunk(adjust_header_new_start(hunk, offset))
    return _write_hunk(args, cfg, reverse)


def _write_hunk(args: argparse.Namespace, cfg: Config, hunk: Hunk) -> int:
    working_copy = WorkingCopy(args.root)
    applier = PatchApplier(working_copy)
    before = working_copy.read_lines(hunk.file) or []

    if args.dry_run:
        outcome = applier.preview(hunk.file, hunk)
    else:
        outcome = applier.apply_to_file(hunk.file, hunk)

    if not outcome.ok:
        print_error(str(outcome.failure))
        return EXIT_FAILURE

    _print_change(hunk.file, before, outcome.lines, cfg.COLOR)
    return EXIT_OK


def _cmd_classify(args: argparse.Namespace, cfg: Config) -> int:
    parsed = _parse(args)
    hunk = _find_hunk(parsed, args.hunk)
    if hunk is None:
        return EXIT_FAILURE

    lines = WorkingCopy(args.root).read_lines(hunk.file) or []
    print(classify(hunk, lines).value)
    return EXIT_OK


def _cmd_diff(args: argparse.Namespace, cfg: Config) -> int:
    old = _read_text(args.old).splitlines()
    new = _read_text(args.new).splitlines()
    width = args.context if args.context is not None else cfg.CONTEXT_WIDTH
    text = synthesize(old, new, width, fromfile=args.old, tofile=args.new)
    print(format_colored_diff(text) if cfg.COLOR else text, end="")
    return EXIT_OK


def _cmd_review(args: argparse.Namespace, cfg: Config) -> int:
    parsed = _parse(args)
    hunks = parsed.to_hunks()
    if not hunks:
        print("No hunks to review.")
        return EXIT_OK

    landed = args.landed or cfg.LANDED
    state = ReviewState()
    state.add_suggestion(args.suggestion, hunks, landed=landed)
    session = ReviewSession(state, WorkingCopy(args.root), feedback_log=cfg.FEEDBACK_LOG)

    interactive = args.auto is None and not args.console and sys.stdin.isatty()
    failures = 0
    pending = state.pending_hunks(args.suggestion)
    for position, hunk in enumerate(pending, start=1):
        positioned = session.positioned_hunk(args.suggestion, hunk.id)
        if args.auto is not None:
            decision = args.auto
            print(format_hunk(positioned, color=cfg.COLOR))
        elif interactive:
            decision = textual_hunk_decision(positioned, position, len(pending))
        else:
            decision = console_hunk_decision(positioned, position, len(pending), cfg.COLOR)

        if decision == QUIT:
            break
        if decision == SKIP:
            continue

        if decision == ACCEPT:
            result = session.accept(args.suggestion, hunk.id)
        else:
            result = session.reject(args.suggestion, hunk.id)

        if result.success:
            note = f" ({result.redundancy.value})" if result.redundancy else ""
            print(f"  {decision}ed {hunk.id}{note}")
        else:
            failures += 1
            print_error(f"{hunk.id}: {result.error}")

    print_rule("Summary")
    suggestion = state.get_suggestion(args.suggestion)
    print(f"  status: {suggestion.status.value}, "
          f"{state.remaining_count(args.suggestion)} hunk(s) pending")
    return EXIT_FAILURE if failures else EXIT_OK


def _cmd_stats(args: argparse.Namespace, cfg: Config) -> int:
    stats = read_feedback_stats(args.log or cfg.FEEDBACK_LOG)
    print(f"Decisions: {stats['total']}")
    for action, count in stats["actions"].items():
        print(f"  {action:<8} {count:>5}  ({stats['action_rates'][action]:.1f}%)")
    print(f"Applied: {stats['applied_rate']:.1f}%")
    return EXIT_OK


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be 0 or more, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hunkreview",
        description="Review unified-diff hunks one at a time",
    )
    parser.add_argument("--config", default=None,
                        help="Path to .hunk_review.yaml config file")
    parser.add_argument("--log-dir", default=None,
                        help="Directory for log files (default: from config)")
    parser.add_argument("--no-color", action="store_true",
                        help="Disable ANSI colors")
    sub = parser.add_subparsers(dest="command", required=True)

    def diff_command(name: str, help_text: str) -> argparse.ArgumentParser:
        p = sub.add_parser(name, help=help_text)
        p.add_argument("diff", help="Unified diff file, or - for stdin")
        p.add_argument("--suggestion", default="suggestion",
                       help="Suggestion id used in hunk ids")
        p.add_argument("--file", default=None,
                       help="File path for hunks without a file header")
        p.add_argument("--root", default=".",
                       help="Working copy root (default: current directory)")
        return p

    diff_command("hunks", "List hunks in a diff")

    for name, help_text in (("apply", "Apply one hunk"), ("revert", "Revert one hunk")):
        p = diff_command(name, help_text)
        p.add_argument("--hunk", required=True, help="Hunk id or position")
        p.add_argument("--applied", action="append", default=[],
                       help="Id of a hunk already in the working copy (repeatable)")
        p.add_argument("--dry-run", action="store_true",
                       help="Show the result without writing")

    p = diff_command("classify", "Check whether a hunk is already present")
    p.add_argument("--hunk", required=True, help="Hunk id or position")

    p = diff_command("review", "Review hunks one at a time")
    p.add_argument("--landed", action="store_true",
                   help="The working copy already contains every hunk")
    p.add_argument("--console", action="store_true",
                   help="Use the plain console prompt instead of the viewer")
    p.add_argument("--auto", choices=[ACCEPT, REJECT], default=None,
                   help="Decide every hunk without prompting")

    p = sub.add_parser("diff", help="Synthesize a unified diff")
    p.add_argument("old")
    p.add_argument("new")
    p.add_argument("-U", "--context", type=_non_negative_int, default=None,
                   help="Lines of context (default: from config)")

    p = sub.add_parser("stats", help="Show feedback log statistics")
    p.add_argument("--log", default=None, help="Feedback log path")

    return parser


_COMMANDS = {
    "hunks": _cmd_hunks,
    "apply": _cmd_apply,
    "revert": _cmd_revert,
    "classify": _cmd_classify,
    "diff": _cmd_diff,
    "review": _cmd_review,
    "stats": _cmd_stats,
}


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    cfg = Config.load(args.config)
    if args.no_color:
        cfg.COLOR = False
    setup_logger(args.log_dir or cfg.LOG_DIR)
    logger.debug("[HunkReview] Running %s in %s", args.command, os.getcwd())

    try:
        return _COMMANDS[args.command](args, cfg)
    except (OSError, WorkingCopyError) as exc:
        print_error(str(exc))
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
