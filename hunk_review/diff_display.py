"""
Diff display — colored hunk output and the interactive one-hunk-at-a-time
review prompt.

Includes a Textual-based viewer that shows a single hunk and waits for the
reviewer to accept, reject or skip it.
"""

from __future__ import annotations

from .engine import Hunk

ACCEPT = "accept"
REJECT = "reject"
SKIP = "skip"
QUIT = "quit"

_CHOICES = {
    "a": ACCEPT, "accept": ACCEPT,
    "r": REJECT, "reject": REJECT,
    "s": SKIP, "skip": SKIP,
    "q": QUIT, "quit": QUIT,
}


def format_colored_diff(diff_text: str) -> str:
    """Add ANSI colors to a unified diff string.

    Green for additions (+), red for deletions (-), cyan for @@ hunks.
    """
    lines = diff_text.splitlines()
    colored: list[str] = []
    for line in lines:
        if line.startswith("+++") or line.startswith("---"):
            colored.append(f"\033[1m{line}\033[0m")  # bold
        elif line.startswith("@@"):
            colored.append(f"\033[36m{line}\033[0m")  # cyan
        elif line.startswith("+"):
            colored.append(f"\033[32m{line}\033[0m")  # green
        elif line.startswith("-"):
            colored.append(f"\033[31m{line}\033[0m")  # red
        else:
            colored.append(line)
    return "\n".join(colored)


def format_hunk(hunk: Hunk, color: bool = True) -> str:
    """File banner plus hunk text."""
    text = f"{hunk.file}  [{hunk.id}]\n{hunk.render()}"
    return format_colored_diff(text) if color else text


def _format_rich_diff(diff_text: str) -> str:
    """Convert unified diff text to Rich markup for Textual display."""
    markup_lines: list[str] = []
    for line in diff_text.splitlines():
        escaped = line.replace("[", "\\[")
        if line.startswith("@@"):
            markup_lines.append(f"[cyan]{escaped}[/cyan]")
        elif line.startswith("+"):
            markup_lines.append(f"[green]{escaped}[/green]")
        elif line.startswith("-"):
            markup_lines.append(f"[red]{escaped}[/red]")
        else:
            markup_lines.append(escaped)
    return "\n".join(markup_lines)


# ══════════════════════════════════════════════════════════════════
#  Console prompt
# ══════════════════════════════════════════════════════════════════

def console_hunk_decision(hunk: Hunk, position: int, total: int,
                          color: bool = True) -> str:
    """Print one hunk and read a decision from stdin."""
    print(f"\n{'─' * 60}")
    print(f"  Hunk {position}/{total}")
    print(format_hunk(hunk, color=color))
    print("\n  [A]ccept  |  [R]eject  |  [S]kip  |  [Q]uit")

    while True:
        try:
            choice = input("  Your choice: ").strip().lower()
        except (EOFError, KeyboardInterrupt):
            return QUIT
        if choice in _CHOICES:
            return _CHOICES[choice]
        print("  Invalid choice. Use A, R, S or Q.")


# ══════════════════════════════════════════════════════════════════
#  Textual viewer
# ══════════════════════════════════════════════════════════════════

def textual_hunk_decision(hunk: Hunk, position: int, total: int) -> str:
    """Show one hunk in a Textual app and return the reviewer's decision."""
    from textual.app import App, ComposeResult
    from textual.binding import Binding
    from textual.containers import Horizontal, VerticalScroll
    from textual.widgets import Button, Footer, Static

    class HunkReviewApp(App):
        """Single-hunk viewer with accept / reject / skip."""

        CSS = """
        Screen {
            background: $surface;
        }
        #title-bar {
            dock: top;
            height: 3;
            background: #1a1a2e;
            color: #e94560;
            text-align: center;
            padding: 1;
            text-style: bold;
        }
        #diff-scroll {
            height: 1fr;
            margin: 1 2;
            border: round #444;
            padding: 1;
        }
        #action-buttons {
            dock: bottom;
            height: 3;
            align: center middle;
            padding: 0 2;
        }
        #action-buttons Button {
            margin: 0 2;
            min-width: 16;
        }
        """

        BINDINGS = [
            Binding("a", "decide('accept')", "Accept"),
            Binding("r", "decide('reject')", "Reject"),
            Binding("s", "decide('skip')", "Skip"),
            Binding("q", "decide('quit')", "Quit"),
            Binding("escape", "decide('quit')", "Quit"),
        ]

        def __init__(self) -> None:
            super().__init__()
            self.decision = QUIT

        def compose(self) -> ComposeResult:
            yield Static(
                f" ━━  Hunk {position}/{total} — {hunk.file}  ━━ ",
                id="title-bar",
            )
            with VerticalScroll(id="diff-scroll"):
                yield Static(_format_rich_diff(hunk.render()))
            with Horizontal(id="action-buttons"):
                yield Button("✔ Accept", id="accept", variant="success")
                yield Button("✕ Reject", id="reject", variant="error")
                yield Button("→ Skip", id="skip")
            yield Footer()

        def on_button_pressed(self, event: Button.Pressed) -> None:
            self.action_decide(event.button.id)

        def action_decide(self, decision: str) -> None:
            self.decision = decision
            self.exit()

    app = HunkReviewApp()
    app.run()
    return app.decision
