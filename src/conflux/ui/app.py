"""The textual UI context."""

from __future__ import annotations

from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, VerticalScroll
from textual.widgets import Input, Static

from conflux.conflict.model import Conflict
from conflux.core.config import Config, SessionState
from conflux.core.keys import HELP_KEY, KeyBinding
from conflux.ui.presenter import Presenter
from conflux.workflow.outcome import Fatal, Outcome, Quit, ends_interface


class ConflictApp(App[Outcome]):
    """One UI context: panes for both sides of a conflict and a prompt.

    The app exits with the Outcome that ended it (EditorRequested,
    Quit or Fatal). It owns the terminal while it runs and releases it
    on exit, so the session controller can hand the terminal to the
    editor and build a fresh app afterwards.
    """

    TITLE = "conflux"

    CSS = """
    #title {
        height: 1;
        padding: 0 1;
        background: $boost;
    }
    #panes {
        height: 1fr;
        layout: horizontal;
    }
    .pane {
        width: 1fr;
        height: 1fr;
        border: round $primary;
        border-title-align: left;
    }
    #help {
        display: none;
        height: auto;
        padding: 0 1;
        border: round $warning;
    }
    #help.visible {
        display: block;
    }
    #status {
        height: 1;
        padding: 0 1;
        color: $warning;
    }
    """

    BINDINGS = [
        Binding("ctrl+c", "quit_session", "Quit", priority=True, show=False),
    ]

    def __init__(self, session: SessionState, config: Config):
        super().__init__()
        self.presenter = Presenter(session, config, self)
        self.crash: Exception | None = None

    def compose(self) -> ComposeResult:
        yield Static(id="title")
        with Container(id="panes"):
            with VerticalScroll(id="local-pane", classes="pane"):
                yield Static(id="local")
            with VerticalScroll(id="incoming-pane", classes="pane"):
                yield Static(id="incoming")
        yield Static(id="help")
        yield Static(id="status")
        yield Input(id="prompt")

    def on_mount(self) -> None:
        self.query_one("#prompt", Input).focus()
        outcome = self.presenter.start()
        if outcome is not None:
            self.exit(outcome)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        text = event.value
        event.input.value = ""
        outcome = self.presenter.handle_input(text)
        if ends_interface(outcome):
            self.exit(outcome)

    def action_quit_session(self) -> None:
        self.exit(Quit())

    def _handle_exception(self, error: Exception) -> None:
        # textual shuts the app down and returns no result.
        if self.crash is None:
            self.crash = error
        super()._handle_exception(error)

    async def run_interface(self, headless: bool = False) -> Outcome:
        """Run until an outcome ends this UI context.

        An exception escaping the app comes back as Fatal, never as an
        ordinary quit.
        """
        outcome = await self.run_async(headless=headless)
        if self.crash is not None:
            return Fatal(self.crash)
        return outcome or Quit()

    # View

    def show_conflict(
        self, conflict: Conflict, position: int, total: int
    ) -> None:
        name = conflict.file.name if conflict.file else "?"
        self.query_one("#title", Static).update(Text.assemble(
            (f"{name}:{conflict.start}", "bold"),
            f"  conflict {position} of {total}  ",
            (conflict.resolution.value, "italic"),
        ))
        self._fill_pane(
            "local", conflict, conflict.local_lines,
            f"{conflict.local_ref} (local)",
        )
        self._fill_pane(
            "incoming", conflict, conflict.incoming_lines,
            f"{conflict.incoming_ref} (incoming)",
        )
        self.query_one("#help").remove_class("visible")

    def _fill_pane(
        self, side: str, conflict: Conflict, lines: list[str], title: str
    ) -> None:
        before = conflict.context_before()
        after = conflict.context_after()
        code = "\n".join(before + lines + after)
        path = str(conflict.file.path) if conflict.file else ""
        lexer = Syntax.guess_lexer(path, code=code) if path else "text"

        # Context lines stay plain; the conflicting lines are highlighted.
        first = len(before) + 1
        self.query_one(f"#{side}", Static).update(Syntax(
            code,
            lexer,
            highlight_lines=set(range(first, first + len(lines))),
            word_wrap=True,
        ))
        self.query_one(f"#{side}-pane").border_title = title

    def show_key_help(self, keys: KeyBinding) -> None:
        table = Table.grid(padding=(0, 2))
        for key, description in keys.describe():
            table.add_row(Text(key, style="bold"), description)
        table.add_row(Text(HELP_KEY, style="bold"), "Show help")
        help_panel = self.query_one("#help", Static)
        help_panel.update(table)
        help_panel.add_class("visible")

    def show_prompt(self, prompt: str, misses: int) -> None:
        self.query_one("#prompt", Input).placeholder = prompt
        status = (
            f"Unknown command ({misses} in a row), {HELP_KEY} for help"
            if misses else ""
        )
        self.query_one("#status", Static).update(status)

    def scroll_panes(self, delta: int) -> None:
        for pane in self.query(".pane"):
            pane.scroll_relative(y=delta, animate=False)

    def set_pane_layout(self, orientation: str) -> None:
        self.query_one("#panes").styles.layout = orientation
