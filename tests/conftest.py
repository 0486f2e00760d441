"""Pytest configuration and fixtures for conflux tests."""

import sys
import tempfile
from pathlib import Path

import pytest

from conflux.core.log import ConsoleSink, FileSink, setup_logger

TWO_SIDES = """\
def greet():
<<<<<<< HEAD
    return "hello"
=======
    return "hi"
>>>>>>> feature
"""

TWO_CONFLICTS = """\
header
<<<<<<< HEAD
local one
=======
incoming one
>>>>>>> feature
middle
<<<<<<< HEAD
local two
=======
incoming two
>>>>>>> feature
footer
"""


@pytest.fixture
def two_sides():
    return TWO_SIDES


@pytest.fixture
def two_conflicts():
    return TWO_CONFLICTS


@pytest.fixture(autouse=True, scope="session")
def configure_logging():
    """Configure logging for console-only output during tests."""
    test_log_root = Path(tempfile.gettempdir()) / "conflux-tests"
    setup_logger(
        log_root=test_log_root,
        session_name="test",
        console=ConsoleSink(level="debug"),
        file=FileSink(enabled=False),
    )


@pytest.fixture
def restore_logger(tmp_path):
    """Put the console-only test logger back after the test."""
    yield
    setup_logger(
        log_root=tmp_path,
        session_name="test",
        console=ConsoleSink(level="debug"),
        file=FileSink(enabled=False),
    )


@pytest.fixture
def make_state(tmp_path, monkeypatch):
    """Build State the way the CLI does, isolated from the user's setup.

    sys.argv is replaced while the State is built so pytest's own
    arguments never reach the CLI parser. The working directory,
    user config file and log root all point into tmp_path.
    """
    from conflux.core import yaml_settings
    from conflux.core.config import State

    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(
        yaml_settings, "user_config_file",
        lambda: tmp_path / "no-user-config.yaml",
    )
    monkeypatch.setenv("CONFLUX_CONFIG__LOG_ROOT", str(tmp_path / "logs"))

    def make(*args: str, **kwargs):
        old_argv = sys.argv
        sys.argv = ["conflux", *args]
        try:
            return State(**kwargs)
        finally:
            sys.argv = old_argv
            setup_logger(
                log_root=tmp_path / "logs",
                session_name="test",
                console=ConsoleSink(level="debug"),
                file=FileSink(enabled=False),
            )

    return make


@pytest.fixture
def state(make_state):
    return make_state()


@pytest.fixture
def write_conflicts(tmp_path):
    """Write conflicted files and load them in the given order."""
    from conflux.conflict.model import ConflictFile

    def write(**files: str):
        loaded = []
        for name, text in files.items():
            path = tmp_path / name
            path.write_text(text, encoding="utf-8")
            loaded.append(ConflictFile.load(path, name))
        return loaded

    return write


class ScriptedView:
    """View that records what a UI context was asked to show."""

    def __init__(self):
        self.shown = []
        self.help_shown = 0
        self.prompts = []
        self.scrolled = []
        self.layouts = []

    def show_conflict(self, conflict, position, total):
        self.shown.append((conflict.identity, position, total))

    def show_key_help(self, keys):
        self.help_shown += 1

    def show_prompt(self, prompt, misses):
        self.prompts.append((prompt, misses))

    def scroll_panes(self, delta):
        self.scrolled.append(delta)

    def set_pane_layout(self, orientation):
        self.layouts.append(orientation)


class ScriptedInterfaces:
    """Stands in for the textual app: each UI context replays one script.

    A script is a list of input lines, or a callable taking the
    Presenter for checks made while the context is alive. A context
    whose script runs out ends with Quit.
    """

    def __init__(self, *scripts):
        self.scripts = list(scripts)
        self.views = []
        self.outcomes = []
        self.live_seen = []

    async def __call__(self, session, config):
        from conflux.ui.presenter import Presenter
        from conflux.workflow.outcome import Quit, ends_interface

        self.live_seen.append(session.live_interfaces)
        view = ScriptedView()
        self.views.append(view)
        presenter = Presenter(session, config, view)

        script = self.scripts.pop(0) if self.scripts else []
        outcome = presenter.start()
        if outcome is None:
            outcome = Quit()
            for step in script:
                if callable(step):
                    step(presenter)
                    continue
                result = presenter.handle_input(step + "\n")
                if ends_interface(result):
                    outcome = result
                    break
        self.outcomes.append(outcome)
        return outcome


class FakeEditor:
    """Returns canned edits in order and records what it was given.

    Point session at a SessionState to also record how many UI
    contexts were alive each time the editor ran.
    """

    def __init__(self, *edits):
        self.edits = list(edits)
        self.seen = []
        self.session = None
        self.live_seen = []

    def __call__(self, conflict, config):
        self.seen.append(conflict.editable_lines())
        if self.session is not None:
            self.live_seen.append(self.session.live_interfaces)
        edit = self.edits.pop(0)
        if isinstance(edit, Exception):
            raise edit
        if callable(edit):
            return edit(conflict)
        return list(edit)


@pytest.fixture
def make_deps():
    """Session collaborators with scripted UI contexts and editor."""
    from io import StringIO

    from rich.console import Console

    from conflux.workflow.deps import SessionDeps

    def make(files, interfaces=None, editor=None):
        output = StringIO()
        deps = SessionDeps(
            find=lambda root: list(files),
            open_interface=interfaces or ScriptedInterfaces(),
            open_editor=editor or FakeEditor(),
            console=Console(file=output, width=200, color_system=None),
        )
        deps.output = output
        return deps

    return make


@pytest.fixture
def scripted():
    """Factory for scripted UI contexts: scripted(["a"], ["q"])."""
    return ScriptedInterfaces


@pytest.fixture
def fake_editor():
    """Factory for fake editors: fake_editor(["new line"], MarkerError())."""
    return FakeEditor


@pytest.fixture
def view():
    return ScriptedView()


@pytest.fixture
def make_session(write_conflicts, two_conflicts, two_sides):
    """SessionState loaded with three conflicts across two files."""
    from conflux.core.config import SessionState

    def make():
        session = SessionState()
        session.load(write_conflicts(**{
            "a.txt": two_conflicts,
            "b.py": two_sides,
        }))
        return session

    return make
