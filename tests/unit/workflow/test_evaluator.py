"""Tests for the command evaluator and dispatch."""

import pytest

from conflux.conflict.model import Resolution
from conflux.core.config import Config
from conflux.ui.presenter import Presenter
from conflux.workflow.dispatch import CommandDispatch
from conflux.workflow.evaluator import Evaluator
from conflux.workflow.outcome import (
    Applied,
    EditorRequested,
    Fatal,
    Quit,
    UnknownCommand,
    ends_interface,
)


@pytest.fixture
def session(make_session):
    return make_session()


@pytest.fixture
def presenter(session, view):
    presenter = Presenter(session, Config(), view)
    presenter.start()
    return presenter


def evaluate(presenter, text):
    return Evaluator(presenter.config.keys).evaluate(
        presenter, presenter.registry.active(), text
    )


def test_resolution_keys_resolve_and_advance(presenter, session):
    first = session.registry.active()

    assert evaluate(presenter, "d") == Applied()

    assert first.resolution is Resolution.INCOMING
    assert session.registry.cursor == 1


def test_several_commands_in_one_line(presenter, session):
    assert evaluate(presenter, "ab") == Applied()

    assert session.registry.at(0).resolution is Resolution.LOCAL
    assert session.registry.at(1).resolution is Resolution.BOTH
    assert session.registry.cursor == 2


def test_resolving_the_last_conflict_quits(presenter):
    assert evaluate(presenter, "aad") == Quit(reason="resolved")


def test_unknown_key_stops_evaluation(presenter, session):
    assert evaluate(presenter, "axa") == UnknownCommand("axa")

    assert session.registry.at(0).resolution is Resolution.LOCAL
    assert not session.registry.at(1).resolved


def test_edit_and_quit(presenter):
    assert evaluate(presenter, "e") == EditorRequested()
    assert evaluate(presenter, "q") == Quit()
    assert ends_interface(EditorRequested())
    assert not ends_interface(UnknownCommand())


def test_blank_input_is_applied(presenter, session):
    assert evaluate(presenter, "   ") == Applied()
    assert session.registry.cursor == 0


def test_navigation_wraps(presenter, session):
    evaluate(presenter, "p")
    assert session.registry.cursor == 2

    evaluate(presenter, "nn")
    assert session.registry.cursor == 1


def test_peek_scroll_toggle_and_help(presenter, session, view):
    evaluate(presenter, "wwsjkv")

    conflict = session.registry.active()
    assert (conflict.top_peek, conflict.bottom_peek) == (2, 1)
    assert view.scrolled == [1, -1]
    assert session.orientation == "vertical"
    assert view.layouts[-1] == "vertical"

    assert view.help_shown == 0
    evaluate(presenter, "?")
    evaluate(presenter, "h")
    assert view.help_shown == 2


def test_dispatch_resets_counter_on_applied(presenter, session):
    dispatch = CommandDispatch(Evaluator(presenter.config.keys), session.tracker)
    dispatch.evaluate(presenter, session.registry.active(), "x")
    dispatch.evaluate(presenter, session.registry.active(), "x")

    assert session.tracker.count == 2
    assert dispatch.evaluate(
        presenter, session.registry.active(), "n"
    ) == Applied()
    assert session.tracker.count == 0


def test_fourth_miss_forces_fallback(presenter, session, view):
    dispatch = CommandDispatch(Evaluator(presenter.config.keys), session.tracker)
    first = session.registry.active()

    outcomes = [
        dispatch.evaluate(presenter, session.registry.active(), "x")
        for _ in range(4)
    ]

    assert outcomes[:3] == [UnknownCommand("x")] * 3
    assert outcomes[3] == UnknownCommand("x", fallback=True)
    assert first.resolution is Resolution.LOCAL
    assert session.registry.cursor == 1
    assert session.tracker.count == 0
    assert session.tracker.fallbacks == 1
    assert view.help_shown == 1


def test_fallback_on_last_conflict_quits(presenter, session):
    dispatch = CommandDispatch(Evaluator(presenter.config.keys), session.tracker)
    presenter.handle_input("aa")

    outcomes = [
        dispatch.evaluate(presenter, session.registry.active(), "?!")
        for _ in range(4)
    ]

    assert outcomes[3] == Quit(reason="resolved")
    assert all(c.resolved for c in session.registry)


def test_evaluator_errors_become_fatal(presenter, session):
    class Broken:
        def evaluate(self, presenter, conflict, text):
            raise OSError("disk on fire")

    dispatch = CommandDispatch(Broken(), session.tracker)
    outcome = dispatch.evaluate(presenter, session.registry.active(), "a")

    assert isinstance(outcome, Fatal)
    assert isinstance(outcome.error, OSError)
    assert session.tracker.count == 0
