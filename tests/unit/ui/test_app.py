"""Headless tests for the textual UI context."""

import asyncio

from textual.widgets import Input

from conflux.conflict.model import Resolution
from conflux.core.config import Config
from conflux.ui.app import ConflictApp
from conflux.workflow.outcome import EditorRequested, Fatal, Quit


def test_select_local_then_all_resolved(make_session):
    session = make_session()
    app = ConflictApp(session, Config())

    async def drive():
        async with app.run_test() as pilot:
            await pilot.press("a", "enter")
            await pilot.pause()
            assert session.registry.cursor == 1
            assert app.query_one("#prompt", Input).value == ""
            assert app.query_one("#local-pane").border_title == "HEAD (local)"
            await pilot.press("a", "a", "enter")

    asyncio.run(drive())

    assert app.return_value == Quit(reason="resolved")
    assert session.registry.at(0).resolution is Resolution.LOCAL
    assert all(c.resolved for c in session.registry)


def test_edit_request_ends_the_app(make_session):
    session = make_session()
    app = ConflictApp(session, Config())

    async def drive():
        async with app.run_test() as pilot:
            await pilot.press("e", "enter")

    asyncio.run(drive())

    assert app.return_value == EditorRequested()
    assert not session.registry.active().resolved


def test_ctrl_c_quits(make_session):
    session = make_session()
    app = ConflictApp(session, Config())

    async def drive():
        async with app.run_test() as pilot:
            await pilot.press("ctrl+c")

    asyncio.run(drive())

    assert app.return_value == Quit()


def test_exception_in_the_app_comes_back_as_fatal(make_session, monkeypatch):
    session = make_session()

    def exploding(self, orientation):
        raise RuntimeError("layout exploded")

    monkeypatch.setattr(ConflictApp, "set_pane_layout", exploding)
    app = ConflictApp(session, Config())

    outcome = asyncio.run(app.run_interface(headless=True))

    assert isinstance(outcome, Fatal)
    assert str(outcome.error) == "layout exploded"
    assert app.return_code == 1
