"""Presentation logic shared by every UI context."""

from __future__ import annotations

from typing import Protocol

from conflux.conflict.model import Conflict
from conflux.core.config import Config, SessionState
from conflux.core.keys import KeyBinding
from conflux.core.log import logger
from conflux.workflow.dispatch import CommandDispatch
from conflux.workflow.evaluator import Evaluator
from conflux.workflow.outcome import Outcome, Quit, ends_interface


class View(Protocol):
    """What a UI context must be able to draw."""

    def show_conflict(
        self, conflict: Conflict, position: int, total: int
    ) -> None:
        ...

    def show_key_help(self, keys: KeyBinding) -> None:
        ...

    def show_prompt(self, prompt: str, misses: int) -> None:
        ...

    def scroll_panes(self, delta: int) -> None:
        ...

    def set_pane_layout(self, orientation: str) -> None:
        ...


class Presenter:
    """Decides what the active UI context shows.

    A new Presenter is made for every UI context, but all of its state
    lives in the SessionState it is given, so nothing is lost when the
    context is torn down for an editor handoff.
    """

    def __init__(self, session: SessionState, config: Config, view: View):
        self.session = session
        self.config = config
        self.view = view
        self.dispatch = CommandDispatch(Evaluator(config.keys), session.tracker)

    @property
    def registry(self):
        return self.session.registry

    def start(self) -> Outcome | None:
        """Show the active conflict when the UI context comes up.

        An already resolved active conflict (typically just edited)
        gives way to the next unresolved one. A fallback left pending by
        a rejected edit is applied to the active conflict first.

        Returns:
            Quit if nothing is left to resolve, else None
        """
        self.view.set_pane_layout(self.session.orientation)
        active = self.registry.active()
        if self.session.pending_fallback:
            self.session.pending_fallback = False
            if not self.select(active, force_fallback=True):
                return Quit(reason="resolved")
        elif active.resolved:
            if not self.advance():
                return Quit(reason="resolved")
        else:
            self.select(active)
        self.print_prompt()
        return None

    def handle_input(self, text: str) -> Outcome:
        """Dispatch one submitted line."""
        outcome = self.dispatch.evaluate(
            self, self.registry.active(), text.removesuffix("\n")
        )
        if not ends_interface(outcome):
            self.print_prompt()
        return outcome

    def select(self, conflict: Conflict, force_fallback: bool = False) -> bool:
        """Make conflict the one on display.

        With force_fallback an unresolved conflict is resolved with the
        configured fallback first, help is shown, and the next
        unresolved conflict is selected instead. A conflict the user
        already resolved keeps its resolution.

        Returns:
            False if force_fallback left nothing to resolve
        """
        if force_fallback:
            if not conflict.resolved:
                conflict.resolve(self.config.session.fallback)
                logger.warn(
                    "Fallback resolution applied",
                    conflict=conflict.identity,
                    resolution=conflict.resolution.value,
                )
            remaining = self.advance()
            self.show_help()
            return remaining

        self.session.focus(conflict)
        self.view.show_conflict(
            conflict, self.registry.cursor + 1, self.registry.size()
        )
        return True

    def advance(self) -> bool:
        """Select the next unresolved conflict.

        Returns:
            False if every conflict is resolved
        """
        upcoming = self.registry.next_unresolved()
        if upcoming is None:
            return False
        self.select(upcoming)
        return True

    def move(self, step: int) -> None:
        """Select the conflict step places away, wrapping around."""
        index = (self.registry.cursor + step) % self.registry.size()
        self.select(self.registry.at(index))

    def peek(self, conflict: Conflict, above: bool) -> None:
        if above:
            conflict.top_peek += 1
        else:
            conflict.bottom_peek += 1
        self.select(conflict)

    def scroll(self, delta: int) -> None:
        self.view.scroll_panes(delta)

    def toggle_orientation(self) -> None:
        self.session.orientation = (
            "vertical" if self.session.orientation == "horizontal"
            else "horizontal"
        )
        self.view.set_pane_layout(self.session.orientation)

    def show_help(self) -> None:
        self.view.show_key_help(self.config.keys)

    def print_prompt(self) -> None:
        self.view.show_prompt(
            self.config.keys.prompt(), self.session.tracker.count
        )
